"""Candidate activity catalog.

Supplies the plan generator with events for a date window, ordered by start
time the same way the events table is queried.
"""
from __future__ import annotations

import json
import os
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from pulse import settings
from pulse.schemas import CandidateActivity, as_utc

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("PULSE_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

SAMPLE_EVENTS_PATH = Path(__file__).resolve().parent / "data" / "denver_events.json"


class CatalogError(RuntimeError):
    """Raised when an event feed cannot be read or decoded."""


class EventCatalog:
    def __init__(self, events: Iterable[CandidateActivity] = ()):
        self._events: List[CandidateActivity] = list(events)

    def __len__(self) -> int:
        return len(self._events)

    def in_window(self, start: datetime, end: datetime) -> List[CandidateActivity]:
        """Events starting inside ``[start, end]``, earliest first."""
        start, end = as_utc(start), as_utc(end)
        hits = [event for event in self._events if start <= event.start_time <= end]
        return sorted(hits, key=lambda e: e.start_time)

    def by_ids(self, ids: Iterable[str]) -> Dict[str, CandidateActivity]:
        wanted = set(ids)
        return {event.id: event for event in self._events if event.id in wanted}


def parse_events(payload: Any) -> List[CandidateActivity]:
    """Accept a bare list or ``{"events": [...]}``; skip records that fail validation."""
    if isinstance(payload, dict):
        payload = payload.get("events", [])
    if not isinstance(payload, list):
        raise CatalogError("Event feed must be a list or an object with an 'events' list")

    events: List[CandidateActivity] = []
    for idx, record in enumerate(payload):
        try:
            events.append(CandidateActivity.model_validate(record))
        except ValidationError as exc:
            logger.warning("Skipping event #%d in feed: %s", idx, exc.errors()[0].get("msg"))
    return events


def load_events(path: str | Path) -> List[CandidateActivity]:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read event file {path}: {exc}") from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Event file {path} is not valid JSON: {exc}") from exc
    events = parse_events(payload)
    logger.info("Loaded %d event(s) from %s", len(events), path)
    return events


async def fetch_remote_events(url: str, *, timeout: float = 8.0) -> List[CandidateActivity]:
    """Download an event feed in the same JSON shape as :func:`load_events`."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            payload = resp.json()
    except httpx.HTTPError as exc:
        raise CatalogError(f"Failed to fetch events from {url}: {exc}") from exc
    except ValueError as exc:
        raise CatalogError(f"Event feed at {url} is not valid JSON: {exc}") from exc
    events = parse_events(payload)
    logger.info("Fetched %d event(s) from %s", len(events), url)
    return events


def default_catalog(events_path: Optional[str] = None) -> EventCatalog:
    """Catalog from ``events_path`` (or ``PULSE_EVENTS_PATH``), else the bundled Denver sample."""
    path = events_path or settings.events_path()
    return EventCatalog(load_events(path or SAMPLE_EVENTS_PATH))
