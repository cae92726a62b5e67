from __future__ import annotations

import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from pulse import settings
from pulse.catalog import CatalogError, EventCatalog, default_catalog, fetch_remote_events
from pulse.planner import build_plan_preview, generate_plans
from pulse.schemas import GeneratePlansRequest, GeneratePlansResponse, PlanPreviewRequest

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("PULSE_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

NO_EVENTS_MESSAGE = "No events found in the selected date range"
NO_PLANS_MESSAGE = "Not enough events to build a plan for this date range"


@asynccontextmanager
async def lifespan(app: FastAPI):
    url = settings.events_url()
    if url:
        try:
            app.state.catalog = EventCatalog(await fetch_remote_events(url))
        except CatalogError as exc:
            logger.warning("Keeping local event catalog: %s", exc)
    yield


app = FastAPI(title="Pulse Plans API", lifespan=lifespan)
app.state.catalog = default_catalog(settings.events_path())

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _catalog() -> EventCatalog:
    return app.state.catalog


@app.post("/api/plans/generate")
async def api_generate_plans(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Suggest up to three itineraries for a date window."""
    try:
        req = GeneratePlansRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc

    candidates = _catalog().in_window(req.date_start, req.date_end)
    if not candidates:
        logger.info("No events between %s and %s", req.date_start, req.date_end)
        return GeneratePlansResponse(message=NO_EVENTS_MESSAGE).model_dump(mode="json", by_alias=True)

    plans = generate_plans(candidates, req.companion_mode, req.archetype)
    response = GeneratePlansResponse(plans=plans)
    if not plans:
        logger.info("%d event(s) in range but no viable plan for %s", len(candidates), req.companion_mode)
        response.message = NO_PLANS_MESSAGE
    return response.model_dump(mode="json", by_alias=True)


@app.post("/api/plans/preview")
async def api_preview_plan(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Cost and neighborhood summary for a hand-picked list of activities."""
    try:
        req = PlanPreviewRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc

    preview = build_plan_preview(req, _catalog().by_ids(req.activity_ids))
    if not preview.activities:
        raise HTTPException(status_code=404, detail="None of the requested activities exist")
    return preview.model_dump(mode="json", by_alias=True)


@app.get("/api/events")
async def api_events(
    start: datetime = Query(...),
    end: datetime = Query(...),
) -> Dict[str, Any]:
    events = _catalog().in_window(start, end)
    return {"events": [event.model_dump(mode="json", by_alias=True) for event in events]}


@app.get("/healthz", include_in_schema=False)
async def healthz() -> Dict[str, Any]:
    return {"status": "ok", "events": len(_catalog())}
