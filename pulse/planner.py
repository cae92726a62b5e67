# pulse/planner.py
from __future__ import annotations

import os
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from pulse import settings  # noqa: F401  (.env must load before PULSE_LOG_LEVEL is read)
from pulse.pricing import estimate_cost_tier, estimate_saved_plan_cost, is_budget
from pulse.schemas import (
    Archetype,
    CandidateActivity,
    Category,
    CompanionMode,
    GeneratedPlan,
    PlanActivity,
    PlanPreview,
    PlanPreviewRequest,
)

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("PULSE_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

MIN_ACTIVITIES = 2
MAX_ACTIVITIES = 3

AFFINITY: Dict[str, List[str]] = {
    "DATE": ["FOOD", "RESTAURANT", "ART", "LIVE_MUSIC", "BARS", "SEASONAL"],
    "FRIENDS": ["BARS", "LIVE_MUSIC", "FOOD", "POPUP", "OUTDOORS", "FITNESS"],
    "FAMILY": ["ART", "OUTDOORS", "SEASONAL", "ACTIVITY_VENUE", "FOOD"],
    "SOLO": ["COFFEE", "ART", "OUTDOORS", "FITNESS"],
}

DEFAULT_ARCHETYPE: Dict[str, str] = {
    "DATE": "DATE_NIGHT",
    "FRIENDS": "SOCIAL",
    "FAMILY": "FAMILY_FUN",
    "SOLO": "SOLO_CHILL",
}

ARCHETYPE_LABELS: Dict[str, tuple[str, str]] = {
    "DATE_NIGHT": ("Perfect Date Night", "Romantic spots curated for a perfect evening"),
    "SOCIAL": ("Social Saturday", "Great spots to enjoy with your crew"),
    "SOLO_CHILL": ("Chill Solo Day", "Relaxing activities for quality me-time"),
    "FAMILY_FUN": ("Family Fun Day", "Fun for the whole family"),
    "CUSTOM": ("Your Custom Plan", "A mix of activities you'll love"),
}

BUDGET_LABEL = ("Budget-Friendly Option", "Great experiences that won't break the bank")
ADVENTURE_LABEL = ("Adventure Mix", "Try something different with a variety of experiences")


def resolve_archetype(companion_mode: CompanionMode, archetype: Optional[Archetype] = None) -> Archetype:
    """Explicit archetype wins; otherwise the fixed companion-mode default."""
    if archetype:
        return archetype
    return DEFAULT_ARCHETYPE[companion_mode]  # type: ignore[return-value]


def affinity_for(companion_mode: CompanionMode) -> List[Category]:
    return list(AFFINITY[companion_mode])  # type: ignore[arg-type]


# ---------- shared helpers ----------
def _rank_by_rating(events: Sequence[CandidateActivity]) -> List[CandidateActivity]:
    # sorted() is stable, so equal ratings keep input order; missing ratings go last.
    return sorted(
        events,
        key=lambda e: (e.rating_score is None, -(e.rating_score or 0.0)),
    )


def _to_plan_activity(event: CandidateActivity, order: int) -> PlanActivity:
    return PlanActivity(
        id=event.id,
        title=event.title,
        category=event.category,
        venue_name=event.venue_name,
        neighborhood=event.neighborhood,
        start_time=event.start_time,
        price_range=event.price_range,
        order=order,
    )


def _neighborhoods(events: Sequence[CandidateActivity]) -> List[str]:
    seen: List[str] = []
    for event in events:
        if event.neighborhood and event.neighborhood not in seen:
            seen.append(event.neighborhood)
    return seen


def _build_plan(
    label: tuple[str, str],
    archetype: Archetype,
    selected: Sequence[CandidateActivity],
) -> Optional[GeneratedPlan]:
    if len(selected) < MIN_ACTIVITIES:
        return None
    # Rank decides what gets picked; start time decides the walking order.
    ordered = sorted(selected[:MAX_ACTIVITIES], key=lambda e: e.start_time)
    name, description = label
    return GeneratedPlan(
        name=name,
        description=description,
        archetype=archetype,
        activities=[_to_plan_activity(event, idx) for idx, event in enumerate(ordered)],
        estimated_cost=estimate_cost_tier(event.price_range for event in ordered),
        neighborhoods=_neighborhoods(ordered),
    )


# ---------- strategies ----------
def best_match_plan(
    candidates: Sequence[CandidateActivity],
    companion_mode: CompanionMode,
    archetype: Optional[Archetype] = None,
) -> Optional[GeneratedPlan]:
    """Top-rated activities within the companion's preferred categories."""
    affinity = AFFINITY[companion_mode]
    matching = [event for event in candidates if event.category in affinity]
    if len(matching) < MIN_ACTIVITIES:
        return None
    selected = _rank_by_rating(matching)[:MAX_ACTIVITIES]
    resolved = resolve_archetype(companion_mode, archetype)
    return _build_plan(ARCHETYPE_LABELS[resolved], resolved, selected)


def budget_plan(
    candidates: Sequence[CandidateActivity],
    companion_mode: CompanionMode,
) -> Optional[GeneratedPlan]:
    """Free or cheap activities, preferring the companion's categories.

    No re-ranking happens here: selections keep the order they were supplied in.
    """
    affinity = AFFINITY[companion_mode]
    cheap = [event for event in candidates if is_budget(event.price_range)]
    preferred = [event for event in cheap if event.category in affinity]
    selected = preferred[:MAX_ACTIVITIES] if len(preferred) >= MIN_ACTIVITIES else cheap[:MAX_ACTIVITIES]
    return _build_plan(BUDGET_LABEL, "CUSTOM", selected)


def adventure_plan(candidates: Sequence[CandidateActivity]) -> Optional[GeneratedPlan]:
    """Best-rated activity from each of the first three categories seen."""
    groups: Dict[str, List[CandidateActivity]] = {}
    for event in candidates:
        groups.setdefault(event.category, []).append(event)

    selected: List[CandidateActivity] = []
    for events in groups.values():
        if len(selected) >= MAX_ACTIVITIES:
            break
        selected.append(_rank_by_rating(events)[0])
    return _build_plan(ADVENTURE_LABEL, "CUSTOM", selected)


def generate_plans(
    candidates: Sequence[CandidateActivity],
    companion_mode: CompanionMode,
    archetype: Optional[Archetype] = None,
) -> List[GeneratedPlan]:
    """Build up to three itineraries: best match, budget-friendly, adventure mix.

    Strategies that cannot fill at least two slots are left out. The input is
    never modified and the result depends on nothing but the arguments.
    """
    candidates = list(candidates)
    attempts = (
        ("best_match", best_match_plan(candidates, companion_mode, archetype)),
        ("budget", budget_plan(candidates, companion_mode)),
        ("adventure", adventure_plan(candidates)),
    )
    plans: List[GeneratedPlan] = []
    for strategy, plan in attempts:
        if plan is None:
            logger.debug("Strategy %s skipped: fewer than %d activities", strategy, MIN_ACTIVITIES)
            continue
        plans.append(plan)

    logger.debug(
        "Generated %d plan(s) from %d candidate(s) for %s",
        len(plans),
        len(candidates),
        companion_mode,
    )
    return plans


# ---------- hand-picked plans ----------
def build_plan_preview(
    request: PlanPreviewRequest,
    events_by_id: Mapping[str, CandidateActivity],
) -> PlanPreview:
    """Summarise a user-assembled plan, keeping the order the ids were given in."""
    chosen: List[CandidateActivity] = []
    # Repeated ids count once.
    activity_ids = list(dict.fromkeys(request.activity_ids))
    missing: List[str] = []
    for activity_id in activity_ids:
        event = events_by_id.get(activity_id)
        if event is None:
            missing.append(activity_id)
        else:
            chosen.append(event)

    if missing:
        logger.info("Plan preview %r references %d unknown activity id(s)", request.name, len(missing))

    return PlanPreview(
        name=request.name,
        archetype=request.archetype,
        companion_mode=request.companion_mode,
        activities=[_to_plan_activity(event, idx) for idx, event in enumerate(chosen)],
        estimated_cost=estimate_saved_plan_cost(event.price_range for event in chosen),
        neighborhoods=_neighborhoods(chosen),
        missing_ids=missing,
    )
