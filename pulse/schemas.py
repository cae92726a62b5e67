from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Category = Literal[
    "ART",
    "LIVE_MUSIC",
    "BARS",
    "FOOD",
    "COFFEE",
    "OUTDOORS",
    "FITNESS",
    "SEASONAL",
    "POPUP",
    "OTHER",
    "RESTAURANT",
    "ACTIVITY_VENUE",
]
CompanionMode = Literal["SOLO", "DATE", "FRIENDS", "FAMILY"]
Archetype = Literal["DATE_NIGHT", "SOCIAL", "SOLO_CHILL", "FAMILY_FUN", "CUSTOM"]

CATEGORIES = Category.__args__
COMPANION_MODES = CompanionMode.__args__
ARCHETYPES = Archetype.__args__


def as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken as UTC so feeds and requests compare cleanly.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ------- Catalog models -------
class CandidateActivity(_CamelModel):
    id: str
    title: str
    category: Category
    venue_name: str = ""
    address: str = ""
    neighborhood: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    price_range: str = ""
    rating_score: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("rating_score", "ratingScore", "googleRating"),
    )
    tags: List[str] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalise_tz(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


# ------- Generated plan models -------
class PlanActivity(_CamelModel):
    id: str
    title: str
    category: Category
    venue_name: str
    neighborhood: Optional[str] = None
    start_time: datetime
    price_range: str
    order: int


class GeneratedPlan(_CamelModel):
    name: str
    description: str
    archetype: Archetype
    activities: List[PlanActivity] = Field(default_factory=list)
    estimated_cost: str
    neighborhoods: List[str] = Field(default_factory=list)


# ------- Request / response models -------
class GeneratePlansRequest(_CamelModel):
    companion_mode: CompanionMode = Field(
        ..., validation_alias=AliasChoices("companion_mode", "companionMode", "goingWith")
    )
    date_start: datetime
    date_end: datetime
    archetype: Optional[Archetype] = Field(
        None, validation_alias=AliasChoices("archetype", "planType")
    )

    @field_validator("date_start", "date_end")
    @classmethod
    def _normalise_tz(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_window(self) -> "GeneratePlansRequest":
        if self.date_end < self.date_start:
            raise ValueError("dateEnd must not be earlier than dateStart")
        return self


class GeneratePlansResponse(_CamelModel):
    plans: List[GeneratedPlan] = Field(default_factory=list)
    message: Optional[str] = None


class PlanPreviewRequest(_CamelModel):
    name: str = Field(..., min_length=1)
    companion_mode: CompanionMode = Field(
        ..., validation_alias=AliasChoices("companion_mode", "companionMode", "goingWith")
    )
    archetype: Archetype = Field(
        "CUSTOM", validation_alias=AliasChoices("archetype", "planType")
    )
    activity_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("activity_ids", "activityIds", "eventIds"),
    )


class PlanPreview(_CamelModel):
    name: str
    archetype: Archetype
    companion_mode: CompanionMode
    activities: List[PlanActivity] = Field(default_factory=list)
    estimated_cost: str
    neighborhoods: List[str] = Field(default_factory=list)
    missing_ids: List[str] = Field(default_factory=list)
