"""Rundown data models: the editor's view of the remote API payloads.

extra="ignore" on all models: fields added by newer backends are dropped
rather than rejected.  Wire names that differ from the editor's names are
mapped with aliases (``order_index`` -> ``ordinal``, ``idea_title`` ->
``title``); ``populate_by_name`` lets local code use either.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Identifier = Union[int, str]

DEFAULT_TARGET_SECONDS = 1200  # 20:00


class ReviewStatus(str, Enum):
    DRAFT = "Draft"
    NEEDS_REVIEW = "Needs Review"
    READY = "Ready"


class TalentRole(str, Enum):
    HOST = "host"
    GUEST = "guest"


class TimingStatus(str, Enum):
    BALANCED = "Balanced"
    OVER = "Over"
    UNDER = "Under"


# ── Rundown ───────────────────────────────────────────────────────────────────


class Rundown(BaseModel):
    """Header fields of one scheduled show."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Identifier
    show_name: str = ""
    air_date: Optional[date] = None
    target_duration: int = Field(default=DEFAULT_TARGET_SECONDS, ge=0)
    share_with_class: bool = False
    class_id: Optional[int] = None
    status: ReviewStatus = ReviewStatus.DRAFT

    @field_validator("air_date", mode="before")
    @classmethod
    def _date_part(cls, v: Any) -> Any:
        # the API serialises DATE columns as midnight timestamps
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v or None


class Segment(BaseModel):
    """One ordered, timed block of a rundown.

    ``is_open`` is collapse/expand UI state and is never persisted.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, validate_assignment=True)

    id: Identifier
    title: str = ""
    ordinal: int = Field(default=0, ge=0, alias="order_index")
    duration: int = Field(default=0, ge=0)
    notes: str = ""
    segment_type: str = Field(default="custom", alias="type")
    pinned: bool = Field(default=False, alias="is_pinned")
    status: ReviewStatus = ReviewStatus.DRAFT
    is_open: bool = Field(default=False, exclude=True)

    @field_validator("duration", mode="before")
    @classmethod
    def _null_duration(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("title", "notes", mode="before")
    @classmethod
    def _null_text(cls, v: Any) -> Any:
        return "" if v is None else v


class Talent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[Identifier] = None
    name: str
    role: TalentRole = TalentRole.HOST
    notes: str = ""

    @field_validator("notes", mode="before")
    @classmethod
    def _null_notes(cls, v: Any) -> Any:
        return "" if v is None else v


class TalentBuckets(BaseModel):
    model_config = ConfigDict(extra="ignore")

    hosts: List[Talent] = []
    guests: List[Talent] = []


class Story(BaseModel):
    """An entry from the external story catalog."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Identifier
    title: str = Field(default="", alias="idea_title")
    description: str = Field(default="", alias="idea_description")
    author_name: Optional[str] = None
    tags: List[str] = []
    already_in_rundown: bool = False

    @field_validator("title", "description", mode="before")
    @classmethod
    def _null_text(cls, v: Any) -> Any:
        return "" if v is None else v


class StoryIntegration(BaseModel):
    """Links an external story to a rundown, optionally to one segment."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Identifier
    story_id: Identifier
    segment_id: Optional[Identifier] = None
    notes: str = ""
    title: str = Field(default="", alias="idea_title")

    @field_validator("notes", "title", mode="before")
    @classmethod
    def _null_text(cls, v: Any) -> Any:
        return "" if v is None else v


class RundownDetail(Rundown):
    """``GET /rundowns/{id}`` payload: header plus nested collections."""

    segments: List[Segment] = []
    talent: TalentBuckets = Field(default_factory=TalentBuckets)
    stories: List[StoryIntegration] = []


# ── Creation form ─────────────────────────────────────────────────────────────


class CreateRundownForm(BaseModel):
    """State of the create-rundown form.  air_date defaults to today."""

    model_config = ConfigDict(extra="ignore")

    show_name: str = ""
    air_date: Optional[date] = Field(default_factory=date.today)
    target_duration: int = Field(default=DEFAULT_TARGET_SECONDS, ge=0)
    class_id: Optional[int] = None
    share_with_class: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "show_name": self.show_name.strip(),
            "air_date": self.air_date.isoformat() if self.air_date else "",
            "target_duration": self.target_duration,
            "class_id": self.class_id,
            "share_with_class": self.share_with_class,
        }
