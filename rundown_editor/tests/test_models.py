"""Tests for rundown_editor/models.py: API payload models."""
from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from conftest import rundown_detail
from rundown_editor.models import (
    DEFAULT_TARGET_SECONDS,
    CreateRundownForm,
    ReviewStatus,
    Rundown,
    RundownDetail,
    Segment,
    Story,
    StoryIntegration,
    TalentRole,
)


class TestRundown:

    def test_defaults(self):
        r = Rundown(id=1)
        assert r.target_duration == DEFAULT_TARGET_SECONDS == 1200
        assert r.status is ReviewStatus.DRAFT
        assert r.share_with_class is False

    def test_timestamp_air_date_keeps_date_part(self):
        r = Rundown.model_validate({"id": 1, "air_date": "2026-10-19T00:00:00.000Z"})
        assert r.air_date == date(2026, 10, 19)

    def test_empty_air_date_is_none(self):
        assert Rundown.model_validate({"id": 1, "air_date": ""}).air_date is None

    def test_unknown_fields_ignored(self):
        r = Rundown.model_validate({"id": 1, "created_by": 5})
        assert not hasattr(r, "created_by")

    def test_negative_target_rejected(self):
        with pytest.raises(ValidationError):
            Rundown(id=1, target_duration=-1)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Rundown.model_validate({"id": 1, "status": "Published"})


class TestSegment:

    def test_wire_aliases(self):
        seg = Segment.model_validate(
            {"id": 1, "title": "x", "order_index": 2, "type": "intro", "is_pinned": True}
        )
        assert (seg.ordinal, seg.segment_type, seg.pinned) == (2, "intro", True)

    def test_field_names_also_accepted(self):
        seg = Segment(id=1, ordinal=3, segment_type="outro", pinned=True)
        assert seg.ordinal == 3

    def test_null_text_becomes_empty(self):
        seg = Segment.model_validate({"id": 1, "title": None, "notes": None})
        assert seg.title == "" and seg.notes == ""

    def test_assignment_is_validated(self):
        seg = Segment(id=1)
        with pytest.raises(ValidationError):
            seg.duration = -10


class TestDetail:

    def test_nested_collections(self):
        detail = RundownDetail.model_validate(rundown_detail())
        assert len(detail.segments) == 4
        assert detail.talent.hosts[0].role is TalentRole.HOST
        assert detail.stories[0].title == "Bake sale"

    def test_missing_collections_default_empty(self):
        detail = RundownDetail.model_validate({"id": 1, "show_name": "x"})
        assert detail.segments == [] and detail.stories == []
        assert detail.talent.hosts == []


class TestStory:

    def test_catalog_aliases(self):
        story = Story.model_validate(
            {"id": 5, "idea_title": "Robotics", "idea_description": None, "tags": ["stem"]}
        )
        assert story.title == "Robotics"
        assert story.description == ""
        assert story.already_in_rundown is False

    def test_integration_requires_story_id(self):
        with pytest.raises(ValidationError):
            StoryIntegration.model_validate({"id": 1})


class TestCreateRundownForm:

    def test_air_date_defaults_to_today(self):
        assert CreateRundownForm().air_date == date.today()

    def test_payload_strips_name_and_formats_date(self):
        form = CreateRundownForm(show_name="  News  ", air_date=date(2026, 1, 2), class_id=4)
        assert form.to_payload() == {
            "show_name": "News",
            "air_date": "2026-01-02",
            "target_duration": 1200,
            "class_id": 4,
            "share_with_class": False,
        }
