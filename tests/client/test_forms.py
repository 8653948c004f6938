"""Tests for client-side achievement form validation."""

from __future__ import annotations

import pytest

from bragger.client.forms import AchievementForm


def _valid(**overrides):
    data = {
        "title": "Shipped search",
        "description": "Built full-text search for the catalogue",
        "startDate": "2024-01-01",
        "categoryId": "c1",
        "status": "usable",
    }
    data.update(overrides)
    return data


class TestAchievementForm:
    def test_valid_form(self):
        assert AchievementForm.field_errors(_valid()) == {}

    def test_empty_form_reports_required_fields(self):
        errors = AchievementForm.field_errors({})
        assert errors["title"] == "Title is required"
        assert errors["description"] == "Description is required"
        assert errors["startDate"] == "Start date is required"
        assert errors["categoryId"] == "Category is required"

    def test_error_keys_use_camel_case_for_defaults_and_input(self):
        errors = AchievementForm.field_errors({"title": "ab", "durationHours": -1})
        assert set(errors) == {"title", "description", "startDate", "categoryId", "durationHours"}
        assert not any("_" in key for key in errors)

    @pytest.mark.parametrize(
        "overrides,field,message",
        [
            ({"title": "ab"}, "title", "Title must be at least 3 characters"),
            ({"title": "x" * 201}, "title", "Title must be less than 200 characters"),
            ({"description": "short"}, "description", "Description must be at least 10 characters"),
            ({"startDate": "soon"}, "startDate", "Invalid start date"),
            ({"endDate": "later"}, "endDate", "Invalid end date"),
            ({"durationHours": -1}, "durationHours", "Duration cannot be negative"),
            ({"durationHours": 100001}, "durationHours", "Duration seems too high"),
            ({"impact": "x" * 1001}, "impact", "Impact must be less than 1000 characters"),
            ({"skillsUsed": ["s"] * 21}, "skillsUsed", "Maximum 20 skills allowed"),
            ({"status": "done"}, "status", "Status must be idea, concept, usable, or complete"),
            ({"githubUrl": "not a url"}, "githubUrl", "Must be a valid URL"),
            ({"tags": ["t"] * 11}, "tags", "Maximum 10 tags allowed"),
        ],
    )
    def test_field_errors(self, overrides, field, message):
        assert AchievementForm.field_errors(_valid(**overrides))[field] == message

    def test_end_before_start(self):
        errors = AchievementForm.field_errors(_valid(startDate="2024-02-01", endDate="2024-01-01"))
        assert errors == {"endDate": "End date must be after start date"}

    def test_payload_drops_empty_optionals(self):
        form = AchievementForm.model_validate(_valid(githubUrl="", endDate=""))
        payload = form.to_payload()
        assert "githubUrl" not in payload
        assert "endDate" not in payload
        assert payload["categoryId"] == "c1"
        assert payload["skillsUsed"] == []
