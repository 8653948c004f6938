"""Client-side validation of the achievement form before it is submitted."""

from __future__ import annotations

from typing import Any

from pydantic import AnyHttpUrl, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from bragger.models.achievement import ACHIEVEMENT_STATUSES
from bragger.schemas.common import CamelModel
from bragger.services.dates import parse_datetime

_URL = TypeAdapter(AnyHttpUrl)
_VALUE_ERROR_PREFIX = "Value error, "


def _length_check(value: str, label: str, minimum: int, maximum: int) -> str:
    if not value:
        raise ValueError(f"{label} is required")
    if len(value) < minimum:
        raise ValueError(f"{label} must be at least {minimum} characters")
    if len(value) > maximum:
        raise ValueError(f"{label} must be less than {maximum} characters")
    return value


class AchievementForm(CamelModel):
    # Omitted fields are checked too
    model_config = ConfigDict(validate_default=True)

    title: str = ""
    description: str = ""
    start_date: str = ""
    end_date: str | None = None
    duration_hours: float | None = None
    category_id: str = ""
    impact: str | None = None
    skills_used: list[str] = Field(default_factory=list)
    status: str = "idea"
    github_url: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _length_check(v, "Title", 3, 200)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        return _length_check(v, "Description", 10, 2000)

    @field_validator("start_date")
    @classmethod
    def check_start_date(cls, v: str) -> str:
        if not v:
            raise ValueError("Start date is required")
        if parse_datetime(v) is None:
            raise ValueError("Invalid start date")
        return v

    @field_validator("end_date")
    @classmethod
    def check_end_date(cls, v: str | None) -> str | None:
        if v and parse_datetime(v) is None:
            raise ValueError("Invalid end date")
        return v or None

    @field_validator("duration_hours")
    @classmethod
    def check_duration(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError("Duration cannot be negative")
        if v is not None and v > 100000:
            raise ValueError("Duration seems too high")
        return v

    @field_validator("category_id")
    @classmethod
    def check_category(cls, v: str) -> str:
        if not v:
            raise ValueError("Category is required")
        return v

    @field_validator("impact")
    @classmethod
    def check_impact(cls, v: str | None) -> str | None:
        if v is not None and len(v) > 1000:
            raise ValueError("Impact must be less than 1000 characters")
        return v

    @field_validator("skills_used")
    @classmethod
    def check_skills(cls, v: list[str]) -> list[str]:
        if len(v) > 20:
            raise ValueError("Maximum 20 skills allowed")
        return v

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        if v not in ACHIEVEMENT_STATUSES:
            raise ValueError("Status must be idea, concept, usable, or complete")
        return v

    @field_validator("github_url")
    @classmethod
    def check_github_url(cls, v: str | None) -> str | None:
        if not v:
            return None
        try:
            _URL.validate_python(v)
        except PydanticValidationError:
            raise ValueError("Must be a valid URL") from None
        return v

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str]) -> list[str]:
        if len(v) > 10:
            raise ValueError("Maximum 10 tags allowed")
        return v

    @model_validator(mode="after")
    def check_date_order(self) -> AchievementForm:
        if self.end_date:
            start = parse_datetime(self.start_date)
            end = parse_datetime(self.end_date)
            if start and end and start > end:
                raise ValueError("End date must be after start date")
        return self

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    @classmethod
    def field_errors(cls, data: dict[str, Any]) -> dict[str, str]:
        """Validate raw form input; returns ``{camelCaseField: message}`` (empty when valid).

        Form-level errors (the date order check) are reported under ``endDate``.
        """
        try:
            cls.model_validate(data)
        except PydanticValidationError as exc:
            errors: dict[str, str] = {}
            for err in exc.errors():
                loc = err.get("loc") or ("endDate",)
                field = str(loc[0])
                # Defaults are reported under the attribute name, supplied input under its alias
                if field in cls.model_fields:
                    field = cls.model_fields[field].alias or field
                message = str(err.get("msg", ""))
                if message.startswith(_VALUE_ERROR_PREFIX):
                    message = message[len(_VALUE_ERROR_PREFIX):]
                errors.setdefault(field, message)
            return errors
        return {}
