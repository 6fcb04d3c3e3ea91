"""Shared Pydantic models for Event Board."""

from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

EventId = Union[int, str]


def dedupe(labels: list[str]) -> list[str]:
    """Collapse duplicate labels, keeping the first occurrence."""
    return list(dict.fromkeys(labels))


class CreatedBy(BaseModel):
    """Read-only summary of the user who created an event."""

    name: str
    image: str | None = None


class EventPayload(BaseModel):
    """Writable fields of an event, as sent on POST and PUT."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    image: str
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    categories: list[str] = Field(default_factory=list)

    @field_validator("categories")
    @classmethod
    def _clean_categories(cls, value: list[str]) -> list[str]:
        return dedupe([c.strip() for c in value if c and c.strip()])

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Event(BaseModel):
    """Event record as served by the remote API."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: EventId
    title: str
    description: str = ""
    image: str = ""
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    categories: list[str] = Field(default_factory=list)
    created_by: CreatedBy | None = Field(default=None, alias="createdBy")

    @field_validator("created_by", mode="before")
    @classmethod
    def _drop_bare_reference(cls, value: Any) -> Any:
        # Some backends send only the user id here.
        return value if isinstance(value, (dict, CreatedBy)) else None

    @field_validator("categories", mode="before")
    @classmethod
    def _none_categories(cls, value: Any) -> Any:
        return [] if value is None else value
