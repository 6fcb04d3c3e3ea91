"""Edit buffer: the text-only draft behind the create and edit forms.

Every field is held as a string, exactly as typed, so the form never has to
deal with half-entered dates or lists. :meth:`EditBufferController.to_payload`
is the one place where the draft is turned into typed values.
"""

from __future__ import annotations

from datetime import datetime

from eventboard.errors import ValidationError
from eventboard.models import Event, EventPayload

#: Text form of timestamps in the draft (minute resolution, local time).
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M"

FIELDS = ("title", "description", "image", "start_time", "end_time", "categories")
REQUIRED = ("title", "description", "image", "start_time", "end_time")

# Form layers tend to use the API's field names.
_ALIASES = {"startTime": "start_time", "endTime": "end_time"}


def format_timestamp(value: datetime) -> str:
    """Render *value* in local time, truncated to the minute."""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime(TIMESTAMP_FORMAT)


def split_categories(text: str) -> list[str]:
    """``"music, , outdoor,"`` -> ``["music", "outdoor"]``."""
    return [piece.strip() for piece in text.split(",") if piece.strip()]


class EditBufferController:
    """Holds one draft for the lifetime of a create or edit dialog."""

    def __init__(self, strict_schedule: bool = False) -> None:
        self.strict_schedule = strict_schedule
        self._fields: dict[str, str] = dict.fromkeys(FIELDS, "")
        self._seeded: dict[str, str] = dict(self._fields)

    @classmethod
    def from_event(
        cls, event: Event | None, strict_schedule: bool = False
    ) -> EditBufferController:
        buffer = cls(strict_schedule=strict_schedule)
        buffer.seed(event)
        return buffer

    @property
    def fields(self) -> dict[str, str]:
        return dict(self._fields)

    @property
    def is_dirty(self) -> bool:
        return self._fields != self._seeded

    def seed(self, event: Event | None) -> None:
        """Load *event* into the draft, or reset to blanks when ``None``."""
        if event is None:
            self._fields = dict.fromkeys(FIELDS, "")
        else:
            self._fields = {
                "title": event.title,
                "description": event.description,
                "image": event.image,
                "start_time": format_timestamp(event.start_time),
                "end_time": format_timestamp(event.end_time),
                "categories": ", ".join(event.categories),
            }
        self._seeded = dict(self._fields)

    def get(self, name: str) -> str:
        return self._fields[_ALIASES.get(name, name)]

    def set_field(self, name: str, value: str) -> None:
        key = _ALIASES.get(name, name)
        if key not in self._fields:
            raise KeyError(f"Unknown draft field: {name!r}")
        self._fields[key] = value

    def to_payload(self) -> EventPayload:
        """Convert the draft into a payload, or raise :class:`ValidationError`.

        Blank required fields are reported in ``missing``. Timestamps that
        cannot be parsed (and, in strict mode, an end before the start) are
        reported in ``invalid``. Categories may come out empty.
        """
        missing = [name for name in REQUIRED if not self._fields[name].strip()]
        invalid: list[str] = []

        times: dict[str, datetime] = {}
        for name in ("start_time", "end_time"):
            if name in missing:
                continue
            try:
                parsed = datetime.fromisoformat(self._fields[name].strip())
            except ValueError:
                invalid.append(name)
                continue
            # Draft text is local wall-clock time.
            times[name] = parsed.astimezone() if parsed.tzinfo is None else parsed

        if self.strict_schedule and len(times) == 2:
            start, end = times["start_time"], times["end_time"]
            if (start.tzinfo is None) == (end.tzinfo is None) and end < start:
                invalid.append("end_time")

        if missing or invalid:
            parts = []
            if missing:
                parts.append("required fields are blank: " + ", ".join(missing))
            if invalid:
                parts.append("invalid fields: " + ", ".join(invalid))
            message = "; ".join(parts)
            raise ValidationError(message[0].upper() + message[1:], missing, invalid)

        return EventPayload(
            title=self._fields["title"].strip(),
            description=self._fields["description"].strip(),
            image=self._fields["image"].strip(),
            start_time=times["start_time"],
            end_time=times["end_time"],
            categories=split_categories(self._fields["categories"]),
        )
