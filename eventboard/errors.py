"""Error kinds raised by the event store and the edit buffer."""

from __future__ import annotations

from typing import Sequence


class EventError(Exception):
    """Base class for every failure surfaced to the controller."""

    #: Short label used in notifications.
    kind: str = "error"


class ValidationError(EventError):
    """A draft (or a submitted payload) has blank or malformed fields."""

    kind = "validation"

    def __init__(
        self,
        message: str,
        missing: Sequence[str] = (),
        invalid: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.missing = tuple(missing)
        self.invalid = tuple(invalid)

    @property
    def fields(self) -> tuple[str, ...]:
        return self.missing + self.invalid


class NotFound(EventError):
    """The remote API reports that the record does not exist."""

    kind = "not_found"

    def __init__(self, event_id: object) -> None:
        super().__init__(f"Event {event_id!r} not found")
        self.event_id = event_id


class NetworkError(EventError):
    """Transport failure: timeout, refused connection, DNS and so on."""

    kind = "network"


class ServerRejected(EventError):
    """Any non-2xx response not classified above, or an unreadable body."""

    kind = "server"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
