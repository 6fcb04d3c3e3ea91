"""Which modal is open: none, edit, create or confirm-delete."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from eventboard.draft import EditBufferController
from eventboard.models import Event, EventId

logger = logging.getLogger(__name__)


class DialogKind(str, Enum):
    CLOSED = "closed"
    EDITING = "editing"
    CREATING = "creating"
    CONFIRMING_DELETE = "confirming_delete"


@dataclass(frozen=True)
class DialogState:
    kind: DialogKind = DialogKind.CLOSED
    event_id: EventId | None = None
    error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.kind is not DialogKind.CLOSED

    @classmethod
    def closed(cls) -> DialogState:
        return cls()

    @classmethod
    def editing(cls, event_id: EventId) -> DialogState:
        return cls(DialogKind.EDITING, event_id)

    @classmethod
    def creating(cls) -> DialogState:
        return cls(DialogKind.CREATING)

    @classmethod
    def confirming_delete(cls, event_id: EventId) -> DialogState:
        return cls(DialogKind.CONFIRMING_DELETE, event_id)


CLOSED = DialogState.closed()


class DialogStateMachine:
    """Holds the single active dialog and, for edit/create, its draft.

    Each opening starts a new session. :meth:`complete` and :meth:`fail` take
    the session that issued the request and do nothing if the dialog has since
    been closed or replaced, so a late response can never reopen a dialog.
    """

    def __init__(self, strict_schedule: bool = False) -> None:
        self.strict_schedule = strict_schedule
        self._state = CLOSED
        self._buffer: EditBufferController | None = None
        self._session = 0

    @property
    def state(self) -> DialogState:
        return self._state

    @property
    def buffer(self) -> EditBufferController | None:
        return self._buffer

    @property
    def session(self) -> int:
        return self._session

    def _open(self, state: DialogState, buffer: EditBufferController | None) -> int:
        if self._state.is_open:
            logger.debug(f"Replacing open dialog {self._state.kind.value}")
        self._session += 1
        self._state = state
        self._buffer = buffer
        return self._session

    def open_edit(self, event: Event) -> int:
        buffer = EditBufferController.from_event(event, self.strict_schedule)
        return self._open(DialogState.editing(event.id), buffer)

    def open_create(self) -> int:
        buffer = EditBufferController.from_event(None, self.strict_schedule)
        return self._open(DialogState.creating(), buffer)

    def open_delete(self, event_id: EventId) -> int:
        return self._open(DialogState.confirming_delete(event_id), None)

    def cancel(self) -> None:
        self._close()

    def is_current(self, session: int) -> bool:
        return self._state.is_open and session == self._session

    def complete(self, session: int) -> bool:
        """Close after a successful save/delete issued by *session*."""
        if not self.is_current(session):
            return False
        self._close()
        return True

    def fail(self, session: int, message: str) -> bool:
        """Attach *message* to the dialog; state and draft are kept."""
        if not self.is_current(session):
            return False
        self._state = replace(self._state, error=message)
        return True

    def clear_error(self) -> None:
        if self._state.error is not None:
            self._state = replace(self._state, error=None)

    def _close(self) -> None:
        self._session += 1
        self._state = CLOSED
        self._buffer = None
