"""Event controller: wires the store, filters, drafts and dialogs together.

The controller is the error boundary. Store and draft failures are logged,
sent to the notifier and attached to the open dialog; they are never raised to
the caller. Every transition publishes a fresh :class:`ViewState` snapshot.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field, replace

from eventboard.config import Settings
from eventboard.dialogs import CLOSED, DialogKind, DialogState, DialogStateMachine
from eventboard.draft import EditBufferController
from eventboard.errors import EventError, NotFound, ValidationError
from eventboard.filters import FilterState, category_universe, filter_events
from eventboard.models import Event, EventId
from eventboard.sinks import (
    LogNotifier,
    Navigator,
    NoticeKind,
    Notifier,
    NullNavigator,
    Severity,
)
from eventboard.store import EventStore

logger = logging.getLogger(__name__)

EVENTS_ROUTE = "/events"


@dataclass(frozen=True)
class ViewState:
    """Everything a view needs to render, as one immutable snapshot."""

    events: tuple[Event, ...] = ()
    visible: tuple[Event, ...] = ()
    categories: tuple[str, ...] = ()
    filters: FilterState = field(default_factory=FilterState)
    dialog: DialogState = CLOSED
    selected: Event | None = None


class EventController:
    def __init__(
        self,
        store: EventStore,
        notifier: Notifier | None = None,
        navigator: Navigator | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or store.settings
        self.notifier = notifier or LogNotifier()
        self.navigator = navigator or NullNavigator()
        self.dialogs = DialogStateMachine(self.settings.strict_schedule)
        self._state = ViewState()
        self._tokens = itertools.count(1)
        self._inflight: dict[str, int] = {}

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def draft(self) -> EditBufferController | None:
        return self.dialogs.buffer

    # ------------------------------------------------------------------
    # Snapshot and reporting helpers
    # ------------------------------------------------------------------

    def _publish(self, **changes: object) -> ViewState:
        state = replace(self._state, **changes)
        self._state = replace(
            state,
            visible=tuple(filter_events(state.events, state.filters)),
            categories=tuple(category_universe(state.events)),
            dialog=self.dialogs.state,
        )
        return self._state

    def _report(
        self, action: str, exc: EventError, severity: Severity = Severity.ERROR
    ) -> str:
        message = f"{action}: {exc}"
        if isinstance(exc, ValidationError):
            logger.info(message)
        else:
            logger.error(message)
        self.notifier.notify(message, severity, NoticeKind.ERROR)
        return message

    def _fail(self, session: int, action: str, exc: EventError) -> None:
        message = self._report(action, exc)
        if not self.dialogs.fail(session, message):
            logger.debug(f"Dialog session {session} is gone; error not attached")
        self._publish()

    def _success(self, message: str) -> None:
        logger.info(message)
        self.notifier.notify(message, Severity.INFO, NoticeKind.SUCCESS)

    def _find(self, event_id: EventId) -> Event | None:
        for event in self._state.events:
            if str(event.id) == str(event_id):
                return event
        selected = self._state.selected
        if selected is not None and str(selected.id) == str(event_id):
            return selected
        return None

    # Per-entity request tokens. A newer request for the same key makes the
    # older one stale. A stale write that succeeded still reloads the list,
    # but its dialog and notification effects are dropped.

    def _claim(self, key: str) -> int:
        token = next(self._tokens)
        self._inflight[key] = token
        return token

    def _settle(self, key: str, token: int) -> bool:
        """Release *token*; return whether it was still the latest for *key*."""
        if self._inflight.get(key) != token:
            logger.info(f"Superseded response for {key}; keeping data only")
            return False
        del self._inflight[key]
        return True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Reload the list; on failure the last known list stays visible."""
        try:
            events = await self.store.list()
        except EventError as exc:
            self._report("Failed to load events", exc, Severity.WARNING)
            return False
        self._publish(events=events)
        return True

    async def open_event(self, event_id: EventId) -> Event | None:
        try:
            event = await self.store.get(event_id)
        except EventError as exc:
            self._report("Failed to load event", exc)
            return None
        self._publish(selected=event)
        self.navigator.navigate(f"{EVENTS_ROUTE}/{event.id}")
        return event

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_search(self, text: str) -> ViewState:
        return self._publish(filters=replace(self._state.filters, search_text=text))

    def select_category(self, label: str | None) -> ViewState:
        return self._publish(
            filters=replace(self._state.filters, selected_category=label or None)
        )

    def clear_filters(self) -> ViewState:
        return self._publish(filters=FilterState())

    # ------------------------------------------------------------------
    # Dialogs
    # ------------------------------------------------------------------

    def open_create(self) -> ViewState:
        self.dialogs.open_create()
        return self._publish()

    def open_edit(self, event_id: EventId) -> ViewState:
        event = self._find(event_id)
        if event is None:
            self._report("Cannot edit event", NotFound(event_id))
            return self._state
        self.dialogs.open_edit(event)
        return self._publish()

    def open_delete(self, event_id: EventId) -> ViewState:
        event = self._find(event_id)
        self.dialogs.open_delete(event.id if event is not None else event_id)
        return self._publish()

    def cancel(self) -> ViewState:
        self.dialogs.cancel()
        return self._publish()

    def set_field(self, name: str, value: str) -> None:
        buffer = self.dialogs.buffer
        if buffer is None:
            raise RuntimeError("No create or edit dialog is open")
        buffer.set_field(name, value)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def save(self) -> bool:
        """Submit the open create/edit draft.

        On success the list is reloaded before the dialog closes. On failure
        the dialog and its draft stay as they are, with the error attached.
        """
        state = self.dialogs.state
        buffer = self.dialogs.buffer
        if state.kind not in (DialogKind.EDITING, DialogKind.CREATING) or buffer is None:
            logger.warning(f"save() called with dialog {state.kind.value}")
            return False

        creating = state.kind is DialogKind.CREATING
        action = "add" if creating else "update"
        session = self.dialogs.session
        try:
            payload = buffer.to_payload()
        except ValidationError as exc:
            self._fail(session, f"Failed to {action} event", exc)
            return False

        # Each create dialog is its own entity until the server assigns an id.
        key = f"<new:{session}>" if creating else str(state.event_id)
        token = self._claim(key)
        try:
            if creating:
                saved = await self.store.create(payload)
            else:
                saved = await self.store.update(state.event_id, payload)
        except EventError as exc:
            if self._settle(key, token):
                self._fail(session, f"Failed to {action} event", exc)
            return False
        latest = self._settle(key, token)
        await self.refresh()
        if not latest:
            return False

        self.dialogs.complete(session)
        selected = self._state.selected
        if selected is not None and str(selected.id) == str(saved.id):
            selected = saved
        self._publish(selected=selected)
        self._success("Event added." if creating else "Event updated successfully.")
        return True

    async def confirm_delete(self) -> bool:
        state = self.dialogs.state
        if state.kind is not DialogKind.CONFIRMING_DELETE:
            logger.warning(f"confirm_delete() called with dialog {state.kind.value}")
            return False

        event_id = state.event_id
        session = self.dialogs.session
        key = str(event_id)
        token = self._claim(key)
        try:
            await self.store.remove(event_id)
        except EventError as exc:
            if self._settle(key, token):
                self._fail(session, "Failed to delete event", exc)
            return False
        latest = self._settle(key, token)
        await self.refresh()
        if not latest:
            return False

        self.dialogs.complete(session)
        selected = self._state.selected
        if selected is not None and str(selected.id) == key:
            selected = None
        self._publish(selected=selected)
        self._success("Event deleted successfully.")
        self.navigator.navigate(EVENTS_ROUTE)
        return True

    async def aclose(self) -> None:
        await self.store.aclose()
