"""Event store: httpx client for the events REST API with a cached snapshot."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from eventboard.config import Settings
from eventboard.errors import NetworkError, NotFound, ServerRejected, ValidationError
from eventboard.models import Event, EventId, EventPayload

logger = logging.getLogger(__name__)

_SHAPE_REJECTED = (400, 422)


class EventStore:
    """Talks to ``/events`` and owns the last list and record it fetched.

    The cached collection is only ever replaced as a whole, never patched in
    place, so readers always see one consistent snapshot.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._events: tuple[Event, ...] = ()
        self._current: Event | None = None

    @property
    def events(self) -> tuple[Event, ...]:
        return self._events

    @property
    def current(self) -> Event | None:
        return self._current

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.api_url,
                headers={"Accept": "application/json"},
                timeout=self.settings.timeout,
                transport=self._transport,
            )
        return self._client

    async def _send(
        self, method: str, url: str, event_id: EventId | None = None, **kwargs: Any
    ) -> httpx.Response:
        """Send one request and classify its failure, if any."""
        client = self._ensure_client()
        try:
            resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {url} failed: {exc}") from exc

        if resp.is_success:
            return resp
        if resp.status_code == 404:
            raise NotFound(event_id if event_id is not None else url)
        if resp.status_code in _SHAPE_REJECTED and method in ("POST", "PUT"):
            raise ValidationError(
                f"Server rejected the event ({resp.status_code})"
            )
        raise ServerRejected(
            f"{method} {url} returned {resp.status_code}", resp.status_code
        )

    async def _read(self, url: str, event_id: EventId | None = None) -> Any:
        """GET *url* with retries on transport failures and 5xx responses."""
        attempts = self.settings.max_retries
        for attempt in range(1, attempts + 1):
            try:
                resp = await self._send("GET", url, event_id)
            except (NetworkError, ServerRejected) as exc:
                status = getattr(exc, "status_code", None)
                if (status is not None and status < 500) or attempt == attempts:
                    raise
                wait = self.settings.retry_backoff * attempt
                logger.warning(
                    f"GET {url} failed (attempt {attempt}/{attempts}): {exc}. "
                    f"Retrying in {wait:.1f}s"
                )
                await asyncio.sleep(wait)
                continue
            return self._decode(resp)
        raise NetworkError(f"GET {url} was never attempted")

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise ServerRejected(
                f"{resp.request.method} {resp.request.url.path} returned a "
                f"non-JSON body",
                resp.status_code,
            ) from exc

    @staticmethod
    def _parse(data: Any) -> Event:
        try:
            return Event.model_validate(data)
        except PydanticValidationError as exc:
            raise ServerRejected(f"Unreadable event in response: {exc}") from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list(self) -> tuple[Event, ...]:
        """Fetch the whole collection in server order and cache it."""
        data = await self._read("/events")
        if not isinstance(data, list):
            raise ServerRejected("Expected a list of events")
        events = tuple(self._parse(item) for item in data)
        self._events = events
        logger.debug(f"Loaded {len(events)} event(s)")
        return events

    async def get(self, event_id: EventId) -> Event:
        event = self._parse(await self._read(f"/events/{event_id}", event_id))
        self._current = event
        return event

    async def create(self, payload: EventPayload) -> Event:
        resp = await self._send("POST", "/events", json=payload.to_wire())
        event = self._parse(self._decode(resp))
        logger.info(f"Created event {event.id!r}")
        return event

    async def update(self, event_id: EventId, payload: EventPayload) -> Event:
        resp = await self._send(
            "PUT", f"/events/{event_id}", event_id, json=payload.to_wire()
        )
        event = self._parse(self._decode(resp))
        if self._current is not None and self._current.id == event.id:
            self._current = event
        logger.info(f"Updated event {event_id!r}")
        return event

    async def remove(self, event_id: EventId) -> None:
        await self._send("DELETE", f"/events/{event_id}", event_id)
        if self._current is not None and self._current.id == event_id:
            self._current = None
        logger.info(f"Deleted event {event_id!r}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> EventStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
