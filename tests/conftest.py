"""Shared fixtures: an in-memory events API and recording sinks."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from eventboard.config import Settings
from eventboard.controller import EventController
from eventboard.models import Event
from eventboard.store import EventStore

REQUIRED = ("title", "description", "image", "startTime", "endTime")


def event_data(event_id, title, categories=(), **extra) -> dict:
    data = {
        "id": event_id,
        "title": title,
        "description": f"About {title}",
        "image": f"https://example.com/{event_id}.jpg",
        "startTime": "2024-05-01T19:00:00",
        "endTime": "2024-05-01T22:00:00",
        "categories": list(categories),
        "createdBy": {"name": "Ada", "image": "https://example.com/ada.png"},
    }
    data.update(extra)
    return data


class FakeEventsAPI:
    """Stateful stand-in for the remote API, served through MockTransport."""

    def __init__(self, events=()) -> None:
        self.events = [dict(e) for e in events]
        self.next_id = max((e["id"] for e in self.events), default=0) + 1
        self.failures: dict[tuple[str, str], object] = {}
        self.gates: dict[tuple[str, str], asyncio.Event] = {}
        self.requests: list[tuple[str, str]] = []
        self.bodies: list[dict] = []

    def fail(self, method: str, path: str, failure) -> None:
        """Answer *method path* with a status code or response, or raise an exception."""
        self.failures[(method, path)] = failure

    def hold(self, method: str, path: str) -> asyncio.Event:
        """Delay the next response to *method path* until the gate is set.

        The request itself is applied straight away.
        """
        gate = asyncio.Event()
        self.gates[(method, path)] = gate
        return gate

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        self.requests.append(key)
        failure = self.failures.get(key)
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, httpx.Response):
            response = failure
        elif failure is not None:
            response = httpx.Response(failure)
        else:
            response = self._respond(request)
        gate = self.gates.pop(key, None)
        if gate is not None:
            await gate.wait()
        return response

    def _index(self, event_id: str) -> int | None:
        for i, event in enumerate(self.events):
            if str(event["id"]) == event_id:
                return i
        return None

    def _respond(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.strip("/").split("/")
        method = request.method
        body = json.loads(request.content) if request.content else {}
        if body:
            self.bodies.append(body)

        if parts == ["events"]:
            if method == "GET":
                return httpx.Response(200, json=self.events)
            if method == "POST":
                if any(not body.get(name) for name in REQUIRED):
                    return httpx.Response(422)
                created = {
                    "id": self.next_id,
                    **body,
                    "createdBy": {"name": "Ada", "image": None},
                }
                self.next_id += 1
                self.events = self.events + [created]
                return httpx.Response(201, json=created)

        if len(parts) == 2 and parts[0] == "events":
            index = self._index(parts[1])
            if index is None:
                return httpx.Response(404)
            if method == "GET":
                return httpx.Response(200, json=self.events[index])
            if method == "PUT":
                updated = {**self.events[index], **body}
                self.events = (
                    self.events[:index] + [updated] + self.events[index + 1:]
                )
                return httpx.Response(200, json=updated)
            if method == "DELETE":
                self.events = self.events[:index] + self.events[index + 1:]
                return httpx.Response(200)

        return httpx.Response(405)


class RecordingNotifier:
    def __init__(self) -> None:
        self.notices = []

    def notify(self, message, severity, kind) -> None:
        self.notices.append((message, severity, kind))

    def kinds(self) -> list[str]:
        return [kind.value for _, _, kind in self.notices]


class RecordingNavigator:
    def __init__(self) -> None:
        self.routes = []

    def navigate(self, route) -> None:
        self.routes.append(route)


@pytest.fixture
def settings() -> Settings:
    return Settings(max_retries=2, retry_backoff=0.0, timeout=5.0)


@pytest.fixture
def sample_events() -> list[dict]:
    return [
        event_data(1, "Jazz Night", ["music"]),
        event_data(2, "Park Run", ["sports", "outdoor"]),
        event_data(42, "Open Air Cinema", ["outdoor", "film"]),
    ]


@pytest.fixture
def fake_api(sample_events) -> FakeEventsAPI:
    return FakeEventsAPI(sample_events)


@pytest.fixture
async def store(fake_api, settings):
    store = EventStore(settings, transport=fake_api.transport())
    yield store
    await store.aclose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def controller(store, notifier, navigator) -> EventController:
    return EventController(store, notifier=notifier, navigator=navigator)


@pytest.fixture
def make_event():
    def factory(event_id, title, categories=(), **extra) -> Event:
        return Event.model_validate(event_data(event_id, title, categories, **extra))

    return factory
