"""Unit tests for the edit buffer."""

import time
from datetime import datetime, timezone

import pytest

from eventboard.draft import EditBufferController, format_timestamp, split_categories
from eventboard.errors import ValidationError

FILLED = {
    "title": "Rock Show",
    "description": "Loud",
    "image": "https://example.com/rock.jpg",
    "start_time": "2024-06-01T20:00",
    "end_time": "2024-06-01T23:30",
    "categories": "rock, pop",
}


def filled_buffer(**overrides) -> EditBufferController:
    buffer = EditBufferController()
    for name, value in {**FILLED, **overrides}.items():
        buffer.set_field(name, value)
    return buffer


class TestSeed:
    def test_seed_from_event(self, make_event):
        event = make_event(7, "Jazz Night", ["music", "outdoor"])
        buffer = EditBufferController.from_event(event)

        assert buffer.fields == {
            "title": "Jazz Night",
            "description": "About Jazz Night",
            "image": "https://example.com/7.jpg",
            "start_time": "2024-05-01T19:00",
            "end_time": "2024-05-01T22:00",
            "categories": "music, outdoor",
        }
        assert not buffer.is_dirty

    def test_seed_empty(self):
        buffer = EditBufferController.from_event(None)
        assert set(buffer.fields.values()) == {""}

    def test_aware_timestamps_are_shown_in_local_time(self):
        value = datetime(2024, 5, 1, 19, 0, 45, tzinfo=timezone.utc)
        assert format_timestamp(value) == value.astimezone().strftime("%Y-%m-%dT%H:%M")

    def test_reseed_discards_edits(self, make_event):
        event = make_event(1, "Jazz Night")
        buffer = EditBufferController.from_event(event)
        buffer.set_field("title", "Changed")
        buffer.seed(event)
        assert buffer.get("title") == "Jazz Night"


class TestSetField:
    def test_set_field_marks_dirty(self, make_event):
        buffer = EditBufferController.from_event(make_event(1, "Jazz Night"))
        buffer.set_field("title", "Jazz Night (late)")
        assert buffer.get("title") == "Jazz Night (late)"
        assert buffer.is_dirty

    def test_api_field_names_are_accepted(self):
        buffer = EditBufferController()
        buffer.set_field("startTime", "2024-06-01T20:00")
        assert buffer.get("start_time") == "2024-06-01T20:00"

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            EditBufferController().set_field("venue", "Somewhere")


class TestToPayload:
    def test_complete_draft(self):
        payload = filled_buffer().to_payload()

        assert payload.title == "Rock Show"
        assert payload.start_time == datetime(2024, 6, 1, 20, 0).astimezone()
        assert payload.end_time == datetime(2024, 6, 1, 23, 30).astimezone()
        assert payload.categories == ["rock", "pop"]
        assert payload.to_wire()["startTime"].startswith("2024-06-01T20:00:00")

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("music, , outdoor,", ["music", "outdoor"]),
            ("rock,  , pop", ["rock", "pop"]),
            (" , ,", []),
            ("", []),
            ("jazz,jazz , blues", ["jazz", "blues"]),
        ],
    )
    def test_categories_never_contain_blanks(self, text, expected):
        payload = filled_buffer(categories=text).to_payload()
        assert payload.categories == expected
        assert "" not in payload.categories

    @pytest.mark.parametrize(
        "field", ["title", "description", "image", "start_time", "end_time"]
    )
    @pytest.mark.parametrize("blank", ["", "   ", "\t"])
    def test_blank_required_field_is_rejected(self, field, blank):
        with pytest.raises(ValidationError) as excinfo:
            filled_buffer(**{field: blank}).to_payload()
        assert excinfo.value.missing == (field,)
        assert field in str(excinfo.value)

    def test_all_blank_fields_are_listed(self):
        with pytest.raises(ValidationError) as excinfo:
            EditBufferController().to_payload()
        assert excinfo.value.missing == (
            "title",
            "description",
            "image",
            "start_time",
            "end_time",
        )

    def test_blank_categories_are_allowed(self):
        assert filled_buffer(categories="   ").to_payload().categories == []

    def test_unparseable_timestamp(self):
        with pytest.raises(ValidationError) as excinfo:
            filled_buffer(start_time="next friday").to_payload()
        assert excinfo.value.missing == ()
        assert excinfo.value.invalid == ("start_time",)

    def test_end_before_start_is_allowed_by_default(self):
        payload = filled_buffer(end_time="2024-06-01T19:00").to_payload()
        assert payload.end_time < payload.start_time

    def test_strict_schedule_rejects_end_before_start(self):
        buffer = EditBufferController(strict_schedule=True)
        for name, value in {**FILLED, "end_time": "2024-06-01T19:00"}.items():
            buffer.set_field(name, value)
        with pytest.raises(ValidationError) as excinfo:
            buffer.to_payload()
        assert excinfo.value.invalid == ("end_time",)


def test_split_categories():
    assert split_categories("a,b , ,c") == ["a", "b", "c"]


@pytest.fixture
def berlin_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available")
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestLocalTime:
    def test_untouched_utc_seed_keeps_its_instant(self, berlin_time, make_event):
        event = make_event(
            1,
            "Jazz Night",
            startTime="2024-05-01T19:00:00Z",
            endTime="2024-05-01T22:00:00Z",
        )
        buffer = EditBufferController.from_event(event)
        assert buffer.get("start_time") == "2024-05-01T21:00"

        payload = buffer.to_payload()
        assert payload.start_time == event.start_time
        assert payload.end_time == event.end_time
        assert payload.start_time.utcoffset() is not None

    def test_typed_text_is_local_wall_clock(self, berlin_time):
        payload = filled_buffer().to_payload()
        assert payload.to_wire()["startTime"] == "2024-06-01T20:00:00+02:00"
