import asyncio
import json
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

from app.errors import DependencyError
from app.services.calendar_sink import CalendarEvent, GoogleCalendarSink


pytestmark = pytest.mark.unit

START = datetime(2026, 5, 5, 9, 0, tzinfo=ZoneInfo("Europe/Lisbon"))


def sink_with(handler):
    return GoogleCalendarSink("token-123", transport=httpx.MockTransport(handler))


def test_create_posts_event_and_returns_id():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "abc"})

    event = CalendarEvent(summary="Entrevista", start=START, attendees=["a@x.com"])
    event_id = asyncio.run(sink_with(handler).create(event))

    assert event_id == "abc"
    assert seen["method"] == "POST"
    assert seen["path"] == "/calendar/v3/calendars/primary/events"
    assert seen["auth"] == "Bearer token-123"
    assert seen["body"]["end"]["dateTime"] == "2026-05-05T10:00:00+01:00"
    assert seen["body"]["attendees"] == [{"email": "a@x.com"}]
    assert "description" not in seen["body"]


def test_delete_targets_event_id():
    paths = []

    def handler(request):
        paths.append((request.method, request.url.path))
        return httpx.Response(204)

    asyncio.run(sink_with(handler).delete("abc"))
    assert paths == [("DELETE", "/calendar/v3/calendars/primary/events/abc")]


def test_http_error_becomes_dependency_error():
    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    with pytest.raises(DependencyError):
        asyncio.run(sink_with(handler).create(CalendarEvent(summary="x", start=START)))


def test_transport_error_becomes_dependency_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(DependencyError):
        asyncio.run(sink_with(handler).update("abc", CalendarEvent(summary="x", start=START)))
