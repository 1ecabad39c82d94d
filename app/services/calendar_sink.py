"""
External calendar sink for appointments.

GoogleCalendarSink talks to the Google Calendar v3 REST API. Callers treat
every failure as non-fatal: the appointment is the source of truth.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

import httpx

from app.core.config import settings
from app.errors import DependencyError

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"

DEFAULT_DURATION = timedelta(hours=1)


@dataclass
class CalendarEvent:
    summary: str
    start: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    attendees: List[str] = field(default_factory=list)
    duration: timedelta = DEFAULT_DURATION

    def to_google(self, timezone_name: str) -> dict:
        body = {
            "summary": self.summary,
            "description": self.description,
            "location": self.location,
            "start": {"dateTime": self.start.isoformat(), "timeZone": timezone_name},
            "end": {
                "dateTime": (self.start + self.duration).isoformat(),
                "timeZone": timezone_name,
            },
            "attendees": [{"email": email} for email in self.attendees],
            "reminders": {"useDefault": True},
        }
        return {k: v for k, v in body.items() if v is not None}


class CalendarSink:
    """Interface for calendar sync."""

    async def create(self, event: CalendarEvent) -> Optional[str]:
        """Create the event and return its external id."""
        raise NotImplementedError

    async def update(self, event_id: str, event: CalendarEvent) -> None:
        raise NotImplementedError

    async def delete(self, event_id: str) -> None:
        raise NotImplementedError


class NullCalendarSink(CalendarSink):
    """Used when no calendar credentials are configured."""

    async def create(self, event: CalendarEvent) -> Optional[str]:
        return None

    async def update(self, event_id: str, event: CalendarEvent) -> None:
        return None

    async def delete(self, event_id: str) -> None:
        return None


class GoogleCalendarSink(CalendarSink):
    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        timezone_name: str = "Europe/Lisbon",
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.calendar_id = calendar_id
        self.timezone_name = timezone_name
        self.timeout = httpx.Timeout(timeout_seconds)
        self.transport = transport

    def _events_url(self, event_id: Optional[str] = None) -> str:
        url = f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events"
        if event_id:
            url += f"/{event_id}"
        return url

    async def _request(self, method: str, url: str, json_body: Optional[dict] = None) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method,
                    url,
                    params={"sendUpdates": "all"},
                    json=json_body,
                    headers=headers,
                )
                response.raise_for_status()
                return response
        except httpx.HTTPError as e:
            raise DependencyError(
                f"Calendar {method} failed",
                details={"url": url, "error": str(e)},
            ) from e

    async def create(self, event: CalendarEvent) -> Optional[str]:
        response = await self._request("POST", self._events_url(), event.to_google(self.timezone_name))
        event_id = response.json().get("id")
        logger.info("Calendar event %s created", event_id)
        return event_id

    async def update(self, event_id: str, event: CalendarEvent) -> None:
        await self._request("PUT", self._events_url(event_id), event.to_google(self.timezone_name))
        logger.info("Calendar event %s updated", event_id)

    async def delete(self, event_id: str) -> None:
        await self._request("DELETE", self._events_url(event_id))
        logger.info("Calendar event %s deleted", event_id)


def get_calendar_sink() -> CalendarSink:
    """FastAPI dependency: the configured calendar sink."""
    if not settings.GOOGLE_CALENDAR_ACCESS_TOKEN:
        return NullCalendarSink()
    return GoogleCalendarSink(
        access_token=settings.GOOGLE_CALENDAR_ACCESS_TOKEN,
        calendar_id=settings.GOOGLE_CALENDAR_ID,
        timezone_name=settings.CALENDAR_TIMEZONE,
    )
