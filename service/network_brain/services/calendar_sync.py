"""
Google Calendar linking and event sync.

The OAuth `state` is a short-lived HS256 token carrying the user id, so the
callback (which arrives without our bearer token) knows whose refresh token
it is storing.
"""

import time
from typing import Optional

from jose import jwt, JWTError
from supabase import Client

from network_brain.config import Settings
from network_brain.errors import (
    ConfigurationError,
    NetworkBrainError,
    UpstreamError,
    ValidationError,
)
from network_brain.logging_config import logger
from network_brain.services.google_calendar import GoogleCalendarClient

STATE_TTL_SECONDS = 600
STATE_PURPOSE = "google_calendar"


def to_calendar_event(event: dict) -> dict:
    """Map an events row onto a Google Calendar event body."""
    timezone = event.get("timezone") or "UTC"
    start = event["start_time"]
    end = event.get("end_time") or start

    body = {
        "summary": event.get("title") or event.get("summary") or "",
        "description": event.get("description") or "",
        "start": {"dateTime": start, "timeZone": timezone},
        "end": {"dateTime": end, "timeZone": timezone},
    }
    if event.get("location"):
        body["location"] = event["location"]
    return body


class CalendarSyncService:

    def __init__(self, supabase: Client, calendar: GoogleCalendarClient, settings: Settings):
        self.supabase = supabase
        self.calendar = calendar
        self.settings = settings

    def _state_secret(self) -> str:
        if not self.settings.supabase_jwt_secret:
            raise ConfigurationError("SUPABASE_JWT_SECRET is not configured")
        return self.settings.supabase_jwt_secret

    def create_state(self, user_id: str) -> str:
        now = int(time.time())
        return jwt.encode(
            {"sub": user_id, "purpose": STATE_PURPOSE, "iat": now, "exp": now + STATE_TTL_SECONDS},
            self._state_secret(),
            algorithm="HS256"
        )

    def read_state(self, state: str) -> str:
        """User id from a state token; ValidationError if forged or expired."""
        try:
            payload = jwt.decode(state, self._state_secret(), algorithms=["HS256"])
        except JWTError as e:
            raise ValidationError(f"Invalid OAuth state: {e}") from e

        if payload.get("purpose") != STATE_PURPOSE or not payload.get("sub"):
            raise ValidationError("Invalid OAuth state")
        return payload["sub"]

    def authorization_url(self, user_id: str) -> str:
        return self.calendar.authorization_url(self.create_state(user_id))

    async def complete_authorization(self, code: str, state: str) -> str:
        """Exchange the code and store the refresh token. Returns the user id."""
        user_id = self.read_state(state)
        tokens = await self.calendar.exchange_code(code)

        refresh_token = tokens.get("refresh_token")
        if not refresh_token:
            logger.warning(f"[CALENDAR] Missing refresh token for {user_id}; user must re-authorize")
            raise ValidationError("Missing refresh token. Please try connecting again.")

        try:
            self.supabase.table("user_google_tokens").upsert({
                "user_id": user_id,
                "google_refresh_token": refresh_token
            }, on_conflict="user_id").execute()
        except Exception as e:
            raise UpstreamError(f"Failed to save token: {e}") from e

        logger.info(f"[CALENDAR] Linked Google Calendar for {user_id}")
        return user_id

    def _refresh_token_for(self, user_id: str) -> Optional[str]:
        try:
            result = self.supabase.table("user_google_tokens").select(
                "google_refresh_token"
            ).eq("user_id", user_id).limit(1).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch Google token: {e}") from e

        if not result.data:
            return None
        return result.data[0].get("google_refresh_token")

    async def sync_events(self, user_id: str) -> dict:
        """
        Push every published event to the user's primary calendar.

        A failure on one event is logged and counted; the rest still sync.
        """
        if not self.calendar.configured:
            raise ConfigurationError("Google OAuth credentials not configured.")

        refresh_token = self._refresh_token_for(user_id)
        if not refresh_token:
            raise ValidationError("Google account not linked or token missing.")

        access_token = await self.calendar.refresh_access_token(refresh_token)

        try:
            result = self.supabase.table("events").select("*").eq("status", "published").execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch events: {e}") from e

        events = result.data or []
        if not events:
            return {"message": "No published events to sync.", "synced": 0, "failed": 0}

        synced = 0
        failed = 0
        for event in events:
            try:
                created = await self.calendar.upsert_event(
                    access_token,
                    to_calendar_event(event),
                    event_id=event.get("google_calendar_event_id")
                )
                if created.get("id") and created["id"] != event.get("google_calendar_event_id"):
                    self.supabase.table("events").update({
                        "google_calendar_event_id": created["id"]
                    }).eq("id", event["id"]).execute()
                synced += 1
            except NetworkBrainError as e:
                failed += 1
                logger.error(f"[CALENDAR] Error syncing event {event.get('id')}: {e.message}")
            except Exception as e:
                failed += 1
                logger.error(f"[CALENDAR] Error syncing event {event.get('id')}: {e}")

        return {
            "message": f"Successfully processed {len(events)} events.",
            "synced": synced,
            "failed": failed
        }
