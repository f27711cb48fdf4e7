"""
Google Calendar client.

OAuth consent/token exchange and event writes against the Calendar v3 REST API.
"""

from typing import Optional
from urllib.parse import urlencode

import httpx

from network_brain.errors import ConfigurationError, UpstreamError

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar.events"]


class GoogleCalendarClient:

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http: httpx.AsyncClient
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.http = http

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    def _require_config(self):
        if not self.configured:
            raise ConfigurationError("Google OAuth credentials not configured correctly.")

    def authorization_url(self, state: str) -> str:
        """Consent screen URL that asks for offline access (a refresh token)."""
        self._require_config()
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(CALENDAR_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def _post_token(self, data: dict) -> dict:
        self._require_config()
        try:
            response = await self.http.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    **data
                },
                timeout=15.0
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Google token request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(f"Google token error: {response.status_code} - {response.text}")
        return response.json()

    async def exchange_code(self, code: str) -> dict:
        """Exchange an authorization code for tokens."""
        return await self._post_token({
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        })

    async def refresh_access_token(self, refresh_token: str) -> str:
        tokens = await self._post_token({
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        })
        access_token = tokens.get("access_token")
        if not access_token:
            raise UpstreamError("Google token response did not include an access token")
        return access_token

    async def upsert_event(
        self,
        access_token: str,
        body: dict,
        event_id: Optional[str] = None
    ) -> dict:
        """Insert an event, or update it in place when its Google id is known."""
        headers = {"Authorization": f"Bearer {access_token}"}
        params = {"sendUpdates": "all"}
        try:
            if event_id:
                response = await self.http.put(
                    f"{CALENDAR_EVENTS_URL}/{event_id}",
                    json=body, headers=headers, params=params, timeout=15.0
                )
            else:
                response = await self.http.post(
                    CALENDAR_EVENTS_URL,
                    json=body, headers=headers, params=params, timeout=15.0
                )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Google Calendar request failed: {e}") from e

        if response.status_code not in (200, 201):
            raise UpstreamError(f"Google Calendar error: {response.status_code} - {response.text}")
        return response.json()
