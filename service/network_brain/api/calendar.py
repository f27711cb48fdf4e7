"""
Google Calendar API.

Links a user's Google account and pushes published community events to
their primary calendar.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from network_brain.clients import ServiceClients, get_clients
from network_brain.errors import NetworkBrainError
from network_brain.logging_config import logger
from network_brain.middleware.auth import verify_supabase_token, get_user_id
from network_brain.services.calendar_sync import CalendarSyncService

router = APIRouter(prefix="/api", tags=["calendar"])


def _settings_redirect(clients: ServiceClients, **params) -> RedirectResponse:
    base = clients.settings.public_base_url.rstrip("/")
    return RedirectResponse(f"{base}/settings?{urlencode(params)}")


def _service(clients: ServiceClients) -> CalendarSyncService:
    return CalendarSyncService(clients.supabase, clients.calendar, clients.settings)


@router.get("/auth/google/calendar")
async def google_calendar_auth(
    token_payload: dict = Depends(verify_supabase_token),
    clients: ServiceClients = Depends(get_clients)
):
    """Redirect to Google's consent screen for calendar access."""
    user_id = get_user_id(token_payload)
    return RedirectResponse(_service(clients).authorization_url(user_id))


@router.get("/auth/google/callback")
async def google_calendar_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    clients: ServiceClients = Depends(get_clients)
):
    """
    OAuth callback from Google.

    Always answers with a redirect back to the settings page; the outcome is
    in the query string.
    """
    if error:
        logger.warning(f"[CALENDAR] Google OAuth error: {error}")
        return _settings_redirect(clients, google_auth_error=error)
    if not code or not state:
        return _settings_redirect(clients, google_auth_error="Missing authorization code")

    try:
        await _service(clients).complete_authorization(code, state)
    except NetworkBrainError as e:
        logger.error(f"[CALENDAR] OAuth callback failed: {e.message}")
        return _settings_redirect(clients, google_auth_error=e.message)

    return _settings_redirect(clients, google_auth_success="true")


@router.post("/events/sync")
async def sync_events(
    token_payload: dict = Depends(verify_supabase_token),
    clients: ServiceClients = Depends(get_clients)
):
    """Push all published events to the caller's Google Calendar."""
    user_id = get_user_id(token_payload)
    return await _service(clients).sync_events(user_id)
