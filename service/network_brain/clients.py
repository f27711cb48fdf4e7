"""
Process-wide clients.

Built once at startup and handed to route handlers through `get_clients`,
closed again on shutdown.
"""

from dataclasses import dataclass

import httpx
from fastapi import Request
from openai import OpenAI
from supabase import Client

from network_brain.config import Settings
from network_brain.supabase_client import create_supabase_admin
from network_brain.services.proxycurl import ProxycurlClient
from network_brain.services.google_calendar import GoogleCalendarClient


@dataclass
class ServiceClients:
    settings: Settings
    supabase: Client
    openai: OpenAI
    proxycurl: ProxycurlClient
    calendar: GoogleCalendarClient
    http: httpx.AsyncClient

    async def aclose(self):
        await self.http.aclose()
        self.openai.close()


def build_clients(settings: Settings) -> ServiceClients:
    http = httpx.AsyncClient()
    return ServiceClients(
        settings=settings,
        supabase=create_supabase_admin(settings),
        openai=OpenAI(
            api_key=settings.openai_api_key,
            organization=settings.openai_org_id or None
        ),
        proxycurl=ProxycurlClient(
            settings.proxycurl_api_key,
            settings.proxycurl_base_url,
            http
        ),
        calendar=GoogleCalendarClient(
            settings.google_client_id,
            settings.google_client_secret,
            settings.google_redirect_uri,
            http
        ),
        http=http,
    )


def get_clients(request: Request) -> ServiceClients:
    """FastAPI dependency: the clients built at startup."""
    return request.app.state.clients
