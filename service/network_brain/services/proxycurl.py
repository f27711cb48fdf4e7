"""
Proxycurl client.

LinkedIn profile lookups used by profile enrichment.
"""

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from network_brain.errors import UpstreamError
from network_brain.logging_config import logger
from network_brain.utils import validate_linkedin_url


class ProxycurlCompany(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None


class ProxycurlProfile(BaseModel):
    """Subset of the Proxycurl person payload that maps onto a person record."""

    model_config = ConfigDict(extra="allow")

    linkedin_url: Optional[str] = None
    full_name: Optional[str] = None
    occupation: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    city: Optional[str] = None
    country_full_name: Optional[str] = None
    company: Optional[ProxycurlCompany] = None
    profile_pic_url: Optional[str] = None

    @property
    def location(self) -> Optional[str]:
        parts = [p for p in (self.city, self.country_full_name) if p]
        return ", ".join(parts) if parts else None


def _parse_profile(data: dict) -> ProxycurlProfile:
    try:
        return ProxycurlProfile.model_validate(data)
    except ValidationError as e:
        raise UpstreamError(f"Unexpected Proxycurl profile payload: {e.error_count()} invalid field(s)") from e


class ProxycurlClient:
    """Thin wrapper over the Proxycurl people API."""

    def __init__(self, api_key: str, base_url: str, http: httpx.AsyncClient):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.http = http

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _get(self, path: str, params: dict) -> Optional[dict]:
        try:
            response = await self.http.get(
                f"{self.base_url}/{path}",
                params=params,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=30.0
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Proxycurl request failed: {e}") from e

        if response.status_code == 200:
            try:
                data = response.json()
            except ValueError as e:
                raise UpstreamError(f"Proxycurl returned invalid JSON: {e}") from e
            if not isinstance(data, dict):
                raise UpstreamError("Proxycurl returned an unexpected payload")
            return data
        elif response.status_code == 404:
            return None  # Person not found
        else:
            raise UpstreamError(f"Proxycurl API error: {response.status_code} - {response.text}")

    async def fetch_profile(self, linkedin_url: str) -> Optional[ProxycurlProfile]:
        """Fetch a profile by LinkedIn URL. Returns None if not found."""
        url = validate_linkedin_url(linkedin_url)
        if not url:
            logger.info(f"[ENRICHMENT] Skipping non-profile LinkedIn URL: {linkedin_url}")
            return None

        data = await self._get("profile", {"url": url})
        if not data:
            return None
        profile = _parse_profile(data)
        if not profile.linkedin_url:
            profile.linkedin_url = url
        return profile

    async def search_by_name(self, name: str) -> Optional[ProxycurlProfile]:
        """
        Search by full name and take the best (first) result.

        Less reliable than a URL lookup; only used when no URL is stored.
        """
        data = await self._get("search", {"query": name})
        if not data:
            return None
        results = data.get("results") or []
        if not results or not isinstance(results[0], dict):
            return None
        return _parse_profile(results[0])

    async def lookup(
        self,
        linkedin_url: Optional[str] = None,
        name: Optional[str] = None
    ) -> Optional[ProxycurlProfile]:
        """Single provider call: URL lookup when possible, otherwise name search."""
        if linkedin_url and validate_linkedin_url(linkedin_url):
            return await self.fetch_profile(linkedin_url)
        if name:
            return await self.search_by_name(name)
        return None
