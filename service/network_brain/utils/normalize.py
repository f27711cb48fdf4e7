"""
URL and key normalization utilities.

Ensures consistent format for identifiers across different sources.
"""

import re
import unicodedata
from typing import Optional
from urllib.parse import urlparse


def validate_linkedin_url(value: str) -> Optional[str]:
    """
    Validate and normalize a LinkedIn profile URL.

    Input formats handled:
    - "https://www.linkedin.com/in/username"
    - "http://linkedin.com/in/username/"
    - "www.linkedin.com/in/username?utm_source=share"
    - "linkedin.com/in/username"

    Output format: "https://www.linkedin.com/in/username" (https, www, no
    query string, no trailing slash). The handle keeps its original case.

    Returns None for search, company and other non-profile URLs.
    """
    if not value or not isinstance(value, str):
        return None

    value = value.strip()

    # Search URLs are not profile URLs
    if "/search/" in value or "keywords=" in value:
        return None

    if "linkedin.com" not in value.lower():
        return None

    # Add protocol if missing for proper parsing
    if not value.lower().startswith("http"):
        value = "https://" + value

    parsed = urlparse(value)
    host = parsed.netloc.lower()
    if host not in ("linkedin.com", "www.linkedin.com"):
        return None

    match = re.fullmatch(r'/in/([A-Za-z0-9\-_%]+)/?', parsed.path)
    if not match:
        return None

    return f"https://www.linkedin.com/in/{match.group(1)}"


def slugify_key(value: str) -> str:
    """
    Turn a display name into a lowercase, underscore-separated key.

    "Profile Generation (v2)" -> "profile_generation_v2"
    Keys produced this way match the `EnrichmentMode` values.
    Returns an empty string when nothing usable is left.
    """
    if not value:
        return ""

    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "_", value.lower())
    return value.strip("_")
