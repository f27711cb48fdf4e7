import time

import httpx
from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError

from network_brain.config import get_settings
from network_brain.logging_config import logger

security = HTTPBearer()

# Cache JWKS for 10 minutes
_jwks_cache = {"keys": None, "fetched_at": 0}
JWKS_CACHE_SECONDS = 600


async def _get_jwks() -> list:
    """Fetch the project's JWKS, with caching. Stale keys beat no keys."""
    now = time.time()
    if _jwks_cache["keys"] and (now - _jwks_cache["fetched_at"]) < JWKS_CACHE_SECONDS:
        return _jwks_cache["keys"]

    settings = get_settings()
    jwks_url = f"{settings.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            _jwks_cache["keys"] = response.json().get("keys", [])
            _jwks_cache["fetched_at"] = now
            logger.info(f"[AUTH] Fetched JWKS with {len(_jwks_cache['keys'])} keys")
            return _jwks_cache["keys"]
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"[AUTH] Failed to fetch JWKS: {e}")
        return _jwks_cache["keys"] or []


def _find_key_by_kid(keys: list, kid: str) -> dict | None:
    for key in keys:
        if key.get("kid") == kid:
            return key
    return None


async def verify_supabase_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> dict:
    """
    Validate Supabase JWT from Authorization header.

    HS256 tokens are checked against the project secret, ES256 tokens against
    the project's JWKS.
    """
    settings = get_settings()
    token = credentials.credentials

    alg = "unknown"
    try:
        header = jwt.get_unverified_header(token)
        alg = header.get("alg", "unknown")
        kid = header.get("kid")

        if alg == "HS256":
            payload = jwt.decode(
                token,
                settings.supabase_jwt_secret,
                algorithms=["HS256"],
                options={"verify_aud": False}
            )
        elif alg == "ES256":
            jwks = await _get_jwks()
            if not jwks:
                raise JWTError("Could not fetch JWKS for ES256 verification")

            jwk = _find_key_by_kid(jwks, kid) if kid else jwks[0]
            if not jwk:
                raise JWTError(f"No matching key found for kid={kid}")

            payload = jwt.decode(
                token,
                jwk,
                algorithms=["ES256"],
                options={"verify_aud": False}
            )
        else:
            raise JWTError(f"Unsupported algorithm: {alg}")

        return payload
    except JWTError as e:
        logger.warning(f"[AUTH] JWT verification failed: {e}, algorithm was: {alg}")
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired authentication token"
        )


def get_user_id(token_payload: dict) -> str:
    """Extract user_id from verified token payload."""
    return token_payload.get("sub")
