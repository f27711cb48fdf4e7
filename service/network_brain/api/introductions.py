"""
Introductions API.

Generates introduction suggestions from embedding similarity and tracks
their status.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from network_brain.api.limits import limiter, LLM_RATE_LIMIT
from network_brain.clients import ServiceClients, get_clients
from network_brain.errors import NetworkBrainError, UpstreamError, ValidationError
from network_brain.logging_config import logger
from network_brain.schemas import IntroductionStatus
from network_brain.services.introductions import IntroductionMatcher

router = APIRouter(prefix="/api/introductions", tags=["introductions"])


class GenerateIntroductionsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    person_id: Optional[str] = Field(None, alias="personId")


class UpdateIntroductionRequest(BaseModel):
    status: IntroductionStatus


@router.post("/generate")
@limiter.limit(LLM_RATE_LIMIT)
async def generate_introductions(
    request: Request,  # Required for rate limiter
    body: GenerateIntroductionsRequest,
    clients: ServiceClients = Depends(get_clients)
):
    """
    Generate introductions for a person.

    Requires the person to have an embedding. Returns the introductions that
    were stored; a match whose insert fails is left out.
    """
    if not body.person_id:
        raise ValidationError("Person ID is required")

    matcher = IntroductionMatcher(clients.supabase)

    try:
        run = matcher.generate(body.person_id)
    except NetworkBrainError:
        raise
    except Exception as e:
        logger.exception(f"[INTRODUCTIONS] Introduction generation error for {body.person_id}")
        raise UpstreamError("Failed to generate introductions") from e

    if not run.matches:
        return {"message": "No suitable matches found"}

    return {
        "success": True,
        "introductions": run.introductions
    }


@router.get("")
async def list_introductions(
    person_id: Optional[str] = Query(None, alias="personId"),
    clients: ServiceClients = Depends(get_clients)
):
    """Introductions involving a person, newest first."""
    if not person_id:
        raise ValidationError("Person ID is required")

    return IntroductionMatcher(clients.supabase).list_for_person(person_id)


@router.patch("/{introduction_id}")
async def update_introduction(
    introduction_id: str,
    body: UpdateIntroductionRequest,
    clients: ServiceClients = Depends(get_clients)
):
    """Move an introduction along (sent, accepted, declined)."""
    return IntroductionMatcher(clients.supabase).update_status(introduction_id, body.status)
