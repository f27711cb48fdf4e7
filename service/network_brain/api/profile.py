"""
Profile API.

AI profile enrichment for a person.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from network_brain.agents.schemas import TimelineData
from network_brain.api.limits import limiter, LLM_RATE_LIMIT
from network_brain.clients import ServiceClients, get_clients
from network_brain.errors import NetworkBrainError, UpstreamError, ValidationError
from network_brain.logging_config import logger
from network_brain.services.enrichment import EnrichmentService

router = APIRouter(prefix="/api/profile", tags=["profile"])


class GenerateProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    person_id: Optional[str] = Field(None, alias="personId")
    system_prompt_key: Optional[str] = Field(None, alias="systemPromptKey")
    timeline_data: Optional[TimelineData] = Field(None, alias="timelineData")


class GeneratedProfile(BaseModel):
    summary: str
    detailed_summary: str
    intros_sought: str
    reasons_to_introduce: str
    note: Optional[str] = None


class GenerateProfileResponse(BaseModel):
    success: bool
    data: GeneratedProfile
    mode: str
    prompt_key: str
    linkedin_changes: dict


@router.post("/generate", response_model=GenerateProfileResponse)
@limiter.limit(LLM_RATE_LIMIT)
async def generate_profile(
    request: Request,  # Required for rate limiter
    body: GenerateProfileRequest,
    clients: ServiceClients = Depends(get_clients)
):
    """
    Enrich a person's profile.

    Looks the person up on LinkedIn when possible, then asks the LLM to write
    summary, detailed summary, intros sought and reasons to introduce using
    the selected system prompt.
    """
    if not body.person_id:
        raise ValidationError("Person ID is required")

    service = EnrichmentService(
        clients.supabase, clients.openai, clients.proxycurl, clients.settings
    )

    try:
        result = await service.enrich_person(
            body.person_id,
            prompt_key=body.system_prompt_key,
            timeline=body.timeline_data
        )
    except NetworkBrainError:
        raise
    except Exception as e:
        logger.exception(f"[ENRICHMENT] Profile generation error for {body.person_id}")
        raise UpstreamError(f"Failed to generate profile: {e}") from e

    return GenerateProfileResponse(
        success=True,
        data=GeneratedProfile(**result.output.model_dump(
            include={"summary", "detailed_summary", "intros_sought", "reasons_to_introduce", "note"}
        )),
        mode=result.mode.value,
        prompt_key=result.prompt_key,
        linkedin_changes=result.linkedin_changes
    )
