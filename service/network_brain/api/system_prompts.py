"""
System Prompts API.

Manage the prompt templates used by profile enrichment.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from network_brain.clients import ServiceClients, get_clients
from network_brain.middleware.auth import verify_supabase_token
from network_brain.services.system_prompts import SystemPromptService

router = APIRouter(
    prefix="/api/system-prompts",
    tags=["system-prompts"],
    dependencies=[Depends(verify_supabase_token)]
)


# ============================================
# Request/Response Models
# ============================================

class CreatePromptRequest(BaseModel):
    name: str
    content: str
    description: str
    mode: Optional[str] = None


class UpdatePromptRequest(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    mode: Optional[str] = None
    is_active: Optional[bool] = None


class PromptResponse(BaseModel):
    id: str
    key: str
    name: str
    content: str
    description: Optional[str] = None
    mode: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ============================================
# Endpoints
# ============================================

@router.get("", response_model=List[PromptResponse])
async def list_prompts(clients: ServiceClients = Depends(get_clients)):
    """All prompts that have not been deleted, newest first."""
    return SystemPromptService(clients.supabase).list_prompts()


@router.post("", response_model=PromptResponse)
async def create_prompt(
    req: CreatePromptRequest,
    clients: ServiceClients = Depends(get_clients)
):
    """
    Create a prompt.

    Its key is derived from the name ("Profile Writer" -> "profile_writer")
    and must be unique.
    """
    return SystemPromptService(clients.supabase).create_prompt(
        req.name, req.content, req.description, req.mode
    )


@router.put("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: str,
    req: UpdatePromptRequest,
    clients: ServiceClients = Depends(get_clients)
):
    return SystemPromptService(clients.supabase).update_prompt(
        prompt_id, req.model_dump(exclude_none=True)
    )


@router.delete("/{prompt_id}")
async def delete_prompt(
    prompt_id: str,
    clients: ServiceClients = Depends(get_clients)
):
    """Soft delete: the row stays, flagged as deleted and inactive."""
    SystemPromptService(clients.supabase).delete_prompt(prompt_id)
    return {"status": "deleted"}
