"""
Embeddings API.

Computes the profile embeddings that introduction matching searches over.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from network_brain.clients import ServiceClients, get_clients
from network_brain.errors import NetworkBrainError, UpstreamError, ValidationError
from network_brain.logging_config import logger
from network_brain.services.embedding import EmbeddingService

router = APIRouter(prefix="/api/embeddings", tags=["embeddings"])


class GenerateEmbeddingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    person_id: Optional[str] = Field(None, alias="personId")
    additional_context: Optional[str] = Field(None, alias="additionalContext")


class BatchResultItem(BaseModel):
    id: str
    success: bool
    error: Optional[str] = None


class BatchResponse(BaseModel):
    success: bool
    processed: int
    results: list[BatchResultItem]


@router.post("")
async def generate_embedding(
    body: GenerateEmbeddingRequest,
    clients: ServiceClients = Depends(get_clients)
):
    """Generate and store the embedding for one person."""
    if not body.person_id:
        raise ValidationError("Person ID is required")

    service = EmbeddingService(clients.supabase, clients.openai, clients.settings)

    try:
        metadata = service.generate_for_person(body.person_id, body.additional_context)
    except NetworkBrainError:
        raise
    except Exception as e:
        logger.exception(f"[EMBEDDINGS] Embedding generation error for {body.person_id}")
        raise UpstreamError("Failed to generate embedding") from e

    return {
        "success": True,
        "message": "Embedding generated and stored successfully",
        "metadata": metadata.model_dump()
    }


@router.get("")
async def generate_missing_embeddings(
    limit: int = Query(10, ge=1),
    offset: int = Query(0, ge=0),
    clients: ServiceClients = Depends(get_clients)
):
    """
    Generate embeddings for one page of people that have none.

    Always 200 once the page is fetched; per-person failures are listed in
    `results`.
    """
    service = EmbeddingService(clients.supabase, clients.openai, clients.settings)

    try:
        results = await service.generate_missing(limit=limit, offset=offset)
    except NetworkBrainError:
        raise
    except Exception as e:
        logger.exception("[EMBEDDINGS] Batch embedding generation error")
        raise UpstreamError("Failed to process batch embedding generation") from e

    if not results:
        return {"message": "No people need embedding updates"}

    return BatchResponse(
        success=True,
        processed=len(results),
        results=[BatchResultItem(**r) for r in results]
    )
