"""
People API.
"""

from fastapi import APIRouter, Depends

from network_brain.clients import ServiceClients, get_clients
from network_brain.services.people import load_person, soft_delete_person

router = APIRouter(prefix="/api/people", tags=["people"])


@router.get("/{person_id}")
async def get_person(
    person_id: str,
    clients: ServiceClients = Depends(get_clients)
):
    """Person profile. The embedding vector itself is left out."""
    person = load_person(clients.supabase, person_id)
    return person.model_dump(exclude={"embedding"})


@router.delete("/{person_id}")
async def delete_person(
    person_id: str,
    clients: ServiceClients = Depends(get_clients)
):
    """Soft delete. The person drops out of reads, matching and batches."""
    soft_delete_person(clients.supabase, person_id)
    return {"status": "deleted"}
