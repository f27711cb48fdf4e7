from typing import Optional

from fastapi import APIRouter, Depends, Query

from network_brain.clients import ServiceClients, get_clients
from network_brain.errors import ValidationError
from network_brain.services.timeline import TimelineService

router = APIRouter(prefix="/api/timeline", tags=["timeline"])

TIMELINE_TYPES = ("notes", "events")


@router.get("")
async def get_timeline(
    person_id: Optional[str] = Query(None, alias="personId"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
    item_type: Optional[str] = Query(None, alias="type"),
    clients: ServiceClients = Depends(get_clients)
):
    """One page of a person's notes or events, newest first."""
    if not person_id:
        raise ValidationError("Person ID is required")
    if item_type not in TIMELINE_TYPES:
        raise ValidationError("Invalid type parameter")

    return TimelineService(clients.supabase).get_page(person_id, item_type, page, page_size)
