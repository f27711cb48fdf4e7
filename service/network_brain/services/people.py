"""
People and notes datastore helpers shared by the flows.
"""

from typing import Optional

from supabase import Client

from network_brain.errors import NotFoundError, UpstreamError
from network_brain.logging_config import logger
from network_brain.schemas import Person, utcnow_iso


def load_person(supabase: Client, person_id: str) -> Person:
    """Fetch an active person. Soft-deleted rows count as missing."""
    try:
        result = supabase.table("people").select("*").eq("id", person_id).limit(1).execute()
    except Exception as e:
        raise UpstreamError(f"Failed to fetch person: {e}") from e

    if not result.data:
        raise NotFoundError("Person not found")

    person = Person.from_row(result.data[0])
    if person.deleted:
        raise NotFoundError("Person not found")
    return person


def update_person(supabase: Client, person_id: str, fields: dict):
    try:
        supabase.table("people").update(fields).eq("id", person_id).execute()
    except Exception as e:
        raise UpstreamError(f"Failed to update person: {e}") from e


def add_note(supabase: Client, person_id: str, content: str, note_type: str = "text") -> Optional[dict]:
    """Append a note to a person's timeline."""
    try:
        result = supabase.table("notes").insert({
            "person_id": person_id,
            "content": content,
            "type": note_type
        }).execute()
    except Exception as e:
        raise UpstreamError(f"Failed to insert note: {e}") from e

    return result.data[0] if result.data else None


def soft_delete_person(supabase: Client, person_id: str):
    load_person(supabase, person_id)
    update_person(supabase, person_id, {
        "deleted": True,
        "updated_at": utcnow_iso()
    })
    logger.info(f"[PEOPLE] Soft-deleted person {person_id}")
