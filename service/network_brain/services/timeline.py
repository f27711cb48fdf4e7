"""
Timeline reader.

Notes and events for a person, newest first. Also supplies the timeline and
community context for profile generation.
"""

from typing import Optional

from supabase import Client

from network_brain.agents.schemas import (
    CommunityContext,
    TimelineData,
    TimelineEvent,
    TimelineNote,
)
from network_brain.errors import UpstreamError

EVENT_COLUMNS = """
    id,
    title,
    description,
    start_time,
    event_attendees!inner (
        person_id,
        response_status
    )
"""


class TimelineService:

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_notes(self, person_id: str, offset: int = 0, limit: Optional[int] = None) -> list[dict]:
        query = self.supabase.table("notes").select("*").eq(
            "person_id", person_id
        ).order("created_at", desc=True)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)

        try:
            result = query.execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch notes: {e}") from e
        return result.data or []

    def get_events(self, person_id: str, offset: int = 0, limit: Optional[int] = None) -> list[dict]:
        """Events the person attends, with their `response_status` lifted onto the event."""
        query = self.supabase.table("events").select(EVENT_COLUMNS).eq(
            "event_attendees.person_id", person_id
        ).order("start_time", desc=True)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)

        try:
            result = query.execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch events: {e}") from e

        events = []
        for event in result.data or []:
            attendees = event.get("event_attendees") or []
            events.append({
                **event,
                "response_status": attendees[0].get("response_status") if attendees else None
            })
        return events

    def get_page(self, person_id: str, item_type: str, page: int = 1, page_size: int = 10) -> list[dict]:
        offset = (max(page, 1) - 1) * page_size
        if item_type == "notes":
            return self.get_notes(person_id, offset, page_size)
        return self.get_events(person_id, offset, page_size)

    def get_timeline(self, person_id: str) -> TimelineData:
        """Full timeline in the shape the LLM context expects."""
        notes = self.get_notes(person_id)
        events = self.get_events(person_id)
        return TimelineData(
            notes=[
                TimelineNote(content=n.get("content") or "", created_at=n.get("created_at"))
                for n in notes
            ],
            events=[
                TimelineEvent(
                    title=e.get("title") or "",
                    description=e.get("description") or "",
                    date=e.get("start_time"),
                    status=e.get("response_status")
                )
                for e in events
            ]
        )

    def get_communities(self, person_id: str) -> list[CommunityContext]:
        try:
            result = self.supabase.table("community_members").select("""
                membership_status,
                community:communities (
                    id,
                    name,
                    description
                )
            """).eq("person_id", person_id).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch memberships: {e}") from e

        communities = []
        for membership in result.data or []:
            community = membership.get("community") or {}
            communities.append(CommunityContext(
                name=community.get("name") or "",
                status=membership.get("membership_status") or "prospect",
                description=community.get("description") or ""
            ))
        return communities
