"""
Introduction Matcher

Suggests introductions from embedding similarity between people.
"""

from dataclasses import dataclass, field

from supabase import Client

from network_brain.errors import NotFoundError, PreconditionError, UpstreamError
from network_brain.logging_config import logger
from network_brain.schemas import (
    Introduction,
    IntroductionStatus,
    MatchingRationale,
    Person,
    utcnow_iso,
)
from network_brain.services.people import load_person

SIMILARITY_THRESHOLD = 0.78  # Minimum cosine similarity for a suggestion
MAX_MATCHES = 5  # Maximum number of introductions per run


@dataclass
class IntroductionRun:
    """Outcome of one generation run."""
    matches: int
    introductions: list[dict] = field(default_factory=list)


def generate_source_reason(match: dict) -> str:
    """Why the source person should meet the match."""
    reasons = []

    if match.get("title"):
        reasons.append(f"They are a {match['title']}")

    if match.get("company"):
        reasons.append(f"at {match['company']}")

    return " ".join(reasons) if reasons else "They might be a valuable connection"


def generate_target_reason(source: Person) -> str:
    """Why the match should meet the source person."""
    reasons = []

    if source.title:
        reasons.append(f"They are a {source.title}")

    if source.company:
        reasons.append(f"at {source.company}")

    if source.reasons_to_introduce:
        reasons.append(source.reasons_to_introduce)

    return " ".join(reasons) if reasons else "They might be interested in connecting"


class IntroductionMatcher:

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def find_matches(self, source: Person) -> list[dict]:
        """
        Nearest neighbours of the source person's embedding.

        The `match_people` RPC already applies threshold and count; results
        are re-checked here so nothing below the threshold, beyond the cap,
        or pointing back at the source can produce an introduction.
        """
        if not source.embedding:
            raise PreconditionError("Source person embedding not found")

        try:
            result = self.supabase.rpc("match_people", {
                "query_embedding": source.embedding,
                "match_threshold": SIMILARITY_THRESHOLD,
                "match_count": MAX_MATCHES,
                "source_person_id": source.id
            }).execute()
        except Exception as e:
            raise UpstreamError(f"Similarity search failed: {e}") from e

        matches = [
            m for m in result.data or []
            if m.get("id")
            and m["id"] != source.id
            and float(m.get("similarity") or 0) >= SIMILARITY_THRESHOLD
        ]
        matches.sort(key=lambda m: float(m["similarity"]), reverse=True)
        return matches[:MAX_MATCHES]

    def generate(self, person_id: str) -> IntroductionRun:
        """
        Create one introduction per match.

        A failed insert is logged and that match is dropped; the rest are
        still returned. Previously generated pairs are not checked.
        """
        source = load_person(self.supabase, person_id)
        if not source.embedding:
            raise PreconditionError("Source person embedding not found")

        matches = self.find_matches(source)
        logger.info(f"[INTRODUCTIONS] {len(matches)} matches for {person_id}")

        introductions = []
        for match in matches:
            intro = Introduction(
                person_a_id=source.id,
                person_b_id=match["id"],
                matching_score=float(match["similarity"]),
                status=IntroductionStatus.GENERATED,
                matching_rationale=MatchingRationale(
                    source_reason=generate_source_reason(match),
                    target_reason=generate_target_reason(source)
                )
            )

            try:
                result = self.supabase.table("introductions").insert(
                    intro.model_dump(mode="json", exclude_none=True)
                ).execute()
            except Exception as e:
                logger.error(f"[INTRODUCTIONS] Error creating introduction {source.id} -> {match['id']}: {e}")
                continue

            if not result.data:
                logger.error(f"[INTRODUCTIONS] Insert returned no row for {source.id} -> {match['id']}")
                continue

            introductions.append({**result.data[0], "people": match})

        return IntroductionRun(matches=len(matches), introductions=introductions)

    def list_for_person(self, person_id: str) -> list[dict]:
        """Introductions where the person is on either side, newest first."""
        try:
            result = self.supabase.table("introductions").select("*").or_(
                f"person_a_id.eq.{person_id},person_b_id.eq.{person_id}"
            ).order("created_at", desc=True).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch introductions: {e}") from e
        return result.data or []

    def update_status(self, introduction_id: str, status: IntroductionStatus) -> dict:
        try:
            result = self.supabase.table("introductions").update({
                "status": status.value,
                "updated_at": utcnow_iso()
            }).eq("id", introduction_id).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to update introduction: {e}") from e

        if not result.data:
            raise NotFoundError("Introduction not found")
        return result.data[0]
