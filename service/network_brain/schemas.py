"""
Typed records for the tables the API flows read and write.

Rows come back from Supabase as dicts; these models give them a shape at the
service boundary. Unknown columns are ignored.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CommunityMembershipStatus(str, Enum):
    PROSPECT = "prospect"
    APPLIED = "applied"
    NOMINATED = "nominated"
    APPROVED = "approved"
    INACTIVE = "inactive"


class EventResponseStatus(str, Enum):
    NEEDS_ACTION = "needsAction"
    DECLINED = "declined"
    TENTATIVE = "tentative"
    ACCEPTED = "accepted"


class IntroductionStatus(str, Enum):
    GENERATED = "generated"
    SENT = "sent"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class Person(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    summary: Optional[str] = None
    detailed_summary: Optional[str] = None
    intros_sought: Optional[str] = None
    reasons_to_introduce: Optional[str] = None
    skills: Optional[list[str]] = None
    interests: Optional[list[str]] = None
    current_focus: Optional[str] = None
    startup_experience: Optional[str] = None
    last_startup_role: Optional[str] = None
    preferred_role: Optional[str] = None
    preferred_company_stage: Optional[str] = None
    long_term_goal: Optional[str] = None
    embedding: Optional[list[float]] = None
    embedding_version: Optional[str] = None
    embedding_updated_at: Optional[str] = None
    last_embedding_data: Optional[dict] = None
    deleted: bool = False

    @classmethod
    def from_row(cls, row: dict) -> "Person":
        row = dict(row)
        embedding = row.get("embedding")
        # pgvector columns come back over PostgREST as a "[0.1,0.2,...]" string
        if isinstance(embedding, str):
            row["embedding"] = [float(x) for x in embedding.strip("[]").split(",") if x.strip()]
        row["deleted"] = bool(row.get("deleted"))
        return cls.model_validate(row)


class MatchingRationale(BaseModel):
    source_reason: str
    target_reason: str


class Introduction(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    person_a_id: str
    person_b_id: str
    matching_score: float
    status: IntroductionStatus = IntroductionStatus.GENERATED
    matching_rationale: MatchingRationale


class SystemPrompt(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    key: str
    name: str
    content: str
    description: Optional[str] = None
    mode: Optional[str] = None
    is_active: bool = True
    deleted: bool = False


class EmbeddingMetadata(BaseModel):
    """Stored in people.last_embedding_data."""

    schema_version: int = 1
    text_length: int
    fields_included: list[str]
    generated_at: str = Field(default_factory=utcnow_iso)
    includes_additional_context: bool = False


class TranscriptItem(BaseModel):
    question: str
    answer: Optional[str] = None


class ApplicationMetadata(BaseModel):
    """Stored in people.application_metadata for webhook applications."""

    schema_version: int = 1
    received_at: str = Field(default_factory=utcnow_iso)
    referral_source: Optional[str] = None
    gender: Optional[str] = None
    company_name: Optional[str] = None
    co_founders: Optional[str] = None
    timeline: Optional[str] = None
    sectors: Optional[str] = None
    transcript: list[TranscriptItem] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict)
