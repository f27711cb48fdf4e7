"""
Application intake.

Turns an application form submission into a person (upserted by email) and
an `applied` membership in the applications community.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from supabase import Client

from network_brain.config import Settings
from network_brain.errors import ConfigurationError, UpstreamError, ValidationError
from network_brain.logging_config import logger
from network_brain.schemas import (
    ApplicationMetadata,
    CommunityMembershipStatus,
    TranscriptItem,
    utcnow_iso,
)

SUPPORTED_SCHEMA_VERSIONS = (1,)

# Transcript question fragments per field, tried in order
TRANSCRIPT_QUESTIONS = {
    "name": ("what's your name",),
    "email": ("what's the best email",),
    "phone": ("what's your phone number",),
    "linkedin_url": ("linkedin profile",),
    "location": ("where do you live",),
    "gender": ("what is your gender",),
    "title": ("dream title",),
    "company": ("part of",),
    "summary": ("what's new and unique",),
    "current_focus": ("what's the plan", "what are you up to next"),
    "startup_experience": ("biggest challenge", "biggest blocker"),
    "last_startup_role": ("what sort of roles",),
    "preferred_role": ("what sort of roles would you take on",),
    "preferred_company_stage": ("what stage company",),
    "skills": ("what best describes your skillset",),
    "interests": ("sectors you're most interested in",),
    "long_term_goal": ("long-term goal",),
    "intros_sought": ("introductions would be most helpful",),
    "reasons_to_introduce": ("what best describes your skillset",),
    "referral_source": ("how did you hear about us",),
    "timeline": ("timeline for making the leap",),
    "company_name": ("have a name yet",),
    "co_founders": ("do you have co-founders",),
    "sectors": ("sectors you're most interested in",),
}

PERSON_FIELDS = (
    "name", "email", "phone", "linkedin_url", "location", "title", "company",
    "summary", "current_focus", "startup_experience", "last_startup_role",
    "preferred_role", "preferred_company_stage", "long_term_goal",
    "intros_sought", "reasons_to_introduce", "referral_source", "skills",
    "interests",
)

METADATA_FIELDS = ("referral_source", "gender", "company_name", "co_founders", "timeline", "sectors")


def _split_list(value):
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


CommaList = Annotated[Optional[list[str]], BeforeValidator(_split_list)]


class ApplicationPayload(BaseModel):
    """
    Version 1 of the application webhook contract.

    Unknown top-level keys are accepted and kept in the metadata.
    """

    model_config = ConfigDict(extra="allow")

    schema_version: int = 1
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    location: Optional[str] = None
    gender: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    summary: Optional[str] = None
    current_focus: Optional[str] = None
    startup_experience: Optional[str] = None
    last_startup_role: Optional[str] = None
    preferred_role: Optional[str] = None
    preferred_company_stage: Optional[str] = None
    long_term_goal: Optional[str] = None
    intros_sought: Optional[str] = None
    reasons_to_introduce: Optional[str] = None
    referral_source: Optional[str] = None
    timeline: Optional[str] = None
    company_name: Optional[str] = None
    co_founders: Optional[str] = None
    sectors: Optional[str] = None
    skills: CommaList = None
    interests: CommaList = None
    transcript: list[TranscriptItem] = Field(default_factory=list)


def find_answer(transcript: list[TranscriptItem], fragment: str) -> Optional[str]:
    """First non-empty answer whose question contains the fragment (case-insensitive)."""
    fragment = fragment.lower()
    for item in transcript:
        if fragment in item.question.lower() and item.answer and item.answer.strip():
            return item.answer.strip()
    return None


def extract_fields(payload: ApplicationPayload) -> dict:
    """Transcript answers first, then the matching top-level field."""
    extracted = {}
    for name, fragments in TRANSCRIPT_QUESTIONS.items():
        value = None
        for fragment in fragments:
            value = find_answer(payload.transcript, fragment)
            if value:
                break
        if value and name in ("skills", "interests"):
            value = _split_list(value)
        extracted[name] = value or getattr(payload, name)
    return extracted


class ApplicationService:

    def __init__(self, supabase: Client, settings: Settings):
        self.supabase = supabase
        self.settings = settings

    def process(self, payload: ApplicationPayload) -> dict:
        """Upsert the applicant and their membership. Returns the person row."""
        if payload.schema_version not in SUPPORTED_SCHEMA_VERSIONS:
            raise ValidationError(f"Unsupported application schema version: {payload.schema_version}")

        fields = extract_fields(payload)
        if not fields.get("name") or not fields.get("email"):
            raise ValidationError("Name and email are required")

        community_id = self.settings.applications_community_id
        if not community_id:
            raise ConfigurationError("Applications community is not configured")

        metadata = ApplicationMetadata(
            transcript=payload.transcript,
            extra=payload.model_extra or {},
            **{name: fields.get(name) for name in METADATA_FIELDS}
        )

        row = {name: fields[name] for name in PERSON_FIELDS if fields.get(name)}
        row["email"] = row["email"].strip()
        if fields.get("long_term_goal"):
            row["detailed_summary"] = fields["long_term_goal"]
        row["application_metadata"] = metadata.model_dump(mode="json")
        row["application_date"] = utcnow_iso()

        try:
            result = self.supabase.table("people").upsert(row, on_conflict="email").execute()
        except Exception as e:
            logger.error(f"[WEBHOOK] Error storing application: {e}")
            raise UpstreamError("Failed to store application") from e

        if not result.data:
            raise UpstreamError("Failed to store application")
        person = result.data[0]

        try:
            self.supabase.table("community_members").upsert({
                "community_id": community_id,
                "person_id": person["id"],
                "membership_status": CommunityMembershipStatus.APPLIED.value
            }, on_conflict="community_id,person_id").execute()
        except Exception as e:
            logger.error(f"[WEBHOOK] Error updating community membership: {e}")
            raise UpstreamError("Failed to update community membership") from e

        logger.info(f"[WEBHOOK] Application stored for person {person['id']}")
        return person
