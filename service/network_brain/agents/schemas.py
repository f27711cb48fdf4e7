from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from network_brain.schemas import Person


class EnrichmentMode(str, Enum):
    """Which context the LLM sees; each mode has its own context schema."""
    PROFILE_GENERATION = "profile_generation"
    LINKEDIN_ENRICHMENT = "linkedin_enrichment"
    TIMELINE_SUMMARY = "timeline_summary"

    @classmethod
    def resolve(cls, prompt_key: Optional[str], declared_mode: Optional[str] = None) -> "EnrichmentMode":
        """Mode named on the prompt row wins, then the key itself, then the default."""
        for candidate in (declared_mode, prompt_key):
            if not candidate:
                continue
            try:
                return cls(candidate.strip().lower().replace("-", "_"))
            except ValueError:
                continue
        return cls.PROFILE_GENERATION


DEFAULT_PROMPT_KEY = EnrichmentMode.PROFILE_GENERATION.value


# ============================================
# Context schemas
# ============================================

class PersonContext(BaseModel):
    name: str = ""
    email: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    current_focus: str = ""
    startup_experience: str = ""
    last_startup_role: str = ""
    preferred_role: str = ""
    preferred_company_stage: str = ""
    long_term_goal: str = ""

    @classmethod
    def from_person(cls, person: Person) -> "PersonContext":
        values = {}
        for name, field in cls.model_fields.items():
            value = getattr(person, name, None)
            values[name] = value if value else field.get_default(call_default_factory=True)
        return cls(**values)


class TimelineNote(BaseModel):
    content: str
    created_at: Optional[str] = None


class TimelineEvent(BaseModel):
    title: str = ""
    description: str = ""
    date: Optional[str] = None
    status: Optional[str] = None


class TimelineData(BaseModel):
    notes: list[TimelineNote] = Field(default_factory=list)
    events: list[TimelineEvent] = Field(default_factory=list)


class CommunityContext(BaseModel):
    name: str = ""
    status: str = "prospect"
    description: str = ""


class ProfileGenerationContext(BaseModel):
    mode: Literal[EnrichmentMode.PROFILE_GENERATION] = EnrichmentMode.PROFILE_GENERATION
    person: PersonContext
    timeline: TimelineData
    communities: list[CommunityContext] = Field(default_factory=list)


class LinkedInEnrichmentContext(BaseModel):
    mode: Literal[EnrichmentMode.LINKEDIN_ENRICHMENT] = EnrichmentMode.LINKEDIN_ENRICHMENT
    person: PersonContext
    linkedin: dict = Field(default_factory=dict)


class TimelineSummaryContext(BaseModel):
    mode: Literal[EnrichmentMode.TIMELINE_SUMMARY] = EnrichmentMode.TIMELINE_SUMMARY
    person: PersonContext
    timeline: TimelineData


EnrichmentContext = Union[ProfileGenerationContext, LinkedInEnrichmentContext, TimelineSummaryContext]


# ============================================
# LLM output
# ============================================

REQUIRED_OUTPUT_FIELDS = ("summary", "detailed_summary", "intros_sought", "reasons_to_introduce")

# Extra person columns each mode is allowed to overwrite
MODE_EXTRA_FIELDS = {
    EnrichmentMode.PROFILE_GENERATION: (),
    EnrichmentMode.LINKEDIN_ENRICHMENT: ("title", "company", "skills", "interests"),
    EnrichmentMode.TIMELINE_SUMMARY: (),
}


class EnrichmentOutput(BaseModel):
    summary: str
    detailed_summary: str
    intros_sought: str
    reasons_to_introduce: str
    title: Optional[str] = None
    company: Optional[str] = None
    skills: Optional[list[str]] = None
    interests: Optional[list[str]] = None
    note: Optional[str] = None

    @field_validator("skills", "interests", mode="before")
    @classmethod
    def split_comma_string(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


def missing_output_fields(raw: dict) -> list[str]:
    """Required fields that are absent or empty in the model's JSON."""
    return [f for f in REQUIRED_OUTPUT_FIELDS if not raw.get(f)]
