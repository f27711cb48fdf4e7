"""
Enrichment Service

Profile enrichment: LinkedIn data via Proxycurl, then LLM-written profile
sections from a stored system prompt.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Optional

import openai
from openai import OpenAI
from pydantic import ValidationError as SchemaError
from supabase import Client

from network_brain.agents.prompts import PROFILE_WRITER_SYSTEM_PROMPT
from network_brain.agents.schemas import (
    DEFAULT_PROMPT_KEY,
    MODE_EXTRA_FIELDS,
    EnrichmentContext,
    EnrichmentMode,
    EnrichmentOutput,
    LinkedInEnrichmentContext,
    PersonContext,
    ProfileGenerationContext,
    TimelineData,
    TimelineSummaryContext,
    missing_output_fields,
)
from network_brain.config import Settings
from network_brain.errors import (
    ConfigurationError,
    UpstreamError,
    ValidationError,
)
from network_brain.logging_config import logger
from network_brain.schemas import Person, SystemPrompt, utcnow_iso
from network_brain.services.people import add_note, load_person, update_person
from network_brain.services.proxycurl import ProxycurlClient, ProxycurlProfile
from network_brain.services.timeline import TimelineService


@dataclass
class EnrichmentResult:
    """Result of one enrichment run."""
    person_id: str
    mode: EnrichmentMode
    prompt_key: str
    output: EnrichmentOutput
    linkedin_changes: dict = field(default_factory=dict)
    note_id: Optional[str] = None


def diff_linkedin_profile(person: Person, profile: ProxycurlProfile) -> dict[str, tuple]:
    """
    Fields where the provider has a value that differs from the stored one.

    Returns {field: (old, new)}. Empty provider values never clear a field.
    """
    incoming = {
        "title": profile.occupation or profile.headline,
        "company": profile.company.name if profile.company else None,
        "location": profile.location,
        "linkedin_url": profile.linkedin_url,
        "image_url": profile.profile_pic_url,
    }

    changes = {}
    for name, new_value in incoming.items():
        old_value = getattr(person, name)
        if new_value and new_value != old_value:
            changes[name] = (old_value, new_value)
    return changes


def format_change_log(changes: dict[str, tuple]) -> str:
    lines = ["Profile updated from LinkedIn enrichment:"]
    for name, (old_value, new_value) in changes.items():
        lines.append(f"- {name}: {old_value or '(empty)'} -> {new_value}")
    return "\n".join(lines)


class EnrichmentService:
    """Orchestrates LinkedIn enrichment and LLM profile writing for a person."""

    def __init__(
        self,
        supabase: Client,
        openai_client: OpenAI,
        proxycurl: ProxycurlClient,
        settings: Settings
    ):
        self.supabase = supabase
        self.openai = openai_client
        self.proxycurl = proxycurl
        self.settings = settings
        self.timeline = TimelineService(supabase)

    async def enrich_person(
        self,
        person_id: str,
        prompt_key: Optional[str] = None,
        timeline: Optional[TimelineData] = None
    ) -> EnrichmentResult:
        """
        Enrich a person's profile.

        Steps run strictly in order and any failure aborts the run. Nothing is
        written until the LLM output has passed validation; LinkedIn changes
        and the generated fields then go out in a single person update.
        """
        person = load_person(self.supabase, person_id)

        profile, changes = await self._lookup_linkedin(person)
        if changes:
            person = person.model_copy(update={k: new for k, (_, new) in changes.items()})

        prompt = self.get_prompt(prompt_key or DEFAULT_PROMPT_KEY)
        mode = EnrichmentMode.resolve(prompt.key, prompt.mode)
        context = self.build_context(mode, person, profile, timeline)

        logger.info(
            f"[ENRICHMENT] Generating for {person_id} with prompt '{prompt.key}' ({mode.value})"
        )
        raw = await asyncio.to_thread(self._complete, prompt.content, context)

        missing = missing_output_fields(raw)
        if missing:
            raise ValidationError(
                f"Generated content missing required fields: {', '.join(missing)}",
                missing_fields=missing
            )
        try:
            output = EnrichmentOutput.model_validate(raw)
        except SchemaError as e:
            invalid = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise ValidationError(
                f"Generated content has invalid fields: {', '.join(invalid)}",
                missing_fields=invalid
            ) from e

        updates = {name: new for name, (_, new) in changes.items()}
        updates.update({
            "summary": output.summary,
            "detailed_summary": output.detailed_summary,
            "intros_sought": output.intros_sought,
            "reasons_to_introduce": output.reasons_to_introduce,
            "last_generated_at": utcnow_iso(),
            "updated_at": utcnow_iso()
        })
        for name in MODE_EXTRA_FIELDS[mode]:
            value = getattr(output, name)
            if value:
                updates[name] = value
        update_person(self.supabase, person_id, updates)

        if changes:
            add_note(self.supabase, person_id, format_change_log(changes))
            logger.info(f"[ENRICHMENT] Applied LinkedIn changes to {person_id}: {list(changes)}")

        note_id = None
        if output.note and output.note.strip():
            note = add_note(self.supabase, person_id, output.note.strip())
            note_id = note.get("id") if note else None

        return EnrichmentResult(
            person_id=person_id,
            mode=mode,
            prompt_key=prompt.key,
            output=output,
            linkedin_changes={k: new for k, (_, new) in changes.items()},
            note_id=note_id
        )

    async def _lookup_linkedin(self, person: Person) -> tuple[Optional[ProxycurlProfile], dict]:
        """
        One Proxycurl lookup, diffed against the stored person.

        Provider failures are logged and enrichment continues without it.
        """
        if not self.proxycurl.configured:
            logger.info("[ENRICHMENT] Proxycurl API key not configured, skipping LinkedIn lookup")
            return None, {}

        if not person.linkedin_url and not person.name:
            return None, {}

        try:
            profile = await self.proxycurl.lookup(linkedin_url=person.linkedin_url, name=person.name)
        except UpstreamError as e:
            logger.warning(f"[ENRICHMENT] LinkedIn lookup failed for {person.id}: {e.message}")
            return None, {}

        if not profile:
            logger.info(f"[ENRICHMENT] No LinkedIn profile found for {person.id}")
            return None, {}

        return profile, diff_linkedin_profile(person, profile)

    def get_prompt(self, key: str) -> SystemPrompt:
        """Active prompt by key; the default key falls back to the built-in writer."""
        try:
            result = self.supabase.table("system_prompts").select("*").eq(
                "key", key
            ).eq("is_active", True).limit(1).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch system prompt: {e}") from e

        rows = [r for r in result.data or [] if not r.get("deleted")]
        if rows:
            return SystemPrompt.model_validate(rows[0])

        if key == DEFAULT_PROMPT_KEY:
            return SystemPrompt(
                key=DEFAULT_PROMPT_KEY,
                name="Profile writer",
                content=PROFILE_WRITER_SYSTEM_PROMPT,
                mode=EnrichmentMode.PROFILE_GENERATION.value
            )

        raise ConfigurationError(f"System prompt '{key}' not found")

    def build_context(
        self,
        mode: EnrichmentMode,
        person: Person,
        profile: Optional[ProxycurlProfile],
        timeline: Optional[TimelineData]
    ) -> EnrichmentContext:
        person_context = PersonContext.from_person(person)

        if mode == EnrichmentMode.LINKEDIN_ENRICHMENT:
            return LinkedInEnrichmentContext(
                person=person_context,
                linkedin=profile.model_dump(exclude_none=True) if profile else {}
            )

        if mode == EnrichmentMode.TIMELINE_SUMMARY:
            return TimelineSummaryContext(
                person=person_context,
                timeline=timeline or TimelineData()
            )

        if timeline is None:
            timeline = self.timeline.get_timeline(person.id)
        communities = self.timeline.get_communities(person.id)
        if not timeline.notes and not timeline.events and not communities:
            logger.warning(f"[ENRICHMENT] No timeline data available for {person.id}")

        return ProfileGenerationContext(
            person=person_context,
            timeline=timeline,
            communities=communities
        )

    def _complete(self, system_prompt: str, context: EnrichmentContext) -> dict:
        """Chat completion in JSON mode; returns the parsed object."""
        if not self.settings.openai_api_key:
            raise ConfigurationError(
                "OpenAI API key is not configured. Please add OPENAI_API_KEY to your environment variables."
            )

        user_content = context.model_dump_json()

        try:
            response = self.openai.chat.completions.create(
                model=self.settings.openai_chat_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content}
                ],
                response_format={"type": "json_object"},
                temperature=0.7
            )
        except openai.AuthenticationError as e:
            raise UpstreamError("OpenAI API key is invalid or expired") from e
        except openai.RateLimitError as e:
            raise UpstreamError("OpenAI API rate limit exceeded - please try again in a few minutes") from e
        except openai.APIStatusError as e:
            raise UpstreamError(f"OpenAI API error: {e.message}") from e
        except openai.OpenAIError as e:
            raise UpstreamError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamError("Empty response from AI")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise UpstreamError("Invalid response format from AI") from e

        if not isinstance(data, dict):
            raise UpstreamError("Invalid response format from AI")
        return data
