import asyncio
from typing import Optional

from openai import OpenAI
from supabase import Client

from network_brain.config import Settings
from network_brain.errors import ConfigurationError, NetworkBrainError, UpstreamError
from network_brain.logging_config import logger
from network_brain.schemas import EmbeddingMetadata, Person, utcnow_iso
from network_brain.services.people import load_person, update_person

# (person field, label) in the order they appear in the embedded text
EMBEDDING_FIELDS = (
    ("name", "Name"),
    ("title", "Title"),
    ("company", "Company"),
    ("summary", "Summary"),
    ("detailed_summary", "Details"),
    ("intros_sought", "Looking to meet"),
    ("reasons_to_introduce", "Can help with"),
)


def build_embedding_text(person: Person, additional_context: Optional[str] = None) -> str:
    """
    Create the text that represents a person for similarity search.

    One "Label: value" line per non-empty profile field, in a fixed order,
    followed by the optional additional context.

    Args:
        person: Person record
        additional_context: Free text about what the person is up to now

    Returns:
        Newline-joined text
    """
    parts = [
        f"{label}: {getattr(person, field)}"
        for field, label in EMBEDDING_FIELDS
        if getattr(person, field)
    ]
    if additional_context:
        parts.append(f"Current Context: {additional_context}")
    return "\n".join(parts)


def included_fields(person: Person) -> list[str]:
    return [field for field, _ in EMBEDDING_FIELDS if getattr(person, field)]


def generate_embedding(client: OpenAI, text: str, model: str) -> list[float]:
    """
    Generate embedding for text.

    Args:
        client: OpenAI client
        text: Text to embed
        model: Embedding model name

    Returns:
        1536-dimensional embedding vector
    """
    kwargs = {"model": model, "input": text}
    if model.startswith("text-embedding-3"):
        kwargs["dimensions"] = 1536

    response = client.embeddings.create(**kwargs)

    return response.data[0].embedding


class EmbeddingService:
    """Computes and stores person embeddings."""

    def __init__(self, supabase: Client, openai_client: OpenAI, settings: Settings):
        self.supabase = supabase
        self.openai = openai_client
        self.settings = settings

    def embed_person(self, person: Person, additional_context: Optional[str] = None) -> EmbeddingMetadata:
        """Embed one person and write the vector plus metadata back."""
        if not self.settings.openai_api_key:
            raise ConfigurationError("OpenAI API key is not configured")

        text = build_embedding_text(person, additional_context)
        model = self.settings.openai_embedding_model

        try:
            embedding = generate_embedding(self.openai, text, model)
        except Exception as e:
            raise UpstreamError(f"Embedding API error: {e}") from e

        metadata = EmbeddingMetadata(
            text_length=len(text),
            fields_included=included_fields(person),
            includes_additional_context=bool(additional_context)
        )

        update_person(self.supabase, person.id, {
            "embedding": embedding,
            "embedding_updated_at": metadata.generated_at,
            "embedding_version": model,
            "last_embedding_data": metadata.model_dump(),
            "updated_at": utcnow_iso()
        })

        logger.info(f"[EMBEDDINGS] Stored embedding for {person.id} ({metadata.text_length} chars)")
        return metadata

    def generate_for_person(self, person_id: str, additional_context: Optional[str] = None) -> EmbeddingMetadata:
        person = load_person(self.supabase, person_id)
        return self.embed_person(person, additional_context)

    def _embed_result(self, person: Person) -> dict:
        try:
            self.embed_person(person)
            return {"id": person.id, "success": True}
        except Exception as e:
            message = e.message if isinstance(e, NetworkBrainError) else str(e)
            logger.error(f"[EMBEDDINGS] Error processing person {person.id}: {message}")
            return {"id": person.id, "success": False, "error": message}

    async def generate_missing(self, limit: int = 10, offset: int = 0) -> list[dict]:
        """
        Embed one page of people that have no embedding yet.

        People are processed concurrently; a failure is reported in that
        person's result and does not stop the others.
        """
        try:
            result = self.supabase.table("people").select("*").is_(
                "embedding", "null"
            ).range(offset, offset + limit - 1).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to fetch people: {e}") from e

        people = [Person.from_row(row) for row in result.data or []]
        people = [p for p in people if not p.deleted]

        if not people:
            return []

        logger.info(f"[EMBEDDINGS] Batch of {len(people)} people (offset {offset})")

        return list(await asyncio.gather(*[
            asyncio.to_thread(self._embed_result, person)
            for person in people
        ]))
