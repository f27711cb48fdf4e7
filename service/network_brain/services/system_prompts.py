"""
System prompt storage.

Prompts are looked up by `key` during enrichment; deleting one only flags it.
"""

from typing import Optional
from uuid import uuid4

from supabase import Client

from network_brain.agents.schemas import EnrichmentMode
from network_brain.errors import NotFoundError, UpstreamError, ValidationError
from network_brain.schemas import utcnow_iso
from network_brain.utils import slugify_key


def _check_mode(mode: Optional[str]):
    if mode is None:
        return
    valid = [m.value for m in EnrichmentMode]
    if mode not in valid:
        raise ValidationError(f"Unknown enrichment mode '{mode}'. Expected one of: {', '.join(valid)}")


class SystemPromptService:

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_prompts(self) -> list[dict]:
        try:
            result = self.supabase.table("system_prompts").select("*").order(
                "created_at", desc=True
            ).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to load system prompts: {e}") from e
        return [p for p in result.data or [] if not p.get("deleted")]

    def get_prompt(self, prompt_id: str) -> dict:
        try:
            result = self.supabase.table("system_prompts").select("*").eq(
                "id", prompt_id
            ).limit(1).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to load system prompt: {e}") from e

        if not result.data or result.data[0].get("deleted"):
            raise NotFoundError("System prompt not found")
        return result.data[0]

    def create_prompt(
        self,
        name: str,
        content: str,
        description: str,
        mode: Optional[str] = None
    ) -> dict:
        if not name or not content or not description:
            raise ValidationError("Name, content, and description are required")
        _check_mode(mode)

        key = slugify_key(name) or uuid4().hex

        try:
            existing = self.supabase.table("system_prompts").select("id, deleted").eq("key", key).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to check system prompt key: {e}") from e
        if any(not p.get("deleted") for p in existing.data or []):
            raise ValidationError(f"A system prompt with key '{key}' already exists")

        row = {
            "key": key,
            "name": name,
            "content": content,
            "description": description,
            "deleted": False,
            "is_active": True
        }
        if mode:
            row["mode"] = mode

        try:
            result = self.supabase.table("system_prompts").insert(row).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to create system prompt: {e}") from e

        if not result.data:
            raise UpstreamError("Failed to create system prompt")
        return result.data[0]

    def update_prompt(self, prompt_id: str, fields: dict) -> dict:
        self.get_prompt(prompt_id)

        update_data = {k: v for k, v in fields.items() if v is not None}
        if not update_data:
            raise ValidationError("No fields to update")
        _check_mode(update_data.get("mode"))
        update_data["updated_at"] = utcnow_iso()

        try:
            result = self.supabase.table("system_prompts").update(update_data).eq(
                "id", prompt_id
            ).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to save system prompt: {e}") from e

        if not result.data:
            raise UpstreamError("Update failed")
        return result.data[0]

    def delete_prompt(self, prompt_id: str):
        self.get_prompt(prompt_id)
        try:
            self.supabase.table("system_prompts").update({
                "deleted": True,
                "is_active": False,
                "updated_at": utcnow_iso()
            }).eq("id", prompt_id).execute()
        except Exception as e:
            raise UpstreamError(f"Failed to delete system prompt: {e}") from e
