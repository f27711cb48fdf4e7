"""
Tests for system prompt storage and its API.
"""

import pytest

from network_brain.errors import NotFoundError, ValidationError
from network_brain.main import app
from network_brain.middleware.auth import verify_supabase_token
from network_brain.services.system_prompts import SystemPromptService


class TestSystemPromptService:

    def test_create_derives_key(self, supabase):
        prompt = SystemPromptService(supabase).create_prompt(
            "Investor Bio (v2)", "You write bios", "Bios for investors"
        )
        assert prompt["key"] == "investor_bio_v2"
        assert prompt["is_active"] is True
        assert prompt["deleted"] is False

    def test_duplicate_key_rejected(self, supabase):
        service = SystemPromptService(supabase)
        service.create_prompt("Investor Bio", "a", "b")
        with pytest.raises(ValidationError):
            service.create_prompt("investor bio", "c", "d")

    def test_key_reusable_after_delete(self, supabase):
        service = SystemPromptService(supabase)
        first = service.create_prompt("Investor Bio", "a", "b")
        service.delete_prompt(first["id"])
        second = service.create_prompt("Investor Bio", "c", "d")
        assert second["key"] == "investor_bio"

    def test_unknown_mode_rejected(self, supabase):
        with pytest.raises(ValidationError, match="Unknown enrichment mode"):
            SystemPromptService(supabase).create_prompt("Writer", "a", "b", mode="poetry")

    def test_required_fields(self, supabase):
        with pytest.raises(ValidationError):
            SystemPromptService(supabase).create_prompt("Writer", "", "b")

    def test_delete_is_soft(self, supabase):
        service = SystemPromptService(supabase)
        prompt = service.create_prompt("Writer", "a", "b")

        service.delete_prompt(prompt["id"])

        row = supabase.row("system_prompts", prompt["id"])
        assert row["deleted"] is True
        assert row["is_active"] is False
        assert service.list_prompts() == []
        with pytest.raises(NotFoundError):
            service.get_prompt(prompt["id"])

    def test_update_requires_fields(self, supabase):
        service = SystemPromptService(supabase)
        prompt = service.create_prompt("Writer", "a", "b")
        with pytest.raises(ValidationError, match="No fields to update"):
            service.update_prompt(prompt["id"], {"name": None})


class TestSystemPromptsApi:

    def test_crud(self, api, supabase):
        created = api.post("/api/system-prompts", json={
            "name": "LinkedIn Refresh",
            "content": "Rewrite from LinkedIn",
            "description": "Uses LinkedIn data",
            "mode": "linkedin_enrichment",
        })
        assert created.status_code == 200
        prompt = created.json()
        assert prompt["key"] == "linkedin_refresh"
        assert prompt["mode"] == "linkedin_enrichment"

        updated = api.put(f"/api/system-prompts/{prompt['id']}", json={"content": "New content"})
        assert updated.status_code == 200
        assert updated.json()["content"] == "New content"

        listed = api.get("/api/system-prompts")
        assert [p["id"] for p in listed.json()] == [prompt["id"]]

        deleted = api.delete(f"/api/system-prompts/{prompt['id']}")
        assert deleted.status_code == 200
        assert api.get("/api/system-prompts").json() == []

    def test_update_missing(self, api):
        response = api.put("/api/system-prompts/nope", json={"content": "x"})
        assert response.status_code == 404
        assert response.json() == {"error": "System prompt not found"}

    def test_requires_auth(self, api):
        del app.dependency_overrides[verify_supabase_token]
        response = api.get("/api/system-prompts")
        assert response.status_code in (401, 403)
