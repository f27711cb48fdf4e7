"""
Tests for the people API and soft deletion.
"""


class TestPeopleApi:

    def test_get_person(self, api, supabase):
        supabase.seed("people", {"id": "p-1", "name": "Ada", "embedding": [0.1, 0.2]})

        response = api.get("/api/people/p-1")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Ada"
        assert "embedding" not in body

    def test_get_missing_person(self, api):
        response = api.get("/api/people/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Person not found"}

    def test_soft_delete(self, api, supabase):
        supabase.seed("people", {"id": "p-1", "name": "Ada"})

        response = api.delete("/api/people/p-1")

        assert response.status_code == 200
        assert supabase.row("people", "p-1")["deleted"] is True
        assert api.get("/api/people/p-1").status_code == 404

    def test_deleted_person_excluded_from_batch_and_matching(self, api, supabase):
        supabase.seed(
            "people",
            {"id": "p-1", "name": "Ada", "embedding": [0.1] * 3},
        )
        api.delete("/api/people/p-1")

        response = api.post("/api/introductions/generate", json={"personId": "p-1"})

        assert response.status_code == 404
        assert supabase.rpc_calls == []

    def test_delete_missing_person(self, api):
        assert api.delete("/api/people/nope").status_code == 404
