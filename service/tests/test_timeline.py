"""
Tests for the timeline reader and the timeline API.
"""

from network_brain.services.timeline import TimelineService


def seed_timeline(supabase):
    supabase.seed(
        "notes",
        {"id": "n1", "person_id": "p-1", "content": "First", "created_at": "2024-01-01T10:00:00+00:00"},
        {"id": "n2", "person_id": "p-1", "content": "Second", "created_at": "2024-02-01T10:00:00+00:00"},
        {"id": "n3", "person_id": "p-1", "content": "Third", "created_at": "2024-03-01T10:00:00+00:00"},
        {"id": "n4", "person_id": "p-2", "content": "Other person", "created_at": "2024-04-01T10:00:00+00:00"},
    )
    supabase.seed(
        "events",
        {
            "id": "e1",
            "title": "Kickoff",
            "start_time": "2024-01-15T18:00:00+00:00",
            "event_attendees": [
                {"person_id": "p-2", "response_status": "declined"},
                {"person_id": "p-1", "response_status": "accepted"},
            ],
        },
        {
            "id": "e2",
            "title": "Demo day",
            "start_time": "2024-05-01T18:00:00+00:00",
            "event_attendees": [{"person_id": "p-1", "response_status": "tentative"}],
        },
        {
            "id": "e3",
            "title": "Not invited",
            "start_time": "2024-06-01T18:00:00+00:00",
            "event_attendees": [{"person_id": "p-2", "response_status": "accepted"}],
        },
    )


class TestTimelineService:

    def test_notes_newest_first(self, supabase):
        seed_timeline(supabase)
        notes = TimelineService(supabase).get_notes("p-1")
        assert [n["id"] for n in notes] == ["n3", "n2", "n1"]

    def test_events_flattened_with_response_status(self, supabase):
        seed_timeline(supabase)
        events = TimelineService(supabase).get_events("p-1")
        assert [(e["id"], e["response_status"]) for e in events] == [
            ("e2", "tentative"),
            ("e1", "accepted"),
        ]

    def test_paging(self, supabase):
        seed_timeline(supabase)
        service = TimelineService(supabase)
        assert [n["id"] for n in service.get_page("p-1", "notes", page=1, page_size=2)] == ["n3", "n2"]
        assert [n["id"] for n in service.get_page("p-1", "notes", page=2, page_size=2)] == ["n1"]
        assert service.get_page("p-1", "notes", page=3, page_size=2) == []

    def test_timeline_context(self, supabase):
        seed_timeline(supabase)
        timeline = TimelineService(supabase).get_timeline("p-1")
        assert [n.content for n in timeline.notes] == ["Third", "Second", "First"]
        assert timeline.events[0].title == "Demo day"
        assert timeline.events[0].date == "2024-05-01T18:00:00+00:00"
        assert timeline.events[0].status == "tentative"

    def test_communities(self, supabase):
        supabase.seed("community_members", {
            "person_id": "p-1",
            "membership_status": None,
            "community": {"id": "c-1", "name": "Operators", "description": None},
        })
        communities = TimelineService(supabase).get_communities("p-1")
        assert communities[0].name == "Operators"
        assert communities[0].status == "prospect"
        assert communities[0].description == ""


class TestTimelineApi:

    def test_requires_person_id(self, api):
        response = api.get("/api/timeline", params={"type": "notes"})
        assert response.status_code == 400
        assert response.json() == {"error": "Person ID is required"}

    def test_invalid_type(self, api):
        response = api.get("/api/timeline", params={"personId": "p-1", "type": "calls"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid type parameter"}

    def test_missing_type(self, api):
        response = api.get("/api/timeline", params={"personId": "p-1"})
        assert response.status_code == 400

    def test_notes_page(self, api, supabase):
        seed_timeline(supabase)
        response = api.get("/api/timeline", params={
            "personId": "p-1", "type": "notes", "page": 2, "pageSize": 1
        })
        assert response.status_code == 200
        assert [n["id"] for n in response.json()] == ["n2"]

    def test_events(self, api, supabase):
        seed_timeline(supabase)
        response = api.get("/api/timeline", params={"personId": "p-1", "type": "events"})
        assert response.status_code == 200
        assert [e["title"] for e in response.json()] == ["Demo day", "Kickoff"]

    def test_large_page_size(self, api, supabase):
        seed_timeline(supabase)
        response = api.get("/api/timeline", params={
            "personId": "p-1", "type": "notes", "pageSize": 500
        })
        assert response.status_code == 200
        assert [n["id"] for n in response.json()] == ["n3", "n2", "n1"]
