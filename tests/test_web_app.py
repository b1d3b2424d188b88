"""
Tests for the Web API.

Tests the Flask routes, request validation and error mapping.
"""

import pytest
from pathlib import Path

# Import the Flask app
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from web.app import API_PREFIX, create_app
from caredigest.storage import InMemoryInterestStore, StorageError
from tests.test_config import CONFIG, EXPECTED, get_context, get_interest_vector_data


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def store():
    return InMemoryInterestStore()


@pytest.fixture
def client(store):
    """Flask test client over an in-memory interest store."""
    app = create_app(store)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def failing_client(mock_store):
    """Flask test client whose interest store cannot be written."""
    mock_store.save.side_effect = StorageError("Airtable unreachable")
    app = create_app(mock_store)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


INTEREST_URL = f"{API_PREFIX}/interests/{CONFIG['user_id']}/{CONFIG['subject_id']}"


# =============================================================================
# Health
# =============================================================================

class TestHealth:
    """Tests for the health route."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "ok"
        assert data["store"] == "memory"


# =============================================================================
# Personalization
# =============================================================================

class TestInsightsEndpoint:
    """Tests for POST /personalization/insights."""

    def test_ranked_cards(self, client):
        response = client.post(f"{API_PREFIX}/personalization/insights", json=get_context("busy"))

        assert response.status_code == 200
        data = response.get_json()
        assert data["subject_id"] == CONFIG["subject_id"]
        assert data["date"] == "2026-01-20"
        keys = [(c["priority_score"], c["urgency"]) for c in data["insights"]]
        assert keys == sorted(keys, reverse=True)

    def test_stored_interest_is_used(self, client, store):
        from caredigest.models import InterestVector
        body = get_context("quiet")
        baseline = client.post(f"{API_PREFIX}/personalization/insights", json=body).get_json()

        store.save(InterestVector.from_dict(get_interest_vector_data(scores={"mood": 1.0})))
        personalized = client.post(f"{API_PREFIX}/personalization/insights", json=body).get_json()

        def mood_score(data):
            return next(c["priority_score"] for c in data["insights"] if c["topic"] == "mood")

        assert mood_score(personalized) > mood_score(baseline)

    def test_missing_body(self, client):
        response = client.post(f"{API_PREFIX}/personalization/insights")

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    @pytest.mark.parametrize("body,field", [
        ({"subject_id": "child-1"}, "user_id"),
        ({"user_id": "user-1", "subject_id": "child-1", "date": "not-a-date"}, "date"),
        ({"user_id": "user-1", "subject_id": "child-1", "recent_events": ["sleep"]}, "recent_events"),
        ({"user_id": "user-1", "subject_id": "child-1", "topic_trends": ["sleep"]}, "topic_trends"),
        ({"user_id": "user-1", "subject_id": "child-1", "interest": [0.5]}, "interest"),
    ])
    def test_invalid_context(self, client, body, field):
        response = client.post(f"{API_PREFIX}/personalization/insights", json=body)

        assert response.status_code == 400
        assert field in response.get_json()["error"]

    def test_non_object_body(self, client):
        response = client.post(f"{API_PREFIX}/personalization/insights", json=[1, 2])

        assert response.status_code == 400


class TestStartersEndpoint:
    """Tests for POST /personalization/starters."""

    def test_default_limit(self, client):
        response = client.post(f"{API_PREFIX}/personalization/starters", json=get_context("busy"))

        starters = response.get_json()["starters"]
        assert 0 < len(starters) <= EXPECTED["starters"]["max_starters"]
        assert starters[0]["score"] == 90

    @pytest.mark.parametrize("limit,expected", [("2", 2), ("0", 0), ("-3", 0)])
    def test_limit(self, client, limit, expected):
        response = client.post(
            f"{API_PREFIX}/personalization/starters?limit={limit}", json=get_context("busy")
        )

        assert len(response.get_json()["starters"]) == expected

    def test_limit_capped(self, client):
        response = client.post(
            f"{API_PREFIX}/personalization/starters?limit=500", json=get_context("busy")
        )

        assert len(response.get_json()["starters"]) <= EXPECTED["starters"]["max_starters"]


class TestDigestEndpoint:
    """Tests for POST /personalization/digest."""

    def test_digest(self, client):
        response = client.post(f"{API_PREFIX}/personalization/digest", json=get_context("busy"))

        assert response.status_code == 200
        data = response.get_json()
        assert data["subject_name"] == "Leo"
        assert data["immediate_action_topics"] == CONFIG["insight_topics"]
        assert len(data["topic_scores"]) == len(CONFIG["insight_topics"])


# =============================================================================
# Interest Vectors
# =============================================================================

class TestInterestEndpoints:
    """Tests for the interest vector routes."""

    def test_get_baseline(self, client):
        response = client.get(INTEREST_URL)

        assert response.status_code == 200
        assert response.get_json()["scores"] == EXPECTED["interest"]["baseline"]

    def test_record_interaction(self, client, store):
        response = client.post(f"{INTEREST_URL}/interactions", json={"topic": "sleep"})

        assert response.status_code == 200
        assert response.get_json()["recent_topics"] == ["sleep"]
        assert store.load(CONFIG["user_id"], CONFIG["subject_id"]).scores["sleep"] == pytest.approx(
            EXPECTED["interest"]["sleep_after_one_interaction"]
        )

    def test_record_interaction_with_weight(self, client):
        response = client.post(f"{INTEREST_URL}/interactions", json={"topic": "social", "weight": 2})

        assert response.get_json()["scores"]["social"] == pytest.approx(0.5 * 0.95 + 0.2)

    @pytest.mark.parametrize("body", [{}, {"topic": ""}, {"topic": "sleep", "weight": "lots"}])
    def test_record_interaction_rejects_bad_body(self, client, body):
        response = client.post(f"{INTEREST_URL}/interactions", json=body)

        assert response.status_code == 400

    def test_set_explicit_topics(self, client):
        response = client.put(f"{INTEREST_URL}/explicit-topics", json={"topics": ["mood", "toilet"]})

        assert response.status_code == 200
        assert response.get_json()["explicit_topics"] == ["mood", "potty"]

    def test_set_explicit_topics_requires_list(self, client):
        response = client.put(f"{INTEREST_URL}/explicit-topics", json={"topics": "mood"})

        assert response.status_code == 400

    def test_store_outage_maps_to_503(self, failing_client):
        response = failing_client.post(f"{INTEREST_URL}/interactions", json={"topic": "sleep"})

        assert response.status_code == 503
        assert response.get_json() == {"success": False, "error": "Interest store unavailable"}

    def test_read_falls_back_during_outage(self, failing_client, mock_store):
        mock_store.load.side_effect = StorageError("Airtable unreachable")

        response = failing_client.get(INTEREST_URL)

        assert response.status_code == 200
        assert response.get_json()["scores"] == EXPECTED["interest"]["baseline"]
