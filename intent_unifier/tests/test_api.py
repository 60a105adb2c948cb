"""
API Contract Test Module

Tests for the FastAPI routers through TestClient:
- /health and / index
- /sync intent and enrichment ingestion, merged view, scores, spikes
- /scoring ICP and persona (single and batch)
- /admin/reset
- 400 Invalid request for malformed input and 404 for unknown entities
"""

from datetime import timedelta

import pytest

from intent_unifier.core.config import Settings
from intent_unifier.core.dependencies import get_settings_dependency
from intent_unifier.models import SignalSource


pytestmark = pytest.mark.api


def _signal(entity_id="company-1", topic="Cloud", strength=80, **extra):
    body = {"entityId": entity_id, "entityName": "Acme Corp", "topic": topic, "strength": strength}
    body.update(extra)
    return body


class TestServiceEndpoints:
    """Tests for /health and /."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_index_lists_endpoints(self, client):
        body = client.get("/").json()

        assert body["name"] == "Intent Unifier API"
        assert "scores" in body["endpoints"]["sync"]


class TestIntentSync:
    """Tests for POST /sync/{source}/intent and the score endpoints."""

    def test_ingest_and_score(self, client):
        response = client.post("/sync/apollo/intent", json={"signals": [_signal()]})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["source"] == "apollo"
        assert body["signalsProcessed"] == 1
        assert body["entitiesUpdated"] == 1
        assert body["scores"][0]["overallScore"] == 40
        assert body["scores"][0]["apolloScore"] == 80

    def test_both_sources_blend(self, client):
        client.post("/sync/apollo/intent", json={"signals": [_signal(topic="Cloud", strength=80)]})
        client.post("/sync/zoominfo/intent", json={"signals": [_signal(topic="AI", strength=60)]})

        score = client.get("/sync/scores/company-1").json()

        assert score["overallScore"] == 70
        assert {t["topic"]: t["sources"] for t in score["topTopics"]} == {
            "Cloud": ["apollo"],
            "AI": ["zoominfo"],
        }

    def test_missing_observed_at_uses_engine_clock(self, client, engine, fixed_now):
        client.post("/sync/apollo/intent", json={"signals": [_signal()]})

        signal = engine.signals.signals_for("company-1")[0]
        assert signal.observedAt == fixed_now

    def test_explicit_observed_at_is_kept(self, client, engine, fixed_now):
        observed = (fixed_now - timedelta(days=15)).isoformat()
        client.post("/sync/apollo/intent", json={"signals": [_signal(observedAt=observed)]})

        assert engine.signals.signals_for("company-1")[0].observedAt == fixed_now - timedelta(days=15)

    def test_missing_signals_array_is_400(self, client):
        response = client.post("/sync/apollo/intent", json={"portalId": "123"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request"
        assert "signals" in body["message"]

    def test_unknown_source_is_400(self, client):
        response = client.post("/sync/clearbit/intent", json={"signals": [_signal()]})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_unknown_entity_score_is_404(self, client):
        assert client.get("/sync/scores/nobody").status_code == 404

    def test_list_scores(self, client):
        client.post("/sync/apollo/intent", json={"signals": [
            _signal(entity_id="low", strength=20),
            _signal(entity_id="high", strength=90),
        ]})

        body = client.get("/sync/scores").json()

        assert body["count"] == 2
        assert [s["entityId"] for s in body["scores"]] == ["high", "low"]

    def test_ingest_flags_jump_on_returned_score(self, client):
        client.post("/sync/apollo/intent", json={"signals": [_signal(strength=40)]})
        body = client.post("/sync/apollo/intent", json={"signals": [_signal(strength=100)]}).json()

        assert body["scores"][0]["overallScore"] == 35
        assert body["scores"][0]["trend"] == "increasing"
        assert body["scores"][0]["isSpike"] is True
        assert body["spikesDetected"] == 0

    def test_spikes_reported_once(self, client, engine, make_signal):
        client.post("/sync/apollo/intent", json={"signals": [_signal(strength=40)]})
        engine.add_signal(make_signal(SignalSource.APOLLO, "company-1", "Cloud", 100))

        first = client.get("/sync/spikes").json()
        second = client.get("/sync/spikes").json()

        assert first["count"] == 1
        assert first["spikes"][0]["previousScore"] == 20
        assert first["spikes"][0]["currentScore"] == 35
        assert second["count"] == 0


class TestEnrichmentSync:
    """Tests for POST /sync/{source}/enrichment and the enrichment views."""

    def _enrichment(self, attributes, entity_id="company-1", entity_type="company"):
        return {"entityType": entity_type, "entityId": entity_id, "attributes": attributes}

    def test_first_then_changed(self, client):
        first = client.post("/sync/apollo/enrichment", json={"enrichments": [
            self._enrichment({"employeeCount": 500}),
        ]}).json()
        second = client.post("/sync/apollo/enrichment", json={"enrichments": [
            self._enrichment({"employeeCount": 650}),
        ]}).json()

        assert first["deltasDetected"] == 0
        assert second["deltasDetected"] == 1
        change = second["deltas"][0]["changes"][0]
        assert change == {"field": "employeeCount", "oldValue": 500, "newValue": 650}

    def test_merged_view(self, client):
        client.post("/sync/apollo/enrichment", json={"enrichments": [
            self._enrichment({"employeeCount": 500, "industry": "Tech", "website": "a.com"}),
        ]})
        client.post("/sync/zoominfo/enrichment", json={"enrichments": [
            self._enrichment({"employeeCount": 600, "annualRevenue": 5e7}),
        ]})

        default = client.get("/sync/enrichment/merged/company/company-1").json()
        apollo_first = client.get(
            "/sync/enrichment/merged/company/company-1", params={"priority": "apollo"}
        ).json()

        assert default["prioritySource"] == "zoominfo"
        assert default["data"] == {
            "employeeCount": 600,
            "industry": "Tech",
            "website": "a.com",
            "annualRevenue": 5e7,
        }
        assert apollo_first["data"]["employeeCount"] == 500

    @pytest.fixture
    def apollo_priority_settings(self, client):
        client.app.dependency_overrides[get_settings_dependency] = lambda: Settings(
            enrichment_priority_source="apollo"
        )
        yield
        client.app.dependency_overrides.pop(get_settings_dependency, None)

    def test_merged_view_default_priority_follows_settings(self, client, apollo_priority_settings):
        client.post("/sync/apollo/enrichment", json={"enrichments": [
            self._enrichment({"employeeCount": 500}),
        ]})
        client.post("/sync/zoominfo/enrichment", json={"enrichments": [
            self._enrichment({"employeeCount": 600}),
        ]})

        body = client.get("/sync/enrichment/merged/company/company-1").json()

        assert body["prioritySource"] == "apollo"
        assert body["data"] == {"employeeCount": 500}

    def test_snapshot_views(self, client):
        client.post("/sync/zoominfo/enrichment", json={"enrichments": [
            self._enrichment({"title": "CTO"}, entity_id="contact-1", entity_type="contact"),
        ]})

        listing = client.get("/sync/enrichment/contact/contact-1").json()
        single = client.get("/sync/enrichment/contact/contact-1/zoominfo")
        missing = client.get("/sync/enrichment/contact/contact-1/apollo")

        assert listing["count"] == 1
        assert single.status_code == 200
        assert single.json()["attributes"] == {"title": "CTO"}
        assert missing.status_code == 404

    def test_invalid_entity_type_is_400(self, client):
        response = client.get("/sync/enrichment/merged/deal/d-1")
        assert response.status_code == 400

    def test_missing_enrichments_array_is_400(self, client):
        response = client.post("/sync/apollo/enrichment", json={})
        assert response.status_code == 400


class TestScoring:
    """Tests for the /scoring routes."""

    def test_icp(self, client, ideal_company):
        body = client.post("/scoring/icp", json={"companyData": ideal_company}).json()

        assert body["success"] is True
        assert body["result"]["score"] == 100
        assert body["result"]["classification"] == "A"
        assert body["result"]["subjectId"] == "company-1"

    def test_icp_batch(self, client, ideal_company):
        body = client.post(
            "/scoring/icp/batch", json={"companies": [ideal_company, {}]}
        ).json()

        assert body["count"] == 2
        assert [r["classification"] for r in body["results"]] == ["A", "D"]

    def test_persona(self, client, engineer_contact):
        body = client.post("/scoring/persona", json={"contactData": engineer_contact}).json()

        assert body["result"]["classification"] == "Technical Evaluator"

    def test_persona_batch(self, client, decision_maker_contact):
        body = client.post(
            "/scoring/persona/batch", json={"contacts": [decision_maker_contact, {}]}
        ).json()

        assert [r["classification"] for r in body["results"]] == [
            "Decision Maker",
            "Decision Maker",
        ]

    def test_missing_company_data_is_400(self, client):
        response = client.post("/scoring/icp", json={"company": {}})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"


class TestAdmin:
    """Tests for POST /admin/reset."""

    def test_reset(self, client):
        client.post("/sync/apollo/intent", json={"signals": [_signal()]})

        body = client.post("/admin/reset").json()

        assert body["signalsCleared"] == 1
        assert body["scoresCleared"] == 1
        assert client.get("/sync/scores/company-1").status_code == 404
