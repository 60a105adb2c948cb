"""
Store and Engine Context Test Module

Tests for intent_unifier/services/stores.py and intent_unifier/core/engine.py:
- Ledger ordering and copy-on-read
- Stored snapshots and baselines isolated from caller mutation
- Snapshot replacement per key
- Concurrent appends
- Engine wiring, settings-driven construction and reset
"""

import json
import threading

import pytest

from intent_unifier.core.config import Settings
from intent_unifier.core.engine import IntentEngine
from intent_unifier.models import EntityType, SignalSource, TopicScore, UnifiedScore
from intent_unifier.services.rule_evaluator import ProfileConfigurationError


APOLLO = SignalSource.APOLLO
ZOOMINFO = SignalSource.ZOOMINFO


class TestSignalLedger:
    """Tests for SignalLedger."""

    def test_signals_keep_arrival_order(self, ledger, make_signal):
        first = make_signal(APOLLO, "company-1", "Cloud", 10)
        second = make_signal(ZOOMINFO, "company-1", "AI", 20)
        ledger.append(first)
        ledger.append(second)

        assert ledger.signals_for("company-1") == [first, second]

    def test_reads_are_copies(self, ledger, make_signal):
        ledger.append(make_signal(APOLLO, "company-1", "Cloud", 10))

        ledger.signals_for("company-1").clear()

        assert len(ledger.signals_for("company-1")) == 1

    def test_entity_ids_in_first_seen_order(self, ledger, make_signal):
        ledger.extend([
            make_signal(APOLLO, "b", "Cloud", 10),
            make_signal(APOLLO, "a", "Cloud", 10),
            make_signal(APOLLO, "b", "AI", 10),
        ])
        assert ledger.entity_ids() == ["b", "a"]
        assert len(ledger) == 3

    def test_reset_empties_ledger(self, ledger, make_signal):
        ledger.append(make_signal(APOLLO, "company-1", "Cloud", 10))
        ledger.reset()

        assert ledger.signals_for("company-1") == []
        assert len(ledger) == 0

    def test_concurrent_appends_are_all_recorded(self, ledger, make_signal):
        signal = make_signal(APOLLO, "company-1", "Cloud", 10)

        def worker():
            for _ in range(200):
                ledger.append(signal)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(ledger) == 1600


class TestEnrichmentLedger:
    """Tests for EnrichmentLedger."""

    def test_swap_returns_previous(self, enrichment_ledger, make_snapshot):
        first = make_snapshot(APOLLO, {"industry": "Tech"})
        second = make_snapshot(APOLLO, {"industry": "Software"})

        assert enrichment_ledger.swap(first) is None
        assert enrichment_ledger.swap(second) == first
        assert enrichment_ledger.get(EntityType.COMPANY, "company-1", APOLLO) == second
        assert len(enrichment_ledger) == 1

    def test_string_keys_are_coerced(self, enrichment_ledger, make_snapshot):
        snapshot = make_snapshot(ZOOMINFO, {"industry": "Tech"})
        enrichment_ledger.swap(snapshot)

        assert enrichment_ledger.get("company", "company-1", "zoominfo") == snapshot

    def test_caller_changes_after_store_do_not_leak_in(self, enrichment_ledger, make_snapshot):
        snapshot = make_snapshot(APOLLO, {"technologies": ["aws"]})
        enrichment_ledger.swap(snapshot)

        snapshot.attributes["technologies"].append("gcp")

        stored = enrichment_ledger.get(EntityType.COMPANY, "company-1", APOLLO)
        assert stored.attributes == {"technologies": ["aws"]}

    def test_reads_are_deep_copies(self, enrichment_ledger, make_snapshot):
        enrichment_ledger.swap(make_snapshot(APOLLO, {"technologies": ["aws"]}))

        read = enrichment_ledger.get(EntityType.COMPANY, "company-1", APOLLO)
        read.attributes["technologies"].append("x")
        enrichment_ledger.for_entity(EntityType.COMPANY, "company-1")[0].attributes["city"] = "Austin"

        stored = enrichment_ledger.get(EntityType.COMPANY, "company-1", APOLLO)
        assert stored.attributes == {"technologies": ["aws"]}


class TestScoreBaselineCache:
    """Tests for ScoreBaselineCache."""

    @pytest.fixture
    def score(self, fixed_now):
        return UnifiedScore(
            entityId="company-1",
            entityName="Acme Corp",
            overallScore=40,
            apolloScore=80,
            zoomInfoScore=0,
            topTopics=[TopicScore(topic="Cloud", score=80, sources=[APOLLO])],
            signalCount=1,
            computedAt=fixed_now,
        )

    def test_put_then_get(self, baseline, score):
        baseline.put(score)

        assert baseline.get("company-1") == score
        assert baseline.get("missing") is None

    def test_stored_score_is_isolated_from_callers(self, baseline, score):
        baseline.put(score)
        score.overallScore = 99
        baseline.get("company-1").topTopics.clear()

        stored = baseline.get("company-1")
        assert stored.overallScore == 40
        assert [topic.topic for topic in stored.topTopics] == ["Cloud"]


class TestIntentEngine:
    """Tests for the engine context."""

    def test_end_to_end(self, engine, make_signal, make_snapshot, ideal_company):
        engine.add_signals([
            make_signal(APOLLO, "company-1", "Cloud", 80),
            make_signal(ZOOMINFO, "company-1", "AI", 60),
        ])
        engine.store_snapshot(make_snapshot(APOLLO, ideal_company))

        assert engine.compute_score("company-1").overallScore == 70
        merged = engine.merge(EntityType.COMPANY, "company-1")
        assert engine.classify_company(merged).classification == "A"

    def test_reset_clears_every_store(self, engine, make_signal, make_snapshot):
        engine.add_signal(make_signal(APOLLO, "company-1", "Cloud", 80))
        engine.compute_score("company-1")
        engine.store_snapshot(make_snapshot(APOLLO, {"industry": "Tech"}))

        engine.reset()

        assert engine.compute_score("company-1") is None
        assert len(engine.baseline) == 0
        assert engine.get_snapshots(EntityType.COMPANY, "company-1") == []
        # a fresh key again produces no delta
        assert engine.store_snapshot(make_snapshot(APOLLO, {"industry": "Other"})) is None

    def test_from_settings_applies_scoring_config(self, clock, make_signal):
        settings = Settings(
            scoring_apollo_weight=1.0,
            scoring_zoominfo_weight=0.0,
            enrichment_priority_source="apollo",
        )
        engine = IntentEngine.from_settings(settings, clock=clock)
        engine.add_signal(make_signal(APOLLO, "company-1", "Cloud", 80))

        assert engine.compute_score("company-1").overallScore == 80
        assert engine.tracker.default_priority == APOLLO

    def test_from_settings_loads_profiles(self, tmp_path):
        icp_path = tmp_path / "icp.json"
        icp_path.write_text(json.dumps({"name": "Custom ICP", "criteria": []}))
        persona_path = tmp_path / "personas.json"
        persona_path.write_text(json.dumps([{"name": "Only", "criteria": []}]))

        engine = IntentEngine.from_settings(Settings(
            icp_profile_path=str(icp_path),
            persona_profiles_path=str(persona_path),
        ))

        assert engine.icp_profile.name == "Custom ICP"
        assert engine.classify_contact({}).classification == "Only"

    def test_from_settings_rejects_bad_profile(self, tmp_path):
        bad_path = tmp_path / "icp.json"
        bad_path.write_text("[]")

        with pytest.raises(ProfileConfigurationError):
            IntentEngine.from_settings(Settings(icp_profile_path=str(bad_path)))
