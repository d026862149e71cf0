"""End-to-end scenarios against the shipped persona registry and catalog."""

import pytest

from config import CONFIG_DIR
from src.core import TIERS, load_registry
from src.detection import AccuracyTracker, PersonaDetectionService
from src.engine import EngineService
from src.recommendation import RecommendationEngine, RecommendationService, load_catalog

HOMEOWNER_TEXT = (
    "We want to upgrade our house with whole-home audio, smart lighting and better security. "
    "Our budget is around $15,000."
)


@pytest.fixture(scope="module")
def service():
    registry = load_registry(CONFIG_DIR / "personas.json")
    catalog = load_catalog(CONFIG_DIR / "catalog.json")
    detection = PersonaDetectionService(registry, tracker=AccuracyTracker())
    recommendation = RecommendationService(registry, RecommendationEngine(registry, catalog), detection)
    return EngineService(detection=detection, recommendation=recommendation, catalog=catalog)


class TestHomeownerScenario:
    """Homeowner asking for audio, lighting and security on a $15,000 budget."""

    def test_detects_homeowner(self, service):
        result = service.detect_persona(HOMEOWNER_TEXT)

        assert result.persona == "homeowner"
        assert result.project_type == "residential"
        assert result.method == "rule-based"
        assert result.confidence == pytest.approx(0.5)

    def test_recommends_better_tier_inside_budget_window(self, service):
        result = service.generate_recommendations(text=HOMEOWNER_TEXT)

        assert result.persona == "homeowner"
        assert result.budget == 15000.0
        assert result.recommended_tier == "better"
        assert result.budget_fit == "optimal"
        assert 12000 <= result.recommended_bundle.estimated_total <= 18000
        for category in ("audio-video", "lighting", "security"):
            assert category in result.recommended_bundle.categories

    def test_tier_totals(self, service):
        result = service.generate_recommendations(text=HOMEOWNER_TEXT)

        totals = [result.bundles[tier].estimated_total for tier in TIERS]
        assert totals == [11396.0, 14696.0, 18796.0]
        assert not any(bundle.incomplete for bundle in result.bundles.values())


class TestShippedConfiguration:
    """Properties that must hold for every shipped persona."""

    def test_empty_text_returns_default(self, service):
        result = service.detect_persona("")

        assert (result.persona, result.confidence, result.method) == ("homeowner", 0.5, "rule-based")

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Our IT department needs network security and system integration", "cto-cio"),
            ("As a small business owner I want a better return on investment", "business-owner"),
            ("I manage the office and need easy to use conference rooms for our staff", "office-manager"),
            ("Our facilities team handles building maintenance and energy management", "facilities-manager"),
            ("We are a builder working on spec homes with bulk pricing", "builder"),
            ("My client wants an elegant, sophisticated look with hidden technology", "interior-designer"),
        ],
    )
    def test_representative_texts(self, service, text, expected):
        assert service.detect_persona(text).persona == expected

    def test_every_persona_gets_three_monotonic_tiers(self, service):
        for persona in service.list_personas():
            for size in (None, 15000):
                result = service.generate_recommendations(persona=persona.name, project_size=size)
                totals = [result.bundles[tier].estimated_total for tier in TIERS]

                assert totals == sorted(totals), (persona.name, size, totals)
                assert all(total > 0 for total in totals)

    def test_bulk_accuracy(self, service):
        cases = [
            {"text": HOMEOWNER_TEXT, "expectedPersona": "homeowner"},
            {"text": "We are a builder working on spec homes with bulk pricing", "expectedPersona": "builder"},
            {"text": "Our IT department needs network security", "expectedPersona": "cto-cio"},
            {"text": "", "expectedPersona": "homeowner"},
        ]

        summary = service.run_bulk_test(cases, max_workers=2)

        assert summary.overall_accuracy == 100.0

    def test_health(self, service):
        health = service.health()

        assert health["personas"] == 9
        assert health["catalog_items"] > 0
        assert health["external_classifier"] is None
