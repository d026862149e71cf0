"""Tests for rule-based persona scoring."""

import pytest

from conftest import make_persona, make_registry
from src.detection.normalizer import normalize
from src.detection.rules import RuleBasedClassifier


@pytest.fixture
def classifier(registry):
    return RuleBasedClassifier(registry)


class TestRuleBasedClassifier:
    """Test RuleBasedClassifier.classify."""

    def test_empty_text_scores_zero(self, classifier, registry):
        result = classifier.classify(normalize(""))

        assert result.scores == {name: 0.0 for name in registry.names()}
        assert result.max_score == 0.0
        assert result.context_types == ()

    def test_scores_follow_registry_order(self, classifier, registry):
        result = classifier.classify(normalize("network security"))

        assert list(result.scores) == registry.names()

    def test_keywords_count_once_and_phrases_per_occurrence(self, classifier):
        text = normalize("My home, my home and my HOME again")

        result = classifier.classify(text)

        # keyword "home" once plus phrase "my home" three times
        assert result.scores["homeowner"] == pytest.approx(1.0 + 2.0 * 3)

    def test_word_boundaries(self, classifier):
        result = classifier.classify(normalize("homework and networking"))

        assert result.scores["homeowner"] == 0.0
        assert result.scores["it-director"] == 0.0

    def test_context_clue_adds_boost_to_every_persona_of_that_type(self, classifier):
        result = classifier.classify(normalize("We are redesigning a house"))

        assert "residential" in result.context_types
        assert result.scores["homeowner"] == pytest.approx(0.2)
        assert result.scores["designer"] == pytest.approx(0.3)
        assert result.scores["it-director"] == 0.0

    def test_type_hint_is_reported_without_boost(self, classifier):
        result = classifier.classify(normalize("security"), type_hint="commercial")

        assert result.context_types == ("commercial",)
        assert result.scores["it-director"] == pytest.approx(1.0)
        assert result.scores["homeowner"] == pytest.approx(1.0)

    def test_weighted_terms(self):
        registry = make_registry(
            personas=(
                make_persona(
                    patterns={
                        "keywords": [{"term": "smart home", "weight": 2.5}],
                        "phrases": [{"term": "whole home audio", "weight": 4.0}],
                    }
                ),
            )
        )
        classifier = RuleBasedClassifier(registry)

        result = classifier.classify(normalize("Smart-home with whole-home audio"))

        assert result.scores["homeowner"] == pytest.approx(6.5)

    def test_leaders_keep_registry_order(self, classifier):
        result = classifier.classify(normalize("security"))

        assert result.leaders() == ["homeowner", "it-director"]
