"""Tests for PersonaDetectionService."""

import pytest

from src.core import DetectionTestCase, InvalidInputError, PersonaNotFoundError
from src.detection import ExternalClassifierAdapter, PersonaDetectionService
from src.detection.clients.static_client import StaticPersonaClassifier


class TestDetectPersona:
    """Test detect_persona."""

    def test_detects_clear_signal(self, detection_service):
        result = detection_service.detect_persona("We need network security for our infrastructure")

        assert result.persona == "it-director"
        assert result.project_type == "commercial"
        assert result.method == "rule-based"
        assert 0.0 <= result.confidence <= 1.0

    def test_is_deterministic(self, detection_service):
        text = "Elegant interior design with a family home feel"

        first = detection_service.detect_persona(text)
        second = detection_service.detect_persona(text)

        assert first == second

    @pytest.mark.parametrize("text", ["", "   ", "?!"])
    def test_empty_text_returns_default(self, detection_service, text):
        result = detection_service.detect_persona(text)

        assert result.persona == "homeowner"
        assert result.confidence == 0.5
        assert result.method == "rule-based"
        assert result.low_confidence is True

    def test_voice_transcript_is_combined(self, detection_service):
        result = detection_service.detect_persona("", {"voice_transcript": "network security please"})

        assert result.persona == "it-director"

    def test_project_type_hint_breaks_ties(self, detection_service):
        assert detection_service.detect_persona("security").persona == "homeowner"
        hinted = detection_service.detect_persona("security", {"project_type": "commercial"})

        assert hinted.persona == "it-director"

    @pytest.mark.parametrize("text", [42, ["home"], None])
    def test_rejects_non_string_text(self, detection_service, text):
        with pytest.raises(InvalidInputError):
            detection_service.detect_persona(text)

    def test_rejects_unknown_project_type_hint(self, detection_service):
        with pytest.raises(InvalidInputError):
            detection_service.detect_persona("home", {"project_type": "industrial"})

    def test_records_every_detection(self, detection_service, tracker):
        detection_service.detect_persona("my home")
        detection_service.detect_persona("office staff")

        assert [outcome.detected for outcome in tracker.snapshot()] == ["homeowner", "office-manager"]

    def test_external_agreement_is_hybrid(self, registry):
        adapter = ExternalClassifierAdapter(StaticPersonaClassifier("homeowner", 0.45), registry, timeout=1.0)
        service = PersonaDetectionService(registry, external=adapter)

        try:
            result = service.detect_persona("my home and my family")
        finally:
            adapter.shutdown()

        assert result.method == "hybrid"
        assert result.confidence == pytest.approx(0.45)

    def test_external_not_consulted_for_empty_text(self, registry):
        adapter = ExternalClassifierAdapter(StaticPersonaClassifier("it-director", 0.99), registry, timeout=1.0)
        service = PersonaDetectionService(registry, external=adapter)

        try:
            result = service.detect_persona("")
        finally:
            adapter.shutdown()

        assert result.persona == "homeowner"
        assert result.low_confidence is True


class TestPersonaLookup:
    """Test get_persona_config and list_personas."""

    def test_get_persona_config(self, detection_service):
        assert detection_service.get_persona_config("designer").tier_preference == "best"

    def test_unknown_persona(self, detection_service):
        with pytest.raises(PersonaNotFoundError) as exc:
            detection_service.get_persona_config("astronaut")

        assert exc.value.code == "PERSONA_NOT_FOUND"

    def test_list_by_type(self, detection_service):
        names = [persona.name for persona in detection_service.list_personas("commercial")]

        assert names == ["it-director", "office-manager"]
        assert len(detection_service.list_personas()) == 4

    def test_list_rejects_unknown_type(self, detection_service):
        with pytest.raises(InvalidInputError):
            detection_service.list_personas("industrial")


class TestRunBulkTest:
    """Test run_bulk_test."""

    def cases(self):
        return [
            DetectionTestCase(name="home", text="my home and family", expected_persona="homeowner"),
            {"name": "it", "text": "network security", "expectedPersona": "it-director"},
            {"name": "office", "text": "office staff budget", "expectedPersona": "office-manager"},
            {"name": "wrong", "text": "elegant design", "expectedPersona": "homeowner"},
            {"name": "unlabelled", "text": "my home"},
        ]

    def test_summary(self, detection_service):
        summary = detection_service.run_bulk_test(self.cases())

        assert summary.total_tests == 5
        assert summary.successful_tests == 5
        assert summary.tests_with_expected == 4
        assert summary.correct_predictions == 3
        assert summary.overall_accuracy == 75.0
        assert [outcome.name for outcome in summary.results] == ["home", "it", "office", "wrong", "unlabelled"]

    def test_malformed_case_is_recorded_as_failure(self, detection_service):
        cases = self.cases() + [
            {"name": "no text", "expectedPersona": "homeowner"},
            {"name": "bad hint", "text": "home", "context": {"project_type": "industrial"}},
            {"name": "bad shape", "text": ["not", "a", "string"]},
        ]

        summary = detection_service.run_bulk_test(cases)

        assert summary.total_tests == 8
        assert summary.failed_tests == 3
        assert summary.overall_accuracy == 75.0
        failed = [outcome for outcome in summary.results if not outcome.succeeded]
        assert [outcome.name for outcome in failed] == ["no text", "bad hint", "Test 8"]

    def test_parallel_run_keeps_order(self, detection_service):
        cases = self.cases() * 4

        sequential = detection_service.run_bulk_test(cases)
        parallel = detection_service.run_bulk_test(cases, max_workers=4)

        assert [o.detected for o in parallel.results] == [o.detected for o in sequential.results]
        assert [o.test_number for o in parallel.results] == list(range(1, 21))
        assert parallel.overall_accuracy == sequential.overall_accuracy

    def test_outcomes_join_service_tracker(self, detection_service, tracker):
        detection_service.detect_persona("my home")

        summary = detection_service.run_bulk_test(self.cases())

        assert summary.total_tests == 5
        logged = tracker.snapshot()
        assert len(logged) == 6
        assert [outcome.name for outcome in logged[1:]] == ["home", "it", "office", "wrong", "unlabelled"]
        assert [outcome.sequence for outcome in logged] == [1, 2, 3, 4, 5, 6]

    def test_rejects_zero_workers(self, detection_service):
        with pytest.raises(InvalidInputError):
            detection_service.run_bulk_test(self.cases(), max_workers=0)
