"""Persona detection service: normalization, concurrent scoring, resolution and tracking"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from config import logger
from src.core import (
    AppError,
    InvalidInputError,
    PROJECT_TYPES,
    DetectionResult,
    DetectionOutcome,
    DetectionTestCase,
    PersonaConfig,
    PersonaRegistry,
    TestSummary,
)
from src.detection.external import ExternalClassifierAdapter
from src.detection.normalizer import combine_text, normalize
from src.detection.resolver import PersonaResolver
from src.detection.rules import RuleBasedClassifier
from src.detection.tracker import AccuracyTracker


def _validate_context(context: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if context is None:
        return {}
    if not isinstance(context, Mapping):
        raise InvalidInputError(message="Context must be a mapping")
    project_type = context.get("project_type")
    if project_type is not None and project_type not in PROJECT_TYPES:
        raise InvalidInputError(
            message=f"Unknown project type hint: {project_type}. Expected one of: {', '.join(PROJECT_TYPES)}"
        )
    transcript = context.get("voice_transcript")
    if transcript is not None and not isinstance(transcript, str):
        raise InvalidInputError(message="Voice transcript must be a string")
    return dict(context)


class PersonaDetectionService:
    """
    Detects the persona behind a piece of customer text

    Orchestrates the detection flow:
    1. Combine text with an optional voice transcript and normalize it
    2. Submit the text to the external classifier, if one is configured
    3. Score every persona with the rule-based classifier meanwhile
    4. Resolve both signals into one DetectionResult

    Attributes:
        registry: Immutable persona registry
        rules: RuleBasedClassifier compiled from the registry
        resolver: PersonaResolver applying the decision policy
        external: Optional ExternalClassifierAdapter
        tracker: Optional AccuracyTracker observing every detection
    """

    def __init__(
        self,
        registry: PersonaRegistry,
        external: Optional[ExternalClassifierAdapter] = None,
        tracker: Optional[AccuracyTracker] = None,
        rules: Optional[RuleBasedClassifier] = None,
        resolver: Optional[PersonaResolver] = None,
    ) -> None:
        self.registry = registry
        self.rules = rules or RuleBasedClassifier(registry)
        self.resolver = resolver or PersonaResolver(registry)
        self.external = external
        self.tracker = tracker
        external_name = external.name if external else "none"
        logger.info(
            f"Persona detection ready with {len(registry.personas)} personas, external classifier: {external_name}"
        )

    def _detect(self, text: Optional[str], context: Optional[Mapping[str, Any]]) -> DetectionResult:
        context = _validate_context(context)
        transcript = context.get("voice_transcript")
        if text is None and transcript is None:
            raise InvalidInputError(message="Text or voice transcript is required")
        if text is not None and not isinstance(text, str):
            raise InvalidInputError(message="Text input must be a string")

        normalized = normalize(combine_text(text, transcript))

        pending = None
        if self.external is not None and not normalized.is_empty:
            pending = self.external.submit(normalized.original)

        rule = self.rules.classify(normalized, type_hint=context.get("project_type"))
        external = self.external.collect(pending) if pending is not None else None
        return self.resolver.resolve(rule, external)

    def detect_persona(
        self,
        text: Optional[str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> DetectionResult:
        """
        Classify customer text into a registered persona

        Args:
            text: Written description or transcript; may be empty
            context: Optional hints; "project_type" (residential/commercial)
                and "voice_transcript" are understood

        Returns:
            DetectionResult; the configured default persona with
            lowConfidence=True when the text carries no signal

        Raises:
            InvalidInputError: If text is not a string or a hint is malformed
        """
        result = self._detect(text, context)
        logger.info(
            f"Detected persona {result.persona} ({result.method}, confidence {result.confidence:.2f}, "
            f"project type {result.project_type})"
        )
        if self.tracker is not None:
            self.tracker.record(result)
        return result

    def get_persona_config(self, name: str) -> PersonaConfig:
        return self.registry.get(name)

    def list_personas(self, type: Optional[str] = None) -> List[PersonaConfig]:
        if type is not None and type not in PROJECT_TYPES:
            raise InvalidInputError(
                message=f"Unknown project type: {type}. Expected one of: {', '.join(PROJECT_TYPES)}"
            )
        return self.registry.list(type)

    def _run_case(
        self,
        tracker: AccuracyTracker,
        number: int,
        case: Union[DetectionTestCase, Mapping[str, Any]],
    ) -> DetectionOutcome:
        name = f"Test {number}"
        expected = None
        try:
            if not isinstance(case, DetectionTestCase):
                case = DetectionTestCase.model_validate(case)
            name = case.name or name
            expected = case.expected_persona
            context = dict(case.context)
            if case.voice_transcript is not None:
                context["voice_transcript"] = case.voice_transcript
            result = self._detect(case.text, context)
        except ValidationError as e:
            return tracker.record_failure(name, expected, f"Malformed test case: {e.error_count()} error(s)", number)
        except AppError as e:
            return tracker.record_failure(name, expected, str(e), number)
        except Exception as e:
            logger.exception(f"Unexpected failure in bulk test case {name}")
            return tracker.record_failure(name, expected, repr(e), number)
        return tracker.record(result, expected=expected, name=name, test_number=number)

    def run_bulk_test(
        self,
        test_cases: Sequence[Union[DetectionTestCase, Mapping[str, Any]]],
        max_workers: int = 1,
    ) -> TestSummary:
        """
        Run detection over labelled cases and report accuracy

        A malformed case is recorded as a failure and does not abort the run

        Args:
            test_cases: DetectionTestCase objects or plain dicts
            max_workers: Thread pool size; results keep input order either way

        Returns:
            TestSummary over this run only; outcomes also join the service
            tracker log and its store
        """
        if max_workers < 1:
            raise InvalidInputError(message="max_workers must be at least 1")

        tracker = self.tracker if self.tracker is not None else AccuracyTracker()
        numbered = list(enumerate(test_cases, start=1))
        logger.info(f"Running bulk persona test over {len(numbered)} cases with {max_workers} worker(s)")

        if max_workers == 1:
            outcomes = [self._run_case(tracker, number, case) for number, case in numbered]
        else:
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bulk-test") as pool:
                outcomes = list(pool.map(lambda item: self._run_case(tracker, *item), numbered))

        summary = AccuracyTracker.summarize(outcomes)
        logger.info(
            f"Bulk test finished: {summary.successful_tests}/{summary.total_tests} succeeded, "
            f"accuracy {summary.overall_accuracy}"
        )
        return summary
