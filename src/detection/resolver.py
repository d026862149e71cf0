"""Combine rule scores and an optional external prediction into one DetectionResult"""
from typing import Optional

from src.core.models import DetectionResult, ExternalPrediction
from src.core.registry import PersonaRegistry
from src.detection.rules import RuleClassification


class PersonaResolver:
    """
    Deterministic decision policy over rule-based and external signals

    Attributes:
        registry: PersonaRegistry holding the calibration constants and defaults
    """

    def __init__(self, registry: PersonaRegistry) -> None:
        self.registry = registry

    def rule_confidence(self, max_score: float) -> float:
        return min(1.0, max_score / self.registry.calibration_constant)

    def pick_winner(self, rule: RuleClassification) -> str:
        """
        Resolve the top-scoring persona

        Ties go first to personas whose project type was detected in the text,
        then to the earliest-declared persona
        """
        leaders = rule.leaders()
        preferred = [
            name for name in leaders
            if self.registry.get(name).type in rule.context_types
        ]
        return (preferred or leaders)[0]

    def _project_type(self, persona: Optional[str]) -> str:
        if persona is None:
            return "unknown"
        return self.registry.get(persona).type

    def _fallback(self, rule: RuleClassification) -> DetectionResult:
        default = self.registry.default_persona
        return DetectionResult(
            persona=default,
            confidence=self.registry.default_confidence if default else 0.0,
            method="rule-based",
            project_type=self._project_type(default),
            scores=rule.scores,
            low_confidence=True,
        )

    def _external(self, rule: RuleClassification, external: ExternalPrediction) -> DetectionResult:
        return DetectionResult(
            persona=external.persona,
            confidence=external.confidence,
            method="external",
            project_type=self._project_type(external.persona),
            scores=rule.scores,
        )

    def resolve(
        self,
        rule: RuleClassification,
        external: Optional[ExternalPrediction] = None,
    ) -> DetectionResult:
        """
        Decide the final persona

        Args:
            rule: Scores from the rule-based classifier
            external: Validated external prediction, or None when unavailable

        Returns:
            DetectionResult; the configured default with lowConfidence=True
            when neither source carries a signal
        """
        max_score = rule.max_score
        confidence = self.rule_confidence(max_score)

        if max_score <= 0 or confidence < self.registry.confidence_floor:
            if external is not None:
                return self._external(rule, external)
            return self._fallback(rule)

        winner = self.pick_winner(rule)

        if external is not None:
            if external.confidence > confidence + self.registry.external_margin:
                return self._external(rule, external)
            if external.persona == winner:
                return DetectionResult(
                    persona=winner,
                    confidence=max(confidence, external.confidence),
                    method="hybrid",
                    project_type=self._project_type(winner),
                    scores=rule.scores,
                )

        return DetectionResult(
            persona=winner,
            confidence=confidence,
            method="rule-based",
            project_type=self._project_type(winner),
            scores=rule.scores,
        )
