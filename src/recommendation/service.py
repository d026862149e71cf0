"""Recommendation service: input validation, persona resolution and bundle generation"""
from __future__ import annotations

import numbers
from typing import Optional, Sequence

from config import logger
from src.core import (
    TIERS,
    InvalidInputError,
    PersonaRegistry,
    RecommendationResult,
)
from src.detection.normalizer import extract_budget
from src.detection.service import PersonaDetectionService
from src.recommendation.engine import RecommendationEngine


def _non_negative(value, label: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInputError(message=f"{label} must be a number")
    if value < 0:
        raise InvalidInputError(message=f"{label} must not be negative")
    return float(value)


class RecommendationService:
    """
    Turns a persona, or the text it is detected from, into tiered bundles

    Attributes:
        registry: Persona registry
        engine: RecommendationEngine building the bundles
        detection: PersonaDetectionService used when no persona is given
    """

    def __init__(
        self,
        registry: PersonaRegistry,
        engine: RecommendationEngine,
        detection: PersonaDetectionService,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.detection = detection

    def generate_recommendations(
        self,
        persona: Optional[str] = None,
        text: Optional[str] = None,
        budget: Optional[float] = None,
        project_size: Optional[float] = None,
        preferred_tier: Optional[str] = None,
        requirements: Optional[Sequence[str]] = None,
    ) -> RecommendationResult:
        """
        Generate good, better and best bundles

        Args:
            persona: Persona name; detected from text when omitted
            text: Customer text used for detection, budget extraction and
                requirement hints
            budget: Budget in dollars; extracted from text when omitted
            project_size: Project size in square feet
            preferred_tier: Overrides the persona tier preference
            requirements: Category names or hint words to include

        Returns:
            RecommendationResult, carrying the DetectionResult when the
            persona was detected from text

        Raises:
            InvalidInputError: On an unknown tier, a negative or non-numeric
                budget or size, or malformed text or requirements
            PersonaNotFoundError: If the persona name is not registered
        """
        if preferred_tier is not None and preferred_tier not in TIERS:
            raise InvalidInputError(
                message=f"Unknown tier: {preferred_tier}. Expected one of: {', '.join(TIERS)}"
            )
        budget = _non_negative(budget, "Budget")
        project_size = _non_negative(project_size, "Project size")
        if text is not None and not isinstance(text, str):
            raise InvalidInputError(message="Text input must be a string")
        if requirements is None:
            requirements = []
        elif isinstance(requirements, str) or not all(isinstance(r, str) for r in requirements):
            raise InvalidInputError(message="Requirements must be a list of strings")

        detection = None
        if persona is not None:
            config = self.registry.get(persona)
            confidence = 1.0
        elif text and text.strip():
            detection = self.detection.detect_persona(text)
            if detection.persona is None:
                raise InvalidInputError(message="No persona could be detected and no default is configured")
            config = self.registry.get(detection.persona)
            confidence = detection.confidence
        else:
            if self.registry.default_persona is None:
                raise InvalidInputError(message="A persona or customer text is required")
            config = self.registry.get(self.registry.default_persona)
            confidence = self.registry.default_confidence

        if budget is None:
            budget = extract_budget(text)
            if budget is not None:
                logger.info(f"Using budget {budget:.2f} stated in customer text")

        requirements = list(requirements) + self.engine.infer_categories(text)
        result = self.engine.recommend(
            config,
            confidence,
            budget=budget,
            project_size=project_size,
            preferred_tier=preferred_tier,
            requirements=requirements,
        )
        if detection is not None:
            result = result.model_copy(update={"detection": detection})
        return result
