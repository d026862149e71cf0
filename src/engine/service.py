"""Facade exposing persona detection and tiered recommendations"""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from src.core import (
    DetectionResult,
    DetectionTestCase,
    PersonaConfig,
    RecommendationResult,
    TestSummary,
)
from src.core.ports.catalog import ICatalog
from src.detection.service import PersonaDetectionService
from src.recommendation.service import RecommendationService


class EngineService:
    """
    Single entry point for callers such as the UI

    Attributes:
        detection: PersonaDetectionService
        recommendation: RecommendationService
        catalog: Catalog snapshot, reported by health()
    """

    def __init__(
        self,
        detection: PersonaDetectionService,
        recommendation: RecommendationService,
        catalog: ICatalog,
    ) -> None:
        self.detection = detection
        self.recommendation = recommendation
        self.catalog = catalog

    def detect_persona(
        self,
        text: Optional[str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> DetectionResult:
        return self.detection.detect_persona(text, context)

    def get_persona_config(self, name: str) -> PersonaConfig:
        return self.detection.get_persona_config(name)

    def list_personas(self, type: Optional[str] = None) -> List[PersonaConfig]:
        return self.detection.list_personas(type)

    def generate_recommendations(
        self,
        persona: Optional[str] = None,
        text: Optional[str] = None,
        budget: Optional[float] = None,
        project_size: Optional[float] = None,
        preferred_tier: Optional[str] = None,
        requirements: Optional[Sequence[str]] = None,
    ) -> RecommendationResult:
        return self.recommendation.generate_recommendations(
            persona=persona,
            text=text,
            budget=budget,
            project_size=project_size,
            preferred_tier=preferred_tier,
            requirements=requirements,
        )

    def run_bulk_test(
        self,
        test_cases: Sequence[Union[DetectionTestCase, Mapping[str, Any]]],
        max_workers: int = 1,
    ) -> TestSummary:
        return self.detection.run_bulk_test(test_cases, max_workers=max_workers)

    def health(self) -> Dict[str, Any]:
        """Summary of the wired configuration"""
        external = self.detection.external
        return {
            "status": "ok",
            "personas": len(self.detection.registry.personas),
            "catalog_items": len(self.catalog.list_items()),
            "external_classifier": external.name if external is not None else None,
            "tracked_detections": len(self.detection.tracker) if self.detection.tracker is not None else 0,
        }
