"""
Core domain layer
"""
from .models import (
    TIERS,
    PROJECT_TYPES,
    tier_rank,
    WeightedTerm,
    DetectionPattern,
    BudgetRange,
    PersonaConfig,
    DetectionResult,
    ExternalPrediction,
    CatalogItem,
    BundleItem,
    CompatibilityWarning,
    Bundle,
    RecommendationResult,
    DetectionTestCase,
    DetectionOutcome,
    TestSummary,
)
from .exceptions import (
    AppError,
    InvalidInputError,
    PersonaNotFoundError,
    ConfigurationError,
    RegistryLoadError,
    CatalogLoadError,
    ExternalClassifierUnavailable,
    ModelNotLoadedError,
)
from .registry import PersonaRegistry, load_registry

__all__ = [
    "TIERS",
    "PROJECT_TYPES",
    "tier_rank",
    "WeightedTerm",
    "DetectionPattern",
    "BudgetRange",
    "PersonaConfig",
    "DetectionResult",
    "ExternalPrediction",
    "CatalogItem",
    "BundleItem",
    "CompatibilityWarning",
    "Bundle",
    "RecommendationResult",
    "DetectionTestCase",
    "DetectionOutcome",
    "TestSummary",
    "AppError",
    "InvalidInputError",
    "PersonaNotFoundError",
    "ConfigurationError",
    "RegistryLoadError",
    "CatalogLoadError",
    "ExternalClassifierUnavailable",
    "ModelNotLoadedError",
    "PersonaRegistry",
    "load_registry",
]
