"""
Detection module
"""

from .normalizer import NormalizedText, normalize, normalize_term, combine_text, extract_budget
from .rules import RuleBasedClassifier, RuleClassification
from .resolver import PersonaResolver
from .external import ExternalClassifierAdapter
from .tracker import AccuracyTracker
from .performance_store import InMemoryPerformanceStore, JsonlPerformanceStore
from .service import PersonaDetectionService

__all__ = [
    "NormalizedText",
    "normalize",
    "normalize_term",
    "combine_text",
    "extract_budget",
    "RuleBasedClassifier",
    "RuleClassification",
    "PersonaResolver",
    "ExternalClassifierAdapter",
    "AccuracyTracker",
    "InMemoryPerformanceStore",
    "JsonlPerformanceStore",
    "PersonaDetectionService",
]
