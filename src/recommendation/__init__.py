"""
Recommendation module
"""

from .catalog import StaticCatalog, load_catalog
from .pricing import PricingOptimizer
from .engine import RecommendationEngine
from .service import RecommendationService

__all__ = [
    "StaticCatalog",
    "load_catalog",
    "PricingOptimizer",
    "RecommendationEngine",
    "RecommendationService",
]
