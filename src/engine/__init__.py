"""
Engine facade module
"""

from .service import EngineService
from .container import (
    get_registry,
    get_catalog,
    get_external_adapter,
    get_tracker,
    get_detection_service,
    get_recommendation_service,
    get_engine_service,
    shutdown_engine,
)

__all__ = [
    "EngineService",
    "get_registry",
    "get_catalog",
    "get_external_adapter",
    "get_tracker",
    "get_detection_service",
    "get_recommendation_service",
    "get_engine_service",
    "shutdown_engine",
]
