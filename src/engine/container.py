"""Container for the engine services with dependency injection"""
from functools import lru_cache
from typing import Optional

from config import logger, settings
from src.core import ExternalClassifierUnavailable, PersonaRegistry, load_registry
from src.core.ports.classifier import IExternalClassifier
from src.detection import (
    AccuracyTracker,
    ExternalClassifierAdapter,
    JsonlPerformanceStore,
    PersonaDetectionService,
)
from src.recommendation import (
    RecommendationEngine,
    RecommendationService,
    StaticCatalog,
    load_catalog,
)
from src.engine.service import EngineService


@lru_cache(maxsize=1)
def get_registry() -> PersonaRegistry:
    """
    Get singleton PersonaRegistry

    Returns:
        Registry loaded from settings.registry_path with any constant
        overrides from settings applied
    """
    registry = load_registry(settings.registry_path)
    return registry.with_overrides(
        calibration_constant=settings.calibration_constant,
        external_margin=settings.external_margin,
        confidence_floor=settings.confidence_floor,
    )


@lru_cache(maxsize=1)
def get_catalog() -> StaticCatalog:
    return load_catalog(settings.catalog_path)


def _build_external_client(registry: PersonaRegistry) -> Optional[IExternalClassifier]:
    kind = settings.external_classifier
    if kind == "openai":
        from src.detection.clients.openai_client import OpenAIPersonaClassifier

        return OpenAIPersonaClassifier(
            registry,
            api_key=settings.openai_api_key,
            model=settings.openai_model,
        )
    if kind == "zero-shot":
        from src.detection.clients.zero_shot_client import ZeroShotPersonaClassifier

        return ZeroShotPersonaClassifier(registry, model_name=settings.zero_shot_model_name)
    if kind == "static":
        from src.detection.clients.static_client import StaticPersonaClassifier

        return StaticPersonaClassifier(settings.static_persona, settings.static_confidence)
    return None


@lru_cache(maxsize=1)
def get_external_adapter() -> Optional[ExternalClassifierAdapter]:
    """
    Get singleton external classifier adapter

    Returns:
        Adapter around the classifier selected by settings.external_classifier,
        or None when it is disabled or cannot be initialized
    """
    registry = get_registry()
    try:
        client = _build_external_client(registry)
    except ExternalClassifierUnavailable as e:
        logger.warning(f"External classifier disabled: {e}")
        return None
    if client is None:
        return None
    return ExternalClassifierAdapter(
        client,
        registry,
        timeout=settings.external_timeout_seconds,
        max_workers=settings.external_max_workers,
    )


@lru_cache(maxsize=1)
def get_tracker() -> AccuracyTracker:
    store = JsonlPerformanceStore(settings.performance_log_path) if settings.performance_log_path else None
    return AccuracyTracker(store=store)


@lru_cache(maxsize=1)
def get_detection_service() -> PersonaDetectionService:
    return PersonaDetectionService(
        get_registry(),
        external=get_external_adapter(),
        tracker=get_tracker(),
    )


@lru_cache(maxsize=1)
def get_recommendation_service() -> RecommendationService:
    registry = get_registry()
    return RecommendationService(
        registry,
        RecommendationEngine(registry, get_catalog()),
        get_detection_service(),
    )


@lru_cache(maxsize=1)
def get_engine_service() -> EngineService:
    """
    Get singleton EngineService with all dependencies wired

    Returns:
        Facade over detection, recommendation and bulk testing
        Subsequent calls return the same cached instance
    """
    return EngineService(
        detection=get_detection_service(),
        recommendation=get_recommendation_service(),
        catalog=get_catalog(),
    )


def shutdown_engine() -> None:
    """
    Release the external classifier worker threads and drop every cached instance

    Safe to call more than once; the next getter call wires a fresh engine
    """
    if get_external_adapter.cache_info().currsize:
        adapter = get_external_adapter()
        if adapter is not None:
            adapter.shutdown()
    for getter in (
        get_engine_service,
        get_recommendation_service,
        get_detection_service,
        get_tracker,
        get_external_adapter,
        get_catalog,
        get_registry,
    ):
        getter.cache_clear()
