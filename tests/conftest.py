"""Shared fixtures: a small registry and catalog built in code"""

import pytest

from src.core import CatalogItem, PersonaConfig, PersonaRegistry
from src.detection import AccuracyTracker, PersonaDetectionService
from src.recommendation import RecommendationEngine, RecommendationService, StaticCatalog


def make_persona(**overrides) -> PersonaConfig:
    """Build a persona with sensible defaults; keyword arguments use field names."""
    data = {
        "name": "homeowner",
        "type": "residential",
        "display_name": "Homeowner",
        "key_features": ["easy-to-use"],
        "tier_preference": "better",
        "price_multiplier": 1.0,
        "budget_range": {"min": 5000, "max": 25000},
        "confidence_boost": 0.2,
        "patterns": {
            "keywords": ["home", "family", "security"],
            "phrases": ["my home"],
            "context_clues": ["residential", "house"],
        },
        "required_categories": ["security", "lighting"],
        "min_items": 2,
        "max_items": 6,
    }
    data.update(overrides)
    return PersonaConfig.model_validate(data)


def make_personas():
    return (
        make_persona(),
        make_persona(
            name="designer",
            display_name="Interior Designer",
            tier_preference="best",
            price_multiplier=1.25,
            budget_range={"min": 15000, "max": 75000},
            confidence_boost=0.3,
            patterns={
                "keywords": ["design", "elegant", "lighting"],
                "phrases": ["interior design"],
                "context_clues": ["designer"],
            },
            required_categories=["lighting", "audio-video"],
        ),
        make_persona(
            name="it-director",
            type="commercial",
            display_name="IT Director",
            tier_preference="best",
            price_multiplier=1.3,
            budget_range={"min": 50000, "max": 100000},
            confidence_boost=0.4,
            patterns={
                "keywords": ["network", "security", "infrastructure"],
                "phrases": ["network security"],
                "context_clues": ["office", "cto"],
            },
            required_categories=["networking", "security"],
        ),
        make_persona(
            name="office-manager",
            type="commercial",
            display_name="Office Manager",
            budget_range={"min": 8000, "max": 20000},
            confidence_boost=0.25,
            patterns={
                "keywords": ["office", "staff", "budget"],
                "phrases": ["office operations"],
                "context_clues": ["office manager"],
            },
            required_categories=["lighting", "climate"],
        ),
    )


def make_registry(**overrides) -> PersonaRegistry:
    data = {
        "personas": make_personas(),
        "category_hints": {
            "audio-video": ["audio", "tv"],
            "networking": ["wifi", "network"],
            "climate": ["thermostat"],
        },
    }
    data.update(overrides)
    return PersonaRegistry.model_validate(data)


def make_item(item_id, category, prices=None, base_price=None, brand="", tags=()):
    good, better, best = prices if prices else (None, None, None)
    return CatalogItem(
        id=item_id,
        name=item_id.replace("-", " ").title(),
        category=category,
        brand=brand,
        base_price=base_price if base_price is not None else good,
        good_tier_price=good,
        better_tier_price=better,
        best_tier_price=best,
        compatibility_tags=tags,
    )


def make_catalog_items():
    return [
        make_item("camera-kit", "security", (1000, 1200, 1500)),
        make_item("nvr-system", "security", (3000, 3600, 4500)),
        make_item("lutron-switches", "lighting", (1500, 1800, 2200), brand="Lutron"),
        make_item("savant-lighting", "lighting", (4000, 4800, 6000), brand="Savant", tags=("hub:savant",)),
        make_item("generic-dimmers", "lighting", base_price=2500),
        make_item("control4-controller", "audio-video", (3800, 4500, 5500), brand="Control4", tags=("hub:control4",)),
        make_item("sonos-audio", "audio-video", (2600, 3100, 3800), brand="Sonos"),
        make_item("mesh-network", "networking", (2000, 2400, 3000)),
        make_item("thermostat", "climate", base_price=300),
    ]


@pytest.fixture
def registry():
    """Registry with two residential and two commercial personas."""
    return make_registry()


@pytest.fixture
def catalog():
    """Catalog with security, lighting, audio-video, networking and climate items."""
    return StaticCatalog(make_catalog_items())


@pytest.fixture
def tracker():
    return AccuracyTracker()


@pytest.fixture
def detection_service(registry, tracker):
    return PersonaDetectionService(registry, tracker=tracker)


@pytest.fixture
def engine(registry, catalog):
    return RecommendationEngine(registry, catalog)


@pytest.fixture
def recommendation_service(registry, engine, detection_service):
    return RecommendationService(registry, engine, detection_service)
