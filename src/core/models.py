"""Core data models for persona detection and tiered recommendations"""
import json
from datetime import datetime, timezone
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Tier = Literal["good", "better", "best"]
ProjectType = Literal["residential", "commercial"]
DetectedProjectType = Literal["residential", "commercial", "unknown"]
DetectionMethod = Literal["rule-based", "external", "hybrid"]
BudgetFit = Literal["optimal", "upgrade", "alternative", "outside-range"]

TIERS: Tuple[str, ...] = ("good", "better", "best")
PROJECT_TYPES: Tuple[str, ...] = ("residential", "commercial")

DEFAULT_KEYWORD_WEIGHT = 1.0
DEFAULT_PHRASE_WEIGHT = 2.0

# Used when a catalog item carries no explicit price for a tier
TIER_PRICE_FALLBACK: Dict[str, float] = {"good": 1.0, "better": 1.15, "best": 1.35}


def tier_rank(tier: str) -> int:
    """Position of a tier in good < better < best"""
    return TIERS.index(tier)


class EngineModel(BaseModel):
    """Immutable base model with camelCase wire aliases"""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _as_weighted_terms(value, default_weight: float):
    if value is None:
        return ()
    if isinstance(value, (str, dict)):
        value = [value]
    terms = []
    for entry in value:
        if isinstance(entry, str):
            terms.append({"term": entry, "weight": default_weight})
        else:
            terms.append(entry)
    return terms


class WeightedTerm(EngineModel):
    """A keyword or phrase with its score contribution"""
    term: str = Field(..., min_length=1)
    weight: float = Field(..., gt=0.0)


class DetectionPattern(EngineModel):
    """Vocabulary that identifies one persona"""
    keywords: Tuple[WeightedTerm, ...] = ()
    phrases: Tuple[WeightedTerm, ...] = ()
    context_clues: Tuple[str, ...] = Field(
        default=(),
        description="Signals for the persona's project type rather than the persona itself"
    )

    @field_validator("keywords", mode="before")
    @classmethod
    def _keyword_weights(cls, value):
        return _as_weighted_terms(value, DEFAULT_KEYWORD_WEIGHT)

    @field_validator("phrases", mode="before")
    @classmethod
    def _phrase_weights(cls, value):
        return _as_weighted_terms(value, DEFAULT_PHRASE_WEIGHT)


class BudgetRange(EngineModel):
    """Inclusive price band a persona usually spends in"""
    min: float = Field(..., ge=0.0)
    max: float = Field(..., ge=0.0)

    @model_validator(mode="after")
    def _ordered(self) -> "BudgetRange":
        if self.min > self.max:
            raise ValueError(f"budget range min {self.min} exceeds max {self.max}")
        return self

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    def contains(self, amount: float) -> bool:
        return self.min <= amount <= self.max


class PersonaConfig(EngineModel):
    """Detection patterns and business preferences of one persona"""
    name: str = Field(..., min_length=1)
    type: ProjectType
    display_name: str
    key_features: Tuple[str, ...] = ()
    tier_preference: Tier
    price_multiplier: float = Field(..., gt=0.0)
    budget_range: BudgetRange
    confidence_boost: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Added to the raw score when a context clue of this persona's type is present"
    )
    patterns: DetectionPattern
    required_categories: Tuple[str, ...] = Field(..., min_length=1)
    min_items: int = Field(default=1, ge=1)
    max_items: int = Field(default=12, ge=1)
    preferred_brands: Tuple[str, ...] = ()
    bundle_strategy: Optional[str] = None

    @field_validator("key_features", mode="before")
    @classmethod
    def _parse_key_features(cls, value):
        # Older registry exports store the list as a JSON string
        if value is None:
            return ()
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return ()
            if stripped.startswith("["):
                try:
                    value = json.loads(stripped)
                except json.JSONDecodeError as e:
                    raise ValueError(f"keyFeatures is not valid JSON: {e}") from e
            else:
                value = stripped.split(",")
        return tuple(str(feature).strip() for feature in value if str(feature).strip())

    @model_validator(mode="after")
    def _item_bounds(self) -> "PersonaConfig":
        if self.min_items > self.max_items:
            raise ValueError(
                f"persona '{self.name}' has minItems {self.min_items} above maxItems {self.max_items}"
            )
        return self


class DetectionResult(EngineModel):
    """Final persona decision for one piece of text"""
    persona: Optional[str] = Field(
        None,
        description="Detected persona; None when no signal met the floor and no default is configured"
    )
    confidence: float = Field(..., ge=0.0, le=1.0)
    method: DetectionMethod
    project_type: DetectedProjectType = "unknown"
    scores: Dict[str, float] = Field(
        default_factory=dict,
        description="Raw rule-based score per persona, in registry order"
    )
    low_confidence: bool = Field(
        default=False,
        description="True when the result is the configured default rather than a detected signal"
    )


class ExternalPrediction(BaseModel):
    """Raw answer of an external classifier, validated by the adapter"""
    persona: str
    confidence: float
    reasoning: Optional[str] = None


class CatalogItem(EngineModel):
    """Read-only product as exposed by the catalog store"""
    id: str = Field(..., min_length=1)
    name: str
    category: str
    brand: str = ""
    base_price: float = Field(..., ge=0.0)
    good_tier_price: Optional[float] = Field(None, ge=0.0)
    better_tier_price: Optional[float] = Field(None, ge=0.0)
    best_tier_price: Optional[float] = Field(None, ge=0.0)
    compatibility_tags: Tuple[str, ...] = ()

    def price_for_tier(self, tier: str) -> float:
        explicit = {
            "good": self.good_tier_price,
            "better": self.better_tier_price,
            "best": self.best_tier_price,
        }[tier]
        if explicit is not None:
            return explicit
        return round(self.base_price * TIER_PRICE_FALLBACK[tier], 2)


class BundleItem(EngineModel):
    """Catalog item placed in a bundle at a resolved unit price"""
    item_id: str
    name: str
    category: str
    brand: str = ""
    unit_price: float = Field(..., ge=0.0)
    quantity: int = Field(default=1, ge=1)

    @computed_field(alias="lineTotal")
    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)


class CompatibilityWarning(EngineModel):
    """Record of an item dropped because it conflicts with a higher-priority item"""
    kept_item_id: str
    dropped_item_id: str
    tag_group: str
    message: str


class Bundle(EngineModel):
    """Items assembled for one tier"""
    tier: Tier
    items: Tuple[BundleItem, ...] = ()
    estimated_total: float = Field(default=0.0, ge=0.0)
    incomplete: bool = False
    missing_categories: Tuple[str, ...] = ()
    warnings: Tuple[CompatibilityWarning, ...] = ()

    @property
    def categories(self) -> Tuple[str, ...]:
        seen = []
        for item in self.items:
            if item.category not in seen:
                seen.append(item.category)
        return tuple(seen)


class RecommendationResult(EngineModel):
    """Three tier bundles plus the tier recommended for the persona"""
    persona: str
    persona_confidence: float = Field(..., ge=0.0, le=1.0)
    bundles: Dict[Tier, Bundle]
    recommended_tier: Tier
    budget_fit: BudgetFit
    budget: Optional[float] = None
    required_categories: Tuple[str, ...] = ()
    detection: Optional[DetectionResult] = None

    @property
    def recommended_bundle(self) -> Bundle:
        return self.bundles[self.recommended_tier]


class DetectionTestCase(EngineModel):
    """Labelled input used by bulk accuracy tests"""
    text: Optional[str] = None
    voice_transcript: Optional[str] = None
    expected_persona: Optional[str] = None
    name: Optional[str] = None
    context: Dict[str, str] = Field(default_factory=dict)


class DetectionOutcome(EngineModel):
    """One tracked detection compared against its expected persona"""
    sequence: Optional[int] = None
    test_number: Optional[int] = None
    name: Optional[str] = None
    expected: Optional[str] = None
    detected: Optional[str] = None
    confidence: Optional[float] = None
    method: Optional[DetectionMethod] = None
    project_type: Optional[DetectedProjectType] = None
    is_correct: Optional[bool] = None
    accuracy: Optional[float] = None
    error: Optional[str] = None
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return self.error is None


class TestSummary(EngineModel):
    """Aggregate of a bulk detection run"""
    total_tests: int = 0
    successful_tests: int = 0
    failed_tests: int = 0
    tests_with_expected: int = 0
    correct_predictions: int = 0
    overall_accuracy: Optional[float] = Field(
        None,
        description="Percentage of labelled successful cases detected correctly, 2 decimals"
    )
    results: Tuple[DetectionOutcome, ...] = ()
