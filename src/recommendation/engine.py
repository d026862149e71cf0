"""Tiered, budget- and compatibility-aware bundle construction"""
import math
import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from config import logger
from src.core.models import (
    TIERS,
    Bundle,
    BundleItem,
    CatalogItem,
    CompatibilityWarning,
    PersonaConfig,
    RecommendationResult,
)
from src.core.ports.catalog import ICatalog
from src.core.registry import PersonaRegistry
from src.detection.normalizer import normalize_term
from src.recommendation.pricing import PricingOptimizer

# Share of maxItems a single category may take when topping a bundle up to minItems
FILL_CATEGORY_SHARE = 0.4


@dataclass
class _Selection:
    """Mutable state while one tier is being assembled"""
    items: List[Tuple[CatalogItem, float]] = field(default_factory=list)
    # group -> (tags still compatible with every chosen item, item that last narrowed them)
    claimed: Dict[str, Tuple[FrozenSet[str], CatalogItem]] = field(default_factory=dict)
    warnings: List[CompatibilityWarning] = field(default_factory=list)

    def count(self, category: str) -> int:
        return sum(1 for item, _ in self.items if item.category == category)

    def holds(self, item: CatalogItem) -> bool:
        return any(chosen.id == item.id for chosen, _ in self.items)


class RecommendationEngine:
    """
    Builds good, better and best bundles for a persona

    Each tier walks the required categories in priority order and picks the
    candidate whose persona-weighted price is nearest the per-category target.
    Items from different ecosystems of an exclusive tag group (for example
    "hub:control4" and "hub:savant") never share a bundle

    Attributes:
        registry: Persona registry with the bundling constants
        catalog: ICatalog snapshot
        pricing: PricingOptimizer used for unit prices and tier selection
    """

    def __init__(
        self,
        registry: PersonaRegistry,
        catalog: ICatalog,
        pricing: Optional[PricingOptimizer] = None,
    ) -> None:
        self.registry = registry
        self.catalog = catalog
        self.pricing = pricing or PricingOptimizer(registry)
        self._hints = {
            category: tuple(
                re.compile(r"\b" + re.escape(normalize_term(hint)) + r"\b")
                for hint in (category,) + tuple(hints)
                if normalize_term(hint)
            )
            for category, hints in registry.category_hints.items()
        }

    def categories_for_requirements(self, requirements: Iterable[str]) -> List[str]:
        """Map requirement strings (category names or hint words) to categories"""
        known = {normalize_term(category): category for category in self.registry.known_categories()}
        categories: List[str] = []
        for requirement in requirements:
            normalized = normalize_term(requirement)
            if not normalized:
                continue
            matched = [known[normalized]] if normalized in known else self._match_hints(normalized)
            for category in matched:
                if category not in categories:
                    categories.append(category)
        return categories

    def infer_categories(self, text: Optional[str]) -> List[str]:
        """Categories whose hint words appear in free text"""
        if not text:
            return []
        return self._match_hints(normalize_term(text))

    def _match_hints(self, normalized: str) -> List[str]:
        return [
            category
            for category, patterns in self._hints.items()
            if any(pattern.search(normalized) for pattern in patterns)
        ]

    def required_categories(
        self,
        persona: PersonaConfig,
        requirements: Sequence[str] = (),
        project_size: Optional[float] = None,
    ) -> Tuple[str, ...]:
        categories = list(persona.required_categories)
        extra = self.categories_for_requirements(requirements)
        if project_size is not None and project_size > self.registry.large_project_threshold:
            extra += list(self.registry.large_project_categories)
        for category in extra:
            if category not in categories:
                categories.append(category)
        return tuple(categories)

    def size_factor(self, project_size: Optional[float]) -> float:
        if not project_size:
            return 1.0
        return min(2.0, max(0.5, project_size / self.registry.reference_project_size))

    def category_target(
        self,
        persona: PersonaConfig,
        tier: str,
        category_count: int,
        project_size: Optional[float] = None,
    ) -> float:
        return (
            persona.budget_range.midpoint
            * persona.price_multiplier
            * self.registry.tier_target_factors[tier]
            * self.size_factor(project_size)
            / max(1, category_count)
        )

    def _exclusive_tags(self, item: CatalogItem) -> Dict[str, FrozenSet[str]]:
        grouped: Dict[str, set] = {}
        for tag in item.compatibility_tags:
            group, _, _ = tag.partition(":")
            if group in self.registry.exclusive_tag_groups:
                grouped.setdefault(group, set()).add(tag)
        return {group: frozenset(tags) for group, tags in grouped.items()}

    def _conflict(self, item: CatalogItem, selection: _Selection) -> Optional[Tuple[str, CatalogItem]]:
        for group, tags in self._exclusive_tags(item).items():
            claimed = selection.claimed.get(group)
            if claimed is not None and not tags & claimed[0]:
                return group, claimed[1]
        return None

    def _claim(self, item: CatalogItem, price: float, selection: _Selection) -> None:
        selection.items.append((item, price))
        for group, tags in self._exclusive_tags(item).items():
            claimed = selection.claimed.get(group)
            if claimed is None:
                selection.claimed[group] = (tags, item)
            elif not claimed[0] <= tags:
                selection.claimed[group] = (claimed[0] & tags, item)

    def _candidates(
        self,
        persona: PersonaConfig,
        tier: str,
        items: List[CatalogItem],
        target: float,
        floor: Optional[float] = None,
    ) -> List[Tuple[CatalogItem, float]]:
        if persona.preferred_brands:
            preferred = [item for item in items if item.brand in persona.preferred_brands]
            items = preferred or items
        priced = [(item, self.pricing.unit_price(item, tier, persona)) for item in items]
        if floor is not None:
            priced = [entry for entry in priced if entry[1] >= floor] or priced
        return sorted(priced, key=lambda entry: (abs(entry[1] - target), entry[1], entry[0].id))

    def _pick(
        self,
        candidates: List[Tuple[CatalogItem, float]],
        selection: _Selection,
        tier: str,
    ) -> Optional[Tuple[CatalogItem, float]]:
        for item, price in candidates:
            if selection.holds(item):
                continue
            conflict = self._conflict(item, selection)
            if conflict is None:
                return item, price
            group, kept = conflict
            if any(warning.dropped_item_id == item.id for warning in selection.warnings):
                continue
            message = f"{item.name} ({item.id}) conflicts with {kept.name} ({kept.id}) on '{group}' and was dropped"
            logger.warning(f"Compatibility conflict in {tier} bundle: {message}")
            selection.warnings.append(
                CompatibilityWarning(
                    kept_item_id=kept.id,
                    dropped_item_id=item.id,
                    tag_group=group,
                    message=message,
                )
            )
        return None

    def _bundle(self, tier: str, selection: _Selection, missing: List[str], min_items: int) -> Bundle:
        items = tuple(
            BundleItem(
                item_id=item.id,
                name=item.name,
                category=item.category,
                brand=item.brand,
                unit_price=price,
            )
            for item, price in selection.items
        )
        return Bundle(
            tier=tier,
            items=items,
            estimated_total=round(sum(item.line_total for item in items), 2),
            incomplete=bool(missing) or len(items) < min_items,
            missing_categories=tuple(missing),
            warnings=tuple(selection.warnings),
        )

    def build_bundle(
        self,
        persona: PersonaConfig,
        tier: str,
        categories: Sequence[str],
        project_size: Optional[float] = None,
        floors: Optional[Dict[str, float]] = None,
    ) -> Bundle:
        """
        Assemble one tier

        Args:
            persona: Persona the bundle is tailored to
            tier: good, better or best
            categories: Required categories in priority order
            project_size: Optional square footage scaling the targets
            floors: Lowest acceptable unit price per category, taken from the lower tier

        Returns:
            Bundle, flagged incomplete when a category is missing or minItems is not reached
        """
        floors = floors or {}
        target = self.category_target(persona, tier, len(categories), project_size)
        missing: List[str] = []
        selection = _Selection()
        remaining: Dict[str, List[Tuple[CatalogItem, float]]] = {}

        for index, category in enumerate(categories):
            if index >= persona.max_items:
                missing.append(category)
                continue
            items = self.catalog.list_items(category)
            candidates = self._candidates(persona, tier, items, target, floors.get(category))
            chosen = self._pick(candidates, selection, tier)
            if chosen is None:
                missing.append(category)
                continue
            self._claim(*chosen, selection)
            # Top-up items are not bound by the lower tier's price floor
            remaining[category] = self._candidates(persona, tier, items, target)

        cap = math.ceil(FILL_CATEGORY_SHARE * persona.max_items)
        while len(selection.items) < persona.min_items:
            added = False
            for category, candidates in remaining.items():
                if len(selection.items) >= persona.min_items:
                    break
                if selection.count(category) >= cap:
                    continue
                chosen = self._pick(candidates, selection, tier)
                if chosen is not None:
                    self._claim(*chosen, selection)
                    added = True
            if not added:
                break

        return self._bundle(tier, selection, missing, persona.min_items)

    def _reprice(self, persona: PersonaConfig, tier: str, lower: Bundle) -> Bundle:
        items = []
        for bundle_item in lower.items:
            price = bundle_item.unit_price
            catalog_item = next(
                (item for item in self.catalog.list_items(bundle_item.category) if item.id == bundle_item.item_id),
                None,
            )
            if catalog_item is not None:
                price = max(price, self.pricing.unit_price(catalog_item, tier, persona))
            items.append(bundle_item.model_copy(update={"unit_price": price}))
        return lower.model_copy(
            update={
                "tier": tier,
                "items": tuple(items),
                "estimated_total": round(sum(item.unit_price * item.quantity for item in items), 2),
            }
        )

    @staticmethod
    def _floors(bundle: Bundle) -> Dict[str, float]:
        floors: Dict[str, float] = {}
        for item in bundle.items:
            floors.setdefault(item.category, item.unit_price)
        return floors

    def build_bundles(
        self,
        persona: PersonaConfig,
        categories: Sequence[str],
        project_size: Optional[float] = None,
    ) -> Dict[str, Bundle]:
        """Build all tiers in order so that each total is at least the previous one"""
        bundles: Dict[str, Bundle] = {}
        lower: Optional[Bundle] = None
        for tier in TIERS:
            floors = self._floors(lower) if lower is not None else None
            bundle = self.build_bundle(persona, tier, categories, project_size, floors)
            if lower is not None and bundle.estimated_total < lower.estimated_total:
                logger.info(
                    f"{tier} bundle for {persona.name} priced below {lower.tier}; carrying {lower.tier} items forward"
                )
                bundle = self._reprice(persona, tier, lower)
            bundles[tier] = bundle
            lower = bundle
        return bundles

    def recommend(
        self,
        persona: PersonaConfig,
        confidence: float,
        budget: Optional[float] = None,
        project_size: Optional[float] = None,
        preferred_tier: Optional[str] = None,
        requirements: Sequence[str] = (),
    ) -> RecommendationResult:
        """
        Produce the three tier bundles and the recommended tier for a persona

        Args:
            persona: Persona configuration
            confidence: Persona confidence carried into the result
            budget: Optional customer budget in dollars
            project_size: Optional project size in square feet
            preferred_tier: Overrides the persona tier preference
            requirements: Extra category names or hint words

        Returns:
            RecommendationResult
        """
        categories = self.required_categories(persona, requirements, project_size)
        bundles = self.build_bundles(persona, categories, project_size)
        totals = self.pricing.tier_prices(bundles)
        preferred = preferred_tier or persona.tier_preference
        tier = self.pricing.select_tier(totals, preferred, budget)
        fit = self.pricing.classify_budget_fit(tier, totals[tier], persona, budget, preferred)
        logger.info(
            f"Recommended {tier} tier for {persona.name} (totals {totals}, budget {budget}, fit {fit})"
        )
        return RecommendationResult(
            persona=persona.name,
            persona_confidence=confidence,
            bundles=bundles,
            recommended_tier=tier,
            budget_fit=fit,
            budget=budget,
            required_categories=categories,
        )
