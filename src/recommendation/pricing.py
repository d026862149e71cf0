"""Persona-weighted tier pricing, budget windows and tier selection"""
from typing import Dict, Mapping, Optional, Tuple

from src.core.models import TIERS, Bundle, CatalogItem, PersonaConfig, tier_rank
from src.core.registry import PersonaRegistry


class PricingOptimizer:
    """
    Prices items for a persona and decides which tier to recommend

    Attributes:
        registry: Supplies the budget window factors
    """

    def __init__(self, registry: PersonaRegistry) -> None:
        self.registry = registry

    def unit_price(self, item: CatalogItem, tier: str, persona: PersonaConfig) -> float:
        return round(item.price_for_tier(tier) * persona.price_multiplier, 2)

    @staticmethod
    def tier_prices(bundles: Mapping[str, Bundle]) -> Dict[str, float]:
        return {tier: bundles[tier].estimated_total for tier in TIERS if tier in bundles}

    def window(self, budget: float) -> Tuple[float, float]:
        low, high = self.registry.budget_window
        return budget * low, budget * high

    def within_window(self, total: float, budget: float) -> bool:
        low, high = self.window(budget)
        return low <= total <= high

    def select_tier(
        self,
        totals: Mapping[str, float],
        preferred: str,
        budget: Optional[float] = None,
    ) -> str:
        """
        Choose the tier to recommend

        Without a budget the preference stands. With a budget the preference is
        kept while its total sits inside the window; otherwise the in-window
        tier nearest the budget wins, and when no tier fits, the tier whose
        total is closest to the budget

        Args:
            totals: Estimated total per tier
            preferred: Caller or persona tier preference
            budget: Optional customer budget

        Returns:
            Tier name
        """
        if budget is None:
            return preferred
        if self.within_window(totals[preferred], budget):
            return preferred

        def distance(tier: str):
            return abs(totals[tier] - budget), tier_rank(tier)

        in_window = [tier for tier in TIERS if self.within_window(totals[tier], budget)]
        if in_window:
            return min(in_window, key=distance)
        return min(TIERS, key=distance)

    def classify_budget_fit(
        self,
        tier: str,
        total: float,
        persona: PersonaConfig,
        budget: Optional[float] = None,
        preferred: Optional[str] = None,
    ) -> str:
        preferred = preferred or persona.tier_preference
        if budget is not None and not self.within_window(total, budget):
            return "outside-range"
        if tier == preferred and persona.budget_range.contains(total):
            return "optimal"
        if tier_rank(tier) > tier_rank(preferred):
            fits = total <= self.window(budget)[1] if budget is not None else total <= persona.budget_range.max
            if fits:
                return "upgrade"
        return "alternative"
