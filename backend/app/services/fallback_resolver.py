"""Fallback resolver — deterministic substitutes for disabled or failing providers.

Every enrichment path asks this one place what to use instead of a provider
call: heuristic cost bands, neutral engagement, content-derived taste,
omitted events. Nothing here touches the network.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from app.data.destination_tiers import (
    THEME_AFFINITIES,
    TIER_BUDGET_BANDS,
    TIER_DEFAULT_TOTALS,
    city_tier,
    daily_costs,
)
from app.services.capability_matrix import SOCIAL_PLATFORMS, CapabilityMatrix
from app.services.recommendation.models import (
    CostEstimate,
    CreatorCommunity,
    DailyBreakdown,
)

logger = logging.getLogger(__name__)

# Signal kind → providers that can supply it (any enabled one is enough)
SIGNAL_PROVIDERS: dict[str, tuple[str, ...]] = {
    "taste": ("qloo",),
    "engagement": SOCIAL_PLATFORMS,
    "brand": ("qloo",),
    "cost": ("amadeus", "numbeo"),
    "creators": ("social_searcher", "qloo"),
    "places": ("places",),
    "events": ("ticketmaster",),
}


@dataclass(frozen=True)
class FallbackValue:
    """What a fallback produced, and which strategy produced it."""
    kind: str
    strategy: str
    value: Any = None
    note: str = ""


class FallbackResolver:
    """Single lookup point for provider substitutes, keyed by signal kind."""

    def __init__(self, matrix: CapabilityMatrix):
        self.matrix = matrix

    # ---- Availability ----

    def is_available(self, kind: str) -> bool:
        providers = SIGNAL_PROVIDERS.get(kind, (kind,))
        return any(self.matrix.is_enabled(p) for p in providers)

    def strategy_for(self, kind: str) -> str:
        providers = SIGNAL_PROVIDERS.get(kind, (kind,))
        return self.matrix.fallback_for(providers[0])

    # ---- Substitutes ----

    def resolve(self, kind: str, **context) -> FallbackValue:
        """Dispatch to the substitute for a signal kind."""
        handler = {
            "taste": self.taste,
            "engagement": self.engagement,
            "brand": self.brand,
            "cost": self.cost,
            "creators": self.creators,
            "places": self.places,
            "events": self.events,
        }.get(kind)
        if handler is None:
            return FallbackValue(kind=kind, strategy="unavailable")
        return handler(**context)

    def taste(self, themes: tuple[str, ...] = (), **_) -> FallbackValue:
        """Heuristic affinity from content themes. No themes ⇒ no value (scored neutral)."""
        if not themes:
            return FallbackValue("taste", "content-heuristic", None, "No content themes available")
        affinity = sum(THEME_AFFINITIES.get(t.lower(), 0.5) for t in themes) / len(themes)
        return FallbackValue(
            "taste", "content-heuristic", round(affinity, 4),
            "Heuristic mode — derived from content themes",
        )

    def engagement(self, **_) -> FallbackValue:
        """No engagement data: leave the signal empty so scoring uses the neutral value."""
        platforms = self.matrix.enabled_platforms()
        if not platforms:
            return FallbackValue("engagement", "neutral-engagement", None, "No social platforms enabled")
        return FallbackValue(
            "engagement", "neutral-engagement", None,
            f"Engagement lookup failed for: {', '.join(platforms)}",
        )

    def brand(self, **_) -> FallbackValue:
        return FallbackValue("brand", "omit-signal", None)

    def cost(
        self,
        name: str = "",
        country: str = "",
        duration_days: int = 7,
        **_,
    ) -> FallbackValue:
        """City-tier cost estimate built from the static daily cost tables."""
        nights = max(1, int(duration_days))
        costs = daily_costs(name, country)
        breakdown = DailyBreakdown(
            meals=costs["meals"],
            transport=costs["transport"],
            activities=costs["activities"],
            misc=costs["misc"],
        )
        total = costs["flights"] + nights * (costs["accommodation"] + breakdown.total)
        tier = city_tier(name)
        estimate = CostEstimate(
            flights=costs["flights"],
            accommodation_per_night=costs["accommodation"],
            daily_living=breakdown.total,
            daily_breakdown=breakdown,
            min_total=round(total * 0.9),
            max_total=round(total * 1.15),
            total=total,
            source="heuristic",
        )
        return FallbackValue(
            "cost", "city-tier-bands", estimate,
            f"Heuristic pricing ({tier}, {TIER_BUDGET_BANDS[tier]['daily']}/day) — actual costs may vary",
        )

    def default_total(self, name: str) -> int:
        """Whole-trip total for a destination that carries no cost data at all."""
        return TIER_DEFAULT_TOTALS[city_tier(name)]

    def budget_band(self, name: str) -> dict:
        tier = city_tier(name)
        return {
            "tier": tier,
            "accommodation": TIER_BUDGET_BANDS[tier],
            "note": "Heuristic pricing - actual costs may vary",
            "fallback_used": "city-tier-bands",
        }

    def creators(self, **_) -> FallbackValue:
        return FallbackValue(
            "creators", "available-platforms",
            CreatorCommunity(total_reported=0, records=(), data_source="insufficient"),
        )

    def places(self, name: str = "", country: str = "", **_) -> FallbackValue:
        return FallbackValue("places", "osm-nominatim", {
            "name": name.split(",")[0].strip(),
            "region": country or "Unknown",
            "description": "High-level city information available",
            "details": "Limited - no specific opening hours/ratings available",
        })

    def events(self, **_) -> FallbackValue:
        return FallbackValue("events", "omit-events", {
            "omitted": True,
            "reason": "Events API not available",
        })

    # ---- Call wrapper ----

    async def call_with_fallback(
        self,
        kind: str,
        call: Callable[[], Awaitable[Any]],
        **context,
    ) -> tuple[Any, str | None]:
        """Run a provider call, or substitute when disabled or failing.

        Returns (value, fallback_strategy). fallback_strategy is None when the
        provider answered.
        """
        if not self.is_available(kind):
            fb = self.resolve(kind, **context)
            logger.info(f"{kind}: provider disabled, using {fb.strategy}")
            return fb.value, fb.strategy

        try:
            return await call(), None
        except Exception as e:
            fb = self.resolve(kind, **context)
            logger.warning(f"{kind}: provider call failed, using {fb.strategy}: {e}")
            return fb.value, fb.strategy
