"""Signal enrichment — assembles per-destination signals from upstream providers.

Every destination is enriched concurrently, and within a destination every
signal group is fetched concurrently. A disabled provider is never called;
a failing one is logged and replaced by the fallback resolver's value.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from app.services.fallback_resolver import FallbackResolver
from app.services.recommendation.models import (
    BrandMetrics,
    CandidateDestination,
    CostEstimate,
    CreatorCommunity,
    EngagementMetrics,
    UserPreferences,
)

logger = logging.getLogger(__name__)


class DestinationSignalProvider(Protocol):
    """Upstream collaborator supplying raw signals for one destination.
    Any method may return None or raise; both are handled by the enricher."""

    async def taste_affinity(self, destination: CandidateDestination, preferences: UserPreferences) -> float | None: ...

    async def engagement(self, destination: CandidateDestination, preferences: UserPreferences) -> EngagementMetrics | None: ...

    async def brand(self, destination: CandidateDestination, preferences: UserPreferences) -> BrandMetrics | None: ...

    async def cost(self, destination: CandidateDestination, preferences: UserPreferences) -> CostEstimate | None: ...

    async def creators(self, destination: CandidateDestination, preferences: UserPreferences) -> CreatorCommunity | None: ...


# Signal kind → (destination field, provider method)
SIGNAL_FIELDS: dict[str, tuple[str, str]] = {
    "taste": ("taste_affinity", "taste_affinity"),
    "engagement": ("engagement", "engagement"),
    "brand": ("brand", "brand"),
    "cost": ("cost", "cost"),
    "creators": ("creators", "creators"),
}


@dataclass
class EnrichmentResult:
    destinations: list[CandidateDestination] = field(default_factory=list)
    dropped: dict[str, str] = field(default_factory=dict)
    fallbacks_used: dict[str, list[str]] = field(default_factory=dict)   # name → ["kind->strategy"]


class SignalEnricher:
    """Fills in every signal group a seed destination does not already carry."""

    def __init__(self, resolver: FallbackResolver, provider: DestinationSignalProvider | None = None):
        self.resolver = resolver
        self.provider = provider

    async def enrich(
        self,
        seeds: list[CandidateDestination],
        preferences: UserPreferences,
    ) -> EnrichmentResult:
        result = EnrichmentResult()
        if not seeds:
            return result

        outcomes = await asyncio.gather(
            *(self._enrich_one(seed, preferences) for seed in seeds),
            return_exceptions=True,
        )

        for seed, outcome in zip(seeds, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Enrichment failed for {seed.name}, dropping: {outcome}")
                result.dropped[seed.name] = f"enrichment failed: {outcome}"
                continue
            destination, fallbacks = outcome
            result.destinations.append(destination)
            if fallbacks:
                result.fallbacks_used[destination.name] = fallbacks

        logger.info(
            f"Enrichment: {len(result.destinations)}/{len(seeds)} destinations enriched, "
            f"{len(result.fallbacks_used)} used fallbacks"
        )
        return result

    async def _enrich_one(
        self,
        seed: CandidateDestination,
        preferences: UserPreferences,
    ) -> tuple[CandidateDestination, list[str]]:
        context = {
            "name": seed.name,
            "country": seed.country,
            "duration_days": preferences.duration_days,
            "themes": preferences.themes,
        }

        pending = [
            kind for kind, (attr, _) in SIGNAL_FIELDS.items()
            if getattr(seed, attr) is None
        ]
        if not pending:
            return seed, []

        values = await asyncio.gather(
            *(self._fetch(kind, seed, preferences, context) for kind in pending)
        )

        updates: dict = {}
        fallbacks: list[str] = []
        for kind, (value, strategy) in zip(pending, values):
            updates[SIGNAL_FIELDS[kind][0]] = value
            if strategy:
                fallbacks.append(f"{kind}->{strategy}")

        return replace(seed, **updates), fallbacks

    async def _fetch(self, kind: str, seed: CandidateDestination, preferences: UserPreferences, context: dict):
        if self.provider is None:
            fb = self.resolver.resolve(kind, **context)
            return fb.value, fb.strategy

        method = getattr(self.provider, SIGNAL_FIELDS[kind][1])
        value, strategy = await self.resolver.call_with_fallback(
            kind, lambda: method(seed, preferences), **context
        )
        if value is None and strategy is None:
            # Provider answered with nothing usable
            fb = self.resolver.resolve(kind, **context)
            return fb.value, fb.strategy
        return value, strategy
