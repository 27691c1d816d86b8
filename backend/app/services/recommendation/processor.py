"""Recommendation processor — hard filter → score → creator gating → Top-3.

Stages run strictly in order over the whole candidate set. A destination that
fails inside any stage is dropped with its reason; the others continue.
"""

import logging
import math
from dataclasses import replace
from datetime import date

from app.services.fallback_resolver import FallbackResolver
from app.services.recommendation import budget_banding, creator_gating
from app.services.recommendation.config import recommendation_config
from app.services.recommendation.models import (
    OUT_OF_BAND,
    STATUS_ORDER,
    BudgetedDestination,
    CandidateDestination,
    NoFitResult,
    RecommendationResult,
    ScoredDestination,
    ScoringSignals,
    UserPreferences,
)
from app.services.scoring_engine import brand_signal, engagement_signal, score_signals

logger = logging.getLogger(__name__)

cfg = recommendation_config

# Local-creator value used before gating has run
PROVISIONAL_LOCAL_CREATOR = 0.5


class RecommendationProcessor:
    """Turns enriched candidates into a ranked Top-N or a no-fit outcome."""

    def __init__(self, resolver: FallbackResolver | None = None, top_n: int | None = None):
        self.resolver = resolver
        self.top_n = top_n or cfg.selection.top_n

    def process(
        self,
        destinations: list[CandidateDestination],
        preferences: UserPreferences,
        today: date | None = None,
    ) -> RecommendationResult:
        logger.info(
            f"Processing {len(destinations)} destinations for budget "
            f"{preferences.budget} {preferences.currency}"
        )
        result = RecommendationResult(total_processed=len(destinations))

        if not destinations:
            result.no_fit = self._no_fit(preferences, 0)
            return result

        # Stage 1: hard budget filter
        budgeted = self._filter(destinations, preferences, result)
        if not budgeted:
            result.no_fit = self._no_fit(preferences, len(destinations))
            logger.warning(f"No destinations fit budget {preferences.budget}")
            return result

        # Stage 2: provisional score
        scored = self._score(budgeted, result)

        # Stage 3: creator gating + rescore
        gated = self._gate(scored, result, today)
        if not gated:
            result.no_fit = self._no_fit(preferences, len(destinations))
            return result

        # Stage 4: rank and select
        result.recommendations = self.rank(gated)[:self.top_n]
        for i, rec in enumerate(result.recommendations, 1):
            logger.info(f"Top-{self.top_n} #{i}: {rec.name} ({rec.match_score}%) - {rec.budget_status.badge}")
        return result

    # ---------- Stages ----------

    def _filter(
        self,
        destinations: list[CandidateDestination],
        preferences: UserPreferences,
        result: RecommendationResult,
    ) -> list[BudgetedDestination]:
        unassessable = 0

        def record_drop(name: str, reason: str):
            nonlocal unassessable
            unassessable += 1
            result.dropped[name] = reason

        kept = budget_banding.filter_by_budget(
            destinations,
            preferences.budget,
            self.resolver,
            preferences.duration_days,
            preferences.travelers,
            on_drop=record_drop,
        )
        result.filtered_by_budget += len(destinations) - len(kept) - unassessable

        logger.info(f"Hard filter: {len(kept)} of {len(destinations)} pass")
        return kept

    def _score(self, budgeted: list[BudgetedDestination], result: RecommendationResult) -> list[ScoredDestination]:
        scored: list[ScoredDestination] = []
        for item in budgeted:
            dest = item.destination
            try:
                signals = ScoringSignals(
                    qloo_affinity=dest.taste_affinity,
                    community_engagement=engagement_signal(dest.engagement),
                    brand_collaboration=brand_signal(dest.brand),
                    budget_alignment=budget_banding.budget_alignment_signal(item.status),
                    local_creator=PROVISIONAL_LOCAL_CREATOR,
                )
                scored.append(ScoredDestination(
                    destination=dest,
                    signals=signals,
                    breakdown=score_signals(signals, cfg.weights),
                    budget_status=item.status,
                    estimated_total=item.estimated_total,
                ))
            except Exception as e:
                self._drop(result, dest.name, f"scoring failed: {e}")
        return scored

    def _gate(
        self,
        scored: list[ScoredDestination],
        result: RecommendationResult,
        today: date | None,
    ) -> list[ScoredDestination]:
        gated: list[ScoredDestination] = []
        for rec in scored:
            try:
                community = rec.destination.creators
                gating = creator_gating.gate(community, today)
                signals = replace(rec.signals, local_creator=gating.collaboration_score)
                gated.append(replace(
                    rec,
                    signals=signals,
                    breakdown=score_signals(signals, cfg.weights),
                    gating=gating,
                    collaboration=creator_gating.display_payload(community, gating),
                ))
                logger.debug(
                    f"{rec.name}: {'show' if gating.should_show_collaboration else 'hide'} collaboration "
                    f"({gating.active_creator_count} active creators)"
                )
            except Exception as e:
                self._drop(result, rec.name, f"creator gating failed: {e}")
        return gated

    @staticmethod
    def rank(recommendations: list[ScoredDestination]) -> list[ScoredDestination]:
        """Total score desc, then Aligned before Stretch, then name."""
        return sorted(
            recommendations,
            key=lambda r: (
                -r.total_score,
                STATUS_ORDER.get(r.budget_status.status, len(STATUS_ORDER)),
                r.name.casefold(),
                r.name,
            ),
        )

    # ---------- Helpers ----------

    @staticmethod
    def _drop(result: RecommendationResult, name: str, reason: str):
        logger.warning(f"Dropping {name}: {reason}")
        result.dropped[name] = reason

    @staticmethod
    def _no_fit(preferences: UserPreferences, candidate_count: int) -> NoFitResult:
        return NoFitResult(
            target_budget=preferences.budget,
            currency=preferences.currency,
            candidate_count=candidate_count,
            message=budget_banding.no_fit_message(preferences.budget, preferences.currency),
        )

    @staticmethod
    def validate(result: RecommendationResult) -> dict:
        """Acceptance check on a finished result."""
        issues: list[str] = []
        for i, rec in enumerate(result.recommendations, 1):
            if rec.budget_status.status == OUT_OF_BAND:
                issues.append(f"Recommendation #{i} is out-of-band but still displayed")
            if not isinstance(rec.match_score, int) or not 0 <= rec.match_score <= 100:
                issues.append(f"Recommendation #{i} has invalid match score: {rec.match_score}")
            if not math.isfinite(rec.total_score):
                issues.append(f"Recommendation #{i} has invalid total score: {rec.total_score}")
            if rec.gating and not rec.gating.should_show_collaboration and rec.collaboration:
                issues.append(f"Recommendation #{i} should hide collaboration but still shows creator details")
        if len(result.recommendations) > cfg.selection.top_n:
            issues.append(f"{len(result.recommendations)} recommendations exceed the top {cfg.selection.top_n}")
        return {"valid": not issues, "issues": issues}
