"""Recommendation engine configuration — single source for all thresholds."""

import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScoringWeights:
    """Fixed composite weights. Never renormalized when a signal is missing."""
    qloo_affinity: float = 0.45
    community_engagement: float = 0.25
    brand_collaboration: float = 0.15
    budget_alignment: float = 0.10
    local_creator: float = 0.05

    # Substituted for any absent/invalid signal
    neutral_value: float = 0.5

    def as_dict(self) -> dict[str, float]:
        return {
            "qloo_affinity": self.qloo_affinity,
            "community_engagement": self.community_engagement,
            "brand_collaboration": self.brand_collaboration,
            "budget_alignment": self.budget_alignment,
            "local_creator": self.local_creator,
        }

    @property
    def total(self) -> float:
        return math.fsum(self.as_dict().values())


@dataclass(frozen=True)
class BudgetTolerances:
    """Band widths around the user's target budget."""
    aligned: float = 0.15     # ±15%
    stretch: float = 0.35     # up to +35%

    # Budget-alignment sub-score per band status
    aligned_signal: float = 0.9
    stretch_signal: float = 0.6
    out_of_band_signal: float = 0.3


@dataclass(frozen=True)
class TripCostRules:
    """Fixed trip-cost formula parameters (cost parity with upstream estimates)."""
    travelers_per_room: int = 2
    activities_share_of_daily: float = 0.2
    buffer_share_of_subtotal: float = 0.1


@dataclass(frozen=True)
class ActiveCreatorCriteria:
    """When a creator counts as active."""
    min_followers: int = 1000
    max_days_since_last_post: int = 90
    min_posts_in_period: int = 5
    period_days: int = 90

    # Minimum active creators before the collaboration block is shown
    min_active_creators: int = 2

    # Sources whose records are checked individually; others are estimates
    verified_sources: tuple = ("qloo-api", "social-apis")

    # Deterministic stand-in for the 60-80% active share of estimated counts
    estimated_active_ratio: float = 0.7


@dataclass(frozen=True)
class CollaborationCurve:
    """Piecewise collaboration score by active creator count.
    Three tiers; the breakpoints are tunable."""
    small_max: int = 5            # 2-5 creators
    small_base: float = 0.5
    small_span: float = 0.1       # 0.5 → 0.6
    medium_max: int = 15          # 6-15 creators
    medium_base: float = 0.7
    medium_span: float = 0.15     # 0.7 → 0.85
    large_base: float = 0.85      # 16+ creators
    large_span: float = 0.15
    large_steps: int = 20         # reaches 1.0 at 36 creators
    display_limit: int = 5        # creators shown when the block renders


@dataclass(frozen=True)
class SelectionLimits:
    top_n: int = 3


@dataclass(frozen=True)
class QuestionFlowConfig:
    """Adaptive interview limits and option filters."""
    max_questions: int = 5
    min_options: int = 3
    max_options: int = 6
    pad_to_options: int = 4

    # Total-budget thresholds for option filtering
    luxury_cutoff_budget: float = 1000.0    # below: drop luxury options
    budget_cutoff_budget: float = 5000.0    # above: drop budget options

    # Trip-length thresholds for option filtering (days)
    short_trip_days: int = 7      # at or below: drop month-long options
    long_trip_days: int = 14      # above: drop day-trip options

    # Answer validation
    min_total_budget: float = 50.0
    min_daily_budget: float = 20.0

    # Share of the daily budget assumed to go to accommodation
    accommodation_share: float = 0.3

    luxury_keywords: tuple = ("luxury", "premium", "five-star", "exclusive", "vip", "high-end")
    budget_keywords: tuple = ("budget", "cheap", "hostel", "backpack", "dorm")
    multi_select_keywords: tuple = (
        "choose all", "select all", "which of these", "interests",
        "priorities", "preferences", "requirements",
    )


@dataclass(frozen=True)
class DailyBudgetTiers:
    """Per-day spend (USD) → tier. Upper bounds, exclusive."""
    ultra_budget: float = 30.0
    budget: float = 75.0
    mid_range: float = 150.0
    premium: float = 300.0

    def tier(self, daily_usd: float) -> str:
        if daily_usd < self.ultra_budget:
            return "ultra-budget"
        if daily_usd < self.budget:
            return "budget"
        if daily_usd < self.mid_range:
            return "mid-range"
        if daily_usd < self.premium:
            return "premium"
        return "luxury"


@dataclass(frozen=True)
class TotalBudgetTiers:
    """Whole-trip budget (USD) → tier. Upper bounds, exclusive."""
    budget: float = 750.0
    mid_range: float = 2500.0

    def tier(self, total_usd: float) -> str:
        if total_usd < self.budget:
            return "budget"
        if total_usd < self.mid_range:
            return "mid-range"
        return "luxury"


@dataclass(frozen=True)
class LLMParams:
    """Parameters for the adaptive question LLM call."""
    max_tokens: int = 600
    temperature: float = 0.4
    json_mode: bool = True


@dataclass(frozen=True)
class RecommendationConfig:
    """Top-level config aggregating all sub-configs."""
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    budget: BudgetTolerances = field(default_factory=BudgetTolerances)
    trip_cost: TripCostRules = field(default_factory=TripCostRules)
    creators: ActiveCreatorCriteria = field(default_factory=ActiveCreatorCriteria)
    collaboration: CollaborationCurve = field(default_factory=CollaborationCurve)
    selection: SelectionLimits = field(default_factory=SelectionLimits)
    questions: QuestionFlowConfig = field(default_factory=QuestionFlowConfig)
    daily_tiers: DailyBudgetTiers = field(default_factory=DailyBudgetTiers)
    total_tiers: TotalBudgetTiers = field(default_factory=TotalBudgetTiers)
    llm: LLMParams = field(default_factory=LLMParams)


# Singleton — import this everywhere
recommendation_config = RecommendationConfig()
