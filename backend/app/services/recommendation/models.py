"""Data structures shared by the recommendation pipeline.

Records handed between pipeline stages are frozen; each stage builds new
values with dataclasses.replace instead of mutating what it was given.
"""

from dataclasses import dataclass, field
from datetime import date

ALIGNED = "Aligned"
STRETCH = "Stretch"
OUT_OF_BAND = "Out-of-Band"

# Band status → rank order used for tie-breaks (lower ranks first)
STATUS_ORDER: dict[str, int] = {ALIGNED: 0, STRETCH: 1, OUT_OF_BAND: 2}


# ---------- User input ----------


@dataclass(frozen=True)
class UserPreferences:
    """Inputs collected by the question flow. Immutable once handed to the processor."""

    budget: float
    currency: str = "USD"
    duration_days: int = 7
    travel_style: str | None = None
    content_focus: str | None = None
    climate: tuple[str, ...] = ()
    constraints: tuple[str, ...] = ()
    travelers: int = 1
    themes: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "budget": self.budget,
            "currency": self.currency,
            "duration_days": self.duration_days,
            "travel_style": self.travel_style,
            "content_focus": self.content_focus,
            "climate": list(self.climate),
            "constraints": list(self.constraints),
            "travelers": self.travelers,
            "themes": list(self.themes),
        }


# ---------- Raw per-destination signals ----------


@dataclass(frozen=True)
class EngagementMetrics:
    rate: float = 0.0                 # average engagement rate, 0.1 = 10%
    views: float = 0.0
    reach: float = 0.0
    platform_activity: float = 0.0    # 0-1


@dataclass(frozen=True)
class BrandMetrics:
    partner_count: float = 0.0
    alignment_score: float = 0.0      # 0-1
    market_size: float = 0.0          # estimated marketing budget
    seasonal_demand: float = 0.0      # 0-1


@dataclass(frozen=True)
class DailyBreakdown:
    meals: float = 0.0
    transport: float = 0.0
    activities: float = 0.0
    misc: float = 0.0

    @property
    def total(self) -> float:
        return self.meals + self.transport + self.activities + self.misc


@dataclass(frozen=True)
class CostEstimate:
    """Cost data for one destination, from a provider or a heuristic."""

    flights: float = 0.0                  # per traveler, round trip
    accommodation_per_night: float = 0.0
    daily_living: float = 0.0             # per person per day
    daily_breakdown: DailyBreakdown | None = None
    min_total: float | None = None
    max_total: float | None = None
    total: float | None = None
    currency: str = "USD"
    source: str = "provider"              # "provider" | "heuristic"


@dataclass(frozen=True)
class CreatorRecord:
    name: str
    platform: str
    followers: int | str                  # raw counts may arrive as "15K" / "1.2M"
    last_post_date: date | None = None
    posts_last_90_days: int | None = None
    niche: str = ""


@dataclass(frozen=True)
class CreatorCommunity:
    total_reported: int = 0
    records: tuple[CreatorRecord, ...] = ()
    data_source: str = "insufficient"     # "qloo-api" | "social-apis" | "estimated" | "insufficient"
    opportunities: tuple[str, ...] = ()


@dataclass(frozen=True)
class CandidateDestination:
    """One destination with whatever signals the collaborators produced.
    Any signal group may be None when its provider is absent or failed."""

    name: str
    country: str = ""
    taste_affinity: float | None = None
    engagement: EngagementMetrics | None = None
    brand: BrandMetrics | None = None
    cost: CostEstimate | None = None
    creators: CreatorCommunity | None = None

    @property
    def label(self) -> str:
        return f"{self.name}, {self.country}" if self.country else self.name


# ---------- Budget ----------


@dataclass(frozen=True)
class BudgetBand:
    target: float
    aligned_min: float
    aligned_max: float
    stretch_max: float

    @property
    def stretch_min(self) -> float:
        """First whole amount past the aligned band (display only)."""
        return self.aligned_max + 1

    def to_dict(self) -> dict:
        return {
            "aligned": {"min": self.aligned_min, "max": self.aligned_max},
            "stretch": {"min": self.stretch_min, "max": self.stretch_max},
        }


@dataclass(frozen=True)
class BudgetStatus:
    status: str                  # ALIGNED | STRETCH | OUT_OF_BAND
    delta_percent: int           # signed, vs target budget
    badge: str                   # "Aligned" | "Stretch (+17%)" | "Out-of-Budget"
    should_display: bool

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "delta_percent": self.delta_percent,
            "badge": self.badge,
        }


@dataclass(frozen=True)
class TripCostBreakdown:
    flights: float
    accommodation: float
    daily_expenses: float
    activities: float
    buffer: float
    total: int
    currency: str = "USD"

    @property
    def breakdown(self) -> str:
        return (
            f"Flights: ${self.flights:.0f} • Hotel: ${self.accommodation:.0f} • "
            f"Daily: ${self.daily_expenses:.0f} • Activities: ${self.activities:.0f} • "
            f"Buffer: ${round(self.buffer)}"
        )

    def to_dict(self) -> dict:
        return {
            "flights": round(self.flights, 2),
            "accommodation": round(self.accommodation, 2),
            "daily_expenses": round(self.daily_expenses, 2),
            "activities": round(self.activities, 2),
            "buffer": round(self.buffer, 2),
            "total": self.total,
            "currency": self.currency,
            "breakdown": self.breakdown,
        }


@dataclass(frozen=True)
class BudgetedDestination:
    """A destination that survived the hard budget filter."""
    destination: CandidateDestination
    estimated_total: float
    status: BudgetStatus


# ---------- Scoring ----------


@dataclass(frozen=True)
class ScoringSignals:
    """The five composite inputs. None means the source was unavailable."""

    qloo_affinity: float | None = None
    community_engagement: float | None = None
    brand_collaboration: float | None = None
    budget_alignment: float | None = None
    local_creator: float | None = None

    def as_dict(self) -> dict:
        return {
            "qloo_affinity": self.qloo_affinity,
            "community_engagement": self.community_engagement,
            "brand_collaboration": self.brand_collaboration,
            "budget_alignment": self.budget_alignment,
            "local_creator": self.local_creator,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """How a destination was scored."""

    values: dict                         # sanitized signal values, 0-1
    contributions: dict                  # value × weight
    total_score: float                   # 0-1
    match_score: int                     # 0-100
    missing_signals: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "values": {k: round(v, 3) for k, v in self.values.items()},
            "contributions": {k: round(v, 4) for k, v in self.contributions.items()},
            "total_score": round(self.total_score, 4),
            "match_score": self.match_score,
            "missing_signals": list(self.missing_signals),
        }


@dataclass(frozen=True)
class CreatorGatingResult:
    active_creator_count: int
    should_show_collaboration: bool
    collaboration_score: float
    reason: str | None = None

    def to_dict(self) -> dict:
        d = {
            "active_creator_count": self.active_creator_count,
            "should_show_collaboration": self.should_show_collaboration,
            "collaboration_score": round(self.collaboration_score, 3),
        }
        if self.reason:
            d["reason"] = self.reason
        return d


@dataclass(frozen=True)
class ScoredDestination:
    destination: CandidateDestination
    signals: ScoringSignals
    breakdown: ScoreBreakdown
    budget_status: BudgetStatus
    estimated_total: float
    gating: CreatorGatingResult | None = None
    collaboration: dict | None = None    # display payload, only when gating passes

    @property
    def total_score(self) -> float:
        return self.breakdown.total_score

    @property
    def match_score(self) -> int:
        return self.breakdown.match_score

    @property
    def name(self) -> str:
        return self.destination.name

    def to_dict(self) -> dict:
        d = {
            "destination": self.destination.name,
            "country": self.destination.country,
            "total_score": round(self.total_score, 4),
            "match_score": self.match_score,
            "budget_status": self.budget_status.to_dict(),
            "estimated_total": round(self.estimated_total),
            "score_breakdown": self.breakdown.to_dict(),
        }
        if self.gating:
            d["creator_gating"] = self.gating.to_dict()
        if self.collaboration:
            d["collaboration"] = self.collaboration
        return d


# ---------- Outcomes ----------


@dataclass(frozen=True)
class NoFitResult:
    target_budget: float
    currency: str
    candidate_count: int
    message: str

    def to_dict(self) -> dict:
        return {
            "target_budget": self.target_budget,
            "currency": self.currency,
            "candidate_count": self.candidate_count,
            "message": self.message,
        }


@dataclass
class RecommendationResult:
    """Complete processor output — Top-N or a no-fit outcome."""

    recommendations: list[ScoredDestination] = field(default_factory=list)
    total_processed: int = 0
    filtered_by_budget: int = 0
    dropped: dict[str, str] = field(default_factory=dict)
    no_fit: NoFitResult | None = None

    @property
    def is_no_fit(self) -> bool:
        return self.no_fit is not None

    def to_dict(self) -> dict:
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "total_processed": self.total_processed,
            "filtered_by_budget": self.filtered_by_budget,
            "dropped": dict(self.dropped),
            "no_fit": self.no_fit.to_dict() if self.no_fit else None,
        }
