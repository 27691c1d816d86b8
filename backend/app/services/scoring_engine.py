"""Scoring engine — fixed-weight composite score for candidate destinations.

Total = 0.45 × taste affinity + 0.25 × community engagement
      + 0.15 × brand collaboration + 0.10 × budget alignment
      + 0.05 × local creator potential

Missing or invalid signals are replaced by the neutral 0.5; weights are never
renormalized.
"""

import logging
import math

from app.services.recommendation.config import ScoringWeights, recommendation_config
from app.services.recommendation.models import (
    BrandMetrics,
    EngagementMetrics,
    ScoreBreakdown,
    ScoringSignals,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = recommendation_config.weights


def sanitize_signal(value, neutral: float = DEFAULT_WEIGHTS.neutral_value) -> tuple[float, bool]:
    """Return (usable value, was_substituted).

    None, non-numbers, NaN, ±inf and anything outside [0, 1] become the neutral value.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return neutral, True
    if not math.isfinite(value) or value < 0 or value > 1:
        return neutral, True
    return float(value), False


def sanitize_total(value) -> float:
    """Clamp a composite total into [0, 1]; non-finite totals become neutral."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        logger.warning(f"Invalid composite total {value!r}, using neutral score")
        return DEFAULT_WEIGHTS.neutral_value
    return max(0.0, min(1.0, float(value)))


def to_match_score(total_score: float) -> int:
    """0-1 total → integer 0-100. Never NaN."""
    scaled = round(sanitize_total(total_score) * 100, 6)
    return int(max(0, min(100, round(scaled))))


def score_signals(signals: ScoringSignals, weights: ScoringWeights | None = None) -> ScoreBreakdown:
    """Sanitize each signal, weight it, and build the breakdown."""
    if weights is None:
        weights = DEFAULT_WEIGHTS

    values: dict[str, float] = {}
    contributions: dict[str, float] = {}
    missing: list[str] = []

    for name, weight in weights.as_dict().items():
        value, substituted = sanitize_signal(getattr(signals, name), weights.neutral_value)
        if substituted:
            missing.append(name)
        values[name] = value
        contributions[name] = value * weight

    total = sanitize_total(math.fsum(contributions.values()))

    return ScoreBreakdown(
        values=values,
        contributions=contributions,
        total_score=total,
        match_score=to_match_score(total),
        missing_signals=tuple(missing),
    )


# ---------- Raw signal normalizers ----------


def _finite(*values) -> bool:
    return all(
        isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        for v in values
    )


def _log_scale(value: float, decades: float) -> float:
    return min(1.0, math.log10(max(0.0, value) + 1) / decades)


def engagement_signal(metrics: EngagementMetrics | None) -> float | None:
    """Normalize engagement metrics into 0-1. A 10% engagement rate is excellent;
    views and reach are log-scaled. Returns None when the metrics are unusable."""
    if metrics is None:
        return None
    if not _finite(metrics.rate, metrics.views, metrics.reach, metrics.platform_activity):
        return None

    score = (
        min(1.0, max(0.0, metrics.rate) / 0.1) * 0.4
        + _log_scale(metrics.views, 6) * 0.25
        + _log_scale(metrics.reach, 7) * 0.25
        + max(0.0, min(1.0, metrics.platform_activity)) * 0.10
    )
    return max(0.0, min(1.0, score))


def brand_signal(metrics: BrandMetrics | None) -> float | None:
    """Normalize brand-collaboration metrics into 0-1. 20+ partners is excellent;
    market size is log-scaled. Returns None when the metrics are unusable."""
    if metrics is None:
        return None
    if not _finite(metrics.partner_count, metrics.alignment_score, metrics.market_size, metrics.seasonal_demand):
        return None

    score = (
        min(1.0, max(0.0, metrics.partner_count) / 20) * 0.3
        + max(0.0, min(1.0, metrics.alignment_score)) * 0.4
        + _log_scale(metrics.market_size, 6) * 0.2
        + max(0.0, min(1.0, metrics.seasonal_demand)) * 0.1
    )
    return max(0.0, min(1.0, score))
