"""Budget banding — Aligned / Stretch / Out-of-Band classification around a target spend.

Input budget = 3000 → aligned [2550..3450], stretch ≤ 4050, anything above is
Out-of-Band and is removed before scoring.
"""

import logging
import math
from typing import Callable

from app.data.currency import format_price
from app.services.fallback_resolver import FallbackResolver
from app.services.recommendation.config import recommendation_config
from app.services.recommendation.models import (
    ALIGNED,
    OUT_OF_BAND,
    STRETCH,
    BudgetBand,
    BudgetedDestination,
    BudgetStatus,
    CandidateDestination,
    TripCostBreakdown,
)

logger = logging.getLogger(__name__)

cfg = recommendation_config
tolerances = cfg.budget
cost_rules = cfg.trip_cost

# Band edges and totals are compared at cent precision
_CENTS = 2


def _finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def round_half_up(value: float) -> int:
    """Nearest whole number, halves rounding up (matches upstream cost estimates)."""
    return math.floor(value + 0.5)


def _check_budget(target_budget) -> None:
    if not _finite(target_budget) or target_budget <= 0:
        raise ValueError(f"Target budget must be a positive number, got {target_budget!r}")


def compute_bands(target_budget: float) -> BudgetBand:
    """Band edges for a target budget, rounded to cents. classify compares against these same edges."""
    _check_budget(target_budget)

    return BudgetBand(
        target=float(target_budget),
        aligned_min=round(target_budget * (1 - tolerances.aligned), _CENTS),
        aligned_max=round(target_budget * (1 + tolerances.aligned), _CENTS),
        stretch_max=round(target_budget * (1 + tolerances.stretch), _CENTS),
    )


def classify(estimated_total: float, target_budget: float) -> BudgetStatus:
    """Classify a trip total against the target budget. Band edges are inclusive.

    Totals under the aligned minimum still fit the budget and count as Aligned.
    """
    band = compute_bands(target_budget)
    if not _finite(estimated_total):
        raise ValueError(f"Trip total must be a finite number, got {estimated_total!r}")

    delta = round_half_up((estimated_total / target_budget - 1) * 100)
    total = round(estimated_total, _CENTS)

    if total <= band.aligned_max:
        return BudgetStatus(status=ALIGNED, delta_percent=delta, badge="Aligned", should_display=True)

    if total <= band.stretch_max:
        return BudgetStatus(
            status=STRETCH,
            delta_percent=delta,
            badge=f"Stretch (+{abs(delta)}%)",
            should_display=True,
        )

    return BudgetStatus(status=OUT_OF_BAND, delta_percent=delta, badge="Out-of-Budget", should_display=False)


def estimate_trip_cost(
    flights_per_traveler: float,
    accommodation_per_room_per_night: float,
    travelers: int,
    nights: int,
    daily_per_person: float,
    currency: str = "USD",
) -> TripCostBreakdown:
    """Flights (per traveler) + hotel (rooms × nights) + per-diem + activities + buffer.

    Two travelers share a room; activities are 20% of the per-diem total; the
    buffer is 10% of everything else.
    """
    flights = flights_per_traveler * travelers
    rooms = math.ceil(travelers / cost_rules.travelers_per_room)
    accommodation = accommodation_per_room_per_night * rooms * nights
    daily = daily_per_person * travelers * nights
    activities = daily * cost_rules.activities_share_of_daily

    subtotal = flights + accommodation + daily + activities
    buffer = subtotal * cost_rules.buffer_share_of_subtotal
    total = round_half_up(subtotal + buffer)

    logger.debug(
        f"Trip cost: flights ${flights:.0f}, hotel ${accommodation:.0f}, daily ${daily:.0f}, "
        f"activities ${activities:.0f}, buffer ${buffer:.0f}, total ${total}"
    )

    return TripCostBreakdown(
        flights=flights,
        accommodation=accommodation,
        daily_expenses=daily,
        activities=activities,
        buffer=buffer,
        total=total,
        currency=currency,
    )


def destination_total(
    destination: CandidateDestination,
    resolver: FallbackResolver | None = None,
    duration_days: int = 7,
    travelers: int = 1,
) -> float:
    """Best available trip total for a destination.

    Order: explicit total → midpoint of min/max → component estimate →
    city-tier default.
    """
    cost = destination.cost
    if cost is not None:
        if _finite(cost.total) and cost.total > 0:
            return float(cost.total)

        if _finite(cost.min_total) and _finite(cost.max_total) and cost.max_total > 0:
            return float(round_half_up((cost.min_total + cost.max_total) / 2))

        daily = cost.daily_living
        if not (_finite(daily) and daily > 0) and cost.daily_breakdown is not None:
            daily = cost.daily_breakdown.total
        components = (cost.flights, cost.accommodation_per_night, daily)
        if all(_finite(c) for c in components) and any(c > 0 for c in components):
            return float(estimate_trip_cost(
                cost.flights, cost.accommodation_per_night, travelers,
                max(1, duration_days), daily, cost.currency,
            ).total)

    if resolver is not None:
        return float(resolver.default_total(destination.name))
    raise ValueError(f"No usable cost data for {destination.name}")


def assess(
    destination: CandidateDestination,
    target_budget: float,
    resolver: FallbackResolver | None = None,
    duration_days: int = 7,
    travelers: int = 1,
) -> BudgetedDestination:
    """Total + band status for one destination (Out-of-Band included)."""
    total = destination_total(destination, resolver, duration_days, travelers)
    return BudgetedDestination(
        destination=destination,
        estimated_total=total,
        status=classify(total, target_budget),
    )


def filter_by_budget(
    destinations: list[CandidateDestination],
    target_budget: float,
    resolver: FallbackResolver | None = None,
    duration_days: int = 7,
    travelers: int = 1,
    on_drop: Callable[[str, str], None] | None = None,
) -> list[BudgetedDestination]:
    """Drop every Out-of-Band destination.

    Destinations whose cost can't be assessed are skipped with a warning and
    reported through on_drop(name, reason).
    """
    logger.info(f"Budget filter: {len(destinations)} destinations against budget ${target_budget}")

    kept: list[BudgetedDestination] = []
    for dest in destinations:
        try:
            budgeted = assess(dest, target_budget, resolver, duration_days, travelers)
        except Exception as e:
            logger.warning(f"Budget filter: skipping {dest.name}: {e}")
            if on_drop is not None:
                on_drop(dest.name, f"budget assessment failed: {e}")
            continue
        if budgeted.status.should_display:
            kept.append(budgeted)
        else:
            logger.info(
                f"Budget filter: {dest.name} out of band "
                f"(${budgeted.estimated_total:.0f} vs ${target_budget})"
            )

    logger.info(f"Budget filter: {len(kept)} destinations pass")
    if not kept:
        logger.warning("Budget filter: no destinations fit the budget")
    return kept


def budget_alignment_signal(status: BudgetStatus) -> float:
    """Budget-alignment sub-score for the composite."""
    if status.status == ALIGNED:
        return tolerances.aligned_signal
    if status.status == STRETCH:
        return tolerances.stretch_signal
    return tolerances.out_of_band_signal


def no_fit_message(target_budget: float, currency: str = "USD") -> str:
    return (
        f"No accurate fits in your budget window of {format_price(target_budget, currency, grouped=False)}. "
        f"Try shifting dates/origin or raising budget."
    )


def validate_alignment(statuses: list[BudgetStatus]) -> dict:
    """Count statuses and list any Out-of-Band entries (acceptance check)."""
    counts = {ALIGNED: 0, STRETCH: 0, OUT_OF_BAND: 0}
    issues: list[str] = []
    for i, status in enumerate(statuses):
        counts[status.status] = counts.get(status.status, 0) + 1
        if status.status == OUT_OF_BAND:
            issues.append(f"Destination #{i + 1} is out-of-band ({status.delta_percent:+d}%)")
    return {
        "all_in_band": counts[OUT_OF_BAND] == 0,
        "aligned_count": counts[ALIGNED],
        "stretch_count": counts[STRETCH],
        "out_of_band_count": counts[OUT_OF_BAND],
        "issues": issues,
    }
