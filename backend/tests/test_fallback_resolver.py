"""
Fallback resolver tests.

Covers:
  - availability by signal kind
  - heuristic substitutes (taste, engagement, cost, creators, events, places)
  - call_with_fallback: disabled → no call, error → fallback, success → value
"""

from unittest.mock import AsyncMock

import pytest

from app.data.destination_tiers import CITY_DAILY_COSTS, THEME_AFFINITIES
from app.services.fallback_resolver import FallbackResolver
from app.services.recommendation.models import CostEstimate, CreatorCommunity
from tests.conftest import make_matrix


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------

def test_nothing_available_without_keys(resolver):
    for kind in ("taste", "engagement", "brand", "cost", "creators", "places", "events"):
        assert resolver.is_available(kind) is False


def test_any_provider_for_a_kind_is_enough():
    resolver = FallbackResolver(make_matrix(numbeo_api_key="n"))
    assert resolver.is_available("cost") is True

    resolver = FallbackResolver(make_matrix(tiktok_client_key="k", tiktok_client_secret="s"))
    assert resolver.is_available("engagement") is True


def test_strategy_for_uses_primary_provider(resolver):
    assert resolver.strategy_for("taste") == "content-heuristic"
    assert resolver.strategy_for("cost") == "heuristic-pricing"
    assert resolver.strategy_for("events") == "omit-events"


# ---------------------------------------------------------------------------
# Substitutes
# ---------------------------------------------------------------------------

def test_taste_averages_theme_affinities(resolver):
    fb = resolver.taste(themes=("food", "culture"))
    expected = (THEME_AFFINITIES["food"] + THEME_AFFINITIES["culture"]) / 2
    assert fb.strategy == "content-heuristic"
    assert fb.value == pytest.approx(expected)


def test_taste_unknown_theme_is_neutral(resolver):
    assert resolver.taste(themes=("knitting",)).value == pytest.approx(0.5)


def test_taste_without_themes_has_no_value(resolver):
    assert resolver.taste().value is None


def test_engagement_is_left_for_neutral_scoring(resolver):
    fb = resolver.resolve("engagement")
    assert fb.value is None
    assert fb.strategy == "neutral-engagement"


def test_cost_heuristic_uses_city_table(resolver):
    fb = resolver.cost(name="Paris", country="France", duration_days=5)
    costs = CITY_DAILY_COSTS["paris"]
    daily = costs["meals"] + costs["transport"] + costs["activities"] + costs["misc"]

    estimate = fb.value
    assert isinstance(estimate, CostEstimate)
    assert estimate.source == "heuristic"
    assert estimate.total == costs["flights"] + 5 * (costs["accommodation"] + daily)
    assert estimate.min_total <= estimate.total <= estimate.max_total
    assert "tier1" in fb.note


def test_cost_heuristic_falls_back_to_country_then_generic(resolver):
    by_country = resolver.cost(name="Kyoto", country="Japan").value
    generic = resolver.cost(name="Atlantis", country="").value
    assert by_country.flights == 800
    assert generic.flights == 700


def test_default_total_by_tier(resolver):
    assert resolver.default_total("Tokyo") == 2800
    assert resolver.default_total("Barcelona, Spain") == 2000
    assert resolver.default_total("Somewhere Unknown") == 1800
    assert resolver.default_total("Bali") == 1200


def test_tier_match_needs_whole_words(resolver):
    assert resolver.default_total("Indianapolis, USA") == 1800
    assert resolver.default_total("Parisian Village") == 1800
    assert resolver.default_total("New York City") == 2800
    assert resolver.default_total("Goa, India") == 1800


def test_creators_fallback_is_insufficient(resolver):
    community = resolver.resolve("creators").value
    assert isinstance(community, CreatorCommunity)
    assert community.data_source == "insufficient"
    assert community.records == ()


def test_events_omitted_and_places_basic(resolver):
    assert resolver.resolve("events").value["omitted"] is True
    place = resolver.resolve("places", name="Lisbon, Portugal", country="Portugal").value
    assert place["name"] == "Lisbon"
    assert place["region"] == "Portugal"


def test_unknown_kind_is_unavailable(resolver):
    fb = resolver.resolve("weather")
    assert fb.strategy == "unavailable"
    assert fb.value is None


# ---------------------------------------------------------------------------
# call_with_fallback
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_disabled_provider_is_never_called(resolver):
    call = AsyncMock(return_value=0.99)
    value, strategy = await resolver.call_with_fallback("taste", call, themes=("food",))

    call.assert_not_awaited()
    assert strategy == "content-heuristic"
    assert value == pytest.approx(THEME_AFFINITIES["food"])


@pytest.mark.asyncio
async def test_failing_provider_falls_back(caplog):
    resolver = FallbackResolver(make_matrix(qloo_api_key="q"))
    call = AsyncMock(side_effect=TimeoutError("upstream timeout"))

    value, strategy = await resolver.call_with_fallback("taste", call, themes=())

    call.assert_awaited_once()
    assert value is None
    assert strategy == "content-heuristic"
    assert "upstream timeout" in caplog.text


@pytest.mark.asyncio
async def test_working_provider_value_returned():
    resolver = FallbackResolver(make_matrix(qloo_api_key="q"))
    value, strategy = await resolver.call_with_fallback("taste", AsyncMock(return_value=0.91))
    assert value == 0.91
    assert strategy is None
