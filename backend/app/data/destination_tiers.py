"""Static destination cost tiers and theme affinities.

Used for:
- Heuristic budget bands when flight/cost providers are disabled or failing
- Default trip totals for destinations that arrive without any cost estimate
- Content-derived taste affinity when the taste provider is disabled
"""

import re

# Tiers: "tier1" (most expensive) → "tier4" (cheapest)
CITY_TIERS: dict[str, tuple[str, ...]] = {
    "tier1": ("Tokyo", "New York", "London", "Paris", "Zurich", "Singapore"),
    "tier2": ("Barcelona", "Amsterdam", "Sydney", "Seoul", "Dubai"),
    "tier3": ("Prague", "Budapest", "Lisbon", "Bangkok", "Mexico City"),
    "tier4": ("Bali", "Vietnam", "Guatemala", "Morocco", "India"),
}

DEFAULT_TIER = "tier3"

# Per-person daily / weekly spend bands (USD)
TIER_BUDGET_BANDS: dict[str, dict[str, str]] = {
    "tier1": {"daily": "$100-150", "weekly": "$700-1050"},
    "tier2": {"daily": "$70-100", "weekly": "$490-700"},
    "tier3": {"daily": "$40-70", "weekly": "$280-490"},
    "tier4": {"daily": "$20-40", "weekly": "$140-280"},
}

# Whole-trip totals used when a destination carries no cost data at all
TIER_DEFAULT_TOTALS: dict[str, int] = {
    "tier1": 2800,
    "tier2": 2000,
    "tier3": 1800,
    "tier4": 1200,
}

# Daily costs (USD) by city, then by country. "flights" is a round-trip fare.
CITY_DAILY_COSTS: dict[str, dict[str, int]] = {
    "tokyo": {"accommodation": 120, "meals": 60, "activities": 50, "transport": 20, "misc": 25, "flights": 800},
    "dubai": {"accommodation": 150, "meals": 70, "activities": 80, "transport": 25, "misc": 30, "flights": 750},
    "singapore": {"accommodation": 130, "meals": 55, "activities": 45, "transport": 15, "misc": 25, "flights": 900},
    "london": {"accommodation": 140, "meals": 65, "activities": 55, "transport": 20, "misc": 30, "flights": 600},
    "paris": {"accommodation": 135, "meals": 60, "activities": 50, "transport": 18, "misc": 27, "flights": 650},
    "new york": {"accommodation": 160, "meals": 75, "activities": 60, "transport": 25, "misc": 35, "flights": 400},
    "bali": {"accommodation": 40, "meals": 25, "activities": 30, "transport": 10, "misc": 15, "flights": 900},
    "bangkok": {"accommodation": 35, "meals": 20, "activities": 25, "transport": 8, "misc": 12, "flights": 850},
    "lisbon": {"accommodation": 60, "meals": 35, "activities": 30, "transport": 12, "misc": 18, "flights": 600},
    "prague": {"accommodation": 50, "meals": 30, "activities": 25, "transport": 10, "misc": 15, "flights": 650},
    "barcelona": {"accommodation": 80, "meals": 45, "activities": 35, "transport": 15, "misc": 20, "flights": 650},
    "marrakech": {"accommodation": 30, "meals": 20, "activities": 20, "transport": 8, "misc": 12, "flights": 700},
    "vietnam": {"accommodation": 25, "meals": 15, "activities": 20, "transport": 5, "misc": 10, "flights": 900},
    "guatemala": {"accommodation": 20, "meals": 12, "activities": 15, "transport": 5, "misc": 8, "flights": 500},
    "nepal": {"accommodation": 15, "meals": 10, "activities": 15, "transport": 3, "misc": 7, "flights": 800},
}

COUNTRY_DAILY_COSTS: dict[str, dict[str, int]] = {
    "japan": {"accommodation": 100, "meals": 50, "activities": 40, "transport": 18, "misc": 22, "flights": 800},
    "indonesia": {"accommodation": 35, "meals": 20, "activities": 25, "transport": 8, "misc": 12, "flights": 900},
    "france": {"accommodation": 110, "meals": 55, "activities": 45, "transport": 16, "misc": 24, "flights": 650},
    "usa": {"accommodation": 120, "meals": 60, "activities": 50, "transport": 20, "misc": 25, "flights": 500},
    "uk": {"accommodation": 120, "meals": 55, "activities": 45, "transport": 18, "misc": 25, "flights": 600},
    "thailand": {"accommodation": 30, "meals": 18, "activities": 20, "transport": 6, "misc": 10, "flights": 850},
    "portugal": {"accommodation": 55, "meals": 32, "activities": 28, "transport": 10, "misc": 15, "flights": 600},
    "spain": {"accommodation": 70, "meals": 40, "activities": 32, "transport": 12, "misc": 18, "flights": 650},
    "morocco": {"accommodation": 25, "meals": 18, "activities": 18, "transport": 6, "misc": 10, "flights": 700},
}

GENERIC_DAILY_COSTS: dict[str, int] = {
    "accommodation": 60, "meals": 35, "activities": 30, "transport": 12, "misc": 18, "flights": 700,
}

# Content theme → taste affinity when no taste provider is available
THEME_AFFINITIES: dict[str, float] = {
    "adventure": 0.8,
    "culture": 0.7,
    "food": 0.9,
    "nature": 0.8,
    "luxury": 0.6,
    "budget": 0.7,
}


def city_tier(destination: str) -> str:
    """Classify a destination ("City, Country" or "City") into a cost tier."""
    city = destination.split(",")[0].strip().lower()
    for tier, cities in CITY_TIERS.items():
        if any(re.search(rf"\b{re.escape(c.lower())}\b", city) for c in cities):
            return tier
    return DEFAULT_TIER


def daily_costs(city: str, country: str = "") -> dict[str, int]:
    """Look up daily cost components by city, then country, then a generic default."""
    return (
        CITY_DAILY_COSTS.get(city.strip().lower())
        or COUNTRY_DAILY_COSTS.get(country.strip().lower())
        or GENERIC_DAILY_COSTS
    )
