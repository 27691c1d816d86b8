"""Currency utilities — symbol/code resolution and rough USD conversion for budget answers."""

# Symbols users type in budget answers → ISO code
SYMBOL_CURRENCIES: dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₹": "INR",
    "₽": "RUB",
    "৳": "BDT",
}

CURRENCY_SYMBOLS: dict[str, str] = {code: symbol for symbol, code in SYMBOL_CURRENCIES.items()}

# Static exchange rates to USD (rough, only used to pick budget tiers)
EXCHANGE_RATES_TO_USD: dict[str, float] = {
    "USD": 1.0,
    "EUR": 1.1,
    "GBP": 1.25,
    "JPY": 0.007,
    "INR": 0.012,
    "RUB": 0.011,
    "BDT": 0.01,
    "CAD": 0.74,
    "AUD": 0.65,
}

# Audience location hints → currency code
LOCATION_CURRENCIES: tuple[tuple[str, str], ...] = (
    ("bangladesh", "BDT"),
    ("dhaka", "BDT"),
    ("india", "INR"),
    ("euro", "EUR"),
    ("eu", "EUR"),
    ("uk", "GBP"),
    ("pound", "GBP"),
    ("japan", "JPY"),
)


def currency_code(token: str | None) -> str:
    """Resolve a symbol or ISO code to an ISO code. Defaults to USD."""
    if not token:
        return "USD"
    token = token.strip()
    if token in SYMBOL_CURRENCIES:
        return SYMBOL_CURRENCIES[token]
    upper = token.upper()
    if len(upper) == 3 and upper.isalpha():
        return upper
    return "USD"


def currency_for_location(location: str | None) -> str:
    """Guess the audience's currency from a free-form location string."""
    lowered = (location or "").lower()
    for hint, code in LOCATION_CURRENCIES:
        if hint in lowered:
            return code
    return "USD"


def usd_multiplier(currency: str) -> float:
    """How many USD one unit of the currency is worth. Unknown codes count as USD."""
    return EXCHANGE_RATES_TO_USD.get(currency_code(currency), 1.0)


def convert_to_usd(amount: float, from_currency: str) -> float:
    """Convert an amount to USD using static exchange rates."""
    return round(amount * usd_multiplier(from_currency), 2)


def format_price(amount: float, currency: str = "USD", grouped: bool = True) -> str:
    """Format an amount with its currency symbol for display."""
    code = currency_code(currency)
    symbol = CURRENCY_SYMBOLS.get(code, code + " ")
    return f"{symbol}{round(amount):,}" if grouped else f"{symbol}{round(amount)}"
