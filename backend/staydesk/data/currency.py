"""Currency utilities — display currencies, minor units and loyalty conversion."""

from decimal import ROUND_HALF_UP, Decimal

# Currencies the booking pages let the traveler pick
SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "SAR", "EGP")

# Static exchange rates from USD (can be updated periodically).
# Used only to express USD-denominated loyalty discounts in the booking currency.
EXCHANGE_RATES_FROM_USD: dict[str, float] = {
    "USD": 1.0,
    "SAR": 3.75,
    "EGP": 50.0,
    "AED": 3.67,
    "KWD": 0.31,
    "QAR": 3.64,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 150.0,
}

# Digits after the decimal point; anything not listed uses 2
MINOR_UNITS: dict[str, int] = {
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "BHD": 3,
    "OMR": 3,
    "JOD": 3,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$", "SAR": "SAR", "EGP": "EGP", "AED": "AED",
    "KWD": "KWD", "QAR": "QAR", "EUR": "€", "GBP": "£",
    "JPY": "¥",
}


def normalize_currency(code: str | None, default: str = "USD") -> str:
    """Upper-case a currency code, falling back to the default for blanks."""
    if not code or not code.strip():
        return default
    return code.strip().upper()


def minor_unit(currency: str) -> int:
    return MINOR_UNITS.get(normalize_currency(currency), 2)


def round_money(amount: Decimal, currency: str = "USD") -> Decimal:
    """Round an amount half-up to the currency's minor unit."""
    exponent = Decimal(1).scaleb(-minor_unit(currency))
    return Decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)


def usd_exchange_rate(currency: str) -> float:
    """USD → currency rate. Unknown currencies are treated as USD."""
    return EXCHANGE_RATES_FROM_USD.get(normalize_currency(currency), 1.0)


def format_price(amount: Decimal | float, currency: str = "USD") -> str:
    """Format a price with currency symbol for display."""
    currency = normalize_currency(currency)
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    digits = minor_unit(currency)
    value = round_money(Decimal(str(amount)), currency)
    formatted = f"{value:,.{digits}f}"
    if len(symbol) > 1:
        return f"{symbol} {formatted}"
    return f"{symbol}{formatted}"
