import math


def convert_ars_to_usd(amount_ars: float, rate: float) -> float:
    """Convert pesos to dollars, rounding up to the next cent."""
    if rate <= 0:
        raise ValueError("Exchange rate must be positive")
    # round() strips float noise so exact cent values are not pushed up a cent
    return math.ceil(round(amount_ars / rate * 100, 6)) / 100


def format_usd(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_ars(amount: float) -> str:
    # es-AR uses "." for thousands and no decimals for display prices
    sign = "-" if amount < 0 else ""
    whole = f"{round(abs(amount)):,}".replace(",", ".")
    return f"{sign}$ {whole}"
