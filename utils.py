import math
import re


def format_currency(amount: float, symbol: str = "₹") -> str:
    sign = "-" if round(amount, 2) < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def parse_currency(amount_str: str) -> float:
    cleaned = amount_str.replace(',', '.').strip()

    try:
        amount = float(cleaned)
    except ValueError:
        raise ValueError("Invalid amount format")

    if not math.isfinite(amount):
        raise ValueError("Invalid amount format")
    return round(amount, 2)


def safe_filename(name: str) -> str:
    return re.sub(r'[^a-z0-9]', '_', name, flags=re.IGNORECASE)
