"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

# Currency markers seen in bank exports, including the rand prefix
_CURRENCY = re.compile(r"^(ZAR|R|\$|€|£)\s*|\s*(ZAR)$", re.IGNORECASE)
_DIRECTION_SUFFIX = re.compile(r"\s*(CR|DR)$", re.IGNORECASE)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a signed amount string into a Decimal.

    Handles:
    - "123.45", "-123.45", "R 1 234.56", "$1,234.56"
    - "(123.45)" and "123.45-" (negative)
    - "123.45 DR" (negative) and "123.45 CR" (positive)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount; negative means money leaving the bank account

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    negative = False

    suffix = _DIRECTION_SUFFIX.search(text)
    if suffix:
        negative = suffix.group(1).upper() == "DR"
        text = text[: suffix.start()]

    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]
    elif text.endswith("-"):
        negative = True
        text = text[:-1]

    if text.startswith("-"):
        negative = not negative
        text = text[1:]

    text = _CURRENCY.sub("", text.strip())
    # Thousands separators: commas and any whitespace
    text = re.sub(r"[,\s]", "", text)

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Amount '{amount_str}' is not a finite number")
    return -amount if negative else amount
