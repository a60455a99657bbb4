"""Parsing of retail pack-size labels such as "16 oz" or "1 gal"."""

import re

from .units import NormalizedUnit, UnitQuantity, disambiguate_ounce, format_number

# Retail tokens -> (canonical unit, multiplier). Tokens outside the canonical
# unit set (gallons, quarts, dozens) are folded into one that is.
PACK_UNIT_TOKENS: dict[str, tuple[str, float]] = {
    "fl oz": ("fl-oz", 1.0),
    "fl. oz": ("fl-oz", 1.0),
    "floz": ("fl-oz", 1.0),
    "fluid ounce": ("fl-oz", 1.0),
    "fluid ounces": ("fl-oz", 1.0),
    "oz": ("oz", 1.0),
    "ounce": ("oz", 1.0),
    "ounces": ("oz", 1.0),
    "lb": ("lb", 1.0),
    "lbs": ("lb", 1.0),
    "pound": ("lb", 1.0),
    "pounds": ("lb", 1.0),
    "g": ("g", 1.0),
    "gr": ("g", 1.0),
    "gram": ("g", 1.0),
    "grams": ("g", 1.0),
    "kg": ("kg", 1.0),
    "kilogram": ("kg", 1.0),
    "kilograms": ("kg", 1.0),
    "ml": ("ml", 1.0),
    "milliliter": ("ml", 1.0),
    "milliliters": ("ml", 1.0),
    "millilitre": ("ml", 1.0),
    "millilitres": ("ml", 1.0),
    "l": ("l", 1.0),
    "liter": ("l", 1.0),
    "liters": ("l", 1.0),
    "litre": ("l", 1.0),
    "litres": ("l", 1.0),
    "gal": ("ml", 3785.41),
    "gallon": ("ml", 3785.41),
    "gallons": ("ml", 3785.41),
    "qt": ("ml", 946.353),
    "quart": ("ml", 946.353),
    "quarts": ("ml", 946.353),
    "pt": ("ml", 473.176),
    "pint": ("ml", 473.176),
    "pints": ("ml", 473.176),
    "cup": ("cup", 1.0),
    "cups": ("cup", 1.0),
    "ct": ("each", 1.0),
    "count": ("each", 1.0),
    "pk": ("each", 1.0),
    "pack": ("each", 1.0),
    "each": ("each", 1.0),
    "ea": ("each", 1.0),
    "piece": ("each", 1.0),
    "pieces": ("each", 1.0),
    "pc": ("each", 1.0),
    "pcs": ("each", 1.0),
    "dozen": ("each", 12.0),
    "doz": ("each", 12.0),
}

# Lookup keyed without whitespace, so "FL  OZ", "fl oz" and "floz" agree.
_COMPACT_TOKENS: dict[str, tuple[str, float]] = {
    "".join(token.split()): value for token, value in PACK_UNIT_TOKENS.items()
}

# Longest tokens first so "fl oz" wins over "oz" and "lbs" over "lb".
_TOKEN_PATTERN = "|".join(
    r"\s*".join(re.escape(part) for part in token.split())
    for token in sorted(PACK_UNIT_TOKENS, key=len, reverse=True)
)
# Fractions, thousands grouping ("1,000") before a decimal comma ("1,5")
_NUMBER_PATTERN = (
    r"\d+\s*/\s*\d+"
    r"|\d{1,3}(?:,\d{3})+(?:\.\d+)?"
    r"|\d+(?:[.,]\d+)?"
    r"|[.,]\d+"
)
THOUSANDS_PATTERN = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?")
PACK_SIZE_PATTERN = re.compile(
    rf"(?<![\d.,/])({_NUMBER_PATTERN})\s*({_TOKEN_PATTERN})(?![a-z])",
    re.IGNORECASE,
)
BARE_DOZEN_PATTERN = re.compile(r"\b(?:dozen|doz)\b", re.IGNORECASE)


def parse_pack_size(label: str | None, context_unit: str | None = None) -> UnitQuantity | None:
    """
    Parse the first quantity and unit from a retail package label.

    Examples:
        "16 oz" -> UnitQuantity(16, "oz")
        "46 FL OZ bottle" -> UnitQuantity(46, "fl-oz")
        "1 gal" -> UnitQuantity(3785.41, "ml")
        "1/2 gal" -> UnitQuantity(1892.705, "ml")
        "1,000 ml" -> UnitQuantity(1000, "ml")
        "12 ct" -> UnitQuantity(12, "each")
        "assorted" -> None

    Args:
        label: Free-text size label from the product
        context_unit: The ingredient's declared unit; decides whether a bare
            "oz" is read as weight or fluid ounces

    Returns:
        UnitQuantity or None if no quantity/unit pair is found
    """
    if not label:
        return None

    text = label.strip()
    match = PACK_SIZE_PATTERN.search(text)

    if match is None:
        # "dozen eggs" without a leading number
        if BARE_DOZEN_PATTERN.search(text):
            return UnitQuantity(12.0, "each")
        return None

    number = match.group(1)
    try:
        if "/" in number:
            numerator, denominator = number.split("/")
            value = float(numerator) / float(denominator)
        elif THOUSANDS_PATTERN.fullmatch(number):
            value = float(number.replace(",", ""))
        else:
            value = float(number.replace(",", "."))
    except (ValueError, ZeroDivisionError):
        return None

    token = "".join(match.group(2).lower().split())
    unit, multiplier = _COMPACT_TOKENS[token]

    normalized: NormalizedUnit = disambiguate_ounce(unit, context_unit)
    return UnitQuantity(value * multiplier, normalized)


def format_pack_size(pack: UnitQuantity) -> str:
    """Human-readable pack size ("16 oz", "1 l", "12 each")."""
    return f"{format_number(pack.quantity)} {pack.unit}"
