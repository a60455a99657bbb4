"""Unit normalization and conversion for recipe and package quantities."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

UnitFamily = Literal["mass", "volume", "count"]
NormalizedUnit = Literal["g", "kg", "oz", "lb", "ml", "l", "cup", "tbsp", "tsp", "fl-oz", "each"]


class UnitConversionError(ValueError):
    """Raised when a quantity cannot be converted between two units."""

    pass


# Unit -> (family, factor to base unit). Mass base is grams, volume base is milliliters.
CONVERSION_TABLE: MappingProxyType[str, tuple[UnitFamily, float]] = MappingProxyType(
    {
        # Mass -> grams
        "g": ("mass", 1.0),
        "kg": ("mass", 1000.0),
        "oz": ("mass", 28.3495),
        "lb": ("mass", 453.592),
        # Culinary volume -> milliliters
        "ml": ("volume", 1.0),
        "l": ("volume", 1000.0),
        "cup": ("volume", 240.0),
        "tbsp": ("volume", 15.0),
        "tsp": ("volume", 5.0),
        "fl-oz": ("volume", 29.5735),
        # Count
        "each": ("count", 1.0),
    }
)

BASE_UNITS: dict[UnitFamily, NormalizedUnit] = {
    "mass": "g",
    "volume": "ml",
    "count": "each",
}

# Recipe/retail spellings -> canonical unit tag
UNIT_ALIASES: dict[str, NormalizedUnit] = {
    # Mass
    "g": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "gramme": "g",
    "grammes": "g",
    "kg": "kg",
    "kgs": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "oz": "oz",
    "ozs": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    # Volume
    "ml": "ml",
    "mls": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "l": "l",
    "lt": "l",
    "ltr": "l",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litres": "l",
    "c": "cup",
    "cup": "cup",
    "cups": "cup",
    "tbsp": "tbsp",
    "tbsps": "tbsp",
    "tbs": "tbsp",
    "tbl": "tbsp",
    "tb": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tsp": "tsp",
    "tsps": "tsp",
    "ts": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "fl-oz": "fl-oz",
    "fl oz": "fl-oz",
    "fl. oz": "fl-oz",
    "fl. oz.": "fl-oz",
    "floz": "fl-oz",
    "fl_oz": "fl-oz",
    "fluid ounce": "fl-oz",
    "fluid ounces": "fl-oz",
    # Count
    "each": "each",
    "ea": "each",
    "unit": "each",
    "units": "each",
    "piece": "each",
    "pieces": "each",
    "pc": "each",
    "pcs": "each",
    "ct": "each",
    "count": "each",
    "item": "each",
    "items": "each",
    "whole": "each",
}


def normalize_unit(raw: str | None) -> NormalizedUnit:
    """
    Map a free-text unit to its canonical tag.

    Unrecognized or empty input maps to "each", so counting is the default.
    Canonical tags map to themselves, which makes the function idempotent.

    Examples:
        "Tablespoons" -> "tbsp"
        "fl oz" -> "fl-oz"
        "cloves" -> "each"
    """
    if not raw:
        return "each"

    key = " ".join(raw.lower().strip().split())
    if key in UNIT_ALIASES:
        return UNIT_ALIASES[key]

    # Trailing period ("oz.", "tbsp.")
    stripped = key.rstrip(".")
    if stripped in UNIT_ALIASES:
        return UNIT_ALIASES[stripped]

    return "each"


def unit_family(unit: str | None) -> UnitFamily:
    """Get the family (mass, volume or count) of a unit."""
    return CONVERSION_TABLE[normalize_unit(unit)][0]


def can_convert(from_unit: str | None, to_unit: str | None) -> bool:
    """Check if two units belong to the same family."""
    return unit_family(from_unit) == unit_family(to_unit)


def convert(quantity: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a quantity between two units of the same family.

    Args:
        quantity: Amount expressed in from_unit
        from_unit: Source unit (any alias accepted)
        to_unit: Target unit (any alias accepted)

    Returns:
        The amount expressed in to_unit

    Raises:
        UnitConversionError: If the units belong to different families
    """
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    source_family, source_factor = CONVERSION_TABLE[source]
    target_family, target_factor = CONVERSION_TABLE[target]

    if source_family != target_family:
        raise UnitConversionError(
            f"Cannot convert {source} ({source_family}) to {target} ({target_family})"
        )

    if source == target:
        return quantity
    return quantity * source_factor / target_factor


def to_base(quantity: float, unit: str) -> tuple[float, NormalizedUnit]:
    """Convert a quantity to its family's base unit (g, ml or each)."""
    normalized = normalize_unit(unit)
    family, factor = CONVERSION_TABLE[normalized]
    return quantity * factor, BASE_UNITS[family]


def disambiguate_ounce(unit: str, context_unit: str | None = None) -> NormalizedUnit:
    """
    Resolve a bare "oz" against the unit an ingredient was declared in.

    "oz" without qualifier is a weight ounce, unless the ingredient itself is
    measured by volume, in which case it is read as a fluid ounce. Every other
    unit is normalized as usual.
    """
    normalized = normalize_unit(unit)
    if normalized == "oz" and context_unit is not None and unit_family(context_unit) == "volume":
        return "fl-oz"
    return normalized


@dataclass(frozen=True)
class UnitQuantity:
    """A quantity paired with a canonical unit."""

    quantity: float
    unit: NormalizedUnit

    @property
    def family(self) -> UnitFamily:
        return CONVERSION_TABLE[self.unit][0]

    def to(self, unit: str) -> "UnitQuantity":
        """Return this quantity expressed in another unit of the same family."""
        target = normalize_unit(unit)
        return UnitQuantity(convert(self.quantity, self.unit, target), target)

    def to_base(self) -> "UnitQuantity":
        value, base_unit = to_base(self.quantity, self.unit)
        return UnitQuantity(value, base_unit)

    def __str__(self) -> str:
        return f"{format_number(self.quantity)} {self.unit}"


def format_number(value: float) -> str:
    """Format a quantity without trailing zeros ("16", "1.5", "0.25")."""
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")
