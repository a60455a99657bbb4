"""Ingredient model, free-text parsing and input validation."""

import json
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .units import UNIT_ALIASES


class IngredientValidationError(ValueError):
    """Raised when an ingredient list is empty or malformed."""

    pass


@dataclass(frozen=True)
class Ingredient:
    """A recipe line item to be priced."""

    name: str
    amount: float = 1.0
    unit: str = "each"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Ingredient":
        """Build an ingredient from a {"name", "amount", "unit"} mapping."""
        amount = data.get("amount", data.get("quantity", 1.0))
        return cls(
            name=str(data.get("name") or "").strip(),
            amount=float(amount) if amount is not None else 1.0,
            unit=str(data.get("unit") or "each").strip(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "amount": self.amount, "unit": self.unit}

    def __str__(self) -> str:
        qty = self.amount
        qty_str = str(int(qty)) if qty == int(qty) else f"{qty:.2f}".rstrip("0").rstrip(".")
        if self.unit and self.unit != "each":
            return f"{qty_str} {self.unit} {self.name}"
        return f"{qty_str} {self.name}"


# Count-like words recipes put where a unit would go
COUNT_UNITS = {
    "clove",
    "cloves",
    "slice",
    "slices",
    "bunch",
    "bunches",
    "can",
    "cans",
    "head",
    "heads",
    "stalk",
    "stalks",
    "sprig",
    "sprigs",
    "pinch",
    "dash",
    "handful",
}

# Fraction to decimal mapping
FRACTIONS = {
    "½": 0.5,
    "⅓": 0.333,
    "⅔": 0.667,
    "¼": 0.25,
    "¾": 0.75,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
}


def parse_quantity(text: str) -> tuple[float | None, str]:
    """
    Parse quantity from the beginning of an ingredient string.

    Handles decimals ("1.5"), simple and mixed fractions ("1/2", "1 1/2"),
    unicode fractions ("½", "1½") and ranges ("2-3", the higher value wins).

    Returns:
        Tuple of (quantity, remaining_text)
    """
    text = text.strip()

    match = re.match(r"^(\d+)?\s*([½⅓⅔¼¾⅛⅜⅝⅞])", text)
    if match:
        whole = float(match.group(1)) if match.group(1) else 0.0
        return whole + FRACTIONS[match.group(2)], text[match.end() :].strip()

    pattern = r"^(\d+(?:[\.,]\d+)?(?:\s*[-–]\s*\d+(?:[\.,]\d+)?)?(?:\s+\d+/\d+)?|\d+/\d+)"
    match = re.match(pattern, text)

    if match:
        qty_str = match.group(1).replace(",", ".")
        remaining = text[match.end() :].strip()

        # Ranges: take the higher value
        if "-" in qty_str or "–" in qty_str:
            parts = re.split(r"[-–]", qty_str)
            try:
                return float(parts[-1].strip()), remaining
            except ValueError:
                pass

        # Mixed numbers like "1 1/2"
        if " " in qty_str and "/" in qty_str:
            parts = qty_str.split()
            try:
                numerator, denominator = parts[1].split("/")
                return float(parts[0]) + float(numerator) / float(denominator), remaining
            except (ValueError, IndexError, ZeroDivisionError):
                pass

        if "/" in qty_str:
            try:
                numerator, denominator = qty_str.split("/")
                return float(numerator) / float(denominator), remaining
            except (ValueError, ZeroDivisionError):
                pass

        try:
            return float(qty_str), remaining
        except ValueError:
            pass

    return None, text


def parse_unit(text: str) -> tuple[str | None, str]:
    """
    Parse unit from the beginning of text.

    Returns:
        Tuple of (unit, remaining_text)
    """
    words = text.strip().split()

    if not words:
        return None, text

    # Two-word units first (e.g., "fl oz", "fluid ounces")
    if len(words) >= 2:
        two_word = f"{words[0]} {words[1]}".lower().rstrip(",.")
        if two_word in UNIT_ALIASES:
            return two_word, " ".join(words[2:])

    first_word = words[0].lower().rstrip(",.")
    if first_word in UNIT_ALIASES or first_word in COUNT_UNITS:
        return first_word, " ".join(words[1:])

    return None, text.strip()


def parse_ingredient_text(text: str) -> Ingredient:
    """
    Parse a single ingredient line such as "2 cups whole milk".

    Missing quantities default to 1 and missing units to "each".
    The "of" in "2 cups of milk" is dropped.
    """
    quantity, remaining = parse_quantity(text)
    unit, remaining = parse_unit(remaining)

    name = re.sub(r"^of\s+", "", remaining.strip(), flags=re.IGNORECASE)
    name = re.sub(r"\s+", " ", name).strip().rstrip(",.")

    return Ingredient(
        name=name,
        amount=quantity if quantity is not None else 1.0,
        unit=unit or "each",
    )


def parse_ingredients_text(text: str) -> list[Ingredient]:
    """
    Parse multiple ingredients from text (one per line).

    Empty lines, headers and bullet markers are skipped.
    """
    ingredients = []

    for line in text.strip().split("\n"):
        line = line.strip()
        if not line or line.lower().startswith(("ingredients", "for the", "---")):
            continue
        line = re.sub(r"^[\-\*•]\s*", "", line)
        line = re.sub(r"^\d+\.\s+", "", line)

        if line:
            ingredients.append(parse_ingredient_text(line))

    return ingredients


def validate_ingredients(items: Iterable[Ingredient | Mapping[str, Any]] | None) -> list[Ingredient]:
    """
    Validate and coerce a batch of ingredients.

    Accepts Ingredient objects or {"name", "amount", "unit"} mappings.

    Raises:
        IngredientValidationError: If the list is empty or any entry is malformed
    """
    if items is None:
        raise IngredientValidationError("ingredients required")

    validated: list[Ingredient] = []
    for position, item in enumerate(items, 1):
        if isinstance(item, Ingredient):
            ingredient = item
        elif isinstance(item, Mapping):
            try:
                ingredient = Ingredient.from_dict(item)
            except (TypeError, ValueError) as e:
                raise IngredientValidationError(f"Ingredient #{position}: {e}") from e
        else:
            raise IngredientValidationError(
                f"Ingredient #{position}: expected a mapping, got {type(item).__name__}"
            )

        if not ingredient.name.strip():
            raise IngredientValidationError(f"Ingredient #{position}: name is required")
        if not isinstance(ingredient.amount, int | float) or not math.isfinite(ingredient.amount):
            raise IngredientValidationError(
                f"Ingredient #{position} ({ingredient.name}): amount must be a finite number"
            )
        if ingredient.amount <= 0:
            raise IngredientValidationError(
                f"Ingredient #{position} ({ingredient.name}): amount must be positive"
            )
        validated.append(ingredient)

    if not validated:
        raise IngredientValidationError("ingredients required")

    return validated


def load_ingredients(filepath: str | Path) -> list[Ingredient]:
    """
    Load ingredients from a file.

    JSON files hold a list of {"name", "amount", "unit"} objects (or an object
    with an "ingredients" key); any other file is read as one ingredient per line.
    """
    path = Path(filepath)
    content = path.read_text(encoding="utf-8")

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise IngredientValidationError(f"Invalid JSON in {path}: {e}") from e
        if isinstance(data, dict):
            data = data.get("ingredients")
        if not isinstance(data, list):
            raise IngredientValidationError(f"{path} must contain a list of ingredients")
        return validate_ingredients(data)

    return validate_ingredients(parse_ingredients_text(content))
