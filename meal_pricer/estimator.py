"""Cost estimation: what share of a package a recipe uses and what it costs."""

import math
from dataclasses import dataclass
from typing import Literal

from .catalog import CatalogProduct
from .ingredients import Ingredient
from .pack_size import format_pack_size, parse_pack_size
from .units import normalize_unit, to_base, unit_family

EstimateMethod = Literal["count", "measure", "fallback", "unpriced"]

# Absorbs float noise so 3.0000000001 packages is still 3
_CEIL_TOLERANCE = 1e-9


def _ceil(value: float) -> int:
    return math.ceil(value - _CEIL_TOLERANCE)


@dataclass(frozen=True)
class CostEstimate:
    """Estimated cost of the quantity an ingredient needs from one product."""

    unit_price: float
    portion_cost: float
    packages: int
    package_price: float | None
    method: EstimateMethod
    package_size: str | None = None
    utilization: float | None = None
    cost_per_serving: float | None = None

    @property
    def estimated_cost(self) -> float:
        return self.portion_cost

    @property
    def purchase_cost(self) -> float:
        """What the whole packages cost at the register."""
        if self.package_price is None:
            return 0.0
        return self.package_price * self.packages


def _with_servings(portion: float, servings: int | None) -> float | None:
    if servings is None:
        return None
    return portion / max(servings, 1)


def estimate_cost(
    ingredient: Ingredient,
    product: CatalogProduct,
    servings: int | None = None,
) -> CostEstimate:
    """
    Estimate the cost of an ingredient when bought as a given product.

    The portion cost is the share of the package price the recipe uses. The
    package count is how many whole packages have to be bought.

    - Count packs ("12 ct") for count ingredients: priced per piece.
    - Mass/volume packs for ingredients of the same family: priced by the
      fraction of the pack, converted via base units.
    - Anything else (no size, mismatched families): one package per
      counted item, otherwise a single package at full price.

    Args:
        ingredient: Ingredient with amount and unit
        product: The matched product
        servings: Recipe servings, for cost per serving

    Returns:
        CostEstimate; never raises and never returns non-finite costs
    """
    price = product.price
    pack = parse_pack_size(product.size_label, context_unit=ingredient.unit)
    package_size = format_pack_size(pack) if pack is not None else product.size_label

    if price is None:
        return CostEstimate(
            unit_price=0.0,
            portion_cost=0.0,
            packages=0,
            package_price=None,
            method="unpriced",
            package_size=package_size,
            cost_per_serving=_with_servings(0.0, servings),
        )

    unit = normalize_unit(ingredient.unit)
    family = unit_family(unit)
    amount = ingredient.amount

    if pack is not None and pack.quantity > 0 and amount > 0:
        if pack.unit == "each" and family == "count":
            packages = max(1, _ceil(amount / pack.quantity))
            portion = amount / pack.quantity * price
            return CostEstimate(
                unit_price=price / pack.quantity,
                portion_cost=portion,
                packages=packages,
                package_price=price,
                method="count",
                package_size=package_size,
                utilization=min(1.0, amount / (packages * pack.quantity)),
                cost_per_serving=_with_servings(portion, servings),
            )

        if pack.family != "count" and pack.family == family:
            required, _ = to_base(amount, unit)
            pack_base, _ = to_base(pack.quantity, pack.unit)
            packages = max(1, _ceil(required / pack_base))
            portion = required / pack_base * price
            return CostEstimate(
                unit_price=price / pack_base,
                portion_cost=portion,
                packages=packages,
                package_price=price,
                method="measure",
                package_size=package_size,
                utilization=min(1.0, required / (packages * pack_base)),
                cost_per_serving=_with_servings(portion, servings),
            )

    # No usable pack size: buy whole packages
    packages = _ceil(max(1.0, amount)) if unit == "each" else 1
    portion = price * packages
    return CostEstimate(
        unit_price=price,
        portion_cost=portion,
        packages=packages,
        package_price=price,
        method="fallback",
        package_size=package_size,
        utilization=None,
        cost_per_serving=_with_servings(portion, servings),
    )
