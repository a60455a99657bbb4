"""Meal Pricer - Recipe ingredient matching and cost estimation against a grocery catalog."""

__version__ = "1.0.0"

from .api import CatalogAPIError, KrogerAPI
from .catalog import CatalogError, CatalogProduct, CatalogSearch, InMemoryCatalog
from .estimator import CostEstimate, estimate_cost
from .ingredients import Ingredient, IngredientValidationError
from .matcher import (
    PricingResult,
    RecipePricingSummary,
    match_ingredient,
    price_ingredients,
    search_alternatives,
    select_alternative,
)
from .scoring import ScoringWeights
from .units import UnitConversionError, convert, normalize_unit

__all__ = [
    "KrogerAPI",
    "CatalogAPIError",
    "CatalogError",
    "CatalogProduct",
    "CatalogSearch",
    "InMemoryCatalog",
    "Ingredient",
    "IngredientValidationError",
    "CostEstimate",
    "estimate_cost",
    "PricingResult",
    "RecipePricingSummary",
    "match_ingredient",
    "price_ingredients",
    "search_alternatives",
    "select_alternative",
    "ScoringWeights",
    "UnitConversionError",
    "convert",
    "normalize_unit",
]
