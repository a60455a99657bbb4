"""Ingredient to product matching and recipe pricing."""

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Literal

from .catalog import CatalogError, CatalogProduct, CatalogSearch, ProductLookup
from .estimator import estimate_cost
from .ingredients import Ingredient, validate_ingredients
from .queries import CategoryHint, build_search_terms, classify_category
from .retrieval import MAX_CANDIDATES, PricingCancelled, RetrievalError, retrieve_candidates
from .scoring import DEFAULT_WEIGHTS, ScoredCandidate, ScoringWeights, rank_candidates

logger = logging.getLogger(__name__)

PricingStatus = Literal["priced", "unpriced", "unavailable"]

TOP_CANDIDATES = 3
DEFAULT_MAX_WORKERS = 3
MAX_ALTERNATIVES = 24


@dataclass
class PricingResult:
    """The matched product and estimated cost for one ingredient."""

    ingredient: Ingredient
    status: PricingStatus
    matched_product: CatalogProduct | None = None
    confidence: float = 0.0
    unit_price: float = 0.0
    portion_cost: float = 0.0
    packages_to_buy: int = 0
    package_size: str | None = None
    package_price: float | None = None
    utilization: float | None = None
    cost_per_serving: float | None = None
    search_terms: list[str] = field(default_factory=list)
    category_hint: CategoryHint = "unknown"
    top_candidates: list[ScoredCandidate] = field(default_factory=list)
    overridden: bool = False
    error: str | None = None

    @property
    def ingredient_name(self) -> str:
        return self.ingredient.name

    @property
    def estimated_cost(self) -> float:
        return self.portion_cost

    @property
    def matched(self) -> bool:
        return self.matched_product is not None

    @property
    def product_name(self) -> str:
        if self.matched_product:
            return self.matched_product.description
        return "No match found"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        product = self.matched_product
        return {
            "ingredient": self.ingredient.to_dict(),
            "status": self.status,
            "product_id": product.product_id if product else None,
            "product_name": self.product_name,
            "brand": product.brand if product else None,
            "confidence": round(self.confidence, 3),
            "unit_price": round(self.unit_price, 4),
            "estimated_cost": round(self.portion_cost, 2),
            "packages_to_buy": self.packages_to_buy,
            "package_size": self.package_size,
            "package_price": self.package_price,
            "utilization": round(self.utilization, 3) if self.utilization is not None else None,
            "category_hint": self.category_hint,
            "search_terms": list(self.search_terms),
            "top_candidates": [
                {
                    "product_id": c.product.product_id,
                    "description": c.product.description,
                    "price": c.product.price,
                    "size": c.product.size_label,
                    "score": round(c.score, 3),
                }
                for c in self.top_candidates
            ],
            "overridden": self.overridden,
            "error": self.error,
        }


@dataclass
class RecipePricingSummary:
    """Pricing results for a whole recipe, in input order."""

    results: list[PricingResult]
    servings: int = 1
    cancelled: bool = False

    @property
    def total_cost(self) -> float:
        return sum(r.portion_cost for r in self.results)

    @property
    def cost_per_serving(self) -> float:
        return self.total_cost / max(self.servings, 1)

    @property
    def unavailable(self) -> list[str]:
        """Names of ingredients no product was found for."""
        return [r.ingredient_name for r in self.results if r.status == "unavailable"]

    @property
    def unpriced(self) -> list[str]:
        return [r.ingredient_name for r in self.results if r.status == "unpriced"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_cost": round(self.total_cost, 2),
            "servings": self.servings,
            "cost_per_serving": round(self.cost_per_serving, 2),
            "cancelled": self.cancelled,
            "unavailable": self.unavailable,
            "results": [r.to_dict() for r in self.results],
        }


def _build_result(
    ingredient: Ingredient,
    product: CatalogProduct,
    confidence: float,
    servings: int | None,
    **extra: Any,
) -> PricingResult:
    estimate = estimate_cost(ingredient, product, servings)
    unpriced = estimate.method == "unpriced"
    return PricingResult(
        ingredient=ingredient,
        status="unpriced" if unpriced else "priced",
        matched_product=product,
        confidence=0.0 if unpriced else max(0.0, min(1.0, confidence)),
        unit_price=estimate.unit_price,
        portion_cost=estimate.portion_cost,
        packages_to_buy=estimate.packages,
        package_size=estimate.package_size,
        package_price=estimate.package_price,
        utilization=estimate.utilization,
        cost_per_serving=estimate.cost_per_serving,
        **extra,
    )


def _description_head(description: str) -> str:
    """"Kroger® Large Eggs - 12 ct, Grade A" -> "Kroger® Large Eggs"."""
    return description.split(",", 1)[0].split("-", 1)[0].strip()


def _preferred_product(
    catalog: CatalogSearch,
    product_id: str,
    location_id: str | None,
) -> CatalogProduct | None:
    """
    Fetch a pinned product by id.

    When it has no price at the location, the first priced product found by
    searching the head of its description is used instead.
    """
    if not isinstance(catalog, ProductLookup):
        logger.debug("Catalog does not support product lookup, ignoring preferred product")
        return None

    try:
        product = catalog.get_product(product_id, location_id=location_id)
    except CatalogError as e:
        logger.warning(f"Lookup of preferred product {product_id} failed: {e}")
        return None

    if product is None or product.has_price:
        return product

    head = _description_head(product.description)
    if head:
        try:
            for candidate in catalog.search(head, location_id=location_id, limit=5):
                if candidate.has_price:
                    return candidate
        except CatalogError as e:
            logger.warning(f"Fallback search for '{head}' failed: {e}")

    return product


def match_ingredient(
    catalog: CatalogSearch,
    ingredient: Ingredient,
    *,
    location_id: str | None = None,
    servings: int | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    preferred_product_id: str | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> PricingResult:
    """
    Match one ingredient to its best product and estimate its cost.

    Search terms are tried most specific first, candidates are scored and the
    best one is priced. The three best candidates are kept on the result.

    Args:
        catalog: Catalog to search
        ingredient: Ingredient to price
        location_id: Store to price against
        servings: Recipe servings, for cost per serving
        weights: Scoring weights
        preferred_product_id: Product to use instead of searching
        should_stop: Checked before every catalog call

    Returns:
        PricingResult; an ingredient without candidates is "unavailable"
        with zero cost, and an unpriced match has zero cost and confidence

    Raises:
        PricingCancelled: If should_stop returned True
    """
    terms = build_search_terms(ingredient)
    hint = classify_category(ingredient.name)

    if preferred_product_id:
        if should_stop is not None and should_stop():
            raise PricingCancelled(f"Cancelled before looking up '{preferred_product_id}'")
        product = _preferred_product(catalog, preferred_product_id, location_id)
        if product is not None:
            return _build_result(
                ingredient,
                product,
                1.0,
                servings,
                search_terms=terms,
                category_hint=hint,
            )

    try:
        retrieved = retrieve_candidates(
            catalog,
            terms,
            location_id=location_id,
            limit=MAX_CANDIDATES,
            should_stop=should_stop,
        )
    except RetrievalError as e:
        logger.warning(f"No candidates for '{ingredient.name}': {e}")
        return PricingResult(
            ingredient=ingredient,
            status="unavailable",
            search_terms=terms,
            category_hint=hint,
            error=str(e),
        )

    ranked = rank_candidates(ingredient, retrieved.candidates, hint, weights)
    if not ranked:
        logger.info(f"No products found for '{ingredient.name}'")
        return PricingResult(
            ingredient=ingredient,
            status="unavailable",
            search_terms=terms,
            category_hint=hint,
        )

    best = ranked[0]
    return _build_result(
        ingredient,
        best.product,
        best.score,
        servings,
        search_terms=terms,
        category_hint=hint,
        top_candidates=ranked[:TOP_CANDIDATES],
    )


def price_ingredients(
    catalog: CatalogSearch,
    ingredients: Iterable[Ingredient | Mapping[str, Any]],
    servings: int | None = None,
    *,
    location_id: str | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    max_workers: int = DEFAULT_MAX_WORKERS,
    preferred_products: Mapping[str, str] | None = None,
    cancel_event: threading.Event | None = None,
    on_result: Callable[[PricingResult], None] | None = None,
) -> RecipePricingSummary:
    """
    Price every ingredient of a recipe.

    Ingredients are matched concurrently on a bounded thread pool; results
    come back in input order. Setting `cancel_event` stops the run: queued
    ingredients are dropped, running ones stop before their next catalog
    call, and the summary holds only completed results.

    Args:
        catalog: Catalog to search
        ingredients: Ingredient objects or {"name", "amount", "unit"} mappings
        servings: Recipe servings
        location_id: Store to price against
        weights: Scoring weights
        max_workers: Maximum concurrent ingredient lookups
        preferred_products: Ingredient name -> pinned product id
        cancel_event: Event that cancels the run when set
        on_result: Called with each result as it completes

    Returns:
        RecipePricingSummary

    Raises:
        IngredientValidationError: If the list is empty or malformed
    """
    validated = validate_ingredients(ingredients)
    cancel_event = cancel_event or threading.Event()
    preferred = {k.lower().strip(): v for k, v in (preferred_products or {}).items()}

    def task(ingredient: Ingredient) -> PricingResult:
        return match_ingredient(
            catalog,
            ingredient,
            location_id=location_id,
            servings=servings,
            weights=weights,
            preferred_product_id=preferred.get(ingredient.name.lower().strip()),
            should_stop=cancel_event.is_set,
        )

    results: list[PricingResult | None] = [None] * len(validated)
    workers = max(1, min(max_workers, len(validated)))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(task, ingredient): i for i, ingredient in enumerate(validated)}
        for future in as_completed(futures):
            if future.cancelled():
                continue
            ingredient = validated[futures[future]]
            try:
                result = future.result()
            except PricingCancelled:
                continue
            except Exception as e:
                logger.exception(f"Pricing '{ingredient.name}' failed")
                result = PricingResult(
                    ingredient=ingredient,
                    status="unavailable",
                    search_terms=build_search_terms(ingredient),
                    category_hint=classify_category(ingredient.name),
                    error=str(e),
                )
            results[futures[future]] = result
            if on_result is not None:
                on_result(result)
            if cancel_event.is_set():
                for pending in futures:
                    pending.cancel()

    completed = [r for r in results if r is not None]
    cancelled = len(completed) < len(validated)
    if cancelled:
        logger.info(f"Pricing cancelled after {len(completed)} of {len(validated)} ingredients")

    return RecipePricingSummary(
        results=completed,
        servings=max(servings or 1, 1),
        cancelled=cancelled,
    )


def select_alternative(
    result: PricingResult, index: int, servings: int | None = None
) -> PricingResult:
    """
    Re-price a result with one of its retained top candidates.

    Args:
        result: The PricingResult to override
        index: Index into result.top_candidates (0-based)
        servings: Recipe servings, for cost per serving

    Returns:
        New PricingResult, or the original one if the index is out of range
    """
    if index < 0 or index >= len(result.top_candidates):
        return result

    chosen = result.top_candidates[index]
    return _build_result(
        result.ingredient,
        chosen.product,
        chosen.score,
        servings,
        search_terms=list(result.search_terms),
        category_hint=result.category_hint,
        top_candidates=list(result.top_candidates),
        overridden=index != 0 or result.overridden,
    )


def search_alternatives(
    catalog: CatalogSearch,
    name: str,
    query: str | None = None,
    *,
    amount: float = 1.0,
    unit: str = "each",
    location_id: str | None = None,
    limit: int = 12,
    offset: int = 0,
    priced_only: bool = False,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[ScoredCandidate]:
    """
    Ranked substitutes for an ingredient, for manual selection.

    Args:
        catalog: Catalog to search
        name: Ingredient name the candidates are scored against
        query: Explicit search term; generated from the name when omitted
        amount: Ingredient amount, for size proximity
        unit: Ingredient unit, for size proximity
        location_id: Store to price against
        limit: Page size, at most 24
        offset: Number of ranked candidates to skip
        priced_only: Drop candidates without a price

    Returns:
        One page of ScoredCandidates, best first
    """
    limit = max(1, min(limit, MAX_ALTERNATIVES))
    offset = max(0, offset)
    ingredient = Ingredient(name=name, amount=amount if amount > 0 else 1.0, unit=unit)
    terms = [query.strip()] if query and query.strip() else build_search_terms(ingredient)

    try:
        retrieved = retrieve_candidates(
            catalog, terms, location_id=location_id, limit=offset + limit
        )
    except RetrievalError as e:
        logger.warning(f"Alternatives search for '{name}' failed: {e}")
        return []

    ranked = rank_candidates(ingredient, retrieved.candidates, weights=weights)
    if priced_only:
        ranked = [c for c in ranked if c.signals.has_price]
    return ranked[offset : offset + limit]
