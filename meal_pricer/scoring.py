"""Candidate scoring and ranking."""

import math
import re
from dataclasses import dataclass, field

from rapidfuzz import fuzz

from .catalog import CatalogProduct
from .ingredients import Ingredient
from .pack_size import parse_pack_size
from .queries import CategoryHint, category_matches, classify_category, normalize
from .units import UnitConversionError, UnitQuantity, can_convert, convert, normalize_unit


@dataclass(frozen=True)
class ScoringWeights:
    """Weights and penalties of the scoring formula."""

    name_similarity: float = 0.5
    size_proximity: float = 0.2
    category_match: float = 0.15
    availability: float = 0.05
    promo: float = 0.05
    priced: float = 0.05
    store_brand: float = 0.08
    store_brands: tuple[str, ...] = ("kroger", "simple truth")
    out_of_stock_penalty: float = 0.2
    prepared_form_penalty: float = 0.5
    flavor_penalty: float = 0.3
    herb_onion_penalty: float = 0.8
    leafy_root_penalty: float = 0.6
    neutral_size_proximity: float = 0.2


DEFAULT_WEIGHTS = ScoringWeights()

# Product forms that are rarely what a fresh ingredient means
PREPARED_FORMS = (
    "soup",
    "sauce",
    "seasoning",
    "powder",
    "chips",
    "dressing",
    "mix",
    "dip",
    "salsa",
    "paste",
    "juice",
    "flavored",
    "jerky",
)

# Flavors that mark a variant ("vanilla yogurt" for "yogurt")
FLAVOR_TOKENS = (
    "chocolate",
    "oreo",
    "graham",
    "vanilla",
    "pumpkin",
    "ginger",
    "spice",
    "strawberry",
    "lemon",
    "cinnamon",
    "honey",
)

HERB_KEYWORDS = ("cilantro", "coriander", "parsley", "basil", "oregano", "thyme", "rosemary", "sage", "mint")
ONION_KEYWORDS = ("onion", "shallot")
LEAFY_HERBS = ("cilantro", "coriander", "parsley", "basil", "lettuce", "spinach")
ROOT_VEGETABLES = ("onion", "carrot", "potato", "turnip", "radish")


@dataclass(frozen=True)
class Signals:
    """The individual signals behind a candidate's score."""

    name_similarity: float
    size_proximity: float
    category_matched: bool
    availability: str
    has_promo: bool
    has_price: bool
    store_brand: bool = False
    penalty: float = 0.0
    penalty_reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoredCandidate:
    """A catalog product with its score for one ingredient."""

    product: CatalogProduct
    score: float
    signals: Signals = field(compare=False)


def _words(text: str) -> set[str]:
    return set(re.findall(r"[a-z]+", text.lower()))


def _mentions(words: set[str], keyword: str) -> bool:
    return keyword in words or f"{keyword}s" in words or f"{keyword}es" in words


def name_similarity(ingredient_name: str, description: str) -> float:
    """
    Fuzzy similarity between an ingredient name and a product description.

    Blends token-set ratio (word order independent) with partial ratio
    (substring matches) on normalized text.

    Returns:
        Similarity in [0, 1]
    """
    query = normalize(ingredient_name) or ingredient_name.lower()
    title = normalize(description) or description.lower()
    if not query or not title:
        return 0.0

    token_score = fuzz.token_set_ratio(query, title)
    partial_score = fuzz.partial_ratio(query, title)
    combined = token_score * 0.6 + partial_score * 0.4
    return max(0.0, min(1.0, combined / 100))


def size_proximity(
    ingredient: Ingredient,
    pack: UnitQuantity | None,
    neutral: float = DEFAULT_WEIGHTS.neutral_size_proximity,
) -> float:
    """
    How close a package is to the quantity the recipe needs.

    The required quantity is converted into the pack's unit and scored as
    1 / (1 + |ln(required / pack)|), so an exact fit scores 1.0. Unknown,
    non-positive or unconvertible packs get the neutral value.
    """
    if pack is None or pack.quantity <= 0 or ingredient.amount <= 0:
        return neutral

    unit = normalize_unit(ingredient.unit)
    if not can_convert(unit, pack.unit):
        return neutral

    try:
        required = convert(ingredient.amount, unit, pack.unit)
    except UnitConversionError:
        return neutral

    ratio = required / pack.quantity
    return max(0.0, min(1.0, 1 / (1 + abs(math.log(ratio)))))


def is_store_brand(product: CatalogProduct, brands: tuple[str, ...]) -> bool:
    """Whether the product's brand is one of the store's own labels."""
    brand = (product.brand or "").lower()
    return any(name in brand for name in brands)


def availability_signal(product: CatalogProduct) -> str:
    """"in_stock", "out_of_stock" or "unknown"."""
    in_stock = product.in_stock
    if in_stock is None:
        return "unknown"
    return "in_stock" if in_stock else "out_of_stock"


def structural_penalty(
    ingredient_name: str,
    description: str,
    hint: CategoryHint,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> tuple[float, list[str]]:
    """
    Penalty for products whose form or type contradicts the ingredient.

    Returns:
        Tuple of (total penalty as a positive number, reasons)
    """
    ingredient_words = _words(ingredient_name)
    title_words = _words(description)
    penalty = 0.0
    reasons: list[str] = []

    if hint in ("produce", "protein"):
        forms = [
            form
            for form in PREPARED_FORMS
            if _mentions(title_words, form) and not _mentions(ingredient_words, form)
        ]
        if forms:
            penalty += weights.prepared_form_penalty
            reasons.append(f"prepared form: {', '.join(forms)}")

    for flavor in FLAVOR_TOKENS:
        if _mentions(title_words, flavor) and not _mentions(ingredient_words, flavor):
            penalty += weights.flavor_penalty
            reasons.append(f"flavored: {flavor}")

    herb_ingredient = any(_mentions(ingredient_words, k) for k in HERB_KEYWORDS)
    onion_ingredient = any(_mentions(ingredient_words, k) for k in ONION_KEYWORDS)
    herb_product = any(_mentions(title_words, k) for k in HERB_KEYWORDS)
    onion_product = any(_mentions(title_words, k) for k in ONION_KEYWORDS)
    if (herb_ingredient and onion_product and not onion_ingredient) or (
        onion_ingredient and herb_product and not herb_ingredient
    ):
        penalty += weights.herb_onion_penalty
        reasons.append("herb/onion mismatch")

    leafy_ingredient = any(_mentions(ingredient_words, k) for k in LEAFY_HERBS)
    root_ingredient = any(_mentions(ingredient_words, k) for k in ROOT_VEGETABLES)
    root_product = any(_mentions(title_words, k) for k in ROOT_VEGETABLES)
    if leafy_ingredient and root_product and not root_ingredient:
        penalty += weights.leafy_root_penalty
        reasons.append("leafy herb/root vegetable mismatch")

    return penalty, reasons


def score_product(
    ingredient: Ingredient,
    product: CatalogProduct,
    hint: CategoryHint | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoredCandidate:
    """
    Score one catalog product against an ingredient.

    Args:
        ingredient: The ingredient being matched
        product: Candidate product
        hint: Category hint; classified from the ingredient name when omitted
        weights: Scoring weights

    Returns:
        ScoredCandidate with a score clamped to [0, 1]
    """
    if hint is None:
        hint = classify_category(ingredient.name)

    similarity = name_similarity(ingredient.name, product.description)
    pack = parse_pack_size(product.size_label, context_unit=ingredient.unit)
    proximity = size_proximity(ingredient, pack, neutral=weights.neutral_size_proximity)
    matched = category_matches(hint, product.categories)
    availability = availability_signal(product)
    store_brand = is_store_brand(product, weights.store_brands)
    penalty, reasons = structural_penalty(ingredient.name, product.description, hint, weights)

    if availability == "out_of_stock":
        penalty += weights.out_of_stock_penalty
        reasons.append("out of stock")

    raw = (
        weights.name_similarity * similarity
        + weights.size_proximity * proximity
        + (weights.category_match if matched else 0.0)
        + (weights.availability if availability == "in_stock" else 0.0)
        + (weights.promo if product.has_promo else 0.0)
        + (weights.priced if product.has_price else 0.0)
        + (weights.store_brand if store_brand else 0.0)
        - penalty
    )

    signals = Signals(
        name_similarity=similarity,
        size_proximity=proximity,
        category_matched=matched,
        availability=availability,
        has_promo=product.has_promo,
        has_price=product.has_price,
        store_brand=store_brand,
        penalty=penalty,
        penalty_reasons=tuple(reasons),
    )
    return ScoredCandidate(product=product, score=max(0.0, min(1.0, raw)), signals=signals)


def rank_candidates(
    ingredient: Ingredient,
    products: list[CatalogProduct],
    hint: CategoryHint | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[ScoredCandidate]:
    """
    Score and sort candidates, best first.

    Equal scores prefer a product with a price; remaining ties keep
    retrieval order.
    """
    if hint is None:
        hint = classify_category(ingredient.name)

    scored = [score_product(ingredient, product, hint, weights) for product in products]
    return sorted(scored, key=lambda c: (-c.score, not c.signals.has_price))
