"""Search-term generation and coarse category hints for ingredients."""

import re
from typing import Literal

from .ingredients import Ingredient

CategoryHint = Literal[
    "produce", "protein", "dairy", "spice", "pantry", "bakery", "frozen", "unknown"
]

MAX_SEARCH_TERMS = 5

# Words that describe preparation or packaging rather than the product itself
DESCRIPTORS: set[str] = {
    "fresh",
    "freshly",
    "dried",
    "frozen",
    "organic",
    "large",
    "small",
    "medium",
    "chopped",
    "diced",
    "minced",
    "sliced",
    "grated",
    "shredded",
    "crushed",
    "peeled",
    "halved",
    "quartered",
    "cubed",
    "finely",
    "roughly",
    "thinly",
    "skinless",
    "boneless",
    "low",
    "sodium",
    "reduced",
    "unsalted",
    "salted",
    "whole",
    "raw",
    "cooked",
    "ripe",
    "can",
    "canned",
    "pack",
    "package",
    "jar",
    "of",
    "to",
    "taste",
    "optional",
    "about",
    "and",
    "or",
}

# Known alternative names; the retailer may list either spelling
SYNONYMS: dict[str, list[str]] = {
    "cilantro": ["coriander"],
    "coriander": ["cilantro"],
    "coriander leaves": ["cilantro", "fresh cilantro"],
    "scallion": ["green onion", "spring onion"],
    "scallions": ["green onions", "spring onions"],
    "spring onion": ["green onion"],
    "chickpeas": ["garbanzo beans"],
    "chickpea": ["garbanzo beans"],
    "garbanzo beans": ["chickpeas"],
    "zucchini": ["courgette"],
    "courgette": ["zucchini"],
    "eggplant": ["aubergine"],
    "aubergine": ["eggplant"],
    "capsicum": ["bell pepper"],
    "chili": ["chile", "chilli"],
    "chilli": ["chili"],
    "pine nuts": ["pignoli"],
    "pumpkin seeds": ["pepitas"],
    "okra": ["lady finger"],
    "plantain": ["plantains"],
    "yam": ["sweet potato"],
    "scotch bonnet pepper": ["hot pepper"],
    "plum tomatoes": ["roma tomatoes"],
    "long-grain rice": ["white rice"],
    "sunflower oil": ["vegetable oil"],
    "vegetable stock": ["vegetable broth"],
    "chicken stock": ["chicken broth"],
    "beef stock": ["beef broth"],
}

# Multi-word phrases are checked before single keywords so "black pepper"
# is a spice while "pepper" alone is produce.
CATEGORY_PHRASES: list[tuple[str, CategoryHint]] = [
    ("black pepper", "spice"),
    ("white pepper", "spice"),
    ("cayenne pepper", "spice"),
    ("red pepper flakes", "spice"),
    ("chili powder", "spice"),
    ("garlic powder", "spice"),
    ("onion powder", "spice"),
    ("garam masala", "spice"),
    ("bay leaf", "spice"),
    ("bay leaves", "spice"),
    ("ground cloves", "spice"),
    ("fish sauce", "pantry"),
    ("oyster sauce", "pantry"),
    ("tomato sauce", "pantry"),
    ("stock", "pantry"),
    ("broth", "pantry"),
    ("bouillon", "pantry"),
    ("coconut milk", "pantry"),
    ("peanut butter", "pantry"),
    ("tomato paste", "pantry"),
    ("soy sauce", "pantry"),
    ("ice cream", "frozen"),
]

CATEGORY_KEYWORDS: list[tuple[CategoryHint, tuple[str, ...]]] = [
    (
        "frozen",
        ("frozen",),
    ),
    (
        "spice",
        (
            "cumin",
            "paprika",
            "turmeric",
            "cinnamon",
            "nutmeg",
            "cardamom",
            "coriander seed",
            "allspice",
            "oregano",
            "peppercorn",
            "seasoning",
            "spice",
            "curry powder",
            "masala",
            "saffron",
            "sumac",
            "za'atar",
            "berbere",
        ),
    ),
    (
        "protein",
        (
            "chicken",
            "beef",
            "pork",
            "lamb",
            "goat",
            "turkey",
            "duck",
            "fish",
            "salmon",
            "tuna",
            "cod",
            "tilapia",
            "shrimp",
            "prawn",
            "crab",
            "sausage",
            "bacon",
            "ham",
            "steak",
            "mince",
            "tofu",
            "tempeh",
        ),
    ),
    (
        "dairy",
        ("milk", "cheese", "yogurt", "yoghurt", "butter", "cream", "ghee", "paneer", "egg"),
    ),
    (
        "produce",
        (
            "leaf",
            "leaves",
            "lettuce",
            "spinach",
            "kale",
            "cabbage",
            "pepper",
            "tomato",
            "onion",
            "scallion",
            "shallot",
            "garlic",
            "ginger",
            "potato",
            "yam",
            "cassava",
            "plantain",
            "carrot",
            "celery",
            "cucumber",
            "zucchini",
            "eggplant",
            "okra",
            "broccoli",
            "cauliflower",
            "mushroom",
            "avocado",
            "apple",
            "banana",
            "mango",
            "lemon",
            "lime",
            "orange",
            "cilantro",
            "coriander",
            "parsley",
            "basil",
            "mint",
            "thyme",
            "rosemary",
            "chili",
            "chile",
            "jalapeno",
        ),
    ),
    (
        "bakery",
        ("bread", "bun", "roll", "bagel", "tortilla", "pita", "naan", "baguette"),
    ),
    (
        "pantry",
        (
            "flour",
            "rice",
            "pasta",
            "noodle",
            "bean",
            "lentil",
            "chickpea",
            "garbanzo",
            "oil",
            "vinegar",
            "salt",
            "sugar",
            "honey",
            "stock",
            "broth",
            "sauce",
            "oats",
            "quinoa",
            "couscous",
            "cornmeal",
            "nut",
            "seed",
        ),
    ),
]

# Catalog category keywords that confirm a hint
CATEGORY_TAGS: dict[CategoryHint, tuple[str, ...]] = {
    "produce": ("produce", "fruit", "vegetable", "herb"),
    "protein": ("meat", "seafood", "poultry", "fish", "protein", "deli"),
    "dairy": ("dairy", "cheese", "milk", "egg", "yogurt"),
    "spice": ("spice", "seasoning", "herbs & spices"),
    "pantry": (
        "pantry",
        "baking",
        "canned",
        "packaged",
        "pasta",
        "rice",
        "grain",
        "condiment",
        "oil",
        "international",
    ),
    "bakery": ("bakery", "bread"),
    "frozen": ("frozen",),
}


def normalize(text: str) -> str:
    """Lowercase, drop punctuation and descriptor words."""
    tokens = re.sub(r"[^a-z0-9'\-\s]", " ", text.lower()).split()
    return " ".join(t for t in tokens if t not in DESCRIPTORS)


def strip_notes(name: str) -> str:
    """Remove parenthetical notes and anything after the first comma."""
    without_parens = re.sub(r"\([^)]*\)", " ", name)
    head = without_parens.split(",", 1)[0]
    return " ".join(head.lower().split())


def singularize(word: str) -> str:
    """Crude English singular form ("tomatoes" -> "tomato", "leaves" -> "leaf")."""
    if len(word) <= 3:
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("ves"):
        return word[:-3] + "f"
    if word.endswith(("oes", "ches", "shes", "sses", "xes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith(("ss", "us", "is")):
        return word[:-1]
    return word


def singularize_phrase(phrase: str) -> str:
    words = phrase.split()
    if not words:
        return phrase
    words[-1] = singularize(words[-1])
    return " ".join(words)


def build_search_terms(ingredient: Ingredient | str) -> list[str]:
    """
    Generate search terms for an ingredient, most specific first.

    The raw name comes first, followed by progressively more generic forms:
    notes stripped, descriptors removed, singular form, known synonyms and
    finally the head noun alone.

    Args:
        ingredient: Ingredient or bare ingredient name

    Returns:
        Deduplicated list of at most MAX_SEARCH_TERMS terms
    """
    name = ingredient.name if isinstance(ingredient, Ingredient) else ingredient
    raw = " ".join(name.lower().split())

    candidates: list[str] = [raw]

    stripped = strip_notes(raw)
    candidates.append(stripped)

    cleaned = normalize(stripped)
    candidates.append(cleaned)

    singular = singularize_phrase(cleaned)
    candidates.append(singular)

    for key in (cleaned, singular):
        candidates.extend(SYNONYMS.get(key, []))

    words = singular.split()
    if len(words) > 1:
        candidates.append(words[-1])

    terms: list[str] = []
    for term in candidates:
        term = term.strip()
        if term and term not in terms:
            terms.append(term)

    return terms[:MAX_SEARCH_TERMS]


def _contains_keyword(text: str, keyword: str) -> bool:
    # Whole words with an optional plural ending: "tomato" matches "tomatoes",
    # "egg" does not match "eggplant"
    return re.search(rf"\b{re.escape(keyword)}(?:s|es)?\b", text) is not None


def classify_category(name: str) -> CategoryHint:
    """
    Guess a coarse food category from an ingredient name.

    This is a keyword heuristic, not a taxonomy lookup. Names that match
    nothing get "unknown", which disables the category bonus in scoring.
    """
    text = name.lower()

    for phrase, hint in CATEGORY_PHRASES:
        if phrase in text:
            return hint

    for hint, keywords in CATEGORY_KEYWORDS:
        if any(_contains_keyword(text, keyword) for keyword in keywords):
            return hint

    return "unknown"


def category_matches(hint: CategoryHint, categories: tuple[str, ...] | list[str]) -> bool:
    """Check if any catalog category tag agrees with the hint."""
    if hint == "unknown":
        return False
    tags = CATEGORY_TAGS.get(hint, ())
    for category in categories:
        category_lower = category.lower()
        if any(tag in category_lower for tag in tags):
            return True
    return False
