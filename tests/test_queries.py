"""Tests for search-term generation and category hints."""

from meal_pricer.ingredients import Ingredient
from meal_pricer.queries import (
    MAX_SEARCH_TERMS,
    build_search_terms,
    category_matches,
    classify_category,
    normalize,
    singularize,
    strip_notes,
)


class TestHelpers:
    """Tests for text helpers."""

    def test_normalize_drops_descriptors(self):
        assert normalize("Fresh Chopped Cilantro") == "cilantro"
        assert normalize("boneless, skinless chicken") == "chicken"

    def test_strip_notes(self):
        assert strip_notes("Onion (about 1 cup), diced") == "onion"
        assert strip_notes("Garlic") == "garlic"

    def test_singularize(self):
        assert singularize("tomatoes") == "tomato"
        assert singularize("leaves") == "leaf"
        assert singularize("berries") == "berry"
        assert singularize("eggs") == "egg"
        assert singularize("asparagus") == "asparagus"
        assert singularize("peas") == "pea"


class TestBuildSearchTerms:
    """Tests for build_search_terms function."""

    def test_raw_name_first(self):
        terms = build_search_terms(Ingredient("Fresh Cilantro, chopped"))
        assert terms[0] == "fresh cilantro, chopped"

    def test_progressively_generic(self):
        terms = build_search_terms("Fresh Cilantro, chopped")
        assert terms == ["fresh cilantro, chopped", "fresh cilantro", "cilantro", "coriander"]

    def test_head_noun_last(self):
        terms = build_search_terms("boneless skinless chicken thighs")
        assert terms[0] == "boneless skinless chicken thighs"
        assert "chicken thigh" in terms
        assert terms[-1] == "thigh"

    def test_synonyms_and_cap(self):
        terms = build_search_terms("scallions (green part), thinly sliced")
        assert len(terms) == MAX_SEARCH_TERMS
        assert terms[:3] == ["scallions (green part), thinly sliced", "scallions", "scallion"]
        assert "green onions" in terms

    def test_deduplicated(self):
        assert build_search_terms("milk") == ["milk"]

    def test_accepts_ingredient(self):
        assert build_search_terms(Ingredient("Eggs", 3)) == ["eggs", "egg"]


class TestClassifyCategory:
    """Tests for classify_category function."""

    def test_produce(self):
        assert classify_category("cilantro leaves") == "produce"
        assert classify_category("red bell pepper") == "produce"
        assert classify_category("garlic cloves") == "produce"
        assert classify_category("eggplant") == "produce"

    def test_protein(self):
        assert classify_category("chicken breast") == "protein"
        assert classify_category("ground beef") == "protein"

    def test_spice(self):
        assert classify_category("black pepper") == "spice"
        assert classify_category("ground cumin") == "spice"

    def test_dairy(self):
        assert classify_category("large eggs") == "dairy"
        assert classify_category("whole milk") == "dairy"

    def test_phrases_take_precedence(self):
        assert classify_category("chicken stock") == "pantry"
        assert classify_category("coconut milk") == "pantry"

    def test_unknown(self):
        assert classify_category("xanthan gum") == "unknown"


class TestCategoryMatches:
    """Tests for category_matches function."""

    def test_match(self):
        assert category_matches("produce", ("Produce",))
        assert category_matches("protein", ["Meat & Seafood"])

    def test_no_match(self):
        assert not category_matches("dairy", ("Meat & Seafood",))
        assert not category_matches("produce", ())

    def test_unknown_never_matches(self):
        assert not category_matches("unknown", ("Produce",))
