"""Tests for candidate scoring and ranking."""

import pytest

from meal_pricer.ingredients import Ingredient
from meal_pricer.scoring import (
    DEFAULT_WEIGHTS,
    ScoringWeights,
    availability_signal,
    name_similarity,
    rank_candidates,
    score_product,
    size_proximity,
    structural_penalty,
)
from meal_pricer.units import UnitQuantity


class TestNameSimilarity:
    """Tests for name_similarity function."""

    def test_identical_after_normalization(self):
        assert name_similarity("whole milk", "Whole Milk") == pytest.approx(1.0)

    def test_related_beats_unrelated(self):
        assert name_similarity("cilantro", "Fresh Cilantro") > name_similarity(
            "cilantro", "Yellow Onions"
        )

    def test_bounded(self):
        score = name_similarity("ground beef", "Ground Beef 80% Lean")
        assert 0.0 <= score <= 1.0

    def test_empty(self):
        assert name_similarity("", "Milk") == 0.0
        assert name_similarity("milk", "") == 0.0


class TestSizeProximity:
    """Tests for size_proximity function."""

    def test_exact_fit(self):
        assert size_proximity(Ingredient("milk", 1, "l"), UnitQuantity(1, "l")) == pytest.approx(1.0)

    def test_closer_pack_scores_higher(self):
        ingredient = Ingredient("milk", 1, "l")
        one = size_proximity(ingredient, UnitQuantity(1, "l"))
        two = size_proximity(ingredient, UnitQuantity(2, "l"))
        four = size_proximity(ingredient, UnitQuantity(4, "l"))

        assert one > two > four
        assert four == pytest.approx(1 / (1 + 1.3862944), rel=1e-6)

    def test_symmetric_in_ratio(self):
        ingredient = Ingredient("milk", 2, "l")
        assert size_proximity(ingredient, UnitQuantity(1, "l")) == pytest.approx(
            size_proximity(ingredient, UnitQuantity(4, "l"))
        )

    def test_converts_units(self):
        assert size_proximity(Ingredient("milk", 1000, "ml"), UnitQuantity(1, "l")) == pytest.approx(1.0)

    def test_neutral_when_unknown(self):
        ingredient = Ingredient("milk", 1, "cup")
        assert size_proximity(ingredient, None) == DEFAULT_WEIGHTS.neutral_size_proximity
        assert size_proximity(ingredient, UnitQuantity(1, "lb")) == 0.2
        assert size_proximity(ingredient, UnitQuantity(0, "l")) == 0.2


class TestAvailabilitySignal:
    """Tests for availability_signal function."""

    def test_values(self, product_factory):
        assert availability_signal(product_factory("1", "Milk", stock_level="HIGH")) == "in_stock"
        assert (
            availability_signal(product_factory("1", "Milk", stock_level="TEMPORARILY_OUT_OF_STOCK"))
            == "out_of_stock"
        )
        assert availability_signal(product_factory("1", "Milk")) == "unknown"


class TestStructuralPenalty:
    """Tests for structural_penalty function."""

    def test_no_penalty(self):
        assert structural_penalty("cilantro", "Fresh Cilantro", "produce") == (0.0, [])

    def test_prepared_form_for_produce(self):
        penalty, reasons = structural_penalty("tomato", "Tomato Soup", "produce")
        assert penalty == pytest.approx(0.5)
        assert reasons == ["prepared form: soup"]

    def test_prepared_form_named_by_ingredient(self):
        assert structural_penalty("tomato soup", "Tomato Soup", "produce")[0] == 0.0

    def test_prepared_form_only_for_produce_and_protein(self):
        assert structural_penalty("tomato", "Tomato Soup", "pantry")[0] == 0.0

    def test_flavor_penalty_per_token(self):
        assert structural_penalty("yogurt", "Vanilla Yogurt", "dairy")[0] == pytest.approx(0.3)
        assert structural_penalty("yogurt", "Chocolate Vanilla Yogurt", "dairy")[0] == pytest.approx(0.6)
        assert structural_penalty("vanilla yogurt", "Vanilla Yogurt", "dairy")[0] == 0.0

    def test_herb_onion_and_leafy_root(self):
        penalty, reasons = structural_penalty("cilantro", "Yellow Onions", "produce")

        assert penalty == pytest.approx(1.4)
        assert reasons == ["herb/onion mismatch", "leafy herb/root vegetable mismatch"]

    def test_onion_for_herb_product(self):
        penalty, reasons = structural_penalty("onion", "Fresh Parsley", "produce")

        assert penalty == pytest.approx(0.8)
        assert reasons == ["herb/onion mismatch"]

    def test_custom_weights(self):
        weights = ScoringWeights(prepared_form_penalty=0.1)
        assert structural_penalty("tomato", "Tomato Soup", "produce", weights)[0] == pytest.approx(0.1)


class TestScoreProduct:
    """Tests for score_product function."""

    def test_weighted_sum(self, product_factory):
        product = product_factory("milk-1", "Whole Milk", 4.0, "1 l", ("Dairy",))

        scored = score_product(Ingredient("whole milk", 1, "l"), product)

        # name 0.5 + size 0.2 + category 0.15 + priced 0.05
        assert scored.score == pytest.approx(0.9)
        assert scored.signals.category_matched
        assert scored.signals.availability == "unknown"
        assert scored.signals.has_price

    def test_size_monotonic(self, product_factory):
        ingredient = Ingredient("whole milk", 1, "l")
        exact = score_product(ingredient, product_factory("1", "Whole Milk", 4.0, "1 l", ("Dairy",)))
        big = score_product(ingredient, product_factory("2", "Whole Milk", 4.0, "4 l", ("Dairy",)))

        assert exact.score > big.score

    def test_out_of_stock_penalized(self, product_factory):
        ingredient = Ingredient("whole milk", 1, "l")
        in_stock = score_product(
            ingredient, product_factory("1", "Whole Milk", 4.0, "1 l", ("Dairy",), stock_level="HIGH")
        )
        out = score_product(
            ingredient,
            product_factory("2", "Whole Milk", 4.0, "1 l", ("Dairy",), stock_level="OUT_OF_STOCK"),
        )

        assert in_stock.score - out.score == pytest.approx(0.25)
        assert "out of stock" in out.signals.penalty_reasons

    def test_store_brand_bonus(self, product_factory):
        ingredient = Ingredient("whole milk", 1, "l")
        generic = score_product(ingredient, product_factory("1", "Whole Milk", 4.0, "1 l", brand="Kroger"))
        branded = score_product(ingredient, product_factory("2", "Whole Milk", 4.0, "1 l", brand="Horizon"))
        unbranded = score_product(ingredient, product_factory("3", "Whole Milk", 4.0, "1 l"))

        assert generic.score - branded.score == pytest.approx(0.08)
        assert branded.score == pytest.approx(unbranded.score)
        assert generic.signals.store_brand
        assert not branded.signals.store_brand

    def test_store_brands_configurable(self, product_factory):
        ingredient = Ingredient("whole milk", 1, "l")
        product = product_factory("1", "Whole Milk", 4.0, "1 l", brand="Simple Truth Organic")
        weights = ScoringWeights(store_brands=("great value",))

        assert score_product(ingredient, product).signals.store_brand
        assert not score_product(ingredient, product, weights=weights).signals.store_brand

    def test_promo_bonus(self, product_factory):
        ingredient = Ingredient("eggs", 12)
        regular = score_product(ingredient, product_factory("1", "Large Eggs", 3.0, "12 ct"))
        promo = score_product(ingredient, product_factory("2", "Large Eggs", 3.0, "12 ct", promo=2.4))

        assert promo.score - regular.score == pytest.approx(0.05)

    def test_clamped_to_zero(self, product_factory):
        scored = score_product(
            Ingredient("cilantro"), product_factory("onion-3", "Yellow Onions", 2.99, "3 lb", ("Produce",))
        )
        assert scored.score == 0.0
        assert scored.signals.penalty == pytest.approx(1.4)

    def test_deterministic(self, product_factory):
        ingredient = Ingredient("ground beef", 1, "lb")
        product = product_factory("beef-1", "Ground Beef 80% Lean", 5.99, "1 lb", ("Meat & Seafood",))

        assert score_product(ingredient, product) == score_product(ingredient, product)


class TestRankCandidates:
    """Tests for rank_candidates function."""

    def test_best_first(self, catalog):
        candidates = catalog.search("cilantro") + catalog.search("onion")

        ranked = rank_candidates(Ingredient("cilantro"), candidates)

        assert ranked[0].product.product_id == "cilantro-1"
        assert ranked[-1].product.product_id == "onion-3"

    def test_equal_scores_prefer_priced(self, product_factory):
        unpriced = product_factory("a", "Milk")
        priced = product_factory("b", "Milk", 2.0)

        ranked = rank_candidates(
            Ingredient("milk"), [unpriced, priced], weights=ScoringWeights(priced=0.0)
        )

        assert ranked[0].score == ranked[1].score
        assert [c.product.product_id for c in ranked] == ["b", "a"]

    def test_stable_for_full_ties(self, product_factory):
        first = product_factory("a", "Milk", 2.0)
        second = product_factory("b", "Milk", 2.0)

        ranked = rank_candidates(Ingredient("milk"), [first, second])

        assert [c.product.product_id for c in ranked] == ["a", "b"]

    def test_empty(self):
        assert rank_candidates(Ingredient("milk"), []) == []
