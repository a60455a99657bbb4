"""Tests for ingredient parsing and validation."""

import json

import pytest

from meal_pricer.ingredients import (
    Ingredient,
    IngredientValidationError,
    load_ingredients,
    parse_ingredient_text,
    parse_ingredients_text,
    parse_quantity,
    parse_unit,
    validate_ingredients,
)


class TestParseQuantity:
    """Tests for parse_quantity function."""

    def test_integer(self):
        assert parse_quantity("2 cups milk") == (2.0, "cups milk")

    def test_decimal(self):
        qty, _ = parse_quantity("1.5 lb beef")
        assert qty == 1.5

    def test_fraction(self):
        qty, _ = parse_quantity("1/2 cup sugar")
        assert qty == 0.5

    def test_mixed_number(self):
        qty, remaining = parse_quantity("1 1/2 lb ground beef")
        assert qty == 1.5
        assert remaining == "lb ground beef"

    def test_unicode_fraction(self):
        qty, remaining = parse_quantity("½ tsp salt")
        assert qty == 0.5
        assert remaining == "tsp salt"

    def test_range_takes_higher(self):
        qty, _ = parse_quantity("2-3 cloves garlic")
        assert qty == 3.0

    def test_no_quantity(self):
        assert parse_quantity("salt to taste") == (None, "salt to taste")


class TestParseUnit:
    """Tests for parse_unit function."""

    def test_single_word(self):
        assert parse_unit("cups milk") == ("cups", "milk")

    def test_two_word(self):
        assert parse_unit("fl oz vanilla extract") == ("fl oz", "vanilla extract")

    def test_count_word(self):
        assert parse_unit("cloves garlic") == ("cloves", "garlic")

    def test_no_unit(self):
        assert parse_unit("large eggs") == (None, "large eggs")


class TestParseIngredientText:
    """Tests for parse_ingredient_text function."""

    def test_full_line(self):
        assert parse_ingredient_text("2 cups whole milk") == Ingredient("whole milk", 2.0, "cups")

    def test_drops_of(self):
        assert parse_ingredient_text("2 cups of flour").name == "flour"

    def test_defaults(self):
        assert parse_ingredient_text("salt") == Ingredient("salt", 1.0, "each")

    def test_count_without_unit(self):
        assert parse_ingredient_text("3 eggs") == Ingredient("eggs", 3.0, "each")

    def test_parse_multiple_lines(self):
        text = "Ingredients:\n- 2 cups milk\n\n* 3 eggs\n1. 1 lb beef"
        ingredients = parse_ingredients_text(text)

        assert [i.name for i in ingredients] == ["milk", "eggs", "beef"]
        assert ingredients[2].unit == "lb"


class TestIngredient:
    """Tests for the Ingredient dataclass."""

    def test_from_dict(self):
        ingredient = Ingredient.from_dict({"name": " milk ", "amount": 2, "unit": "cup"})
        assert ingredient == Ingredient("milk", 2.0, "cup")

    def test_from_dict_quantity_key(self):
        assert Ingredient.from_dict({"name": "eggs", "quantity": 3}).amount == 3.0

    def test_from_dict_defaults(self):
        assert Ingredient.from_dict({"name": "salt"}) == Ingredient("salt", 1.0, "each")

    def test_str(self):
        assert str(Ingredient("milk", 2, "cup")) == "2 cup milk"
        assert str(Ingredient("eggs", 3)) == "3 eggs"
        assert str(Ingredient("butter", 0.5, "cup")) == "0.5 cup butter"

    def test_round_trip_dict(self):
        ingredient = Ingredient("flour", 2.5, "cup")
        assert Ingredient.from_dict(ingredient.to_dict()) == ingredient


class TestValidateIngredients:
    """Tests for validate_ingredients function."""

    def test_accepts_objects_and_mappings(self):
        result = validate_ingredients([Ingredient("milk", 2, "cup"), {"name": "eggs", "amount": 3}])
        assert [i.name for i in result] == ["milk", "eggs"]

    def test_empty_list(self):
        with pytest.raises(IngredientValidationError):
            validate_ingredients([])

    def test_none(self):
        with pytest.raises(IngredientValidationError):
            validate_ingredients(None)

    def test_blank_name(self):
        with pytest.raises(IngredientValidationError, match="name is required"):
            validate_ingredients([{"name": "  ", "amount": 1}])

    def test_non_positive_amount(self):
        with pytest.raises(IngredientValidationError, match="positive"):
            validate_ingredients([{"name": "milk", "amount": 0}])

        with pytest.raises(IngredientValidationError):
            validate_ingredients([{"name": "milk", "amount": -1}])

    def test_non_finite_amount(self):
        with pytest.raises(IngredientValidationError, match="finite"):
            validate_ingredients([{"name": "milk", "amount": float("nan")}])

        with pytest.raises(IngredientValidationError):
            validate_ingredients([Ingredient("milk", float("inf"))])

    def test_non_numeric_amount(self):
        with pytest.raises(IngredientValidationError):
            validate_ingredients([{"name": "milk", "amount": "lots"}])

    def test_wrong_entry_type(self):
        with pytest.raises(IngredientValidationError, match="expected a mapping"):
            validate_ingredients(["2 cups milk"])

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            validate_ingredients([])


class TestLoadIngredients:
    """Tests for load_ingredients function."""

    def test_json_list(self, tmp_path):
        path = tmp_path / "ingredients.json"
        path.write_text(json.dumps([{"name": "milk", "amount": 2, "unit": "cup"}]))

        assert load_ingredients(path) == [Ingredient("milk", 2.0, "cup")]

    def test_json_object(self, tmp_path):
        path = tmp_path / "recipe.json"
        path.write_text(json.dumps({"ingredients": [{"name": "eggs", "amount": 3}]}))

        assert load_ingredients(path) == [Ingredient("eggs", 3.0, "each")]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(IngredientValidationError):
            load_ingredients(path)

    def test_text_file(self, tmp_path):
        path = tmp_path / "recipe.txt"
        path.write_text("2 cups milk\n3 eggs\n")

        ingredients = load_ingredients(path)
        assert [i.name for i in ingredients] == ["milk", "eggs"]

    def test_empty_text_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("\n\n")

        with pytest.raises(IngredientValidationError):
            load_ingredients(path)
