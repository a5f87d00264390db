"""Tests for ingredient quantity scaling.

Amounts scale by new/original servings and are then rounded to a
precision that suits their unit.
"""

import pytest

from recipe_engine.data_layer.errors import ErrorKind, ScalingPreconditionError
from recipe_engine.data_layer.models import Ingredient, Quantity
from recipe_engine.scaling.policy import ScalingPolicy, scale_factor, validate_servings
from recipe_engine.scaling.quantity_scaler import QuantityScaler


def ingredient(name, amount, unit="", notes=None):
    return Ingredient(name=name, quantity=Quantity(amount=amount, unit=unit), notes=notes)


class TestServingValidation:
    """Tests for validate_servings and scale_factor."""

    def test_scale_factor(self):
        assert scale_factor(4, 8) == 2.0
        assert scale_factor(4, 2) == 0.5

    @pytest.mark.parametrize("original,new,field", [
        (0, 4, "original_servings"),
        (-2, 4, "original_servings"),
        (4, 0, "new_servings"),
        (4, -1, "new_servings"),
        (4, 2.5, "new_servings"),
        (4, True, "new_servings"),
        ("4", 2, "original_servings"),
    ])
    def test_invalid_servings_rejected(self, original, new, field):
        """Test that non-positive or non-integer servings are rejected."""
        with pytest.raises(ScalingPreconditionError) as exc_info:
            validate_servings(original, new)

        assert exc_info.value.code == ErrorKind.SCALING_PRECONDITION
        assert exc_info.value.field == field

    def test_valid_servings_accepted(self):
        validate_servings(1, 100)


class TestQuantityScaler:
    """Tests for QuantityScaler.scale."""

    @pytest.fixture
    def scaler(self):
        return QuantityScaler()

    def test_doubling_cups(self, scaler):
        """Test 2 cups flour for 4 becomes 4 cups for 8."""
        scaled = scaler.scale([ingredient("flour", 2, "cup")], 4, 8)

        assert scaled[0].amount == 4.0
        assert scaled[0].unit == "cup"

    def test_teaspoons_round_to_quarters(self, scaler):
        """Test 1 tsp for 3 servings becomes 1/4 tsp for 1."""
        scaled = scaler.scale([ingredient("salt", 1, "tsp")], 3, 1)
        assert scaled[0].amount == 0.25

    def test_tablespoons_round_to_halves(self, scaler):
        """Test 1 tbsp for 4 becomes 1.0 (not 0.75) tbsp for 3."""
        scaled = scaler.scale([ingredient("oil", 1, "tbsp")], 4, 3)
        assert scaled[0].amount == 1.0

    def test_small_amounts_keep_three_decimals(self, scaler):
        """Test amounts under 0.1 keep extra precision whatever the unit."""
        scaled = scaler.scale([ingredient("saffron", 0.1, "tsp")], 4, 2)
        assert scaled[0].amount == 0.05

    def test_large_grams_round_to_integer(self, scaler):
        """Test 250 g scaled by 3/4 is 188 g (half rounds up)."""
        scaled = scaler.scale([ingredient("rice", 250, "g")], 4, 3)
        assert scaled[0].amount == 188.0

    def test_small_grams_keep_one_decimal(self, scaler):
        """Test grams below 10 keep one decimal."""
        scaled = scaler.scale([ingredient("yeast", 5, "g")], 4, 3)
        assert scaled[0].amount == 3.8

    def test_kilograms_keep_two_decimals(self, scaler):
        scaled = scaler.scale([ingredient("potatoes", 1.5, "kg")], 4, 3)
        assert scaled[0].amount == 1.13

    def test_counted_items_round_to_whole(self, scaler):
        """Test 3 eggs for 4 becomes 2 eggs for 2 (1.5 rounds up)."""
        scaled = scaler.scale([ingredient("eggs", 3)], 4, 2)
        assert scaled[0].amount == 2.0

    def test_count_unit_spelling(self, scaler):
        scaled = scaler.scale([ingredient("lemon", 1, "whole")], 2, 3)
        assert scaled[0].amount == 2.0

    def test_unknown_unit_keeps_one_decimal(self, scaler):
        """Test units outside every class round to one decimal."""
        scaled = scaler.scale([ingredient("garlic", 3, "cloves")], 4, 6)

        assert scaled[0].amount == 4.5
        assert scaled[0].unit == "cloves"

    def test_unit_class_is_case_insensitive(self, scaler):
        scaled = scaler.scale([ingredient("salt", 1, "Teaspoon")], 3, 1)
        assert scaled[0].amount == 0.25

    def test_order_names_and_notes_preserved(self, scaler):
        """Test that only amounts change."""
        original = [
            ingredient("onion", 1, "", notes="diced"),
            ingredient("butter", 2, "tbsp"),
            ingredient("stock", 500, "ml"),
        ]

        scaled = scaler.scale(original, 2, 4)

        assert [i.name for i in scaled] == ["onion", "butter", "stock"]
        assert scaled[0].notes == "diced"
        assert [i.amount for i in scaled] == [2.0, 4.0, 1000.0]

    def test_original_ingredients_unchanged(self, scaler):
        original = [ingredient("flour", 2, "cup")]
        scaler.scale(original, 4, 8)
        assert original[0].amount == 2

    def test_same_servings_is_identity_for_clean_amounts(self, scaler):
        original = [ingredient("flour", 2, "cup"), ingredient("eggs", 3)]
        scaled = scaler.scale(original, 4, 4)
        assert scaled == original

    def test_empty_ingredient_list(self, scaler):
        assert scaler.scale([], 4, 8) == []

    @pytest.mark.parametrize("unit", ["tsp", "g", "kg", ""])
    def test_huge_amounts_scale_without_error(self, scaler, unit):
        """Test amounts far beyond any rounding precision pass through."""
        scaled = scaler.scale([ingredient("x", 1e30, unit)], 1, 2)
        assert scaled[0].amount == 2e30

    def test_invalid_servings_raise(self, scaler):
        with pytest.raises(ScalingPreconditionError):
            scaler.scale([ingredient("flour", 2, "cup")], 4, 0)


class TestUnitNormalization:
    """Tests for QuantityScaler with normalize_units enabled."""

    @pytest.fixture
    def scaler(self):
        return QuantityScaler(normalize_units=True)

    def test_tablespoons_promote_to_cup(self, scaler):
        """Test 8 tbsp doubled becomes 1 cup."""
        scaled = scaler.scale([ingredient("butter", 8, "tbsp")], 4, 8)

        assert scaled[0].amount == 1.0
        assert scaled[0].unit == "cup"

    def test_milliliters_promote_to_liters(self, scaler):
        scaled = scaler.scale([ingredient("stock", 750, "ml")], 4, 8)

        assert scaled[0].amount == 1.5
        assert scaled[0].unit == "l"

    def test_unknown_units_untouched(self, scaler):
        scaled = scaler.scale([ingredient("garlic", 3, "cloves")], 4, 8)

        assert scaled[0].amount == 6.0
        assert scaled[0].unit == "cloves"

    def test_disabled_by_default(self):
        scaled = QuantityScaler().scale([ingredient("butter", 8, "tbsp")], 4, 8)
        assert scaled[0].unit == "tbsp"


class TestCustomPolicy:
    """Tests for overriding rounding constants."""

    def test_teaspoon_fraction_override(self):
        """Test rounding teaspoons to eighths."""
        scaler = QuantityScaler(ScalingPolicy(teaspoon_fraction=8))
        scaled = scaler.scale([ingredient("salt", 1, "tsp")], 8, 1)
        assert scaled[0].amount == 0.125

    def test_policy_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="Unknown scaling policy fields"):
            ScalingPolicy.from_dict({"teaspoon_fractions": 8})

    def test_policy_from_dict_casts_values(self):
        policy = ScalingPolicy.from_dict({"macro_decimals": "2", "time_floor": 0.5})

        assert policy.macro_decimals == 2
        assert policy.time_floor == 0.5
        assert policy.cup_fraction == 4
