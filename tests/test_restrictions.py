"""Tests for restriction aggregation, profile stores and compatibility checks."""

import os
import shutil
import tempfile

import pytest

from recipe_engine.data_layer.models import DietaryProfile, Ingredient, Quantity, Recipe
from recipe_engine.data_layer.profile_store import InMemoryProfileStore, YamlProfileStore
from recipe_engine.restrictions import RestrictionAggregator, filter_compatible, is_compatible


def make_recipe(name, compatibility):
    return Recipe(
        name=name,
        ingredients=(Ingredient("tofu", Quantity(200, "g")),),
        instructions=("Cook",),
        serving_size=2,
        cooking_time=20,
        difficulty=1,
        dietary_compatibility=tuple(compatibility),
    )


PROFILES_YAML = """
profiles:
  user-123:
    allergies: [Nuts, shellfish]
    dietary_preferences: [vegetarian]
    health_conditions: [low_sodium]
  user-456:
    dietary_preferences: [vegan]
  user-789:
"""


class TestProfileStores:
    """Tests for the in-memory and YAML profile stores."""

    @pytest.fixture
    def temp_dir(self):
        path = tempfile.mkdtemp()
        yield path
        shutil.rmtree(path)

    @pytest.fixture
    def yaml_path(self, temp_dir):
        path = os.path.join(temp_dir, "profiles.yaml")
        with open(path, "w") as f:
            f.write(PROFILES_YAML)
        return path

    def test_yaml_profile_loaded(self, yaml_path):
        store = YamlProfileStore(yaml_path)
        profile = store.get_profile("user-123")

        assert profile.allergies == ("Nuts", "shellfish")
        assert profile.health_conditions == ("low_sodium",)

    def test_yaml_restrictions_normalised(self, yaml_path):
        store = YamlProfileStore(yaml_path)

        assert store.get_restrictions("user-123") == frozenset(
            {"nuts", "shellfish", "vegetarian", "low_sodium"}
        )

    def test_empty_yaml_entry(self, yaml_path):
        store = YamlProfileStore(yaml_path)
        assert store.get_restrictions("user-789") == frozenset()

    def test_unknown_user_has_no_restrictions(self, yaml_path):
        store = YamlProfileStore(yaml_path)

        assert store.get_profile("nobody") is None
        assert store.get_restrictions("nobody") == frozenset()

    def test_missing_file_raises(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            YamlProfileStore(os.path.join(temp_dir, "missing.yaml"))

    def test_malformed_profiles_raise(self, temp_dir):
        path = os.path.join(temp_dir, "bad.yaml")
        with open(path, "w") as f:
            f.write("profiles:\n  - user-1\n")

        with pytest.raises(ValueError):
            YamlProfileStore(path)

    @pytest.mark.parametrize("document", [
        "- user-1\n- user-2\n",
        "profiles:\n  user-1: [nuts]\n",
    ])
    def test_non_mapping_documents_raise(self, temp_dir, document):
        path = os.path.join(temp_dir, "bad.yaml")
        with open(path, "w") as f:
            f.write(document)

        with pytest.raises(ValueError):
            YamlProfileStore(path)

    def test_in_memory_store(self):
        store = InMemoryProfileStore([DietaryProfile("u1", allergies=("eggs",))])
        store.save_profile(DietaryProfile("u2", dietary_preferences=("keto",)))

        assert store.get_restrictions("u1") == frozenset({"eggs"})
        assert store.get_restrictions("u2") == frozenset({"keto"})


class TestRestrictionAggregator:
    """Tests for RestrictionAggregator.aggregate."""

    @pytest.fixture
    def aggregator(self):
        store = InMemoryProfileStore([
            DietaryProfile(
                "user-1",
                allergies=("peanuts",),
                dietary_preferences=("Vegan",),
                health_conditions=("diabetes",),
            )
        ])
        return RestrictionAggregator(store)

    def test_union_with_profile(self, aggregator):
        result = aggregator.aggregate(["halal", "vegan"], user_id="user-1")
        assert result == frozenset({"halal", "vegan", "peanuts", "diabetes"})

    def test_unknown_user_leaves_request_unchanged(self, aggregator):
        assert aggregator.aggregate(["halal"], user_id="ghost") == frozenset({"halal"})

    def test_no_user(self, aggregator):
        assert aggregator.aggregate(["Halal "]) == frozenset({"halal"})

    def test_no_restrictions_at_all(self, aggregator):
        assert aggregator.aggregate() == frozenset()

    def test_order_irrelevant(self, aggregator):
        a = aggregator.aggregate(["a", "b", "c"], "user-1")
        b = aggregator.aggregate(["c", "a", "b"], "user-1")
        assert a == b

    def test_without_profile_store(self):
        assert RestrictionAggregator().aggregate(["keto"], user_id="user-1") == frozenset({"keto"})


class TestCompatibility:
    """Tests for is_compatible and filter_compatible."""

    def test_subset_is_compatible(self):
        recipe = make_recipe("Salad", ["vegan", "gluten_free"])

        assert is_compatible(recipe, ["vegan"])
        assert is_compatible(recipe, ["Vegan", "GLUTEN_FREE"])

    def test_missing_restriction_incompatible(self):
        recipe = make_recipe("Salad", ["vegan"])
        assert not is_compatible(recipe, ["vegan", "halal"])

    def test_whole_identifier_match(self):
        """Test that a substring of a tag does not count as a match."""
        recipe = make_recipe("Broth", ["low_sodium"])
        assert not is_compatible(recipe, ["sodium"])

    def test_no_restrictions_always_compatible(self):
        assert is_compatible(make_recipe("Steak", []), [])

    def test_filter_preserves_order(self):
        recipes = [
            make_recipe("A", ["vegan", "halal"]),
            make_recipe("B", ["halal"]),
            make_recipe("C", ["halal", "vegan", "kosher"]),
        ]

        kept = filter_compatible(recipes, ["vegan", "halal"])

        assert [r.name for r in kept] == ["A", "C"]
