"""Tests for the command-line interface."""

import json
import os
import shutil
import tempfile

import pytest

from recipe_engine.caching.fingerprint import fingerprint
from recipe_engine.cli import main

ENV_VARS = (
    "RECIPE_SETTINGS_PATH",
    "RECIPE_CACHE_TTL_HOURS",
    "RECIPE_CACHE_MAX_ENTRIES",
    "RECIPE_CACHE_BACKEND",
    "RECIPE_CACHE_PATH",
    "RECIPE_DATABASE_URL",
    "RECIPE_SWEEP_INTERVAL_SECONDS",
    "RECIPE_PROFILES_PATH",
    "LOG_LEVEL",
)

RECIPE = {
    "name": "Pancakes",
    "ingredients": [
        {"name": "flour", "amount": 2, "unit": "cup"},
        {"name": "eggs", "amount": 3, "unit": ""},
    ],
    "instructions": ["Mix", "Fry"],
    "serving_size": 4,
    "cooking_time": 30,
    "difficulty": 2,
    "nutritional_info": {"calories": 350, "protein": 25.5, "serving_size": 4},
}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir():
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path)


def write_json(directory, name, data):
    path = os.path.join(directory, name)
    with open(path, "w") as f:
        json.dump(data, f)
    return path


class TestScaleCommand:
    """Tests for `scale`."""

    def test_scales_recipe(self, temp_dir, capsys):
        path = write_json(temp_dir, "recipe.json", RECIPE)

        assert main(["scale", path, "--servings", "2"]) == 0

        scaled = json.loads(capsys.readouterr().out)
        assert scaled["serving_size"] == 2
        assert scaled["ingredients"][0]["amount"] == 1.0
        assert scaled["nutritional_info"]["calories"] == 175
        assert scaled["nutritional_info"]["protein"] == 12.8
        assert scaled["cooking_time"] == 26

    def test_normalize_units(self, temp_dir, capsys):
        recipe = dict(RECIPE, ingredients=[{"name": "butter", "amount": 8, "unit": "tbsp"}])
        path = write_json(temp_dir, "recipe.json", recipe)

        assert main(["scale", path, "--servings", "8", "--normalize-units"]) == 0

        ingredient = json.loads(capsys.readouterr().out)["ingredients"][0]
        assert ingredient == {"name": "butter", "amount": 1.0, "unit": "cup"}

    def test_missing_file(self, temp_dir, capsys):
        assert main(["scale", os.path.join(temp_dir, "nope.json"), "--servings", "2"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_malformed_recipe_json(self, temp_dir, capsys):
        path = os.path.join(temp_dir, "recipe.json")
        with open(path, "w") as f:
            f.write('{"name": "Pancakes", ')

        assert main(["scale", path, "--servings", "2"]) == 1
        assert "Error: Could not read recipe file" in capsys.readouterr().err

    def test_invalid_servings(self, temp_dir, capsys):
        path = write_json(temp_dir, "recipe.json", RECIPE)

        assert main(["scale", path, "--servings", "0"]) == 2
        assert "SCALING_PRECONDITION" in capsys.readouterr().err

    def test_invalid_payload(self, temp_dir, capsys):
        path = write_json(temp_dir, "recipe.json", dict(RECIPE, difficulty=9))

        assert main(["scale", path, "--servings", "2"]) == 2
        assert "INVALID_PAYLOAD" in capsys.readouterr().err


class TestFingerprintCommand:
    """Tests for `fingerprint`."""

    def test_prints_fingerprint(self, capsys):
        code = main([
            "fingerprint", "by-name", '{"food_name": "ramen", "serving_size": 2}',
            "--restriction", "Vegan", "--restriction", "halal",
        ])

        assert code == 0
        expected = fingerprint("by-name", {"food_name": "ramen", "serving_size": 2}, ["halal", "vegan"])
        assert capsys.readouterr().out.strip() == expected

    def test_includes_user_profile(self, temp_dir, capsys):
        profiles = os.path.join(temp_dir, "profiles.yaml")
        with open(profiles, "w") as f:
            f.write("profiles:\n  u1:\n    allergies: [nuts]\n")
        settings = os.path.join(temp_dir, "settings.yaml")
        with open(settings, "w") as f:
            f.write(f"profiles_path: {profiles}\n")

        code = main([
            "--settings", settings, "fingerprint", "by-name", '{"food_name": "ramen"}',
            "--user-id", "u1",
        ])

        assert code == 0
        expected = fingerprint("by-name", {"food_name": "ramen"}, ["nuts"])
        assert capsys.readouterr().out.strip() == expected

    def test_invalid_json(self, capsys):
        assert main(["fingerprint", "by-name", "{not json"]) == 2
        assert "not valid JSON" in capsys.readouterr().err

    def test_non_object_input(self, capsys):
        assert main(["fingerprint", "by-name", "[1, 2]"]) == 2
        assert "INVALID_REQUEST" in capsys.readouterr().err


class TestOtherCommands:
    """Tests for `convert`, `sweep` and `restrictions`."""

    def test_convert(self, capsys):
        assert main(["convert", "1", "cup", "tbsp"]) == 0
        assert capsys.readouterr().out.strip() == "16 tbsp"

    def test_convert_with_suggestion(self, capsys):
        assert main(["convert", "1500", "ml", "ml", "--suggest"]) == 0
        assert capsys.readouterr().out.strip() == "1.5 l"

    def test_sweep(self, capsys):
        assert main(["sweep"]) == 0

        report = json.loads(capsys.readouterr().out)
        assert report == {"expired": 0, "evicted": 0, "remaining": 0, "error_code": None}

    def test_sweep_json_backend(self, temp_dir, monkeypatch, capsys):
        monkeypatch.setenv("RECIPE_CACHE_BACKEND", "json")
        monkeypatch.setenv("RECIPE_CACHE_PATH", temp_dir)

        assert main(["sweep"]) == 0
        assert json.loads(capsys.readouterr().out)["remaining"] == 0

    def test_restrictions(self, capsys):
        assert main(["restrictions", "--restriction", "Vegan", "--restriction", "halal"]) == 0
        assert json.loads(capsys.readouterr().out) == ["halal", "vegan"]

    def test_missing_settings_file(self, temp_dir, capsys):
        code = main(["--settings", os.path.join(temp_dir, "nope.yaml"), "sweep"])

        assert code == 1
        assert "Could not load settings" in capsys.readouterr().err

    def test_malformed_settings_yaml(self, temp_dir, capsys):
        settings = os.path.join(temp_dir, "settings.yaml")
        with open(settings, "w") as f:
            f.write("cache_ttl_hours: [1\n")

        assert main(["--settings", settings, "sweep"]) == 1
        assert "Could not load settings" in capsys.readouterr().err

    def test_missing_profiles_file(self, temp_dir, capsys):
        settings = os.path.join(temp_dir, "settings.yaml")
        with open(settings, "w") as f:
            f.write(f"profiles_path: {os.path.join(temp_dir, 'nope.yaml')}\n")

        assert main(["--settings", settings, "restrictions", "--user-id", "u1"]) == 1
        assert "Error: Could not load dietary profiles" in capsys.readouterr().err

    def test_malformed_profiles_yaml(self, temp_dir, monkeypatch, capsys):
        profiles = os.path.join(temp_dir, "profiles.yaml")
        with open(profiles, "w") as f:
            f.write("profiles: {u1: [nuts\n")
        monkeypatch.setenv("RECIPE_PROFILES_PATH", profiles)

        assert main(["sweep"]) == 1
        assert "Error: Could not load dietary profiles" in capsys.readouterr().err

    def test_fingerprint_with_missing_profiles(self, temp_dir, monkeypatch, capsys):
        monkeypatch.setenv("RECIPE_PROFILES_PATH", os.path.join(temp_dir, "nope.yaml"))

        code = main(["fingerprint", "by-name", '{"food_name": "ramen"}', "--user-id", "u1"])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])
