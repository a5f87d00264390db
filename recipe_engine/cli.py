#!/usr/bin/env python3
"""Command-line interface for the recipe cache and scaler."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from recipe_engine.caching.fingerprint import fingerprint
from recipe_engine.config import Settings, configure_logging, load_settings
from recipe_engine.data_layer.errors import RecipeEngineError
from recipe_engine.data_layer.schemas import parse_recipe
from recipe_engine.scaling.recipe_scaler import RecipeScaler
from recipe_engine.scaling.units import convert_unit, suggest_better_unit
from recipe_engine.service import RecipeCacheService, build_service


def _build_service(settings: Settings) -> Optional[RecipeCacheService]:
    """Build the service, reporting unreadable profile documents on stderr."""
    try:
        return build_service(settings)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Could not load dietary profiles: {e}", file=sys.stderr)
        return None


def _cmd_scale(args: argparse.Namespace, settings: Settings) -> int:
    recipe_path = Path(args.recipe)
    if not recipe_path.exists():
        print(f"Error: Recipe file not found: {recipe_path}", file=sys.stderr)
        return 1

    try:
        with open(recipe_path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: Could not read recipe file {recipe_path}: {e}", file=sys.stderr)
        return 1

    recipe = parse_recipe(data)
    scaler = RecipeScaler(settings.scaling, normalize_units=args.normalize_units)
    scaled = scaler.scale(recipe, args.servings)
    print(json.dumps(scaled.to_dict(), indent=2))
    return 0


def _cmd_fingerprint(args: argparse.Namespace, settings: Settings) -> int:
    try:
        structured_input = json.loads(args.input)
    except json.JSONDecodeError as e:
        print(f"Error: INPUT is not valid JSON: {e}", file=sys.stderr)
        return 2

    restrictions = args.restriction
    if args.user_id:
        service = _build_service(settings)
        if service is None:
            return 1
        restrictions = service.aggregate_restrictions(restrictions, args.user_id)

    print(fingerprint(args.type, structured_input, restrictions))
    return 0


def _cmd_convert(args: argparse.Namespace, settings: Settings) -> int:
    amount = convert_unit(args.amount, args.from_unit, args.to_unit)
    unit = args.to_unit
    if args.suggest:
        amount, unit = suggest_better_unit(amount, unit)
    print(f"{amount:g} {unit}")
    return 0


def _cmd_sweep(args: argparse.Namespace, settings: Settings) -> int:
    # Building the service sweeps once already
    service = _build_service(settings)
    if service is None:
        return 1
    report = service.sweep()
    print(json.dumps({
        "expired": report.expired,
        "evicted": report.evicted,
        "remaining": report.remaining,
        "error_code": report.error_code.value if report.error_code else None,
    }))
    return 0 if report.error_code is None else 1


def _cmd_restrictions(args: argparse.Namespace, settings: Settings) -> int:
    service = _build_service(settings)
    if service is None:
        return 1
    restrictions = service.aggregate_restrictions(args.restriction, args.user_id)
    print(json.dumps(sorted(restrictions)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recipe cache maintenance and serving-size scaling"
    )
    parser.add_argument(
        "--settings",
        type=str,
        help="Path to settings YAML file (default: $RECIPE_SETTINGS_PATH or built-in defaults)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scale = subparsers.add_parser("scale", help="Scale a recipe JSON file to new servings")
    scale.add_argument("recipe", help="Path to recipe JSON file")
    scale.add_argument("--servings", type=int, required=True, help="Target number of servings")
    scale.add_argument(
        "--normalize-units",
        action="store_true",
        help="Move scaled amounts to more readable units (e.g. 1500 ml -> 1.5 l)"
    )
    scale.set_defaults(handler=_cmd_scale)

    fp = subparsers.add_parser("fingerprint", help="Print the cache key for a request")
    fp.add_argument("type", help="Request type (e.g. by-ingredients, by-name)")
    fp.add_argument("input", help="Structured input as a JSON object")
    fp.add_argument("--restriction", action="append", default=[], help="Dietary restriction (repeatable)")
    fp.add_argument("--user-id", help="Include this user's stored restrictions")
    fp.set_defaults(handler=_cmd_fingerprint)

    convert = subparsers.add_parser("convert", help="Convert an amount between units")
    convert.add_argument("amount", type=float)
    convert.add_argument("from_unit")
    convert.add_argument("to_unit")
    convert.add_argument("--suggest", action="store_true", help="Pick a more readable unit afterwards")
    convert.set_defaults(handler=_cmd_convert)

    sweep = subparsers.add_parser("sweep", help="Expire and evict cache entries")
    sweep.set_defaults(handler=_cmd_sweep)

    restrictions = subparsers.add_parser("restrictions", help="Show the aggregated restriction set")
    restrictions.add_argument("--restriction", action="append", default=[], help="Dietary restriction (repeatable)")
    restrictions.add_argument("--user-id", help="Include this user's stored restrictions")
    restrictions.set_defaults(handler=_cmd_restrictions)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Could not load settings: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)

    try:
        return args.handler(args, settings)
    except RecipeEngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
