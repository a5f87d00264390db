"""Data models for recipes, nutrition and cached payloads."""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Quantity:
    """Amount of an ingredient in a free-form unit."""

    amount: float  # Non-negative amount (e.g., 2.0, 0.25)
    unit: str = ""  # Unit as written (e.g., "cup", "Tbsp", "cloves"); "" for counts

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "unit": self.unit}


@dataclass(frozen=True)
class Ingredient:
    """Represents an ingredient in a recipe."""

    name: str
    quantity: Quantity
    notes: Optional[str] = None  # Preparation notes (e.g., "finely chopped")

    @property
    def amount(self) -> float:
        return self.quantity.amount

    @property
    def unit(self) -> str:
        return self.quantity.unit

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "amount": self.quantity.amount,
            "unit": self.quantity.unit,
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ingredient":
        """Create Ingredient from a flat ``{name, amount, unit, notes}`` dict."""
        return cls(
            name=data.get("name", ""),
            quantity=Quantity(
                amount=float(data.get("amount", 0.0) or 0.0),
                unit=data.get("unit") or "",
            ),
            notes=data.get("notes"),
        )


MACRO_FIELDS: Tuple[str, ...] = (
    "protein",
    "carbohydrates",
    "fat",
    "fiber",
    "sugar",
    "sodium",
)


@dataclass(frozen=True)
class NutritionalInfo:
    """Nutrition values stated for ``serving_size`` servings.

    Vitamins and minerals are open-ended maps of nutrient name to amount.
    """

    calories: int
    protein: float
    carbohydrates: float
    fat: float
    fiber: float
    sugar: float
    sodium: float
    serving_size: int
    vitamins: Dict[str, float] = field(default_factory=dict)
    minerals: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"calories": self.calories}
        for name in MACRO_FIELDS:
            data[name] = getattr(self, name)
        data["vitamins"] = dict(self.vitamins)
        data["minerals"] = dict(self.minerals)
        data["serving_size"] = self.serving_size
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NutritionalInfo":
        """Create NutritionalInfo from a dictionary.

        Missing numeric fields default to zero.

        Args:
            data: Dictionary as produced by ``to_dict``

        Returns:
            NutritionalInfo instance
        """
        return cls(
            calories=int(data.get("calories", 0) or 0),
            protein=float(data.get("protein", 0.0) or 0.0),
            carbohydrates=float(data.get("carbohydrates", 0.0) or 0.0),
            fat=float(data.get("fat", 0.0) or 0.0),
            fiber=float(data.get("fiber", 0.0) or 0.0),
            sugar=float(data.get("sugar", 0.0) or 0.0),
            sodium=float(data.get("sodium", 0.0) or 0.0),
            serving_size=int(data.get("serving_size", 1) or 1),
            vitamins={k: float(v) for k, v in (data.get("vitamins") or {}).items()},
            minerals={k: float(v) for k, v in (data.get("minerals") or {}).items()},
        )


@dataclass(frozen=True)
class Recipe:
    """Represents a recipe with ingredients and instructions.

    Scaling never mutates a Recipe; it produces a derived copy.
    """

    name: str
    ingredients: Tuple[Ingredient, ...]
    instructions: Tuple[str, ...]
    serving_size: int
    cooking_time: int  # Total cooking time in minutes
    difficulty: int  # 1-5 scale
    id: str = ""
    description: str = ""
    cuisine: str = ""
    tags: Tuple[str, ...] = ()
    dietary_compatibility: Tuple[str, ...] = ()
    nutritional_info: Optional[NutritionalInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "instructions": list(self.instructions),
            "serving_size": self.serving_size,
            "cooking_time": self.cooking_time,
            "difficulty": self.difficulty,
            "cuisine": self.cuisine,
            "tags": list(self.tags),
            "dietary_compatibility": list(self.dietary_compatibility),
            "nutritional_info": (
                self.nutritional_info.to_dict() if self.nutritional_info else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        """Create Recipe from a trusted dictionary (e.g. a cached payload).

        Untrusted input should go through ``schemas.parse_recipe`` instead.
        """
        nutrition_data = data.get("nutritional_info")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            ingredients=tuple(
                Ingredient.from_dict(ing) for ing in data.get("ingredients", [])
            ),
            instructions=tuple(data.get("instructions", [])),
            serving_size=int(data.get("serving_size", 1)),
            cooking_time=int(data.get("cooking_time", 1)),
            difficulty=int(data.get("difficulty", 1)),
            cuisine=data.get("cuisine", ""),
            tags=tuple(data.get("tags", [])),
            dietary_compatibility=tuple(data.get("dietary_compatibility", [])),
            nutritional_info=(
                NutritionalInfo.from_dict(nutrition_data) if nutrition_data else None
            ),
        )


# A cached payload is either a single recipe or a suggestion list.
Payload = Union[Recipe, List[Recipe]]

PAYLOAD_KIND_RECIPE = "recipe"
PAYLOAD_KIND_RECIPES = "recipes"


def payload_to_dict(payload: Payload) -> Dict[str, Any]:
    """Serialise a payload with a ``kind`` tag.

    Raises:
        TypeError: If payload is neither a Recipe nor a list of Recipes
    """
    if isinstance(payload, Recipe):
        return {"kind": PAYLOAD_KIND_RECIPE, "data": payload.to_dict()}
    if isinstance(payload, (list, tuple)) and all(isinstance(r, Recipe) for r in payload):
        return {
            "kind": PAYLOAD_KIND_RECIPES,
            "data": [recipe.to_dict() for recipe in payload],
        }
    raise TypeError(
        f"Payload must be a Recipe or a list of Recipes, got {type(payload).__name__}"
    )


def payload_from_dict(data: Dict[str, Any]) -> Payload:
    """Rebuild a payload serialised by ``payload_to_dict``.

    Every call builds new objects, so callers never share state with the cache.
    """
    kind = data.get("kind")
    if kind == PAYLOAD_KIND_RECIPE:
        return Recipe.from_dict(data["data"])
    if kind == PAYLOAD_KIND_RECIPES:
        return [Recipe.from_dict(item) for item in data["data"]]
    raise ValueError(f"Unknown payload kind: {kind!r}")


@dataclass(frozen=True)
class DietaryProfile:
    """A user's stored dietary restrictions."""

    user_id: str
    allergies: Tuple[str, ...] = ()
    dietary_preferences: Tuple[str, ...] = ()
    health_conditions: Tuple[str, ...] = ()

    def all_restrictions(self) -> Tuple[str, ...]:
        return self.allergies + self.dietary_preferences + self.health_conditions


def normalize_restrictions(restrictions: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Strip and lower-case restriction identifiers, dropping blanks."""
    if restrictions is None:
        return frozenset()
    if isinstance(restrictions, str):
        restrictions = [restrictions]
    return frozenset(
        str(item).strip().lower() for item in restrictions if str(item).strip()
    )
