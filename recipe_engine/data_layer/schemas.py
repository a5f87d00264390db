"""Boundary validation for recipe payloads.

Payloads arriving from the generation collaborator or from the command
line are loosely-typed JSON. They are validated here, once, and turned
into frozen domain records; nothing downstream re-checks types.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from recipe_engine.data_layer.errors import InvalidPayloadError
from recipe_engine.data_layer.models import (
    Ingredient,
    NutritionalInfo,
    Quantity,
    Recipe,
)


def _check_nutrient_map(value: Dict[str, float]) -> Dict[str, float]:
    for name, amount in value.items():
        if amount < 0:
            raise ValueError(f"nutrient '{name}' must be non-negative, got {amount}")
    return value


class IngredientSchema(BaseModel):
    name: str = Field(min_length=1)
    amount: float = Field(default=0.0, ge=0)
    unit: str = ""
    notes: Optional[str] = None

    @field_validator("unit", mode="before")
    @classmethod
    def _none_unit_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_domain(self) -> Ingredient:
        return Ingredient(
            name=self.name,
            quantity=Quantity(amount=self.amount, unit=self.unit),
            notes=self.notes,
        )


class NutritionalInfoSchema(BaseModel):
    """Nutrition payload; missing numeric fields default to zero."""

    calories: int = Field(default=0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbohydrates: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    fiber: float = Field(default=0.0, ge=0)
    sugar: float = Field(default=0.0, ge=0)
    sodium: float = Field(default=0.0, ge=0)
    vitamins: Dict[str, float] = Field(default_factory=dict)
    minerals: Dict[str, float] = Field(default_factory=dict)
    serving_size: int = Field(gt=0)

    @field_validator("vitamins", "minerals")
    @classmethod
    def _non_negative_nutrients(cls, value: Dict[str, float]) -> Dict[str, float]:
        return _check_nutrient_map(value)

    def to_domain(self) -> NutritionalInfo:
        return NutritionalInfo(
            calories=self.calories,
            protein=self.protein,
            carbohydrates=self.carbohydrates,
            fat=self.fat,
            fiber=self.fiber,
            sugar=self.sugar,
            sodium=self.sodium,
            serving_size=self.serving_size,
            vitamins=dict(self.vitamins),
            minerals=dict(self.minerals),
        )


class RecipeSchema(BaseModel):
    id: str = ""
    name: str = Field(min_length=1)
    description: str = ""
    ingredients: List[IngredientSchema] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    serving_size: int = Field(gt=0)
    cooking_time: int = Field(gt=0)
    difficulty: int = Field(ge=1, le=5)
    cuisine: str = ""
    tags: List[str] = Field(default_factory=list)
    dietary_compatibility: List[str] = Field(default_factory=list)
    nutritional_info: Optional[NutritionalInfoSchema] = None

    def to_domain(self) -> Recipe:
        return Recipe(
            id=self.id,
            name=self.name,
            description=self.description,
            ingredients=tuple(ing.to_domain() for ing in self.ingredients),
            instructions=tuple(self.instructions),
            serving_size=self.serving_size,
            cooking_time=self.cooking_time,
            difficulty=self.difficulty,
            cuisine=self.cuisine,
            tags=tuple(self.tags),
            dietary_compatibility=tuple(self.dietary_compatibility),
            nutritional_info=(
                self.nutritional_info.to_domain() if self.nutritional_info else None
            ),
        )


def parse_recipe(data: Dict[str, Any]) -> Recipe:
    """Validate a raw recipe dict and build a Recipe.

    Args:
        data: Untrusted recipe dictionary

    Returns:
        Recipe domain object

    Raises:
        InvalidPayloadError: If the payload fails validation
    """
    try:
        return RecipeSchema.model_validate(data).to_domain()
    except ValidationError as e:
        raise InvalidPayloadError(
            f"Invalid recipe payload: {e.error_count()} error(s)",
            errors=e.errors(include_url=False, include_context=False),
        ) from e


def parse_nutrition(data: Dict[str, Any]) -> NutritionalInfo:
    """Validate a raw nutrition dict and build NutritionalInfo.

    Raises:
        InvalidPayloadError: If the payload fails validation
    """
    try:
        return NutritionalInfoSchema.model_validate(data).to_domain()
    except ValidationError as e:
        raise InvalidPayloadError(
            f"Invalid nutrition payload: {e.error_count()} error(s)",
            errors=e.errors(include_url=False, include_context=False),
        ) from e
