"""Deterministic cache keys for recipe generation requests.

A fingerprint is the MD5 digest (128 bits, 32 hex chars) of a canonical
JSON document built from the request type, the structured input and the
sorted restriction set. Canonical means:

- object keys sorted at every depth
- compact separators, no whitespace
- restrictions stripped, lower-cased, de-duplicated and sorted

so two requests that differ only in dict key order or in the order of
their restrictions share a cache entry, while any change in ingredients,
food name, serving size, cuisine or restriction membership does not.
"""

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from recipe_engine.data_layer.errors import InvalidRequestError
from recipe_engine.data_layer.models import normalize_restrictions


class RequestType(Enum):
    """Known generation request types."""

    BY_INGREDIENTS = "by-ingredients"
    BY_NAME = "by-name"


def canonical_json(request_type: str, structured_input: Mapping[str, Any],
                   restrictions: Iterable[str]) -> str:
    """Serialise the fingerprint triple canonically.

    Raises:
        InvalidRequestError: If the request type is missing or the input
            is not a JSON-serialisable mapping
    """
    if isinstance(request_type, RequestType):
        request_type = request_type.value
    if not isinstance(request_type, str) or not request_type.strip():
        raise InvalidRequestError("Request type is required", field="request_type")

    if not isinstance(structured_input, Mapping):
        raise InvalidRequestError(
            f"Structured input must be a mapping, got {type(structured_input).__name__}",
            field="input",
        )

    document = {
        "type": request_type.strip(),
        "input": dict(structured_input),
        "restrictions": sorted(normalize_restrictions(restrictions)),
    }
    try:
        return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise InvalidRequestError(
            f"Structured input is not JSON-serialisable: {e}", field="input"
        ) from e


def fingerprint(request_type: str, structured_input: Mapping[str, Any],
                restrictions: Iterable[str] = ()) -> str:
    """Compute the cache key for a generation request.

    Args:
        request_type: Request type tag (e.g. "by-ingredients")
        structured_input: Request payload (ingredients, cuisine, servings...)
        restrictions: Dietary restriction identifiers, any order

    Returns:
        32-character lowercase hex digest

    Raises:
        InvalidRequestError: If the inputs are malformed
    """
    data = canonical_json(request_type, structured_input, restrictions)
    return hashlib.md5(data.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class FingerprintInputs:
    """The triple that identifies a generation request."""

    request_type: str
    input: Dict[str, Any]
    restrictions: FrozenSet[str] = field(default_factory=frozenset)

    def fingerprint(self) -> str:
        return fingerprint(self.request_type, self.input, self.restrictions)


def ingredients_request(
    ingredients: List[str],
    serving_size: int,
    cuisine: Optional[str] = None,
    restrictions: Iterable[str] = ()
) -> FingerprintInputs:
    """Build inputs for a "recipes from these ingredients" request.

    Ingredient order is kept: the generation prompt lists them in the
    order the user gave.
    """
    return FingerprintInputs(
        request_type=RequestType.BY_INGREDIENTS.value,
        input={
            "ingredients": list(ingredients),
            "cuisine": cuisine,
            "serving_size": serving_size,
        },
        restrictions=normalize_restrictions(restrictions),
    )


def food_name_request(
    food_name: str,
    serving_size: int,
    restrictions: Iterable[str] = ()
) -> FingerprintInputs:
    """Build inputs for a "variations of this dish" request."""
    return FingerprintInputs(
        request_type=RequestType.BY_NAME.value,
        input={"food_name": food_name, "serving_size": serving_size},
        restrictions=normalize_restrictions(restrictions),
    )
