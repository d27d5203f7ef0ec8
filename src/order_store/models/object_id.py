"""
Entity-reference identifiers

Products, buyers and orders are referenced by MongoDB ObjectIds: 24 hex
characters. Values are validated with bson and normalised to lower-case strings.
"""
from typing import Annotated, Any

from bson import ObjectId
from pydantic import BeforeValidator, WithJsonSchema


def parse_object_id(value: Any) -> str:
    """Return the canonical string form of an ObjectId, or raise ValueError"""
    if isinstance(value, ObjectId):
        return str(value)
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValueError(f"{value!r} is not a valid ObjectId")
    return str(ObjectId(value))


def new_object_id() -> str:
    """Generate a fresh identifier"""
    return str(ObjectId())


ObjectIdStr = Annotated[
    str,
    BeforeValidator(parse_object_id),
    WithJsonSchema({"type": "string", "pattern": "^[0-9a-fA-F]{24}$", "example": "65f1c0c2a1b2c3d4e5f60718"}),
]
