"""
Shared Pydantic base for camelCase JSON payloads
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names, also accepts snake_case on input"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
