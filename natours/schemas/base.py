"""Shared schema configuration."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema whose JSON uses camelCase keys. snake_case is accepted on input too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def strip_string(v: object) -> object:
    """Strip surrounding whitespace from strings, pass anything else through."""
    return v.strip() if isinstance(v, str) else v
