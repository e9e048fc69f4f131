"""Shared schema components."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON field names are camelCase on the wire.

    Python code keeps snake_case attribute names; both spellings are accepted
    on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    """Offset-based pagination metadata for list responses."""

    total: int
    offset: int
    limit: int
    has_more: bool
