"""Shared Pydantic schema base for API payloads."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal


class KvasariModel(BaseModel):
    """Base schema exposing PascalCase JSON keys.

    Input accepts either the PascalCase alias or the Python field name.
    """

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        from_attributes=True,
    )
