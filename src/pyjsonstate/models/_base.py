"""Base model for pyjsonstate records.

Every model inherits from :class:`JsonStateBaseModel` which provides
``alias_generator=to_camel`` so the camelCase option names used by
upstream producers (``forceIndex``, ``preferredArrayName``...) map
automatically to snake_case fields, while the snake_case names keep
working thanks to ``populate_by_name``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class JsonStateBaseModel(BaseModel):
    """Base for pyjsonstate models."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
