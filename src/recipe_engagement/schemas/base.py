"""Common response shapes.

Field names are snake_case in Python and camelCase on the wire
(``view_count`` becomes ``viewCount``). Every body is an envelope with
``success`` and ``message``; payload-carrying envelopes extend it.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
        use_enum_values=True,
        extra="forbid",
    )


class MessageResponse(CamelModel):
    """Envelope without a payload; also the shape of every error body."""

    success: bool = True
    message: str
