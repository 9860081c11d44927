"""Shared pydantic base for the camelCase JSON the web client speaks."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

# Required text: surrounding whitespace is stripped and nothing may be left blank
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Query parameter pattern for the same rule (at least one non-space character)
NON_BLANK = r"\S"


class ApiModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
