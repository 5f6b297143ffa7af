"""
Error response body.

Every translated failure is answered with :class:`ErrorBody`. Field names are
camelCase on the wire (``statusCode``, ``statusText``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ErrorBody(BaseModel):
    """JSON body sent by the error middleware."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = Field(default=False, description="Always false for error bodies")
    message: str = Field(description="Human-readable error description")
    status_code: int = Field(description="HTTP status code")
    status_text: str | None = Field(default=None, description="Reason phrase for status_code")
