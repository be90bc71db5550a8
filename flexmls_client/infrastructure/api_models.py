"""
Pydantic models for validating the structure of responses from the flexmls
API.

Every response is a single-key ``{"D": {...}}`` envelope. The model below is
the strict contract for its contents, so a deviation is caught here before
anything reaches the caller.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..application.exceptions import InvalidResponse

logger = logging.getLogger(__name__)

ENVELOPE_KEY = "D"


class ApiResponse(BaseModel):
    """Represents the contents of the ``D`` envelope of an API response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: Optional[str] = Field(default=None, alias="Message")
    code: Optional[int] = Field(default=None, alias="Code")
    results: Any = Field(default=None, alias="Results")
    success: Optional[bool] = Field(default=None, alias="Success")
    pagination: Optional[Dict[str, Any]] = Field(
        default=None, alias="Pagination"
    )
    details: List[Any] = Field(default_factory=list, alias="Details")

    @field_validator("details", mode="before")
    @classmethod
    def _default_details(cls, value):
        return [] if value is None else value

    @classmethod
    def from_body(cls, body: Any) -> "ApiResponse":
        """
        Decodes a JSON-decoded response body.

        Args:
            body: The parsed JSON document returned by the server.

        Returns:
            The validated envelope contents.

        Raises:
            InvalidResponse: If the body has no ``D`` object or it is empty.
            pydantic.ValidationError: If the envelope fields have the
                                      wrong types.
        """

        try:
            envelope = (
                body.get(ENVELOPE_KEY) if isinstance(body, Mapping) else None
            )
            if not envelope:
                raise InvalidResponse(
                    "The server response could not be understood"
                )
            return cls.model_validate(envelope)
        except Exception:
            logger.error(f"Unable to understand the response! {body!r}")
            raise

    def is_success(self) -> bool:
        return bool(self.success)
