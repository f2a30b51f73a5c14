"""
API error type and the JSON envelope every failure response uses.
"""

from __future__ import annotations

import json
from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import ValidationError

from venuecharge.schemas import ErrorResponse

SERVER_ERROR_MESSAGE = "Server error"


class ApiError(Exception):
    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[list[dict]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors

    @classmethod
    def from_validation(cls, exc: ValidationError, message: str) -> "ApiError":
        # Round-trip through pydantic's JSON so error contexts are serializable.
        return cls(400, message, errors=json.loads(exc.json(include_url=False)))

    def to_response(self) -> JSONResponse:
        body = ErrorResponse(message=self.message, errors=self.errors)
        return JSONResponse(
            status_code=self.status_code,
            content=body.model_dump(exclude_none=True),
        )
