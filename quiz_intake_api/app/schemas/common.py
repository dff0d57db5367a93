"""
Shared response envelopes.
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    success: bool = False
    error: str
