"""
Standard API response models and helpers for consistent response formatting.

Every endpoint answers with one of three envelopes:
- Success:  { "success": true,  "message"?: "...", "data"?: <payload> }
- Declined: { "success": false, "message": "..." }              (HTTP 200)
- Error:    { "success": false, "message": "...", "error": { "code": "...", "details": {...} } }
"""
from typing import Any, Generic, Literal, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Error code (e.g., 'coursenotfound', 'missingparameters')")
    details: dict[str, Any] | None = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Error envelope."""
    success: Literal[False] = False
    message: str = Field(..., description="Human-readable error message")
    error: ErrorDetail


class DeclinedResponse(BaseModel):
    """A request the platform refused without it being an error."""
    success: Literal[False] = False
    message: str


class StandardSuccessResponse(BaseModel, Generic[T]):
    """Success envelope."""
    success: Literal[True] = True
    message: str | None = None
    data: T | None = None


def success_response(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Returns:
        dict: { "success": true, "message": <message>, "data": <data> }
        with absent keys omitted.
    """
    response: dict[str, Any] = {"success": True}
    if message is not None:
        response["message"] = message
    if data is not None:
        response["data"] = data
    return response


def declined_response(message: str) -> dict[str, Any]:
    return {"success": False, "message": message}


def error_response(message: str, code: str, details: dict | None = None) -> dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error": {"code": code, "details": details or None},
    }
