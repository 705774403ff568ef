# testgenium/core/errors.py
"""
Error taxonomy shared by services and the HTTP boundary.

Every error carries a machine-readable ``kind`` and a human-readable message.
The API layer renders them as ``{"error": {"kind", "message"}, **details}``
with the class's HTTP status.
"""
from typing import Any, Dict, Optional

from fastapi import status


class TestGeniumError(Exception):
    """Base error with a stable kind and an HTTP status"""

    __test__ = False

    kind: str = "InternalError"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": {"kind": self.kind, "message": self.message}}
        payload.update(self.details)
        return payload


# Authentication

class AuthError(TestGeniumError):
    kind = "AuthError"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class TokenMissing(AuthError):
    kind = "TokenMissing"
    default_message = "Access token required"


class TokenInvalid(AuthError):
    kind = "TokenInvalid"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid token"


class TokenExpired(AuthError):
    kind = "TokenExpired"
    default_message = "Token expired"


class InvalidCredentials(AuthError):
    kind = "InvalidCredentials"
    default_message = "Invalid credentials"


class EmailTaken(AuthError):
    kind = "EmailTaken"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email already registered"


class ValidationError(AuthError):
    kind = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email, secret, company name and full name are required"


# Orchestration

class OrchError(TestGeniumError):
    kind = "OrchError"


class InvalidTarget(OrchError):
    kind = "InvalidTarget"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "A valid http(s) target URL is required"


class QuotaExceeded(OrchError):
    kind = "QuotaExceeded"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Monthly test limit reached"


class EngineTimeout(OrchError):
    kind = "EngineTimeout"
    default_message = "Assessment engine timed out"


class EngineFailure(OrchError):
    kind = "EngineFailure"
    default_message = "Assessment engine failed"


# Storage

class NotFound(TestGeniumError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Job not found"


class StoreConflict(TestGeniumError):
    kind = "StoreConflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Record already exists"
