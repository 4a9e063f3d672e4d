"""
Error types for the JWKS cache.

Transport failures raised by httpx are not wrapped: they reach the caller
unchanged as ``httpx.TransportError`` / ``httpx.HTTPStatusError``.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class JWKSError(Exception):
    """Base exception for JWKS cache failures."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class MalformedResponseError(JWKSError):
    """The key store answered with a body or header we cannot use."""

    def __init__(self, message: str = "Malformed JWKS response", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_RESPONSE", message, details)


class KeyNotFoundError(JWKSError):
    """No signing key with the requested kid in the current key set."""

    def __init__(self, kid: str, message: str = "Unable to find the appropriate key"):
        super().__init__("KEY_NOT_FOUND", message, {"kid": kid})
        self.kid = kid


class KeyMaterialError(JWKSError):
    """RSA modulus or exponent is not a valid base64url integer."""

    def __init__(self, message: str = "Invalid key material", details: Optional[Dict[str, Any]] = None):
        super().__init__("KEY_MATERIAL_ERROR", message, details)
