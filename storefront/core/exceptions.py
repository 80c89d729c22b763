"""Error taxonomy shared by the catalog, cart and auth layers.

Every error carries the HTTP status and a machine readable code so the API
layer can render it without knowing where it came from.
"""
from typing import Any, Dict, Optional


class StorefrontError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        body: Dict[str, Any] = {"detail": self.message, "code": self.error_code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(StorefrontError):
    """Malformed input: missing selection, non-positive quantity and similar"""
    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFoundError(StorefrontError):
    """Referenced product or record does not exist"""
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message += f" with ID: {resource_id}"
        super().__init__(message, {"resource": resource})


class NetworkError(StorefrontError):
    """Persistence or remote call failed"""
    status_code = 503
    error_code = "NETWORK_ERROR"


class AuthenticationError(StorefrontError):
    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ConflictError(StorefrontError):
    status_code = 409
    error_code = "CONFLICT"
