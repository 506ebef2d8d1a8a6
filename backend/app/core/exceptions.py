"""
Custom Exceptions for Deckster
==============================

Raise these instead of generic Exception so the API layer can map them to
status codes and a stable error body.

Usage:
    from app.core.exceptions import ContentNotFoundError, SessionCreationError

    if template is None:
        raise ContentNotFoundError("template", template_id)

    try:
        session_id = await guard.ensure_session()
    except SessionCreationError as e:
        logger.error(f"Text Labs session failed: {e}")
        raise
"""

from typing import Optional, Any, Dict


class DecksterError(Exception):
    """Base exception for all Deckster errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(DecksterError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ContentNotFoundError(ResourceNotFoundError):
    """Article, template or integration not found"""

    def __init__(self, content_type: str, content_id: str):
        super().__init__(content_type, content_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(DecksterError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class FileValidationError(ValidationError):
    """Uploaded file rejected (empty, too large, too many)"""

    def __init__(self, message: str, code: str, file_name: Optional[str] = None):
        super().__init__(message)
        self.code = code
        if file_name:
            self.details["file_name"] = file_name


# ============================================
# Builder Service Errors
# ============================================

class ExternalServiceError(DecksterError):
    """A builder service (Layout Service, Elementor, Text Labs) call failed"""

    status_code = 502

    def __init__(self, service: str, message: str, code: str = "EXTERNAL_SERVICE_ERROR",
                 status: Optional[int] = None):
        super().__init__(message, code=code, details={"service": service})
        if status is not None:
            self.details["status"] = status


class LayoutServiceError(ExternalServiceError):
    def __init__(self, message: str, code: str = "LAYOUT_SERVICE_ERROR", status: Optional[int] = None):
        super().__init__("layout-service", message, code=code, status=status)


class TextLabsError(ExternalServiceError):
    """Text Labs rejected a request or could not be reached"""

    def __init__(self, message: str, code: str = "TEXTLABS_ERROR", status: Optional[int] = None):
        super().__init__("textlabs", message, code=code, status=status)


class SessionCreationError(TextLabsError):
    """
    Creating a Text Labs canvas session failed or timed out.

    Every caller waiting on the same creation receives this error.
    """

    def __init__(self, message: str = "Session creation failed", status: Optional[int] = None):
        super().__init__(message, code="SESSION_CREATION_FAILED", status=status)


class ServiceTimeoutError(ExternalServiceError):
    status_code = 504

    def __init__(self, service: str, timeout_seconds: float):
        super().__init__(service, f"{service} did not respond within {timeout_seconds}s",
                         code="SERVICE_TIMEOUT")
        self.details["timeout_seconds"] = timeout_seconds


# ============================================
# Billing Errors
# ============================================

class BillingError(DecksterError):
    """Stripe operation failed"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="BILLING_ERROR")


class BillingNotConfiguredError(BillingError):
    status_code = 503

    def __init__(self):
        super().__init__("Billing is not configured")
        self.code = "BILLING_NOT_CONFIGURED"


class WebhookSignatureError(BillingError):
    status_code = 400

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(message)
        self.code = "INVALID_SIGNATURE"


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: DecksterError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
