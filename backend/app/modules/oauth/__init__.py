"""OAuth providers module for Google authentication."""

from .google_provider import GoogleOAuthProvider

__all__ = ["GoogleOAuthProvider"]
