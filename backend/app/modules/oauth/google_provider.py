"""Google sign-in: verification of ID tokens sent by the frontend Sign-In button."""

from typing import Optional, Dict, Any
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests

from app.core.logging_config import logger


VALID_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class GoogleOAuthProvider:
    """Verify Google ID tokens against the configured OAuth client id."""

    def __init__(self, client_id: str):
        self.client_id = client_id

    @property
    def configured(self) -> bool:
        return bool(self.client_id)

    def verify_id_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify a Google ID token and return the profile fields we store.

        Returns None for any invalid, expired or foreign token. This performs
        a blocking certificate fetch; call it from a worker thread.
        """
        try:
            idinfo = id_token.verify_oauth2_token(
                token,
                google_requests.Request(),
                self.client_id
            )

            if idinfo["iss"] not in VALID_ISSUERS:
                logger.warning("[GoogleOAuth] Invalid token issuer")
                return None

            return {
                "google_id": idinfo["sub"],
                "email": idinfo["email"],
                "email_verified": idinfo.get("email_verified", False),
                "full_name": idinfo.get("name", ""),
                "avatar_url": idinfo.get("picture", ""),
            }
        except ValueError as e:
            logger.error(f"[GoogleOAuth] Invalid ID token: {e}")
            return None
        except Exception as e:
            logger.error(f"[GoogleOAuth] Token verification error: {e}", exc_info=True)
            return None
