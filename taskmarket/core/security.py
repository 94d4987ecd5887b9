import logging
from typing import Any, Dict, Optional

from firebase_admin import auth
from google.auth.exceptions import GoogleAuthError

from taskmarket.core.config import get_settings
from taskmarket.db.firebase_ops import FirebaseManager
from taskmarket.models.schemas import CurrentUser

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify a Firebase ID token and return its claims.
    Returns None if the token is invalid, expired, revoked or for a disabled account,
    and when Firebase itself is not configured well enough to verify anything.
    """
    try:
        FirebaseManager()  # verify_id_token needs an initialized default app
        return auth.verify_id_token(token, check_revoked=True)
    except (ValueError, auth.InvalidIdTokenError, auth.UserDisabledError, auth.CertificateFetchError) as e:
        logger.info("Rejected ID token: %s", e)
        return None
    except GoogleAuthError as e:
        logger.error("Could not verify ID token, Firebase credentials unavailable: %s", e)
        return None


def user_from_claims(claims: Dict[str, Any]) -> CurrentUser:
    """Build the caller's identity; admin capability comes from a custom claim."""
    user_id = claims.get("uid") or claims.get("sub")
    email = claims.get("email")
    display_name = claims.get("name") or (email.split("@")[0] if email else None) or "Anonymous"
    return CurrentUser(
        user_id=user_id,
        display_name=display_name,
        email=email,
        is_admin=claims.get(get_settings().admin_claim) is True,
    )
