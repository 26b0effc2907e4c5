"""
Caller identity via Supabase Auth.

Access tokens come from the Authorization header and are verified by
Supabase. Missing or rejected tokens resolve to no user; an Auth outage
is an error, not an anonymous caller.
"""

from typing import Optional
import structlog

from supabase import AuthApiError

from config import get_supabase_client
from exceptions import AuthenticationError, AuthServiceError

logger = structlog.get_logger(__name__)

BEARER_PREFIX = "bearer "

# Supabase Auth answers these for expired, forged or revoked tokens
TOKEN_REJECTED_STATUSES = (401, 403)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """'Bearer <token>' -> '<token>'. None for anything else."""
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def resolve_user_id(access_token: Optional[str]) -> Optional[str]:
    """
    Look up the user owning an access token.

    Args:
        access_token: Supabase JWT

    Returns:
        User UUID, or None if the token is missing or rejected

    Raises:
        AuthServiceError: If Supabase Auth is unreachable or fails
    """
    if not access_token:
        return None

    try:
        response = get_supabase_client().auth.get_user(access_token)
    except AuthApiError as e:
        if e.status in TOKEN_REJECTED_STATUSES:
            # Expired and forged tokens both land here
            logger.warning("access_token_rejected", status=e.status, error=str(e))
            return None
        logger.error("auth_lookup_failed", status=e.status, error=str(e))
        raise AuthServiceError(str(e)) from e
    except Exception as e:
        logger.error("auth_lookup_failed", error=str(e), error_type=type(e).__name__)
        raise AuthServiceError(str(e)) from e

    user = getattr(response, "user", None) if response is not None else None
    if user is None:
        return None
    return str(user.id)


def require_user_id(user_id: Optional[str]) -> str:
    """
    Raises:
        AuthenticationError: If there is no user
    """
    if not user_id:
        raise AuthenticationError()
    return user_id
