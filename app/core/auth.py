import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.deps import get_token_codec
from app.core.exceptions import AuthError
from app.core.security import TokenCodec

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def get_current_user_id(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    codec: TokenCodec = Depends(get_token_codec),
) -> int:
    """
    Authorization: Bearer <token> 검증 후 subject id 반환.
    No database access: a token for a deleted user still passes here and the
    route decides what a missing user means.
    """
    if creds is None or (creds.scheme or "").lower() != "bearer" or not creds.credentials:
        raise AuthError("Missing auth token", code="TOKEN_MISSING")

    try:
        payload = codec.verify(creds.credentials)
        user_id = int(payload["sub"])
    except AuthError as e:
        logger.warning("Rejected bearer token on %s: %s", request.url.path, e.details.get("reason"))
        raise AuthError("Invalid or expired token", code=e.code, details=e.details)
    except ValueError:
        raise AuthError(
            "Invalid or expired token",
            code="TOKEN_INVALID",
            details={"reason": "Token subject is not a user id."},
        )

    request.state.user_id = user_id
    request.state.auth_payload = payload
    return user_id
