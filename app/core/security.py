import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from jose import JWTError, jwt
from passlib.hash import argon2

from app.core.exceptions import TokenExpired, TokenInvalid

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


def hash_password(plain: str) -> str:
    return argon2.using(time_cost=2, memory_cost=102400, parallelism=8).hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return argon2.verify(plain, hashed)
    except ValueError:
        # stored value is not an argon2 hash
        return False


def issue_verification_token(clock: Clock = utcnow, hours: int = 24) -> Tuple[str, datetime]:
    """Return a 256-bit hex secret and its absolute expiry."""
    return secrets.token_hex(32), clock() + timedelta(hours=hours)


class TokenCodec:
    """Signs and checks the stateless bearer tokens handed out at login.

    Tokens are HS256 JWTs carrying ``sub``, ``iat`` and ``exp``. There is no
    server-side registry, so a token stays valid until ``exp``.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 7 * 24 * 60,
                 clock: Clock = utcnow):
        if not secret:
            raise ValueError("TokenCodec needs a non-empty secret")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=expires_minutes)
        self._clock = clock

    def issue(self, subject_id: Any, **claims: Any) -> str:
        now = self._clock()
        payload = dict(claims)
        payload.update({"sub": str(subject_id), "iat": now, "exp": now + self._ttl})
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            # exp is checked below against the injected clock
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm], options={"verify_exp": False})
        except JWTError:
            raise TokenInvalid("Invalid token", details={"reason": "Invalid or malformed token."})

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise TokenInvalid("Invalid token", details={"reason": "Token has no expiry."})
        if exp <= self._clock().timestamp():
            raise TokenExpired("Token has expired", details={"reason": "The token has expired."})

        if not payload.get("sub"):
            raise TokenInvalid("Invalid token", details={"reason": "Token has no subject."})
        return payload
