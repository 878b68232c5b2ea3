# app/services/auth.py
"""Signup, login, email verification and ``me``.

User states: unverified with a pending verification token, then verified.
Resend keeps a user pending with a fresh token; nothing leads back from
verified.
"""
import logging
import secrets
from functools import lru_cache
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.core.security import (
    Clock,
    TokenCodec,
    as_utc,
    hash_password,
    issue_verification_token,
    utcnow,
    verify_password,
)
from app.models.profile import Profile
from app.models.user import User, clear_verification_state
from app.services.email import Notifier, send_verification_email
from app.utils.validators import is_email, is_strong_password, normalize_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_hex(16))


def _find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def signup(
    db: Session,
    email: Optional[str],
    password: Optional[str],
    notifier: Notifier,
    backend_url: str,
    first: Optional[str] = None,
    last: Optional[str] = None,
    clock: Clock = utcnow,
    token_hours: int = 24,
) -> User:
    if not email or not password:
        raise ValidationError("Email and password are required")
    email = normalize_email(email)
    if not is_email(email):
        raise ValidationError("Invalid email")
    if not is_strong_password(password):
        raise ValidationError("Password must be at least 8 characters")

    if _find_by_email(db, email):
        raise ConflictError("Email already in use", code="EMAIL_IN_USE")

    token, expires = issue_verification_token(clock, hours=token_hours)
    user = User(
        email=email,
        first_name=(first or "").strip(),
        last_name=(last or "").strip(),
        password_hash=hash_password(password),
        is_verified=False,
        verification_token=token,
        verification_token_expires=expires,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with another signup for the same address
        db.rollback()
        raise ConflictError("Email already in use", code="EMAIL_IN_USE")

    # blank profile; failure here must not block signup
    try:
        profile = Profile(user_id=user.id)
        db.add(profile)
        db.flush()
        user.profile_id = profile.id
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Failed to create profile on signup for user %s", user.id, exc_info=True)

    db.refresh(user)
    logger.info("Signup: user %s (%s) created, pending verification", user.id, user.email)

    # committed before sending: a notifier failure leaves the user pending
    send_verification_email(notifier, user.email, token, backend_url, first_name=user.first_name)
    return user


def login(db: Session, email: Optional[str], password: Optional[str], codec: TokenCodec) -> Tuple[User, str]:
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = _find_by_email(db, email)
    if not user:
        # unknown email pays the same argon2 cost as a wrong password
        verify_password(password, _dummy_hash())
        raise AuthError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")
    if not verify_password(password, user.password_hash):
        raise AuthError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

    if not user.is_verified:
        raise ForbiddenError("Please verify your email before signing in", code="EMAIL_NOT_VERIFIED")

    token = codec.issue(user.id)
    logger.info("Login: user %s", user.id)
    return user, token


def verify_email(db: Session, token: Optional[str], clock: Clock = utcnow) -> User:
    if not token:
        logger.info("verify: missing token in request")
        raise ValidationError("Missing token", code="TOKEN_MISSING")

    user = db.query(User).filter(User.verification_token == token).first()
    if not user:
        logger.info("verify: no user found with that token")
        raise ValidationError("Invalid or expired token", code="TOKEN_INVALID")

    expires = as_utc(user.verification_token_expires)
    if expires is None or expires <= clock():
        logger.info("verify: token expired at %s", expires)
        raise ValidationError("Token has expired", code="TOKEN_EXPIRED")

    if user.is_verified:
        logger.info("verify: user %s already verified", user.id)
        raise ValidationError("User already verified", code="ALREADY_VERIFIED")

    if not clear_verification_state(db, user.id, token):
        # another request consumed the token between our read and write
        raise ValidationError("Invalid or expired token", code="TOKEN_INVALID")

    db.refresh(user)
    logger.info("verify: user verified successfully: %s", user.email)
    return user


def resend_verification(
    db: Session,
    email: Optional[str],
    notifier: Notifier,
    backend_url: str,
    clock: Clock = utcnow,
    token_hours: int = 24,
) -> User:
    if not email:
        raise ValidationError("Email required")

    user = _find_by_email(db, email)
    if not user:
        raise NotFoundError("User not found", code="USER_NOT_FOUND")
    if user.is_verified:
        raise ValidationError("User already verified", code="ALREADY_VERIFIED")

    token, expires = issue_verification_token(clock, hours=token_hours)
    user.verification_token = token
    user.verification_token_expires = expires
    db.commit()
    db.refresh(user)

    send_verification_email(notifier, user.email, token, backend_url, first_name=user.first_name)
    logger.info("Verification email re-sent to user %s", user.id)
    return user


def find_profile(db: Session, user: User) -> Optional[Profile]:
    """Follow ``user.profile_id`` first, then fall back to ``Profile.user_id``."""
    profile = None
    if user.profile_id:
        profile = db.get(Profile, user.profile_id)
        if profile is not None and profile.user_id != user.id:
            profile = None
    if profile is None:
        profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    return profile


def get_me(db: Session, user_id: Optional[int]) -> Tuple[User, Optional[Profile]]:
    if not user_id:
        raise AuthError("Not authenticated", code="NOT_AUTHENTICATED")

    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found", code="USER_NOT_FOUND")
    return user, find_profile(db, user)
