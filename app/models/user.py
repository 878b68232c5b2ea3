from sqlalchemy import Column, Integer, String, Boolean, DateTime, update
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from app.core.db import Base

class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)

    is_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String(128), unique=True, nullable=True, index=True)
    verification_token_expires = Column(DateTime(timezone=True), nullable=True)

    # soft link to profiles.id; may be stale, readers fall back to Profile.user_id
    profile_id = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


def clear_verification_state(db: Session, user_id: int, token: str) -> bool:
    """Mark the user verified and drop the verification token in one UPDATE.

    The row only matches while it still holds ``token`` and is unverified, so
    of two concurrent calls with the same token exactly one returns True.
    Calling it again after success changes nothing and returns False.
    """
    result = db.execute(
        update(User)
        .where(
            User.id == user_id,
            User.verification_token == token,
            User.is_verified.is_(False),
        )
        .values(is_verified=True, verification_token=None, verification_token_expires=None)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    return result.rowcount == 1
