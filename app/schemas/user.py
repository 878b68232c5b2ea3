# app/schemas/user.py
from datetime import datetime
from typing import Optional
from .base import BaseSchema
from .profile import ProfileOut


class UserOut(BaseSchema):
    """Redacted user: never carries the password hash or verification token."""
    id: int
    email: str
    first_name: str
    last_name: str
    is_verified: bool
    profile_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class MeUserOut(UserOut):
    profile: Optional[ProfileOut] = None


class MeOut(BaseSchema):
    user: MeUserOut
