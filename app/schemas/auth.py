from typing import Optional
from pydantic import ConfigDict, Field
from .base import BaseSchema
from .user import UserOut

# 필드는 모두 Optional: 누락 시 서비스에서 구체적인 400 메시지를 만든다


class SignupIn(BaseSchema):
    # 비밀번호는 입력 그대로 해시
    model_config = ConfigDict(str_strip_whitespace=False)

    email: Optional[str] = None
    password: Optional[str] = None
    first: Optional[str] = Field(None, max_length=100)
    last: Optional[str] = Field(None, max_length=100)


class SignupUserOut(BaseSchema):
    id: int
    email: str


class SignupOut(BaseSchema):
    message: str
    user: SignupUserOut


class LoginIn(BaseSchema):
    model_config = ConfigDict(str_strip_whitespace=False)

    email: Optional[str] = None
    password: Optional[str] = None


class LoginOut(BaseSchema):
    user: UserOut
    token: str


class VerifyIn(BaseSchema):
    token: Optional[str] = None


class ResendIn(BaseSchema):
    email: Optional[str] = None
