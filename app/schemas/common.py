# app/schemas/common.py
from .base import BaseSchema


class MessageOut(BaseSchema):
    message: str


class OkOut(BaseSchema):
    ok: bool = True
    message: str
