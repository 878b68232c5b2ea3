# app/core/deps.py
# Startup-built collaborators live on app.state; routes reach them through these.
from fastapi import Request

from app.core.config import Settings
from app.core.security import Clock, TokenCodec
from app.services.email import Notifier
from app.services.storage import BlobStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_clock(request: Request) -> Clock:
    return request.app.state.clock
