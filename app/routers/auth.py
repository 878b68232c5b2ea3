from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.core.config import Settings
from app.core.db import get_db
from app.core.deps import get_app_settings, get_clock, get_notifier, get_token_codec
from app.core.security import Clock, TokenCodec
from app.schemas.auth import LoginIn, LoginOut, ResendIn, SignupIn, SignupOut, SignupUserOut, VerifyIn
from app.schemas.common import MessageOut, OkOut
from app.schemas.profile import ProfileOut
from app.schemas.user import MeOut, MeUserOut, UserOut
from app.services import auth as auth_service
from app.services.email import Notifier

router = APIRouter(prefix="/auth", tags=["auth"])

VERIFY_FORMATS = ("json", "redirect")


def resolve_verify_format(request: Request, requested: Optional[str]) -> str:
    """Pick the verify response once: explicit ``format`` wins, then headers."""
    if requested in VERIFY_FORMATS:
        return requested
    accept = request.headers.get("accept", "")
    xhr = request.headers.get("x-requested-with", "").lower() == "xmlhttprequest"
    return "json" if xhr or "application/json" in accept else "redirect"


@router.post("/signup", response_model=SignupOut, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupIn,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
):
    user = auth_service.signup(
        db,
        email=payload.email,
        password=payload.password,
        notifier=notifier,
        backend_url=settings.BACKEND_URL,
        first=payload.first,
        last=payload.last,
        clock=clock,
        token_hours=settings.EMAIL_TOKEN_EXPIRE_HOURS,
    )
    return SignupOut(
        message="Signup successful, check your email to verify your account",
        user=SignupUserOut(id=user.id, email=user.email),
    )


@router.post("/login", response_model=LoginOut, status_code=status.HTTP_200_OK)
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
):
    user, token = auth_service.login(db, payload.email, payload.password, codec)
    return LoginOut(user=UserOut.model_validate(user), token=token)


def _verify(request: Request, db: Session, token: Optional[str], fmt: Optional[str],
            settings: Settings, clock: Clock):
    output = resolve_verify_format(request, fmt)
    auth_service.verify_email(db, token, clock=clock)
    if output == "json":
        return MessageOut(message="Email verified")
    return RedirectResponse(f"{settings.FRONTEND_URL.rstrip('/')}/login?verified=1", status_code=302)


@router.get("/verify", response_model=MessageOut, responses={302: {"description": "Redirect to the login page"}})
def verify_get(
    request: Request,
    token: Optional[str] = Query(None),
    fmt: Optional[str] = Query(None, alias="format"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
):
    return _verify(request, db, token, fmt, settings, clock)


@router.post("/verify", response_model=MessageOut, responses={302: {"description": "Redirect to the login page"}})
def verify_post(
    request: Request,
    body: Optional[VerifyIn] = None,
    token: Optional[str] = Query(None),
    fmt: Optional[str] = Query(None, alias="format"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
):
    return _verify(request, db, token or (body.token if body else None), fmt, settings, clock)


@router.post("/resend-verification", response_model=MessageOut)
def resend_verification(
    payload: ResendIn,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
):
    auth_service.resend_verification(
        db,
        payload.email,
        notifier=notifier,
        backend_url=settings.BACKEND_URL,
        clock=clock,
        token_hours=settings.EMAIL_TOKEN_EXPIRE_HOURS,
    )
    return MessageOut(message="Verification email sent")


@router.get("/me", response_model=MeOut)
def me(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user, profile = auth_service.get_me(db, user_id)
    base = UserOut.model_validate(user).model_dump()
    return MeOut(user=MeUserOut(**base, profile=ProfileOut.model_validate(profile) if profile else None))


@router.post("/logout", response_model=OkOut)
def logout():
    # stateless tokens: the client just drops it
    return OkOut(message="Logged out")
