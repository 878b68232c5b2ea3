# app/utils/validators.py
import re

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 8


def is_email(v) -> bool:
    return isinstance(v, str) and bool(EMAIL_RE.match(v))


def is_strong_password(p) -> bool:
    # 최소 8자
    return isinstance(p, str) and len(p) >= MIN_PASSWORD_LENGTH


def normalize_email(v: str) -> str:
    return v.strip().lower()


def safe_filename(original: str = "file") -> str:
    name = re.sub(r"\s+", "_", str(original or "file"))
    name = re.sub(r"[^a-zA-Z0-9_.-]", "", name)
    return name or "file"
