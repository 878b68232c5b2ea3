# app/services/profiles.py
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import Clock, utcnow
from app.models.profile import DOC_TYPES, Profile, ProfileDocument
from app.models.user import User
from app.services.storage import BlobNotFound, BlobStore
from app.utils.validators import safe_filename

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "professional_title", "location", "summary", "phone",
    "website", "linkedin", "github", "twitter",
)
LIST_FIELDS = ("experiences", "educations", "certificates")
SKILL_KEYS = ("technical", "soft", "languages")


def _link_user(db: Session, user_id: int, profile: Profile) -> None:
    user = db.get(User, user_id)
    if user is not None and user.profile_id != profile.id:
        user.profile_id = profile.id


def ensure_profile_exists(db: Session, user_id: int) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if profile is None:
        profile = Profile(user_id=user_id)
        db.add(profile)
        db.flush()
        _link_user(db, user_id, profile)
        db.commit()
        db.refresh(profile)
    return profile


def normalize_skills(skills: Dict[str, Any]) -> Dict[str, List[str]]:
    out = {}
    for key in SKILL_KEYS:
        value = skills.get(key)
        if isinstance(value, list):
            out[key] = [str(v) for v in value]
        elif value:
            out[key] = [str(value)]
        else:
            out[key] = []
    return out


def sanitize_items(items: Optional[List[Any]]) -> List[Dict[str, Any]]:
    """Drop client supplied ids and give each entry a fresh one."""
    if not isinstance(items, list):
        return []
    clean = []
    for item in items:
        if not isinstance(item, dict):
            continue
        rest = {k: v for k, v in item.items() if k not in ("id", "_id")}
        rest["id"] = uuid.uuid4().hex
        clean.append(rest)
    return clean


def update_profile(db: Session, user_id: int, data: Dict[str, Any]) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if profile is None:
        profile = Profile(user_id=user_id)
        db.add(profile)

    for key in TEXT_FIELDS:
        if data.get(key) is not None:
            setattr(profile, key, data[key])
    if data.get("skills") is not None:
        profile.skills = normalize_skills(data["skills"])
    for key in LIST_FIELDS:
        if data.get(key) is not None:
            setattr(profile, key, sanitize_items(data[key]))

    db.flush()
    _link_user(db, user_id, profile)
    db.commit()
    db.refresh(profile)
    return profile


def guess_type_from_name(name: Optional[str]) -> str:
    n = (name or "").lower()
    if not n:
        return "other"
    if "resume" in n or "cv" in n:
        return "resume"
    if "cover" in n or "letter" in n:
        return "cover-letter"
    return "other"


def normalize_doc_type(value: Optional[str], fallback_name: Optional[str]) -> str:
    v = (value or "").lower().strip()
    if v:
        if "cover" in v or "letter" in v:
            return "cover-letter"
        if "resume" in v or "cv" in v:
            return "resume"
        if v in DOC_TYPES:
            return v
    return guess_type_from_name(fallback_name)


def upload_document(
    db: Session,
    store: BlobStore,
    user_id: int,
    original_name: Optional[str],
    content_type: Optional[str],
    data: bytes,
    doc_type: Optional[str] = None,
    clock: Clock = utcnow,
) -> Tuple[ProfileDocument, Profile]:
    if not original_name:
        raise ValidationError("No file uploaded")

    millis = int(clock().timestamp() * 1000)
    blob_name = f"{user_id}-{millis}-{safe_filename(original_name)}"
    url = store.save(blob_name, data, content_type=content_type)

    profile = ensure_profile_exists(db, user_id)
    doc = ProfileDocument(
        filename=blob_name,
        original_name=original_name,
        mimetype=content_type,
        size=len(data),
        url=url,
        doc_type=normalize_doc_type(doc_type, original_name),
    )
    profile.documents.append(doc)
    db.commit()
    db.refresh(doc)
    logger.info("Uploaded document %s for user %s (%d bytes)", blob_name, user_id, len(data))
    return doc, profile


def _find_document(db: Session, user_id: int, doc_id: int) -> Tuple[Profile, ProfileDocument]:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if profile is None:
        raise NotFoundError("Profile not found")
    doc = (
        db.query(ProfileDocument)
        .filter(ProfileDocument.id == doc_id, ProfileDocument.profile_id == profile.id)
        .first()
    )
    if doc is None:
        raise NotFoundError("Document not found")
    return profile, doc


def read_document(db: Session, store: BlobStore, user_id: int, doc_id: int) -> Tuple[ProfileDocument, bytes]:
    _, doc = _find_document(db, user_id, doc_id)
    if not doc.filename:
        raise NotFoundError("Document filename missing")
    try:
        content = store.read(doc.filename)
    except BlobNotFound:
        raise NotFoundError("File not found on disk")
    return doc, content


def delete_document(db: Session, store: BlobStore, user_id: int, doc_id: int) -> Profile:
    profile, doc = _find_document(db, user_id, doc_id)

    if doc.filename:
        try:
            store.delete(doc.filename)
        except Exception:
            # the row still goes away; an orphaned blob is tolerated
            logger.warning("Failed to delete blob %s", doc.filename, exc_info=True)

    profile.documents.remove(doc)
    db.commit()
    db.refresh(profile)
    return profile
