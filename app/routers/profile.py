from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.core.config import Settings
from app.core.db import get_db
from app.core.deps import get_app_settings, get_blob_store, get_clock
from app.core.exceptions import FileTooLargeError, ValidationError
from app.core.security import Clock
from app.schemas.profile import DocumentOut, ProfileEnvelope, ProfileMessageOut, ProfileOut, ProfileUpdateIn, UploadOut
from app.services import profiles as profile_service
from app.services.storage import BlobStore

router = APIRouter(prefix="/api/profile", tags=["profile"])


# 인증 없이 라우터 연결 확인용
@router.get("/ping")
def ping():
    return {"ok": True, "route": "/api/profile/ping"}


@router.get("", response_model=ProfileEnvelope)
def get_profile(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    profile = profile_service.ensure_profile_exists(db, user_id)
    return ProfileEnvelope(profile=ProfileOut.model_validate(profile))


@router.put("", response_model=ProfileMessageOut)
def update_profile(
    body: ProfileUpdateIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    data = body.model_dump(exclude_unset=True, by_alias=False)
    profile = profile_service.update_profile(db, user_id, data)
    return ProfileMessageOut(message="Profile updated", profile=ProfileOut.model_validate(profile))


@router.post("/document", response_model=UploadOut)
def upload_document(
    file: Optional[UploadFile] = File(None),
    doc_type: Optional[str] = Form(None, alias="docType"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
):
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    limit = settings.MAX_UPLOAD_BYTES
    contents = file.file.read(limit + 1)
    if len(contents) > limit:
        raise FileTooLargeError(len(contents), limit)

    doc, profile = profile_service.upload_document(
        db,
        store,
        user_id,
        original_name=file.filename,
        content_type=file.content_type,
        data=contents,
        doc_type=doc_type,
        clock=clock,
    )
    return UploadOut(
        message="Uploaded",
        doc=DocumentOut.model_validate(doc),
        profile=ProfileOut.model_validate(profile),
    )


@router.get("/document/{doc_id}/download")
def download_document(
    doc_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    store: BlobStore = Depends(get_blob_store),
):
    doc, content = profile_service.read_document(db, store, user_id, doc_id)
    filename = doc.original_name or doc.filename
    return Response(
        content=content,
        media_type=doc.mimetype or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{quote(filename)}"'},
    )


@router.delete("/document/{doc_id}", response_model=ProfileMessageOut)
def delete_document(
    doc_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    store: BlobStore = Depends(get_blob_store),
):
    profile = profile_service.delete_document(db, store, user_id, doc_id)
    return ProfileMessageOut(message="Document deleted", profile=ProfileOut.model_validate(profile))
