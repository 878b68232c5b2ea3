# app/schemas/profile.py
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import Field
from .base import BaseSchema


class SkillsOut(BaseSchema):
    technical: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)


class DocumentOut(BaseSchema):
    id: int
    filename: str
    original_name: str
    mimetype: Optional[str] = None
    size: int
    url: str
    doc_type: str
    created_at: datetime


class ProfileOut(BaseSchema):
    id: int
    user_id: int
    professional_title: str = ""
    location: str = ""
    summary: str = ""
    phone: str = ""
    website: str = ""
    linkedin: str = ""
    github: str = ""
    twitter: str = ""
    skills: SkillsOut = Field(default_factory=SkillsOut)
    experiences: List[Dict[str, Any]] = Field(default_factory=list)
    educations: List[Dict[str, Any]] = Field(default_factory=list)
    certificates: List[Dict[str, Any]] = Field(default_factory=list)
    documents: List[DocumentOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProfileUpdateIn(BaseSchema):
    professional_title: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    twitter: Optional[str] = None
    # loose on purpose: scalars are wrapped into lists by the service
    skills: Optional[Dict[str, Any]] = None
    experiences: Optional[List[Dict[str, Any]]] = None
    educations: Optional[List[Dict[str, Any]]] = None
    certificates: Optional[List[Dict[str, Any]]] = None


class ProfileEnvelope(BaseSchema):
    profile: ProfileOut


class ProfileMessageOut(BaseSchema):
    message: str
    profile: Optional[ProfileOut] = None


class UploadOut(BaseSchema):
    message: str
    doc: DocumentOut
    profile: ProfileOut
