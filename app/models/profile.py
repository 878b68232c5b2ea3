from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from app.core.db import Base

DOC_TYPES = ("resume", "cover-letter", "other")


def empty_skills():
    return {"technical": [], "soft": [], "languages": []}


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    professional_title = Column(String(200), nullable=False, default="")
    location = Column(String(200), nullable=False, default="")
    summary = Column(Text, nullable=False, default="")
    phone = Column(String(50), nullable=False, default="")

    website = Column(String(500), nullable=False, default="")
    linkedin = Column(String(500), nullable=False, default="")
    github = Column(String(500), nullable=False, default="")
    twitter = Column(String(500), nullable=False, default="")

    # {"technical": [...], "soft": [...], "languages": [...]}
    skills = Column(JSON, nullable=False, default=empty_skills)
    experiences = Column(JSON, nullable=False, default=list)
    educations = Column(JSON, nullable=False, default=list)
    certificates = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    documents = relationship(
        "ProfileDocument",
        cascade="all, delete-orphan",
        back_populates="profile",
        lazy="selectin",
        order_by="ProfileDocument.id",
    )


class ProfileDocument(Base):
    __tablename__ = "profile_documents"

    id = Column(Integer, primary_key=True)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    filename = Column(String(500), nullable=False)       # blob name in the store
    original_name = Column(String(500), nullable=False, default="")
    mimetype = Column(String(200), nullable=True)
    size = Column(Integer, nullable=False, default=0)
    url = Column(String(1024), nullable=False)
    doc_type = Column(String(20), nullable=False, default="other")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="documents")
