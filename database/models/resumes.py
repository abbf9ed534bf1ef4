"""
Resume Models

Uploaded resume files. A resume may be parsed into a candidate and linked
to any number of jobs.
"""

from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import String, ForeignKey, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database.base import Base, new_uuid, utc_now
from database.rules import StringFormat, field_rules, uuid_key

if TYPE_CHECKING:
    from database.models.users import User
    from database.models.jobs import Job
    from database.models.candidates import Candidate


# ==================== Resume Model ===================== #
class Resume(Base):
    """An uploaded resume file in object storage."""

    __tablename__ = "resumes"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    fileKey: Mapped[str] = mapped_column(
        String(36),
        info=field_rules(format=StringFormat.UUID, message="Key is invalid"),
    )
    path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fullPath: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(
        Text, info=field_rules(format=StringFormat.URL, message="URL is invalid")
    )
    candidateId: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("candidates.id", ondelete="SET NULL"), nullable=True
    )
    createdById: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    candidate: Mapped[Optional["Candidate"]] = relationship(back_populates="resume")
    createdBy: Mapped[Optional["User"]] = relationship(back_populates="ownedResumes")
    jobs: Mapped[List["JobsAndResumes"]] = relationship(back_populates="resume")


# ==================== Job/Resume Join ===================== #
class JobsAndResumes(Base):
    """Resume submitted to a job. Keyed by the pair, no surrogate id."""

    __tablename__ = "jobs_and_resumes"

    jobId: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True
    )
    resumeId: Mapped[str] = mapped_column(
        String(36), ForeignKey("resumes.id", ondelete="CASCADE"), primary_key=True
    )

    job: Mapped["Job"] = relationship(back_populates="resumes")
    resume: Mapped["Resume"] = relationship(back_populates="jobs")
