"""
Candidate Models

Candidates are job seekers parsed from uploaded resumes. Experience and
skill fields hold free-form JSON produced by the resume parser.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, List, Optional, TYPE_CHECKING

from sqlalchemy import (
    String,
    Integer,
    Float,
    ForeignKey,
    DateTime,
    JSON,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.utils.validators import PHONE_PATTERN
from database.base import Base, new_uuid, utc_now
from database.rules import StringFormat, field_rules, uuid_key

if TYPE_CHECKING:
    from database.models.users import User
    from database.models.jobs import Job
    from database.models.resumes import Resume


# ==================== Candidate Enums ===================== #
class Gender(str, PyEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    UNDISCLOSED = "UNDISCLOSED"


# ==================== Candidate Model ===================== #
class Candidate(Base):
    """
    Candidate profile extracted from one or more resumes.
    activeResumeId points at the resume currently used for matching.
    """

    __tablename__ = "candidates"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    name: Mapped[str] = mapped_column(
        String(255), info=field_rules(min_length=1, message="Name cannot be empty")
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        info=field_rules(format=StringFormat.EMAIL, message="Email is invalid"),
    )
    phone: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        info=field_rules(pattern=PHONE_PATTERN, message="Phone number is invalid"),
    )
    address: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        info=field_rules(min_length=1, message="Address cannot be empty"),
    )
    city: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        info=field_rules(min_length=1, message="City cannot be empty"),
    )
    state: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        info=field_rules(min_length=1, message="State cannot be empty"),
    )
    country: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        info=field_rules(min_length=1, message="Country cannot be empty"),
    )
    zipCode: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        info=field_rules(min_length=1, message="Zip code cannot be empty"),
    )
    age: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        info=field_rules(positive=True, message="Age must be a valid number"),
    )
    dob: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        info=field_rules(type_message="Date is invalid"),
    )
    gender: Mapped[Gender] = mapped_column(
        SQLEnum(Gender, name="gender"), default=Gender.UNDISCLOSED
    )

    # Parser output
    jobExperience: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    totalExperience: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    relevantExperience: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    skills: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    pros: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    cons: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    score: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        info=field_rules(positive=True, message="Score must be a valid number"),
    )
    activeResumeId: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True, unique=True
    )
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
    resumeId: Mapped[str] = mapped_column(String(36))

    resume: Mapped[List["Resume"]] = relationship(back_populates="candidate")
    jobs: Mapped[List["CandidatesOnJobs"]] = relationship(back_populates="candidate")
    shortListedJobs: Mapped[List["ShortListed"]] = relationship(
        back_populates="candidate"
    )


# ==================== Candidate/Job Join ===================== #
class CandidatesOnJobs(Base):
    """Candidate applied to (or matched with) a job."""

    __tablename__ = "candidates_on_jobs"
    __table_args__ = (
        UniqueConstraint(
            "candidateId", "jobId", name="candidates_on_jobs_candidateId_jobId_key"
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    candidateId: Mapped[str] = mapped_column(
        String(36), ForeignKey("candidates.id", ondelete="CASCADE")
    )
    jobId: Mapped[str] = mapped_column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"))
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    candidate: Mapped["Candidate"] = relationship(back_populates="jobs")
    job: Mapped["Job"] = relationship(back_populates="candidates")


# ==================== Shortlist ===================== #
class ShortListed(Base):
    """A user shortlisting a candidate for a job."""

    __tablename__ = "short_listed"
    __table_args__ = (
        UniqueConstraint(
            "userId",
            "jobId",
            "candidateId",
            name="short_listed_userId_jobId_candidateId_key",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    userId: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"))
    candidateId: Mapped[str] = mapped_column(
        String(36), ForeignKey("candidates.id", ondelete="CASCADE")
    )
    jobId: Mapped[str] = mapped_column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"))
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    user: Mapped["User"] = relationship(back_populates="shortListed")
    candidate: Mapped["Candidate"] = relationship(back_populates="shortListedJobs")
    job: Mapped["Job"] = relationship(back_populates="shortListed")
