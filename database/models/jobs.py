"""
Job Models

Jobs are openings created by a user inside a department. Resumes and
candidates attach to jobs through explicit join entities.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Text,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database.base import Base, new_uuid, utc_now
from database.rules import uuid_key

if TYPE_CHECKING:
    from database.models.users import User
    from database.models.candidates import CandidatesOnJobs, ShortListed
    from database.models.resumes import JobsAndResumes


# ==================== Job Enums ===================== #
class JobType(str, PyEnum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    FREELANCE = "FREELANCE"
    REMOTE = "REMOTE"


class ShiftType(str, PyEnum):
    DAY = "DAY"
    NIGHT = "NIGHT"
    MIXED = "MIXED"


# ==================== Department Model ===================== #
class Department(Base):
    """Organizational unit that groups jobs."""

    __tablename__ = "departments"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    isDeleted: Mapped[bool] = mapped_column(Boolean, default=False)
    createdById: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"))
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    # column name as deployed
    udpatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    createdBy: Mapped["User"] = relationship(back_populates="departments")
    jobs: Mapped[List["Job"]] = relationship(back_populates="department")


# ==================== Job Model ===================== #
class Job(Base):
    """A job opening."""

    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    jobType: Mapped[Optional[JobType]] = mapped_column(
        SQLEnum(JobType, name="job_type"), nullable=True
    )
    departmentId: Mapped[str] = mapped_column(String(36), ForeignKey("departments.id"))
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    shiftType: Mapped[Optional[ShiftType]] = mapped_column(
        SQLEnum(ShiftType, name="shift_type"), nullable=True
    )
    expiryDate: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    createdById: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"))
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    # column name as deployed
    udpatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    department: Mapped["Department"] = relationship(back_populates="jobs")
    createdBy: Mapped["User"] = relationship(back_populates="jobs")
    resumes: Mapped[List["JobsAndResumes"]] = relationship(back_populates="job")
    candidates: Mapped[List["CandidatesOnJobs"]] = relationship(back_populates="job")
    shortListed: Mapped[List["ShortListed"]] = relationship(back_populates="job")
