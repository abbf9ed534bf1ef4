"""
User Models

Users are recruiters and administrators. Each user may own a profile and
creates departments, jobs and resumes, and maintains shortlists.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.utils.validators import PHONE_PATTERN
from database.base import Base, new_uuid, utc_now
from database.rules import StringFormat, field_rules, uuid_key

if TYPE_CHECKING:
    from database.models.jobs import Job, Department
    from database.models.candidates import ShortListed
    from database.models.resumes import Resume


# ==================== User Role ===================== #
class Role(str, PyEnum):
    USER = "USER"
    ADMIN = "ADMIN"


# ==================== User Model ===================== #
class User(Base):
    """
    Core user identity. id, email and phone are each unique and are also
    declared as one compound key.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("id", "email", "phone", name="users_id_email_phone_key"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    name: Mapped[str] = mapped_column(String(255), info=field_rules(min_length=1))
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        info=field_rules(format=StringFormat.EMAIL, message="Email is invalid"),
    )
    phone: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        info=field_rules(pattern=PHONE_PATTERN, message="Phone number is invalid"),
    )
    password: Mapped[str] = mapped_column(
        String(255), info=field_rules(min_length=6, max_length=16)
    )
    role: Mapped[Optional[Role]] = mapped_column(
        SQLEnum(Role, name="role"), nullable=True, default=Role.USER
    )
    emailVerified: Mapped[Optional[bool]] = mapped_column(
        Boolean, nullable=True, default=False
    )
    phoneVerified: Mapped[Optional[bool]] = mapped_column(
        Boolean, nullable=True, default=False
    )
    clientId: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    profile: Mapped[Optional["Profile"]] = relationship(
        back_populates="user", uselist=False
    )
    jobs: Mapped[List["Job"]] = relationship(back_populates="createdBy")
    departments: Mapped[List["Department"]] = relationship(back_populates="createdBy")
    shortListed: Mapped[List["ShortListed"]] = relationship(back_populates="user")
    ownedResumes: Mapped[List["Resume"]] = relationship(back_populates="createdBy")


# ==================== Profile Model ===================== #
class Profile(Base):
    """Personal details of a user; at most one per user."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_uuid, info=uuid_key()
    )
    firstName: Mapped[str] = mapped_column(String(100))
    lastName: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zipCode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    userId: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    createdAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updatedAt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    user: Mapped["User"] = relationship(back_populates="profile")
