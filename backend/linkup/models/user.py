"""
LinkUp Backend: User SQLAlchemy Model
=======================================

What:  ORM model representing the `users` table.
How:   SQLAlchemy 2.0 typed declarative mapping with portable column types
       (`Uuid`, `DateTime(timezone=True)`) so the same model runs on
       PostgreSQL in production and SQLite in tests.

Mutation Rules:
    - Created by registration.
    - latitude / longitude are overwritten on every successful login
      (last-write-wins, no history is kept).
    - Nothing else in this service mutates a user after creation.

The password hash lives here and only here: response schemas never declare
a field for it, so it cannot leak through serialization.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from linkup.database import Base


class User(Base):
    """A registered account and its profile fields."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Unique index backs the duplicate-email check, so two concurrent
    # registrations cannot both succeed
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dob: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    profile_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # Last-known location, written by login
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
