"""
LinkUp Backend: Link SQLAlchemy Model
=======================================

What:  ORM model representing the `links` table: one row per relationship
       between two users.
Why:   A link is stored once and read from both sides; `list_linked` looks
       the user up in either column.

Uniqueness:
    `uq_links_pair` covers the ORDERED pair (user_id, linked_user_id).
    Linking A→B twice fails at the database, so concurrent requests cannot
    both insert the same pair. B→A is a different ordered pair and is
    accepted; whether the pair should be treated as unordered is still open.

Deleting a user removes its links (ON DELETE CASCADE).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from linkup.database import Base


class Link(Base):
    """A relationship between `user_id` and `linked_user_id` (wire name `userId`)."""

    __tablename__ = "links"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    linked_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # The unique constraint's index already serves lookups on user_id;
    # linked_user_id needs its own for the "either side" query
    __table_args__ = (
        UniqueConstraint("user_id", "linked_user_id", name="uq_links_pair"),
        Index("idx_links_linked_user_id", "linked_user_id"),
    )

    def __repr__(self) -> str:
        return f"<Link(id={self.id}, user_id={self.user_id}, linked_user_id={self.linked_user_id})>"
