"""
LinkUp Backend: Link Service
==============================

What:  Creates, lists and removes links between two users.
How:   One row per link in `links`; listing resolves the other party with a
       single join instead of one query per link.

Duplicate Handling:
    There is no "does this link exist?" read before the insert. The insert
    relies on the `uq_links_pair` unique constraint and translates the
    IntegrityError into ConflictError, so two concurrent requests for the
    same ordered pair cannot both succeed.

    The constraint is ordered: link(A, B) then link(B, A) creates two rows.
    Both show up from either side in list_linked, so B appears twice in A's
    list in that case.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import case, delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from linkup.models.link import Link
from linkup.models.user import User
from linkup.schemas.link import LinkResponse, UnlinkResponse
from linkup.schemas.user import LinkedUserResponse
from linkup.services.user_service import parse_identifier

logger = logging.getLogger(__name__)


class LinkService:
    """Business logic for the link handler. Stateless."""

    async def link(self, db: AsyncSession, user_id: str, linked_user_id: str) -> LinkResponse:
        """
        Link `user_id` to `linked_user_id` (ordered pair).

        Raises:
            NotFoundError: either identifier does not resolve to a user
            ConflictError: this exact ordered pair is already linked
            DatabaseError: unexpected database failure
        """
        first = parse_identifier(user_id)
        second = parse_identifier(linked_user_id)
        not_found = NotFoundError(
            resource="user",
            message="One or both users not found",
            context={"user_id": user_id, "linked_user_id": linked_user_id},
        )
        if first is None or second is None:
            raise not_found

        try:
            result = await db.execute(select(User.id).where(User.id.in_([first, second])))
            found = set(result.scalars().all())
            if first not in found or second not in found:
                raise not_found

            link = Link(user_id=first, linked_user_id=second)
            db.add(link)
            await db.flush()
        except IntegrityError:
            raise ConflictError(
                "Users are already linked",
                context={"user_id": user_id, "linked_user_id": linked_user_id},
            )
        except SQLAlchemyError as e:
            logger.error("Database error linking users: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "link"})

        logger.info("Link %s created: %s -> %s", link.id, first, second)
        return LinkResponse(link_id=link.id)

    async def list_linked(self, db: AsyncSession, user_id: Optional[str]) -> List[LinkedUserResponse]:
        """
        Every user on the other side of a link involving `user_id`.

        Links are matched in either position; the other party is projected
        to {id, name, profileImage}; the queried user is never returned
        (self-links are dropped). No pagination.

        Raises:
            ValidationError: missing or malformed identifier
        """
        uid = parse_identifier(user_id)
        if uid is None:
            raise ValidationError("A valid userId parameter is required", field="userId")

        other_party = case(
            (Link.user_id == uid, Link.linked_user_id),
            else_=Link.user_id,
        )
        query = (
            select(User.id, User.name, User.profile_image)
            .join(Link, User.id == other_party)
            .where(or_(Link.user_id == uid, Link.linked_user_id == uid))
            .where(User.id != uid)
            .order_by(Link.created_at)
        )

        try:
            result = await db.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing links for %s: %s", uid, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_linked", "user_id": str(uid)})

        return [
            LinkedUserResponse(id=row.id, name=row.name, profile_image=row.profile_image)
            for row in rows
        ]

    async def unlink(
        self,
        db: AsyncSession,
        link_id: str,
        acting_user_id: Optional[uuid.UUID] = None,
    ) -> UnlinkResponse:
        """
        Delete a link by identifier.

        Args:
            acting_user_id: When given (ownership enforcement on), the link is
                only removed if this user is one of its two participants.

        Raises:
            NotFoundError: nothing was deleted (unknown or malformed id)
            PermissionDeniedError: acting user is not a participant
        """
        lid = parse_identifier(link_id)
        not_found = NotFoundError(resource="link", resource_id=link_id, message="Link not found")
        if lid is None:
            raise not_found

        try:
            if acting_user_id is not None:
                link = await db.get(Link, lid)
                if link is None:
                    raise not_found
                if acting_user_id not in (link.user_id, link.linked_user_id):
                    raise PermissionDeniedError(
                        "Only a linked user can remove this link",
                        context={"link_id": link_id, "user_id": str(acting_user_id)},
                    )

            result = await db.execute(delete(Link).where(Link.id == lid))
        except SQLAlchemyError as e:
            logger.error("Database error unlinking %s: %s", link_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "unlink", "link_id": link_id})

        if result.rowcount == 0:
            raise not_found

        logger.info("Link %s removed", lid)
        return UnlinkResponse()
