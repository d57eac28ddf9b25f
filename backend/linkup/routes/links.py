"""
LinkUp Backend: Link Route Handlers
=====================================

What:  POST /link, GET /linkedUsers?userId=, POST /unlink.

Authorization:
    /unlink is open by default: anyone holding a link id can remove it.
    Setting ENFORCE_LINK_OWNERSHIP=true requires a bearer token whose
    subject is one of the two linked users (see get_link_actor).
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.database import get_db_session
from linkup.dependencies import get_link_actor, get_link_service
from linkup.schemas.common import ErrorResponse
from linkup.schemas.link import LinkRequest, LinkResponse, UnlinkRequest, UnlinkResponse
from linkup.schemas.user import LinkedUserResponse
from linkup.services.link_service import LinkService

router = APIRouter(tags=["Links"])


@router.post(
    "/link",
    response_model=LinkResponse,
    responses={
        400: {"description": "Users are already linked", "model": ErrorResponse},
        404: {"description": "One or both users not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Link two users",
)
async def link_users(
    body: LinkRequest,
    db: AsyncSession = Depends(get_db_session),
    links: LinkService = Depends(get_link_service),
) -> LinkResponse:
    return await links.link(db, body.user_id, body.linked_user_id)


@router.get(
    "/linkedUsers",
    response_model=List[LinkedUserResponse],
    responses={
        400: {"description": "Missing or malformed userId", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the users linked to a user",
)
async def get_linked_users(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db_session),
    links: LinkService = Depends(get_link_service),
) -> List[LinkedUserResponse]:
    return await links.list_linked(db, user_id)


@router.post(
    "/unlink",
    response_model=UnlinkResponse,
    responses={
        401: {"description": "Bearer token required", "model": ErrorResponse},
        403: {"description": "Caller is not part of the link", "model": ErrorResponse},
        404: {"description": "Link not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Remove a link",
)
async def unlink_users(
    body: UnlinkRequest,
    db: AsyncSession = Depends(get_db_session),
    links: LinkService = Depends(get_link_service),
    actor: Optional[uuid.UUID] = Depends(get_link_actor),
) -> UnlinkResponse:
    return await links.unlink(db, body.link_id, acting_user_id=actor)
