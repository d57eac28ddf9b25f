"""
LinkUp Backend: Directory Route Handlers
==========================================

What:  GET /search?q= and GET /userById?userId=.

Both query parameters are declared optional so that a missing value reaches
the service and is reported with its own message instead of FastAPI's
generic "field required".
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.database import get_db_session
from linkup.dependencies import get_user_service
from linkup.schemas.common import ErrorResponse
from linkup.schemas.user import UserResponse
from linkup.services.user_service import UserService

router = APIRouter(tags=["Users"])


@router.get(
    "/search",
    response_model=List[UserResponse],
    responses={
        400: {"description": "Missing query", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Search users by name",
    description="Case-insensitive substring match on the user's name. Returns at most 10 users.",
)
async def search_users(
    q: Optional[str] = Query(default=None, description="Part of the user's name"),
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    return await users.search(db, q)


@router.get(
    "/userById",
    response_model=UserResponse,
    responses={
        400: {"description": "Missing userId", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a user by identifier",
)
async def get_user_by_id(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    return await users.get_by_id(db, user_id)
