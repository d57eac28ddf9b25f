"""
LinkUp Backend: Auth Route Handlers
=====================================

What:  POST /register and POST /login.
How:   Bodies are validated by Pydantic (failures become 400 via the
       RequestValidationError handler); UserService does the rest.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.database import get_db_session
from linkup.dependencies import get_user_service
from linkup.schemas.common import ErrorResponse
from linkup.schemas.user import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from linkup.services.user_service import UserService

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Invalid body or email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register_user(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> RegisterResponse:
    """Create the account and return a token for it."""
    return await users.register(db, body)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Invalid Credentials", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Log in and record the caller's location",
)
async def login_user(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> LoginResponse:
    """
    Verify credentials and return a token plus the profile snapshot.

    Unknown email and wrong password produce the same 400 response.
    """
    return await users.login(db, body)
