"""
LinkUp Backend: User Service (Auth & Directory)
=================================================

What:  Registration, login, name search and lookup by identifier.
Why:   Keeps every user-table rule (unique email, credential checks, password
       projection) out of the route handlers.
How:   Each method takes the request's AsyncSession, performs one to three
       sequential statements, and returns Pydantic response models.
       SQLAlchemy failures are wrapped in DatabaseError; our own exceptions
       propagate unchanged.

Error Mapping:
    register  → ConflictError ("User already exists")
    login     → InvalidCredentialsError (unknown email and wrong password alike)
    search    → ValidationError (missing/empty query)
    get_by_id → ValidationError (missing id), NotFoundError ("User not found")
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from linkup.models.user import User
from linkup.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from linkup.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


def parse_identifier(value: Optional[str]) -> Optional[uuid.UUID]:
    """
    Parse a client-supplied identifier.

    Returns None for anything that is not a UUID; callers decide whether
    that means "bad request" or "does not resolve".
    """
    if not value:
        return None
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        return None


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UserService:
    """
    Business logic for the auth and directory handlers.

    Stateless apart from the hasher, token service and search limit it is
    constructed with; one instance lives on the AppContext.
    """

    def __init__(
        self,
        passwords: PasswordHasher,
        tokens: TokenService,
        search_limit: int = 10,
    ):
        self.passwords = passwords
        self.tokens = tokens
        self.search_limit = search_limit

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, data: RegisterRequest) -> RegisterResponse:
        """
        Create a user and return a token over its identifier.

        The email lookup gives the friendly error for the common case; the
        unique index on users.email catches two registrations racing past it.

        Raises:
            ConflictError: email already registered
            DatabaseError: unexpected database failure
        """
        try:
            if await self._find_by_email(db, data.email) is not None:
                raise ConflictError("User already exists", context={"field": "email"})

            user = User(
                name=data.name,
                email=data.email,
                password_hash=await self.passwords.hash_async(data.password),
                address=data.address,
                dob=data.dob,
                phone=data.phone,
                profile_image=data.profile_image,
            )
            db.add(user)
            await db.flush()
        except IntegrityError:
            logger.info("Concurrent registration rejected by unique index")
            raise ConflictError("User already exists", context={"field": "email"})
        except SQLAlchemyError as e:
            logger.error("Database error during registration: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "register"})

        logger.info("User registered: %s", user.id)
        token = self.tokens.create_token(str(user.id), {"id": str(user.id)})
        return RegisterResponse(token=token)

    async def login(self, db: AsyncSession, data: LoginRequest) -> LoginResponse:
        """
        Check credentials, record the caller's location and issue a token.

        The token embeds the full profile snapshot (after the location
        update), and the same snapshot is returned alongside it.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
            DatabaseError: unexpected database failure
        """
        try:
            user = await self._find_by_email(db, data.email)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login"})

        password_hash = user.password_hash if user is not None else None
        if not await self.passwords.verify_async(data.password, password_hash):
            # Same exception for both causes
            raise InvalidCredentialsError()

        # Last write wins; no location history is kept
        user.latitude = data.latitude
        user.longitude = data.longitude
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to record login location for %s: %s", user.id, str(e))
            raise DatabaseError(context={"operation": "login", "user_id": str(user.id)})

        snapshot = UserResponse.model_validate(user)
        token = self.tokens.create_token(
            str(user.id),
            snapshot.model_dump(mode="json", by_alias=True),
        )
        logger.info("User logged in: %s", user.id)
        return LoginResponse(token=token, user=snapshot)

    async def search(self, db: AsyncSession, q: Optional[str]) -> List[UserResponse]:
        """
        Case-insensitive substring match on name, at most `search_limit` rows.

        Order is whatever the database returns.
        """
        if q is None or not q.strip():
            raise ValidationError("Query parameter is required", field="q")

        pattern = f"%{escape_like(q.strip())}%"
        try:
            result = await db.execute(
                select(User)
                .where(User.name.ilike(pattern, escape="\\"))
                .limit(self.search_limit)
            )
            users = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error searching users: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "search"})

        return [UserResponse.model_validate(user) for user in users]

    async def get_by_id(self, db: AsyncSession, user_id: Optional[str]) -> UserResponse:
        """
        Fetch one user; the password hash is never part of the result.

        A malformed identifier cannot match any row, so it is a 404 like any
        other unknown id.
        """
        if not user_id:
            raise ValidationError("User ID parameter is required", field="userId")

        parsed = parse_identifier(user_id)
        if parsed is None:
            raise NotFoundError(resource="user", message="User not found")

        try:
            user = await db.get(User, parsed)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "get_by_id", "user_id": user_id})

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id, message="User not found")

        return UserResponse.model_validate(user)
