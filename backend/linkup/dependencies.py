"""
LinkUp Backend: FastAPI Dependencies
======================================

What:  Small `Depends()` providers that hand route handlers the pieces of the
       AppContext they use, plus the optional bearer-token check.

Example:
    @router.get("/search")
    async def search_users(
        users: UserService = Depends(get_user_service),
        db: AsyncSession = Depends(get_db_session),
    ): ...
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from linkup.context import AppContext
from linkup.exceptions import AuthenticationError
from linkup.services.file_service import FileService
from linkup.services.link_service import LinkService
from linkup.services.user_service import UserService, parse_identifier

# auto_error=False: missing credentials are our AuthenticationError, not
# FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_user_service(context: AppContext = Depends(get_context)) -> UserService:
    return context.user_service


def get_link_service(context: AppContext = Depends(get_context)) -> LinkService:
    return context.link_service


def get_file_service(context: AppContext = Depends(get_context)) -> FileService:
    return context.file_service


async def get_link_actor(
    context: AppContext = Depends(get_context),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[uuid.UUID]:
    """
    User acting on a link, when link ownership is enforced.

    Returns None when `enforce_link_ownership` is off (the token, if any, is
    ignored). When it is on, a valid bearer token is required and its subject
    is returned.

    Raises:
        AuthenticationError: enforcement on and the token is missing/invalid
    """
    if not context.settings.enforce_link_ownership:
        return None
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = context.tokens.decode_token(credentials.credentials)
    user_id = parse_identifier(payload.get("sub"))
    if user_id is None:
        raise AuthenticationError("Invalid token")
    return user_id
