"""
LinkUp Backend: User & Auth Schemas
=====================================

What:  Pydantic models for the register/login request bodies and every
       response that carries user data.
Why:   The API contract uses camelCase (`profileImage`) while Python code and
       the ORM use snake_case; an alias generator bridges the two.
How:   `populate_by_name` lets services build models with snake_case keyword
       arguments; FastAPI serializes responses by alias.

Security:
    No schema here declares a password or password hash field. Building a
    `UserResponse` from a `User` row drops the hash automatically.
"""

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


CAMEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "from_attributes": True,
}


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """Body of POST /register. Only name, email and password are required."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)
    address: Optional[str] = None
    dob: Optional[date] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    profile_image: Optional[str] = Field(default=None, max_length=1024)

    model_config = CAMEL_CONFIG


class LoginRequest(BaseModel):
    """
    Body of POST /login.

    latitude / longitude are optional; whatever arrives (including null)
    overwrites the stored location.
    """

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    model_config = CAMEL_CONFIG


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """
    Public user document returned by /search and /userById.

    Also used as the profile snapshot embedded in login tokens.
    """

    id: uuid.UUID
    name: str
    email: str
    address: Optional[str] = None
    dob: Optional[date] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = CAMEL_CONFIG


class LinkedUserResponse(BaseModel):
    """The other party of a link: `{id, name, profileImage}` only."""

    id: uuid.UUID
    name: str
    profile_image: Optional[str] = None

    model_config = CAMEL_CONFIG


class RegisterResponse(BaseModel):
    token: str = Field(description="Signed session token for the new user")


class LoginResponse(BaseModel):
    """Token plus the same profile snapshot that is embedded in it."""

    token: str = Field(description="Signed session token")
    user: UserResponse = Field(description="Profile snapshot at login time")
