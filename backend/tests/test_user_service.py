"""
LinkUp Backend: User Service Unit Tests
=========================================

What:  Tests for UserService (register, login, search, get_by_id).
How:   Runs against a real SQLite database per test; mock sessions are used
       only to inject SQLAlchemy failures.

What we test:
    ✅ Duplicate email is a conflict
    ✅ Unknown email and wrong password fail identically
    ✅ Login records location and embeds the profile snapshot in the token
    ✅ Search: required query, case-insensitive substring, 10-row cap,
       LIKE wildcards matched literally
    ✅ get_by_id never exposes the password hash
"""

import uuid
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from linkup.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from linkup.models import User
from linkup.schemas.user import LoginRequest, RegisterRequest
from linkup.services.user_service import escape_like, parse_identifier


def register_request(email="ann@example.com", password="pw-123", **extra) -> RegisterRequest:
    return RegisterRequest(name=extra.pop("name", "Ann Lee"), email=email, password=password, **extra)


class TestHelpers:

    def test_parse_identifier(self):
        value = uuid.uuid4()
        assert parse_identifier(str(value)) == value
        assert parse_identifier(f"  {value} ") == value

    @pytest.mark.parametrize("raw", [None, "", "not-a-uuid", "507f1f77bcf86cd799439011"])
    def test_parse_identifier_rejects(self, raw):
        assert parse_identifier(raw) is None

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_token_for_new_user(self, user_service, db_session, context):
        response = await user_service.register(
            db_session,
            register_request(dob=date(1990, 5, 17), phone="555-0100", address="1 Main St"),
        )
        await db_session.commit()

        payload = context.tokens.decode_token(response.token)
        user = await db_session.get(User, uuid.UUID(payload["sub"]))

        assert payload["user"] == {"id": payload["sub"]}
        assert user.email == "ann@example.com"
        assert user.dob == date(1990, 5, 17)
        assert user.password_hash != "pw-123"
        assert context.passwords.verify("pw-123", user.password_hash)

    @pytest.mark.asyncio
    async def test_register_duplicate_email_conflicts(self, user_service, db_session):
        await user_service.register(db_session, register_request())
        await db_session.commit()

        with pytest.raises(ConflictError, match="User already exists"):
            await user_service.register(db_session, register_request(name="Someone Else"))

    @pytest.mark.asyncio
    async def test_register_race_on_unique_index(self, user_service, mock_db_session):
        """The email lookup finds nothing, but the insert loses the race to another request."""
        lookup = MagicMock()
        lookup.scalar_one_or_none.return_value = None
        mock_db_session.execute = AsyncMock(return_value=lookup)
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))
        )

        with pytest.raises(ConflictError, match="User already exists"):
            await user_service.register(mock_db_session, register_request())

        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_register_database_failure(self, user_service, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        with pytest.raises(DatabaseError):
            await user_service.register(mock_db_session, register_request())


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_records_location(self, user_service, db_session, make_user, context):
        user = await make_user("Ann Lee", email="ann@example.com", password="pw-123")

        response = await user_service.login(
            db_session,
            LoginRequest(email="ann@example.com", password="pw-123", latitude=51.5, longitude=-0.12),
        )
        await db_session.commit()

        assert response.user.id == user.id
        assert response.user.latitude == 51.5
        assert response.user.longitude == -0.12

        await db_session.refresh(user)
        assert (user.latitude, user.longitude) == (51.5, -0.12)

        payload = context.tokens.decode_token(response.token)
        assert payload["sub"] == str(user.id)
        assert payload["user"]["email"] == "ann@example.com"
        assert payload["user"]["latitude"] == 51.5
        assert "password" not in str(payload["user"]).lower()

    @pytest.mark.asyncio
    async def test_login_without_location_clears_it(self, user_service, db_session, make_user):
        user = await make_user("Ann Lee", email="ann@example.com", password="pw-123", latitude=1.0, longitude=2.0)

        response = await user_service.login(db_session, LoginRequest(email="ann@example.com", password="pw-123"))

        assert response.user.latitude is None
        assert user.longitude is None

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_fail_identically(self, user_service, db_session, make_user):
        await make_user("Ann Lee", email="ann@example.com", password="pw-123")

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await user_service.login(db_session, LoginRequest(email="ann@example.com", password="nope"))
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await user_service.login(db_session, LoginRequest(email="bob@example.com", password="pw-123"))

        assert wrong_password.value.message == unknown_email.value.message == "Invalid Credentials"


class TestSearch:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("q", [None, "", "   "])
    async def test_search_requires_query(self, user_service, db_session, q):
        with pytest.raises(ValidationError, match="Query parameter is required"):
            await user_service.search(db_session, q)

    @pytest.mark.asyncio
    async def test_search_case_insensitive_substring(self, user_service, db_session, make_user):
        await make_user("Alice Smith")
        await make_user("Sally Alvarez")
        await make_user("Bob Jones")

        results = await user_service.search(db_session, "AL")

        assert sorted(u.name for u in results) == ["Alice Smith", "Sally Alvarez"]

    @pytest.mark.asyncio
    async def test_search_caps_results(self, user_service, db_session, make_user):
        for i in range(12):
            await make_user(f"Alex {i}")

        results = await user_service.search(db_session, "al")

        assert len(results) == 10

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, user_service, db_session, make_user):
        await make_user("100% Real")
        await make_user("Plain Name")

        results = await user_service.search(db_session, "%")

        assert [u.name for u in results] == ["100% Real"]


class TestGetById:

    @pytest.mark.asyncio
    async def test_get_by_id_projects_out_password(self, user_service, db_session, make_user):
        user = await make_user("Ann Lee", phone="555-0100")

        result = await user_service.get_by_id(db_session, str(user.id))
        dumped = result.model_dump(by_alias=True)

        assert result.id == user.id
        assert dumped["phone"] == "555-0100"
        assert "password" not in dumped
        assert "passwordHash" not in dumped
        assert "password_hash" not in dumped

    @pytest.mark.asyncio
    async def test_get_by_id_requires_id(self, user_service, db_session):
        with pytest.raises(ValidationError, match="User ID parameter is required"):
            await user_service.get_by_id(db_session, None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["not-a-uuid", str(uuid.uuid4())])
    async def test_get_by_id_unknown_is_not_found(self, user_service, db_session, raw):
        with pytest.raises(NotFoundError, match="User not found"):
            await user_service.get_by_id(db_session, raw)
