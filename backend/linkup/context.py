"""
LinkUp Backend: Application Context
=====================================

What:  The one object that owns everything a request handler may need:
       settings, the database engine and session factory, and the services.
Why:   Replaces module-level singletons (engine, secret, service instances).
       Each `create_app()` call gets its own context, so tests can run
       several apps against different databases side by side.
How:   Built by `AppContext.from_settings()`, stored on `app.state.context`,
       read back by the dependencies in `linkup.dependencies`.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from linkup.config import Settings
from linkup.database import build_engine, build_session_factory
from linkup.security import PasswordHasher, TokenService
from linkup.services.file_service import FileService
from linkup.services.link_service import LinkService
from linkup.services.user_service import UserService


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    passwords: PasswordHasher
    tokens: TokenService
    file_service: FileService
    user_service: UserService
    link_service: LinkService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        passwords = PasswordHasher(rounds=settings.bcrypt_rounds)
        tokens = TokenService(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_in=settings.jwt_expires_in,
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            passwords=passwords,
            tokens=tokens,
            file_service=FileService(
                upload_dir=settings.upload_dir,
                static_url_path=settings.static_url_path,
                max_file_size=settings.max_file_size,
            ),
            user_service=UserService(passwords, tokens, search_limit=settings.search_limit),
            link_service=LinkService(),
        )

    async def dispose(self) -> None:
        """Close every pooled database connection."""
        await self.engine.dispose()
