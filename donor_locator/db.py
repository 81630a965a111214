import asyncio
import logging
import pathlib

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.engine import make_url
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

ROOT_PATH = pathlib.Path(__file__).resolve().parent.parent


def sync_url(url: str) -> str:
    """Swap the async driver of *url* for the default sync one (for Alembic)."""
    parsed = make_url(url)
    backend = parsed.get_backend_name()
    return parsed.set(drivername=backend).render_as_string(hide_password=False)


def run_migrations(url: str, revision: str = "head") -> bool:
    """Run Alembic migrations against *url*; returns False if alembic.ini is missing."""
    from alembic import command
    from alembic.config import Config as AlembicConfig

    alembic_ini = ROOT_PATH / "alembic.ini"
    if not alembic_ini.exists():
        return False

    cfg = AlembicConfig(str(alembic_ini))
    cfg.set_main_option("script_location", str(ROOT_PATH / "alembic"))
    # Alembic runs synchronously, so it needs the sync driver
    cfg.set_main_option("sqlalchemy.url", sync_url(url))
    command.upgrade(cfg, revision)
    return True


class Database:
    """Storage collaborator: async engine plus session factory.

    Open it once at start-up with :meth:`init`, hand out sessions with
    :meth:`session` and release connections with :meth:`close` at shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_async_engine(url, echo=echo)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    async def init(self, migrate: bool = False) -> None:
        """Create tables that don't exist yet."""
        if migrate:
            loop = asyncio.get_running_loop()
            applied = await loop.run_in_executor(None, run_migrations, self.url)
            if not applied:
                logger.warning("alembic.ini not found, falling back to create_all")

        # Ensure models are imported so SQLModel metadata includes them
        from donor_locator import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database ready at %s", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def close(self) -> None:
        await self.engine.dispose()
