# weekly_report/database.py
import logging
from typing import AsyncGenerator, Optional
from fastapi import Depends, Request
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Store handle: one engine plus a session factory.

    Constructed explicitly and passed to whoever needs it. ``open()`` must be
    awaited before use and ``close()`` disposes the connection pool.
    """

    def __init__(self, url: str, echo: bool = False, atomic: bool = True):
        self.url = url
        self.echo = echo
        self._atomic = atomic
        self._transactional = False
        self.engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    @property
    def supports_transactions(self) -> bool:
        """Whether the save workflow may run a week's delete+insert as one transaction.

        True only when the handle was built with ``atomic=True`` (the
        ``ATOMIC_SAVES`` setting) and the store accepted a transaction when
        ``open()`` checked it. False before the handle is opened.
        """
        return self._atomic and self._transactional

    async def check_transactions(self) -> bool:
        """Open and roll back an empty transaction to see whether the store allows one."""
        try:
            async with self.engine.connect() as conn:
                trans = await conn.begin()
                await trans.rollback()
        except (sa_exc.OperationalError, sa_exc.NotSupportedError) as e:
            logger.warning("Store refused a transaction, saves will run row by row: %s", e)
            return False
        return True

    async def open(self, create_tables: bool = True) -> None:
        if self.is_open:
            return
        self.engine = create_async_engine(self.url, echo=self.echo)
        self._sessionmaker = async_sessionmaker(bind=self.engine, expire_on_commit=False, class_=AsyncSession)
        logger.info("Opened database %s", self.engine.url.render_as_string(hide_password=True))
        if self._atomic:
            self._transactional = await self.check_transactions()
        if create_tables:
            await self.create_all()

    async def close(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._sessionmaker = None
        self._transactional = False

    async def create_all(self) -> None:
        # models must be imported so their tables are registered on Base.metadata
        from weekly_report.models.project import Project  # noqa: F401
        from weekly_report.models.report import Report  # noqa: F401

        # ignore duplicate-object errors from concurrent or partial runs
        async with self.engine.begin() as conn:
            try:
                await conn.run_sync(Base.metadata.create_all)
            except (sa_exc.IntegrityError, sa_exc.ProgrammingError, sa_exc.OperationalError) as e:
                msg = str(getattr(e, "orig", e))
                if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                    logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
                else:
                    raise

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open")
        return self._sessionmaker()


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session
