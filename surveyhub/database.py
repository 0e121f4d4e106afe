# surveyhub/database.py
import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from . import config

logger = logging.getLogger(__name__)

DATABASE_URL = config.DATABASE_URL

engine_kwargs = {"echo": config.SQL_ECHO}
if DATABASE_URL.startswith("sqlite"):
    # aiosqlite-Verbindungen nicht zwischen Event-Loops wiederverwenden
    engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, **engine_kwargs)

AsyncSessionFactory = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
    class_=AsyncSession,
)

Base = declarative_base()


async def get_db_session() -> AsyncSession:
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_db_and_tables():
    """
    Creates all tables from the model metadata when AUTO_CREATE_TABLES is set.
    In every other setup the schema is owned by Alembic.
    """
    if not config.AUTO_CREATE_TABLES:
        logger.info("Schema managed by Alembic, skipping create_all.")
        return

    from . import models  # noqa: F401  registriert alle Tabellen an Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created for %s", DATABASE_URL)
