"""Async database engine, session factory, and FastAPI dependencies."""

from collections.abc import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Session

from app.config import settings

engine = create_async_engine(settings.database_url, echo=settings.debug, pool_pre_ping=True)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session, committing on success."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory for handlers that need independent sessions.

    Used where several queries run concurrently; an AsyncSession must not
    be shared between concurrent tasks.
    """
    return async_session_maker


# PostgreSQL setting read by the row-level-security policies
CURRENT_USER_SETTING = "app.current_user_id"


@event.listens_for(Session, "after_begin")
def _apply_current_user(session: Session, transaction, connection) -> None:
    """Expose the session's user to RLS policies for each new transaction."""
    user_id = session.info.get(CURRENT_USER_SETTING)
    if user_id is None or connection.dialect.name != "postgresql":
        return
    # set_config(..., true) is SET LOCAL: it ends with the transaction
    connection.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": CURRENT_USER_SETTING, "value": user_id},
    )


async def set_current_user(db: AsyncSession, user_id: str) -> None:
    """Run this session's transactions as user_id for RLS purposes.

    Later transactions pick the value up in ``after_begin``; the one
    already open (if any) is updated here.
    """
    db.info[CURRENT_USER_SETTING] = user_id
    if db.in_transaction() and db.bind.dialect.name == "postgresql":
        await db.execute(
            text("SELECT set_config(:name, :value, true)"),
            {"name": CURRENT_USER_SETTING, "value": user_id},
        )
