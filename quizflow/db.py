from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from .config import DATABASE_URL, SQL_ECHO


class Base(DeclarativeBase):
    pass


engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables(bind=engine):

    from .models import quiz_model, attempt_model  # noqa: F401  register tables

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session
