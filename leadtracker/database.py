import logging

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker

from .config import settings
from .core.security import get_password_hash
from .models import User, Role

logger = logging.getLogger(__name__)

# Create Async Engine
engine = create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, future=True)

async_session_maker = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def init_db(bind=None):
    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSession(bind, expire_on_commit=False) as session:
        await seed_admin(session)


async def seed_admin(session: AsyncSession) -> None:
    """Create the configured administrator when the user table is empty."""
    result = await session.exec(select(User).limit(1))
    if result.first() is not None:
        return

    admin = User(
        username=settings.SEED_ADMIN_USERNAME,
        password=get_password_hash(settings.SEED_ADMIN_PASSWORD),
        name=settings.SEED_ADMIN_NAME,
        role=Role.ADMINISTRATOR.value,
    )
    session.add(admin)
    await session.commit()
    logger.info(f"Seeded administrator account '{admin.username}'")


async def get_session() -> AsyncSession:
    async with async_session_maker() as session:
        yield session
