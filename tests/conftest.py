from typing import Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.core.security import create_access_token, get_password_hash
from leadtracker.core.timestamps import now_ms
from leadtracker.database import get_session
from leadtracker.main import app
from leadtracker.models import ApiKey, Lead, Role, User
from leadtracker.schemas.auth import Identity

PASSWORD = "s3cret-pass"
# bcrypt is slow on purpose; hash once for the whole run
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def client(engine):
    session_maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def make_user(session: AsyncSession, username: str, role: Role, name: Optional[str] = None) -> User:
    user = User(
        username=username,
        password=PASSWORD_HASH,
        name=name or username.title(),
        role=role.value,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def make_lead(session: AsyncSession, owner: Optional[User] = None, **fields) -> Lead:
    data = {
        "name": "John Doe",
        "company": "Acme Inc.",
        "email": "john.doe@example.com",
        "phone": "+1 (555) 123-4567",
        "source": "Website",
        "status": "New",
        "created_at": now_ms(),
    }
    if owner is not None:
        data["created_by"] = owner.name
        data["created_by_id"] = owner.id
    data.update(fields)

    lead = Lead(**data)
    session.add(lead)
    await session.commit()
    await session.refresh(lead)
    return lead


async def make_api_key(session: AsyncSession, owner: User, key: str = "ltk_test-key", is_active: bool = True) -> ApiKey:
    api_key = ApiKey(
        key=key,
        name="Integration",
        user_id=owner.id,
        created_at=now_ms(),
        is_active=is_active,
    )
    session.add(api_key)
    await session.commit()
    await session.refresh(api_key)
    return api_key


def identity_of(user: User) -> Identity:
    return Identity(id=user.id, role=user.role, name=user.name)


def auth_headers(user: User) -> dict:
    token = create_access_token({
        "sub": user.username,
        "user_id": user.id,
        "role": user.role,
        "name": user.name,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin(session):
    return await make_user(session, "admin", Role.ADMINISTRATOR, name="Alex Morgan")


@pytest.fixture
async def manager(session):
    return await make_user(session, "manager", Role.SALES_MANAGER, name="Morgan Lee")


@pytest.fixture
async def rep(session):
    return await make_user(session, "rep", Role.SALES_REPRESENTATIVE, name="Sam Rivera")


@pytest.fixture
async def other_rep(session):
    return await make_user(session, "rep2", Role.SALES_REPRESENTATIVE, name="Kim Park")
