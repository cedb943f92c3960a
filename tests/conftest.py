import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["NOTIFICATION_FUNCTION_URL"] = ""
os.environ["ENVIRONMENT"] = "test"

import pytest
from httpx import AsyncClient, ASGITransport

from app.database import Base, engine, AsyncSessionLocal
from app.main import app
from app.models.user import User, UserRoleAssignment, RoleName
from app.models.profile import Profile
from app.core.security import get_password_hash, encrypt_national_id
from app.core.notifier import dispatcher

CITIZEN = {
    "password": "secret123",
    "full_name": "Ravi Kumar",
    "phone": "9123456780",
    "national_id_number": "234567890123",
    "address": "House 42, Ward 12, Muzaffarpur",
}


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await dispatcher.drain()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def grant_admin(user_id: str):
    async with AsyncSessionLocal() as session:
        session.add(UserRoleAssignment(user_id=user_id, role=RoleName.ADMIN.value))
        await session.commit()


@pytest.fixture
def register_user(client):
    """Register and sign in through the API, returning id, auth headers and refresh token"""
    async def _register(email: str, **overrides) -> dict:
        payload = {**CITIZEN, "email": email, **overrides}
        response = await client.post("/api/v1/auth/register", json=payload)
        assert response.status_code == 201, response.text
        response = await client.post(
            "/api/v1/auth/login", json={"email": email, "password": payload["password"]}
        )
        assert response.status_code == 200, response.text
        body = response.json()
        return {
            "id": body["user"]["id"],
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
            "refresh_token": body["refresh_token"],
        }
    return _register


@pytest.fixture
async def citizen(register_user):
    return await register_user("ravi.kumar@gmail.com")


@pytest.fixture
async def admin(register_user):
    account = await register_user(
        "nagar.admin@gmail.com",
        full_name="Nagar Nigam Admin",
        phone="9876543210",
        national_id_number="111122223333",
    )
    await grant_admin(account["id"])
    return account


async def make_profile(session, email: str, **fields) -> User:
    """Account and profile written straight to the database; fields may be incomplete"""
    values = {**CITIZEN, **fields}
    user = User(email=email, password_hash=get_password_hash(values["password"]))
    session.add(user)
    await session.flush()
    national_id = values["national_id_number"]
    session.add(Profile(
        id=user.id,
        full_name=values["full_name"],
        phone=values["phone"],
        national_id_encrypted=encrypt_national_id(national_id) if national_id else None,
        address=values["address"],
    ))
    await session.commit()
    return user


@pytest.fixture
def citizen_factory(db_session):
    async def _create(email: str, **fields) -> User:
        return await make_profile(db_session, email, **fields)
    return _create
