import httpx
import pytest
from httpx import AsyncClient

from tradelog.config.settings import Settings
from tradelog.main import create_app

TEST_SECRET = "test-secret-do-not-use"


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "BCRYPT_ROUNDS": 4,
        "JWT_SECRET": TEST_SECRET,
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(base_url="http://test", transport=httpx.ASGITransport(app=app)) as ac:
        yield ac


@pytest.fixture
async def db_session(app):
    async with app.state.database.session() as session:
        yield session


async def signup_user(client, email="trader@example.com", password="secret123", name=None):
    body = {"email": email, "password": password}
    if name is not None:
        body["name"] = name
    return await client.post("/api/auth/signup", json=body)


def bearer(response) -> dict:
    """Authorization header carrying the session cookie set on a response."""
    return {"Authorization": f"Bearer {response.cookies['auth_token']}"}
