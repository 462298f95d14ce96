import os

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from ticketing_api import db
from ticketing_api.main import app as fastapi_app
from ticketing_api.tables import Base


@pytest.fixture(autouse=True, scope="session")
def anyio_backend():
    return ("asyncio", {"use_uvloop": True})


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    if not os.environ.get("DATABASE_URL"):
        database_path = tmp_path_factory.mktemp("db") / "ticketing.sqlite3"
        os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{database_path}"
    db.reset_engine()
    return fastapi_app


@pytest.fixture(scope="session")
async def db_schema(app):
    engine = db.get_engine()
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    yield


@pytest.fixture(scope="session")
async def async_client(app, db_schema):
    async with LifespanManager(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client
