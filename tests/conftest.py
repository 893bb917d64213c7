import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest
from databases import Database
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from toddler_fun import models
from toddler_fun.config import Settings
from toddler_fun.main import create_app
from toddler_fun.store import ActivityStore


@pytest.fixture()
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'activities.db'}"


@pytest.fixture()
def dev_settings(db_url) -> Settings:
    return Settings(database_url=db_url, environment="development")


@pytest.fixture()
def client(dev_settings):
    with TestClient(create_app(dev_settings)) as c:
        yield c


@pytest.fixture()
def run_store(db_url):
    '''Run ``fn(store)`` against a fresh schema and return its result.'''
    engine = create_engine(db_url)
    models.metadata.create_all(engine)
    engine.dispose()

    def _run(fn):
        async def main():
            database = Database(db_url)
            await database.connect()
            try:
                return await fn(ActivityStore(database))
            finally:
                await database.disconnect()

        return asyncio.run(main())

    return _run


@dataclass
class FakeResponse:
    status_code: int
    payload: Any = None
    text: str = ""

    def json(self):
        if self.payload is None:
            raise ValueError("no json")
        return self.payload


@dataclass
class FakeSession:
    responses: list[FakeResponse] = field(default_factory=list)
    calls: list[tuple[str, str, dict]] = field(default_factory=list)
    error: Optional[Exception] = None

    def request(self, method: str, url: str, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def make_response():
    return FakeResponse
