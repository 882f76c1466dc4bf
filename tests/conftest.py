"""Shared fixtures: an in-memory document store, a fake asset store and wired services."""

from pathlib import Path

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.connections.mongo import close_mongo, init_mongo
from app.factory import create_app
from app.services.container import ServiceContainer, build_services
from app.utils.config import Settings

from tests.helpers import PASSWORD, FakeAssetStore, write_image


@pytest.fixture()
def config(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        bcrypt_rounds=4,
        access_token_secret="test-access-secret",
        refresh_token_secret="test-refresh-secret",
        mongo_db="vidtube_test",
        mongo_srv=False,
        upload_dir=str(tmp_path / "staging"),
    )


@pytest.fixture()
def database(config):
    """The default document connection, backed by a fresh mongomock server per test."""
    db = init_mongo(config, mongo_client_class=mongomock.MongoClient)
    yield db
    close_mongo()


@pytest.fixture()
def asset_store() -> FakeAssetStore:
    return FakeAssetStore()


@pytest.fixture()
def services(config, database, asset_store) -> ServiceContainer:
    container = build_services(config, asset_store)
    container.accounts.ensure_indexes()
    return container


@pytest.fixture()
def incoming(tmp_path) -> Path:
    """Directory standing in for where uploads land before the service sees them."""
    return tmp_path / "incoming"


@pytest.fixture()
def jane(services, incoming) -> dict:
    """A registered account: Jane Doe / janedoe / jane@x.com."""
    return services.sessions.register(
        "Jane Doe", "jane@x.com", "janedoe", PASSWORD, write_image(incoming, "jane.png"),
    )


@pytest.fixture()
def client(config, database, asset_store) -> TestClient:
    app = create_app(config, asset_store=asset_store)
    app.state.services.accounts.ensure_indexes()
    return TestClient(app)
