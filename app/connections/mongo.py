from contextlib import asynccontextmanager
from typing import AsyncIterator

import certifi
from fastapi import FastAPI
from mongoengine import DEFAULT_CONNECTION_NAME, connect, disconnect
from pymongo.database import Database

from app.utils.config import Settings, settings


def init_mongo(config: Settings = settings, **client_options) -> Database:
    """Register the default connection. The client connects on first use."""
    if config.mongo_srv:
        client_options.setdefault("tlsCAFile", certifi.where())
    client = connect(
        db=config.mongo_db,
        host=config.mongo_uri,
        alias=DEFAULT_CONNECTION_NAME,
        tz_aware=True,
        **client_options,
    )
    return client[config.mongo_db]


def close_mongo() -> None:
    disconnect(alias=DEFAULT_CONNECTION_NAME)


@asynccontextmanager
async def mongo_lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_mongo(app.state.services.config)
    app.state.services.accounts.ensure_indexes()
    try:
        yield
    finally:
        close_mongo()
