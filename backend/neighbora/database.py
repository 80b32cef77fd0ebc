"""
neighbora/database.py - MongoDB client, indexes and store-error translation.

`connect(settings)` builds the client/database used by `create_app`; routers read it
from `request.app.state.db` through `get_db`.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from neighbora.config import Settings
from neighbora.core.errors import Conflict, Unexpected

logger = logging.getLogger("neighbora.database")

ADMINS = "admins"
CONDOMINIUMS = "condominiums"
PROPERTIES = "properties"
COMMON_EXPENSES = "common_expenses"
PUBLICATIONS = "publications"


def connect(settings: Settings) -> Database:
    client = MongoClient(settings.mongo_uri, serverSelectionTimeoutMS=5000)
    logger.info("MongoDB client created for database %s", settings.mongo_db_name)
    return client[settings.mongo_db_name]


def ensure_indexes(db: Database) -> None:
    db[ADMINS].create_index("firebaseUid", unique=True)
    db[ADMINS].create_index("email", unique=True)
    db[ADMINS].create_index([("firebaseUid", ASCENDING), ("isActive", ASCENDING)])
    db[ADMINS].create_index([("condominiumId", ASCENDING), ("isActive", ASCENDING)])

    db[CONDOMINIUMS].create_index("name")
    db[CONDOMINIUMS].create_index("isActive")
    db[CONDOMINIUMS].create_index("createdBy")

    db[PROPERTIES].create_index([("condominiumId", ASCENDING), ("number", ASCENDING)], unique=True)
    db[PROPERTIES].create_index([("condominiumId", ASCENDING), ("isActive", ASCENDING)])
    db[PROPERTIES].create_index("owner.firebaseUid")
    db[PROPERTIES].create_index("residents.firebaseUid")

    db[COMMON_EXPENSES].create_index([("propertyId", ASCENDING), ("period", ASCENDING)], unique=True)
    db[COMMON_EXPENSES].create_index([("condominiumId", ASCENDING), ("period", ASCENDING)])
    db[COMMON_EXPENSES].create_index([("condominiumId", ASCENDING), ("status", ASCENDING)])
    db[COMMON_EXPENSES].create_index("dueDate")

    db[PUBLICATIONS].create_index([("condominiumId", ASCENDING), ("publishDate", DESCENDING)])
    db[PUBLICATIONS].create_index([("condominiumId", ASCENDING), ("category", ASCENDING)])
    db[PUBLICATIONS].create_index(
        [("condominiumId", ASCENDING), ("isVisible", ASCENDING), ("publishDate", DESCENDING)]
    )


def get_db(request: Request) -> Database:
    return request.app.state.db


@contextmanager
def store_errors(message: str, conflict_message: str = "Resource already exists") -> Iterator[None]:
    """Translate driver errors raised inside a handler into Conflict / Unexpected."""
    try:
        yield
    except DuplicateKeyError:
        raise Conflict(conflict_message)
    except PyMongoError:
        logger.exception(message)
        raise Unexpected(message)
