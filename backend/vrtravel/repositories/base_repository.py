from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from vrtravel.errors import StoreError

logger = logging.getLogger(__name__)

# Documents are addressed by their string "id"; Mongo's _id never leaves the store.
PROJECTION: Dict[str, int] = {"_id": 0}


def get_collection(db: AsyncIOMotorDatabase, name: str) -> AsyncIOMotorCollection:
    """Return a Motor collection from the given database.

    This is the only place where repositories should obtain collections.
    """

    return db[name]


@contextmanager
def store_errors(operation: str, **context: Any) -> Iterator[None]:
    """Classify driver failures raised inside an operation as StoreError.

    DuplicateKeyError passes through untouched: the callers that insert
    under a unique index decide what a duplicate means for them.
    """

    try:
        yield
    except DuplicateKeyError:
        raise
    except PyMongoError as exc:
        logger.error("Store call failed during %s %s: %s", operation, context, exc)
        raise StoreError(details={"operation": operation}) from exc
