"""
Database helpers

MongoDB access for the app. The connection is configured from the
environment:
- DATABASE_URL  -> MongoDB connection string
- DATABASE_NAME -> database name

Collections are named after the lowercased schema class (Donor -> "donor").
``db`` stays None when the client cannot be configured; every helper then
raises ``ConnectionFailure`` so callers handle it like any other store error.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel
from pymongo import DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://127.0.0.1:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "bloodDonation")

db: Optional[Database] = None
_indexed_db: Optional[Database] = None

try:
    client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=5000)
    db = client[DATABASE_NAME]
except PyMongoError:
    logger.exception("MongoDB client could not be configured for %s", DATABASE_NAME)


def _database() -> Database:
    if db is None:
        raise ConnectionFailure("Database not available. Check DATABASE_URL and DATABASE_NAME.")
    return db


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping createdAt/updatedAt unless already set."""
    if isinstance(data, BaseModel):
        document = data.model_dump(by_alias=True)
    else:
        document = dict(data)
    now = datetime.now(timezone.utc)
    document.setdefault("createdAt", now)
    document.setdefault("updatedAt", document["createdAt"])
    result = _database()[collection_name].insert_one(document)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[Sequence[Tuple[str, int]]] = None,
) -> List[Dict[str, Any]]:
    cursor = _database()[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(list(sort))
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def delete_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> int:
    result = _database()[collection_name].delete_many(filter_dict or {})
    return result.deleted_count


def ensure_indexes() -> None:
    global _indexed_db
    handle = _database()
    donors = handle["donor"]
    donors.create_index("email", unique=True)
    donors.create_index([("createdAt", DESCENDING)])
    _indexed_db = handle
    logger.info("Indexes ready on %s", donors.full_name)


def indexes_ready() -> bool:
    """True once ensure_indexes has succeeded against the current ``db``."""
    return db is not None and _indexed_db is db
