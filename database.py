"""
MongoDB access for RentCare.

Every document carries a string `id` next to Mongo's own `_id`; `_id` never
leaves this module.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Union
from uuid import uuid4

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config import settings
from logger import log_db_operation

log = logging.getLogger(__name__)

_client = None
db = None

_NO_MONGO_ID = {"_id": 0}


class StoreUnavailable(RuntimeError):
    status = 503

    def __init__(self, message="Document store is not configured."):
        super().__init__(message)


def now_iso():
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid4().hex


def connect(url: Optional[str] = None, name: Optional[str] = None):
    """Open the process-wide client. Returns None when not configured."""
    global _client, db
    url = url or settings.database_url
    name = name or settings.database_name
    if not url or not name:
        log.warning("DATABASE_URL or DATABASE_NAME not set; document store disabled.")
        return None
    _client = MongoClient(url)
    db = _client[name]
    log.info(f"Connected to document store database '{name}'")
    return db


def set_database(database):
    """Swap the active database (tests install a mongomock database here)."""
    global db
    db = database


def get_db():
    if db is None:
        raise StoreUnavailable()
    return db


def _as_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_none=True)
    return dict(data)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    doc = _as_dict(data)
    doc.setdefault("id", new_id())
    stamp = now_iso()
    doc["created_at"] = stamp
    doc["updated_at"] = stamp
    try:
        get_db()[collection_name].insert_one(doc)
    except PyMongoError as e:
        log_db_operation("INSERT", collection_name, False, error=str(e))
        raise
    log_db_operation("INSERT", collection_name, True, rows=1, doc_id=doc["id"])
    return doc["id"]


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None) -> list:
    try:
        cursor = get_db()[collection_name].find(filter_dict or {}, _NO_MONGO_ID)
        if limit:
            cursor = cursor.limit(limit)
        items = list(cursor)
    except PyMongoError as e:
        log_db_operation("FIND", collection_name, False, error=str(e))
        raise
    log_db_operation("FIND", collection_name, True, rows=len(items))
    return items


def get_document(collection_name: str, doc_id: str) -> Optional[dict]:
    try:
        doc = get_db()[collection_name].find_one({"id": doc_id}, _NO_MONGO_ID)
    except PyMongoError as e:
        log_db_operation("FIND_ONE", collection_name, False, doc_id=doc_id, error=str(e))
        raise
    log_db_operation("FIND_ONE", collection_name, True, rows=1 if doc else 0, doc_id=doc_id)
    return doc


def replace_document(collection_name: str, doc_id: str, data: Union[BaseModel, dict]) -> Optional[dict]:
    """Whole-document overwrite; the last writer wins."""
    current = get_document(collection_name, doc_id)
    if current is None:
        return None
    doc = _as_dict(data)
    doc["id"] = doc_id
    doc["created_at"] = current.get("created_at")
    doc["updated_at"] = now_iso()
    try:
        get_db()[collection_name].replace_one({"id": doc_id}, doc)
    except PyMongoError as e:
        log_db_operation("REPLACE", collection_name, False, doc_id=doc_id, error=str(e))
        raise
    log_db_operation("REPLACE", collection_name, True, rows=1, doc_id=doc_id)
    doc.pop("_id", None)
    return doc


def update_document(collection_name: str, doc_id: str, changes: dict) -> bool:
    changes = dict(changes, updated_at=now_iso())
    try:
        result = get_db()[collection_name].update_one({"id": doc_id}, {"$set": changes})
    except PyMongoError as e:
        log_db_operation("UPDATE", collection_name, False, doc_id=doc_id, error=str(e))
        raise
    log_db_operation("UPDATE", collection_name, True, rows=result.modified_count, doc_id=doc_id)
    return result.matched_count > 0


def delete_document(collection_name: str, doc_id: str) -> bool:
    try:
        result = get_db()[collection_name].delete_one({"id": doc_id})
    except PyMongoError as e:
        log_db_operation("DELETE", collection_name, False, doc_id=doc_id, error=str(e))
        raise
    log_db_operation("DELETE", collection_name, True, rows=result.deleted_count, doc_id=doc_id)
    return result.deleted_count > 0


connect()
