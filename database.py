"""
MongoDB helpers for the Foodie API.

Collections:
    users        - accounts with embedded addresses, order history and cart
    restaurants  - restaurants with embedded menu items
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import Settings

USERS = "users"
RESTAURANTS = "restaurants"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def connect(settings: Settings) -> MongoClient:
    # MongoClient connects lazily; nothing blocks here
    return MongoClient(settings.database_url)


def ensure_indexes(db: Database) -> None:
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[USERS].create_index([("phoneNumber", ASCENDING)], unique=True)
    db[RESTAURANTS].create_index([("name", ASCENDING)])


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the database bound at startup."""
    return request.app.state.db


def to_object_id(value: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize(value: Any) -> Any:
    """Make a Mongo document JSON friendly (ObjectIds become strings)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [serialize(v) for v in value]
    return value


def create_document(db: Database, collection: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document stamped with createdAt/updatedAt and return its id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True, exclude_none=True)
    else:
        doc = dict(data)
    doc["createdAt"] = now_utc()
    doc["updatedAt"] = now_utc()
    result = db[collection].insert_one(doc)
    return str(result.inserted_id)


def get_documents(db: Database, collection: str, filter_dict: Optional[dict] = None) -> List[dict]:
    cursor = db[collection].find(filter_dict or {})
    return [serialize(doc) for doc in cursor]


def find_one(db: Database, collection: str, filter_dict: dict,
             projection: Optional[dict] = None) -> Optional[dict]:
    return db[collection].find_one(filter_dict, projection)
