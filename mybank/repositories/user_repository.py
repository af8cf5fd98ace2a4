"""
mybank/repositories/user_repository.py

Purpose: Data access for user documents

- Fetch every document in the users collection
- Insert one schema-less document as supplied
- One leased session per call
"""

import datetime
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bson import ObjectId, json_util

from mybank.core.logging import LogContext, get_logger
from mybank.db.mongo import MongoSessionManager

logger = get_logger(__name__)

Document = Dict[str, Any]

# Passed through untouched; FastAPI encodes the date and UUID types itself
JSON_NATIVE_TYPES = (str, bool, int, float, datetime.datetime, datetime.date, uuid.UUID)


@dataclass(frozen=True)
class InsertResult:
    acknowledged: bool
    inserted_id: Optional[str]


def to_json_value(value: Any) -> Any:
    """
    Converts BSON-only values into JSON-friendly ones, recursively.

    ObjectIds become hex strings; other BSON types (Decimal128, Binary,
    Timestamp, ...) become their extended JSON form.
    """
    if value is None or isinstance(value, JSON_NATIVE_TYPES):
        return value
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    return json_util.default(value)


def serialize_document(document: Document) -> Document:
    """Renders a stored document as plain JSON, with _id as a string."""
    return to_json_value(document)


class UserRepository:
    """Repository for the users collection."""

    def __init__(self, sessions: MongoSessionManager, collection_name: str = "users"):
        self.sessions = sessions
        self.collection_name = collection_name

    async def list_all(self) -> List[Document]:
        """
        Fetch every user document, in whatever order the store yields them.

        Returns:
            List of documents; empty if the collection is empty.
        """
        async def work(db) -> List[Document]:
            return await db[self.collection_name].find({}).to_list(length=None)

        documents = await self.sessions.with_session(work)
        logger.debug(f"Fetched {len(documents)} users")
        return [serialize_document(document) for document in documents]

    async def insert_one(self, document: Document) -> InsertResult:
        """
        Persist a document without validation.

        Args:
            document: Any mapping; empty documents are accepted

        Returns:
            InsertResult with the acknowledgement and assigned id
        """
        # The driver writes _id into the dict it is given
        to_insert = dict(document)

        async def work(db):
            return await db[self.collection_name].insert_one(to_insert)

        result = await self.sessions.with_session(work)
        inserted_id = str(result.inserted_id) if result.inserted_id is not None else None

        with LogContext(inserted_id=inserted_id):
            logger.info("User inserted")
        return InsertResult(acknowledged=result.acknowledged, inserted_id=inserted_id)
