"""
In-process document store used for local development and tests
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from blog_api.database.base import (
    Collection,
    DocumentDatabase,
    StoreError,
    get_path,
    new_document_id,
    set_path,
    strip_reserved,
    utc_now,
)

logger = logging.getLogger(__name__)


def _matches(document: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    if not filters:
        return True
    return all(get_path(document, path) == value for path, value in filters.items())


class MemoryCollection(Collection):
    """
    Documents kept in an insertion-ordered dict keyed by id.

    Mutations never await, so each one is atomic on the event loop.
    """

    def __init__(self, name: str, database: "MemoryDatabase"):
        super().__init__(name)
        self._database = database
        self._documents: Dict[str, Dict[str, Any]] = {}

    def _check_open(self) -> None:
        if not self._database.is_connected:
            raise StoreError("Memory database is not connected")

    def _store(self, document: Dict[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(strip_reserved(document))
        stored["id"] = new_document_id()
        stored["created"] = utc_now()
        self._documents[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        self._check_open()
        return self._store(document)

    async def insert_many(self, documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self._check_open()
        return [self._store(document) for document in documents]

    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        self._check_open()
        return [copy.deepcopy(doc) for doc in self._documents.values() if _matches(doc, filters)]

    async def find_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        self._check_open()
        document = self._documents.get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._check_open()
        for document in self._documents.values():
            if _matches(document, filters):
                return copy.deepcopy(document)
        return None

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        self._check_open()
        return sum(1 for doc in self._documents.values() if _matches(doc, filters))

    async def update_by_id(self, document_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._check_open()
        document = self._documents.get(document_id)
        if document is None:
            return None
        for path, value in strip_reserved(fields).items():
            set_path(document, path, copy.deepcopy(value))
        return copy.deepcopy(document)

    async def delete_by_id(self, document_id: str) -> bool:
        self._check_open()
        return self._documents.pop(document_id, None) is not None


class MemoryDatabase(DocumentDatabase):
    """Dict-backed database; contents live as long as the instance"""

    def __init__(self):
        self._collections: Dict[str, MemoryCollection] = {}
        self.is_connected = False

    async def connect(self) -> None:
        self.is_connected = True
        logger.info("Memory document store initialized")

    async def close(self) -> None:
        self.is_connected = False
        logger.info("Memory document store closed")

    async def ping(self) -> None:
        if not self.is_connected:
            raise StoreError("Memory database is not connected")

    def collection(self, name: str) -> MemoryCollection:
        if name not in self._collections:
            self._collections[name] = MemoryCollection(name, self)
        return self._collections[name]

    async def drop_database(self) -> None:
        await self.ping()
        for collection in self._collections.values():
            collection._documents.clear()
        logger.info("Memory document store dropped")
