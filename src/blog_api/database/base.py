"""
Document store interfaces shared by every backend

A document is a plain dict. The store owns two keys: ``id`` (UUID4 string)
and ``created`` (UTC datetime), both assigned on insert and never rewritten.
Filters and update fields address nested values with dotted paths,
e.g. ``{"author.lastName": "Smith"}``.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

RESERVED_FIELDS = ("id", "created")


class StoreError(Exception):
    """Raised when the backing store is unavailable or a write fails"""


def new_document_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def strip_reserved(document: Dict[str, Any]) -> Dict[str, Any]:
    """Drop store-owned keys so callers can never write them"""
    return {key: value for key, value in document.items() if key not in RESERVED_FIELDS}


def get_path(document: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted path, returning None when any segment is missing"""
    value: Any = document
    for segment in path.split("."):
        if not isinstance(value, dict) or segment not in value:
            return None
        value = value[segment]
    return value


def set_path(document: Dict[str, Any], path: str, value: Any) -> None:
    segments = path.split(".")
    target = document
    for segment in segments[:-1]:
        if not isinstance(target.get(segment), dict):
            target[segment] = {}
        target = target[segment]
    target[segments[-1]] = value


def nest_paths(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Expand ``{"a.b": 1}`` into ``{"a": {"b": 1}}``"""
    nested: Dict[str, Any] = {}
    for path, value in fields.items():
        set_path(nested, path, value)
    return nested


class Collection(ABC):
    """A named set of documents inside a DocumentDatabase"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def insert_many(self, documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """All matching documents in natural (insertion) order"""

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        ...

    @abstractmethod
    async def update_by_id(self, document_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Set the given dotted-path fields on one document

        Returns:
            The updated document, or None when no document has that id
        """

    @abstractmethod
    async def delete_by_id(self, document_id: str) -> bool:
        ...


class DocumentDatabase(ABC):
    """Connection-level handle that hands out collections"""

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Raise StoreError when the store cannot be reached"""

    @abstractmethod
    def collection(self, name: str) -> Collection:
        ...

    @abstractmethod
    async def drop_database(self) -> None:
        """Remove every collection and all of its documents"""
