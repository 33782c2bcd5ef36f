"""
Base service layer for unified document store operations
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from blog_api.database.base import Collection, StoreError
from blog_api.database.connection import get_database

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None


class BaseService:
    """
    Base service wrapping a single collection

    Every operation returns a ServiceResult instead of raising, so routes
    only have to map ``error_type`` onto an HTTP status:

        RESOURCE_NOT_FOUND  no document with the requested id
        INVALID_QUERY       request rejected before touching the store
        DATABASE_ERROR      the store is unavailable or a write failed
        EXECUTION_ERROR     anything else
    """

    def __init__(self, collection_name: str):
        self.collection_name = collection_name
        logger.info(f"BaseService initialized for collection: {collection_name}")

    @property
    def collection(self) -> Collection:
        database = get_database()
        if database is None:
            raise StoreError("Database not initialized")
        return database.collection(self.collection_name)

    def _failure(self, operation: str, error: Exception) -> ServiceResult:
        if isinstance(error, StoreError):
            logger.error(f"{operation} operation failed for {self.collection_name}: {error}")
            return ServiceResult(
                success=False,
                error=f"Database operation failed: {error}",
                error_type="DATABASE_ERROR"
            )
        logger.error(f"{operation} operation failed for {self.collection_name}: {error}", exc_info=True)
        return ServiceResult(
            success=False,
            error=str(error),
            error_type="EXECUTION_ERROR"
        )

    @staticmethod
    def _not_found(record_id: str) -> ServiceResult:
        return ServiceResult(
            success=False,
            error=f"Record not found with ID: {record_id}",
            error_type="RESOURCE_NOT_FOUND"
        )

    async def create(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Insert a new document

        Args:
            data: Field values to insert; the store assigns id and created

        Returns:
            ServiceResult with the stored document
        """
        try:
            document = await self.collection.insert_one(data)
            return ServiceResult(success=True, data=[document], count=1)
        except Exception as e:
            return self._failure("Create", e)

    async def read(self, filters: Optional[Dict[str, Any]] = None) -> ServiceResult:
        """
        Read every document matching equality filters

        Args:
            filters: Mapping of dotted field path to expected value

        Returns:
            ServiceResult with matched documents in natural order
        """
        try:
            documents = await self.collection.find(filters)
            return ServiceResult(success=True, data=documents, count=len(documents))
        except Exception as e:
            return self._failure("Read", e)

    async def get_by_id(self, record_id: str) -> ServiceResult:
        try:
            document = await self.collection.find_by_id(record_id)
        except Exception as e:
            return self._failure("Read", e)

        if document is None:
            return self._not_found(record_id)
        return ServiceResult(success=True, data=[document], count=1)

    async def update(self, record_id: str, data: Dict[str, Any]) -> ServiceResult:
        """
        Update a document by id

        Args:
            record_id: Id of the document to update
            data: Dotted-path field values to set

        Returns:
            ServiceResult with the updated document
        """
        if not data:
            return ServiceResult(
                success=False,
                error="No fields provided for update",
                error_type="INVALID_QUERY"
            )

        try:
            document = await self.collection.update_by_id(record_id, data)
        except Exception as e:
            return self._failure("Update", e)

        if document is None:
            return self._not_found(record_id)
        return ServiceResult(success=True, data=[document], count=1)

    async def delete(self, record_id: str) -> ServiceResult:
        try:
            deleted = await self.collection.delete_by_id(record_id)
        except Exception as e:
            return self._failure("Delete", e)

        if not deleted:
            return self._not_found(record_id)
        return ServiceResult(success=True, count=1)

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> ServiceResult:
        try:
            total = await self.collection.count(filters)
            return ServiceResult(success=True, count=total)
        except Exception as e:
            return self._failure("Count", e)
