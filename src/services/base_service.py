"""
Base service layer for database operations over an asyncpg pool
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

import asyncpg

from models.enums import ServiceErrorType

logger = logging.getLogger(__name__)

@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[ServiceErrorType] = None

    @classmethod
    def ok(cls, data: Optional[List[Dict[str, Any]]] = None) -> "ServiceResult":
        data = data or []
        return cls(success=True, data=data, count=len(data))

    @classmethod
    def fail(cls, error_type: ServiceErrorType, error: str) -> "ServiceResult":
        return cls(success=False, error=error, error_type=error_type)

class BaseService:
    """Base service holding the connection pool for one resource"""

    def __init__(self, db_pool: asyncpg.Pool, resource_name: str):
        self.db_pool = db_pool
        self.resource_name = resource_name

    def _failure_from_exception(self, operation: str, error: Exception) -> ServiceResult:
        """
        Translate a database exception into a failed ServiceResult

        Args:
            operation: Name of the operation that failed, used for logging
            error: The exception raised by asyncpg or the pool

        Returns:
            ServiceResult with the matching ServiceErrorType
        """
        if isinstance(error, (asyncpg.ForeignKeyViolationError, asyncpg.CheckViolationError)):
            logger.warning(f"Constraint violation during {operation} on {self.resource_name}: {error}")
            return ServiceResult.fail(ServiceErrorType.INVALID_REFERENCE, "Referenced record not found or value out of range")

        logger.error(f"{operation} failed for {self.resource_name}: {error}", exc_info=True)
        return ServiceResult.fail(ServiceErrorType.DATABASE_ERROR, f"Database operation failed: {error}")

    @staticmethod
    def _affected_rows(status: str) -> int:
        """Parse asyncpg command status, e.g. "DELETE 1" """
        try:
            return int(status.split()[-1]) if status else 0
        except ValueError:
            return 0
