"""
Enum definitions for the Movies API
"""

from enum import Enum

# Failure kinds reported by the service layer
class ServiceErrorType(str, Enum):
    """
    Explicit error kinds produced at the persistence boundary.

    - RESOURCE_NOT_FOUND: lookup by identifier matched nothing
    - CONFLICT: a movie with the same title (case-insensitive) already exists
    - INVALID_REFERENCE: foreign key or check constraint rejected the values
    - DATABASE_ERROR: any other database or connectivity failure
    """
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    DATABASE_ERROR = "DATABASE_ERROR"

# HTTP status for each error kind, anything unmapped is a 500
ERROR_STATUS_CODES = {
    ServiceErrorType.RESOURCE_NOT_FOUND: 404,
    ServiceErrorType.CONFLICT: 409,
    ServiceErrorType.INVALID_REFERENCE: 400,
    ServiceErrorType.DATABASE_ERROR: 500,
}
