"""Data models for notionrecords."""

from .records import RecordRequest, Record, Space, User, SessionContext
from .operations import Operation, Transaction, build_set_operation, build_create_operation

__all__ = [
    "RecordRequest",
    "Record",
    "Space",
    "User",
    "SessionContext",
    "Operation",
    "Transaction",
    "build_set_operation",
    "build_create_operation"
]
