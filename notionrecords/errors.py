"""
Error types raised by notionrecords.

Local validation errors are raised before anything reaches the network;
remote errors are raised unmodified to the caller and never retried.
"""

from typing import Optional


class NotionRecordsError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(NotionRecordsError, ValueError):
    """The client was constructed with missing or invalid settings."""


class InvalidIdentifier(NotionRecordsError, ValueError):
    """A string could not be parsed as a 128-bit hex identifier."""

    def __init__(self, raw: object):
        self.raw = raw
        super().__init__(f"Invalid identifier: {raw!r}")


class RemoteRequestFailed(NotionRecordsError):
    """A remote call failed at the transport, HTTP or decoding level."""

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        self.operation = operation
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{operation} failed{detail}: {message}")


class UnknownProperty(NotionRecordsError, KeyError):
    """An update referenced a property absent from the bound schema."""

    def __init__(self, name: str, block_id: object = None):
        self.name = name
        self.block_id = block_id
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown property {self.name!r} on block {self.block_id}"


class RecordNotFound(NotionRecordsError):
    """The server returned no attributes for a record that had to exist."""

    def __init__(self, table: str, record_id: object):
        self.table = table
        self.record_id = record_id
        super().__init__(f"No {table} record found for {record_id}")


class ClientNotBound(NotionRecordsError):
    """A block without a client attempted a remote operation."""
