"""
notionrecords: a client for the private, record-oriented workspace API.

Fetches typed blocks and collections through a cached request gateway and
turns local attribute mutations into path-addressed transactions.
"""

__version__ = "0.1.0"
__author__ = "notionrecords Project"

# Import main components
from .client import NotionClient
from .identifier import Identifier
from .blocks import (
    Block,
    GenericBlock,
    PageBlock,
    TextBlock,
    CollectionBlock,
    CollectionRowBlock,
    CollectionViewPageBlock,
)
from .models import Operation, RecordRequest, SessionContext
from .errors import (
    NotionRecordsError,
    ConfigurationError,
    InvalidIdentifier,
    RemoteRequestFailed,
    UnknownProperty,
    RecordNotFound,
    ClientNotBound,
)

__all__ = [
    "NotionClient",
    "Identifier",
    "Block",
    "GenericBlock",
    "PageBlock",
    "TextBlock",
    "CollectionBlock",
    "CollectionRowBlock",
    "CollectionViewPageBlock",
    "Operation",
    "RecordRequest",
    "SessionContext",
    "NotionRecordsError",
    "ConfigurationError",
    "InvalidIdentifier",
    "RemoteRequestFailed",
    "UnknownProperty",
    "RecordNotFound",
    "ClientNotBound"
]
