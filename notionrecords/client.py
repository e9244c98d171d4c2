"""
Workspace client for notionrecords.

This module wires the request gateway, the response cache and the record map
resolver together, and turns local block mutations into transactions.
"""

import hashlib
import httpx
import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Union

from .api import RequestGateway, first_record, resolve_many, resolve_one
from .api.resolver import RecordMap
from .blocks import Block, CollectionBlock
from .cache import create_cache
from .config import ConfigManager, config
from .errors import ConfigurationError, RecordNotFound, UnknownProperty
from .identifier import Identifier
from .models import RecordRequest, SessionContext, Space, User, Operation
from .models.operations import (
    build_create_operation,
    build_save_request,
    build_submit_request,
)

USER_CONTENT_CACHE_KEY = "user-informations"


def _digest(value: Any) -> str:
    return hashlib.sha1(json.dumps(value).encode('utf-8')).hexdigest()


class NotionClient:
    """
    Client for the private workspace API.

    The current space and user are loaded once at construction and used to
    stamp transactions and new records.
    """

    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None,
                 cache_lifetime: Optional[int] = None, cache_database: Optional[str] = None,
                 transport: Optional[httpx.BaseTransport] = None,
                 settings: Optional[ConfigManager] = None):
        """
        Initialize the client and load the session context.

        Args:
            token: Session token (defaults to config value)
            base_url: API base URL (defaults to config value)
            cache_lifetime: Response TTL in seconds, 0 = forever, -1 = disabled
                (defaults to config value)
            cache_database: Cache database path (defaults to config value)
            transport: Optional httpx transport (used by tests)
            settings: Configuration to read defaults from (defaults to the global config)

        Raises:
            ConfigurationError: If no token is configured
            RemoteRequestFailed: If the session context cannot be loaded
        """
        settings = settings or config

        self.token = token or settings.token
        if not self.token:
            raise ConfigurationError("No API token configured; set api.token or NOTION_TOKEN")

        lifetime = settings.cache_lifetime if cache_lifetime is None else cache_lifetime
        self.cache = create_cache(cache_database or settings.cache_database, lifetime)
        self.gateway = RequestGateway(
            base_url or settings.api_base_url,
            self.token,
            self.cache,
            timeout=settings.api_timeout,
            transport=transport,
        )
        self.page_chunk_limit = settings.page_chunk_limit
        self.search_limit = settings.search_limit

        try:
            self.session = self.load_user_content()
        except Exception:
            self.close()
            raise

        logging.info(f"Connected to space {self.session.space.id} as user {self.session.user.id}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Release the HTTP client and the cache connection."""
        self.gateway.close()
        self.cache.disconnect()

    @property
    def current_space(self) -> Space:
        return self.session.space

    @property
    def current_user(self) -> User:
        return self.session.user

    # Reads

    def get_block(self, identifier: Union[Identifier, str]) -> Block:
        """
        Fetch a block and return it as its typed variant.

        Args:
            identifier: The block id, with or without dashes

        Returns:
            The typed block, bound to this client

        Raises:
            InvalidIdentifier: If identifier is malformed
            RecordNotFound: If the block is absent from the response
        """
        block_id = Identifier.parse(identifier)
        record_map = self.load_page_chunk(block_id)

        if not resolve_one(record_map, "block", block_id):
            raise RecordNotFound("block", block_id)

        return Block.from_record_map(block_id.to_string(), record_map, self)

    def get_collection(self, identifier: Union[Identifier, str]) -> CollectionBlock:
        """
        Fetch a collection record.

        Raises:
            InvalidIdentifier: If identifier is malformed
            RecordNotFound: If the collection is absent from the response
        """
        request = RecordRequest.for_record("collection", identifier)
        attributes = self.get_record_values(request).get("value") or {}

        if not attributes:
            raise RecordNotFound("collection", request.id)

        return CollectionBlock(request.id, attributes, self)

    def load_page_chunk(self, block_id: Identifier) -> RecordMap:
        """Load the first chunk of a page and return its record map."""
        response = self.gateway.execute(
            f"block-{block_id.to_string()}",
            "loadPageChunk",
            {
                "pageId": block_id.to_string(),
                "limit": self.page_chunk_limit,
                "cursor": {"stack": []},
                "chunkNumber": 0,
                "verticalColumns": False,
            },
        )
        return response.get("recordMap") or {}

    def get_record_values(self, request: RecordRequest) -> Dict[str, Any]:
        """Fetch a single record; an empty dict when the server has none."""
        return self.get_records_values([request]).get(request.id) or {}

    def get_records_values(self, requests: Sequence[RecordRequest]) -> Dict[str, Dict[str, Any]]:
        """
        Fetch several records in one call.

        The response is cached under a digest of the request list.

        Args:
            requests: The {table, id} requests, in order

        Returns:
            Mapping of id -> result entry ({"value": attributes, ...})
        """
        payload = [request.model_dump() for request in requests]
        response = self.gateway.execute(_digest(payload), "getRecordValues", {"requests": payload})
        return resolve_many(response, requests)

    def get_by_parent(self, parent_id: Identifier, query: str = "") -> RecordMap:
        """Search the pages below a parent; returns the response's record map."""
        cache_key = f"by-parent-{parent_id.to_string()}"
        if query:
            cache_key += f"-{_digest(query)}"

        response = self.gateway.execute(
            cache_key,
            "searchPagesWithParent",
            {
                "query": query,
                "parentId": parent_id.to_string(),
                "limit": self.search_limit,
                "spaceId": self.current_space.id,
            },
        )
        return response.get("recordMap") or {}

    def query_collection(self, collection_id: Union[Identifier, str], view_id: Optional[str],
                         query: Optional[Dict[str, Any]] = None,
                         loader: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a collection query through one of its views.

        Args:
            collection_id: The collection to query
            view_id: The collection view whose settings apply
            query: Filter / sort definition, passed through
            loader: Loader definition (defaults to a table loader)

        Returns:
            The raw response
        """
        body = {
            "collectionId": Identifier.parse(collection_id).to_string(),
            "collectionViewId": Identifier.parse(view_id).to_string() if view_id else None,
            "query": query or {},
            "loader": loader or {
                "type": "table",
                "limit": self.search_limit,
                "searchQuery": "",
                "loadContentCover": False,
            },
        }
        return self.gateway.execute(f"query-{_digest(body)}", "queryCollection", body)

    def load_user_content(self) -> SessionContext:
        """
        Load the current space and user.

        Raises:
            RecordNotFound: If the response holds no space or no user
        """
        response = self.gateway.execute(USER_CONTENT_CACHE_KEY, "loadUserContent")
        record_map = response.get("recordMap") or {}

        space = first_record(record_map, "space")
        if not space:
            raise RecordNotFound("space", None)
        user = first_record(record_map, "notion_user")
        if not user:
            raise RecordNotFound("notion_user", None)

        return SessionContext(space=Space.from_attributes(space), user=User.from_attributes(user))

    # Writes

    def create_record(self, table: str, parent: Block, attributes: Dict[str, Any]) -> Identifier:
        """
        Create a record below parent with a single submitted operation.

        Args:
            table: Table of the new record, e.g. "block"
            parent: The parent block or collection
            attributes: Initial attributes of the record

        Returns:
            The new record's identifier
        """
        record_id = Identifier.generate()
        operation = build_create_operation(
            table,
            record_id,
            parent,
            attributes,
            user_id=self.current_user.id,
            created_time=int(time.time() * 1000),
        )

        self.submit_transaction([operation])
        logging.info(f"Created {table} record {record_id} under {parent.table} {parent.id}")
        return record_id

    def update_record(self, block: Block, updates: Dict[str, Any]) -> List[Operation]:
        """
        Apply property updates to a block and save them in one transaction.

        Every name is resolved against the block's schema before the block is
        touched. A row whose collection is not in its record map reads the
        schema first (one cached getRecordValues call). An unknown property
        therefore aborts with the block unchanged and nothing saved.

        The resolved updates go through Block.set() and are flushed with
        save_block(), together with anything already queued on the block.

        Args:
            block: The block to update
            updates: Property name (or id) -> new value

        Returns:
            The operations that were saved

        Raises:
            UnknownProperty: If a name is neither "title" nor in the schema
            RemoteRequestFailed: If the save fails
        """
        resolved = []
        for name, value in updates.items():
            try:
                resolved.append((block.property_path(name), block.encode_property(name, value)))
            except UnknownProperty:
                logging.error(f"Cannot update unknown property {name!r} on {block.id}")
                raise

        for path, encoded in resolved:
            block.set(path, encoded)
        return self.save_block(block)

    def save_block(self, block: Block) -> List[Operation]:
        """
        Flush the operations queued on a block through saveTransactions.

        The queue is cleared once the save succeeds; on failure it is kept so
        the save can be retried.

        Returns:
            The operations that were saved, empty when nothing was queued
        """
        operations = list(block.pending_operations)
        if not operations:
            return []

        self.save_transactions(operations)
        del block.pending_operations[:len(operations)]
        return operations

    def submit_transaction(self, operations: Sequence[Operation]) -> Dict[str, Any]:
        """Apply operations immediately through submitTransaction."""
        logging.info(f"Submitting transaction with {len(operations)} operation(s)")
        return self.gateway.post("submitTransaction", build_submit_request(operations))

    def save_transactions(self, operations: Sequence[Operation]) -> Dict[str, Any]:
        """Save operations as one transaction in the current space."""
        logging.info(f"Saving transaction with {len(operations)} operation(s)")
        return self.gateway.post("saveTransactions", build_save_request(operations, self.current_space.id))
