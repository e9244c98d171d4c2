"""
Collection-backed blocks.

A collection is a record of the "collection" table holding a property
schema. Rows are pages whose parent is the collection; collection view pages
are the pages that display a collection.
"""

import logging
from typing import Any, Dict, List, Optional

from ..api.resolver import record_ids, resolve_one
from ..errors import UnknownProperty
from ..identifier import Identifier
from .base import Block, PageBlock, resolve_blocks
from .properties import TITLE, TITLE_PROPERTY, Property, schema_properties


class CollectionBlock(Block):
    """
    A collection: a structured table with a property schema.
    """

    table = "collection"

    def get_title(self) -> str:
        return self.get_text_attribute("name") or super().get_title()

    @property
    def schema(self) -> Dict[str, Dict[str, Any]]:
        return self.attributes.get("schema") or {}

    def get_properties(self) -> Dict[str, Property]:
        """Property views for the schema, keyed by property id."""
        return schema_properties(self.schema)

    def find_property(self, name: str) -> Optional[Property]:
        """
        Look a property up by id, then by display name.

        Args:
            name: A property id ("p1") or display name ("Due date")

        Returns:
            The property view, or None when the schema has no such property
        """
        properties = self.get_properties()
        if name in properties:
            return properties[name]
        for prop in properties.values():
            if prop.name == name:
                return prop
        return None

    def list_rows(self, query: str = "") -> List["CollectionRowBlock"]:
        """
        Search the collection's pages and return its rows.

        Args:
            query: Optional full-text filter

        Returns:
            The rows, bound to this collection's schema
        """
        client = self.require_client()
        record_map = client.get_by_parent(Identifier.parse(self.id), query)

        rows = resolve_blocks(record_ids(record_map, "block"), record_map, client, only=CollectionRowBlock)
        for row in rows:
            row.bind_collection(self)

        logging.debug(f"Collection {self.id} returned {len(rows)} rows for query {query!r}")
        return rows

    def get_rows(self, query: str = "") -> List["CollectionRowBlock"]:
        return self.list_rows(query)

    def add_row(self, attributes: Optional[Dict[str, Any]] = None) -> "CollectionRowBlock":
        """
        Create a row in this collection and set its properties.

        Args:
            attributes: Property name -> value updates applied after creation

        Returns:
            The created row
        """
        client = self.require_client()
        row_id = client.create_record("block", self, {"type": PageBlock.block_type})

        row = client.get_block(row_id.to_string())
        if not isinstance(row, CollectionRowBlock):
            row = CollectionRowBlock(row.id, row.attributes, client, row.record_map)
        row.bind_collection(self)

        if attributes:
            client.update_record(row, attributes)
        return row


class CollectionRowBlock(PageBlock):
    """
    A page that is a row of a collection.

    The row resolves its properties through the parent collection's schema,
    taken from the record map it came from, or fetched through the client
    on first use.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._collection: Optional[CollectionBlock] = None

        attributes = resolve_one(self.record_map, "collection", self.parent_id) if self.parent_id else {}
        if attributes:
            self._collection = CollectionBlock(self.parent_id, attributes, self.client, self.record_map)

    def bind_collection(self, collection: CollectionBlock) -> None:
        self._collection = collection

    @property
    def collection(self) -> Optional[CollectionBlock]:
        if self._collection is None and self.client is not None and self.parent_id:
            self._collection = self.client.get_collection(self.parent_id)
        return self._collection

    @property
    def schema(self) -> Dict[str, Dict[str, Any]]:
        collection = self.collection
        return collection.schema if collection else {}

    def get_property(self, name: str) -> Property:
        collection = self.collection
        prop = collection.find_property(name) if collection else None
        if prop is not None:
            return prop
        if name == TITLE_PROPERTY:
            return TITLE

        logging.debug(f"Property {name!r} not in schema of collection {self.parent_id}")
        raise UnknownProperty(name, self.id)

    def get_values(self) -> Dict[str, Any]:
        """Decoded values of every schema property, keyed by display name."""
        collection = self.collection
        if not collection:
            return {}
        return {
            prop.name: prop.decode(self.get(prop.path))
            for prop in collection.get_properties().values()
        }


class CollectionViewPageBlock(PageBlock):
    """
    A page displaying a collection through one or more views.
    """

    block_type = "collection_view_page"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._collection: Optional[CollectionBlock] = None

    @property
    def collection_id(self) -> Optional[str]:
        return self.attributes.get("collection_id")

    @property
    def view_ids(self) -> List[str]:
        return list(self.attributes.get("view_ids") or [])

    @property
    def collection(self) -> Optional[CollectionBlock]:
        """
        The backing collection, from the record map or fetched through the
        client. It is looked up once and kept on the page.
        """
        if self._collection is not None or not self.collection_id:
            return self._collection

        attributes = resolve_one(self.record_map, "collection", self.collection_id)
        if attributes:
            self._collection = CollectionBlock(self.collection_id, attributes, self.client, self.record_map)
        elif self.client is not None:
            self._collection = self.client.get_collection(self.collection_id)
        return self._collection

    def get_title(self) -> str:
        collection = self.collection
        name = collection.get_text_attribute("name") if collection else ""
        return name or super().get_title()

    def list_rows(self, query: str = "") -> List[CollectionRowBlock]:
        collection = self.collection
        return collection.list_rows(query) if collection else []

    def query(self, query: Optional[Dict[str, Any]] = None, view_id: Optional[str] = None,
              loader: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run queryCollection against this page's collection.

        Args:
            query: Filter / sort definition, passed through
            view_id: View to query (defaults to the first view)
            loader: Loader definition, passed through

        Returns:
            The raw queryCollection response
        """
        client = self.require_client()
        view = view_id or (self.view_ids[0] if self.view_ids else None)
        return client.query_collection(self.collection_id, view, query, loader)


class CollectionViewBlock(CollectionViewPageBlock):
    """An inline collection view."""

    block_type = "collection_view"
