"""
Block entities for notionrecords.

A block is a record of the "block" table: a node of the document tree with a
type discriminant, a parent, free-form properties and an ordered list of
child ids. Blocks are rebuilt from the raw record map on every fetch; each
one owns a private copy of its attribute tree.
"""

import copy
import logging
import weakref
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Type, Union

from ..api.resolver import RecordMap, resolve_one
from ..errors import ClientNotBound, UnknownProperty
from ..identifier import Identifier
from ..models.operations import Operation, build_set_operation
from .path import Path, PathSegment, get_path, set_path, split_path
from .properties import TITLE, TITLE_PROPERTY, Property, flatten_text

if TYPE_CHECKING:
    from ..client import NotionClient


class Block:
    """
    Base block: attribute access by path, title and child resolution.

    The client handle is held weakly and only used for further network
    calls. A block built without a client is read-only: attribute access
    works, remote operations raise ClientNotBound.
    """

    table = "block"

    def __init__(self, block_id: Union[Identifier, str], attributes: Optional[Dict[str, Any]] = None,
                 client: Optional["NotionClient"] = None, record_map: Optional[RecordMap] = None):
        """
        Initialize a block.

        Args:
            block_id: The block identifier
            attributes: The raw attribute tree; copied, never shared
            client: Optional client used for remote operations
            record_map: The record map the block was resolved from, used to
                resolve children and related records without a round trip
        """
        self.id = block_id
        self.attributes: Dict[str, Any] = copy.deepcopy(attributes or {})
        self.record_map: RecordMap = record_map or {}
        self.pending_operations: List[Operation] = []
        self._client_ref = weakref.ref(client) if client is not None else None

    @classmethod
    def from_record_map(cls, block_id: Union[Identifier, str], record_map: RecordMap,
                        client: Optional["NotionClient"] = None) -> "Block":
        """
        Build the typed block for block_id out of a raw record map.

        A missing entry yields a generic block with empty attributes.
        """
        attributes = resolve_one(record_map, "block", block_id)
        return GenericBlock(block_id, attributes, client, record_map).to_typed_block()

    def to_typed_block(self) -> "Block":
        """Return this block as the variant selected by its type discriminant."""
        from .registry import block_registry

        variant = block_registry.get_block_class(self.attributes)
        if type(self) is variant:
            return self
        return variant(self.id, self.attributes, self.client, self.record_map)

    # Client binding

    @property
    def client(self) -> Optional["NotionClient"]:
        return self._client_ref() if self._client_ref is not None else None

    def bind_client(self, client: "NotionClient") -> None:
        self._client_ref = weakref.ref(client)

    @property
    def read_only(self) -> bool:
        return self.client is None

    def require_client(self) -> "NotionClient":
        """
        Return the bound client.

        Raises:
            ClientNotBound: If the block has no client or it was released
        """
        client = self.client
        if client is None:
            raise ClientNotBound(f"Block {self.id} is not bound to a client")
        return client

    # Attribute access

    def get(self, path: Path, default: Any = None) -> Any:
        """Read an attribute by dotted path or segment list; default when missing."""
        return get_path(self.attributes, path, default)

    def set(self, path: Path, value: Any) -> Operation:
        """
        Write an attribute in memory and queue the matching "set" operation.

        Nothing is sent until save() flushes the queue. The in-memory tree
        holds the wire value, so dates are stored as date markup.

        Returns:
            The queued operation
        """
        operation = build_set_operation(self, split_path(path), value)
        set_path(self.attributes, operation.path, operation.args)
        self.pending_operations.append(operation)
        return operation

    @property
    def has_pending_operations(self) -> bool:
        return bool(self.pending_operations)

    @property
    def type(self) -> Optional[str]:
        return self.attributes.get("type")

    @property
    def parent_id(self) -> Optional[str]:
        return self.attributes.get("parent_id")

    @property
    def parent_table(self) -> Optional[str]:
        return self.attributes.get("parent_table")

    @property
    def alive(self) -> bool:
        return bool(self.attributes.get("alive", True))

    @property
    def properties(self) -> Dict[str, Any]:
        return self.attributes.get("properties") or {}

    @property
    def content(self) -> List[str]:
        return list(self.attributes.get("content") or [])

    def get_text_attribute(self, name: str) -> str:
        """
        Read a text attribute as plain text.

        Looks at the top-level attribute first, then at properties[name].
        Rich text markup is flattened; missing attributes give "".
        """
        value = self.attributes.get(name)
        if value in (None, "", []):
            value = self.properties.get(name)
        return flatten_text(value)

    def get_title(self) -> str:
        return self.get_text_attribute("title")

    # Properties

    def get_property(self, name: str) -> Property:
        """
        Return the property view for name.

        Plain blocks have no schema, so only the title is known.

        Raises:
            UnknownProperty: If name is not a known property
        """
        if name == TITLE_PROPERTY:
            return TITLE
        raise UnknownProperty(name, self.id)

    def property_path(self, name: str) -> List[PathSegment]:
        if name == TITLE_PROPERTY:
            return ["properties", TITLE_PROPERTY]
        return self.get_property(name).path

    def encode_property(self, name: str, value: Any) -> Any:
        return self.get_property(name).encode(value)

    def get_property_value(self, name: str) -> Any:
        prop = self.get_property(name)
        return prop.decode(self.get(prop.path))

    # Children

    def get_children(self, record_map: Optional[RecordMap] = None,
                     only: Optional[Type["Block"]] = None) -> List["Block"]:
        """
        Resolve this block's children in their declared order.

        Args:
            record_map: Record map to resolve from (defaults to the one this
                block came from)
            only: Keep only children of this block class

        Returns:
            Typed child blocks; ids missing from the record map are skipped
        """
        return resolve_blocks(self.content, record_map or self.record_map, self.client, only)

    def children(self, only: Optional[Type["Block"]] = None) -> List["Block"]:
        """
        Return the typed children, fetching the page chunk when the record
        map at hand does not hold them.
        """
        record_map = self.record_map
        missing = [child_id for child_id in self.content if not resolve_one(record_map, "block", child_id)]
        if missing and self.client is not None:
            record_map = self.client.load_page_chunk(Identifier.parse(self.id))
        return self.get_children(record_map, only)

    # Remote operations

    def update(self, updates: Optional[Dict[str, Any]] = None, **kwargs: Any) -> List[Operation]:
        """Apply property updates in memory and save them remotely."""
        values = dict(updates or {})
        values.update(kwargs)
        return self.require_client().update_record(self, values)

    def save(self) -> List[Operation]:
        """Send the operations queued by set() in one saveTransactions call."""
        return self.require_client().save_block(self)

    def refresh(self) -> "Block":
        """Fetch this block again through the client."""
        return self.require_client().get_block(str(self.id))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "table": self.table, "attributes": copy.deepcopy(self.attributes)}

    def __repr__(self) -> str:
        # Only local attributes; variant titles may need a round trip
        return f"{type(self).__name__}(id='{self.id}', title={Block.get_title(self)!r})"


class GenericBlock(Block):
    """A block whose type has no specialized behavior."""


class PageBlock(Block):
    """A page block."""

    block_type = "page"


class TextBlock(Block):
    """A paragraph of text."""

    block_type = "text"


def resolve_blocks(ids: Sequence[str], record_map: RecordMap, client: Optional["NotionClient"] = None,
                   only: Optional[Type[Block]] = None) -> List[Block]:
    """
    Wrap each id of a record map into its typed block, keeping the given order.

    Args:
        ids: Block ids in the order to return them
        record_map: The record map holding the blocks
        client: Client to bind the blocks to
        only: Keep only blocks of this class

    Returns:
        The typed blocks
    """
    blocks = []
    for block_id in ids:
        if not resolve_one(record_map, "block", block_id):
            logging.debug(f"Block {block_id} missing from record map, skipping")
            continue

        block = Block.from_record_map(block_id, record_map, client)
        if only is None or isinstance(block, only):
            blocks.append(block)
    return blocks
