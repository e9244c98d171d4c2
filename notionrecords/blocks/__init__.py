"""Typed block entities."""

from .base import Block, GenericBlock, PageBlock, TextBlock, resolve_blocks
from .collection import CollectionBlock, CollectionRowBlock, CollectionViewPageBlock, CollectionViewBlock
from .properties import Property, flatten_text
from .registry import BlockRegistry, block_registry

__all__ = [
    "Block",
    "GenericBlock",
    "PageBlock",
    "TextBlock",
    "CollectionBlock",
    "CollectionRowBlock",
    "CollectionViewPageBlock",
    "CollectionViewBlock",
    "Property",
    "BlockRegistry",
    "block_registry",
    "resolve_blocks",
    "flatten_text"
]
