"""
Block type registry for notionrecords.

This module maps block type discriminants to block classes. Types without a
registered class resolve to GenericBlock.
"""

from typing import Any, Dict, List, Type

from .base import Block, GenericBlock, PageBlock, TextBlock
from .collection import CollectionRowBlock, CollectionViewBlock, CollectionViewPageBlock


class BlockRegistry:
    """
    Registry of block classes keyed by their type discriminant.
    """

    def __init__(self):
        """Initialize the registry with the built-in block types."""
        self._types: Dict[str, Type[Block]] = {}
        self._register_default_types()

    def _register_default_types(self):
        """Register the block types known to notionrecords."""
        for block_class in (PageBlock, TextBlock, CollectionViewPageBlock, CollectionViewBlock):
            self.register(block_class.block_type, block_class)

    def register(self, block_type: str, block_class: Type[Block]) -> None:
        """
        Register a block class for a type discriminant.

        Args:
            block_type: The value of the block's "type" attribute
            block_class: The class to build for it
        """
        self._types[block_type] = block_class

    def get_block_class(self, attributes: Dict[str, Any]) -> Type[Block]:
        """
        Select the block class for a block's attributes.

        Pages parented by a collection are rows; everything else is looked up
        by type, falling back to GenericBlock.

        Args:
            attributes: The block's raw attributes

        Returns:
            The block class to instantiate
        """
        block_type = attributes.get("type")
        if block_type == PageBlock.block_type and attributes.get("parent_table") == "collection":
            return CollectionRowBlock
        return self._types.get(block_type, GenericBlock)

    def list_types(self) -> List[str]:
        """
        Get a list of all registered type discriminants.

        Returns:
            List of block types
        """
        return list(self._types.keys())


# Global block registry instance
block_registry = BlockRegistry()
