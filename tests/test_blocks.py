"""
Unit tests for typed blocks.
"""

import unittest
from unittest.mock import MagicMock

from notionrecords.blocks import (
    Block,
    BlockRegistry,
    CollectionBlock,
    CollectionRowBlock,
    CollectionViewBlock,
    CollectionViewPageBlock,
    GenericBlock,
    PageBlock,
    TextBlock,
)
from notionrecords.errors import ClientNotBound, UnknownProperty

PAGE_ID = "33333333-3333-4333-8333-333333333333"
CHILD_ID = "44444444-4444-4444-8444-444444444444"
SECOND_CHILD_ID = "48484848-4848-4848-8848-484848484848"
COLLECTION_ID = "55555555-5555-4555-8555-555555555555"
ROW_ID = "66666666-6666-4666-8666-666666666666"


def value(attributes):
    return {"role": "editor", "value": attributes}


class TestTypedBlockDispatch(unittest.TestCase):
    """Test building typed blocks from record maps."""

    def test_page_with_title(self):
        """Test a page record resolves to a PageBlock with its title."""
        record_map = {"block": {"X": {"value": {"type": "page", "title": "Hi"}}}}

        block = Block.from_record_map("X", record_map)

        self.assertIsInstance(block, PageBlock)
        self.assertEqual(block.get_title(), "Hi")

    def test_discriminant_mapping(self):
        """Test each registered type resolves to its class."""
        cases = {
            "page": PageBlock,
            "text": TextBlock,
            "collection_view_page": CollectionViewPageBlock,
            "collection_view": CollectionViewBlock,
            "bulleted_list": GenericBlock,
        }
        for block_type, expected in cases.items():
            with self.subTest(block_type=block_type):
                record_map = {"block": {PAGE_ID: value({"id": PAGE_ID, "type": block_type})}}
                self.assertIs(type(Block.from_record_map(PAGE_ID, record_map)), expected)

    def test_pages_under_collections_are_rows(self):
        """Test a page parented by a collection becomes a CollectionRowBlock."""
        record_map = {"block": {ROW_ID: value({
            "id": ROW_ID, "type": "page", "parent_id": COLLECTION_ID, "parent_table": "collection"})}}

        self.assertIsInstance(Block.from_record_map(ROW_ID, record_map), CollectionRowBlock)

    def test_missing_block_is_generic_and_empty(self):
        """Test a missing id gives an empty generic block."""
        block = Block.from_record_map(PAGE_ID, {})

        self.assertIsInstance(block, GenericBlock)
        self.assertEqual(block.attributes, {})
        self.assertEqual(block.get_title(), "")

    def test_registry_lists_and_registers_types(self):
        """Test a fresh registry knows the built-in types and accepts new ones."""
        registry = BlockRegistry()
        self.assertIn("page", registry.list_types())
        self.assertIs(registry.get_block_class({"type": "quote"}), GenericBlock)

        class QuoteBlock(Block):
            block_type = "quote"

        registry.register("quote", QuoteBlock)
        self.assertIs(registry.get_block_class({"type": "quote"}), QuoteBlock)


class TestBlockAttributes(unittest.TestCase):
    """Test attribute access and in-memory mutation."""

    def setUp(self):
        """Set up a page with rich-text title."""
        self.attributes = {
            "id": PAGE_ID,
            "type": "page",
            "parent_id": "space-1",
            "parent_table": "space",
            "properties": {"title": [["Project ", [["b"]]], ["plan"]]},
            "content": [CHILD_ID],
        }
        self.block = PageBlock(PAGE_ID, self.attributes)

    def test_fields(self):
        """Test the standard fields are exposed."""
        self.assertEqual(self.block.type, "page")
        self.assertEqual(self.block.parent_id, "space-1")
        self.assertEqual(self.block.parent_table, "space")
        self.assertEqual(self.block.content, [CHILD_ID])
        self.assertTrue(self.block.alive)
        self.assertEqual(self.block.get_title(), "Project plan")

    def test_get_missing_path_returns_default(self):
        """Test missing paths are not errors."""
        self.assertIsNone(self.block.get("format.page_icon"))
        self.assertEqual(self.block.get(["properties", "p9"], []), [])

    def test_set_creates_containers(self):
        """Test set() autocreates intermediate containers."""
        self.block.set(["format", "page_icon"], "🚀")
        self.assertEqual(self.block.get("format.page_icon"), "🚀")

    def test_attributes_are_not_shared(self):
        """Test each block owns its attribute tree."""
        self.block.set(["properties", "title"], [["Changed"]])
        other = PageBlock(PAGE_ID, self.attributes)

        self.assertEqual(self.attributes["properties"]["title"], [["Project ", [["b"]]], ["plan"]])
        self.assertEqual(other.get_title(), "Project plan")

    def test_set_queues_operations(self):
        """Test set() records a pending set operation per write."""
        operation = self.block.set("content.0", "replaced")

        self.assertEqual(self.block.content, ["replaced"])
        self.assertEqual(operation.path, ["content", 0])
        self.assertEqual(operation.target_id, PAGE_ID)
        self.assertEqual(self.block.pending_operations, [operation])
        self.assertTrue(self.block.has_pending_operations)

    def test_save_without_client_keeps_queue(self):
        """Test save() on a read-only block raises and keeps pending operations."""
        self.block.set(["properties", "title"], [["Draft"]])

        with self.assertRaises(ClientNotBound):
            self.block.save()
        self.assertEqual(len(self.block.pending_operations), 1)

    def test_repr_uses_local_attributes(self):
        """Test repr shows the block's own title."""
        self.assertEqual(repr(self.block), f"PageBlock(id='{PAGE_ID}', title='Project plan')")

    def test_title_property_is_known_without_schema(self):
        """Test plain blocks resolve the title path and reject other names."""
        self.assertEqual(self.block.property_path("title"), ["properties", "title"])
        self.assertEqual(self.block.encode_property("title", "New"), [["New"]])
        self.assertEqual(self.block.get_property_value("title"), "Project plan")
        with self.assertRaises(UnknownProperty):
            self.block.property_path("Status")


class TestReadOnlyBlocks(unittest.TestCase):
    """Test blocks without a client."""

    def test_unbound_block_reads_but_cannot_update(self):
        """Test a block built without a client is read-only."""
        block = PageBlock(PAGE_ID, {"type": "page", "title": "Hi"})

        self.assertTrue(block.read_only)
        self.assertEqual(block.get_title(), "Hi")
        with self.assertRaises(ClientNotBound):
            block.update(title="Other")
        with self.assertRaises(ClientNotBound):
            block.refresh()

    def test_bound_block_delegates_updates(self):
        """Test update() goes through the bound client."""
        client = MagicMock()
        block = PageBlock(PAGE_ID, {"type": "page"}, client=client)

        block.update({"title": "A"}, extra="B")

        client.update_record.assert_called_once_with(block, {"title": "A", "extra": "B"})

    def test_bound_block_saves_through_client(self):
        """Test save() hands the block to the client's flush."""
        client = MagicMock()
        block = PageBlock(PAGE_ID, {"type": "page"}, client=client)

        block.save()

        client.save_block.assert_called_once_with(block)

    def test_client_reference_is_weak(self):
        """Test the block does not keep its client alive."""
        class Holder:
            pass

        holder = Holder()
        block = PageBlock(PAGE_ID, {"type": "page"}, client=holder)
        self.assertIs(block.client, holder)

        del holder
        self.assertIsNone(block.client)
        self.assertTrue(block.read_only)


class TestChildren(unittest.TestCase):
    """Test child resolution."""

    def setUp(self):
        """Set up a record map with a page and two children."""
        self.record_map = {"block": {
            PAGE_ID: value({"id": PAGE_ID, "type": "page", "content": [SECOND_CHILD_ID, CHILD_ID, "missing"]}),
            CHILD_ID: value({"id": CHILD_ID, "type": "text", "title": "first"}),
            SECOND_CHILD_ID: value({"id": SECOND_CHILD_ID, "type": "page", "title": "second"}),
        }}
        self.page = Block.from_record_map(PAGE_ID, self.record_map)

    def test_children_keep_declared_order(self):
        """Test children follow the parent's content order and skip missing ids."""
        children = self.page.get_children()

        self.assertEqual([child.get_title() for child in children], ["second", "first"])
        self.assertIsInstance(children[0], PageBlock)
        self.assertIsInstance(children[1], TextBlock)

    def test_children_filter(self):
        """Test children can be filtered by class."""
        children = self.page.get_children(only=TextBlock)
        self.assertEqual([child.id for child in children], [CHILD_ID])

    def test_children_without_client_use_record_map(self):
        """Test children() works offline when the record map is complete enough."""
        self.assertEqual(len(self.page.children()), 2)


class TestCollectionBlocks(unittest.TestCase):
    """Test collection, row and collection view page behaviour."""

    def setUp(self):
        """Set up a record map with a collection and one row."""
        self.schema = {
            "title": {"name": "Name", "type": "title"},
            "p1": {"name": "Due", "type": "date"},
        }
        self.record_map = {
            "block": {
                ROW_ID: value({"id": ROW_ID, "type": "page", "parent_id": COLLECTION_ID,
                               "parent_table": "collection",
                               "properties": {"title": [["Ship it"]],
                                              "p1": [["‣", [["d", {"type": "date", "start_date": "2024-05-01"}]]]]}}),
                PAGE_ID: value({"id": PAGE_ID, "type": "collection_view_page",
                                "collection_id": COLLECTION_ID, "view_ids": ["v1"],
                                "properties": {"title": [["Board"]]}}),
            },
            "collection": {
                COLLECTION_ID: value({"id": COLLECTION_ID, "name": [["Tasks"]], "schema": self.schema}),
            },
        }

    def test_collection_title_prefers_name(self):
        """Test a collection's title is its name, falling back to the base title."""
        self.assertEqual(CollectionBlock(COLLECTION_ID, {"name": [["Tasks"]]}).get_title(), "Tasks")
        self.assertEqual(CollectionBlock(COLLECTION_ID, {"title": "Fallback"}).get_title(), "Fallback")
        self.assertEqual(CollectionBlock(COLLECTION_ID, {}).table, "collection")

    def test_row_binds_schema_from_record_map(self):
        """Test a row finds its collection schema in the record map."""
        row = Block.from_record_map(ROW_ID, self.record_map)

        self.assertEqual(row.schema, self.schema)
        self.assertEqual(row.property_path("Due"), ["properties", "p1"])
        self.assertEqual(row.property_path("p1"), ["properties", "p1"])
        self.assertEqual(row.get_values()["Name"], "Ship it")
        self.assertEqual(str(row.get_values()["Due"]), "2024-05-01")

    def test_row_rejects_unknown_property(self):
        """Test names absent from the schema raise UnknownProperty."""
        row = Block.from_record_map(ROW_ID, self.record_map)

        with self.assertRaises(UnknownProperty) as context:
            row.get_property("Priority")
        self.assertEqual(context.exception.name, "Priority")

    def test_row_without_schema_knows_only_title(self):
        """Test an unbound row without collection data only resolves the title."""
        row = CollectionRowBlock(ROW_ID, {"type": "page", "parent_id": COLLECTION_ID,
                                          "parent_table": "collection"})

        self.assertEqual(row.schema, {})
        self.assertEqual(row.property_path("title"), ["properties", "title"])
        with self.assertRaises(UnknownProperty):
            row.property_path("Due")

    def test_collection_view_page_uses_collection_name(self):
        """Test the collection view page title comes from its collection."""
        page = Block.from_record_map(PAGE_ID, self.record_map)

        self.assertIsInstance(page, CollectionViewPageBlock)
        self.assertEqual(page.collection.get_title(), "Tasks")
        self.assertEqual(page.get_title(), "Tasks")
        self.assertEqual(page.view_ids, ["v1"])

    def test_collection_view_page_without_collection_falls_back(self):
        """Test the base title is used when the collection is unavailable."""
        page = CollectionViewPageBlock(PAGE_ID, {"type": "collection_view_page", "title": "Board"})

        self.assertIsNone(page.collection)
        self.assertEqual(page.get_title(), "Board")
        self.assertEqual(page.list_rows(), [])

    def test_collection_view_page_fetches_collection_once(self):
        """Test the fetched collection is kept on the page and repr stays local."""
        client = MagicMock()
        client.get_collection.return_value = CollectionBlock(COLLECTION_ID, {"name": [["Tasks"]]})
        page = CollectionViewPageBlock(PAGE_ID, {"type": "collection_view_page", "title": "Board",
                                                 "collection_id": COLLECTION_ID}, client=client)

        self.assertIn("Board", repr(page))
        client.get_collection.assert_not_called()

        self.assertEqual(page.get_title(), "Tasks")
        self.assertEqual(page.get_title(), "Tasks")
        self.assertIs(page.collection, page.collection)
        client.get_collection.assert_called_once_with(COLLECTION_ID)

    def test_collection_operations_need_a_client(self):
        """Test remote collection operations raise without a client."""
        collection = CollectionBlock(COLLECTION_ID, {"schema": self.schema})

        with self.assertRaises(ClientNotBound):
            collection.list_rows()
        with self.assertRaises(ClientNotBound):
            collection.add_row({"Name": "x"})


if __name__ == '__main__':
    unittest.main()
