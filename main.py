#!/usr/bin/env python3
"""
notionrecords - command line access to a workspace

Main entry point for browsing blocks and collection rows from the shell.
"""

import logging
import sys
import argparse
from typing import List, Optional

from notionrecords import NotionClient, NotionRecordsError, __version__
from notionrecords.blocks import Block
from notionrecords.config import CACHE_DISABLED, ConfigManager, config


def setup_logging(settings: ConfigManager = config):
    """Configure logging for the application."""
    level = getattr(logging, settings.get("logging.level", "INFO").upper())
    format_str = settings.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_file = settings.log_filename
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=format_str, handlers=handlers)


def describe_block(block: Block, indent: int = 0) -> str:
    """
    Format a block as a single line for display.

    Args:
        block: The block to format
        indent: Current indentation level

    Returns:
        Formatted text representation
    """
    prefix = "  " * indent
    title = block.get_title() or "(untitled)"
    return f"{prefix}- [{block.type or 'unknown'}] {title} ({block.id})"


def show_block(client: NotionClient, identifier: str) -> None:
    """Print a block and its direct children."""
    block = client.get_block(identifier)
    print(describe_block(block))

    for child in block.children():
        print(describe_block(child, indent=1))


def show_rows(client: NotionClient, identifier: str, query: str = "") -> None:
    """Print the rows of a collection with their property values."""
    collection = client.get_collection(identifier)
    print(f"# {collection.get_title() or collection.id}")

    rows = collection.list_rows(query)
    for row in rows:
        print(describe_block(row))
        for name, value in row.get_values().items():
            if value not in (None, "", []):
                print(f"    {name}: {value}")

    logging.info(f"Listed {len(rows)} rows of collection {collection.id}")


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="notionrecords - browse workspace blocks and collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py block 0f3c8b5e2d6a4c1f9b7e1a2b3c4d5e6f          # Show a page and its children
  python main.py rows 5a6b7c8d-9e0f-1a2b-3c4d-5e6f7a8b9c0d        # List collection rows
  python main.py --no-cache rows 5a6b7c8d... --query "launch"     # Search rows, bypassing the cache
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to a configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable the response cache for this run"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"notionrecords {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    block_parser = subparsers.add_parser("block", help="Show a block and its children")
    block_parser.add_argument("id", help="Block identifier, with or without dashes")

    rows_parser = subparsers.add_parser("rows", help="List the rows of a collection")
    rows_parser.add_argument("id", help="Collection identifier, with or without dashes")
    rows_parser.add_argument(
        "--query",
        type=str,
        default="",
        help="Full-text filter applied to the rows"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    settings = ConfigManager(args.config) if args.config else config
    setup_logging(settings)

    cache_lifetime = CACHE_DISABLED if args.no_cache else None

    try:
        with NotionClient(settings=settings, cache_lifetime=cache_lifetime) as client:
            if args.command == "block":
                show_block(client, args.id)
            elif args.command == "rows":
                show_rows(client, args.id, args.query)

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130

    except NotionRecordsError as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
