#!/usr/bin/env python3
"""
Postmates Cart Workflow — Entry Point.

Runs one scripted shopping session against the Postmates private web API,
printing each step as it goes. Useful for checking that the cookie chain
still works end to end after Postmates changes something.

The workflow (managed by WorkflowOrchestrator) performs these steps:
  1. Resolve the address and set it as the session location
  2. Search with the location cookies
  3. Fetch the store menu and pick an item
  4. Create a guest draft order with the item
  5. Fetch fees for the draft order
  6. Optionally remove the item again (--remove)

Usage:
    python run.py --address "123 Main St" --query pizza
    python run.py --address "123 Main St" --query pizza --store <uuid> --item "Margherita"
    python run.py --address "123 Main St" --query pizza --remove
    python run.py --debug       # Verbose output, including urllib3 logging
    python run.py --version     # Show version
    python run.py --env /path   # Use alternate .env file
"""

import sys
import argparse
import logging
from pathlib import Path

from postmates_api.core import WorkflowOrchestrator

VERSION_FILE = Path(__file__).resolve().parent / "VERSION"
VERSION = VERSION_FILE.read_text().strip() if VERSION_FILE.exists() else "unknown"


def main():
    """Parse CLI arguments and run the scripted workflow."""
    parser = argparse.ArgumentParser(
        description="Postmates Cart Workflow - Run a location/search/cart/fee session end to end"
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--address", "-a", help="Delivery address (default: DEFAULT_ADDRESS)")
    parser.add_argument("--query", "-q", help="Search query (default: DEFAULT_QUERY)")
    parser.add_argument("--store", help="Store uuid (default: first store in search results)")
    parser.add_argument("--item", help="Menu item title (default: first item on the menu)")
    parser.add_argument("--quantity", type=int, default=1, help="Quantity to order")
    parser.add_argument("--remove", action="store_true", help="Remove the item after pricing")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")

    args = parser.parse_args()

    if args.version:
        print(f"postmates-api {VERSION}")
        sys.exit(0)

    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s'
        )
        logging.getLogger('urllib3').setLevel(logging.DEBUG)

    # Initialize the orchestrator (loads .env and builds internal config)
    orchestrator = WorkflowOrchestrator(env_file=args.env)

    # Apply CLI overrides on top of .env values
    if args.debug:
        orchestrator.debug = True

    print(f"\n{'='*60}")
    print(f"POSTMATES CART WORKFLOW v{VERSION}")
    print("="*60)
    print(f"API: {orchestrator.base_url}")
    orchestrator.print_proxy_status()

    if not orchestrator.validate_config(args.address, args.query):
        sys.exit(1)

    results = orchestrator.run(
        address=args.address,
        query=args.query,
        store_uuid=args.store,
        item_title=args.item,
        quantity=args.quantity,
        remove_after=args.remove,
    )

    orchestrator.print_summary(results)

    if not results.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
