"""
Workflow Orchestrator — Scripted end-to-end run of the Postmates cart flow.

This module drives CartWorkflow through one complete shopping session, the
same sequence a frontend would perform, and reports what happened at each
step:

  Step 1: LOCATION
      Autocomplete the delivery address, fetch its details and set it as the
      session's target location. The returned cookies are the baseline jar.

  Step 2: SEARCH
      Run the search query with the location jar and merge any rotated
      cookies back in.

  Step 3: STORE MENU
      Fetch the store (given explicitly, or the first store in the search
      results) and pick the catalog item to order.

  Step 4: CREATE CART
      Open a guest draft order with the item. The draft order uuid and cart
      uuid are threaded into every later step.

  Step 5: COMPUTE FEE
      Fetch the checkout presentation (fees, taxes, totals) for the draft order.

  Step 6: REMOVE ITEM (optional)
      Remove the line again, leaving an empty draft order behind.

Nothing is written to disk. The draft order stays on the Postmates side
until it expires; it is never cleaned up here.

Configuration:
    All settings are loaded from environment variables (typically via .env file).
    See config/settings.py for keys and defaults.

Typical usage:
    orchestrator = WorkflowOrchestrator(env_file="./.env")
    if orchestrator.validate_config(address, query):
        results = orchestrator.run(address, query)
        orchestrator.print_summary(results)
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..config.settings import PROXY_ENV_VARS, get_bool, get_setting, get_timeout
from .errors import RemoteAPIError, WorkflowError
from .menu import find_catalog_item
from .postmates_client import PostmatesClient
from .workflow import CartWorkflow


def first_store_uuid(search_data: Any) -> Optional[str]:
    """Return the first store uuid found in a getFeedV1 response, if any."""
    body = search_data.get("data", {}) if isinstance(search_data, dict) else {}
    for feed_item in body.get("feedItems") or []:
        store = feed_item.get("store") or {}
        if store.get("storeUuid"):
            return store["storeUuid"]
    return None


class WorkflowOrchestrator:
    """Orchestrates one scripted Postmates cart session.

    Attributes:
        base_url: Postmates API root.
        timeout: Per-call timeout in seconds, or None.
        debug: Whether to enable verbose output.
        default_address: Address used when run() is given none.
        default_query: Search query used when run() is given none.
    """

    def __init__(self, env_file: str = "./.env"):
        """Initialize the orchestrator by loading configuration from environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}")
        else:
            print(f"Warning: {env_file} not found, using defaults/environment")

        self.base_url = get_setting("POSTMATES_BASE_URL")
        self.timeout = get_timeout()
        self.debug = get_bool("DEBUG")
        self.default_address = get_setting("DEFAULT_ADDRESS")
        self.default_query = get_setting("DEFAULT_QUERY")

    def validate_config(self, address: Optional[str] = None, query: Optional[str] = None) -> bool:
        """Check that a base URL, an address and a query are available.

        Returns:
            True if everything needed for run() is present, False otherwise.
            Prints specific error messages for each missing value.
        """
        errors = []
        if not self.base_url:
            errors.append("POSTMATES_BASE_URL is required")
        if not (address or self.default_address):
            errors.append("An address is required (--address or DEFAULT_ADDRESS)")
        if not (query or self.default_query):
            errors.append("A search query is required (--query or DEFAULT_QUERY)")

        if errors:
            print("\nConfiguration Errors:")
            for err in errors:
                print(f"  - {err}")
            return False
        return True

    def print_proxy_status(self):
        """Show any proxy variables requests will pick up."""
        active = [name for name in PROXY_ENV_VARS if os.getenv(name)]
        if active:
            print(f"Proxy: {', '.join(active)}")

    def _banner(self, title: str):
        print(f"\n{'='*60}")
        print(title)
        print("="*60)

    def _make_workflow(self) -> CartWorkflow:
        client = PostmatesClient(self.base_url, timeout=self.timeout, debug=self.debug)
        return CartWorkflow(client, debug=self.debug)

    def run(
        self,
        address: Optional[str] = None,
        query: Optional[str] = None,
        store_uuid: Optional[str] = None,
        item_title: Optional[str] = None,
        quantity: int = 1,
        remove_after: bool = False,
    ) -> Dict[str, Any]:
        """Execute the scripted workflow.

        Returns:
            A dict containing:
                - started_at/completed_at: ISO timestamps
                - config: address, query, store
                - success: True if every step completed
                - summary: place id, store, item, draft order uuid, cookie count
                - fees: checkout presentation payload (if reached)
                - error / status: error message and remote HTTP status (if failed)
        """
        address = address or self.default_address
        query = query or self.default_query
        results: Dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "config": {"address": address, "query": query, "store_uuid": store_uuid},
            "success": False,
        }
        workflow = self._make_workflow()

        try:
            self._banner("STEP 1: LOCATION")
            selection, session = workflow.locate(address)
            print(f"  Location set: {selection.place_id} ({selection.provider})")
            print(f"  Session cookies: {len(session.cookies)}")

            self._banner("STEP 2: SEARCH")
            search_data, session = workflow.search(session, query)
            print(f"  Search for {query!r} completed")

            self._banner("STEP 3: STORE MENU")
            store_uuid = store_uuid or first_store_uuid(search_data)
            if not store_uuid:
                raise WorkflowError(f"No store found in search results for {query!r}")
            menu = workflow.store_menu(store_uuid)
            item = find_catalog_item(menu, item_title)
            if item is None:
                raise WorkflowError(f"Item {item_title!r} not found in store {store_uuid}")
            print(f"  Store: {store_uuid}")
            print(f"  Item: {item.title} ({item.price_cents} cents)")

            self._banner("STEP 4: CREATE CART")
            _, session = workflow.create_cart(session, item, quantity)
            print(f"  Draft order: {session.draft_order_uuid}")
            print(f"  Cart: {session.cart_uuid}")

            self._banner("STEP 5: COMPUTE FEE")
            fees, session = workflow.compute_fee(session)
            results["fees"] = fees
            print("  Checkout presentation fetched")

            if remove_after:
                self._banner("STEP 6: REMOVE ITEM")
                line = session.items[0]
                _, session = workflow.remove_item(session, line.instance_uuid)
                print(f"  Removed line {line.instance_uuid}")

            results["success"] = True
            results["summary"] = {
                "place_id": selection.place_id,
                "store_uuid": store_uuid,
                "item": item.title,
                "draft_order_uuid": session.draft_order_uuid,
                "items_in_cart": len(session.items),
                "cookies": len(session.cookies),
                "stage": session.stage.value,
            }

        except RemoteAPIError as e:
            results["error"] = str(e)
            results["status"] = e.status
            print(f"\n  ERROR: {e}")
            if self.debug:
                print(f"  Response body: {e.body}")
        except Exception as e:
            results["error"] = str(e)
            print(f"\n  ERROR: {e}")
            if self.debug:
                import traceback
                traceback.print_exc()

        results["completed_at"] = datetime.now(timezone.utc).isoformat()
        return results

    def print_summary(self, results: Dict):
        """Print a human-readable execution summary.

        Args:
            results: The dict returned by run().
        """
        self._banner("WORKFLOW COMPLETE")
        print(f"Status: {'SUCCESS' if results.get('success') else 'FAILED'}")

        summary = results.get("summary", {})
        if summary:
            print(f"Store: {summary.get('store_uuid', 'N/A')}")
            print(f"Item: {summary.get('item', 'N/A')}")
            print(f"Draft order: {summary.get('draft_order_uuid', 'N/A')}")
            print(f"Items in cart: {summary.get('items_in_cart', 0)}")
            print(f"Cookies held: {summary.get('cookies', 0)}")

        if results.get("error"):
            print(f"Error: {results['error']}")
