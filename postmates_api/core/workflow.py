"""
Workflow — The cookie-carried state machine on top of PostmatesClient.

Postmates keeps a shopper's session (location, draft order, pricing context)
in cookies, so a full ordering flow is a chain of stateless calls where each
step must be given the cookies accumulated by all earlier steps:

    UNLOCATED --locate--> LOCATED --search--> SEARCHED --create_cart--> CART_OPEN
                                                                         |   ^
                                                            compute_fee  |   | add_item / remove_item
                                                                         v   |
                                                                      CART_PRICED

    Any state --close--> CLOSED (caller's choice; checkout is not handled here)

CartSession is the explicit, immutable value threaded through that chain.
Every transition returns the step's payload plus a NEW CartSession whose
cookie jar is the old jar merged with the step's response cookies. Jars are
always merged, never replaced: dropping unrelated cookies (CSRF, anti-bot)
breaks later steps.

Rules:
  - locate() always starts a fresh chain. The jar returned by setTargetLocation
    is the baseline for everything after it.
  - create_cart() stores the draft order uuid and cart uuid on the session.
  - add_item/remove_item/compute_fee need that draft order uuid. Asking for
    them without one raises WorkflowStateError before any call is made.
  - compute_fee() never changes the cart's items and may be repeated.

Typical usage:
    workflow = CartWorkflow(PostmatesClient())
    selection, session = workflow.locate("123 Main St")
    results, session = workflow.search(session, "pizza")
    cart, session = workflow.create_cart(session, item, quantity=1)
    fees, session = workflow.compute_fee(session)
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .cookie_codec import merge_jars
from .errors import LocationNotFoundError, WorkflowStateError
from .models import CartItem, CatalogItem, LocationSelection, StepResult
from .postmates_client import PostmatesClient


class Stage(Enum):
    UNLOCATED = "unlocated"
    LOCATED = "located"
    SEARCHED = "searched"
    CART_OPEN = "cart_open"
    CART_PRICED = "cart_priced"
    CLOSED = "closed"


_PRE_CART_STAGES = (Stage.UNLOCATED, Stage.LOCATED, Stage.SEARCHED)


@dataclass(frozen=True)
class CartSession:
    """Everything a caller must carry between two workflow steps.

    Attributes:
        stage: Current workflow state.
        cookies: Accumulated cookie jar (name -> value).
        draft_order_uuid: Set once create_cart has succeeded.
        cart_uuid: Cart uuid returned alongside the draft order.
        store_uuid: Store the draft order belongs to.
        items: Cart lines added through this session, oldest first.
    """
    stage: Stage = Stage.UNLOCATED
    cookies: Dict[str, str] = field(default_factory=dict)
    draft_order_uuid: Optional[str] = None
    cart_uuid: Optional[str] = None
    store_uuid: Optional[str] = None
    items: Tuple[CartItem, ...] = ()

    @classmethod
    def resume(
        cls,
        cookies: Optional[Dict[str, str]] = None,
        draft_order_uuid: Optional[str] = None,
        cart_uuid: Optional[str] = None,
        store_uuid: Optional[str] = None,
    ) -> "CartSession":
        """Rebuild a session from values a caller kept between requests."""
        if draft_order_uuid:
            stage = Stage.CART_OPEN
        elif cookies:
            stage = Stage.LOCATED
        else:
            stage = Stage.UNLOCATED
        return cls(
            stage=stage,
            cookies=dict(cookies or {}),
            draft_order_uuid=draft_order_uuid,
            cart_uuid=cart_uuid,
            store_uuid=store_uuid,
        )

    @property
    def has_cart(self) -> bool:
        return bool(self.draft_order_uuid)

    def advance(self, stage: Stage, result: Optional[StepResult] = None, **changes) -> "CartSession":
        """Return a copy in the given stage with the step's cookies merged in."""
        cookies = merge_jars(self.cookies, result.response_cookies if result else None)
        return replace(self, stage=stage, cookies=cookies, **changes)


def draft_order_ids(data: Any) -> Tuple[Optional[str], Optional[str]]:
    """Pull (draft order uuid, cart uuid) out of a createDraftOrderV2 response.

    Expected shape: {"data": {"draftOrder": {"uuid": ..., "shoppingCart": {"cartUuid": ...}}}}
    Missing pieces come back as None.
    """
    body = data.get("data", {}) if isinstance(data, dict) else {}
    draft_order = body.get("draftOrder") or {}
    cart = draft_order.get("shoppingCart") or {}
    return draft_order.get("uuid"), cart.get("cartUuid")


class CartWorkflow:
    """Runs workflow transitions against a PostmatesClient.

    Holds no session state of its own; a single instance can serve any
    number of concurrent shoppers, each carrying their own CartSession.
    """

    def __init__(self, client: PostmatesClient, debug: bool = False):
        self.client = client
        self.debug = debug

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @staticmethod
    def _require_open(session: CartSession) -> None:
        if session.stage is Stage.CLOSED:
            raise WorkflowStateError("Session is closed")

    @classmethod
    def _require_cart(cls, session: CartSession, action: str) -> None:
        cls._require_open(session)
        if not session.has_cart:
            raise WorkflowStateError(f"Cannot {action}: no draft order yet, call create_cart first")

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    def locate(self, query: str, choice: int = 0) -> Tuple[LocationSelection, CartSession]:
        """Autocomplete -> details -> set location. Starts a new session.

        Args:
            query: Free-text address.
            choice: Index of the autocomplete candidate to use.

        Raises:
            LocationNotFoundError: If the query matches no candidate.
        """
        candidates = self.client.get_location_autocomplete(query).data
        if isinstance(candidates, dict):
            candidates = candidates.get("data") or []
        if not candidates or choice >= len(candidates):
            raise LocationNotFoundError(f"No location found for {query!r}")
        candidate = candidates[choice]

        details = self.client.get_location_details(candidate).data
        if isinstance(details, dict) and isinstance(details.get("data"), dict):
            details = details["data"]

        selection = LocationSelection(
            place_id=candidate.get("id", ""),
            provider=candidate.get("provider", ""),
            details=details,
        )
        if self.debug:
            print(f"  Selected location: {selection.place_id} ({selection.provider})")

        result = self.client.set_location(selection.details)
        return selection, CartSession().advance(Stage.LOCATED, result)

    def delivery_location(self, selection: LocationSelection) -> Any:
        """Deliverable detail for a selection. Needs no session."""
        return self.client.get_delivery_location_details(selection.place_id, selection.provider).data

    # ------------------------------------------------------------------
    # Search and catalog
    # ------------------------------------------------------------------

    def _searched(self, session: CartSession, result: StepResult) -> CartSession:
        stage = Stage.SEARCHED if session.stage in _PRE_CART_STAGES else session.stage
        return session.advance(stage, result)

    def search(self, session: CartSession, query: str) -> Tuple[Any, CartSession]:
        self._require_open(session)
        result = self.client.search(query, session.cookies)
        return result.data, self._searched(session, result)

    def autocomplete_search(self, session: CartSession, query: str) -> Tuple[Any, CartSession]:
        self._require_open(session)
        result = self.client.autocomplete_search(query, session.cookies)
        return result.data, self._searched(session, result)

    def store_menu(self, store_uuid: str) -> Any:
        return self.client.get_store(store_uuid).data

    def item_details(self, item: CatalogItem) -> Any:
        return self.client.get_item_details(
            item.store_uuid, item.section_uuid, item.subsection_uuid, item.item_uuid
        ).data

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def create_cart(
        self,
        session: CartSession,
        item: CatalogItem,
        quantity: int = 1,
        customizations: Any = None,
    ) -> Tuple[Any, CartSession]:
        """Open a draft order with a first item."""
        self._require_open(session)
        result = self.client.create_cart(item, quantity, customizations, session.cookies)
        draft_order_uuid, cart_uuid = draft_order_ids(result.data)
        if self.debug:
            print(f"  Draft order: {draft_order_uuid} (cart {cart_uuid})")
        return result.data, session.advance(
            Stage.CART_OPEN,
            result,
            draft_order_uuid=draft_order_uuid,
            cart_uuid=cart_uuid,
            store_uuid=item.store_uuid,
            items=(result.line_item,),
        )

    def add_item(
        self,
        session: CartSession,
        item: CatalogItem,
        quantity: int = 1,
        customizations: Any = None,
    ) -> Tuple[Any, CartSession]:
        self._require_cart(session, "add an item")
        result = self.client.add_to_cart(
            session.draft_order_uuid,
            session.cart_uuid,
            item,
            quantity,
            customizations,
            session.cookies,
        )
        return result.data, session.advance(
            Stage.CART_OPEN, result, items=session.items + (result.line_item,)
        )

    def remove_item(
        self,
        session: CartSession,
        item_instance_uuid: str,
        store_uuid: Optional[str] = None,
    ) -> Tuple[Any, CartSession]:
        """Remove one cart line by item-instance uuid."""
        self._require_cart(session, "remove an item")
        result = self.client.remove_item(
            session.cart_uuid,
            session.draft_order_uuid,
            item_instance_uuid,
            store_uuid or session.store_uuid,
            session.cookies,
        )
        remaining = tuple(i for i in session.items if i.instance_uuid != item_instance_uuid)
        return result.data, session.advance(Stage.CART_OPEN, result, items=remaining)

    def compute_fee(self, session: CartSession) -> Tuple[Any, CartSession]:
        """Fetch fees for the current draft order. Items are unchanged."""
        self._require_cart(session, "compute fees")
        result = self.client.get_fee(session.draft_order_uuid, session.cookies)
        return result.data, session.advance(Stage.CART_PRICED, result)

    @staticmethod
    def close(session: CartSession) -> CartSession:
        return replace(session, stage=Stage.CLOSED)
