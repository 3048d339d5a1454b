"""
Postmates API Client — One HTTP call per workflow step.

This module is responsible for all HTTP communication with the Postmates
private web API. Every endpoint is a JSON POST under /api/, e.g.

    POST https://postmates.com/api/getFeedV1
    cookie: uev2.loc=...; jwt-session=...;
    Body: {"userQuery": "pizza", ...}

Postmates has no session-token endpoint. State (delivery location, draft
order, pricing context) travels in cookies: each response may carry
Set-Cookie lines, and later calls must send them back. This client does not
hold that state itself. Callers pass a cookie jar in and receive the
response cookies back in a StepResult; merging them is the caller's job
(see workflow.py).

Every call:
  - 2xx      -> StepResult(data=<json>, response_cookies=<jar>, raw_cookies=<lines>)
  - non-2xx  -> RemoteAPIError (status, reason, body)
  - network  -> requests exceptions propagate untouched
No retries and no caching.

Whether a step forwards its response cookies is configured per step in STEPS.
removeItemsFromDraftOrderV2 currently does not.
"""

from dataclasses import dataclass
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, List, Optional

import requests

from ..config.headers import headers_for
from ..config.settings import DEFAULT_SETTINGS
from .cookie_codec import encode_location_for_cookie, jar_to_header_string, lines_to_jar
from .errors import classify_response
from .models import CartItem, CatalogItem, StepResult


@dataclass(frozen=True)
class Step:
    """Static description of one API step."""
    endpoint: str
    header_profile: str
    forward_cookies: bool = True


STEPS = {
    "location_autocomplete": Step("getLocationAutocompleteV1", "desktop_linux"),
    "location_details": Step("getLocationDetailsV1", "desktop_linux"),
    "delivery_location": Step("getDeliveryLocationV1", "desktop_linux"),
    "set_location": Step("setTargetLocationV1", "set_location"),
    "search": Step("getFeedV1", "desktop_linux"),
    "autocomplete_search": Step("getSearchSuggestionsV1", "mobile_android"),
    "store": Step("getStoreV1", "minimal"),
    "item_details": Step("getMenuItemV1", "desktop_windows"),
    "create_cart": Step("createDraftOrderV2", "desktop_windows"),
    "add_to_cart": Step("addItemsToDraftOrderV2", "desktop_windows_basic"),
    "fee": Step("getCheckoutPresentationV1", "desktop_windows"),
    "remove_item": Step("removeItemsFromDraftOrderV2", "desktop_windows", forward_cookies=False),
}

LOCATION_COOKIE = "uev2.loc"

FEE_PAYLOAD_TYPES = [
    "fulfillmentPromotionInfo",
    "deliveryOptInInfo",
    "eta",
    "fareBreakdown",
    "upfrontTipping",
    "basketSizeTracker",
    "total",
    "cartItems",
    "subtotal",
    "promotion",
    "disclaimers",
    "orderConfirmations",
    "passBanner",
    "taxProfiles",
    "addressNudge",
    "basketSize",
    "complements",
    "messageBanner",
    "merchantMembership",
    "restrictedItems",
    "timeWindowPicker",
]


def stateless_session() -> requests.Session:
    """A requests.Session whose cookie jar accepts nothing from responses."""
    session = requests.Session()
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return session


def set_cookie_lines(response) -> List[str]:
    """Return every Set-Cookie header of a response as a separate line.

    requests folds repeated headers into one comma-joined value, which cannot
    be split safely (Expires dates contain commas), so the lines are read
    from the underlying urllib3 headers instead.
    """
    raw_headers = getattr(getattr(response, "raw", None), "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))
    value = response.headers.get("Set-Cookie")
    return [value] if value else []


class PostmatesClient:
    """Client for the Postmates private web API.

    Manages a requests.Session for connection reuse. The session built here
    refuses to store cookies, so every call sends exactly the jar it was given
    and nothing one caller received can reach another caller's request.
    A session passed in by the caller is used as is.

    Attributes:
        base_url: API root (trailing slash stripped).
        timeout: Seconds per call, or None to wait indefinitely.
        debug: If True, print each request and its outcome.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_SETTINGS["POSTMATES_BASE_URL"],
        timeout: Optional[float] = None,
        debug: bool = False,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.debug = debug
        self._session = session if session is not None else stateless_session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _call(
        self,
        step_name: str,
        payload: Any,
        cookies: Optional[Dict[str, str]] = None,
        cookie_header: Optional[str] = None,
    ) -> StepResult:
        """POST one step and normalize the response.

        Args:
            step_name: Key into STEPS.
            payload: JSON-serializable request body.
            cookies: Cookie jar to send, if the step carries session state.
            cookie_header: A pre-rendered cookie header (used by set_location).

        Raises:
            RemoteAPIError: On a non-2xx status.
            MalformedCookieError: If a Set-Cookie line cannot be parsed.
        """
        step = STEPS[step_name]
        url = f"{self.base_url}/{step.endpoint}"
        headers = headers_for(step.header_profile)
        if cookie_header is None and cookies is not None:
            cookie_header = jar_to_header_string(cookies)
        if cookie_header:
            headers["cookie"] = cookie_header

        if self.debug:
            print(f"  POST {step.endpoint} ({len(cookies or {})} cookies)")

        response = self._session.post(url, json=payload, headers=headers, timeout=self.timeout)
        classify_response(response)

        raw_cookies = set_cookie_lines(response)
        response_cookies = lines_to_jar(raw_cookies) if step.forward_cookies else None

        if self.debug:
            print(f"  {step.endpoint} -> {response.status_code}, {len(raw_cookies)} Set-Cookie")

        return StepResult(
            data=response.json(),
            response_cookies=response_cookies,
            raw_cookies=raw_cookies,
        )

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    def get_location_autocomplete(self, query: str) -> StepResult:
        """Autocomplete a free-text address.

        POST /api/getLocationAutocompleteV1
        Returns candidates like {"id": "...", "provider": "google_places", "addressLine1": "..."}
        """
        return self._call("location_autocomplete", {"query": query})

    def get_location_details(self, location_data: Dict[str, Any]) -> StepResult:
        """Expand an autocomplete candidate into full location details.

        POST /api/getLocationDetailsV1 with the candidate object as the body.
        """
        return self._call("location_details", location_data)

    def get_delivery_location_details(self, place_id: str, provider: str) -> StepResult:
        """Get deliverable detail for a place.

        POST /api/getDeliveryLocationV1
        """
        return self._call(
            "delivery_location",
            {"placeId": place_id, "provider": provider, "source": "manual_auto_complete"},
        )

    def set_location(self, location_details: Dict[str, Any]) -> StepResult:
        """Make a location the target of a new cookie session.

        The details are sent only as the encoded uev2.loc cookie; the body is
        empty. The returned jar is the baseline for every later step.
        """
        cookie_header = f"{LOCATION_COOKIE}={encode_location_for_cookie(location_details)}"
        return self._call("set_location", {}, cookie_header=cookie_header)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str, cookies: Dict[str, str]) -> StepResult:
        """Search stores and dishes near the session's location.

        POST /api/getFeedV1
        """
        payload = {
            "userQuery": query,
            "date": "",
            "startTime": 0,
            "endTime": 0,
            "carouselId": "",
            "sortAndFilters": [],
            "marketingFeedType": "",
            "billboardUuid": "",
            "feedProvider": "",
            "promotionUuid": "",
            "targetingStoreTag": "",
            "venueUUID": "",
            "selectedSectionUUID": "",
            "favorites": "",
            "vertical": "ALL",
            "searchSource": "SEARCH_SUGGESTION",
            "keyName": "",
        }
        return self._call("search", payload, cookies=cookies)

    def autocomplete_search(self, query: str, cookies: Dict[str, str]) -> StepResult:
        """Search suggestions for a partial query.

        POST /api/getSearchSuggestionsV1
        """
        payload = {
            "userQuery": query,
            "date": "",
            "startTime": 0,
            "endTime": 0,
            "vertical": "ALL",
        }
        return self._call("autocomplete_search", payload, cookies=cookies)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_store(self, store_uuid: str) -> StepResult:
        """Fetch a store and its full menu. Menus are not session-scoped."""
        return self._call("store", {"storeUuid": store_uuid})

    def get_item_details(
        self,
        store_uuid: str,
        section_uuid: str,
        subsection_uuid: str,
        item_uuid: str,
    ) -> StepResult:
        """Fetch one menu item, including its customization options."""
        payload = {
            "itemRequestType": "ITEM",
            "storeUuid": store_uuid,
            "sectionUuid": section_uuid,
            "subsectionUuid": subsection_uuid,
            "menuItemUuid": item_uuid,
        }
        return self._call("item_details", payload)

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def create_cart(
        self,
        item: CatalogItem,
        quantity: int,
        customizations: Any,
        cookies: Dict[str, str],
    ) -> StepResult:
        """Create a guest draft order holding one item.

        POST /api/createDraftOrderV2
        The response carries the draft order uuid and cart uuid every later
        cart step needs. result.line_item is the line that was created.
        """
        line = CartItem(item=item, quantity=quantity, customizations=customizations)
        payload = {
            "isMulticart": False,
            "shoppingCartItems": [line.to_payload()],
            "useCredits": True,
            "extraPaymentProfiles": [],
            "promotionOptions": {
                "autoApplyPromotionUUIDs": [],
                "selectedPromotionInstanceUUIDs": [],
                "skipApplyingPromotion": False,
            },
            "deliveryTime": {"asap": True},
            "deliveryType": "ASAP",
            "currencyCode": "USD",
            "interactionType": "door_to_door",
            "checkMultipleDraftOrdersCap": False,
            "isGuestOrder": True,
            "businessDetails": {"profileType": "personal"},
        }
        result = self._call("create_cart", payload, cookies=cookies)
        result.line_item = line
        return result

    def add_to_cart(
        self,
        draft_order_uuid: str,
        cart_uuid: str,
        item: CatalogItem,
        quantity: int,
        customizations: Any,
        cookies: Dict[str, str],
    ) -> StepResult:
        """Add an item to an existing draft order.

        POST /api/addItemsToDraftOrderV2
        A fresh item-instance uuid is generated on every call.
        """
        line = CartItem(item=item, quantity=quantity, customizations=customizations)
        payload = {
            "draftOrderUUID": draft_order_uuid,
            "cartUUID": cart_uuid,
            "items": [line.to_payload()],
            "shouldUpdateDraftOrderMetadata": False,
            "storeUUID": item.store_uuid,
        }
        result = self._call("add_to_cart", payload, cookies=cookies)
        result.line_item = line
        return result

    def get_fee(self, draft_order_uuid: str, cookies: Dict[str, str]) -> StepResult:
        """Fetch the checkout presentation (fees, taxes, totals) for a draft order."""
        payload = {
            "payloadTypes": list(FEE_PAYLOAD_TYPES),
            "isGroupOrder": False,
            "draftOrderUUID": draft_order_uuid,
        }
        return self._call("fee", payload, cookies=cookies)

    def remove_item(
        self,
        cart_uuid: str,
        draft_order_uuid: str,
        item_instance_uuid: str,
        store_uuid: str,
        cookies: Dict[str, str],
    ) -> StepResult:
        """Remove one cart line by its item-instance uuid.

        POST /api/removeItemsFromDraftOrderV2
        The running jar is sent like any other cart step, but response cookies
        are not forwarded for this step (response_cookies is None).
        """
        payload = {
            "cartUUID": cart_uuid,
            "draftOrderUUID": draft_order_uuid,
            "shoppingCartItemUUIDs": [item_instance_uuid],
            "storeUUID": store_uuid,
        }
        return self._call("remove_item", payload, cookies=cookies)
