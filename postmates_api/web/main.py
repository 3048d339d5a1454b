"""
Web routes — One POST endpoint per Postmates workflow step.

A thin pass-through for a browser frontend: each route takes the step's
parameters as JSON (including the caller's cookie jar where the step needs
one), makes exactly one Postmates call and returns the result verbatim.

  Jar-returning steps answer {"data": ..., "responseCookies": {...}} and, when
  DOMAIN is configured, also re-emit Postmates' Set-Cookie lines rewritten to
  this service's domain.
  Read-only steps answer the bare Postmates payload.
  A non-2xx answer from Postmates becomes a JSON error with the same status.

No validation beyond the request models, no auth, no rate limiting.

Run with: uvicorn postmates_api.web.main:app
"""

import logging
from functools import lru_cache
from typing import Any, Dict

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import get_bool, get_setting, get_timeout
from ..core.cookie_codec import rewrite_domain
from ..core.errors import MalformedCookieError, RemoteAPIError, error_payload
from ..core.models import CatalogItem, StepResult
from ..core.postmates_client import PostmatesClient

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(title="Postmates Cart API")


@lru_cache(maxsize=None)
def get_client() -> PostmatesClient:
    return PostmatesClient(
        get_setting("POSTMATES_BASE_URL"),
        timeout=get_timeout(),
        debug=get_bool("DEBUG"),
    )


@app.exception_handler(RemoteAPIError)
async def _remote_api_error(request: Request, exc: RemoteAPIError):
    logger.warning("Postmates returned %s for %s", exc.status, request.url.path)
    return JSONResponse(status_code=exc.status, content=error_payload(exc))


@app.exception_handler(MalformedCookieError)
async def _malformed_cookie(request: Request, exc: MalformedCookieError):
    logger.error("Unparseable Set-Cookie from Postmates on %s: %s", request.url.path, exc.line)
    return JSONResponse(status_code=502, content={"error": str(exc)})


def _with_cookies(response: Response, result: StepResult) -> Dict[str, Any]:
    """Re-emit the step's Set-Cookie lines for this domain and return its body."""
    domain = get_setting("DOMAIN")
    if domain:
        for line in rewrite_domain(result.raw_cookies, get_setting("POSTMATES_DOMAIN"), domain):
            response.headers.append("set-cookie", line)
    return result.to_dict()


# ---------------- request bodies ----------------

class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class QueryPayload(_Body):
    query: str


class SessionQueryPayload(_Body):
    query: str
    cookies: Dict[str, str] = {}


class DeliveryLocationPayload(_Body):
    place_id: str = Field(alias="id")
    provider: str


class SetLocationPayload(_Body):
    location_details: Dict[str, Any] = Field(alias="locationDetails")


class StorePayload(_Body):
    store_id: str = Field(alias="storeID")


class ItemDetailsPayload(_Body):
    store_id: str = Field(alias="storeID")
    section_id: str = Field(alias="sectionID")
    subsection_id: str = Field(alias="subsectionID")
    item_id: str = Field(alias="itemID")


class CreateCartPayload(_Body):
    item_id: str = Field(alias="itemID")
    store_id: str = Field(alias="storeID")
    section_id: str = Field(alias="sectionID")
    subsection_id: str = Field(alias="subsectionID")
    price_cents: int = Field(alias="priceAsCents")
    item_name: str = Field(alias="itemName")
    quantity: int = Field(1, alias="itemQuantity")
    customizations: Any = None
    image_url: str = Field("", alias="imageURL")
    cookies: Dict[str, str] = {}

    def catalog_item(self) -> CatalogItem:
        return CatalogItem(
            item_uuid=self.item_id,
            store_uuid=self.store_id,
            section_uuid=self.section_id,
            subsection_uuid=self.subsection_id,
            price_cents=self.price_cents,
            title=self.item_name,
            image_url=self.image_url,
        )


class AddToCartPayload(_Body):
    draft_order_id: str = Field(alias="draftOrderID")
    cart_id: str = Field(alias="cartID")
    item_id: str = Field(alias="itemID")
    store_id: str = Field(alias="storeID")
    section_id: str = Field(alias="sectionID")
    subsection_id: str = Field(alias="subsectionID")
    price_cents: int = Field(alias="priceAsCents")
    title: str
    quantity: int = Field(1, alias="itemQuantity")
    customizations: Any = None
    image: str = ""
    cookies: Dict[str, str] = {}

    def catalog_item(self) -> CatalogItem:
        return CatalogItem(
            item_uuid=self.item_id,
            store_uuid=self.store_id,
            section_uuid=self.section_id,
            subsection_uuid=self.subsection_id,
            price_cents=self.price_cents,
            title=self.title,
            image_url=self.image,
        )


class FeePayload(_Body):
    draft_order_id: str = Field(alias="draftOrderID")
    cookies: Dict[str, str] = {}


class RemoveItemPayload(_Body):
    cart_id: str = Field(alias="cartID")
    draft_order_id: str = Field(alias="draftOrderID")
    item_instance_id: str = Field(alias="itemsRemovedID")
    store_id: str = Field(alias="storeID")
    cookies: Dict[str, str] = {}


# ---------------- location ----------------

@app.post("/getLocationAutocomplete")
def location_autocomplete(payload: QueryPayload, client: PostmatesClient = Depends(get_client)):
    return client.get_location_autocomplete(payload.query).data


@app.post("/getLocationDetails")
def location_details(payload: Dict[str, Any], client: PostmatesClient = Depends(get_client)):
    return client.get_location_details(payload).data


@app.post("/getDeliveryLocationDetails")
def delivery_location_details(
    payload: DeliveryLocationPayload, client: PostmatesClient = Depends(get_client)
):
    return client.get_delivery_location_details(payload.place_id, payload.provider).data


@app.post("/setLocation")
def set_location(
    payload: SetLocationPayload, response: Response, client: PostmatesClient = Depends(get_client)
):
    body = _with_cookies(response, client.set_location(payload.location_details))
    return {"responseCookies": body.get("responseCookies", {})}


# ---------------- search ----------------

@app.post("/search")
def search(
    payload: SessionQueryPayload, response: Response, client: PostmatesClient = Depends(get_client)
):
    return _with_cookies(response, client.search(payload.query, payload.cookies))


@app.post("/autocompleteSearch")
def autocomplete_search(
    payload: SessionQueryPayload, response: Response, client: PostmatesClient = Depends(get_client)
):
    return _with_cookies(response, client.autocomplete_search(payload.query, payload.cookies))


# ---------------- catalog ----------------

@app.post("/getStore")
def get_store(payload: StorePayload, client: PostmatesClient = Depends(get_client)):
    return client.get_store(payload.store_id).data


@app.post("/getItemDetails")
def item_details(payload: ItemDetailsPayload, client: PostmatesClient = Depends(get_client)):
    result = client.get_item_details(
        payload.store_id, payload.section_id, payload.subsection_id, payload.item_id
    )
    return {"data": result.data}


# ---------------- cart ----------------

@app.post("/createPostmatesCart")
def create_cart(
    payload: CreateCartPayload, response: Response, client: PostmatesClient = Depends(get_client)
):
    result = client.create_cart(
        payload.catalog_item(), payload.quantity, payload.customizations, payload.cookies
    )
    body = _with_cookies(response, result)
    body["shoppingCartItemUuid"] = result.line_item.instance_uuid
    return body


@app.post("/addToPostmatesCart")
def add_to_cart(
    payload: AddToCartPayload, response: Response, client: PostmatesClient = Depends(get_client)
):
    result = client.add_to_cart(
        payload.draft_order_id,
        payload.cart_id,
        payload.catalog_item(),
        payload.quantity,
        payload.customizations,
        payload.cookies,
    )
    body = _with_cookies(response, result)
    body["shoppingCartItemUuid"] = result.line_item.instance_uuid
    return body


@app.post("/getFee")
def get_fee(payload: FeePayload, response: Response, client: PostmatesClient = Depends(get_client)):
    return _with_cookies(response, client.get_fee(payload.draft_order_id, payload.cookies))


@app.post("/removeFromPostmatesCart")
def remove_from_cart(payload: RemoveItemPayload, client: PostmatesClient = Depends(get_client)):
    result = client.remove_item(
        payload.cart_id,
        payload.draft_order_id,
        payload.item_instance_id,
        payload.store_id,
        payload.cookies,
    )
    return result.to_dict()
