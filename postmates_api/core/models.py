"""
Models — Small value types passed between the client, the workflow and callers.

Payloads coming back from Postmates are kept opaque (plain dicts). The types
here only describe what this package itself creates or threads forward: step
results, the location chosen for a session, and cart line items.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class StepResult:
    """Outcome of one successful API step.

    Attributes:
        data: Parsed JSON body, untouched.
        response_cookies: Cookie jar built from the response Set-Cookie lines.
            None when the step is configured not to forward cookies.
        raw_cookies: The Set-Cookie lines as received, for re-emitting to a browser.
        line_item: The cart line created by create_cart/add_to_cart, if any.
    """
    data: Any
    response_cookies: Optional[Dict[str, str]] = None
    raw_cookies: List[str] = field(default_factory=list)
    line_item: Optional["CartItem"] = None

    def to_dict(self) -> Dict[str, Any]:
        """Shape used by the web routes: {"data": ..., "responseCookies": ...}."""
        result = {"data": self.data}
        if self.response_cookies is not None:
            result["responseCookies"] = self.response_cookies
        return result


@dataclass(frozen=True)
class LocationSelection:
    """A free-text address resolved to a Postmates place."""
    place_id: str
    provider: str
    details: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class CatalogItem:
    """A menu item as listed in a store catalog."""
    item_uuid: str
    store_uuid: str
    section_uuid: str
    subsection_uuid: str
    price_cents: int
    title: str
    image_url: str = ""


@dataclass(frozen=True)
class CartItem:
    """One addition of a catalog item to a draft order.

    instance_uuid is generated per addition, so adding the same catalog item
    twice yields two distinguishable lines.
    """
    item: CatalogItem
    quantity: int = 1
    customizations: Any = None
    instance_uuid: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def item_uuid(self) -> str:
        return self.item.item_uuid

    def to_payload(self) -> Dict[str, Any]:
        """Render as a shoppingCartItems entry for the draft order endpoints."""
        return {
            "uuid": self.item.item_uuid,
            "shoppingCartItemUuid": self.instance_uuid,
            "storeUuid": self.item.store_uuid,
            "sectionUuid": self.item.section_uuid,
            "subsectionUuid": self.item.subsection_uuid,
            "price": self.item.price_cents,
            "title": self.item.title,
            "quantity": self.quantity,
            "customizations": self.customizations if self.customizations is not None else {},
            "imageURL": self.item.image_url,
            "specialInstructions": "",
            "itemId": None,
        }
