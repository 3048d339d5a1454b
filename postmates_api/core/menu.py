"""
Menu — Read catalog items out of a getStoreV1 payload.

The store payload is otherwise treated as opaque. This module only knows
enough of its shape to find the fields a cart line needs:

    {
      "data": {
        "uuid": "<store uuid>",
        "title": "Joe's Pizza",
        "catalogSectionsMap": {
          "<section uuid>": [
            {"payload": {"standardItemsPayload": {
                "title": {"text": "Picked for you"},
                "catalogItems": [
                  {"uuid": "...", "title": "Margherita", "price": 1299,
                   "imageUrl": "...", "sectionUuid": "...", "subsectionUuid": "..."}
                ]}}}
          ]
        }
      }
    }

Anything that does not match this shape is skipped rather than raised on.
"""

from typing import Any, Dict, Iterator, Optional

from .models import CatalogItem


def _store_data(store_payload: Dict[str, Any]) -> Dict[str, Any]:
    data = store_payload.get("data", store_payload) if isinstance(store_payload, dict) else {}
    return data if isinstance(data, dict) else {}


def iter_catalog_items(store_payload: Dict[str, Any]) -> Iterator[CatalogItem]:
    """Yield every catalog item in a store payload, in menu order."""
    data = _store_data(store_payload)
    store_uuid = data.get("uuid", "")
    sections = data.get("catalogSectionsMap") or {}

    for section_uuid, subsections in sections.items():
        for subsection in subsections or []:
            items_payload = (subsection.get("payload") or {}).get("standardItemsPayload") or {}
            for raw in items_payload.get("catalogItems") or []:
                if not raw.get("uuid"):
                    continue
                yield CatalogItem(
                    item_uuid=raw["uuid"],
                    store_uuid=store_uuid,
                    section_uuid=raw.get("sectionUuid", section_uuid),
                    subsection_uuid=raw.get("subsectionUuid", ""),
                    price_cents=int(raw.get("price") or 0),
                    title=raw.get("title", ""),
                    image_url=raw.get("imageUrl", ""),
                )


def find_catalog_item(store_payload: Dict[str, Any], title: Optional[str] = None) -> Optional[CatalogItem]:
    """Return the first item whose title matches (case-insensitive), or the
    first item at all when no title is given. None if nothing matches."""
    wanted = title.strip().lower() if title else None
    for item in iter_catalog_items(store_payload):
        if wanted is None or item.title.strip().lower() == wanted:
            return item
    return None
