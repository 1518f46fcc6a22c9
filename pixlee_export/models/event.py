# pixlee_export/models/event.py
from enum import Enum
from typing import Any, Dict, List, Optional
from .base import PixleeModel
from .order import Basket
from .site import Site


class EventType(str, Enum):
    ADD_TO_CART = "add:to:cart"
    CHECKOUT_START = "checkout:start"
    CONVERTED_PHOTO = "converted:photo"


class PixleeEvent(PixleeModel):
    """Analytics event reported to Pixlee from the storefront"""
    type: EventType
    payload: Dict[str, Any] = {}

    @classmethod
    def create(cls, event_type: EventType, payload: Optional[Dict[str, Any]],
               site: Site, locale: Optional[str] = None) -> "PixleeEvent":
        data = dict(payload or {})
        data["region_code"] = locale or site.default_locale
        data["version_hash"] = site.version_hash
        data["ecommerce_platform"] = site.ecomm_platform
        data["ecommerce_platform_version"] = site.ecomm_platform_version
        return cls(type=event_type, payload=data)


def get_line_items_payload(basket: Basket, product_id_for, product_sku_for) -> List[Dict[str, Any]]:
    """Line items in the shape expected by checkout:start and converted:photo"""
    return [
        {
            "quantity": item.quantity,
            "product_sku": product_id_for(item.product),
            "variant_sku": product_sku_for(item.product),
            "price": item.price,
            "currency": basket.currency_code,
        }
        for item in basket.line_items
    ]
