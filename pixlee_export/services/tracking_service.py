# pixlee_export/services/tracking_service.py
import json
import logging
from typing import Any, Dict, List, MutableMapping, Optional
from ..catalog.base import Catalog
from ..models.export_payload import get_product_sku
from ..models.event import EventType, PixleeEvent, get_line_items_payload
from ..models.order import Basket, Order
from ..models.product import Product
from ..models.site import Site, TrackingOption
from ..utils.formatters import format_price

ADD_TO_CART_SESSION_KEY = "pixleeATCEventsData"
CHECKOUT_STARTED_SESSION_KEY = "pixleeCheckoutStartedReported"


class TrackingService:
    """Builds storefront analytics events reported to Pixlee"""

    def __init__(self, site: Site, catalog: Catalog):
        self.site = site
        self.catalog = catalog
        self.logger = logging.getLogger(__name__)

    def is_tracking_allowed(self, tracking_consent: Optional[bool] = None) -> bool:
        """Tracking preference of the site combined with the customer consent"""
        option = self.site.tracking
        if option == TrackingOption.TRACK_IF_NOT_OPTED_OUT:
            return tracking_consent is not False
        if option == TrackingOption.TRACK_IF_OPTED_IN:
            return tracking_consent is True
        if option == TrackingOption.TRACK_NEVER:
            return False
        return True

    def get_product_sku(self, product: Product) -> str:
        return get_product_sku(product, self.site)

    def get_product_id(self, product: Product) -> str:
        """SKU of the master for variants, of the product itself otherwise"""
        if product.is_variant and product.master_id:
            master = self.catalog.get_product(product.master_id)
            if master is not None:
                return self.get_product_sku(master)
        return self.get_product_sku(product)

    # Add to cart events are accumulated in the session until the storefront asks for them

    def add_to_cart_event_to_session(self, session: MutableMapping[str, str], pid: str, qty: str):
        events_data = json.loads(session.get(ADD_TO_CART_SESSION_KEY) or "[]")
        events_data.append({"pid": pid, "qty": qty})
        session[ADD_TO_CART_SESSION_KEY] = json.dumps(events_data)

    def process_add_to_cart(self, session: MutableMapping[str, str], pid: Optional[str],
                            qty: Optional[str]) -> bool:
        if pid and not qty:
            product = self.catalog.get_product(pid)
            if product is not None and product.is_bundle:
                qty = "1"

        if pid and qty:
            self.add_to_cart_event_to_session(session, pid, qty)

        return bool(session.get(ADD_TO_CART_SESSION_KEY))

    def get_add_to_cart_events_from_session(self, session: MutableMapping[str, str]) -> Optional[List[Dict[str, Any]]]:
        events_data = session.pop(ADD_TO_CART_SESSION_KEY, None)
        if not events_data:
            return None
        try:
            return json.loads(events_data)
        except ValueError:
            self.logger.warning("Discarding unreadable add to cart events from session")
            return None

    def delete_events_from_session(self, session: MutableMapping[str, str]):
        session.pop(ADD_TO_CART_SESSION_KEY, None)

    def get_add_to_cart_events(self, products_added: List[Dict[str, Any]], basket: Basket,
                               locale: Optional[str] = None) -> List[PixleeEvent]:
        events = []
        for product_added in products_added or []:
            product = self.catalog.get_product(product_added.get("pid"))
            if product is None:
                self.logger.warning(f"Product {product_added.get('pid')} added to cart not found")
                continue

            line_item = basket.get_matching_line_item(product.product_id)
            if line_item is None:
                self.logger.warning(f"No basket line item for product {product.product_id}")
                continue

            quantity = int(product_added.get("qty"))
            payload = {
                "product_sku": self.get_product_id(product),
                "variant_sku": self.get_product_sku(product),
                "quantity": quantity,
                "price": format_price(line_item.unit_price * quantity),
                "currency": basket.currency_code,
            }
            events.append(PixleeEvent.create(EventType.ADD_TO_CART, payload, self.site, locale))
        return events

    def get_checkout_started_events(self, basket: Optional[Basket], session: MutableMapping[str, str],
                                    tracking_consent: Optional[bool] = None,
                                    locale: Optional[str] = None) -> Optional[List[PixleeEvent]]:
        """checkout:start, reported once per session"""
        if basket is None or not self.site.enabled or not self.is_tracking_allowed(tracking_consent):
            return None
        if session.get(CHECKOUT_STARTED_SESSION_KEY):
            return None

        payload = {
            "cart_contents": get_line_items_payload(basket, self.get_product_id, self.get_product_sku),
            "cart_total": basket.total,
            "cart_total_quantity": basket.total_quantity,
            "cart_type": self.site.ecomm_platform,
        }
        session[CHECKOUT_STARTED_SESSION_KEY] = "true"
        return [PixleeEvent.create(EventType.CHECKOUT_START, payload, self.site, locale)]

    def get_end_checkout_events(self, order: Optional[Order], tracking_consent: Optional[bool] = None,
                                locale: Optional[str] = None) -> Optional[List[PixleeEvent]]:
        """converted:photo for a placed order"""
        if order is None or not self.site.enabled or not self.is_tracking_allowed(tracking_consent):
            return None

        payload = {
            "cart_contents": get_line_items_payload(order, self.get_product_id, self.get_product_sku),
            "cart_total": order.total,
            "cart_total_quantity": order.total_quantity,
            "email": order.customer_email,
            "cart_type": self.site.ecomm_platform,
            "order_id": order.order_no,
        }
        return [PixleeEvent.create(EventType.CONVERTED_PHOTO, payload, self.site, locale)]
