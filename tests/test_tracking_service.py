# tests/test_tracking_service.py
from decimal import Decimal
import pytest
from pixlee_export.catalog import Category, InMemoryCatalog
from pixlee_export.models.event import EventType
from pixlee_export.models.order import Basket, Order, ProductLineItem
from pixlee_export.models.product import Product
from pixlee_export.models.site import SkuReference, TrackingOption
from pixlee_export.services.tracking_service import (
    ADD_TO_CART_SESSION_KEY,
    TrackingService,
)


@pytest.fixture
def products():
    return [
        Product(product_id="shirt", name="Shirt", manufacturer_sku="MFG-SHIRT"),
        Product(product_id="shirt-m", name="Shirt M", is_variant=True, master_id="shirt",
                manufacturer_sku="MFG-SHIRT-M"),
        Product(product_id="bundle", name="Bundle", is_bundle=True),
    ]


@pytest.fixture
def tracking(site, products):
    return TrackingService(site, InMemoryCatalog(Category("root", "Root"), products))


@pytest.fixture
def basket(products):
    return Basket(
        currency_code="USD",
        line_items=[ProductLineItem(product=products[1], quantity=2, price=Decimal("40.00"))],
    )


@pytest.mark.parametrize("option,consent,allowed", [
    (TrackingOption.TRACK_ALWAYS, False, True),
    (TrackingOption.TRACK_IF_NOT_OPTED_OUT, None, True),
    (TrackingOption.TRACK_IF_NOT_OPTED_OUT, False, False),
    (TrackingOption.TRACK_IF_OPTED_IN, None, False),
    (TrackingOption.TRACK_IF_OPTED_IN, True, True),
    (TrackingOption.TRACK_NEVER, True, False),
])
def test_tracking_consent(tracking, option, consent, allowed):
    tracking.site = tracking.site.model_copy(update={"tracking": option})
    assert tracking.is_tracking_allowed(consent) is allowed


def test_variant_reports_master_id(tracking, products):
    assert tracking.get_product_id(products[1]) == "shirt"
    assert tracking.get_product_sku(products[1]) == "shirt-m"

    tracking.site = tracking.site.model_copy(update={"sku_reference": SkuReference.MANUFACTURER_SKU})
    assert tracking.get_product_id(products[1]) == "MFG-SHIRT"


def test_add_to_cart_events_accumulate_in_session(tracking):
    session = {}
    assert tracking.process_add_to_cart(session, "shirt-m", "1")
    assert tracking.process_add_to_cart(session, "bundle", None)
    assert tracking.process_add_to_cart(session, None, None)

    events = tracking.get_add_to_cart_events_from_session(session)

    assert events == [{"pid": "shirt-m", "qty": "1"}, {"pid": "bundle", "qty": "1"}]
    assert ADD_TO_CART_SESSION_KEY not in session
    assert not tracking.process_add_to_cart(session, "shirt", None)


def test_add_to_cart_event_payload(tracking, basket):
    events = tracking.get_add_to_cart_events([{"pid": "shirt-m", "qty": "1"}, {"pid": "gone", "qty": "1"}],
                                             basket, "en_US")

    assert len(events) == 1
    event = events[0]
    assert event.type == EventType.ADD_TO_CART
    assert event.payload["product_sku"] == "shirt"
    assert event.payload["variant_sku"] == "shirt-m"
    assert event.payload["price"] == "20.00"
    assert event.payload["region_code"] == "en_US"
    assert event.payload["ecommerce_platform"] == "demandware"


def test_checkout_started_reported_once(tracking, basket):
    session = {}
    events = tracking.get_checkout_started_events(basket, session)

    assert events[0].type == EventType.CHECKOUT_START
    assert events[0].payload["cart_total_quantity"] == 2
    assert events[0].payload["cart_contents"][0]["product_sku"] == "shirt"
    assert tracking.get_checkout_started_events(basket, session) is None


def test_end_checkout_event(tracking, products):
    order = Order(
        order_no="00001",
        customer_email="customer@example.com",
        currency_code="USD",
        line_items=[ProductLineItem(product=products[0], quantity=1, price=Decimal("25.00"))],
    )
    events = tracking.get_end_checkout_events(order)

    assert events[0].type == EventType.CONVERTED_PHOTO
    assert events[0].payload["order_id"] == "00001"
    assert events[0].payload["cart_total"] == Decimal("25.00")


def test_no_events_without_consent(tracking, basket):
    tracking.site = tracking.site.model_copy(update={"tracking": TrackingOption.TRACK_NEVER})
    assert tracking.get_checkout_started_events(basket, {}) is None


def test_delete_events_from_session(tracking):
    session = {}
    tracking.add_to_cart_event_to_session(session, "shirt", "2")
    tracking.delete_events_from_session(session)
    assert tracking.get_add_to_cart_events_from_session(session) is None
