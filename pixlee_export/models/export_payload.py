# pixlee_export/models/export_payload.py
import json
from decimal import Decimal
from typing import Any, Dict, List, Optional
from .base import PixleeModel
from .job import ExportOptions
from .product import Product
from .site import Site, SkuReference
from ..utils.formatters import absolute_url, price_value, replace_host, unix_timestamp

DEFAULT_IMAGE_VIEW_TYPE = "large"
DEFAULT_NO_IMAGE_PATH = "/images/noimagesmall.png"


class RegionalInfo(PixleeModel):
    """Locale specific details of an exported product"""
    buy_now_link_url: str
    name: str
    price: Optional[float] = None
    currency: Optional[str] = None
    stock: Optional[int] = None
    region_code: str
    variants_json: str


class ProductExportPayload(PixleeModel):
    """Album payload posted to Pixlee for one product"""
    title: str
    product: Dict[str, Any]
    album_type: str = "product"
    live_update: bool = False
    num_photos: int = 0
    num_inbox_photos: int = 0


def get_product_sku(product: Product, site: Site) -> str:
    if site.sku_reference == SkuReference.MANUFACTURER_SKU:
        return product.manufacturer_sku or product.product_id
    return product.product_id


def get_product_page_url(product: Product, site: Site, locale: Optional[str] = None) -> str:
    path = f"/{locale}/product/{product.product_id}" if locale else f"/product/{product.product_id}"
    return replace_host(absolute_url(site.storefront_url, path), site.product_host)


def get_product_image_url(product: Product, site: Site, options: ExportOptions) -> str:
    """Main image, then the default variant's, then the placeholder image"""
    view_type = options.image_view_type or DEFAULT_IMAGE_VIEW_TYPE
    images = product.get_images(view_type)
    if images:
        return images[0]

    variant = product.default_variant
    if variant is not None and variant.images.get(view_type):
        return variant.images[view_type][0]

    return absolute_url(site.storefront_url, DEFAULT_NO_IMAGE_PATH)


def get_all_product_images(product: Product, options: ExportOptions) -> List[str]:
    view_type = options.image_view_type or DEFAULT_IMAGE_VIEW_TYPE
    images = product.get_images(view_type)
    seen = set(images)

    for variant in product.variants:
        for url in variant.images.get(view_type, []):
            if url not in seen:
                seen.add(url)
                images.append(url)

    return images


def get_product_price(product: Product, currency: Optional[str] = None) -> Optional[Decimal]:
    """Price of the default variant for masters, of the product otherwise"""
    variant = product.default_variant
    for priced in (variant, product):
        if priced is None:
            continue
        if currency and currency in priced.prices:
            return priced.prices[currency]
        if priced.price is not None:
            return priced.price
    return None


def get_product_stock(product: Product) -> Optional[int]:
    if product.in_stock is None:
        return None
    return 1 if product.in_stock else 0


def get_product_variants(product: Product) -> Dict[str, Dict[str, Any]]:
    return {
        variant.variant_id: {"variant_stock": variant.ats, "variant_sku": variant.variant_id}
        for variant in product.variants
    }


def get_regional_info(product: Product, site: Site, variants_json: str,
                      locale_currencies: Dict[str, str]) -> List[RegionalInfo]:
    regional = []
    stock = get_product_stock(product)

    for locale, currency in locale_currencies.items():
        if locale.lower() == "default":
            continue
        price = get_product_price(product, currency)
        regional.append(RegionalInfo(
            buy_now_link_url=get_product_page_url(product, site, locale),
            name=product.name,
            price=price_value(price),
            currency=currency if price is not None else None,
            stock=stock,
            region_code=locale,
            variants_json=variants_json,
        ))

    return regional


def build_product_export_payload(product: Product, site: Site, category_index,
                                 options: Optional[ExportOptions] = None,
                                 locale_currencies: Optional[Dict[str, str]] = None) -> ProductExportPayload:
    """
    Assemble the album payload for a product.

    ``category_index`` is the CategoryIndexManager of the running job. When
    ``options.only_regional_details`` is set (export from a secondary site)
    only the regional details are sent.
    """
    options = options or ExportOptions()
    variants_json = json.dumps(get_product_variants(product))
    regional_info = get_regional_info(product, site, variants_json, locale_currencies or {})

    product_data: Dict[str, Any] = {
        "sku": get_product_sku(product, site),
        "upc": product.upc,
        "native_product_id": product.product_id,
        "regional_info": [info.model_dump() for info in regional_info],
    }

    if not options.only_regional_details:
        categories = category_index.get_categories_for_product(product.category_ids)
        extra_fields = {
            "product_photos": get_all_product_images(product, options),
            "categories": [category.model_dump() for category in categories],
            "version_hash": site.version_hash,
            "ecommerce_platform": site.ecomm_platform,
            "ecommerce_platform_version": site.ecomm_platform_version,
            "categories_last_updated_at": unix_timestamp(),
        }

        product_data.update({
            "name": product.name,
            "buy_now_link_url": get_product_page_url(product, site),
            "product_photo": get_product_image_url(product, site, options),
            "price": price_value(get_product_price(product)),
            "stock": get_product_stock(product),
            "extra_fields": json.dumps(extra_fields),
            "currency": site.default_currency,
            "variants_json": variants_json,
        })

    return ProductExportPayload(title=product.name, product=product_data)
