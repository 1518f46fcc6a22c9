# pixlee_export/models/site.py
from enum import Enum
from typing import List, Optional
from .base import PixleeModel
from ..config import Config


class TrackingOption(str, Enum):
    TRACK_ALWAYS = "TRACK_ALWAYS"
    TRACK_IF_NOT_OPTED_OUT = "TRACK_IF_NOT_OPTED_OUT"
    TRACK_IF_OPTED_IN = "TRACK_IF_OPTED_IN"
    TRACK_NEVER = "TRACK_NEVER"


class SkuReference(str, Enum):
    PRODUCT_ID = "Product ID"
    MANUFACTURER_SKU = "Manufacturer SKU"


class Site(PixleeModel):
    """Site preferences relevant to the Pixlee integration"""
    site_id: str = "RefArch"
    enabled: bool = True
    api_key: str = ""
    private_api_key: str = ""
    secret_key: str = ""
    api_url: str = "https://distillery.pixlee.co/api/"
    tracking: TrackingOption = TrackingOption.TRACK_ALWAYS
    sku_reference: SkuReference = SkuReference.PRODUCT_ID
    storefront_url: str = "https://www.example.com"
    product_host: Optional[str] = None
    default_locale: str = "en_US"
    allowed_locales: List[str] = ["default", "en_US"]
    default_currency: str = "USD"
    allowed_currencies: List[str] = ["USD"]
    version_hash: str = "unknown version"
    ecomm_platform: str = "demandware"
    ecomm_platform_version: str = "unknown version"

    @classmethod
    def from_config(cls) -> "Site":
        return cls(
            site_id=Config.SITE_ID,
            enabled=Config.PIXLEE_ENABLED,
            api_key=Config.PIXLEE_API_KEY,
            private_api_key=Config.PIXLEE_PRIVATE_API_KEY,
            secret_key=Config.PIXLEE_SECRET_KEY,
            api_url=Config.PIXLEE_API_URL,
            tracking=TrackingOption(Config.PIXLEE_TRACKING),
            sku_reference=SkuReference(Config.SKU_REFERENCE),
            storefront_url=Config.STOREFRONT_URL,
            product_host=Config.PRODUCT_HOST or None,
            default_locale=Config.DEFAULT_LOCALE,
            allowed_locales=Config.ALLOWED_LOCALES,
            default_currency=Config.DEFAULT_CURRENCY,
            allowed_currencies=Config.ALLOWED_CURRENCIES,
            version_hash=Config.VERSION_HASH,
            ecomm_platform=Config.ECOMM_PLATFORM,
            ecomm_platform_version=Config.ECOMM_PLATFORM_VERSION,
        )
