# pixlee_export/models/product.py
from decimal import Decimal
from typing import Dict, List, Optional
from .base import PixleeModel


class ProductVariant(PixleeModel):
    """Variant of a master product"""
    variant_id: str
    ats: Optional[int] = None
    price: Optional[Decimal] = None
    prices: Dict[str, Decimal] = {}
    images: Dict[str, List[str]] = {}


class Product(PixleeModel):
    """Read-only view of a host catalog product"""
    product_id: str
    name: str
    upc: Optional[str] = None
    manufacturer_sku: Optional[str] = None
    online: bool = True
    searchable: bool = True
    is_variant: bool = False
    is_bundle: bool = False
    master_id: Optional[str] = None
    category_ids: List[str] = []
    price: Optional[Decimal] = None
    prices: Dict[str, Decimal] = {}
    in_stock: Optional[bool] = None
    images: Dict[str, List[str]] = {}
    variants: List[ProductVariant] = []
    default_variant_id: Optional[str] = None

    @property
    def is_exportable(self) -> bool:
        return self.online and self.searchable and not self.is_variant

    @property
    def default_variant(self) -> Optional[ProductVariant]:
        if not self.variants:
            return None
        for variant in self.variants:
            if variant.variant_id == self.default_variant_id:
                return variant
        return self.variants[0]

    def get_images(self, view_type: str) -> List[str]:
        return list(self.images.get(view_type, []))
