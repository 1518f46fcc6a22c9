# pixlee_export/models/order.py
from decimal import Decimal
from typing import List, Optional
from .base import PixleeModel
from .product import Product


class ProductLineItem(PixleeModel):
    """Individual product line of a basket or order"""
    product: Product
    quantity: int
    price: Decimal

    @property
    def product_id(self) -> str:
        return self.product.product_id

    @property
    def unit_price(self) -> Decimal:
        return self.price / self.quantity if self.quantity else Decimal("0")


class Basket(PixleeModel):
    """Shopping basket of the current customer"""
    currency_code: str
    line_items: List[ProductLineItem] = []
    merchandize_total: Optional[Decimal] = None

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.line_items)

    @property
    def total(self) -> Decimal:
        if self.merchandize_total is not None:
            return self.merchandize_total
        return sum((item.price for item in self.line_items), Decimal("0"))

    def get_matching_line_item(self, product_id: str) -> Optional[ProductLineItem]:
        for item in self.line_items:
            if item.product_id == product_id:
                return item
        return None


class Order(Basket):
    """Placed order"""
    order_no: str
    customer_email: Optional[str] = None
