# pixlee_export/catalog/base.py
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence
from ..models.product import Product


class CategoryNode(ABC):
    """Read-only view over one category of the host catalog"""

    @abstractmethod
    def get_id(self) -> str:
        ...

    @abstractmethod
    def get_display_name(self) -> str:
        ...

    @abstractmethod
    def get_sub_categories(self) -> Sequence["CategoryNode"]:
        ...

    @abstractmethod
    def get_parent(self) -> Optional["CategoryNode"]:
        ...


class Catalog(ABC):
    """Host catalog: the category tree of the site and its products"""

    @abstractmethod
    def get_root(self) -> CategoryNode:
        ...

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[CategoryNode]:
        ...

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[Product]:
        ...

    @abstractmethod
    def query_all_site_products(self) -> Iterable[Product]:
        ...

    @abstractmethod
    def search_products(self) -> Iterable[Product]:
        """Products available from the search index"""
