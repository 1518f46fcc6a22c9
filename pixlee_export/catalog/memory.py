# pixlee_export/catalog/memory.py
import json
import logging
from collections import deque
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
from .base import Catalog, CategoryNode
from ..exceptions import CatalogError
from ..models.product import Product

logger = logging.getLogger(__name__)


class Category(CategoryNode):
    """Category held in memory, with a back-reference to its parent"""

    def __init__(self, category_id: str, display_name: str, parent: Optional["Category"] = None):
        self.category_id = category_id
        self.display_name = display_name
        self.parent = parent
        self.children: List["Category"] = []

    def add_child(self, category_id: str, display_name: str) -> "Category":
        child = Category(category_id, display_name, parent=self)
        self.children.append(child)
        return child

    def get_id(self) -> str:
        return self.category_id

    def get_display_name(self) -> str:
        return self.display_name

    def get_sub_categories(self) -> List["Category"]:
        return self.children

    def get_parent(self) -> Optional["Category"]:
        return self.parent

    def __repr__(self) -> str:
        return f"Category({self.category_id!r}, {self.display_name!r})"


class InMemoryCatalog(Catalog):
    """Catalog backed by a category tree and a product list held in memory"""

    def __init__(self, root: Category, products: Iterable[Product] = ()):
        self.root = root
        self.products: Dict[str, Product] = {p.product_id: p for p in products}
        self._categories: Dict[str, Category] = {}
        self.reindex()

    def reindex(self):
        """Rebuild the id lookup after the tree has been changed"""
        self._categories = {}
        queue = deque([self.root])
        while queue:
            category = queue.popleft()
            if category.category_id in self._categories:
                continue
            self._categories[category.category_id] = category
            queue.extend(category.children)

    @property
    def category_count(self) -> int:
        """Number of categories below the root"""
        return len(self._categories) - 1

    def get_root(self) -> Category:
        return self.root

    def get_category(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    def query_all_site_products(self) -> List[Product]:
        return list(self.products.values())

    def search_products(self) -> List[Product]:
        return [
            product for product in self.products.values()
            if product.online and product.searchable
            and any(cid in self._categories for cid in product.category_ids)
        ]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryCatalog":
        """Build a catalog from nested category dicts and product dicts"""
        root = Category(data.get("root_id", "root"), data.get("root_name", "Root"))
        stack = [(root, node) for node in reversed(data.get("categories", []))]
        while stack:
            parent, node = stack.pop()
            try:
                child = parent.add_child(str(node["id"]), node.get("name") or str(node["id"]))
            except KeyError as e:
                raise CatalogError(f"Category without id under {parent.category_id}") from e
            stack.extend((child, sub) for sub in reversed(node.get("children", [])))

        products = [Product.model_validate(p) for p in data.get("products", [])]
        return cls(root, products)


def load_catalog(path: Union[str, Path]) -> InMemoryCatalog:
    """Load a catalog export (categories tree + products) from a JSON file"""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CatalogError(f"Could not read catalog file {path}: {e}") from e

    catalog = InMemoryCatalog.from_dict(data)
    logger.info(f"Loaded catalog from {path}: {catalog.category_count} categories, "
                f"{len(catalog.products)} products")
    return catalog
