# pixlee_export/services/category_index.py
import logging
from typing import Callable, Dict, List, Optional, Sequence
from ..catalog.base import Catalog
from ..models.category import (
    CacheStatistics,
    CategoryIndexEntry,
    CategoryIndexSettings,
    ProductCategory,
)
from .category_strategies import CategoryIndexStrategy, create_strategy

CategoryLookup = Callable[[str], Optional[CategoryIndexEntry]]


def resolve_product_categories(category_ids: Sequence[str], lookup: CategoryLookup,
                               limit: int) -> List[ProductCategory]:
    """
    Categories of a product together with all of their ancestors.

    Ids unknown to the index are skipped. At most ``limit`` categories are
    returned, in the order they are first met.
    """
    categories: Dict[str, ProductCategory] = {}

    for category_id in category_ids:
        if len(categories) >= limit:
            break

        entry = lookup(category_id)
        if entry is None:
            continue

        if category_id not in categories:
            categories[category_id] = ProductCategory(
                category_id=category_id,
                category_name=entry.full_name,
            )

        for parent_id in entry.parent_ids:
            if len(categories) >= limit:
                break
            if parent_id in categories:
                continue
            parent = lookup(parent_id)
            if parent is not None:
                categories[parent_id] = ProductCategory(
                    category_id=parent_id,
                    category_name=parent.full_name,
                )

    return list(categories.values())


class CategoryIndexManager:
    """Category index of one export job run"""

    def __init__(self, catalog: Catalog, settings: Optional[CategoryIndexSettings] = None):
        self.catalog = catalog
        self.settings = settings or CategoryIndexSettings.from_config()
        self.strategy: Optional[CategoryIndexStrategy] = None
        self.logger = logging.getLogger(__name__)

    def _get_strategy(self) -> CategoryIndexStrategy:
        if self.strategy is None:
            self.strategy = create_strategy(self.catalog, self.settings)
        return self.strategy

    def pre_initialize(self):
        """Build the whole index up front; errors are left to the caller"""
        strategy = self._get_strategy()
        strategy.build()
        self.logger.info(f"Category processing pre-initialized with {strategy.name}")

    def lookup(self, category_id: str) -> Optional[CategoryIndexEntry]:
        return self._get_strategy().lookup(category_id)

    def get_categories_for_product(self, category_ids: Optional[Sequence[str]]) -> List[ProductCategory]:
        """Categories to export for a product; empty when they cannot be resolved"""
        if not category_ids:
            return []

        try:
            strategy = self._get_strategy()
            return resolve_product_categories(
                category_ids, strategy.lookup, self.settings.category_safety_limit
            )
        except Exception as e:
            self.logger.error(f"Error resolving categories {list(category_ids)[:10]}: {e}")
            return []

    def get_cache_statistics(self) -> CacheStatistics:
        if self.strategy is None:
            return CacheStatistics()
        return CacheStatistics(
            strategy_type=self.strategy.strategy_type,
            is_built=self.strategy.is_built,
            map_sizes=self.strategy.map_sizes(),
            map_limits=self.strategy.map_limits(),
            counters=self.strategy.counters(),
        )

    def clear(self):
        """Drop the strategy and everything it has indexed"""
        if self.strategy is not None:
            self.strategy.clear()
        self.strategy = None
