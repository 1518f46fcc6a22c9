# pixlee_export/models/category.py
from enum import Enum
from typing import Dict, Optional, Tuple
from pydantic import ConfigDict, model_validator
from .base import PixleeModel
from ..config import Config


class StrategyType(str, Enum):
    SINGLE_MAP = "SingleMapStrategy"
    DFS_CHUNKED = "DFSChunkedStrategy"
    HYBRID_BFS = "HybridBFSStrategy"


class CategoryIndexEntry(PixleeModel):
    """Breadcrumb and ancestor chain of one category"""
    full_name: str
    parent_ids: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class ProductCategory(PixleeModel):
    """Category reported for a product in the export payload"""
    category_id: str
    category_name: str


class CacheStatistics(PixleeModel):
    """Snapshot of the category index state"""
    strategy_type: Optional[StrategyType] = None
    is_built: bool = False
    map_sizes: Dict[str, int] = {}
    map_limits: Dict[str, int] = {}
    counters: Dict[str, int] = {}

    @property
    def largest_map(self) -> int:
        return max(self.map_sizes.values(), default=0)


class CategoryIndexSettings(PixleeModel):
    """Tuning knobs for building the category index"""
    max_object_keys: int = 2000
    small_catalog_threshold: int = 1500
    large_catalog_threshold: int = 1500
    max_category_estimation: int = 5000
    max_recursion_depth: int = 20
    dfs_chunk_size: int = 1600
    names_registry_cap: int = 2000
    hybrid_bfs_cap: int = 650
    hybrid_unmapped_cache_cap: int = 300
    category_safety_limit: int = 1900
    separator: str = " > "

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_quota(self) -> "CategoryIndexSettings":
        if self.small_catalog_threshold > self.large_catalog_threshold:
            raise ValueError("small_catalog_threshold must not exceed large_catalog_threshold")
        bounded = {
            "small_catalog_threshold": self.small_catalog_threshold,
            "dfs_chunk_size": self.dfs_chunk_size,
            "names_registry_cap": self.names_registry_cap,
            "hybrid_bfs_cap": self.hybrid_bfs_cap,
            "hybrid_unmapped_cache_cap": self.hybrid_unmapped_cache_cap,
            "category_safety_limit": self.category_safety_limit,
        }
        for name, value in bounded.items():
            if value < 1:
                raise ValueError(f"{name} must be positive")
            if value > self.max_object_keys:
                raise ValueError(f"{name} ({value}) exceeds max_object_keys ({self.max_object_keys})")
        return self

    @classmethod
    def from_config(cls) -> "CategoryIndexSettings":
        return cls(
            max_object_keys=Config.MAX_OBJECT_KEYS,
            small_catalog_threshold=Config.SMALL_CATALOG_THRESHOLD,
            large_catalog_threshold=Config.LARGE_CATALOG_THRESHOLD,
            max_category_estimation=Config.MAX_CATEGORY_ESTIMATION,
            max_recursion_depth=Config.MAX_RECURSION_DEPTH,
            dfs_chunk_size=Config.DFS_CHUNK_SIZE,
            names_registry_cap=Config.NAMES_REGISTRY_CAP,
            hybrid_bfs_cap=Config.HYBRID_BFS_CAP,
            hybrid_unmapped_cache_cap=Config.HYBRID_UNMAPPED_CACHE_CAP,
            category_safety_limit=Config.CATEGORY_SAFETY_LIMIT,
            separator=Config.CATEGORY_SEPARATOR,
        )
