# pixlee_export/services/category_strategies.py
"""
Category index strategies used while exporting products.

The export payload needs, for every category a product is assigned to, the
breadcrumb name of the category and the ids of its ancestors. Building one
map of the whole tree is the cheapest way to answer that, but the platform
aborts any operation that grows a single object beyond ``max_object_keys``
properties. The strategies below trade lookup cost for a bounded footprint:

* ``SingleMapStrategy`` - one map, for catalogs that fit in it.
* ``DFSChunkedStrategy`` - the tree split into fixed size maps.
* ``HybridBFSStrategy`` - a capped map of the top of the tree, a capped
  cache of later lookups and an ancestor walk for everything else.
"""
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Dict, Iterable, List, Optional, Set, Tuple
from ..catalog.base import Catalog, CategoryNode
from ..models.category import CategoryIndexEntry, CategoryIndexSettings, StrategyType

logger = logging.getLogger(__name__)

# (node, ids of its ancestors below the root)
CategoryPathItem = Tuple[CategoryNode, Tuple[str, ...]]


def estimate_category_count(catalog: Catalog, cap: int) -> int:
    """Approximate the number of categories below the root, stopping at ``cap``"""
    count = 0
    queue = deque(catalog.get_root().get_sub_categories())

    while queue and count < cap:
        category = queue.popleft()
        count += 1
        queue.extend(category.get_sub_categories())

    return count


def build_category_path(parent_ids: Iterable[str], names: Dict[str, str],
                        category_name: str, separator: str) -> str:
    """Join the names of the ancestors and the category itself into a breadcrumb"""
    parts = [names[parent_id] for parent_id in parent_ids if parent_id in names]
    parts.append(category_name)
    return separator.join(parts)


def collect_categories_dfs(category: CategoryNode, path: Tuple[str, ...], collected: List[CategoryPathItem],
                           max_depth: int, depth: int = 0, seen: Optional[Set[str]] = None):
    """Collect a subtree depth-first, pruning branches deeper than ``max_depth``"""
    if depth > max_depth:
        logger.warning(f"Category tree depth limit reached for category: {category.get_id()}")
        return

    seen = set() if seen is None else seen
    category_id = category.get_id()
    # A category reachable twice (cycle or shared child) is kept at its first position
    if category_id in seen:
        return
    seen.add(category_id)

    collected.append((category, path))

    child_path = path + (category_id,)
    for child in category.get_sub_categories():
        collect_categories_dfs(child, child_path, collected, max_depth, depth + 1, seen)


class CategoryIndexStrategy(ABC):
    """Lazily built category id -> CategoryIndexEntry index"""

    strategy_type: StrategyType

    def __init__(self, catalog: Catalog, settings: CategoryIndexSettings):
        self.catalog = catalog
        self.settings = settings
        self.is_built = False

    @property
    def name(self) -> str:
        return self.strategy_type.value

    def build(self):
        """Build the index; a no-op once built"""
        if not self.is_built:
            self._build()
            self.is_built = True

    def lookup(self, category_id: str) -> Optional[CategoryIndexEntry]:
        """Return the entry of a category, or None when it is not in this catalog"""
        self.build()
        return self._lookup(category_id)

    def clear(self):
        self._clear()
        self.is_built = False

    def counters(self) -> Dict[str, int]:
        return {}

    @abstractmethod
    def _build(self):
        ...

    @abstractmethod
    def _lookup(self, category_id: str) -> Optional[CategoryIndexEntry]:
        ...

    @abstractmethod
    def _clear(self):
        ...

    @abstractmethod
    def map_sizes(self) -> Dict[str, int]:
        ...

    @abstractmethod
    def map_limits(self) -> Dict[str, int]:
        ...


class SingleMapStrategy(CategoryIndexStrategy):
    """Whole tree in one map; only selected for catalogs that fit in it"""

    strategy_type = StrategyType.SINGLE_MAP

    def __init__(self, catalog: Catalog, settings: CategoryIndexSettings):
        super().__init__(catalog, settings)
        self.categories_map: Dict[str, CategoryIndexEntry] = {}

    def _build(self):
        logger.info("Building single categories map...")
        limit = self.settings.max_object_keys
        separator = self.settings.separator
        categories_map: Dict[str, CategoryIndexEntry] = {}

        # (node, parent ids, parent full name)
        queue = deque(
            (category, (), None) for category in self.catalog.get_root().get_sub_categories()
        )

        while queue:
            category, parent_ids, parent_name = queue.popleft()
            category_id = category.get_id()
            if category_id in categories_map:
                continue
            if len(categories_map) >= limit:
                logger.warning(f"Single categories map reached {limit} entries, "
                               f"remaining categories are not indexed")
                break

            name = category.get_display_name()
            full_name = f"{parent_name}{separator}{name}" if parent_name is not None else name
            categories_map[category_id] = CategoryIndexEntry(full_name=full_name, parent_ids=parent_ids)

            child_ids = parent_ids + (category_id,)
            queue.extend((child, child_ids, full_name) for child in category.get_sub_categories())

        self.categories_map = categories_map
        logger.info(f"Single map built with {len(categories_map)} categories")

    def _lookup(self, category_id: str) -> Optional[CategoryIndexEntry]:
        return self.categories_map.get(category_id)

    def _clear(self):
        self.categories_map = {}

    def map_sizes(self) -> Dict[str, int]:
        return {"categoriesMap": len(self.categories_map)}

    def map_limits(self) -> Dict[str, int]:
        return {"categoriesMap": self.settings.max_object_keys}


class DFSChunkedStrategy(CategoryIndexStrategy):
    """Tree collected depth-first and stored in maps of ``dfs_chunk_size`` entries"""

    strategy_type = StrategyType.DFS_CHUNKED

    def __init__(self, catalog: Catalog, settings: CategoryIndexSettings):
        super().__init__(catalog, settings)
        self.category_chunks: List[Dict[str, CategoryIndexEntry]] = []
        self.names_registry: Dict[str, str] = {}

    def _build(self):
        logger.info("Building DFS chunked categories map...")
        collected: List[CategoryPathItem] = []
        seen: Set[str] = set()
        for category in self.catalog.get_root().get_sub_categories():
            collect_categories_dfs(category, (), collected, self.settings.max_recursion_depth, seen=seen)

        logger.info(f"Collected {len(collected)} categories via DFS")

        # Names only; capped so the registry itself stays under the quota
        self.names_registry = {}
        for category, _ in collected:
            if len(self.names_registry) >= self.settings.names_registry_cap:
                break
            self.names_registry.setdefault(category.get_id(), category.get_display_name())

        chunk_size = self.settings.dfs_chunk_size
        self.category_chunks = []
        for start in range(0, len(collected), chunk_size):
            end = min(start + chunk_size, len(collected))
            self.category_chunks.append(self._process_chunk(collected[start:end], collected))
            logger.info(f"Processed DFS chunk {len(self.category_chunks)}: "
                        f"{end}/{len(collected)} categories")

    def _process_chunk(self, chunk: List[CategoryPathItem],
                       collected: List[CategoryPathItem]) -> Dict[str, CategoryIndexEntry]:
        local_names = {category.get_id(): category.get_display_name() for category, _ in chunk}

        missing = set()
        for _, path in chunk:
            for parent_id in path:
                if parent_id in local_names:
                    continue
                if parent_id in self.names_registry:
                    local_names[parent_id] = self.names_registry[parent_id]
                else:
                    missing.add(parent_id)

        if missing:
            self._find_missing_parent_names(missing, collected, local_names)

        chunk_map: Dict[str, CategoryIndexEntry] = {}
        for category, path in chunk:
            category_id = category.get_id()
            chunk_map[category_id] = CategoryIndexEntry(
                full_name=build_category_path(path, local_names, local_names[category_id],
                                              self.settings.separator),
                parent_ids=path,
            )
        return chunk_map

    @staticmethod
    def _find_missing_parent_names(missing: set, collected: List[CategoryPathItem],
                                   names: Dict[str, str]):
        remaining = set(missing)
        for category, _ in collected:
            if not remaining:
                break
            category_id = category.get_id()
            if category_id in remaining:
                names[category_id] = category.get_display_name()
                remaining.discard(category_id)

    def _lookup(self, category_id: str) -> Optional[CategoryIndexEntry]:
        for chunk in self.category_chunks:
            entry = chunk.get(category_id)
            if entry is not None:
                return entry
        return None

    def _clear(self):
        self.category_chunks = []
        self.names_registry = {}

    def map_sizes(self) -> Dict[str, int]:
        sizes = {f"chunk{i}": len(chunk) for i, chunk in enumerate(self.category_chunks)}
        sizes["namesRegistry"] = len(self.names_registry)
        return sizes

    def map_limits(self) -> Dict[str, int]:
        limits = {f"chunk{i}": self.settings.dfs_chunk_size for i in range(len(self.category_chunks))}
        limits["namesRegistry"] = self.settings.names_registry_cap
        return limits


class HybridBFSStrategy(CategoryIndexStrategy):
    """
    Capped breadth-first map of the top of the tree plus a capped cache of
    categories resolved later by walking up their parents.

    Neither map grows past its cap whatever the size of the catalog; the cost
    of a lookup outside both maps is bounded by the depth of the tree.
    """

    strategy_type = StrategyType.HYBRID_BFS

    def __init__(self, catalog: Catalog, settings: CategoryIndexSettings):
        super().__init__(catalog, settings)
        self.bfs_map: Dict[str, CategoryIndexEntry] = {}
        self.unmapped_cache: Dict[str, CategoryIndexEntry] = {}
        self.root_id: Optional[str] = None
        self._counters = {"bfsHits": 0, "cacheHits": 0, "walks": 0, "misses": 0}

    def _build(self):
        logger.info("Building hybrid BFS categories map...")
        cap = self.settings.hybrid_bfs_cap
        separator = self.settings.separator
        root = self.catalog.get_root()
        self.root_id = root.get_id()
        bfs_map: Dict[str, CategoryIndexEntry] = {}

        queue = deque((category, (), None) for category in root.get_sub_categories())
        while queue and len(bfs_map) < cap:
            category, parent_ids, parent_name = queue.popleft()
            category_id = category.get_id()
            if category_id in bfs_map:
                continue

            name = category.get_display_name()
            full_name = f"{parent_name}{separator}{name}" if parent_name is not None else name
            bfs_map[category_id] = CategoryIndexEntry(full_name=full_name, parent_ids=parent_ids)

            child_ids = parent_ids + (category_id,)
            queue.extend((child, child_ids, full_name) for child in category.get_sub_categories())

        self.bfs_map = bfs_map
        logger.info(f"Hybrid BFS map built with {len(bfs_map)} categories"
                    f"{', remaining categories resolved on demand' if queue else ''}")

    def _lookup(self, category_id: str) -> Optional[CategoryIndexEntry]:
        entry = self.bfs_map.get(category_id)
        if entry is not None:
            self._counters["bfsHits"] += 1
            return entry

        entry = self.unmapped_cache.get(category_id)
        if entry is not None:
            self._counters["cacheHits"] += 1
            return entry

        entry = self._resolve_by_walk(category_id)
        if entry is None:
            self._counters["misses"] += 1
            return None

        self._counters["walks"] += 1
        if len(self.unmapped_cache) < self.settings.hybrid_unmapped_cache_cap:
            self.unmapped_cache[category_id] = entry
        return entry

    def _resolve_by_walk(self, category_id: str) -> Optional[CategoryIndexEntry]:
        category = self.catalog.get_category(category_id)
        if category is None or category_id == self.root_id:
            return None

        names = [category.get_display_name()]
        walked_ids: List[str] = []
        anchor_id = None
        anchor: Optional[CategoryIndexEntry] = None

        current = category.get_parent()
        while current is not None:
            current_id = current.get_id()
            if current_id == self.root_id:
                break
            anchor = self.bfs_map.get(current_id)
            if anchor is None:
                anchor = self.unmapped_cache.get(current_id)
            if anchor is not None:
                anchor_id = current_id
                break
            if len(walked_ids) >= self.settings.max_recursion_depth:
                logger.warning(f"Category tree depth limit reached while resolving category: {category_id}")
                return None
            names.append(current.get_display_name())
            walked_ids.append(current_id)
            current = current.get_parent()
        else:
            # Parent chain ended without reaching the root of this catalog
            return None

        walked_ids.reverse()
        names.reverse()

        if anchor is None:
            return CategoryIndexEntry(
                full_name=self.settings.separator.join(names),
                parent_ids=tuple(walked_ids),
            )

        return CategoryIndexEntry(
            full_name=self.settings.separator.join([anchor.full_name] + names),
            parent_ids=anchor.parent_ids + (anchor_id,) + tuple(walked_ids),
        )

    def _clear(self):
        self.bfs_map = {}
        self.unmapped_cache = {}
        self.root_id = None
        self._counters = {key: 0 for key in self._counters}

    def counters(self) -> Dict[str, int]:
        return dict(self._counters)

    def map_sizes(self) -> Dict[str, int]:
        return {"bfsMap": len(self.bfs_map), "unmappedCache": len(self.unmapped_cache)}

    def map_limits(self) -> Dict[str, int]:
        return {
            "bfsMap": self.settings.hybrid_bfs_cap,
            "unmappedCache": self.settings.hybrid_unmapped_cache_cap,
        }


STRATEGIES = {
    StrategyType.SINGLE_MAP: SingleMapStrategy,
    StrategyType.DFS_CHUNKED: DFSChunkedStrategy,
    StrategyType.HYBRID_BFS: HybridBFSStrategy,
}


def select_strategy_type(category_count: int, settings: CategoryIndexSettings) -> StrategyType:
    """Pick the strategy for a catalog of ``category_count`` categories"""
    if category_count < settings.small_catalog_threshold:
        return StrategyType.SINGLE_MAP
    if category_count < settings.large_catalog_threshold:
        return StrategyType.DFS_CHUNKED
    return StrategyType.HYBRID_BFS


def create_strategy(catalog: Catalog, settings: CategoryIndexSettings) -> CategoryIndexStrategy:
    """Estimate the catalog size and build the matching (unbuilt) strategy"""
    try:
        category_count = estimate_category_count(catalog, settings.max_category_estimation)
        strategy_type = select_strategy_type(category_count, settings)
        logger.info(f"Detected {category_count} categories. "
                    f"Using {strategy_type.value} for {category_count} categories")
        return STRATEGIES[strategy_type](catalog, settings)
    except Exception as e:
        logger.warning(f"Failed to initialize category strategy: {e}")
        logger.info("Falling back to SingleMapStrategy")
        return SingleMapStrategy(catalog, settings)
