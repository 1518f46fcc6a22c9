# tests/test_category_index.py
import pytest
from pixlee_export.catalog import Category, InMemoryCatalog
from pixlee_export.models.category import CategoryIndexSettings, StrategyType
from pixlee_export.services.category_index import CategoryIndexManager, resolve_product_categories


class BrokenCatalog(InMemoryCatalog):
    def get_root(self):
        raise RuntimeError("catalog unavailable")


def test_product_categories_include_ancestors(balanced_catalog, settings):
    manager = CategoryIndexManager(balanced_catalog(50), settings)

    categories = manager.get_categories_for_product(["cat-5", "cat-6"])

    assert [c.category_id for c in categories] == ["cat-5", "cat-1", "cat-6"]
    assert categories[0].category_name == "Category 1 > Category 5"
    assert categories[1].category_name == "Category 1"


def test_empty_assignments(balanced_catalog, settings):
    manager = CategoryIndexManager(balanced_catalog(50), settings)
    assert manager.get_categories_for_product([]) == []
    assert manager.get_categories_for_product(None) == []
    # Nothing is built for products without categories
    assert manager.strategy is None


def test_unknown_ids_are_skipped(balanced_catalog, settings):
    manager = CategoryIndexManager(balanced_catalog(50), settings)
    categories = manager.get_categories_for_product(["missing", "cat-2"])
    assert [c.category_id for c in categories] == ["cat-2"]


def test_safety_limit_caps_result(balanced_catalog):
    settings = CategoryIndexSettings(category_safety_limit=5)
    manager = CategoryIndexManager(balanced_catalog(50), settings)

    categories = manager.get_categories_for_product([f"cat-{i}" for i in range(1, 11)])

    assert len(categories) == 5


def test_resolve_with_plain_lookup():
    from pixlee_export.models.category import CategoryIndexEntry

    entries = {
        "a": CategoryIndexEntry(full_name="A"),
        "b": CategoryIndexEntry(full_name="A > B", parent_ids=("a",)),
    }
    categories = resolve_product_categories(["b", "a"], entries.get, 10)
    assert [(c.category_id, c.category_name) for c in categories] == [("b", "A > B"), ("a", "A")]


def test_lookup_builds_once(balanced_catalog, settings):
    manager = CategoryIndexManager(balanced_catalog(50), settings)
    manager.pre_initialize()
    strategy = manager.strategy
    manager.pre_initialize()
    manager.lookup("cat-3")

    assert manager.strategy is strategy
    assert strategy.is_built


def test_statistics_and_clear(balanced_catalog, settings):
    manager = CategoryIndexManager(balanced_catalog(50), settings)
    stats = manager.get_cache_statistics()
    assert stats.strategy_type is None
    assert not stats.is_built

    manager.get_categories_for_product(["cat-7"])
    stats = manager.get_cache_statistics()
    assert stats.strategy_type == StrategyType.SINGLE_MAP
    assert stats.is_built
    assert stats.map_sizes == {"categoriesMap": 50}
    assert stats.map_limits == {"categoriesMap": settings.max_object_keys}

    manager.clear()
    assert manager.strategy is None
    assert manager.get_cache_statistics().map_sizes == {}


def test_pre_initialize_propagates_errors(settings):
    manager = CategoryIndexManager(BrokenCatalog(Category("root", "Root")), settings)
    with pytest.raises(RuntimeError):
        manager.pre_initialize()


def test_resolution_errors_give_empty_list(settings):
    manager = CategoryIndexManager(BrokenCatalog(Category("root", "Root")), settings)
    assert manager.get_categories_for_product(["cat-1"]) == []


def test_large_catalog_uses_hybrid_and_stays_under_quota(balanced_catalog, settings, ancestor_ids):
    catalog = balanced_catalog(3513)
    manager = CategoryIndexManager(catalog, settings)
    manager.pre_initialize()

    deepest = catalog.get_category("cat-3513")
    expected_ids = ["cat-3513"] + ancestor_ids(deepest)
    categories = manager.get_categories_for_product(["cat-3513"])

    assert len(ancestor_ids(deepest)) == 5
    assert sorted(c.category_id for c in categories) == sorted(expected_ids)
    assert categories[0].category_name.count(" > ") == 5

    for i in range(1, 3514):
        manager.get_categories_for_product([f"cat-{i}"])

    stats = manager.get_cache_statistics()
    assert stats.strategy_type == StrategyType.HYBRID_BFS
    assert stats.largest_map <= settings.max_object_keys
    assert stats.map_sizes["bfsMap"] <= settings.hybrid_bfs_cap
    assert stats.map_sizes["unmappedCache"] <= settings.hybrid_unmapped_cache_cap


def test_catalog_just_below_threshold_uses_single_map(balanced_catalog, settings):
    manager = CategoryIndexManager(balanced_catalog(settings.large_catalog_threshold - 1), settings)
    manager.pre_initialize()

    stats = manager.get_cache_statistics()
    assert stats.strategy_type == StrategyType.SINGLE_MAP
    assert stats.map_sizes["categoriesMap"] == settings.large_catalog_threshold - 1


def test_repeated_resolution_is_identical(balanced_catalog, settings):
    manager = CategoryIndexManager(balanced_catalog(3000), settings)
    ids = ["cat-2999", "cat-12", "cat-2999"]

    first = manager.get_categories_for_product(ids)
    second = manager.get_categories_for_product(ids)

    assert first == second
    assert len({c.category_id for c in first}) == len(first)
