# tests/conftest.py
from collections import deque
from typing import List
import pytest
from pixlee_export.catalog import Category, InMemoryCatalog
from pixlee_export.models.category import CategoryIndexSettings
from pixlee_export.models.site import Site


def _build_balanced_catalog(count: int, branching: int = 4, products=()) -> InMemoryCatalog:
    """Catalog of ``count`` categories filled level by level, ``branching`` children each"""
    root = Category("root", "Root")
    parents = deque([root])
    created = 0
    while created < count:
        parent = parents.popleft()
        for _ in range(branching):
            if created >= count:
                break
            created += 1
            parents.append(parent.add_child(f"cat-{created}", f"Category {created}"))
    return InMemoryCatalog(root, products)


def _build_chain_catalog(depth: int, products=()) -> InMemoryCatalog:
    """Single branch c1 > c2 > ... > c<depth>"""
    root = Category("root", "Root")
    current = root
    for level in range(1, depth + 1):
        current = current.add_child(f"c{level}", f"Level {level}")
    return InMemoryCatalog(root, products)


def _ancestor_ids(category: Category) -> List[str]:
    ids = []
    parent = category.get_parent()
    while parent is not None and parent.get_parent() is not None:
        ids.append(parent.get_id())
        parent = parent.get_parent()
    return list(reversed(ids))


@pytest.fixture
def balanced_catalog():
    return _build_balanced_catalog


@pytest.fixture
def chain_catalog():
    return _build_chain_catalog


@pytest.fixture
def ancestor_ids():
    return _ancestor_ids


@pytest.fixture
def settings():
    return CategoryIndexSettings()


@pytest.fixture
def site():
    return Site(
        site_id="RefArch",
        api_key="public-key",
        private_api_key="private-key",
        secret_key="secret",
        storefront_url="https://shop.example.com",
        allowed_locales=["default", "en_US", "fr_FR"],
        allowed_currencies=["USD", "EUR"],
    )
