"""Host catalog access"""
from .base import Catalog, CategoryNode
from .memory import Category, InMemoryCatalog, load_catalog

__all__ = [
    'Catalog',
    'CategoryNode',
    'Category',
    'InMemoryCatalog',
    'load_catalog',
]
