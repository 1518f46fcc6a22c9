# pixlee_export/services/__init__.py
"""Services of the export cartridge"""
from .category_index import CategoryIndexManager
from .currency_service import CurrencyService
from .export_service import ExportService
from .pixlee_service import PixleeService
from .tracking_service import TrackingService

__all__ = [
    'CategoryIndexManager',
    'CurrencyService',
    'ExportService',
    'PixleeService',
    'TrackingService',
]
