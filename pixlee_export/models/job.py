# pixlee_export/models/job.py
import json
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import field_validator
from .base import PixleeModel


class ProductsSource(str, Enum):
    CATALOG = "CATALOG"
    SEARCH_INDEX = "SEARCH_INDEX"


class JobStatusCode(str, Enum):
    OK = "OK"
    ERROR = "ERROR"


class ExportJobParameters(PixleeModel):
    """Parameters configured for the export job step"""
    products_source: ProductsSource = ProductsSource.CATALOG
    break_after: int = 0
    image_view_type: Optional[str] = None
    main_site_id: Optional[str] = None
    test_product_id: Optional[str] = None

    @field_validator("break_after", mode="before")
    @classmethod
    def parse_break_after(cls, value: Any) -> int:
        # Unparseable values disable the consecutive failures limit
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            return 0

    @field_validator("image_view_type", "main_site_id", "test_product_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Optional[str]:
        return value or None


class ExportOptions(PixleeModel):
    """Options for building a product export payload"""
    image_view_type: Optional[str] = None
    only_regional_details: bool = False


class JobStatus(PixleeModel):
    """Outcome of one export job run"""
    status: JobStatusCode
    code: str
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == JobStatusCode.OK


class ServiceResult(PixleeModel):
    """Result of a call to the Pixlee web service"""
    ok: bool
    status: Optional[int] = None
    text: Optional[str] = None
    error_message: Optional[str] = None

    def parse_json(self) -> Optional[Dict[str, Any]]:
        return json.loads(self.text) if self.text else None
