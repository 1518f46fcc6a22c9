# pixlee_export/services/export_service.py
import logging
from typing import Dict, Iterable, Optional
from ..catalog.base import Catalog
from ..config import Config
from ..exceptions import ExportAbortedError
from ..models.category import CategoryIndexSettings
from ..models.export_payload import build_product_export_payload
from ..models.job import (
    ExportJobParameters,
    ExportOptions,
    JobStatus,
    JobStatusCode,
    ProductsSource,
)
from ..models.product import Product
from ..models.site import Site
from ..utils.security import generate_job_id
from .category_index import CategoryIndexManager
from .currency_service import CurrencyService
from .pixlee_service import PixleeService


class ExportService:
    """Exports the products of the site to Pixlee"""

    def __init__(self, catalog: Catalog, site: Site, pixlee_service: PixleeService,
                 currency_service: Optional[CurrencyService] = None,
                 settings: Optional[CategoryIndexSettings] = None):
        self.catalog = catalog
        self.site = site
        self.pixlee_service = pixlee_service
        self.currency_service = currency_service or CurrencyService(site, pixlee_service)
        self.settings = settings or CategoryIndexSettings.from_config()
        self.progress_interval = Config.PROGRESS_LOG_INTERVAL
        self.logger = logging.getLogger(__name__)

    def _get_products(self, parameters: ExportJobParameters) -> Iterable[Product]:
        if parameters.test_product_id:
            product = self.catalog.get_product(parameters.test_product_id)
            if product is None:
                self.logger.warning(f"Test product {parameters.test_product_id} not found")
                return []
            return [product]
        if parameters.products_source == ProductsSource.SEARCH_INDEX:
            return self.catalog.search_products()
        return self.catalog.query_all_site_products()

    def _get_options(self, parameters: ExportJobParameters) -> ExportOptions:
        only_regional = bool(parameters.main_site_id) and parameters.main_site_id != self.site.site_id
        return ExportOptions(
            image_view_type=parameters.image_view_type,
            only_regional_details=only_regional,
        )

    async def _notify(self, status: str, job_id: str, num_products: Optional[int]):
        try:
            await self.pixlee_service.notify_export_status(status, job_id, num_products)
        except Exception as e:
            self.logger.error(f"Failed to notify Pixlee that job {job_id} {status}: {e}")

    async def execute(self, parameters: Optional[ExportJobParameters] = None) -> JobStatus:
        """Run one export job"""
        parameters = parameters or ExportJobParameters()

        if not self.site.enabled:
            return JobStatus(status=JobStatusCode.OK, code="DISABLED",
                             message="Pixlee integration is disabled")
        if not self.site.private_api_key or not self.site.secret_key:
            self.logger.error("Pixlee private API key or secret key is not configured")
            return JobStatus(status=JobStatusCode.ERROR, code="ERROR",
                             message="Pixlee API credentials are missing")

        job_id = generate_job_id()
        options = self._get_options(parameters)
        category_index = CategoryIndexManager(self.catalog, self.settings)

        try:
            category_index.pre_initialize()
        except Exception as e:
            self.logger.warning(f"Failed to pre-initialize category index, continuing lazily: {e}")

        processed = 0
        exported = 0
        failed = 0
        consecutive_failures = 0
        total: Optional[int] = None

        try:
            products = [product for product in self._get_products(parameters) if product.is_exportable]
            total = len(products)

            await self._notify("started", job_id, total)
            self.logger.info(f"Export job {job_id} started for site {self.site.site_id}: {total} products")

            locale_currencies: Dict[str, str] = await self.currency_service.get_locale_currencies()

            for product in products:
                processed += 1

                try:
                    payload = build_product_export_payload(
                        product, self.site, category_index, options, locale_currencies
                    )
                    await self.pixlee_service.post_product(payload.model_dump(mode="json"))
                    exported += 1
                    consecutive_failures = 0
                except Exception as e:
                    failed += 1
                    consecutive_failures += 1
                    self.logger.error(f"Failed to export product {product.product_id}: {e}")

                    if 0 < parameters.break_after < consecutive_failures:
                        raise ExportAbortedError(
                            f"Stopped after {consecutive_failures} consecutive failures"
                        )

                if self.progress_interval and processed % self.progress_interval == 0:
                    self.logger.info(f"Processed {processed}/{total} products, {exported} exported, {failed} failed")

        except ExportAbortedError as e:
            self.logger.error(f"Export job {job_id} aborted: {e}")
            return JobStatus(status=JobStatusCode.ERROR, code="ERROR", message=str(e))

        finally:
            if total is not None:
                await self._notify("finished", job_id, total)
            stats = category_index.get_cache_statistics()
            self.logger.info(f"Category cache statistics: {stats.model_dump(mode='json')}")
            category_index.clear()

        if processed and not exported:
            return JobStatus(status=JobStatusCode.ERROR, code="ERROR",
                             message="No products exported")
        if failed:
            return JobStatus(status=JobStatusCode.ERROR, code="FINISHED_WITH_WARNINGS",
                             message=f"job id: {job_id}, {exported} products exported, {failed} failed")

        self.logger.info(f"Export job {job_id} finished, {exported} products exported")
        return JobStatus(status=JobStatusCode.OK, code="OK",
                         message=f"job id: {job_id}, {exported} products exported")
