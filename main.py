# main.py
import asyncio
import logging
import sys
from pixlee_export.catalog import load_catalog
from pixlee_export.config import Config, setup_logging
from pixlee_export.models.job import ExportJobParameters
from pixlee_export.models.site import Site
from pixlee_export.services import CurrencyService, ExportService, PixleeService

async def main() -> int:
    # Setup logging
    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        site = Site.from_config()
        catalog = load_catalog(Config.CATALOG_PATH)

        pixlee_service = PixleeService(site)
        currency_service = CurrencyService(site, pixlee_service, Config.COUNTRIES_PATH)
        export_service = ExportService(catalog, site, pixlee_service, currency_service)

        logger.info("Starting product export...")
        status = await export_service.execute(ExportJobParameters())
        logger.info(f"Export finished with status {status.status.value}: {status.message}")
        return 0 if status.ok else 1
    except Exception as e:
        logger.error(f"Error running export: {e}", exc_info=True)
        raise

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
