# pixlee_export/config.py
import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import List

# Load environment variables
load_dotenv()

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Config:
    """Configuration settings for the export cartridge"""

    # Site preferences
    SITE_ID: str = os.getenv("SITE_ID", "RefArch")
    PIXLEE_ENABLED: bool = _env_bool("PIXLEE_ENABLED", "true")
    PIXLEE_API_KEY: str = os.getenv("PIXLEE_API_KEY", "")
    PIXLEE_PRIVATE_API_KEY: str = os.getenv("PIXLEE_PRIVATE_API_KEY", "")
    PIXLEE_SECRET_KEY: str = os.getenv("PIXLEE_SECRET_KEY", "")
    PIXLEE_API_URL: str = os.getenv("PIXLEE_API_URL", "https://distillery.pixlee.co/api/")
    PIXLEE_TRACKING: str = os.getenv("PIXLEE_TRACKING", "TRACK_ALWAYS")
    SKU_REFERENCE: str = os.getenv("SKU_REFERENCE", "Product ID")
    STOREFRONT_URL: str = os.getenv("STOREFRONT_URL", "https://www.example.com")
    PRODUCT_HOST: str = os.getenv("PRODUCT_HOST", "")

    # Locale and currency settings
    DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", "en_US")
    ALLOWED_LOCALES: List[str] = _env_list("ALLOWED_LOCALES", "default,en_US")
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "USD")
    ALLOWED_CURRENCIES: List[str] = _env_list("ALLOWED_CURRENCIES", "USD")

    # Platform identification sent along with every payload
    VERSION_HASH: str = os.getenv("VERSION_HASH", "unknown version")
    ECOMM_PLATFORM: str = os.getenv("ECOMM_PLATFORM", "demandware")
    ECOMM_PLATFORM_VERSION: str = os.getenv("ECOMM_PLATFORM_VERSION", "unknown version")

    # Category index settings
    MAX_OBJECT_KEYS: int = int(os.getenv("MAX_OBJECT_KEYS", "2000"))
    SMALL_CATALOG_THRESHOLD: int = int(os.getenv("SMALL_CATALOG_THRESHOLD", "1500"))
    LARGE_CATALOG_THRESHOLD: int = int(os.getenv("LARGE_CATALOG_THRESHOLD", "1500"))
    MAX_CATEGORY_ESTIMATION: int = int(os.getenv("MAX_CATEGORY_ESTIMATION", "5000"))
    MAX_RECURSION_DEPTH: int = int(os.getenv("MAX_RECURSION_DEPTH", "20"))
    DFS_CHUNK_SIZE: int = int(os.getenv("DFS_CHUNK_SIZE", "1600"))
    NAMES_REGISTRY_CAP: int = int(os.getenv("NAMES_REGISTRY_CAP", "2000"))
    HYBRID_BFS_CAP: int = int(os.getenv("HYBRID_BFS_CAP", "650"))
    HYBRID_UNMAPPED_CACHE_CAP: int = int(os.getenv("HYBRID_UNMAPPED_CACHE_CAP", "300"))
    CATEGORY_SAFETY_LIMIT: int = int(os.getenv("CATEGORY_SAFETY_LIMIT", "1900"))
    CATEGORY_SEPARATOR: str = " > "

    # Job settings
    PROGRESS_LOG_INTERVAL: int = int(os.getenv("PROGRESS_LOG_INTERVAL", "100"))
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "30"))

    # Other settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Paths
    CATALOG_PATH = Path(os.getenv("CATALOG_PATH", str(BASE_DIR / "data" / "catalog.json")))
    COUNTRIES_PATH = Path(os.getenv("COUNTRIES_PATH", "")) if os.getenv("COUNTRIES_PATH") else None
    LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))


def setup_logging():
    """Configure logging settings"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    Config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = Config.LOG_DIR / "export.log"

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
