# pixlee_export/services/currency_service.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from ..models.site import Site


def get_country_code_from_locale(locale: str) -> Optional[str]:
    """Country part of a locale id such as en_US or fr-CA"""
    parts = locale.replace("-", "_").split("_")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1].upper()


class CurrencyService:
    """Looks up the currency to report for each locale of the site"""

    def __init__(self, site: Site, pixlee_service=None, countries_path: Optional[Path] = None):
        self.site = site
        self.pixlee_service = pixlee_service
        self.countries_path = countries_path
        self.countries_map: Optional[Dict[str, Any]] = None
        self._countries: Optional[List[Dict[str, Any]]] = None
        self.logger = logging.getLogger(__name__)

    def _load_countries(self) -> Optional[List[Dict[str, Any]]]:
        """Entries of the storefront countries config, or None without one"""
        if self._countries is None and self.countries_path:
            try:
                self._countries = json.loads(Path(self.countries_path).read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                self.logger.warning(f"Could not read countries config {self.countries_path}: {e}")
                self.countries_path = None
        return self._countries

    def _allowed_or_default(self, currency_code: Optional[str]) -> str:
        if currency_code and currency_code in self.site.allowed_currencies:
            return currency_code
        return self.site.default_currency

    async def get_countries_map(self) -> Optional[Dict[str, Any]]:
        """Countries map from Pixlee, fetched once and then kept"""
        if self.countries_map is None and self.pixlee_service is not None:
            self.countries_map = await self.pixlee_service.get_countries_map()
        return self.countries_map

    async def get_currency_for_locale(self, locale: Optional[str]) -> Optional[str]:
        if not locale:
            return None
        if locale.lower() == "default":
            return self.site.default_currency

        countries = self._load_countries()
        if countries is not None:
            for entry in countries:
                if entry.get("id") == locale:
                    return self._allowed_or_default(entry.get("currencyCode"))
            return self.site.default_currency

        country_code = get_country_code_from_locale(locale)
        if not country_code:
            return self.site.default_currency

        countries_map = await self.get_countries_map()
        currency_code = None
        if countries_map:
            currency_code = (countries_map.get(country_code) or {}).get("CurrencyCode")

        return self._allowed_or_default(currency_code)

    async def get_locale_currencies(self) -> Dict[str, str]:
        """Currency of every allowed locale except 'default'"""
        currencies = {}
        for locale in self.site.allowed_locales:
            if locale.lower() == "default":
                continue
            currencies[locale] = await self.get_currency_for_locale(locale)
        return currencies
