# pixlee_export/services/pixlee_service.py
import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode
import aiohttp
from ..config import Config
from ..exceptions import PixleeServiceError
from ..models.job import ServiceResult
from ..models.site import Site
from ..utils.security import generate_payload_signature, serialize_payload

ALT_REFERER = "demandware.pixlee.com"


class PixleeService:
    """Client of the Pixlee distillery API"""

    def __init__(self, site: Site, session: Optional[aiohttp.ClientSession] = None,
                 timeout: Optional[float] = None):
        self.site = site
        self.session = session
        self.timeout = aiohttp.ClientTimeout(total=timeout or Config.HTTP_TIMEOUT)
        self.logger = logging.getLogger(__name__)

    def build_url(self, endpoint: str, query_string: Optional[str] = None) -> str:
        base_url = self.site.api_url if self.site.api_url.endswith("/") else self.site.api_url + "/"
        query = query_string or urlencode({"api_key": self.site.api_key})
        return f"{base_url}{endpoint.lstrip('/')}?{query}"

    async def call(self, endpoint: str, payload: Optional[Dict[str, Any]] = None,
                   signature: Optional[str] = None, query_string: Optional[str] = None) -> ServiceResult:
        """POST the payload as JSON, or GET when there is none"""
        if not endpoint:
            raise ValueError("Required endpoint parameter missing")

        url = self.build_url(endpoint, query_string)
        headers = {
            "Content-Type": "application/json",
            "X-Alt-Referer": ALT_REFERER,
        }
        if signature:
            headers["Signature"] = signature

        method = "POST" if payload is not None else "GET"
        body = serialize_payload(payload) if payload is not None else None

        try:
            if self.session is not None:
                return await self._send(self.session, method, url, headers, body)
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                return await self._send(session, method, url, headers, body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Pixlee {method} {endpoint} failed: {e}")
            return ServiceResult(ok=False, error_message=str(e))

    async def _send(self, session: aiohttp.ClientSession, method: str, url: str,
                    headers: Dict[str, str], body: Optional[str]) -> ServiceResult:
        async with session.request(method, url, data=body, headers=headers) as response:
            text = await response.text(errors="replace")
            if response.status >= 400:
                return ServiceResult(
                    ok=False,
                    status=response.status,
                    text=text,
                    error_message=f"HTTP {response.status}: {response.reason}"
                )
            return ServiceResult(ok=True, status=response.status, text=text)

    async def post_product(self, payload: Dict[str, Any]) -> ServiceResult:
        """Export one product album"""
        signature = generate_payload_signature(payload, self.site.secret_key)
        result = await self.call("v2/albums", payload=payload, signature=signature)

        if not result.ok:
            raise PixleeServiceError(
                f"Failed to post product: {result.error_message}", status=result.status
            )
        return result

    async def get_countries_map(self) -> Optional[Dict[str, Any]]:
        """Country code -> currency map, or None when it cannot be retrieved"""
        result = await self.call("v1/getSFCountryMap")

        if not result.ok:
            self.logger.error(
                f"Failed to retrieve currency-to-country map from Pixlee, "
                f"status {result.status}, error message: {result.error_message}"
            )
            return None

        try:
            return result.parse_json()
        except (TypeError, ValueError) as e:
            self.logger.error(f"Failed to parse currency-to-country map response from Pixlee: {e}")
            return None

    async def notify_export_status(self, status: str, job_id: str,
                                   num_products: Optional[int]) -> ServiceResult:
        payload = {
            "api_key": self.site.api_key,
            "status": status,
            "job_id": job_id,
            "num_products": num_products,
            "platform": self.site.ecomm_platform,
        }
        result = await self.call("v1/notifyExportStatus", payload=payload)
        if not result.ok:
            self.logger.warning(f"Failed to notify export status '{status}' for job {job_id}: "
                                f"{result.error_message}")
        return result
