"""
HTTP client utilities using httpx with SSL/proxy support
Used by the journey loader to fetch published journey definitions
"""

import httpx
import ssl
from typing import Optional, Dict, Any
from loguru import logger
from .exceptions import ServiceError


class HTTPClient:
    """Async HTTP client with SSL and proxy support"""

    def __init__(self,
                 timeout: int = 30,
                 verify_ssl: bool = True,
                 proxy: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.proxy = proxy
        self.transport = transport
        self.logger = logger

    def _create_client(self) -> httpx.AsyncClient:
        """Create configured httpx client"""

        # SSL verification settings
        if not self.verify_ssl:
            ssl_context = ssl.create_default_context()
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
            verify = ssl_context
        else:
            verify = True

        client_kwargs = {
            "timeout": self.timeout,
            "verify": verify,
            "headers": {"User-Agent": "jctl/0.1.0", "Accept": "application/json"}
        }

        if self.proxy:
            client_kwargs["proxy"] = self.proxy
        if self.transport is not None:
            client_kwargs["transport"] = self.transport

        return httpx.AsyncClient(**client_kwargs)

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """GET request returning the raw response body"""

        try:
            async with self._create_client() as client:
                self.logger.debug(f"GET {url}")

                response = await client.get(url, headers=headers)
                response.raise_for_status()

                return response.text

        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP {e.response.status_code}: {e.response.text}"
            self.logger.error(f"HTTP error for {url}: {error_msg}")
            raise ServiceError(f"HTTP request failed: {error_msg}")

        except httpx.RequestError as e:
            error_msg = f"Request error: {str(e)}"
            self.logger.error(f"Request error for {url}: {error_msg}")
            raise ServiceError(f"Network error: {error_msg}")

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """GET request returning JSON"""

        try:
            async with self._create_client() as client:
                self.logger.debug(f"GET {url}")

                response = await client.get(url, headers=headers)
                response.raise_for_status()

                return response.json()

        except ValueError as e:
            self.logger.error(f"Invalid JSON from {url}: {e}")
            raise ServiceError(f"Failed to parse JSON response: {e}")

        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP {e.response.status_code}: {e.response.text}"
            self.logger.error(f"HTTP error for {url}: {error_msg}")
            raise ServiceError(f"HTTP request failed: {error_msg}")

        except httpx.RequestError as e:
            error_msg = f"Request error: {str(e)}"
            self.logger.error(f"Request error for {url}: {error_msg}")
            raise ServiceError(f"Network error: {error_msg}")
