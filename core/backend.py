# =============================================================================
# core/backend.py  —  HTTP Client for the Swap / Vault Data APIs
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   A thin async JSON client used by the adapters' live tiers.  It attaches
#   the optional bearer credential, bounds every request by the configured
#   timeout, and turns EVERY kind of failure into UpstreamUnavailable:
#
#     - connect / read / pool timeouts        → UpstreamUnavailable
#     - DNS, refused connections, TLS errors  → UpstreamUnavailable
#     - any non-2xx status                    → UpstreamUnavailable
#     - a body that isn't JSON                → UpstreamUnavailable
#
#   The adapters never see an httpx exception; they only see data or the
#   one error type that means "try the next tier".
#
# TESTING:
#   Pass `transport=httpx.MockTransport(handler)` to serve canned responses
#   (or raise connection errors) without touching the network.
# =============================================================================

from typing import Any, Dict, Optional
import logging

import httpx

from core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class BackendClient:
    """Async JSON client for one upstream API."""

    def __init__(
        self,
        name: str,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._api_key = api_key
        self._transport = transport
        if not api_key:
            logger.info("%s: no API key configured, requests will be unauthenticated", name)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET `endpoint` and return the decoded JSON body."""
        return await self._request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """POST `data` as JSON to `endpoint` and return the decoded JSON body."""
        return await self._request("POST", endpoint, json=data)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.request(
                    method, url, params=params or None, json=json, headers=self._headers()
                )
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(
                f"{self.name}: request to {endpoint} timed out after {self.timeout_seconds}s",
                source=self.name,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(
                f"{self.name}: request to {endpoint} failed: {exc}", source=self.name
            ) from exc

        if not response.is_success:
            raise UpstreamUnavailable(
                f"{self.name}: {method} {endpoint} returned HTTP {response.status_code}",
                source=self.name,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(
                f"{self.name}: {method} {endpoint} returned a non-JSON body", source=self.name
            ) from exc
