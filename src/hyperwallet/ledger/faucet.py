"""
Faucet service client.

The faucet solves its proof-of-work challenge server side; the wallet only
checks that the service is up and asks it to fund an address.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from ..config import get_faucet_host
from ..errors import FetchError

logger = logging.getLogger(__name__)

READY_TIMEOUT = 3.0


class FaucetClient:
    def __init__(
        self,
        faucet_host: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        ready_timeout: float = READY_TIMEOUT,
    ) -> None:
        self.faucet_host = (faucet_host or get_faucet_host()).rstrip("/")
        self.ready_timeout = ready_timeout
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=30)

    async def __aenter__(self) -> "FaucetClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def request_transfer(self, address: str) -> None:
        """
        Ask the faucet to fund ``address``.

        Raises:
            FetchError: If the faucet is unreachable or answers non-2xx
        """
        url = f"{self.faucet_host}/faucet/{address}"
        try:
            response = await self._http.post(url, json={})
        except httpx.HTTPError as exc:
            raise FetchError(f"Faucet request failed: {exc}") from exc
        if not response.is_success:
            raise FetchError(f"HTTP error! status: {response.status_code}")
        logger.info("Faucet transfer requested for %s", address)

    async def is_ready(self) -> bool:
        """Liveness check; any failure, including the timeout, is ``False``."""
        url = f"{self.faucet_host}/readyz"
        try:
            response = await asyncio.wait_for(
                self._http.get(url, timeout=self.ready_timeout),
                timeout=self.ready_timeout,
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as exc:
            logger.debug("Faucet not ready: %s", exc)
            return False
        return response.is_success
