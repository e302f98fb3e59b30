"""
Bridge Transport

Sends an Event to a bridge endpoint over HTTP and returns the parsed
ExecutionOutput. Transient failures are retried with backoff.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import asyncio
import json
import logging

import aiohttp
from async_timeout import timeout as async_timeout

from ..config import get_config
from ..errors import BridgeRequestError
from ..schemas.execution import Event, ExecutionOutput
from ..utils.retry import compute_backoff
from ..utils.signature import SIGNATURE_HEADER, sign_body

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429})


def is_retryable(status: int) -> bool:
    return status in RETRYABLE_STATUS_CODES or status >= 500


def parse_bridge_body(text: str) -> Any:
    """Parse a bridge response body, wrapping anything that is not JSON."""
    try:
        return json.loads(text)
    except ValueError:
        logger.error(f"Unexpected body received from Bridge: {text}")
        return {"error": f"Unexpected body received from Bridge: {text}"}


class BridgeTransport:
    """
    HTTP client for the bridge endpoint.

    Args:
        bridge_url: Default endpoint, e.g. ``https://app.example.com/api/stepbridge``
        secret_key: Shared secret used to sign requests
        retries_limit: Retries after the first attempt
        timeout_seconds: Bound on the whole exchange, retries included
        http_client: Optional session to reuse
        backoff: Seconds to wait before retry ``attempt``
    """

    def __init__(
        self,
        bridge_url: Optional[str] = None,
        secret_key: Optional[str] = None,
        retries_limit: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[aiohttp.ClientSession] = None,
        backoff: Callable[[int], float] = compute_backoff,
    ):
        config = get_config()
        self.bridge_url = bridge_url or config.bridge.url
        self.secret_key = secret_key if secret_key is not None else config.security.secret_key
        self.retries_limit = retries_limit if retries_limit is not None else config.bridge.retries_limit
        self.timeout_seconds = timeout_seconds or config.bridge.timeout_seconds
        self._backoff = backoff
        self._http = http_client
        self._owns_http = http_client is None

    async def _get_http(self) -> aiohttp.ClientSession:
        """Get or create HTTP client."""
        if self._http is None:
            self._http = aiohttp.ClientSession()
        return self._http

    async def close(self) -> None:
        """Close resources."""
        if self._owns_http and self._http:
            await self._http.close()
            self._http = None

    def _headers(self, body: str) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.secret_key:
            headers[SIGNATURE_HEADER] = sign_body(self.secret_key, body)
        return headers

    async def send(self, event: Event, bridge_url: Optional[str] = None) -> ExecutionOutput:
        """
        POST ``event`` to the bridge.

        Raises:
            BridgeRequestError: On a non-retryable failure or once retries run out
        """
        url = bridge_url or self.bridge_url
        if not url:
            raise BridgeRequestError("", None, {"error": "Bridge URL is not configured"})

        wire = event.to_wire()
        body = json.dumps({key: wire[key] for key in ("payload", "subscriber", "state", "controls")})
        params = {
            "action": event.action.value,
            "workflowId": event.workflow_id,
            "stepId": event.step_id,
        }

        http = await self._get_http()
        retry_count = 0
        try:
            async with async_timeout(self.timeout_seconds):
                while True:
                    try:
                        async with http.post(
                            url, params=params, data=body, headers=self._headers(body)
                        ) as response:
                            status = response.status
                            text = await response.text()
                    except aiohttp.ClientError as e:
                        if retry_count < self.retries_limit:
                            retry_count += 1
                            logger.warning(f"Bridge request to {url} failed ({e}), retry {retry_count}")
                            await asyncio.sleep(self._backoff(retry_count))
                            continue
                        raise BridgeRequestError(url, None, {"error": str(e)}, retry_count) from e

                    if status < 400:
                        try:
                            return ExecutionOutput.model_validate(json.loads(text))
                        except ValueError as e:
                            raise BridgeRequestError(
                                url, status, parse_bridge_body(text), retry_count
                            ) from e

                    if is_retryable(status) and retry_count < self.retries_limit:
                        retry_count += 1
                        logger.warning(f"Bridge responded {status} for {url}, retry {retry_count}")
                        await asyncio.sleep(self._backoff(retry_count))
                        continue

                    raise BridgeRequestError(url, status, parse_bridge_body(text), retry_count)
        except asyncio.TimeoutError as e:
            raise BridgeRequestError(
                url, None, {"error": "Bridge request timed out"}, retry_count
            ) from e
