"""Client for the hosted multimodal chat-completion gateway.

One attempt per call, no failover and no retries. Upstream status codes are
translated into RelayError subclasses: 429 and 402 keep their meaning, anything
else non-2xx becomes UpstreamError.
"""

import os

import httpx
import structlog

from voicevision.core.config import API_KEY_ENV, Settings
from voicevision.core.errors import (
    ConfigurationError,
    QuotaExceeded,
    RateLimited,
    UpstreamError,
)

logger = structlog.get_logger(__name__)


class GatewayClient:
    """Thin async wrapper around the gateway's /chat/completions endpoint."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.url = settings.gateway_url
        self.model = settings.gateway_model
        self.timeout = settings.gateway_timeout
        self.client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    def is_healthy(self) -> bool:
        """True if the gateway credential is present in the environment."""
        return bool(os.environ.get(API_KEY_ENV))

    def _auth_headers(self) -> dict[str, str]:
        api_key = os.environ.get(API_KEY_ENV)
        if not api_key:
            logger.error("gateway.missing_key", env=API_KEY_ENV)
            raise ConfigurationError(f"{API_KEY_ENV} is not configured")
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _build_request(self, body: dict) -> httpx.Request:
        return self.client.build_request(
            "POST", self.url, json={"model": self.model, **body}, headers=self._auth_headers()
        )

    async def complete(self, messages: list[dict], temperature: float) -> str | None:
        """Run one non-streaming completion.

        Args:
            messages: OpenAI-style message list.
            temperature: Sampling temperature.

        Returns:
            Assistant message content (None if the gateway sent null content).

        Raises:
            ConfigurationError: Credential missing.
            RateLimited, QuotaExceeded, UpstreamError: Gateway refused or failed.
        """
        request = self._build_request({"messages": messages, "temperature": temperature})
        logger.debug("gateway.complete", model=self.model, messages=len(messages))

        response = await self._send(request, stream=False)
        await _raise_for_status(response)

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("gateway.malformed_envelope", error=str(e))
            raise UpstreamError(response.status_code, "AI gateway returned an unexpected response")

        logger.info("gateway.complete_ok", reply_len=len(content) if isinstance(content, str) else 0)
        return content if isinstance(content, str) else None

    async def stream(self, messages: list[dict]) -> httpx.Response:
        """Open a streaming completion and return the live response.

        The status is checked before returning, so a returned response is
        always 2xx. The caller owns the response and must aclose() it.
        """
        request = self._build_request({"messages": messages, "stream": True})
        logger.debug("gateway.stream", model=self.model, messages=len(messages))

        response = await self._send(request, stream=True)
        try:
            await _raise_for_status(response)
        except Exception:
            await response.aclose()
            raise
        return response

    async def _send(self, request: httpx.Request, stream: bool) -> httpx.Response:
        try:
            return await self.client.send(request, stream=stream)
        except httpx.TimeoutException:
            logger.error("gateway.timeout", threshold=self.timeout)
            raise UpstreamError(message="AI gateway timed out")
        except httpx.HTTPError as e:
            logger.error("gateway.transport_error", error=str(e))
            raise UpstreamError(message="AI gateway unreachable")

    async def aclose(self) -> None:
        await self.client.aclose()


async def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return

    body = await response.aread()
    logger.error("gateway.http_error", status=response.status_code,
                 body=body.decode(errors="ignore")[:200])

    if response.status_code == 429:
        raise RateLimited()
    if response.status_code == 402:
        raise QuotaExceeded()
    raise UpstreamError(response.status_code)
