"""
Client for the external text-generation API.

One call = one prompt in, generated text plus stop reason out. Transport
failures that are worth repeating (network errors, timeouts, 429, 5xx) are
retried with exponential back-off before surfacing as TransportError.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from adaptive_planner.config import Settings, get_settings
from adaptive_planner.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

TRUNCATED_STOP_REASON = "max_tokens"
RETRY_WAIT_MAX_SECONDS = 10.0


class GenerationResponse(BaseModel):
    """Text returned by one generation request."""

    text: str = Field(default="", description="Concatenated text content blocks")
    stop_reason: Optional[str] = Field(default=None, description="Why generation stopped")

    @property
    def truncated(self) -> bool:
        return self.stop_reason == TRUNCATED_STOP_REASON


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.retryable


class GenerationClient:
    """
    Async wrapper around the messages endpoint.

    The API key is checked when a request is made, not when the client is
    built, so a missing credential fails before any network I/O.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str,
        model: str,
        max_tokens: int = 8000,
        api_version: str = "2023-06-01",
        timeout: float = 120.0,
        max_attempts: int = 3,
        retry_wait: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.max_tokens = max_tokens
        self.api_version = api_version
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "GenerationClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.ANTHROPIC_API_KEY,
            api_url=settings.ANTHROPIC_API_URL,
            model=settings.ANTHROPIC_MODEL,
            max_tokens=settings.GENERATION_MAX_TOKENS,
            api_version=settings.ANTHROPIC_VERSION,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            max_attempts=settings.TRANSPORT_MAX_ATTEMPTS,
            retry_wait=settings.TRANSPORT_RETRY_WAIT_SECONDS,
            transport=transport,
        )

    async def complete(self, prompt: str) -> GenerationResponse:
        """
        Send a prompt and return the generated text.

        Raises:
            ConfigurationError: No API key configured
            TransportError: Request failed after all retry attempts
        """
        if not self.api_key:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY is not configured; cannot request plan generation"
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_wait, max=RETRY_WAIT_MAX_SECONDS),
            retry=retry_if_exception(_is_retryable),
            before_sleep=self._log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._post(prompt)

        if response.truncated:
            logger.warning(
                "Generation stopped at the token limit (stop_reason=max_tokens); "
                "response will go through truncation repair"
            )
        return response

    async def _post(self, prompt: str) -> GenerationResponse:
        headers = {
            "content-type": "application/json",
            "x-api-key": self.api_key or "",
            "anthropic-version": self.api_version,
        }
        body = build_request_body(self.model, self.max_tokens, prompt)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(self.api_url, headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Generation request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Generation request failed: {exc}") from exc

        if response.status_code >= 400:
            status = response.status_code
            retryable = status == 429 or status >= 500
            logger.error(f"Generation API error {status}: {response.text[:200]}")
            raise TransportError(
                f"Generation API returned HTTP {status}",
                status_code=status,
                retryable=retryable,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(
                "Generation API returned a non-JSON envelope",
                status_code=response.status_code,
                retryable=False,
            ) from exc
        return self._read_envelope(payload, response.status_code)

    @staticmethod
    def _read_envelope(payload: Any, status_code: int) -> GenerationResponse:
        if not isinstance(payload, dict) or not isinstance(payload.get("content"), list):
            raise TransportError(
                "Generation API response has no content list",
                status_code=status_code,
                retryable=False,
            )
        blocks = [
            block for block in payload["content"]
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        text = "".join(str(block.get("text", "")) for block in blocks)
        stop_reason = payload.get("stop_reason")
        return GenerationResponse(
            text=text,
            stop_reason=stop_reason if isinstance(stop_reason, str) else None,
        )

    @staticmethod
    def _log_retry(retry_state: Any) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"Generation attempt {retry_state.attempt_number} failed ({exc}); retrying"
        )


def build_request_body(model: str, max_tokens: int, prompt: str) -> Dict[str, Any]:
    """Request body for the messages endpoint."""
    return {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }
