"""
D-ID Talking Avatar Client
==========================

Creates talks (avatar videos of a presenter reading text) on the D-ID API
and polls them until the video is ready.

Talk lifecycle on D-ID: created -> started -> done, or error / rejected.

Version: 0.1.0
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shared.config import settings
from shared.logging import get_logger


logger = get_logger(__name__)

TERMINAL_FAILURES = frozenset({"error", "rejected"})


# =============================================================================
# Errors
# =============================================================================


class DIDAgentError(Exception):
    """D-ID request failed; status_code mirrors the upstream status."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DIDNotConfiguredError(DIDAgentError):
    def __init__(self) -> None:
        super().__init__("DID API key is not configured", status_code=500)


class TalkFailedError(DIDAgentError):
    """The talk reached an error or rejected state."""


class TalkTimeoutError(DIDAgentError):
    """The talk was not done within the polling timeout."""

    def __init__(self, talk_id: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Talk {talk_id} was not ready after {timeout_seconds:g} seconds",
            status_code=504,
        )
        self.talk_id = talk_id


# =============================================================================
# Client
# =============================================================================


@dataclass
class DIDConfig:
    """Connection and voice settings for the D-ID API."""

    api_key: str
    base_url: str = "https://api.d-id.com"
    presenter_id: str = "kgn-KqCZSo"
    driver_id: str = "mdo-gpt"
    voice_id: str = "en-US-ChristopherNeural"
    voice_style: str = "Calm"
    poll_interval_seconds: float = 1.0
    poll_timeout_seconds: float = 60.0
    request_timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls) -> "DIDConfig":
        did = settings.did
        return cls(
            api_key=did.api_key.get_secret_value(),
            base_url=did.base_url,
            presenter_id=did.presenter_id,
            driver_id=did.driver_id,
            voice_id=did.voice_id,
            voice_style=did.voice_style,
            poll_interval_seconds=did.poll_interval_seconds,
            poll_timeout_seconds=did.poll_timeout_seconds,
            request_timeout_seconds=did.request_timeout_seconds,
        )


class DIDAgentClient:
    """
    Thin async client over the D-ID talks API.

    Transport failures are retried with exponential backoff; HTTP error
    responses are raised as DIDAgentError with the upstream status.
    """

    def __init__(
        self,
        config: DIDConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or DIDConfig.from_settings()
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if not self.config.api_key:
            raise DIDNotConfiguredError()
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.request_timeout_seconds,
                transport=self._transport,
                headers={
                    "Authorization": f"Basic {self.config.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def build_talk_payload(
        self,
        text: str,
        presenter_id: str | None = None,
        driver_id: str | None = None,
    ) -> dict[str, Any]:
        return {
            "script": {
                "type": "text",
                "input": text,
                "provider": {
                    "type": "microsoft",
                    "voice_id": self.config.voice_id,
                    "voice_config": {"style": self.config.voice_style},
                },
            },
            "config": {
                "fluent": True,
                "pad_audio": 0,
                "stitch": True,
            },
            "presenter_id": presenter_id or self.config.presenter_id,
            "driver_id": driver_id or self.config.driver_id,
        }

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "did_request_retry",
            attempt=retry_state.attempt_number,
        ),
    )
    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        client = self._get_client()
        response = await client.request(method, path, **kwargs)

        if response.is_error:
            try:
                message = response.json().get("message")
            except ValueError:
                message = None
            logger.error(
                "did_api_error",
                method=method,
                path=path,
                status=response.status_code,
                message=message,
            )
            raise DIDAgentError(
                message or "Error communicating with D-ID API",
                status_code=response.status_code,
            )

        return response.json()

    async def create_talk(
        self,
        text: str,
        presenter_id: str | None = None,
        driver_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Start generating a talk.

        Raises:
            DIDAgentError: 400 if the text is blank, otherwise the upstream failure
        """
        if not text or not text.strip():
            raise DIDAgentError("Text is required", status_code=400)

        payload = self.build_talk_payload(text, presenter_id, driver_id)
        talk = await self._request("POST", "/talks", json=payload)
        logger.info("did_talk_created", talk_id=talk.get("id"), presenter_id=payload["presenter_id"])
        return talk

    async def get_talk(self, talk_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/talks/{talk_id}")

    async def wait_for_talk(
        self,
        talk_id: str,
        interval_seconds: float | None = None,
        timeout_seconds: float | None = None,
    ) -> dict[str, Any]:
        """
        Poll a talk until its status is "done".

        Raises:
            TalkFailedError: The talk ended in error or rejected
            TalkTimeoutError: The talk was still pending at the timeout
        """
        interval = self.config.poll_interval_seconds if interval_seconds is None else interval_seconds
        timeout = self.config.poll_timeout_seconds if timeout_seconds is None else timeout_seconds
        deadline = time.monotonic() + timeout
        polls = 0

        while True:
            talk = await self.get_talk(talk_id)
            polls += 1
            talk_status = talk.get("status")

            if talk_status == "done":
                logger.info("did_talk_ready", talk_id=talk_id, polls=polls)
                return talk
            if talk_status in TERMINAL_FAILURES:
                error = talk.get("error") or {}
                raise TalkFailedError(
                    error.get("description") or f"Talk {talk_id} ended with status {talk_status}",
                    status_code=502,
                )
            if time.monotonic() >= deadline:
                logger.warning("did_talk_timeout", talk_id=talk_id, polls=polls, status=talk_status)
                raise TalkTimeoutError(talk_id, timeout)

            await self._sleep(interval)


_client: DIDAgentClient | None = None


def get_did_client() -> DIDAgentClient:
    """FastAPI dependency returning the shared D-ID client."""
    global _client
    if _client is None:
        _client = DIDAgentClient()
    return _client


async def close_did_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None
