# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Gmail API transport.

This module provides the collaborator that hands an encoded message to the
provider's send endpoint. The orchestrator only depends on the
:class:`GmailTransport` protocol, so tests and alternative providers can
plug in any object with an async ``send_message(raw)`` method.

Example:
    Sending a pre-built payload::

        transport = GmailApiTransport(StaticTokenSource("ya29.a0..."))
        response = await transport.send_message(build_raw_message(request))
        # response.status == 200
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from .logger import get_logger

GMAIL_API_BASE_URL = "https://gmail.googleapis.com"
DEFAULT_TIMEOUT = 30.0

logger = get_logger("GmailMailer.transport")


class TransportError(RuntimeError):
    """Raised when the send request could not be completed.

    Attributes:
        status: HTTP status when the failure carried one (e.g. token refused).
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


@dataclass
class TransportResponse:
    """Response of the provider's send endpoint.

    Attributes:
        status: HTTP status code.
        status_text: HTTP reason phrase.
        request_url: URL the request was sent to.
        data: Decoded JSON payload, or raw text if it was not JSON.
    """

    status: int
    status_text: str | None = None
    request_url: str | None = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class TokenSource(Protocol):
    """Anything able to produce a bearer access token."""

    async def get_token(self) -> str: ...


class GmailTransport(Protocol):
    """Send-message capability required by ``GmailMailer``."""

    async def send_message(self, raw: str) -> TransportResponse: ...


class StaticTokenSource:
    """Token source wrapping an access token obtained elsewhere."""

    def __init__(self, token: str):
        self._token = token

    async def get_token(self) -> str:
        return self._token


class GmailApiTransport:
    """Transport posting raw messages to ``users.messages.send``.

    One HTTP attempt per call; no retry, no backoff.

    Attributes:
        _token_source: Provider of bearer tokens.
        _user_id: Gmail user id, ``me`` for the delegated account.
        _base_url: API root, overridable for tests and proxies.
        _timeout: Total request timeout in seconds.
    """

    def __init__(
        self,
        token_source: TokenSource,
        user_id: str = "me",
        base_url: str = GMAIL_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._token_source = token_source
        self._user_id = user_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def send_url(self) -> str:
        """Endpoint URL of ``users.messages.send``."""
        return f"{self._base_url}/gmail/v1/users/{self._user_id}/messages/send"

    async def _headers(self) -> dict[str, str]:
        token = await self._token_source.get_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def send_message(self, raw: str) -> TransportResponse:
        """Send an encoded message.

        Args:
            raw: URL-safe Base64 message payload.

        Returns:
            TransportResponse for any HTTP answer, including non-2xx ones.

        Raises:
            TransportError: On network errors and timeouts. Token source
                errors propagate unchanged.
        """
        url = self.send_url
        headers = await self._headers()
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json={"raw": raw}, headers=headers) as response:
                    try:
                        data = await response.json(content_type=None)
                    except ValueError:
                        data = await response.text()
                    logger.debug("Gmail send answered %s for %s", response.status, url)
                    return TransportResponse(
                        status=response.status,
                        status_text=response.reason,
                        request_url=str(response.url),
                        data=data,
                    )
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Request to {url} timed out after {self._timeout}s") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
