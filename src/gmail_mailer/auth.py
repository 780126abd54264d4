# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""OAuth 2.0 access tokens for service accounts.

Implements the JWT bearer grant used by Google service accounts with
domain-wide delegation: an RS256-signed assertion naming the service
account (``iss``) and the impersonated sender (``sub``) is exchanged at the
token endpoint for a short-lived access token.

Example:
    Obtaining a token for the Gmail send scope::

        source = ServiceAccountTokenSource(account, subject="me@example.com")
        await source.authorize()
        token = await source.get_token()
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence

import aiohttp
from jose import jwt
from jose.exceptions import JOSEError

from .logger import get_logger
from .models import ServiceAccount

GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME = 3600
REFRESH_MARGIN = 60

logger = get_logger("GmailMailer.auth")


class AuthError(RuntimeError):
    """Raised when an access token cannot be obtained.

    Attributes:
        status: HTTP status of the token endpoint, when it answered.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ServiceAccountTokenSource:
    """Access tokens for a service account impersonating ``subject``.

    Tokens are cached and refreshed ``REFRESH_MARGIN`` seconds before they
    expire. Concurrent callers share a single refresh.
    """

    def __init__(
        self,
        service_account: ServiceAccount,
        subject: str | None = None,
        scopes: Sequence[str] = (GMAIL_SEND_SCOPE,),
        timeout: float = 30.0,
        clock: Callable[[], float] = time.time,
    ):
        self._account = service_account
        self._subject = subject
        self._scopes = tuple(scopes)
        self._timeout = timeout
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def token_uri(self) -> str:
        return self._account.token_uri

    def build_assertion(self) -> str:
        """Return the signed JWT assertion for the token request."""
        issued_at = int(self._clock())
        claims = {
            "iss": self._account.client_email,
            "scope": " ".join(self._scopes),
            "aud": self.token_uri,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME,
        }
        if self._subject:
            claims["sub"] = self._subject
        headers = {"kid": self._account.private_key_id} if self._account.private_key_id else None
        try:
            return jwt.encode(claims, self._account.private_key, algorithm="RS256", headers=headers)
        except JOSEError as exc:
            raise AuthError(f"Unable to sign the service account assertion: {exc}") from exc

    def _is_fresh(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at - REFRESH_MARGIN

    async def _request_token(self) -> None:
        form = {"grant_type": JWT_BEARER_GRANT, "assertion": self.build_assertion()}
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.token_uri, data=form) as response:
                    payload = await response.json(content_type=None)
                    status = response.status
        except asyncio.TimeoutError as exc:
            raise AuthError(f"Token request to {self.token_uri} timed out") from exc
        except (aiohttp.ClientError, ValueError) as exc:
            raise AuthError(f"Token request to {self.token_uri} failed: {exc}") from exc

        if status != 200 or not isinstance(payload, dict) or "access_token" not in payload:
            detail = ""
            if isinstance(payload, dict):
                detail = payload.get("error_description") or payload.get("error") or ""
            message = f"Token request rejected ({status})"
            if detail:
                message = f"{message}: {detail}"
            raise AuthError(message, status=status)

        self._token = payload["access_token"]
        self._expires_at = self._clock() + int(payload.get("expires_in", ASSERTION_LIFETIME))
        logger.debug("Access token obtained for %s", self._account.client_email)

    async def get_token(self) -> str:
        """Return a valid access token, refreshing it if needed.

        Raises:
            AuthError: If signing or the token exchange fails.
        """
        async with self._lock:
            if not self._is_fresh():
                await self._request_token()
            return self._token

    async def authorize(self) -> None:
        """Force a token exchange, validating the credentials end to end."""
        async with self._lock:
            await self._request_token()
