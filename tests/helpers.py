"""Test helpers shared by the gmail-mailer test modules."""

import base64
import re
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from gmail_mailer.transport import TransportResponse

SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"


class DummyTransport:
    """Transport recording payloads instead of calling the API."""

    def __init__(self, status: int = 200, status_text: str = "OK", data: Any = None):
        self.sent: list[str] = []
        self.status = status
        self.status_text = status_text
        self.data = data if data is not None else {"id": "msg-1", "labelIds": ["SENT"]}
        self.raise_error: Exception | None = None

    async def send_message(self, raw: str) -> TransportResponse:
        self.sent.append(raw)
        if self.raise_error:
            raise self.raise_error
        return TransportResponse(
            status=self.status,
            status_text=self.status_text,
            request_url=SEND_URL,
            data=self.data,
        )


def decode_payload(raw: str) -> str:
    """Decode a URL-safe Base64 transport payload back to MIME text."""
    return base64.urlsafe_b64decode(raw.encode("ascii")).decode("utf-8")


def decode_subject(mime_text: str) -> str:
    """Return the decoded text of the encoded-word Subject header."""
    match = re.search(r"^Subject: =\?utf-8\?B\?([^?]*)\?=\r$", mime_text, re.MULTILINE)
    assert match, "Subject header is not an encoded-word"
    return base64.b64decode(match.group(1)).decode("utf-8")


def mock_session(response):
    """Build a patched ``aiohttp.ClientSession`` whose ``post`` yields ``response``.

    Returns:
        Tuple of (session factory for ``patch``, session mock).
    """
    post_cm = MagicMock()
    post_cm.__aenter__ = AsyncMock(return_value=response)
    post_cm.__aexit__ = AsyncMock(return_value=None)

    session = MagicMock()
    session.post = MagicMock(return_value=post_cm)

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=None)
    return MagicMock(return_value=session_cm), session


def mock_response(status: int = 200, reason: str = "OK", payload: Any = None, url: str = SEND_URL):
    """Build an aiohttp response mock."""
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.url = url
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value="")
    return response
