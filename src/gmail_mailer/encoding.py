# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Content encoding policies for outgoing messages.

Three policies, selected by :class:`~gmail_mailer.models.EncodingType`:

- ``subject``: RFC 2047 encoded-word ``=?utf-8?B?...?=`` (always applied,
  empty subjects become ``No Subject`` first).
- ``mime_message``: URL-safe Base64 of the whole message, padding kept.
- ``attachment``: standard Base64, skipped when the content already is
  valid Base64 so pre-encoded payloads are never encoded twice.

Every policy returns an :class:`~gmail_mailer.models.EncodingResult` and
never raises.

Example:
    Encoding a subject::

        result = encode_email_content("Hello", EncodingType.SUBJECT)
        # result.encoded_content == "=?utf-8?B?SGVsbG8=?="
"""

from __future__ import annotations

import base64
import logging
import re

from .logger import DiagnosticHook, emit_diagnostic
from .models import EncodingResult, EncodingType

NO_SUBJECT = "No Subject"

BASE64_PATTERN = re.compile(
    r"(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?"
)
MIME_ENCODED_WORD_PATTERN = re.compile(r"=\?utf-8\?(B|Q)\?[^?]*\?=", re.IGNORECASE)


def is_base64(value: str) -> bool:
    """Return True if ``value`` is entirely standard, padded Base64."""
    return BASE64_PATTERN.fullmatch(value) is not None


def is_subject_mime_encoded(subject: str) -> bool:
    """Return True if ``subject`` contains a UTF-8 RFC 2047 encoded-word."""
    return MIME_ENCODED_WORD_PATTERN.search(subject) is not None


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _encode_subject(content: str) -> tuple[str, str]:
    subject = content or NO_SUBJECT
    return f"=?utf-8?B?{_b64(subject)}?=", "Email subject encoded successfully."


def _encode_mime_message(content: str) -> tuple[str, str]:
    encoded = base64.urlsafe_b64encode(content.encode("utf-8")).decode("ascii")
    return encoded, "MIME message encoded successfully."


def _encode_attachment(content: str) -> tuple[str, str]:
    if is_base64(content):
        return content, "Attachment content was already Base64 encoded."
    return _b64(content), "Attachment content encoded successfully."


_POLICIES = {
    EncodingType.SUBJECT: _encode_subject,
    EncodingType.MIME_MESSAGE: _encode_mime_message,
    EncodingType.ATTACHMENT: _encode_attachment,
}


def encode_email_content(
    content: str,
    kind: EncodingType | str,
    on_diagnostic: DiagnosticHook | None = None,
) -> EncodingResult:
    """Encode ``content`` according to the ``kind`` policy.

    Args:
        content: Text to encode.
        kind: An :class:`EncodingType` or its string value.
        on_diagnostic: Optional hook notified of failures.

    Returns:
        EncodingResult: ``succeeded`` is False for an unknown ``kind`` or
        any encoding error; ``encoded_content`` is then ``content``
        unchanged.
    """
    try:
        try:
            policy = _POLICIES[EncodingType(kind)]
        except ValueError:
            raise ValueError(f"Invalid encoding type specified: {kind}") from None
        encoded, message = policy(content)
    except Exception as exc:
        message = f"Error during encoding: {exc}"
        emit_diagnostic(on_diagnostic, "encoding_error", message, logging.ERROR)
        return EncodingResult(succeeded=False, encoded_content=content, message=message)
    return EncodingResult(succeeded=True, encoded_content=encoded, message=message)
