# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""MIME message assembly.

Builds the raw RFC 5322-shaped text of an outgoing message and its
URL-safe Base64 transport payload. The message is always multipart:
``multipart/mixed`` when attachments are present, ``multipart/alternative``
otherwise, with a single ``text/html`` or ``text/plain`` body part.

Example:
    Building the payload for the Gmail API::

        request = SendEmailRequest(
            sender_email="me@example.com",
            recipient_email="you@example.com",
            subject="Report",
            message="<p>See attached.</p>",
            attachments=[Attachment(filename="r.txt", mime_type="text/plain", content="hello")],
        )
        raw = build_raw_message(request)
"""

from __future__ import annotations

import random
import string
from email.utils import quote

from .encoding import encode_email_content
from .html import detect_html
from .logger import DiagnosticHook
from .models import EncodingType, SendEmailRequest

CRLF = "\r\n"
BOUNDARY_PREFIX = "----=_NextPart_"
BOUNDARY_ALPHABET = string.ascii_lowercase + string.digits
BOUNDARY_SUFFIX_LENGTH = 9


class MimeEncodingError(RuntimeError):
    """Raised when a part of the message cannot be encoded.

    The send must be aborted: an unencoded payload is never transmitted.
    """

    def __init__(self, message: str = "Failed to encode MIME message."):
        super().__init__(message)
        self.code = "mime_encoding_failed"


def generate_boundary() -> str:
    """Return a multipart boundary with a random alphanumeric suffix.

    The token only has to avoid colliding with body text, so the standard
    pseudo-random generator is used.
    """
    suffix = "".join(random.choices(BOUNDARY_ALPHABET, k=BOUNDARY_SUFFIX_LENGTH))
    return f"{BOUNDARY_PREFIX}{suffix}"


def check_header_value(value: str, field: str) -> str:
    """Return ``value`` unchanged, rejecting line breaks.

    Raises:
        ValueError: If ``value`` contains CR or LF.
    """
    if "\r" in value or "\n" in value:
        raise ValueError(f"Line breaks are not allowed in the {field} header.")
    return value


def format_sender(email: str, name: str | None = None) -> str:
    """Format the ``From:`` header value.

    The display name is a quoted-string, with ``"`` and ``\\`` escaped.
    """
    check_header_value(email, "From")
    if name:
        check_header_value(name, "From")
        return f'"{quote(name)}" <{email}>'
    return email


def _encode(content: str, kind: EncodingType, on_diagnostic: DiagnosticHook | None) -> str:
    result = encode_email_content(content, kind, on_diagnostic=on_diagnostic)
    if not result.succeeded:
        raise MimeEncodingError(f"Failed to encode {kind.value}: {result.message}")
    return result.encoded_content


def build_mime_message(
    request: SendEmailRequest,
    boundary: str | None = None,
    on_diagnostic: DiagnosticHook | None = None,
) -> str:
    """Assemble the raw MIME text for ``request``.

    Args:
        request: Send parameters; ``sender_email`` must already be resolved.
        boundary: Boundary token, generated when omitted.
        on_diagnostic: Optional hook forwarded to the encoder and detector.

    Returns:
        The message text, CRLF line endings, closed by ``--boundary--``.

    Raises:
        ValueError: If ``request.sender_email`` is empty or a header value
            contains a line break.
        MimeEncodingError: If the subject or an attachment cannot be encoded.
    """
    if not request.sender_email:
        raise ValueError("A sender email is required to build a message.")

    subject = _encode(request.subject or "", EncodingType.SUBJECT, on_diagnostic)
    message = request.message or ""
    is_html = detect_html(message, on_diagnostic=on_diagnostic).is_html
    boundary = boundary or generate_boundary()
    multipart = "multipart/mixed" if request.attachments else "multipart/alternative"
    body_type = "text/html" if is_html else "text/plain"

    lines = [
        f"From: {format_sender(request.sender_email, request.sender_name)}",
        f"To: {check_header_value(request.recipient_email, 'To')}",
        f"Subject: {subject}",
        "MIME-Version: 1.0",
        f"Content-Type: {multipart}; boundary={boundary}",
        "",
        f"--{boundary}",
        f"Content-Type: {body_type}; charset=UTF-8",
        "",
        message,
    ]

    for attachment in request.attachments:
        content = _encode(attachment.content, EncodingType.ATTACHMENT, on_diagnostic)
        filename = quote(check_header_value(attachment.filename, "Content-Disposition"))
        mime_type = check_header_value(attachment.mime_type, "Content-Type")
        lines.extend(
            [
                f"--{boundary}",
                f'Content-Type: {mime_type}; name="{filename}"',
                f'Content-Disposition: attachment; filename="{filename}"',
                "Content-Transfer-Encoding: base64",
                "",
                content,
            ]
        )

    lines.append(f"--{boundary}--")
    return CRLF.join(lines)


def build_raw_message(
    request: SendEmailRequest,
    boundary: str | None = None,
    on_diagnostic: DiagnosticHook | None = None,
) -> str:
    """Build the message and encode it as the URL-safe Base64 payload.

    Raises:
        ValueError: If ``request.sender_email`` is empty.
        MimeEncodingError: If any encoding step fails.
    """
    mime_text = build_mime_message(request, boundary=boundary, on_diagnostic=on_diagnostic)
    return _encode(mime_text, EncodingType.MIME_MESSAGE, on_diagnostic)
