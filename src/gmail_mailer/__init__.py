# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""gmail-mailer: send email through the Gmail REST API.

Builds transport-safe MIME messages (encoded subject, Base64 attachments,
URL-safe Base64 payload) and sends them with a service account through
``users.messages.send``.

Example:
    >>> from gmail_mailer import GmailMailer
    >>> mailer = GmailMailer()
    >>> await mailer.initialize_client(service_account_path="./serviceaccount.json",
    ...                                sender_email="noreply@example.com")
    >>> result = await mailer.send_email({"recipientEmail": "to@example.com", "message": "hello"})
    >>> result.sent
    True
"""

from .config_loader import MailerConfig, load_mailer_config
from .encoding import NO_SUBJECT, encode_email_content, is_base64, is_subject_mime_encoded
from .html import detect_html
from .mailer import GmailMailer
from .mime import MimeEncodingError, build_mime_message, build_raw_message
from .models import (
    Attachment,
    EncodingResult,
    EncodingType,
    SendEmailRequest,
    SendResult,
    ServiceAccount,
)
from .transport import GmailApiTransport, TransportError, TransportResponse
from .validation import is_valid_email, validate_email_address

__all__ = [
    "Attachment",
    "EncodingResult",
    "EncodingType",
    "GmailApiTransport",
    "GmailMailer",
    "MailerConfig",
    "MimeEncodingError",
    "NO_SUBJECT",
    "SendEmailRequest",
    "SendResult",
    "ServiceAccount",
    "TransportError",
    "TransportResponse",
    "build_mime_message",
    "build_raw_message",
    "detect_html",
    "encode_email_content",
    "is_base64",
    "is_subject_mime_encoded",
    "is_valid_email",
    "load_mailer_config",
    "validate_email_address",
]
