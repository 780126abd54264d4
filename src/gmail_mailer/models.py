# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for gmail-mailer.

This module defines the data models exchanged between callers, the MIME
builder, the encoder and the send orchestrator.

Models:
    - Attachment: File attached to an outgoing message
    - SendEmailRequest: Parameters of a single send
    - EncodingResult: Outcome of an encoding policy
    - HtmlDetection: Outcome of the HTML heuristic
    - EmailValidation: Outcome of the address check
    - SendResult: Uniform response returned by ``GmailMailer.send_email``
    - ServiceAccount: Service-account credentials
    - InitializeResult: Outcome of ``GmailMailer.initialize_client``
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field


class EncodingType(str, Enum):
    """Encoding policies understood by the content encoder.

    Attributes:
        SUBJECT: RFC 2047 encoded-word for the ``Subject:`` header.
        MIME_MESSAGE: URL-safe Base64 of the whole assembled message.
        ATTACHMENT: Standard Base64 of an attachment body (idempotent).
    """

    SUBJECT = "subject"
    MIME_MESSAGE = "mime_message"
    ATTACHMENT = "attachment"


class Attachment(BaseModel):
    """File attached to an outgoing message.

    Attributes:
        filename: Name advertised in ``Content-Disposition``.
        mime_type: Content type of the attachment part.
        content: Raw text or already Base64-encoded payload.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    filename: Annotated[str, Field(description="Attachment file name")]
    mime_type: Annotated[
        str,
        Field(alias="mimeType", description="MIME type, e.g. application/pdf"),
    ]
    content: Annotated[
        str,
        Field(description="Raw text or standard Base64 content"),
    ]


class SendEmailRequest(BaseModel):
    """Parameters for a single email send.

    ``message`` is intentionally optional at the model level: an empty body
    is reported by the orchestrator as a send failure, not as a model error.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender_email: Annotated[
        str | None,
        Field(default=None, alias="senderEmail", description="Defaults to the configured sender"),
    ]
    sender_name: Annotated[
        str | None,
        Field(default=None, alias="senderName", description="Display name for the From header"),
    ]
    recipient_email: Annotated[
        str,
        Field(alias="recipientEmail", description="Recipient address"),
    ]
    subject: Annotated[
        str | None,
        Field(default=None, description="Subject line, 'No Subject' when empty"),
    ]
    message: Annotated[
        str | None,
        Field(default=None, description="Plain text or HTML body"),
    ]
    attachments: Annotated[
        list[Attachment],
        Field(default_factory=list, description="Attachments in output order"),
    ]


class EncodingResult(BaseModel):
    """Outcome of an encoding policy.

    On failure ``encoded_content`` holds the original input unchanged.
    """

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    encoded_content: str | None
    message: str


class HtmlDetection(BaseModel):
    """Outcome of the HTML heuristic."""

    model_config = ConfigDict(frozen=True)

    is_html: bool
    message: str


class EmailValidation(BaseModel):
    """Outcome of the address check.

    Attributes:
        valid: True if the address has a plausible shape.
        message: Diagnostic text, non-empty when the check itself failed.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    message: str = ""


class SendResult(BaseModel):
    """Uniform response contract of ``GmailMailer.send_email``.

    Every field is always present; nullable fields are ``None`` on failure.

    Attributes:
        sent: True if the provider accepted the message (2xx status).
        status: Transport status code when the send succeeded.
        status_text: Transport status text when the send succeeded.
        response_url: URL the transport request was sent to.
        message: Human-readable outcome, always non-empty.
        raw_response: Provider payload when the send succeeded.
    """

    model_config = ConfigDict(frozen=True)

    sent: bool
    status: int | None = None
    status_text: str | None = None
    response_url: str | None = None
    message: str
    raw_response: Any | None = None

    @classmethod
    def failure(cls, message: str) -> SendResult:
        """Build the normalised failure response."""
        return cls(
            sent=False,
            status=None,
            status_text=None,
            response_url=None,
            message=message,
            raw_response=None,
        )


class ServiceAccount(BaseModel):
    """Service-account credentials as found in a Google key file.

    Unknown keys from the key file (``project_id``, ``client_id`` ...) are
    ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    client_email: Annotated[str, Field(min_length=1)]
    private_key: Annotated[str, Field(min_length=1, repr=False)]
    token_uri: str = "https://oauth2.googleapis.com/token"
    private_key_id: str | None = None


class InitializeResult(BaseModel):
    """Outcome of ``GmailMailer.initialize_client``."""

    model_config = ConfigDict(frozen=True)

    status: bool
    message: str
