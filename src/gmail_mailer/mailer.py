# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Send orchestration for gmail-mailer.

:class:`GmailMailer` holds an authenticated transport and an optional
default sender. ``send_email`` checks its preconditions in a fixed order
(transport, sender, message body), builds and encodes the MIME message,
makes exactly one transport call and maps every outcome, including
exceptions, to a :class:`~gmail_mailer.models.SendResult`.

Example:
    Initializing from a key file and sending::

        mailer = GmailMailer()
        init = await mailer.initialize_client(
            service_account_path="./serviceaccount.json",
            sender_email="noreply@example.com",
        )
        result = await mailer.send_email({
            "recipientEmail": "user@example.com",
            "subject": "Welcome!",
            "message": "<p>Thank you for joining us!</p>",
        })
        # result.sent, result.status, result.message
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .auth import ServiceAccountTokenSource
from .config_loader import DEFAULT_TOKEN_URI, MailerConfig
from .credentials import default_providers, resolve_service_account
from .logger import DiagnosticHook, emit_diagnostic, get_logger
from .mime import MimeEncodingError, build_raw_message
from .models import InitializeResult, SendEmailRequest, SendResult, ServiceAccount
from .transport import GmailApiTransport, GmailTransport
from .validation import validate_email_address

CLIENT_NOT_INITIALIZED = (
    "The Gmail client has not been initialized. Please call initialize_client first."
)
SENDER_NOT_CONFIGURED = "Sender email not configured. Please provide a sender email."
MESSAGE_MISSING = "A message body must be provided."
INVALID_SENDER = "The provided Gmail sender's email is invalid."
INVALID_RECIPIENT = "The provided recipient email is invalid."

logger = get_logger("GmailMailer.mailer")


class GmailMailer:
    """Client session sending email through the Gmail API.

    The default sender is private to the instance. ``set_sender_email`` is
    not synchronised: callers mutating it while sends are in flight must
    provide their own locking.

    Attributes:
        _transport: Authenticated transport, ``None`` until initialized.
        _sender_email: Default sender address.
        _config: Settings used by ``initialize_client``.
        _on_diagnostic: Optional diagnostic subscriber.
    """

    def __init__(
        self,
        transport: GmailTransport | None = None,
        sender_email: str | None = None,
        config: MailerConfig | None = None,
        on_diagnostic: DiagnosticHook | None = None,
    ):
        """Initialize the mailer.

        Args:
            transport: Already authenticated transport, if any.
            sender_email: Default sender; falls back to ``config.sender_email``.
            config: Settings for ``initialize_client``, defaults when omitted.
            on_diagnostic: Callable receiving ``(event, message)`` pairs.

        Raises:
            ValueError: If the sender address is malformed.
        """
        self._config = config or MailerConfig()
        self._on_diagnostic = on_diagnostic
        self._transport = transport
        self._sender_email: str | None = None
        self.set_sender_email(sender_email or self._config.sender_email)

    @property
    def sender_email(self) -> str | None:
        return self._sender_email

    @property
    def is_ready(self) -> bool:
        """True once a transport is available."""
        return self._transport is not None

    def set_sender_email(self, email: str | None) -> None:
        """Replace the default sender; ``None`` clears it.

        Raises:
            ValueError: If ``email`` is not a plausible address.
        """
        if email and not validate_email_address(email, self._on_diagnostic).valid:
            raise ValueError(INVALID_SENDER)
        self._sender_email = email or None

    def _diagnose(self, event: str, message: str, level: int = logging.DEBUG) -> None:
        emit_diagnostic(self._on_diagnostic, event, message, level)

    # ------------------------------------------------------------ initialization
    async def initialize_client(
        self,
        service_account: ServiceAccount | Mapping[str, Any] | None = None,
        service_account_path: str | None = None,
        sender_email: str | None = None,
    ) -> InitializeResult:
        """Resolve credentials, obtain a token and install the API transport.

        Credentials are looked up in order: ``service_account``,
        ``service_account_path``, the configured path,
        ``GMAIL_MAILER_SERVICE_ACCOUNT_PATH``, the configured JSON and
        ``GMAIL_MAILER_SERVICE_ACCOUNT``.

        Returns:
            InitializeResult; failures are reported, never raised.
        """
        sender = sender_email or self._sender_email
        try:
            if not sender or not validate_email_address(sender, self._on_diagnostic).valid:
                raise ValueError("Invalid or missing Gmail sender's email.")

            account = resolve_service_account(
                default_providers(
                    service_account,
                    service_account_path,
                    configured_path=self._config.service_account_path,
                    configured_json=self._config.service_account_json,
                )
            )
            if self._config.token_uri != DEFAULT_TOKEN_URI:
                account = account.model_copy(update={"token_uri": self._config.token_uri})

            token_source = ServiceAccountTokenSource(
                account, subject=sender, timeout=self._config.timeout
            )
            await token_source.authorize()
        except Exception as exc:
            message = f"Initialization failed: {exc}"
            self._diagnose("initialization_failed", message, logging.WARNING)
            return InitializeResult(status=False, message=message)

        self._transport = GmailApiTransport(
            token_source,
            base_url=self._config.api_base_url,
            timeout=self._config.timeout,
        )
        self._sender_email = sender
        logger.info("Gmail API client initialized for %s", sender)
        return InitializeResult(status=True, message="Gmail API client initialized successfully.")

    # ------------------------------------------------------------------- sending
    async def send_email(self, request: SendEmailRequest | Mapping[str, Any]) -> SendResult:
        """Send one email.

        Preconditions are checked in order before any network activity:
        transport present, sender resolvable and well formed, non-empty
        message, well-formed recipient. A missing subject is encoded as
        ``No Subject``.

        Args:
            request: A ``SendEmailRequest`` or a mapping of its fields
                (snake_case or camelCase keys).

        Returns:
            SendResult; ``sent`` is True only for a 2xx transport status.
        """
        if self._transport is None:
            self._diagnose("client_not_initialized", CLIENT_NOT_INITIALIZED)
            return SendResult.failure(CLIENT_NOT_INITIALIZED)

        try:
            if not isinstance(request, SendEmailRequest):
                request = SendEmailRequest.model_validate(dict(request))
        except (ValidationError, TypeError, ValueError) as exc:
            message = f"Invalid email parameters: {exc}"
            self._diagnose("invalid_request", message)
            return SendResult.failure(message)

        sender = request.sender_email or self._sender_email
        if not sender:
            self._diagnose("sender_missing", SENDER_NOT_CONFIGURED)
            return SendResult.failure(SENDER_NOT_CONFIGURED)
        if request.sender_email and not validate_email_address(sender, self._on_diagnostic).valid:
            self._diagnose("invalid_sender", INVALID_SENDER)
            return SendResult.failure(INVALID_SENDER)

        if not request.message:
            self._diagnose("message_missing", MESSAGE_MISSING)
            return SendResult.failure(MESSAGE_MISSING)

        if not validate_email_address(request.recipient_email, self._on_diagnostic).valid:
            self._diagnose("invalid_recipient", INVALID_RECIPIENT)
            return SendResult.failure(INVALID_RECIPIENT)

        if not request.subject:
            self._diagnose(
                "subject_missing", f"No subject provided for the email to {request.recipient_email}."
            )

        try:
            return await self._deliver(request.model_copy(update={"sender_email": sender}))
        except Exception as exc:
            message = f"An error occurred while sending the email: {exc}"
            logger.exception("Unexpected error while sending to %s", request.recipient_email)
            return SendResult.failure(message)

    async def _deliver(self, request: SendEmailRequest) -> SendResult:
        recipient = request.recipient_email
        try:
            raw = build_raw_message(request, on_diagnostic=self._on_diagnostic)
        except (MimeEncodingError, ValueError) as exc:
            message = f"An error occurred while sending the email: {exc}"
            self._diagnose("encoding_failed", message, logging.ERROR)
            return SendResult.failure(message)

        try:
            response = await self._transport.send_message(raw)
        except Exception as exc:
            message = f"An error occurred while sending the email: {exc}"
            self._diagnose("transport_failed", message, logging.WARNING)
            return SendResult.failure(message)

        if not response.ok:
            message = f"Failed to send email. Status: {response.status}"
            self._diagnose("send_rejected", message, logging.WARNING)
            return SendResult.failure(message)

        logger.info("Email sent to %s (status=%s)", recipient, response.status)
        return SendResult(
            sent=True,
            status=response.status,
            status_text=response.status_text,
            response_url=response.request_url,
            message=f"Email successfully sent to {recipient}.",
            raw_response=response.data,
        )
