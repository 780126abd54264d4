# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for gmail-mailer.

Usage:
    gmail-mailer send --to user@example.com --subject "Hi" --message "<p>Hello</p>"
    gmail-mailer send --to user@example.com --message-file body.html --attach report.pdf
    gmail-mailer preview --from me@example.com --to user@example.com --message "Hello"

Example:
    $ GMAIL_USER=noreply@example.com \\
      GMAIL_MAILER_SERVICE_ACCOUNT_PATH=./serviceaccount.json \\
      gmail-mailer send --to user@example.com --subject "Report" \\
        --message "<p>See attached.</p>" --attach report.pdf
"""

from __future__ import annotations

import asyncio
import base64
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console

from .config_loader import load_mailer_config
from .mailer import GmailMailer
from .mime import MimeEncodingError, build_mime_message
from .models import Attachment, SendEmailRequest

console = Console()
err_console = Console(stderr=True)


def run_async(coro):
    """Execute an async coroutine synchronously from CLI context."""
    return asyncio.run(coro)


def print_error(message: str) -> None:
    """Print a formatted error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a formatted success message with checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_json(data: Any) -> None:
    """Print data as syntax-highlighted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def load_attachment(path: str) -> Attachment:
    """Read a file into an attachment with Base64 content.

    The MIME type is guessed from the file name, ``application/octet-stream``
    when unknown.
    """
    file_path = Path(path)
    mime_type, _ = mimetypes.guess_type(file_path.name)
    content = base64.b64encode(file_path.read_bytes()).decode("ascii")
    return Attachment(
        filename=file_path.name,
        mime_type=mime_type or "application/octet-stream",
        content=content,
    )


def _read_message(message: str | None, message_file: str | None) -> str:
    if message_file:
        return Path(message_file).read_text(encoding="utf-8")
    return message or ""


def message_options(func):
    """Options shared by ``send`` and ``preview``."""
    options = [
        click.option("--to", "recipient", required=True, help="Recipient address."),
        click.option("--from", "sender", default=None, help="Sender address (default: configured sender)."),
        click.option("--from-name", "sender_name", default=None, help="Sender display name."),
        click.option("--subject", "-s", default=None, help="Subject line."),
        click.option("--message", "-m", default=None, help="Message body, plain text or HTML."),
        click.option(
            "--message-file",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Read the message body from a file.",
        ),
        click.option(
            "--attach",
            "attachments",
            multiple=True,
            type=click.Path(exists=True, dir_okay=False),
            help="File to attach (repeatable).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="gmail-mailer")
def main() -> None:
    """Send email through the Gmail API with a service account."""


@main.command("send")
@message_options
@click.option(
    "--service-account",
    "service_account_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the service-account JSON key file.",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Path to config.ini.")
@click.option("--json", "as_json", is_flag=True, help="Output the send result as JSON.")
def send_cmd(
    recipient: str,
    sender: str | None,
    sender_name: str | None,
    subject: str | None,
    message: str | None,
    message_file: str | None,
    attachments: tuple[str, ...],
    service_account_path: str | None,
    config_path: str | None,
    as_json: bool,
) -> None:
    """Send an email."""
    config = load_mailer_config(config_path)
    try:
        mailer = GmailMailer(sender_email=sender or config.sender_email, config=config)
        request = SendEmailRequest(
            sender_email=sender,
            sender_name=sender_name,
            recipient_email=recipient,
            subject=subject,
            message=_read_message(message, message_file),
            attachments=[load_attachment(path) for path in attachments],
        )
    except (ValueError, ValidationError, OSError) as e:
        print_error(str(e))
        sys.exit(1)

    async def _send():
        init = await mailer.initialize_client(service_account_path=service_account_path)
        if not init.status:
            return None, init.message
        return await mailer.send_email(request), None

    result, init_error = run_async(_send())
    if init_error:
        print_error(init_error)
        sys.exit(1)

    if as_json:
        print_json(result.model_dump())
    elif result.sent:
        print_success(result.message)
    else:
        print_error(result.message)
    sys.exit(0 if result.sent else 1)


@main.command("preview")
@message_options
def preview_cmd(
    recipient: str,
    sender: str | None,
    sender_name: str | None,
    subject: str | None,
    message: str | None,
    message_file: str | None,
    attachments: tuple[str, ...],
) -> None:
    """Print the MIME message that ``send`` would build, without sending."""
    sender = sender or load_mailer_config().sender_email
    try:
        request = SendEmailRequest(
            sender_email=sender,
            sender_name=sender_name,
            recipient_email=recipient,
            subject=subject,
            message=_read_message(message, message_file),
            attachments=[load_attachment(path) for path in attachments],
        )
        mime_text = build_mime_message(request)
    except (ValueError, ValidationError, OSError, MimeEncodingError) as e:
        print_error(str(e))
        sys.exit(1)
    click.echo(mime_text)


if __name__ == "__main__":
    main()
