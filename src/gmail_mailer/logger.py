# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Logging helpers and the diagnostic hook for gmail-mailer.

Components never print. They log through :func:`get_logger` and, when the
host application passes an ``on_diagnostic`` callable, forward the same
``(event, message)`` pair to it so the application can route validation
and send diagnostics wherever it wants.

Example:
    Collecting diagnostics in a list::

        events = []
        mailer = GmailMailer(on_diagnostic=lambda event, msg: events.append((event, msg)))
"""

from __future__ import annotations

import logging
from collections.abc import Callable

DiagnosticHook = Callable[[str, str], None]


def get_logger(name: str = "GmailMailer") -> logging.Logger:
    """Return a :class:`logging.Logger` instance.

    Note: Logging configuration (handlers, levels) belongs to the host
    application; this package never calls ``logging.basicConfig()``.
    """
    return logging.getLogger(name)


logger = get_logger()


def emit_diagnostic(
    hook: DiagnosticHook | None,
    event: str,
    message: str,
    level: int = logging.DEBUG,
) -> None:
    """Log a diagnostic and forward it to ``hook`` if one is registered.

    Args:
        hook: Optional subscriber receiving ``(event, message)``.
        event: Short machine-friendly event name (e.g. ``"sender_missing"``).
        message: Human-readable description.
        level: Logging level used for the module logger.
    """
    logger.log(level, "%s: %s", event, message)
    if hook is None:
        return
    try:
        hook(event, message)
    except Exception:
        logger.exception("Diagnostic hook failed for event %s", event)
