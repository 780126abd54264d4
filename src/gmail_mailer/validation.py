# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Email address shape check.

The check is deliberately basic: something without whitespace or ``@``,
an ``@``, a domain containing a dot and a final label of at least two
characters. No DNS or mailbox lookups are performed.
"""

from __future__ import annotations

import logging
import re

from .logger import DiagnosticHook, emit_diagnostic
from .models import EmailValidation

# Character classes exclude "@" and whitespace so backtracking stays linear.
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]{2,}")


def validate_email_address(
    email: str, on_diagnostic: DiagnosticHook | None = None
) -> EmailValidation:
    """Check that ``email`` looks like an email address.

    Args:
        email: Candidate address.
        on_diagnostic: Optional hook notified when the check itself fails.

    Returns:
        EmailValidation: ``valid`` is False for malformed input and for
        any internal error, in which case ``message`` explains why.
    """
    try:
        valid = EMAIL_PATTERN.fullmatch(email) is not None
    except Exception as exc:
        message = f"Error validating email: {exc}"
        emit_diagnostic(on_diagnostic, "email_validation_error", message, logging.WARNING)
        return EmailValidation(valid=False, message=message)
    if valid:
        return EmailValidation(valid=True, message="Email address is valid.")
    return EmailValidation(valid=False, message="Email address is invalid.")


def is_valid_email(email: str) -> bool:
    """Shortcut returning only the boolean outcome."""
    return validate_email_address(email).valid
