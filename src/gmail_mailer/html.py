# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""HTML body detection.

A heuristic used only to choose between ``text/html`` and ``text/plain``
for the body part. It neither validates nor sanitizes markup.
"""

from __future__ import annotations

import logging
import re

from .logger import DiagnosticHook, emit_diagnostic
from .models import HtmlDetection

# <tag>, </tag>, <tag/>, <tag attr="value" other-attr>
HTML_TAG_PATTERN = re.compile(
    r"</?[a-z]+(\s+[a-z-]+(?:=\"[^\"]*\")?)*\s*/?>",
    re.IGNORECASE,
)


def detect_html(
    content: str, on_diagnostic: DiagnosticHook | None = None
) -> HtmlDetection:
    """Tell whether ``content`` contains at least one HTML-like tag.

    Any matching error is reported as a negative detection; callers must
    treat it as plain text.

    Args:
        content: Message body.
        on_diagnostic: Optional hook notified when matching fails.

    Returns:
        HtmlDetection with the boolean outcome and a description.
    """
    try:
        is_html = HTML_TAG_PATTERN.search(content) is not None
    except Exception as exc:
        message = f"Error checking for HTML content: {exc}"
        emit_diagnostic(on_diagnostic, "html_detection_error", message, logging.WARNING)
        return HtmlDetection(is_html=False, message=message)
    if is_html:
        return HtmlDetection(is_html=True, message="HTML content detected.")
    return HtmlDetection(is_html=False, message="No HTML content detected.")
