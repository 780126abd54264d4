"""Tests for the content encoding policies."""

import base64
from email.header import decode_header

import pytest

from gmail_mailer.encoding import (
    NO_SUBJECT,
    encode_email_content,
    is_base64,
    is_subject_mime_encoded,
)
from gmail_mailer.models import EncodingType


class TestSubjectEncoding:
    """Tests for the RFC 2047 subject policy."""

    def test_ascii_subject_is_still_encoded(self):
        result = encode_email_content("Hello", EncodingType.SUBJECT)

        assert result.succeeded is True
        assert result.encoded_content == "=?utf-8?B?SGVsbG8=?="
        assert result.message == "Email subject encoded successfully."

    def test_empty_subject_uses_placeholder(self):
        result = encode_email_content("", EncodingType.SUBJECT)

        assert result.encoded_content == "=?utf-8?B?Tm8gU3ViamVjdA==?="
        encoded = result.encoded_content[len("=?utf-8?B?"):-2]
        assert base64.b64decode(encoded).decode("utf-8") == NO_SUBJECT

    def test_none_subject_uses_placeholder(self):
        result = encode_email_content(None, EncodingType.SUBJECT)
        assert result.encoded_content == "=?utf-8?B?Tm8gU3ViamVjdA==?="

    @pytest.mark.parametrize(
        "subject",
        ["Résumé attached", "Grüße aus München", "日本語の件名", "Launch 🚀 today", "a?b=c"],
    )
    def test_round_trip_through_rfc2047_decoder(self, subject):
        encoded = encode_email_content(subject, EncodingType.SUBJECT).encoded_content

        [(payload, charset)] = decode_header(encoded)
        assert charset == "utf-8"
        assert payload.decode(charset) == subject

    def test_accepts_string_kind(self):
        result = encode_email_content("Hi", "subject")
        assert result.succeeded is True
        assert result.encoded_content == "=?utf-8?B?SGk=?="

    def test_detects_encoded_subject(self):
        encoded = encode_email_content("Hello", EncodingType.SUBJECT).encoded_content
        assert is_subject_mime_encoded(encoded) is True
        assert is_subject_mime_encoded("=?UTF-8?Q?Caf=C3=A9?=") is True
        assert is_subject_mime_encoded("Hello") is False


class TestMimeMessageEncoding:
    """Tests for the URL-safe transport payload policy."""

    def test_replaces_url_unsafe_characters(self):
        result = encode_email_content("<<???>>", EncodingType.MIME_MESSAGE)

        assert result.succeeded is True
        assert result.encoded_content == "PDw_Pz8-Pg=="
        assert result.message == "MIME message encoded successfully."

    def test_keeps_padding(self):
        assert encode_email_content("a", EncodingType.MIME_MESSAGE).encoded_content == "YQ=="

    def test_round_trip(self):
        text = "From: a@b.co\r\nSubject: x\r\n\r\nCafé ✓ <p>body</p>"
        encoded = encode_email_content(text, EncodingType.MIME_MESSAGE).encoded_content

        assert "+" not in encoded and "/" not in encoded
        assert base64.urlsafe_b64decode(encoded).decode("utf-8") == text

    def test_failure_returns_original_content(self):
        """Text that cannot be UTF-8 encoded is flagged, never half-encoded."""
        text = "broken \ud800 surrogate"
        result = encode_email_content(text, EncodingType.MIME_MESSAGE)

        assert result.succeeded is False
        assert result.encoded_content == text
        assert result.message.startswith("Error during encoding")


class TestAttachmentEncoding:
    """Tests for the idempotent attachment policy."""

    def test_already_encoded_passes_through(self):
        result = encode_email_content("aGVsbG8=", EncodingType.ATTACHMENT)

        assert result.succeeded is True
        assert result.encoded_content == "aGVsbG8="
        assert result.message == "Attachment content was already Base64 encoded."

    def test_raw_text_is_encoded(self):
        result = encode_email_content("hello", EncodingType.ATTACHMENT)

        assert result.encoded_content == "aGVsbG8="
        assert result.message == "Attachment content encoded successfully."

    def test_unicode_text_is_encoded_as_utf8(self):
        result = encode_email_content("naïve café", EncodingType.ATTACHMENT)
        assert base64.b64decode(result.encoded_content).decode("utf-8") == "naïve café"

    def test_encoding_twice_is_a_no_op(self):
        once = encode_email_content("quarterly report, final!", EncodingType.ATTACHMENT).encoded_content
        twice = encode_email_content(once, EncodingType.ATTACHMENT).encoded_content
        assert once == twice

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("aGVsbG8=", True),
            ("aGVsbG8gd29ybGQh", True),
            ("YQ==", True),
            ("", True),
            ("hello", False),
            ("aGVsbG8", False),
            ("aGVs bG8=", False),
            ("PDw_Pz8-Pg==", False),
        ],
    )
    def test_is_base64(self, value, expected):
        assert is_base64(value) is expected


class TestInvalidKind:
    """Tests for unknown encoding kinds."""

    def test_unknown_kind_is_rejected(self):
        events = []
        result = encode_email_content(
            "payload", "rot13", on_diagnostic=lambda e, m: events.append(e)
        )

        assert result.succeeded is False
        assert result.encoded_content == "payload"
        assert "Invalid encoding type specified: rot13" in result.message
        assert events == ["encoding_error"]

    def test_none_kind_is_rejected(self):
        result = encode_email_content("payload", None)

        assert result.succeeded is False
        assert result.encoded_content == "payload"
        assert "Invalid encoding type" in result.message
