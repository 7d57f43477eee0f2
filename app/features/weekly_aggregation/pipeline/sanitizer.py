"""
Certification content sanitization.

Free text leaves this process (report prompts, notifications) only in its
sanitized form: personal identifiers are redacted, the text is capped in
length and whitespace is normalized.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

DEFAULT_MAX_CONTENT_LENGTH = 500
REDACTION_TOKEN = "[REDACTED]"
TRUNCATION_MARKER = "..."

# ASCII matching: Hangul written directly against an identifier is a word
# boundary, not part of the match.
DEFAULT_REDACTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Dashed phone numbers: 010-1234-5678, 02-123-4567
    re.compile(r"\b\d{2,3}-\d{3,4}-\d{4}\b", re.ASCII),
    # Undashed mobile numbers: 01012345678
    re.compile(r"\b01[016789]\d{7,8}\b", re.ASCII),
    # Email addresses
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b", re.ASCII),
    # Resident registration numbers: 900101-1234567
    re.compile(r"\b\d{6}-\d{7}\b", re.ASCII),
)

_WHITESPACE = re.compile(r"\s+")


class ContentSanitizer:
    def __init__(
        self,
        max_length: int = DEFAULT_MAX_CONTENT_LENGTH,
        patterns: Iterable[re.Pattern[str] | str] = DEFAULT_REDACTION_PATTERNS,
        redaction_token: str = REDACTION_TOKEN,
        truncation_marker: str = TRUNCATION_MARKER,
    ):
        if max_length <= len(truncation_marker):
            raise ValueError("max_length must be longer than the truncation marker")
        self.max_length = max_length
        self.patterns = tuple(re.compile(pattern) for pattern in patterns)
        self.redaction_token = redaction_token
        self.truncation_marker = truncation_marker

    def sanitize(self, text: str | None) -> str:
        if not text:
            return ""

        sanitized = self._redact(text)
        sanitized = self._truncate(sanitized)
        return _WHITESPACE.sub(" ", sanitized).strip()

    def _redact(self, text: str) -> str:
        for pattern in self.patterns:
            text = pattern.sub(self.redaction_token, text)
        return text

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_length:
            return text

        # The marker counts towards the limit so a second pass never cuts again.
        budget = self.max_length - len(self.truncation_marker)
        head = text[:budget]
        # A cut through an identifier can leave a matching fragment, and
        # redacting a short email lengthens it.
        redacted = self._redact(head)
        while len(redacted) > budget:
            head = redacted[:budget]
            redacted = self._redact(head)
        return redacted + self.truncation_marker
