"""
Cleaner Module - Text normalization before parsing and link extraction.
=======================================================================

Imported files arrive from spreadsheets, editors and chat pastes, so the
same content shows up with different line endings, tabs, non-breaking
spaces and zero-width characters. The cleaner removes those differences:
- Normalize line endings (CRLF / CR to LF)
- Normalize unicode (NFC by default)
- Remove control and zero-width characters
- Collapse runs of spaces and tabs
- Strip lines and collapse blank line runs
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

from course_importer.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Cleaning Configuration
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class CleanerConfig:
    """Configuration for text cleaning operations."""

    # Whitespace handling
    normalize_line_endings: bool = True
    normalize_whitespace: bool = True
    collapse_newlines: bool = True
    max_consecutive_newlines: int = 2
    strip_lines: bool = True

    # Unicode handling
    normalize_unicode: bool = True
    unicode_form: str = "NFC"  # NFC, NFKC, NFD, NFKD
    remove_control_chars: bool = True
    remove_zero_width: bool = True


# ─────────────────────────────────────────────────────────────────────────────
# Text Cleaner Class
# ─────────────────────────────────────────────────────────────────────────────


class TextCleaner:
    """
    Text cleaner with configurable normalization steps.

    Example:
        >>> cleaner = TextCleaner()
        >>> cleaner.clean("Topic:\\tPython\\r\\n\\r\\n\\r\\nWeek: 1")
        'Topic: Python\\n\\nWeek: 1'
    """

    def __init__(self, config: Optional[CleanerConfig] = None):
        """
        Initialize the cleaner.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or CleanerConfig()

        self._line_endings = re.compile(r"\r\n?")
        self._zero_width = re.compile(r"[\u200b\u200c\u200d\u2060\ufeff]")
        self._multiple_spaces = re.compile(r"[ \t\u00a0]+")
        self._trailing_whitespace = re.compile(r"[ \t]+$", re.MULTILINE)
        self._leading_whitespace = re.compile(r"^[ \t]+", re.MULTILINE)
        self._multiple_newlines = re.compile(
            r"\n{%d,}" % (self.config.max_consecutive_newlines + 1)
        )

    def clean(self, text: Optional[str]) -> str:
        """
        Clean a text string.

        Args:
            text: Text to clean (can be None)

        Returns:
            Cleaned text (empty string if input is None or blank)
        """
        if not text:
            return ""

        result = text

        if self.config.normalize_line_endings:
            result = self._line_endings.sub("\n", result)

        if self.config.normalize_unicode:
            result = unicodedata.normalize(self.config.unicode_form, result)

        if self.config.remove_zero_width:
            result = self._zero_width.sub("", result)

        if self.config.remove_control_chars:
            result = self._remove_control_chars(result)

        if self.config.normalize_whitespace:
            result = self._multiple_spaces.sub(" ", result)

        if self.config.strip_lines:
            result = self._trailing_whitespace.sub("", result)
            result = self._leading_whitespace.sub("", result)

        if self.config.collapse_newlines:
            replacement = "\n" * self.config.max_consecutive_newlines
            result = self._multiple_newlines.sub(replacement, result)

        return result.strip()

    def clean_inline(self, text: Optional[str]) -> str:
        """Clean text and fold it onto a single line."""
        return " ".join(self.clean(text).split())

    def lines(self, text: Optional[str]) -> list[str]:
        """Clean text and return its non-empty lines."""
        return [line for line in self.clean(text).split("\n") if line]

    def _remove_control_chars(self, text: str) -> str:
        """Remove control characters except newline and tab."""
        return "".join(
            ch for ch in text
            if ch in "\n\t" or unicodedata.category(ch)[0] != "C"
        )


# ─────────────────────────────────────────────────────────────────────────────
# Convenience Functions
# ─────────────────────────────────────────────────────────────────────────────

_default_cleaner: Optional[TextCleaner] = None


def get_cleaner() -> TextCleaner:
    """Get the shared default cleaner."""
    global _default_cleaner
    if _default_cleaner is None:
        _default_cleaner = TextCleaner()
    return _default_cleaner


def clean_text(text: Optional[str]) -> str:
    """
    Clean text using the default configuration.

    Example:
        >>> clean_text("  a\\u00a0 b  ")
        'a b'
    """
    return get_cleaner().clean(text)
