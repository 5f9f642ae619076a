"""
Dispatcher Module - Route file content to the right parser.
===========================================================

Files are routed by extension (see EXTENSION_MAP). Pasted text has no
extension, so it is sniffed:
1. Starts with '{' or '[' and is valid JSON -> ObjectParser
2. Valid YAML that is a list, or a mapping holding lists/mappings -> NestedParser
3. Anything else -> StructuredTextParser

Flat "Key: value" text is valid YAML too. YAML with a repeated key
(several "Topic:" lines) is rejected while sniffing, so such text stays
structured text and keeps every record.
"""

import json
import re
from pathlib import Path
from typing import Optional

import yaml

from course_importer.ingestion.links import LinkExtractor
from course_importer.ingestion.parser import (
    FormatParser,
    HeadingParser,
    NestedParser,
    ObjectParser,
    SpreadsheetParser,
    StructuredTextParser,
    load_strict_yaml,
)
from course_importer.ingestion.records import RawRecord
from course_importer.shared.exceptions import FormatError
from course_importer.shared.logging import get_logger
from course_importer.shared.utils import dedupe

logger = get_logger(__name__)

PARSER_CLASSES: tuple[type[FormatParser], ...] = (
    SpreadsheetParser,
    StructuredTextParser,
    NestedParser,
    ObjectParser,
    HeadingParser,
)

# Extension -> parser family name
EXTENSION_MAP: dict[str, str] = {
    extension: parser_class.name
    for parser_class in PARSER_CLASSES
    for extension in parser_class.extensions
}

# Lines that name a topic in free text (used when auto-detecting topics)
TOPIC_LINE_PATTERNS = (
    re.compile(r"^(?:week|module|lesson|chapter)\s*\d+\s*:?\s*(.+)", re.I),
    re.compile(r"^(?:topic|course|title|subject|lesson|module|chapter|week)\s*:?\s*(.+)", re.I),
    re.compile(r"^-\s*(.+)"),
    re.compile(r"^\d+\.\s*(.+)"),
)


def supported_extensions() -> list[str]:
    """Supported extensions, sorted."""
    return sorted(EXTENSION_MAP)


def get_extension(file_name: str) -> str:
    """Lower-cased extension including the dot ('' if none)."""
    return Path(file_name).suffix.lower()


class FormatDispatcher:
    """
    Pick a parser for a file or for pasted text.

    Parsers are created once per dispatcher and share a LinkExtractor.

    Example:
        >>> dispatcher = FormatDispatcher()
        >>> records = dispatcher.parse_content("week1.txt", b"Topic: Loops")
        >>> records[0].get_text("topic")
        'Loops'
    """

    def __init__(self, link_extractor: Optional[LinkExtractor] = None):
        self.link_extractor = link_extractor or LinkExtractor()
        self._parsers: dict[str, FormatParser] = {
            parser_class.name: parser_class(self.link_extractor)
            for parser_class in PARSER_CLASSES
        }

    def get_parser(self, file_name: str) -> FormatParser:
        """
        Get the parser for a file name.

        Raises:
            FormatError: If the extension is not supported
        """
        extension = get_extension(file_name)
        family = EXTENSION_MAP.get(extension)
        if family is None:
            raise FormatError(file_name, extension, supported_extensions())
        return self._parsers[family]

    def parse_content(self, file_name: str, content: bytes | str) -> list[RawRecord]:
        """
        Parse in-memory file content.

        Args:
            file_name: File name; only its extension is used for routing
            content: File bytes (or text for text formats)

        Returns:
            Records in source order

        Raises:
            FormatError: Unsupported extension
            ParseError: Malformed content
        """
        parser = self.get_parser(file_name)
        logger.debug(f"Parsing {file_name} with {parser.name} parser")
        return parser.parse(content, file_name)

    def parse_file(self, path: Path | str) -> list[RawRecord]:
        """Read a whole file and parse it."""
        path = Path(path)
        # Reject before reading
        self.get_parser(path.name)
        return self.parse_content(path.name, path.read_bytes())

    def sniff_parser(self, text: str) -> FormatParser:
        """Choose a parser for pasted text by its content."""
        stripped = text.strip()

        if stripped[:1] in ("{", "["):
            try:
                json.loads(stripped)
                return self._parsers[ObjectParser.name]
            except json.JSONDecodeError:
                pass

        try:
            data = load_strict_yaml(stripped)
        except yaml.YAMLError:
            data = None

        if isinstance(data, list) and any(isinstance(item, (dict, list)) for item in data):
            return self._parsers[NestedParser.name]
        if isinstance(data, dict) and any(
            isinstance(value, (dict, list)) for value in data.values()
        ):
            return self._parsers[NestedParser.name]

        return self._parsers[StructuredTextParser.name]

    def parse_text_content(self, text: str) -> list[RawRecord]:
        """
        Parse pasted text, choosing the parser by content.

        Example:
            >>> FormatDispatcher().parse_text_content('[{"topic": "Loops"}]')[0].get_text("topic")
            'Loops'
        """
        if not text or not text.strip():
            return []
        parser = self.sniff_parser(text)
        logger.debug(f"Pasted text routed to {parser.name} parser")
        return parser.parse(text, "<pasted text>")


def extract_topics(text: str) -> list[str]:
    """
    Pull candidate topic names out of free text.

    Example:
        >>> extract_topics("Week 1: Arrays\\n- Linked lists\\nrandom line")
        ['Arrays', 'Linked lists']
    """
    topics = []
    for line in (line.strip() for line in text.splitlines()):
        if len(line) < 3:
            continue
        for pattern in TOPIC_LINE_PATTERNS:
            match = pattern.match(line)
            if match:
                topic = match.group(1).strip()
                if len(topic) >= 3:
                    topics.append(topic)
                break
    return dedupe(topics)


# ─────────────────────────────────────────────────────────────────────────────
# Convenience Functions
# ─────────────────────────────────────────────────────────────────────────────


def parse_content(file_name: str, content: bytes | str) -> list[RawRecord]:
    """Parse in-memory file content with a default dispatcher."""
    return FormatDispatcher().parse_content(file_name, content)


def parse_text_content(text: str) -> list[RawRecord]:
    """Parse pasted text with a default dispatcher."""
    return FormatDispatcher().parse_text_content(text)
