"""
Parser Module - Turn uploaded file content into RawRecords.
===========================================================

One parser per format family:
- SpreadsheetParser: first worksheet, header row -> field names (pandas)
- StructuredTextParser: line-oriented "Topic: ..." text and loose CSV rows
- NestedParser: YAML lists, syllabus documents and `courses` lists
- ObjectParser: JSON arrays and objects
- HeadingParser: Markdown, one record per heading

Parsers never validate; they only produce field bags. Library errors
(malformed YAML/JSON, unreadable workbooks, undecodable bytes) are
wrapped in ParseError with the library message kept verbatim.
"""

import io
import json
import re
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd
import yaml

from course_importer.ingestion.cleaner import get_cleaner
from course_importer.ingestion.links import ExtractedLinks, LinkExtractor
from course_importer.ingestion.records import RawRecord
from course_importer.ingestion.syllabus import COURSES_KEY, SyllabusExtractor
from course_importer.shared.config import get_settings
from course_importer.shared.exceptions import ParseError
from course_importer.shared.logging import get_logger
from course_importer.shared.utils import decode_text, dedupe, format_scalar, split_list

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Line Patterns
# ─────────────────────────────────────────────────────────────────────────────

RECORD_START_PATTERNS = (
    re.compile(
        r"^(?P<label>Course|Topic|Title|Subject|Module|Lesson|Chapter|Week)"
        r"(?P<number>[\s\d]*):\s*(?P<rest>.*)$",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(?P<label>Module|Lesson|Chapter|Week)\s*(?P<number>\d+)[\s:.\-]*(?P<rest>.*)$",
        re.IGNORECASE,
    ),
    re.compile(r"^(?P<label>##?)\s+(?P<number>)(?P<rest>.*)$"),
)

WEEK_FIELD_PATTERN = re.compile(r"^Week\s*:\s*(?P<value>.*)$", re.IGNORECASE)

# (field, pattern) pairs checked in order on lines inside a record
FIELD_PATTERNS = (
    ("description", re.compile(r"^(?:Description|About|Summary)\s*:\s*(?P<value>.*)$", re.I)),
    ("duration", re.compile(r"^(?:Duration|Time|Length)\s*:\s*(?P<value>.*)$", re.I)),
    ("difficulty", re.compile(r"^(?:Difficulty|Level)\s*:\s*(?P<value>.*)$", re.I)),
    (
        "links",
        re.compile(r"^(?:YouTube|URLs?|Links?|Videos?|Resources?)\s*:\s*(?P<value>.*)$", re.I),
    ),
    (
        "documents",
        re.compile(r"^(?:PDFs?|Documents?|Docs?|Materials?|Files?)\s*:\s*(?P<value>.*)$", re.I),
    ),
    ("subtopics", re.compile(r"^(?:Sub-?topics|Topics|Covers)\s*:\s*(?P<value>.*)$", re.I)),
    (
        "tasks",
        re.compile(
            r"^(?:Tasks?|Exercises?|Assignments?|Practice(?:\s+Tasks?)?)\s*:\s*(?P<value>.*)$",
            re.I,
        ),
    ),
)

TEXT_BULLET_PATTERN = re.compile(r"^(?:[-*•]|\d+\.)\s+(?P<value>.+)$")
MARKDOWN_BULLET_PATTERN = re.compile(r"^(?:[-*+]|\d+\.)\s+(?P<value>.+)$")
MARKDOWN_HEADING_PATTERN = re.compile(r"^#{1,6}\s+(?P<value>.+?)\s*#*$")
URL_HINT_PATTERN = re.compile(r"https?://|www\.", re.IGNORECASE)
TASK_HINT_PATTERN = re.compile(r"task|exercise|assignment", re.IGNORECASE)
TEXT_LIST_DELIMITERS = re.compile(r"[,;|\n]")

# Column names that mark a comma row as a CSV header
CSV_HEADER_NAMES = {
    "topic", "title", "course", "name", "subject", "module", "lesson",
    "description", "links", "link", "url", "urls", "youtube", "video", "videos",
    "pdf", "pdfs", "docs", "documents", "resources", "week", "duration",
    "difficulty", "level", "subtopics", "tasks",
}


# ─────────────────────────────────────────────────────────────────────────────
# Record Builder
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class RecordBuilder:
    """Fields collected for one record by the line-oriented parsers."""

    topic: str = ""
    label: str = ""
    description: Optional[str] = None
    week: Optional[str] = None
    duration: Optional[str] = None
    difficulty: Optional[str] = None
    youtube_links: list[str] = field(default_factory=list)
    pdf_links: list[str] = field(default_factory=list)
    doc_links: list[str] = field(default_factory=list)
    other_links: list[str] = field(default_factory=list)
    subtopics: list[str] = field(default_factory=list)
    tasks: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def add_links(self, links: ExtractedLinks) -> None:
        self.youtube_links.extend(links.video)
        self.pdf_links.extend(links.pdf)
        self.doc_links.extend(links.document)
        self.other_links.extend(links.other)

    def has_content(self) -> bool:
        return bool(
            self.topic
            or self.description
            or self.youtube_links
            or self.pdf_links
            or self.doc_links
            or self.subtopics
            or self.tasks
        )

    def to_record(self) -> RawRecord:
        """Build the RawRecord; every list is deduplicated in order."""
        record = RawRecord(
            {
                "topic": self.topic or self.label,
                "youtubeLinks": dedupe(self.youtube_links),
                "pdfLinks": dedupe(self.pdf_links),
                "docLinks": dedupe(self.doc_links),
                "subtopics": dedupe(self.subtopics),
                "tasks": dedupe(self.tasks),
                "description": self.description,
                "week": self.week,
                "duration": self.duration,
                "difficulty": self.difficulty,
            }
        )
        metadata = dict(self.metadata)
        if self.other_links:
            metadata["otherLinks"] = dedupe(self.other_links)
        if metadata:
            record.set("metadata", metadata)
        return record


# ─────────────────────────────────────────────────────────────────────────────
# Base Parser
# ─────────────────────────────────────────────────────────────────────────────


class FormatParser:
    """
    Base class for format parsers.

    Subclasses set `name` and `extensions` and implement parse_text()
    (text formats) or override parse() (binary formats).
    """

    name: str = "base"
    extensions: tuple[str, ...] = ()

    def __init__(self, link_extractor: Optional[LinkExtractor] = None):
        settings = get_settings()
        self.config = settings.parsing
        self.link_extractor = link_extractor or LinkExtractor()
        self.cleaner = get_cleaner()

    def parse(self, content: bytes | str, file_name: str = "<text>") -> list[RawRecord]:
        """
        Parse file content into records.

        Args:
            content: Raw file bytes or already decoded text
            file_name: Name used in error messages

        Returns:
            Records in source order ([] for whitespace-only content)

        Raises:
            ParseError: If the content cannot be decoded or parsed
        """
        try:
            text = decode_text(content)
        except UnicodeDecodeError as e:
            raise ParseError(file_name, str(e), e) from e

        if not text.strip():
            logger.debug(f"{file_name}: empty content")
            return []

        records = self.parse_text(text, file_name)
        logger.debug(f"{file_name}: {self.name} parser produced {len(records)} records")
        return records

    def parse_text(self, text: str, file_name: str) -> list[RawRecord]:
        raise NotImplementedError

    def _global_links(self, text: str) -> ExtractedLinks:
        """File-wide links, capped for attaching to each closed record."""
        if not self.config.attach_global_links:
            return ExtractedLinks()
        return self.link_extractor.extract(text).capped(self.config.max_links_per_record)


# ─────────────────────────────────────────────────────────────────────────────
# Spreadsheet Parser
# ─────────────────────────────────────────────────────────────────────────────


class SpreadsheetParser(FormatParser):
    """
    Parse the first worksheet of an Excel workbook.

    Row 1 holds the field names (lower-cased, trimmed); each later row
    that is not entirely empty becomes one record.
    """

    name = "spreadsheet"
    extensions = (".xlsx", ".xlsm", ".xls")

    def parse(self, content: bytes | str, file_name: str = "<workbook>") -> list[RawRecord]:
        if isinstance(content, str):
            raise ParseError(file_name, "Spreadsheet content must be bytes")

        engine = "xlrd" if file_name.lower().endswith(".xls") else "openpyxl"
        try:
            frame = pd.read_excel(
                io.BytesIO(content),
                sheet_name=0,
                header=None,
                dtype=object,
                engine=engine,
            )
        except Exception as e:
            raise ParseError(file_name, str(e), e) from e

        records = self.records_from_frame(frame)
        logger.debug(f"{file_name}: spreadsheet parser produced {len(records)} records")
        return records

    def records_from_frame(self, frame: pd.DataFrame) -> list[RawRecord]:
        """Build records from a header-less frame whose first row is the header."""
        if frame.empty:
            return []

        headers = [self._cell_text(value) for value in frame.iloc[0].tolist()]
        headers = [header.lower() if header else None for header in headers]

        records = []
        for row in frame.iloc[1:].itertuples(index=False, name=None):
            fields = {}
            for header, value in zip(headers, row):
                text = self._cell_text(value)
                if header and text:
                    fields[header] = text
            if fields:
                records.append(RawRecord(fields))
        return records

    @staticmethod
    def _cell_text(value: Any) -> Optional[str]:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        return format_scalar(value) or None


# ─────────────────────────────────────────────────────────────────────────────
# Structured Text Parser
# ─────────────────────────────────────────────────────────────────────────────


class StructuredTextParser(FormatParser):
    """
    Parse line-oriented course text.

    Example input:
        Topic: Networking
        YouTube: https://youtu.be/abc123xyz
        Practice: Build a subnet calculator

    Record-start lines (Topic:, Module 3, ## Heading, ...) open a record,
    field lines fill it, bullets become subtopics, comma lines outside a
    record become CSV rows. When nothing structured is found the whole
    file becomes one "Extracted Resources" record, or one topic per line.
    """

    name = "structured_text"
    extensions = (".txt", ".csv")

    def parse_text(self, text: str, file_name: str) -> list[RawRecord]:
        lines = self.cleaner.lines(text)
        global_links = self._global_links(text)

        records: list[RawRecord] = []
        current: Optional[RecordBuilder] = None
        csv_rows = 0

        def close() -> None:
            if current is not None and current.has_content():
                current.add_links(global_links)
                records.append(current.to_record())

        for line in lines:
            if self._is_comment(line):
                continue

            week_field = WEEK_FIELD_PATTERN.match(line)
            if week_field and current is not None and current.week is None:
                current.week = week_field.group("value").strip() or None
                continue

            start = self._match_record_start(line)
            if start is not None:
                label, number, rest = start
                if label.lower() == "week" and not number and rest.isdigit():
                    number, rest = rest, ""
                if current is not None and rest and not current.has_content():
                    current.topic = rest
                    continue
                close()
                current = RecordBuilder(
                    topic=rest,
                    label=f"{label.title()} {number}" if number else "",
                )
                if label.lower() == "week" and number:
                    current.week = number
                continue

            if current is not None and self._apply_field(current, line):
                continue

            bullet = TEXT_BULLET_PATTERN.match(line)
            if bullet and current is not None:
                current.subtopics.append(bullet.group("value").strip())
                continue

            if current is None and "," in line:
                row = self._csv_row(line, is_first=csv_rows == 0)
                csv_rows += 1
                if row is not None:
                    records.append(row)
                continue

            if URL_HINT_PATTERN.search(line):
                if current is not None:
                    current.add_links(self.link_extractor.extract(line))
                continue

            if (
                current is not None
                and not current.description
                and len(line) > self.config.min_description_length
                and ":" not in line
            ):
                current.description = line

        close()

        if not records:
            records = self._fallback_records(text, lines)
        return records

    @staticmethod
    def _is_comment(line: str) -> bool:
        if line.startswith("//"):
            return True
        return line.startswith("#") and not RECORD_START_PATTERNS[2].match(line)

    @staticmethod
    def _match_record_start(line: str) -> Optional[tuple[str, str, str]]:
        """Return (label, number, rest) for a record-start line."""
        for pattern in RECORD_START_PATTERNS:
            match = pattern.match(line)
            if match:
                return (
                    match.group("label"),
                    match.group("number").strip(),
                    match.group("rest").strip(),
                )
        return None

    def _apply_field(self, current: RecordBuilder, line: str) -> bool:
        """Fill a field from a prefixed line; False if no prefix matched."""
        for name, pattern in FIELD_PATTERNS:
            match = pattern.match(line)
            if not match:
                continue
            value = match.group("value").strip()

            if name in ("links", "documents"):
                current.add_links(self.link_extractor.extract(value))
            elif name == "subtopics":
                current.subtopics.extend(split_list(value, TEXT_LIST_DELIMITERS))
            elif name == "tasks":
                current.tasks.extend(split_list(value, TEXT_LIST_DELIMITERS))
            elif value:
                setattr(current, name, value)
            return True
        return False

    def _csv_row(self, line: str, is_first: bool) -> Optional[RawRecord]:
        parts = [part.strip() for part in line.split(",")]
        if not parts or not parts[0]:
            return None
        if is_first and all(part.lower() in CSV_HEADER_NAMES for part in parts if part):
            logger.debug(f"Skipping CSV header row: {line}")
            return None

        builder = RecordBuilder(topic=parts[0])
        rest = parts[1:]
        builder.add_links(self.link_extractor.extract(" ".join(rest)))
        descriptions = [
            part for part in rest if part and not URL_HINT_PATTERN.search(part) and len(part) > 5
        ]
        if descriptions:
            builder.description = descriptions[0]
        builder.metadata["source"] = "csv-row"
        return builder.to_record()

    def _fallback_records(self, text: str, lines: list[str]) -> list[RawRecord]:
        """Records for files without any recognizable structure."""
        links = self.link_extractor.extract(text)
        if links.has_content:
            builder = RecordBuilder(
                topic="Extracted Resources",
                description="Resources extracted from document",
                metadata={"source": "bulk-extraction"},
            )
            builder.add_links(links)
            return [builder.to_record()]

        return [
            RawRecord({"topic": line, "metadata": {"source": "simple-list"}})
            for line in lines
            if len(line) > 2 and not self._is_comment(line)
        ]


# ─────────────────────────────────────────────────────────────────────────────
# Nested (YAML) Parser
# ─────────────────────────────────────────────────────────────────────────────


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects a mapping repeating one of its keys."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load_strict_yaml(text: str) -> Any:
    """Load YAML, raising yaml.YAMLError on repeated mapping keys."""
    return yaml.load(text, Loader=UniqueKeyLoader)


class NestedParser(FormatParser):
    """
    Parse YAML documents.

    A list root yields one record per element; a syllabus mapping goes
    through the SyllabusExtractor; a mapping with a `courses` list yields
    one record per course; any other mapping is a single record.
    """

    name = "nested"
    extensions = (".yaml", ".yml")

    def __init__(
        self,
        link_extractor: Optional[LinkExtractor] = None,
        syllabus_extractor: Optional[SyllabusExtractor] = None,
    ):
        super().__init__(link_extractor)
        self.syllabus = syllabus_extractor or SyllabusExtractor(self.link_extractor)

    def parse_text(self, text: str, file_name: str) -> list[RawRecord]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(file_name, str(e), e) from e
        return self.records_from_data(data)

    def records_from_data(self, data: Any) -> list[RawRecord]:
        if data is None:
            return []
        if isinstance(data, list):
            return [self._element_record(item) for item in data if item is not None]
        if isinstance(data, dict):
            if self.syllabus.is_syllabus(data):
                records = self.syllabus.extract(data)
                if records:
                    return records
            courses = RawRecord(data).get_nested(COURSES_KEY)
            if isinstance(courses, list):
                return [self._element_record(item) for item in courses if item is not None]
            return [RawRecord(data)]
        return [RawRecord({"topic": data})]

    @staticmethod
    def _element_record(item: Any) -> RawRecord:
        if isinstance(item, dict):
            return RawRecord(item)
        if isinstance(item, list):
            return RawRecord({"content": item})
        return RawRecord({"topic": item})


# ─────────────────────────────────────────────────────────────────────────────
# Object (JSON) Parser
# ─────────────────────────────────────────────────────────────────────────────


class ObjectParser(FormatParser):
    """
    Parse JSON documents.

    Links anywhere in each serialized object are extracted and merged
    into its link fields; a missing topic falls back to title, name,
    course or subject, then "JSON Entry".
    """

    name = "object"
    extensions = (".json",)

    TOPIC_FALLBACKS = ("topic", "title", "name", "course", "subject")

    def parse_text(self, text: str, file_name: str) -> list[RawRecord]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(file_name, str(e), e) from e
        return self.records_from_data(data)

    def records_from_data(self, data: Any) -> list[RawRecord]:
        if isinstance(data, list):
            items = data
        elif isinstance(data, dict):
            courses = data.get(COURSES_KEY)
            if isinstance(courses, list) and courses and all(isinstance(c, dict) for c in courses):
                items = courses
            else:
                items = [data]
        elif data is None:
            return []
        else:
            items = [
                {
                    "topic": "JSON Content",
                    "description": data if isinstance(data, str) else json.dumps(data),
                    "metadata": {"source": "json-simple"},
                }
            ]

        return [self._object_record(item) for item in items if item is not None]

    def _object_record(self, item: Any) -> RawRecord:
        if not isinstance(item, dict):
            item = {"topic": "JSON Entry", "description": format_scalar(item) or ""}

        record = RawRecord(item)
        links = self.link_extractor.extract(json.dumps(item, ensure_ascii=False, default=str))
        for key, found in (
            ("youtubeLinks", links.video),
            ("pdfLinks", links.pdf),
            ("docLinks", links.document),
        ):
            existing = record.get_list(key) if record.kind(key) is not None else []
            record.set(key, dedupe([*existing, *found]))

        if not record.get_text(*self.TOPIC_FALLBACKS):
            record.set("topic", "JSON Entry")
        return record


# ─────────────────────────────────────────────────────────────────────────────
# Heading (Markdown) Parser
# ─────────────────────────────────────────────────────────────────────────────


class HeadingParser(FormatParser):
    """
    Parse Markdown: every heading opens a record.

    Bullets and numbered lines become subtopics, task-like lines become
    tasks, lines with links are link-extracted and the first long line
    becomes the description.
    """

    name = "heading"
    extensions = (".md", ".markdown")

    def parse_text(self, text: str, file_name: str) -> list[RawRecord]:
        lines = self.cleaner.lines(text)
        global_links = self._global_links(text)

        records: list[RawRecord] = []
        current: Optional[RecordBuilder] = None
        in_code_block = False

        def close() -> None:
            if current is not None:
                current.add_links(global_links)
                records.append(current.to_record())

        for line in lines:
            if line.startswith("```"):
                in_code_block = not in_code_block
                continue
            if in_code_block:
                continue

            heading = MARKDOWN_HEADING_PATTERN.match(line)
            if heading:
                close()
                current = RecordBuilder(
                    topic=heading.group("value").strip(),
                    metadata={"source": "markdown"},
                )
                continue

            if current is None:
                continue

            has_link = bool(URL_HINT_PATTERN.search(line))
            bullet = MARKDOWN_BULLET_PATTERN.match(line)

            if bullet:
                if has_link:
                    current.add_links(self.link_extractor.extract(line))
                else:
                    current.subtopics.append(bullet.group("value").strip())
            elif TASK_HINT_PATTERN.search(line):
                current.tasks.append(line)
                if has_link:
                    current.add_links(self.link_extractor.extract(line))
            elif has_link:
                current.add_links(self.link_extractor.extract(line))
            elif (
                not current.description
                and len(line) > self.config.min_description_length
                and ":" not in line
            ):
                current.description = line

        close()

        if not records:
            links = self.link_extractor.extract(text)
            if links.has_content:
                builder = RecordBuilder(
                    topic="Markdown Content",
                    description="Content extracted from Markdown file",
                    metadata={"source": "markdown-bulk"},
                )
                builder.add_links(links)
                records.append(builder.to_record())

        return records
