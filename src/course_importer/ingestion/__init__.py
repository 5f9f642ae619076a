"""
Ingestion Module - Parse course content into raw records.
=========================================================

This module turns file content into ordered RawRecords:

- cleaner: Text normalization before link scanning
- links: URL extraction and video/PDF/document/other classification
- records: The RawRecord field bag and its tree traversal
- syllabus: Course-name → weeks syllabus extraction
- parser: One parser per format family
- dispatcher: Extension routing and pasted-text sniffing

Pipeline flow:
    bytes → FormatDispatcher → FormatParser → RawRecords
"""

from course_importer.ingestion.cleaner import TextCleaner, clean_text
from course_importer.ingestion.dispatcher import (
    EXTENSION_MAP,
    FormatDispatcher,
    extract_topics,
    parse_content,
    parse_text_content,
    supported_extensions,
)
from course_importer.ingestion.links import (
    ExtractedLinks,
    LinkExtractor,
    classify_url,
    extract_links,
)
from course_importer.ingestion.parser import (
    FormatParser,
    HeadingParser,
    NestedParser,
    ObjectParser,
    SpreadsheetParser,
    StructuredTextParser,
)
from course_importer.ingestion.records import RawRecord, ValueKind, iter_strings
from course_importer.ingestion.syllabus import SyllabusExtractor

__all__ = [
    # Cleaner
    "TextCleaner",
    "clean_text",
    # Links
    "ExtractedLinks",
    "LinkExtractor",
    "classify_url",
    "extract_links",
    # Records
    "RawRecord",
    "ValueKind",
    "iter_strings",
    # Parsers
    "FormatParser",
    "SpreadsheetParser",
    "StructuredTextParser",
    "NestedParser",
    "ObjectParser",
    "HeadingParser",
    "SyllabusExtractor",
    # Dispatcher
    "EXTENSION_MAP",
    "FormatDispatcher",
    "extract_topics",
    "parse_content",
    "parse_text_content",
    "supported_extensions",
]
