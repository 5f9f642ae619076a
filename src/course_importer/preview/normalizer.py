"""
Normalizer Module - Map RawRecords onto CourseImportPreview.
============================================================

normalize_record() is a total, pure function: any RawRecord yields a
preview (possibly with an empty topic and no links, which the validator
then rejects). Field resolution uses alias tables:

- Category link aliases (youtube, pdf, docs, ...) feed their own list
  directly, keeping only link-shaped strings
- Generic link aliases (links, urls, resources, ...) are classified by
  the link extractor
- Every field no alias recognizes is scanned for embedded links

Unrecognized fields stay visible in metadata; every original field is
kept verbatim under metadata["originalStructure"].
"""

import re
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from course_importer.ingestion.links import (
    LinkExtractor,
    classify_url,
    is_link,
    normalize_candidate,
)
from course_importer.ingestion.records import RawRecord, RawValue, ValueKind, iter_strings, kind_of
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import CourseImportPreview, LinkKind, UploadedDocument
from course_importer.shared.utils import dedupe, split_list

logger = get_logger(__name__)

LINK_DELIMITERS = re.compile(r"[,;\n|\t]")

METADATA_KEY = "metadata"
ORIGINAL_STRUCTURE_KEY = "originalStructure"
OTHER_LINKS_KEY = "otherLinks"


# ─────────────────────────────────────────────────────────────────────────────
# Alias Tables
# ─────────────────────────────────────────────────────────────────────────────

TOPIC_ALIASES = (
    "topic", "title", "tech topic", "course", "name", "subject", "lesson", "module",
)

VIDEO_LINK_ALIASES = (
    "youtubeLinks", "youtube_links", "youtube links", "youtube link", "youtube",
    "videos", "video", "video link", "video links", "video url", "video urls",
    "watch", "hinglish resource link", "english resource link",
)
PDF_LINK_ALIASES = (
    "pdfLinks", "pdf_links", "pdf links", "pdf link", "pdf url", "pdf", "pdfs",
    "resource pdf",
)
DOC_LINK_ALIASES = (
    "docLinks", "doc_links", "doc links", "docs", "documents", "document",
    "document link", "document url", "doc link",
)
GENERIC_LINK_ALIASES = (
    "links", "urls", "url", "link", "resources", "resource", "resource link",
    "resource links", "materials", "material", "material link", "attachments",
    "attachment", "content",
)

SUBTOPIC_ALIASES = ("subtopics", "sub_topics", "sub-topics", "sub topics", "topics", "covers")
TASK_ALIASES = (
    "tasks", "practice task", "practice tasks", "practice", "task", "assignment",
    "assignments", "exercise", "exercises", "project",
)
DESCRIPTION_ALIASES = ("description", "desc", "details", "about", "summary")
WEEK_ALIASES = ("week", "week number", "weeknumber", "week_number")
DURATION_ALIASES = ("duration", "time", "length", "estimated time")
DIFFICULTY_ALIASES = ("difficulty", "level")
COURSE_ALIASES = ("course", "course name", "category")
UPLOADED_DOCUMENT_ALIASES = ("uploadedDocuments", "uploaded_documents")

CANONICAL_ALIASES = frozenset(
    alias.lower()
    for aliases in (
        TOPIC_ALIASES,
        VIDEO_LINK_ALIASES,
        PDF_LINK_ALIASES,
        DOC_LINK_ALIASES,
        GENERIC_LINK_ALIASES,
        SUBTOPIC_ALIASES,
        TASK_ALIASES,
        DESCRIPTION_ALIASES,
        WEEK_ALIASES,
        DURATION_ALIASES,
        DIFFICULTY_ALIASES,
        COURSE_ALIASES,
        UPLOADED_DOCUMENT_ALIASES,
        (METADATA_KEY,),
    )
    for alias in aliases
)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _is_canonical(key: str) -> bool:
    return key.strip().lower() in CANONICAL_ALIASES


def _link_values(value: RawValue) -> list[str]:
    """Link-shaped pieces of a field value, normalized."""
    pieces = split_list(list(iter_strings(value)), LINK_DELIMITERS)
    return [normalize_candidate(piece) for piece in pieces if is_link(piece)]


def _alias_keys(record: RawRecord, aliases: tuple[str, ...]) -> list[str]:
    """Record keys matched by any alias, in alias order, without repeats."""
    keys: list[str] = []
    for alias in aliases:
        key = record.find_key(alias)
        if key is not None and key not in keys:
            keys.append(key)
    return keys


def _resolve_list(record: RawRecord, aliases: tuple[str, ...]) -> Optional[list[str]]:
    """First present alias as a list; text values are split on , ; |."""
    for key in _alias_keys(record, aliases):
        value = record[key]
        if kind_of(value) == ValueKind.TEXT:
            items = split_list(value)
        else:
            items = [item.strip() for item in record.get_list(key) if item.strip()]
        if items:
            return dedupe(items)
    return None


def _resolve_topic(record: RawRecord) -> str:
    topic = record.get_text(*TOPIC_ALIASES)
    if topic:
        return topic
    for key in record:
        value = record[key]
        if (
            key != METADATA_KEY
            and isinstance(value, str)
            and len(value.strip()) > 2
            and not is_link(value)
        ):
            return value.strip()
    return ""


def _uploaded_documents(record: RawRecord) -> list[UploadedDocument]:
    key = next(iter(_alias_keys(record, UPLOADED_DOCUMENT_ALIASES)), None)
    if key is None:
        return []
    value = record[key]
    items = value if isinstance(value, list) else [value]

    documents = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            documents.append(UploadedDocument.model_validate(item))
        except PydanticValidationError as e:
            logger.warning(f"Ignoring malformed uploaded document: {e.error_count()} errors")
    return documents


# ─────────────────────────────────────────────────────────────────────────────
# Normalizer
# ─────────────────────────────────────────────────────────────────────────────


def normalize_record(
    record: RawRecord,
    link_extractor: Optional[LinkExtractor] = None,
) -> CourseImportPreview:
    """
    Normalize one RawRecord into a CourseImportPreview.

    The result has no `error`; run the validator afterwards.

    Args:
        record: Field bag from a parser
        link_extractor: Extractor for unrecognized fields (creates one if None)

    Returns:
        Canonical preview

    Example:
        >>> preview = normalize_record(RawRecord({"Title": "Loops", "Video": "https://youtu.be/abc123xyz"}))
        >>> preview.topic, preview.youtube_links
        ('Loops', ['https://youtu.be/abc123xyz'])
    """
    extractor = link_extractor or LinkExtractor()

    video: list[str] = []
    pdf: list[str] = []
    doc: list[str] = []
    other: list[str] = []
    buckets = {
        LinkKind.VIDEO: video,
        LinkKind.PDF: pdf,
        LinkKind.DOCUMENT: doc,
        LinkKind.OTHER: other,
    }

    # 1. Category link fields go straight to their list
    for aliases, bucket in (
        (VIDEO_LINK_ALIASES, video),
        (PDF_LINK_ALIASES, pdf),
        (DOC_LINK_ALIASES, doc),
    ):
        for key in _alias_keys(record, aliases):
            bucket.extend(_link_values(record[key]))

    # 2. Generic link fields are classified
    for key in _alias_keys(record, GENERIC_LINK_ALIASES):
        for url in _link_values(record[key]):
            buckets[classify_url(url)].append(url)

    # 3. Fields nobody recognizes are scanned for embedded links
    unrecognized = [key for key in record if not _is_canonical(key)]
    scanned = extractor.extract_all(
        text for key in unrecognized for text in iter_strings(record[key])
    )
    video.extend(scanned.video)
    pdf.extend(scanned.pdf)
    doc.extend(scanned.document)
    other.extend(scanned.other)

    # No URL twice, and never in two lists
    video = dedupe(video)
    pdf = [url for url in dedupe(pdf) if url not in video]
    doc = [url for url in dedupe(doc) if url not in video and url not in pdf]

    metadata: dict[str, Any] = {}
    parser_metadata = record.get_nested(METADATA_KEY)
    if isinstance(parser_metadata, dict):
        for key, value in parser_metadata.items():
            if key == OTHER_LINKS_KEY:
                other.extend(_link_values(value))
            else:
                metadata[key] = value

    for key in unrecognized:
        metadata[key] = record[key]

    other = [url for url in dedupe(other) if url not in video + pdf + doc]
    if other:
        metadata[OTHER_LINKS_KEY] = other

    metadata[ORIGINAL_STRUCTURE_KEY] = {
        key: value for key, value in record.items() if key != METADATA_KEY
    }

    return CourseImportPreview(
        topic=_resolve_topic(record),
        youtube_links=video,
        pdf_links=pdf,
        doc_links=doc,
        uploaded_documents=_uploaded_documents(record),
        week=record.get_text(*WEEK_ALIASES),
        subtopics=_resolve_list(record, SUBTOPIC_ALIASES),
        tasks=_resolve_list(record, TASK_ALIASES),
        description=record.get_text(*DESCRIPTION_ALIASES),
        duration=record.get_text(*DURATION_ALIASES),
        difficulty=record.get_text(*DIFFICULTY_ALIASES),
        course=record.get_text(*COURSE_ALIASES),
        metadata=metadata,
    )


def normalize_records(
    records: list[RawRecord],
    link_extractor: Optional[LinkExtractor] = None,
) -> list[CourseImportPreview]:
    """Normalize records in order, sharing one extractor."""
    extractor = link_extractor or LinkExtractor()
    return [normalize_record(record, extractor) for record in records]
