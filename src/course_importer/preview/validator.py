"""
Validator Module - Diagnostics for a normalized preview.
========================================================

diagnose() is pure: it reads a preview and returns Diagnostics without
touching the preview. validate_preview() returns a copy of the preview
with `error` set to the joined blocking diagnostics (or cleared).

Blocking rules:
1. Topic present and at least min_topic_length characters
2. At least one valid video, PDF or document link, or an uploaded document
3. Invalid links per category; blocking only when rule 2 also fails,
   otherwise reported as notifications

Messages depend only on the preview's fields, so identical input always
yields identical output.
"""

from typing import Callable, Optional

from course_importer.ingestion.links import is_document_url, is_pdf_url, is_video_url
from course_importer.shared.config import ValidationConfig, get_settings
from course_importer.shared.exceptions import ValidationError
from course_importer.shared.schemas import CourseImportPreview, Diagnostics, ValidationInfo

# Message prefixes
TOPIC_MISSING = "TOPIC IS MANDATORY"
TOPIC_TOO_SHORT = "TOPIC TOO SHORT"
CONTENT_MISSING = "CONTENT LINKS ARE MANDATORY"
OPTIONAL_HINT = "OPTIONAL"

# (label, list attribute, validity predicate) per link category
LINK_CHECKS: tuple[tuple[str, str, Callable[[str], bool]], ...] = (
    ("YOUTUBE", "youtube_links", is_video_url),
    ("PDF", "pdf_links", is_pdf_url),
    ("DOCUMENT", "doc_links", is_document_url),
)

OPTIONAL_CHECKS = (
    ("subtopics", "Consider adding subtopics for better course organization"),
    ("tasks", "Consider adding practice tasks for better learning outcomes"),
    ("description", "Consider adding a description for better course understanding"),
    ("duration", "Consider adding duration information"),
)


def _invalid_links(urls: list[str], predicate: Callable[[str], bool]) -> list[str]:
    return [url for url in urls if not url or not url.strip() or not predicate(url.strip())]


def _invalid_message(label: str, invalid: list[str], shown: int) -> str:
    listed = ", ".join(invalid[:shown])
    more = "..." if len(invalid) > shown else ""
    return (
        f"INVALID {label} LINKS: Found {len(invalid)} invalid {label.lower()} "
        f"link{'s' if len(invalid) != 1 else ''}. Please check: {listed}{more}"
    )


def diagnose(
    preview: CourseImportPreview,
    config: Optional[ValidationConfig] = None,
) -> Diagnostics:
    """
    Diagnose one preview.

    Args:
        preview: Normalized preview (not modified)
        config: Validation settings (uses config file if None)

    Returns:
        Diagnostics with blocking errors, notifications and static info
    """
    config = config or get_settings().validation
    errors: list[str] = []
    notifications: list[str] = []

    topic = (preview.topic or "").strip()
    if not topic:
        errors.append(f"{TOPIC_MISSING}: Every entry must have a topic or course name")
    elif len(topic) < config.min_topic_length:
        errors.append(
            f"{TOPIC_TOO_SHORT}: Topic must be at least "
            f"{config.min_topic_length} characters long (got '{topic}')"
        )

    has_valid_content = bool(preview.uploaded_documents)
    link_reports = []
    for label, attribute, predicate in LINK_CHECKS:
        urls = getattr(preview, attribute)
        invalid = _invalid_links(urls, predicate)
        if len(invalid) < len(urls):
            has_valid_content = True
        if invalid:
            link_reports.append(
                _invalid_message(label, invalid, config.max_reported_invalid_links)
            )

    if not has_valid_content:
        errors.append(
            f"{CONTENT_MISSING}: Each entry needs at least one valid video link, "
            "PDF link, document link or uploaded document"
        )
        errors.extend(link_reports)
    else:
        notifications.extend(link_reports)

    for attribute, hint in OPTIONAL_CHECKS:
        value = getattr(preview, attribute)
        if not value or (isinstance(value, str) and not value.strip()):
            notifications.append(f"{OPTIONAL_HINT}: {hint}")

    return Diagnostics(errors=errors, notifications=notifications, info=ValidationInfo())


def validate_preview(
    preview: CourseImportPreview,
    config: Optional[ValidationConfig] = None,
) -> CourseImportPreview:
    """
    Return a copy of the preview with `error` reflecting its diagnostics.

    Example:
        >>> checked = validate_preview(CourseImportPreview(topic="AB", youtube_links=["https://youtu.be/abc123xyz"]))
        >>> checked.error.startswith("TOPIC TOO SHORT")
        True
    """
    config = config or get_settings().validation
    diagnostics = diagnose(preview, config)
    error = config.error_separator.join(diagnostics.errors) or None
    return preview.model_copy(update={"error": error}, deep=True)


def validate_previews(previews: list[CourseImportPreview]) -> list[CourseImportPreview]:
    """Validate previews in order."""
    config = get_settings().validation
    return [validate_preview(preview, config) for preview in previews]


def require_valid(preview: CourseImportPreview) -> CourseImportPreview:
    """
    Validate a preview and raise if it has blocking diagnostics.

    Raises:
        ValidationError: If the preview is invalid
    """
    diagnostics = diagnose(preview)
    if diagnostics.errors:
        raise ValidationError(preview.topic, diagnostics.errors)
    return validate_preview(preview)
