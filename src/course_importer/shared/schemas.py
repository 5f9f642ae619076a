"""
Schemas Module - Pydantic data models for the importer.
=======================================================

Defines the data contracts that flow through the pipeline:
- Preview models (the editable, validated-or-not unit of an import)
- Diagnostics and validation summary models
- Course / Module / VideoLink entities built at commit time
- Request/response contracts of the external collaborators

Every model serializes with camelCase aliases, which is the wire format
of the course platform, while Python code uses snake_case attributes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model with camelCase aliases; accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase keys and JSON-safe values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class LinkKind(str, Enum):
    """Bucket a URL is classified into by the link extractor."""

    VIDEO = "video"
    PDF = "pdf"
    DOCUMENT = "document"
    OTHER = "other"


class DocumentType(str, Enum):
    """Uploaded document types accepted by the upload collaborator."""

    PDF = "pdf"
    DOC = "doc"
    DOCX = "docx"


class ContentType(str, Enum):
    """Primary content type of a materialized module."""

    VIDEO = "video"
    TEXT = "text"


class CommitMode(str, Enum):
    """How valid previews are turned into courses."""

    SINGLE_COURSE = "single"
    MULTI_COURSE = "multi"


class Difficulty(str, Enum):
    """Course difficulty levels."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# ─────────────────────────────────────────────────────────────────────────────
# Preview Models
# ─────────────────────────────────────────────────────────────────────────────


class UploadedDocument(WireModel):
    """A document stored by the upload collaborator and attached to a preview."""

    id: str = Field(..., description="Document ID assigned by the upload service")
    name: str = Field(..., description="Original file name")
    type: DocumentType = Field(..., description="Document type (pdf, doc, docx)")
    size: int = Field(default=0, ge=0, description="File size in bytes")
    url: str = Field(..., description="Public URL of the stored document")
    uploaded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Upload timestamp",
    )
    associated_topic: Optional[str] = Field(
        default=None, description="Topic the document was uploaded for"
    )


class CourseImportPreview(WireModel):
    """
    Canonical unit of an import: one prospective course module or course.

    `error` is set if and only if the preview fails validation. The three
    link arrays never share a URL and never repeat one.
    """

    topic: str = Field(default="", description="Module or course topic")
    youtube_links: list[str] = Field(default_factory=list, description="Video links")
    pdf_links: list[str] = Field(default_factory=list, description="PDF links")
    doc_links: list[str] = Field(default_factory=list, description="Document links")
    uploaded_documents: list[UploadedDocument] = Field(
        default_factory=list, description="Documents uploaded for this topic"
    )

    week: Optional[str] = Field(default=None, description="Week number or label")
    subtopics: Optional[list[str]] = Field(default=None, description="Subtopics covered")
    tasks: Optional[list[str]] = Field(default=None, description="Practice tasks")
    description: Optional[str] = Field(default=None, description="Free text description")
    duration: Optional[str] = Field(default=None, description="Duration label, e.g. '1 week'")
    difficulty: Optional[str] = Field(default=None, description="Difficulty label")
    course: Optional[str] = Field(
        default=None, description="Parent course name when the source groups modules"
    )

    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Non-canonical fields, other links and the original structure",
    )
    error: Optional[str] = Field(default=None, description="Joined blocking diagnostics")

    @computed_field
    @property
    def link_count(self) -> int:
        """Total number of links and uploaded documents."""
        return (
            len(self.youtube_links)
            + len(self.pdf_links)
            + len(self.doc_links)
            + len(self.uploaded_documents)
        )

    @property
    def is_valid(self) -> bool:
        """Whether the preview passed its last validation."""
        return not self.error

    def all_links(self) -> list[str]:
        """Video, PDF and document links in bucket order."""
        return [*self.youtube_links, *self.pdf_links, *self.doc_links]


# ─────────────────────────────────────────────────────────────────────────────
# Diagnostics & Summary Models
# ─────────────────────────────────────────────────────────────────────────────


class ValidationInfo(WireModel):
    """Static description of what the validator requires, for display."""

    required: list[str] = Field(
        default_factory=lambda: ["topic (at least 3 characters)", "at least one content link"]
    )
    optional: list[str] = Field(
        default_factory=lambda: ["subtopics", "tasks", "description", "duration", "difficulty"]
    )
    note: str = Field(
        default=(
            "Either a video link, a PDF link, a document link or an uploaded "
            "document satisfies the content requirement."
        )
    )


class Diagnostics(WireModel):
    """Validator output for one preview; never stored on the preview itself."""

    errors: list[str] = Field(default_factory=list, description="Blocking diagnostics")
    notifications: list[str] = Field(
        default_factory=list, description="Non-blocking suggestions and warnings"
    )
    info: ValidationInfo = Field(default_factory=ValidationInfo)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class ValidationSummary(WireModel):
    """Counts and flattened errors over a preview list."""

    total: int = 0
    valid_count: int = 0
    invalid_count: int = 0
    errors: list[str] = Field(default_factory=list)
    cross_record_duplicates: list[str] = Field(
        default_factory=list,
        description="Video links referenced by more than one preview",
    )


class ImportValidationResult(WireModel):
    """Partition of previews into valid and invalid, plus a summary."""

    valid: list[CourseImportPreview] = Field(default_factory=list)
    invalid: list[CourseImportPreview] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)


# ─────────────────────────────────────────────────────────────────────────────
# Course Entities
# ─────────────────────────────────────────────────────────────────────────────


class VideoLink(WireModel):
    """A canonical embed link attached to a module."""

    id: str
    lang_code: str = "en"
    lang_name: str = "English"
    youtube_embed_url: str = Field(..., description="Canonical embed URL")
    title: str = ""
    creator: Optional[str] = None
    is_playlist: bool = False


class Module(WireModel):
    """One module of a materialized course."""

    id: str
    title: str
    description: str = ""
    content_type: ContentType = ContentType.TEXT
    content_url: Optional[str] = None
    estimated_time: str = "1 hour"
    subtopics: list[str] = Field(default_factory=list)
    practice_task: str = ""
    video_links: list[VideoLink] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list, description="PDF/document URLs")
    order: int = 0
    week: Optional[str] = None


class Course(WireModel):
    """A course ready to be submitted to the course-creation endpoint."""

    id: str
    title: str
    description: str = ""
    category: str = "General"
    difficulty: Difficulty = Difficulty.BEGINNER
    visibility: str = "private"
    status: str = "draft"
    duration: str = ""
    estimated_hours: int = 0
    modules: list[Module] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    suggested_schedule: str = ""

    def video_embed_urls(self) -> list[str]:
        """All embed URLs across modules, in module order."""
        return [v.youtube_embed_url for m in self.modules for v in m.video_links]


# ─────────────────────────────────────────────────────────────────────────────
# Collaborator Contracts
# ─────────────────────────────────────────────────────────────────────────────


class CommitRequest(WireModel):
    """Body submitted to the course-creation endpoint."""

    courses: list[Course] = Field(default_factory=list)


class CommitResponse(WireModel):
    """Response contract consumed from the course-creation endpoint."""

    success: bool = False
    created_count: int = 0
    failed_count: int = 0
    created_ids: list[str] = Field(default_factory=list)
    message: Optional[str] = None


class EnhancementResult(WireModel):
    """Optional fields proposed by the enhancement service."""

    description: Optional[str] = None
    subtopics: Optional[list[str]] = None
    tasks: Optional[list[str]] = None
    duration: Optional[str] = None
    difficulty: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(
            [self.description, self.subtopics, self.tasks, self.duration, self.difficulty]
        )
