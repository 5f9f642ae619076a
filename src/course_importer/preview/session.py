"""
Session Module - Interactive review of an import before commit.
===============================================================

An ImportSession owns the previews of one import while they are being
reviewed:
- Every mutation re-validates the touched preview
- No URL ever appears twice in a preview, or in two link lists
- The validation summary is recomputed on every access
- The session is committed at most once; a discarded session never commits
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from course_importer.ingestion.links import classify_url, is_link, normalize_candidate
from course_importer.materialize.materializer import CourseMaterializer, MaterializeOptions
from course_importer.preview.summary import summarize
from course_importer.preview.validator import diagnose, validate_preview
from course_importer.services.commit_client import CommitClient
from course_importer.services.documents import attach_documents
from course_importer.services.enhancer import EnhancementClient, merge_enhancement
from course_importer.services.http import ServiceClient
from course_importer.shared.exceptions import (
    EnhancementError,
    MaterializationError,
    ValidationError,
)
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import (
    CommitMode,
    CommitRequest,
    CommitResponse,
    CourseImportPreview,
    Diagnostics,
    ImportValidationResult,
    LinkKind,
    UploadedDocument,
)
from course_importer.shared.utils import dedupe

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "topic",
        "youtube_links",
        "pdf_links",
        "doc_links",
        "week",
        "subtopics",
        "tasks",
        "description",
        "duration",
        "difficulty",
        "course",
    }
)

LINK_FIELDS = {
    LinkKind.VIDEO: "youtube_links",
    LinkKind.PDF: "pdf_links",
    LinkKind.DOCUMENT: "doc_links",
}


class SessionState(str, Enum):
    OPEN = "open"
    COMMITTED = "committed"
    DISCARDED = "discarded"


@dataclass
class CommitOutcome:
    """What a commit built and, unless it was a dry run, what the service answered."""

    request: CommitRequest
    response: Optional[CommitResponse] = None

    @property
    def dry_run(self) -> bool:
        return self.response is None


def unique_links(preview: CourseImportPreview) -> CourseImportPreview:
    """Copy of a preview with repeated and cross-list URLs removed (first list wins)."""
    video = dedupe(preview.youtube_links)
    pdf = [url for url in dedupe(preview.pdf_links) if url not in video]
    doc = [url for url in dedupe(preview.doc_links) if url not in video and url not in pdf]
    return preview.model_copy(update={"youtube_links": video, "pdf_links": pdf, "doc_links": doc})


class ImportSession:
    """
    Editable, always-validated list of previews.

    Example:
        >>> session = ImportSession(previews)
        >>> session.update_field(0, "topic", "Networking Basics")
        >>> session.result.summary.valid_count
        1
    """

    def __init__(
        self,
        previews: list[CourseImportPreview],
        materializer: Optional[CourseMaterializer] = None,
        commit_client: Optional[CommitClient] = None,
        enhancer: Optional[EnhancementClient] = None,
    ):
        self._previews = [validate_preview(unique_links(preview)) for preview in previews]
        self.materializer = materializer or CourseMaterializer()
        self._commit_client = commit_client
        self._enhancer = enhancer
        # Clients created here rather than passed in; closed when the session ends
        self._owned_clients: list[ServiceClient] = []
        self.state = SessionState.OPEN

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def previews(self) -> list[CourseImportPreview]:
        """Current previews (a copy of the list)."""
        return list(self._previews)

    @property
    def result(self) -> ImportValidationResult:
        """Validation summary over the current previews."""
        return summarize(self._previews)

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN

    def diagnostics(self, index: int) -> Diagnostics:
        """Full diagnostics (errors and notifications) for one preview."""
        return diagnose(self._previews[index])

    def require_valid(self, index: int) -> CourseImportPreview:
        """
        Get a preview, raising if it is invalid.

        Raises:
            ValidationError: If the preview has blocking diagnostics
        """
        preview = self._previews[index]
        diagnostics = diagnose(preview)
        if diagnostics.errors:
            raise ValidationError(preview.topic, diagnostics.errors)
        return preview

    def _require_open(self) -> None:
        if self.state != SessionState.OPEN:
            raise MaterializationError(f"Import session is {self.state.value}")

    def _store(self, index: int, preview: CourseImportPreview) -> CourseImportPreview:
        checked = validate_preview(unique_links(preview))
        self._previews[index] = checked
        return checked

    # ─────────────────────────────────────────────────────────────────────────
    # Edits
    # ─────────────────────────────────────────────────────────────────────────

    def update_field(self, index: int, name: str, value: Any) -> CourseImportPreview:
        """
        Set one canonical field and re-validate.

        Raises:
            ValueError: Unknown field or a value of the wrong type
        """
        self._require_open()
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Field '{name}' is not editable")

        data = self._previews[index].model_dump(exclude={"link_count", "error"})
        data[name] = value
        try:
            updated = CourseImportPreview.model_validate(data)
        except PydanticValidationError as e:
            raise ValueError(f"Invalid value for '{name}': {e.errors()[0]['msg']}") from e
        return self._store(index, updated)

    def add_link(
        self,
        index: int,
        url: str,
        kind: Optional[LinkKind] = None,
    ) -> CourseImportPreview:
        """
        Add a link to a preview, classifying it when no kind is given.

        A URL already present in the preview is not added again. Links
        classified as OTHER are kept in metadata["otherLinks"].

        Raises:
            ValueError: If the text is not link-shaped
        """
        self._require_open()
        if not is_link(url):
            raise ValueError(f"Not a link: {url!r}")

        url = normalize_candidate(url)
        preview = self._previews[index]
        if url in preview.all_links():
            return preview

        kind = LinkKind(kind) if kind else classify_url(url)
        if kind == LinkKind.OTHER:
            metadata = dict(preview.metadata)
            metadata["otherLinks"] = dedupe([*metadata.get("otherLinks", []), url])
            return self._store(index, preview.model_copy(update={"metadata": metadata}))

        attribute = LINK_FIELDS[kind]
        return self._store(
            index,
            preview.model_copy(update={attribute: [*getattr(preview, attribute), url]}),
        )

    def remove_link(self, index: int, url: str) -> CourseImportPreview:
        """Remove a URL from every link list of a preview."""
        self._require_open()
        preview = self._previews[index]
        updates = {
            attribute: [link for link in getattr(preview, attribute) if link != url]
            for attribute in LINK_FIELDS.values()
        }
        return self._store(index, preview.model_copy(update=updates))

    def add_preview(self, preview: CourseImportPreview) -> CourseImportPreview:
        """Append a preview (validated on the way in)."""
        self._require_open()
        self._previews.append(preview)
        return self._store(len(self._previews) - 1, preview)

    def remove_preview(self, index: int) -> CourseImportPreview:
        """Drop a preview from the import."""
        self._require_open()
        return self._previews.pop(index)

    def attach_documents(self, documents: list[UploadedDocument]) -> None:
        """Attach uploaded documents to previews by topic and re-validate."""
        self._require_open()
        self._previews = [
            validate_preview(preview) for preview in attach_documents(self._previews, documents)
        ]

    def apply_enhancement(self, index: int) -> bool:
        """
        Merge AI-proposed optional fields into one preview.

        Enhancement failures are logged and leave the preview unchanged.

        Returns:
            Whether the preview was enhanced
        """
        self._require_open()
        if self._enhancer is None:
            self._enhancer = EnhancementClient()
            self._owned_clients.append(self._enhancer)

        preview = self._previews[index]
        try:
            result = self._enhancer.enhance(preview)
        except EnhancementError as e:
            logger.warning(f"Enhancement failed for '{preview.topic}': {e}")
            return False

        if result.is_empty():
            return False
        self._store(index, merge_enhancement(preview, result))
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def discard(self) -> None:
        """Cancel the import; nothing is written and the session cannot commit."""
        if self.state == SessionState.COMMITTED:
            raise MaterializationError("Import session is already committed")
        self.state = SessionState.DISCARDED
        self._release_clients()
        logger.info("Import session discarded")

    def _release_clients(self) -> None:
        for client in self._owned_clients:
            client.close()
        self._owned_clients.clear()

    def commit(
        self,
        mode: CommitMode | str = CommitMode.SINGLE_COURSE,
        options: Optional[MaterializeOptions] = None,
        dry_run: bool = False,
    ) -> CommitOutcome:
        """
        Materialize the valid previews and submit them in one request.

        A dry run builds the request without sending it and keeps the
        session open. A failed submission also keeps it open.

        Raises:
            MaterializationError: Session not open, nothing valid, or the
                submission was rejected
        """
        self._require_open()
        request = self.materializer.materialize(self._previews, mode, options)
        if dry_run:
            return CommitOutcome(request=request)

        if self._commit_client is None:
            self._commit_client = CommitClient()
            self._owned_clients.append(self._commit_client)
        response = self._commit_client.submit(request)

        self.state = SessionState.COMMITTED
        self._previews = []
        self._release_clients()
        return CommitOutcome(request=request, response=response)
