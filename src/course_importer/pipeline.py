"""
Pipeline Module - End-to-end import orchestration.
==================================================

Wires the stages together:

    bytes/text -> FormatDispatcher -> RawRecords
               -> normalize_records -> previews
               -> validate_previews -> validated previews
               -> ImportSession (review, enhance, commit)

Batches of files are parsed in a thread pool and resequenced, so the
preview order is always submission order across files and source order
within each file. A file that fails to parse is reported on its own
result; the rest of the batch carries on.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from course_importer.ingestion.dispatcher import FormatDispatcher, extract_topics
from course_importer.ingestion.links import LinkExtractor
from course_importer.ingestion.records import RawRecord
from course_importer.preview.normalizer import normalize_records
from course_importer.preview.session import ImportSession, unique_links
from course_importer.preview.summary import summarize
from course_importer.preview.validator import validate_previews
from course_importer.shared.config import get_settings
from course_importer.shared.exceptions import CourseImportError
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import CourseImportPreview, ImportValidationResult

logger = get_logger(__name__)


@dataclass
class FileImportResult:
    """Outcome of importing one file."""

    file_name: str
    previews: list[CourseImportPreview] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchImportResult:
    """Outcome of importing several files, in submission order."""

    files: list[FileImportResult] = field(default_factory=list)

    @property
    def previews(self) -> list[CourseImportPreview]:
        return [preview for result in self.files for preview in result.previews]

    @property
    def failed(self) -> list[FileImportResult]:
        return [result for result in self.files if not result.ok]

    @property
    def validation(self) -> ImportValidationResult:
        return summarize(self.previews)


class ImportPipeline:
    """
    Parse, normalize and validate course content.

    Example:
        >>> pipeline = ImportPipeline()
        >>> previews = pipeline.import_content("week1.txt", b"Topic: Loops\\nhttps://youtu.be/abc123xyz")
        >>> previews[0].is_valid
        True
    """

    def __init__(
        self,
        link_extractor: Optional[LinkExtractor] = None,
        dispatcher: Optional[FormatDispatcher] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            link_extractor: Shared link extractor (creates one if None)
            dispatcher: Format dispatcher (creates one if None)
            max_workers: Batch thread count (uses config if None)
        """
        settings = get_settings()
        self.link_extractor = link_extractor or LinkExtractor()
        self.dispatcher = dispatcher or FormatDispatcher(self.link_extractor)
        self.max_workers = max_workers or settings.get_effective_max_workers()
        self.max_links = settings.parsing.max_links_per_record

    # ─────────────────────────────────────────────────────────────────────────
    # Single Inputs
    # ─────────────────────────────────────────────────────────────────────────

    def preview_records(self, records: list[RawRecord]) -> list[CourseImportPreview]:
        """Normalize and validate parsed records."""
        return validate_previews(normalize_records(records, self.link_extractor))

    def import_content(self, file_name: str, content: bytes | str) -> list[CourseImportPreview]:
        """
        Import in-memory file content.

        Raises:
            FormatError: Unsupported extension
            ParseError: Malformed content
        """
        records = self.dispatcher.parse_content(file_name, content)
        previews = self.preview_records(records)
        logger.info(f"{file_name}: {len(previews)} preview(s)")
        return previews

    def import_file(self, path: Path | str) -> list[CourseImportPreview]:
        """Import one file from disk."""
        path = Path(path)
        records = self.dispatcher.parse_file(path)
        previews = self.preview_records(records)
        logger.info(f"{path.name}: {len(previews)} preview(s)")
        return previews

    def import_text(self, text: str, auto_detect: bool = False) -> list[CourseImportPreview]:
        """
        Import pasted text.

        With auto_detect, topic lines are turned into records when no
        structure was found, and links found anywhere in the text fill
        every link list a record left empty.

        Args:
            text: Pasted content
            auto_detect: Enable topic and link auto-detection
        """
        records = self.dispatcher.parse_text_content(text)
        if not auto_detect:
            return self.preview_records(records)

        links = self.link_extractor.extract(text).capped(self.max_links)
        if not records:
            records = [
                RawRecord({"topic": topic, "metadata": {"autoDetected": True}})
                for topic in extract_topics(text)
            ]

        previews = normalize_records(records, self.link_extractor)
        filled = []
        for preview in previews:
            updates = {
                attribute: list(found)
                for attribute, found in (
                    ("youtube_links", links.video),
                    ("pdf_links", links.pdf),
                    ("doc_links", links.document),
                )
                if not getattr(preview, attribute) and found
            }
            filled.append(unique_links(preview.model_copy(update=updates)) if updates else preview)
        return validate_previews(filled)

    # ─────────────────────────────────────────────────────────────────────────
    # Batches
    # ─────────────────────────────────────────────────────────────────────────

    def _import_one(self, path: Path) -> FileImportResult:
        try:
            return FileImportResult(file_name=path.name, previews=self.import_file(path))
        except CourseImportError as e:
            logger.error(f"{path.name}: {e}")
            return FileImportResult(file_name=path.name, error=str(e))
        except OSError as e:
            logger.error(f"{path.name}: {e}")
            return FileImportResult(file_name=path.name, error=f"Cannot read {path.name}: {e}")

    def import_files(self, paths: list[Path | str]) -> BatchImportResult:
        """
        Import several files in parallel.

        Results keep submission order regardless of completion order.
        """
        paths = [Path(path) for path in paths]
        if not paths:
            return BatchImportResult()

        workers = min(self.max_workers, len(paths))
        logger.debug(f"Importing {len(paths)} file(s) with {workers} worker(s)")
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self._import_one, paths))

        return BatchImportResult(files=results)

    def start_session(self, previews: list[CourseImportPreview], **kwargs) -> ImportSession:
        """Open a review session over previews."""
        return ImportSession(previews, **kwargs)
