"""
Documents Module - Bulk upload of course documents.
===================================================

Each file is checked locally (size, extension) before anything is sent,
then uploaded as multipart form data together with the topic it belongs
to. The service answers with the stored document record, which is then
attached to the preview whose topic equals the associated topic.
"""

from pathlib import Path
from typing import Iterable, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from course_importer.services.http import ServiceClient
from course_importer.shared.config import UploadsConfig, get_settings
from course_importer.shared.exceptions import DocumentUploadError
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import CourseImportPreview, UploadedDocument

logger = get_logger(__name__)

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}


def check_document(path: Path, config: Optional[UploadsConfig] = None) -> None:
    """
    Reject files the upload service would not accept.

    Raises:
        DocumentUploadError: Missing file, unsupported extension or too large
    """
    config = config or get_settings().uploads
    if not path.is_file():
        raise DocumentUploadError(path.name, "file not found")

    extension = path.suffix.lower()
    allowed = [ext.lower() for ext in config.allowed_extensions]
    if extension not in allowed:
        raise DocumentUploadError(
            path.name, f"unsupported type {extension or '(none)'}; allowed: {', '.join(allowed)}"
        )

    limit = config.max_file_size_mb * 1024 * 1024
    size = path.stat().st_size
    if size > limit:
        raise DocumentUploadError(
            path.name, f"file is {size / (1024 * 1024):.1f} MB; limit is {config.max_file_size_mb} MB"
        )


class DocumentUploader(ServiceClient):
    """Client for the document upload endpoint."""

    def __init__(self, url: Optional[str] = None, **kwargs):
        super().__init__(url or get_settings().get_effective_upload_url(), **kwargs)
        self.uploads = get_settings().uploads

    def upload(self, path: Path | str, topic: str) -> UploadedDocument:
        """
        Upload one document for a topic.

        Args:
            path: Local file
            topic: Topic the document belongs to

        Returns:
            Stored document record

        Raises:
            DocumentUploadError: Local check failed or the service rejected the file
        """
        path = Path(path)
        check_document(path, self.uploads)

        content_type = CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")
        try:
            with open(path, "rb") as f:
                response = self._post(
                    files={"file": (path.name, f, content_type)},
                    data={"associatedTopic": topic},
                )
        except requests.RequestException as e:
            raise DocumentUploadError(path.name, f"upload failed: {e}") from e

        body = self._json_body(response)
        if not response.ok or not isinstance(body, dict):
            raise DocumentUploadError(path.name, f"upload rejected with HTTP {response.status_code}")

        record = body.get("document", body)
        try:
            document = UploadedDocument.model_validate(record)
        except PydanticValidationError as e:
            raise DocumentUploadError(path.name, f"malformed upload response ({e.error_count()} errors)") from e

        if document.associated_topic is None:
            document = document.model_copy(update={"associated_topic": topic})
        logger.info(f"Uploaded {path.name} for '{topic}'")
        return document

    def upload_many(self, items: Iterable[tuple[Path | str, str]]) -> list[UploadedDocument]:
        """
        Upload (path, topic) pairs in order; a rejected file does not stop the rest.

        Returns:
            Documents that were stored
        """
        documents = []
        for path, topic in items:
            try:
                documents.append(self.upload(path, topic))
            except DocumentUploadError as e:
                logger.warning(f"Skipping document: {e}")
        return documents


def attach_documents(
    previews: list[CourseImportPreview],
    documents: list[UploadedDocument],
) -> list[CourseImportPreview]:
    """
    Attach uploaded documents to previews with an equal topic.

    Documents whose topic matches no preview are left out and logged.

    Returns:
        New preview list; previews without matches are returned unchanged
    """
    by_topic: dict[str, list[UploadedDocument]] = {}
    for document in documents:
        by_topic.setdefault(document.associated_topic or "", []).append(document)

    matched: set[str] = set()
    result = []
    for preview in previews:
        extra = by_topic.get(preview.topic, [])
        if not extra:
            result.append(preview)
            continue
        matched.add(preview.topic)
        known = {document.id for document in preview.uploaded_documents}
        merged = [*preview.uploaded_documents, *(d for d in extra if d.id not in known)]
        result.append(preview.model_copy(update={"uploaded_documents": merged}, deep=True))

    for topic in by_topic:
        if topic not in matched:
            logger.warning(f"No preview with topic '{topic}' for {len(by_topic[topic])} document(s)")
    return result
