"""
Enhancer Module - Ask the enhancement service to fill optional fields.
======================================================================

Request:  POST {"courseData": <preview>}
Response: {"success": true, "data": {"description": ..., "subtopics": [...], ...}}

Only description, subtopics, tasks, duration and difficulty are taken
from the response. Topic, links and documents are never changed by an
enhancement, so it cannot make a valid preview invalid.
"""

from typing import Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from course_importer.services.http import ServiceClient
from course_importer.shared.config import get_settings
from course_importer.shared.exceptions import EnhancementError
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import CourseImportPreview, EnhancementResult

logger = get_logger(__name__)

ENHANCED_FIELDS = ("description", "subtopics", "tasks", "duration", "difficulty")


class EnhancementClient(ServiceClient):
    """Client for the AI enhancement endpoint."""

    def __init__(self, url: Optional[str] = None, **kwargs):
        super().__init__(url or get_settings().get_effective_enhance_url(), **kwargs)

    def enhance(self, preview: CourseImportPreview) -> EnhancementResult:
        """
        Request enriched optional fields for one preview.

        Args:
            preview: Preview to enhance (not modified)

        Returns:
            Proposed field values

        Raises:
            EnhancementError: On any transport, HTTP or response-shape failure
        """
        logger.debug(f"Requesting enhancement for '{preview.topic}'")
        try:
            response = self._post(json={"courseData": preview.to_wire()})
        except requests.RequestException as e:
            raise EnhancementError("Enhancement request failed", e) from e

        body = self._json_body(response)
        if not response.ok:
            raise EnhancementError(f"Enhancement rejected with HTTP {response.status_code}")
        if not isinstance(body, dict) or not body.get("success") or not body.get("data"):
            reason = body.get("error") if isinstance(body, dict) else None
            raise EnhancementError(reason or "Enhancement service returned no data")

        data = body["data"]
        try:
            return EnhancementResult.model_validate(
                {key: data.get(key) for key in ENHANCED_FIELDS} if isinstance(data, dict) else {}
            )
        except PydanticValidationError as e:
            raise EnhancementError("Malformed enhancement data", e) from e


def merge_enhancement(
    preview: CourseImportPreview,
    result: EnhancementResult,
) -> CourseImportPreview:
    """
    Copy of the preview with every non-empty proposed field applied.

    Empty proposals keep the preview's own value.

    Example:
        >>> merged = merge_enhancement(preview, EnhancementResult(duration="2 weeks"))
        >>> merged.duration
        '2 weeks'
    """
    updates = {
        name: getattr(result, name) for name in ENHANCED_FIELDS if getattr(result, name)
    }
    if not updates:
        return preview
    metadata = {**preview.metadata, "aiEnhanced": True}
    return preview.model_copy(update={**updates, "metadata": metadata}, deep=True)
