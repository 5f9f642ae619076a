"""
Commit Client Module - Submit materialized courses for creation.
================================================================

One submission is one POST of `{"courses": [...]}`. The request carries
an Idempotency-Key derived from the body, so a retried submission cannot
create the courses twice. The submission counts only if the endpoint
reports success with no failures; anything else raises
MaterializationError and nothing is considered created.
"""

from typing import Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from course_importer.services.http import ServiceClient
from course_importer.shared.config import get_settings
from course_importer.shared.exceptions import MaterializationError
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import CommitRequest, CommitResponse
from course_importer.shared.utils import compute_payload_hash

logger = get_logger(__name__)


class CommitClient(ServiceClient):
    """
    Client for the course-creation endpoint.

    Example:
        >>> with CommitClient() as client:
        ...     response = client.submit(request)
        >>> response.created_count
        3
    """

    def __init__(self, url: Optional[str] = None, **kwargs):
        super().__init__(url or get_settings().get_effective_commit_url(), **kwargs)

    def submit(self, request: CommitRequest) -> CommitResponse:
        """
        Submit all courses of one import in a single request.

        Args:
            request: Materialized courses

        Returns:
            Parsed response of a fully successful submission

        Raises:
            MaterializationError: Transport failure, HTTP error, malformed
                response, success=false or any failed course
        """
        payload = request.to_wire()
        idempotency_key = compute_payload_hash(payload)
        logger.info(f"Submitting {len(request.courses)} course(s) to {self.url}")

        try:
            response = self._post(json=payload, headers={"Idempotency-Key": idempotency_key})
        except requests.RequestException as e:
            raise MaterializationError(f"Course creation request failed: {e}") from e

        body = self._json_body(response)
        if not response.ok:
            message = body.get("error") if isinstance(body, dict) else None
            raise MaterializationError(
                message or f"Course creation rejected: {response.reason}",
                status_code=response.status_code,
                response=body,
            )

        try:
            result = CommitResponse.model_validate(body if isinstance(body, dict) else {})
        except PydanticValidationError as e:
            raise MaterializationError(
                f"Malformed course creation response: {e.error_count()} errors",
                status_code=response.status_code,
                response=body,
            ) from e

        if not result.success or result.failed_count > 0:
            raise MaterializationError(
                result.message
                or f"Course creation failed for {result.failed_count} course(s)",
                status_code=response.status_code,
                response=body,
            )

        logger.info(f"Created {result.created_count} course(s)")
        return result
