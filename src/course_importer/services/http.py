"""
HTTP Module - Shared session and retry handling for service clients.
====================================================================

Every external collaborator is reached through a ServiceClient:
- One lazily created requests.Session per client
- Automatic retries with exponential backoff on transport errors only
  (HTTP error statuses are returned to the caller, never retried)
- Context manager support to close the session
"""

from typing import Any, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from course_importer.shared.config import get_settings
from course_importer.shared.logging import get_logger

logger = get_logger(__name__)


class ServiceClient:
    """Base class for the course platform's HTTP collaborators."""

    def __init__(
        self,
        url: str,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        api_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            url: Endpoint URL
            timeout: Request timeout in seconds (uses config if None)
            max_retries: Maximum attempts per request (uses config if None)
            api_token: Bearer token (uses COURSE_API_TOKEN if None)
            session: Pre-built session, mainly for tests
        """
        settings = get_settings()
        services = settings.services

        self.url = url
        self.timeout = timeout if timeout is not None else services.timeout
        self.max_retries = max(1, max_retries if max_retries is not None else services.max_retries)
        self.api_token = api_token if api_token is not None else settings.course_api_token
        self.user_agent = services.user_agent

        self.retry_min_wait = services.retry_min_wait
        self.retry_max_wait = services.retry_max_wait

        self._session = session

    @property
    def session(self) -> requests.Session:
        """Get or create the requests session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(
                {
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                }
            )
            if self.api_token:
                self._session.headers["Authorization"] = f"Bearer {self.api_token}"
        return self._session

    def _post(self, **kwargs: Any) -> requests.Response:
        """POST to the endpoint with retries on transport errors."""

        @retry(
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=self.retry_min_wait, max=self.retry_max_wait),
            before_sleep=lambda retry_state: logger.warning(
                f"Retry {retry_state.attempt_number}/{self.max_retries} for {self.url}"
            ),
            reraise=True,
        )
        def _request_with_retry() -> requests.Response:
            return self.session.post(self.url, timeout=self.timeout, **kwargs)

        return _request_with_retry()

    @staticmethod
    def _json_body(response: requests.Response) -> Any:
        """Decoded JSON body, or None when the body is not JSON."""
        try:
            return response.json()
        except ValueError:
            return None

    def close(self) -> None:
        """Close the client session."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "ServiceClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        """Context manager exit."""
        self.close()
