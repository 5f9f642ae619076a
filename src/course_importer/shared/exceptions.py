"""Exceptions raised across the import pipeline."""

from typing import Any, Optional


class CourseImportError(Exception):
    """Base class for every importer error."""


class FormatError(CourseImportError, ValueError):
    """
    Exception raised when a file extension has no registered parser.

    Attributes:
        file_name: Name of the rejected file
        extension: Lower-cased extension that was looked up
        supported: Extensions that would have been accepted
    """

    def __init__(
        self,
        file_name: str,
        extension: str,
        supported: Optional[list[str]] = None,
    ):
        self.file_name = file_name
        self.extension = extension
        self.supported = supported or []

        message = f"Unsupported file format: {extension or '(none)'} ({file_name})"
        if self.supported:
            message += f". Supported: {', '.join(self.supported)}"

        super().__init__(message)


class ParseError(CourseImportError):
    """
    Exception raised when a parser library rejects the input.

    Attributes:
        file_name: Name of the file being parsed
        reason: The underlying library message, verbatim
        original_error: The original exception, if any
    """

    def __init__(
        self,
        file_name: str,
        reason: str,
        original_error: Optional[Exception] = None,
    ):
        self.file_name = file_name
        self.reason = reason
        self.original_error = original_error

        super().__init__(f"Failed to parse {file_name}: {reason}")


class ValidationError(CourseImportError):
    """
    Exception raised when a caller requires a preview to be valid.

    Attributes:
        topic: Topic of the offending preview
        errors: Blocking diagnostic messages
    """

    def __init__(self, topic: str, errors: list[str]):
        self.topic = topic
        self.errors = list(errors)

        parts = [f"Preview '{topic or '(untitled)'}' is invalid"]
        parts.extend(f"  - {e}" for e in self.errors)

        super().__init__("\n".join(parts))


class MaterializationError(CourseImportError):
    """
    Exception raised when courses cannot be built or persisted.

    Attributes:
        message: Error description
        status_code: HTTP status from the course-creation endpoint, if any
        response: Decoded response body, if any
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response

        parts = [message]
        if status_code is not None:
            parts.append(f"HTTP status: {status_code}")

        super().__init__("\n".join(parts))


class EnhancementError(CourseImportError):
    """Exception raised when the enhancement service fails or answers badly."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error

        if original_error:
            message = f"{message}\nOriginal error: {original_error}"

        super().__init__(message)


class DocumentUploadError(CourseImportError):
    """
    Exception raised when a document is rejected before or during upload.

    Attributes:
        file_name: Name of the rejected document
        reason: Why it was rejected
    """

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason

        super().__init__(f"{file_name}: {reason}")
