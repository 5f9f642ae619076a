"""
Shared Module - Common utilities, configuration, schemas, and logging.
======================================================================

This module provides foundational components used across all other modules:

- config: Configuration loading and management
- logging: Rich logging setup
- exceptions: Error hierarchy of the import pipeline
- schemas: Pydantic data models
- utils: Utility functions (hashing, IDs, list handling)
"""

from course_importer.shared.config import Settings, get_settings, reload_settings
from course_importer.shared.exceptions import (
    CourseImportError,
    DocumentUploadError,
    EnhancementError,
    FormatError,
    MaterializationError,
    ParseError,
    ValidationError,
)
from course_importer.shared.logging import get_logger, setup_logging
from course_importer.shared.schemas import (
    CommitMode,
    CommitRequest,
    CommitResponse,
    Course,
    CourseImportPreview,
    Diagnostics,
    ImportValidationResult,
    LinkKind,
    Module,
    UploadedDocument,
    ValidationSummary,
    VideoLink,
)
from course_importer.shared.utils import (
    compute_hash,
    compute_payload_hash,
    dedupe,
    generate_course_id,
    save_json,
    split_list,
)

__all__ = [
    # Config
    "get_settings",
    "reload_settings",
    "Settings",
    # Exceptions
    "CourseImportError",
    "FormatError",
    "ParseError",
    "ValidationError",
    "MaterializationError",
    "EnhancementError",
    "DocumentUploadError",
    # Logging
    "get_logger",
    "setup_logging",
    # Schemas
    "CommitMode",
    "CommitRequest",
    "CommitResponse",
    "Course",
    "CourseImportPreview",
    "Diagnostics",
    "ImportValidationResult",
    "LinkKind",
    "Module",
    "UploadedDocument",
    "ValidationSummary",
    "VideoLink",
    # Utils
    "compute_hash",
    "compute_payload_hash",
    "dedupe",
    "generate_course_id",
    "save_json",
    "split_list",
]
