"""
Preview Module - Normalize, validate and review import previews.
================================================================

- normalizer: RawRecord → CourseImportPreview via alias tables
- validator: Pure diagnostics and the `error` field
- summary: Valid/invalid partition, recomputed on demand
- session: Editable review session with a single commit
"""

from course_importer.preview.normalizer import normalize_record, normalize_records
from course_importer.preview.session import CommitOutcome, ImportSession, SessionState
from course_importer.preview.summary import find_cross_record_duplicates, summarize
from course_importer.preview.validator import (
    diagnose,
    require_valid,
    validate_preview,
    validate_previews,
)

__all__ = [
    # Normalizer
    "normalize_record",
    "normalize_records",
    # Validator
    "diagnose",
    "validate_preview",
    "validate_previews",
    "require_valid",
    # Summary
    "summarize",
    "find_cross_record_duplicates",
    # Session
    "ImportSession",
    "SessionState",
    "CommitOutcome",
]
