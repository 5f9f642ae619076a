"""Validation summary over a list of previews."""

from collections import Counter

from course_importer.shared.schemas import (
    CourseImportPreview,
    ImportValidationResult,
    ValidationSummary,
)
from course_importer.shared.utils import dedupe


def find_cross_record_duplicates(previews: list[CourseImportPreview]) -> list[str]:
    """
    Video links referenced by more than one preview, in first-seen order.

    These are collapsed to a single VideoLink when the previews are
    materialized into one course.
    """
    counts: Counter[str] = Counter()
    order: list[str] = []
    for preview in previews:
        for url in dedupe(preview.youtube_links):
            if url not in counts:
                order.append(url)
            counts[url] += 1
    return [url for url in order if counts[url] > 1]


def summarize(previews: list[CourseImportPreview]) -> ImportValidationResult:
    """
    Partition previews into valid and invalid and count them.

    Always computed from scratch from the previews' current `error`
    fields; nothing is cached.

    Example:
        >>> summarize([]).summary.total
        0
    """
    valid = [preview for preview in previews if not preview.error]
    invalid = [preview for preview in previews if preview.error]

    return ImportValidationResult(
        valid=valid,
        invalid=invalid,
        summary=ValidationSummary(
            total=len(previews),
            valid_count=len(valid),
            invalid_count=len(invalid),
            errors=[preview.error for preview in invalid],
            cross_record_duplicates=find_cross_record_duplicates(previews),
        ),
    )
