"""
Materialize Module - Build courses from valid previews.
=======================================================

- embed: Video URL → canonical embed URL
- categories: Keyword-based category inference
- schedule: Week-by-week Markdown schedule
- materializer: Single-course and multi-course builders
"""

from course_importer.materialize.categories import infer_category
from course_importer.materialize.embed import EmbedResult, EmbedStatus, canonicalize_video_url
from course_importer.materialize.materializer import (
    CourseMaterializer,
    MaterializeOptions,
    materialize,
)
from course_importer.materialize.schedule import generate_schedule, resource_type

__all__ = [
    "CourseMaterializer",
    "MaterializeOptions",
    "materialize",
    "EmbedResult",
    "EmbedStatus",
    "canonicalize_video_url",
    "infer_category",
    "generate_schedule",
    "resource_type",
]
