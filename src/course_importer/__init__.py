"""
Course Importer - Turn loosely structured course content into courses.
======================================================================

Ingests spreadsheets, structured text, YAML syllabi, JSON and Markdown
course descriptions, and turns them into validated, editable previews of
course modules. Valid previews are materialized into Course / Module /
VideoLink entities with canonical embed URLs and submitted to the course
platform in a single all-or-nothing request.

Data flows strictly downward: raw bytes → raw records → previews →
validated previews → courses.
"""

__version__ = "0.1.0"
__author__ = "Course Importer Team"
__license__ = "MIT"

# Public API - import subpackages on demand
__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Main modules (imported on demand)
    "shared",
    "ingestion",
    "preview",
    "materialize",
    "services",
    "pipeline",
    "cli",
]
