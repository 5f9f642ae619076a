"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Sample content in every supported format
- Preview factories
- Mock HTTP sessions and responses
- Temporary directories
"""

import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import MagicMock

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Path Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return project_root / "config" / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Sample Content Fixtures
# ─────────────────────────────────────────────────────────────────────────────


VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
SHORT_VIDEO_URL = "https://youtu.be/dQw4w9WgXcQ"
EMBED_URL = "https://www.youtube.com/embed/dQw4w9WgXcQ"
PDF_URL = "https://example.com/notes/week1.pdf"


@pytest.fixture
def sample_syllabus_yaml() -> str:
    """Two-week syllabus; week 2 has no links."""
    return """
Overview:
  - Course: DSA
    Duration (Weeks): 2
    Modules: 2
DSA:
  - Week: 1
    Tech Topic: Arrays
    Subtopics: Traversal, Two pointers; Sliding window
    Hinglish Resource Link: https://www.youtube.com/watch?v=dQw4w9WgXcQ
    Hinglish Creator: Striver
    Practice Task: Reverse an array in place
  - Week: 2
    Tech Topic: Linked Lists
"""


@pytest.fixture
def sample_structured_text() -> str:
    """The networking example in structured text."""
    return (
        "Topic: Networking\n"
        "YouTube: https://youtu.be/abc123xyz\n"
        "Practice: Build a subnet calculator\n"
    )


@pytest.fixture
def sample_markdown() -> str:
    """Markdown with two headings."""
    return """# Python Basics

An introduction to variables, types and control flow.

- Variables
- Loops
- Docs: https://docs.python.org/3/tutorial/

Task: write a number guessing game

## Functions

Watch https://www.youtube.com/watch?v=abcdefghijk
"""


@pytest.fixture
def sample_json() -> str:
    """JSON array of course entries."""
    return """[
  {"title": "Git Basics", "links": "https://www.youtube.com/watch?v=abcdefghijk, https://example.com/git.pdf"},
  {"name": "Docker", "notes": "Read https://docs.docker.com/get-started/ first"}
]"""


# ─────────────────────────────────────────────────────────────────────────────
# Preview Factories
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_preview() -> Callable:
    """Factory for CourseImportPreview instances."""
    from course_importer.shared.schemas import CourseImportPreview

    def _make(topic: str = "Arrays", **fields) -> CourseImportPreview:
        return CourseImportPreview(topic=topic, **fields)

    return _make


@pytest.fixture
def valid_previews(make_preview) -> list:
    """Three valid previews of one course; two share a video."""
    return [
        make_preview("Arrays", youtube_links=[VIDEO_URL], tasks=["Reverse", "Rotate"], course="DSA"),
        make_preview("Strings", youtube_links=[SHORT_VIDEO_URL], course="DSA"),
        make_preview("Linked Lists", pdf_links=[PDF_URL], course="DSA"),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# HTTP Mocks
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_response() -> Callable:
    """Factory for mocked requests.Response objects."""

    def _make(status_code: int = 200, body=None) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.reason = "OK" if response.ok else "Error"
        if body is None:
            response.json.side_effect = ValueError("no json")
        else:
            response.json.return_value = body
        return response

    return _make


@pytest.fixture
def mock_session() -> MagicMock:
    """A stand-in for requests.Session."""
    return MagicMock()


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_settings():
    """Start every test from the shipped configuration."""
    from course_importer.shared.config import reload_settings

    reload_settings()
    yield
