"""
Tests for the Import Pipeline.
==============================

Tests for:
- ImportPipeline.import_content / import_file
- ImportPipeline.import_files: Ordering and per-file failures
- ImportPipeline.import_text: Sniffing and auto-detection
"""

from pathlib import Path

import pytest

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class TestImportPipeline:
    """Tests for the ImportPipeline class."""

    def test_import_content(self, sample_structured_text: str):
        """In-memory content goes through parse, normalize and validate."""
        from course_importer.pipeline import ImportPipeline

        previews = ImportPipeline().import_content("net.txt", sample_structured_text.encode("utf-8"))

        assert len(previews) == 1
        assert previews[0].topic == "Networking"
        assert previews[0].is_valid

    def test_import_content_unsupported(self):
        """Unsupported extensions raise FormatError."""
        from course_importer.pipeline import ImportPipeline
        from course_importer.shared.exceptions import FormatError

        with pytest.raises(FormatError):
            ImportPipeline().import_content("slides.pptx", b"")

    def test_import_file(self, temp_dir: Path, sample_syllabus_yaml: str):
        """Files are read from disk and keep source order."""
        from course_importer.pipeline import ImportPipeline

        path = temp_dir / "dsa.yaml"
        path.write_text(sample_syllabus_yaml, encoding="utf-8")

        previews = ImportPipeline().import_file(path)

        assert [p.topic for p in previews] == ["Arrays", "Linked Lists"]
        assert [p.is_valid for p in previews] == [True, False]

    def test_import_files_keeps_submission_order(
        self, temp_dir: Path, sample_markdown: str, sample_json: str, sample_structured_text: str
    ):
        """Batch results follow submission order; a bad file is reported alone."""
        from course_importer.pipeline import ImportPipeline

        files = {
            "python.md": sample_markdown,
            "slides.pdf": "%PDF-1.4",
            "courses.json": sample_json,
            "net.txt": sample_structured_text,
        }
        paths = []
        for name, content in files.items():
            path = temp_dir / name
            path.write_text(content, encoding="utf-8")
            paths.append(path)

        batch = ImportPipeline(max_workers=4).import_files(paths)

        assert [f.file_name for f in batch.files] == list(files)
        assert [f.file_name for f in batch.failed] == ["slides.pdf"]
        assert "Unsupported file format" in batch.failed[0].error
        assert [p.topic for p in batch.previews] == [
            "Python Basics",
            "Functions",
            "Git Basics",
            "Docker",
            "Networking",
        ]
        assert batch.validation.summary.total == 5

    def test_import_files_malformed_file(self, temp_dir: Path):
        """A parse error fails only its own file."""
        from course_importer.pipeline import ImportPipeline

        bad = temp_dir / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        good = temp_dir / "good.txt"
        good.write_text(f"Topic: Arrays\nVideo: {VIDEO_URL}\n", encoding="utf-8")

        batch = ImportPipeline().import_files([bad, good])

        assert not batch.files[0].ok
        assert batch.files[0].error.startswith("Failed to parse bad.json")
        assert [p.topic for p in batch.files[1].previews] == ["Arrays"]

    def test_import_files_missing_file(self, temp_dir: Path):
        """An unreadable file is reported, not raised."""
        from course_importer.pipeline import ImportPipeline

        batch = ImportPipeline().import_files([temp_dir / "missing.txt"])

        assert batch.failed[0].error.startswith("Cannot read missing.txt")

    def test_import_files_empty(self):
        """No paths, no results."""
        from course_importer.pipeline import ImportPipeline

        batch = ImportPipeline().import_files([])

        assert batch.files == []
        assert batch.validation.summary.total == 0

    def test_import_text_json(self):
        """Pasted JSON is detected by content."""
        from course_importer.pipeline import ImportPipeline

        previews = ImportPipeline().import_text(f'[{{"topic": "Loops", "video": "{VIDEO_URL}"}}]')

        assert previews[0].topic == "Loops"
        assert previews[0].youtube_links == [VIDEO_URL]

    def test_import_text_auto_detect_fills_links(self):
        """With auto-detect, records without links get the text's links."""
        from course_importer.pipeline import ImportPipeline

        text = "- topic: Arrays\n- topic: Strings\n  video: https://youtu.be/abc123xyz\n"

        plain = ImportPipeline().import_text(text)
        detected = ImportPipeline().import_text(text, auto_detect=True)

        assert [p.is_valid for p in plain] == [False, True]
        assert [p.topic for p in detected] == ["Arrays", "Strings"]
        assert detected[0].youtube_links == ["https://youtu.be/abc123xyz"]
        assert all(p.is_valid for p in detected)

    def test_import_text_repeated_topics_with_list(self):
        """Pasted records sharing field names are all kept."""
        from course_importer.pipeline import ImportPipeline

        text = (
            "Topic: Arrays\nYouTube: https://youtu.be/aaaaaaaaaaa\n"
            "Topic: Linked Lists\nYouTube: https://youtu.be/bbbbbbbbbbb\n"
            "Subtopics:\n- Singly linked\n- Doubly linked\n"
        )

        previews = ImportPipeline().import_text(text)

        assert [p.topic for p in previews] == ["Arrays", "Linked Lists"]
        assert previews[1].subtopics == ["Singly linked", "Doubly linked"]

    def test_import_text_empty(self):
        """Blank text yields nothing."""
        from course_importer.pipeline import ImportPipeline

        assert ImportPipeline().import_text("   \n", auto_detect=True) == []

    def test_start_session(self, valid_previews):
        """A session can be opened over pipeline output."""
        from course_importer.pipeline import ImportPipeline

        session = ImportPipeline().start_session(valid_previews)

        assert session.is_open
        assert session.result.summary.valid_count == 3
