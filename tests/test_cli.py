"""
Tests for the Command-Line Interface.
=====================================

Tests for:
- formats / info: Static listings
- validate: Exit codes
- preview / commit: JSON output files
- paste: Reading from stdin
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

EMBED_URL = "https://www.youtube.com/embed/dQw4w9WgXcQ"

runner = CliRunner()


@pytest.fixture
def syllabus_file(temp_dir: Path, sample_syllabus_yaml: str) -> Path:
    path = temp_dir / "dsa.yaml"
    path.write_text(sample_syllabus_yaml, encoding="utf-8")
    return path


@pytest.fixture
def text_file(temp_dir: Path, sample_structured_text: str) -> Path:
    path = temp_dir / "net.txt"
    path.write_text(sample_structured_text, encoding="utf-8")
    return path


class TestCli:
    """Tests for the typer app."""

    def test_formats(self):
        """formats lists the supported extensions."""
        from course_importer.cli.main import app

        result = runner.invoke(app, ["formats"])

        assert result.exit_code == 0
        assert ".yaml" in result.output
        assert ".xlsx" in result.output

    def test_info(self):
        """info shows the configuration."""
        from course_importer.cli.main import app

        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Minimum topic length: 3" in result.output

    def test_validate_invalid_file(self, syllabus_file: Path):
        """validate exits with 1 when a record is invalid."""
        from course_importer.cli.main import app

        result = runner.invoke(app, ["validate", str(syllabus_file)])

        assert result.exit_code == 1
        assert "CONTENT LINKS ARE MANDATORY" in result.output

    def test_validate_valid_file(self, text_file: Path):
        """validate exits with 0 when everything is valid."""
        from course_importer.cli.main import app

        result = runner.invoke(app, ["validate", str(text_file)])

        assert result.exit_code == 0

    def test_validate_unsupported_file(self, temp_dir: Path):
        """A file that cannot be imported fails validation."""
        from course_importer.cli.main import app

        path = temp_dir / "slides.pdf"
        path.write_bytes(b"%PDF-1.4")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1

    def test_preview_output_file(self, syllabus_file: Path, temp_dir: Path):
        """preview --output writes previews and the summary."""
        from course_importer.cli.main import app

        output = temp_dir / "out" / "preview.json"
        result = runner.invoke(app, ["preview", str(syllabus_file), "--output", str(output)])

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert [p["topic"] for p in data["previews"]] == ["Arrays", "Linked Lists"]
        assert data["previews"][0]["youtubeLinks"] == ["https://www.youtube.com/watch?v=dQw4w9WgXcQ"]
        assert data["summary"]["validCount"] == 1
        assert data["summary"]["invalidCount"] == 1
        assert data["fileErrors"] == {}

    def test_commit_dry_run(self, syllabus_file: Path, temp_dir: Path):
        """A dry run writes the request and submits nothing."""
        from course_importer.cli.main import app

        output = temp_dir / "request.json"
        result = runner.invoke(
            app, ["commit", str(syllabus_file), "--dry-run", "--output", str(output)]
        )

        assert result.exit_code == 0
        assert "Dry run" in result.output
        request = json.loads(output.read_text(encoding="utf-8"))
        course = request["courses"][0]
        assert course["title"] == "DSA"
        assert course["duration"] == "2 weeks"
        assert [m["title"] for m in course["modules"]] == ["Arrays"]
        video = course["modules"][0]["videoLinks"][0]
        assert video["youtubeEmbedUrl"] == EMBED_URL
        assert video["langCode"] == "hi"
        assert video["creator"] == "Striver"

    def test_commit_multi_course(self, text_file: Path, temp_dir: Path):
        """--multi-course builds one course per record."""
        from course_importer.cli.main import app

        output = temp_dir / "request.json"
        result = runner.invoke(
            app,
            ["commit", str(text_file), "--multi-course", "--dry-run", "-o", str(output), "-c", "Networks"],
        )

        assert result.exit_code == 0
        request = json.loads(output.read_text(encoding="utf-8"))
        assert [c["title"] for c in request["courses"]] == ["Networking"]
        assert request["courses"][0]["category"] == "Networks"

    def test_commit_nothing_valid(self, temp_dir: Path):
        """Without valid records the commit fails."""
        from course_importer.cli.main import app

        path = temp_dir / "empty.yaml"
        path.write_text("DSA:\n  - Topic: Arrays\n", encoding="utf-8")

        result = runner.invoke(app, ["commit", str(path), "--dry-run"])

        assert result.exit_code == 1
        assert "No valid previews" in result.output

    def test_paste_from_stdin(self, sample_structured_text: str):
        """paste - reads the text from stdin."""
        from course_importer.cli.main import app

        result = runner.invoke(app, ["paste", "-"], input=sample_structured_text)

        assert result.exit_code == 0
        assert "Networking" in result.output

    def test_paste_missing_file(self, temp_dir: Path):
        """A missing paste source is an error."""
        from course_importer.cli.main import app

        result = runner.invoke(app, ["paste", str(temp_dir / "missing.txt")])

        assert result.exit_code == 1
