"""
Tests for Format Parsers and Dispatcher.
========================================

Tests for:
- StructuredTextParser: Record starts, field prefixes, CSV rows, fallbacks
- NestedParser: Syllabus documents and YAML lists
- ObjectParser: JSON arrays and topic fallbacks
- HeadingParser: One record per Markdown heading
- SpreadsheetParser: Header row and empty rows
- FormatDispatcher: Extension routing and content sniffing
"""

import pytest

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def _preview(records, index=0):
    from course_importer.preview.normalizer import normalize_record
    from course_importer.preview.validator import validate_preview

    return validate_preview(normalize_record(records[index]))


# ─────────────────────────────────────────────────────────────────────────────
# Structured Text Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestStructuredTextParser:
    """Tests for the StructuredTextParser class."""

    def test_networking_record(self, sample_structured_text: str):
        """Topic, YouTube and Practice lines build one valid record."""
        from course_importer.ingestion.parser import StructuredTextParser

        records = StructuredTextParser().parse(sample_structured_text.encode("utf-8"), "net.txt")

        assert len(records) == 1
        preview = _preview(records)
        assert preview.topic == "Networking"
        assert preview.youtube_links == ["https://youtu.be/abc123xyz"]
        assert preview.pdf_links == []
        assert preview.doc_links == []
        assert preview.tasks == ["Build a subnet calculator"]
        assert preview.error is None

    def test_week_heading_sets_week(self):
        """'Week 3: Graphs' opens a record with week 3."""
        from course_importer.ingestion.parser import StructuredTextParser

        records = StructuredTextParser().parse(
            "Week 3: Graphs\nVideos: https://youtu.be/abc123xyz\n", "graphs.txt"
        )

        assert records[0].get_text("topic") == "Graphs"
        assert records[0].get_text("week") == "3"

    def test_multiple_records_in_order(self):
        """Each record-start line closes the previous record."""
        from course_importer.ingestion.parser import StructuredTextParser

        text = (
            "Topic: Arrays\n"
            "Subtopics: traversal, two pointers\n"
            "Topic: Strings\n"
            "- Palindromes\n"
        )
        records = StructuredTextParser().parse(text, "dsa.txt")

        assert [r.get_text("topic") for r in records] == ["Arrays", "Strings"]
        assert records[0].get_list("subtopics") == ["traversal", "two pointers"]
        assert records[1].get_list("subtopics") == ["Palindromes"]

    def test_comments_are_skipped(self):
        """'//' lines and single '#' lines without a space are ignored."""
        from course_importer.ingestion.parser import StructuredTextParser

        records = StructuredTextParser().parse(
            "// draft\n#todo\nTopic: Sorting\nLinks: https://youtu.be/abc123xyz\n", "s.txt"
        )

        assert len(records) == 1
        assert records[0].get_text("topic") == "Sorting"

    def test_csv_rows_skip_header(self):
        """A header row of known column names is not a record."""
        from course_importer.ingestion.parser import StructuredTextParser

        text = (
            "topic, links\n"
            "Arrays, https://youtu.be/abc123xyz\n"
            "Strings, https://youtu.be/def456uvw\n"
        )
        records = StructuredTextParser().parse(text, "topics.csv")

        assert [r.get_text("topic") for r in records] == ["Arrays", "Strings"]
        assert records[1].get_list("youtubeLinks") == ["https://youtu.be/def456uvw"]

    def test_bulk_extraction_fallback(self):
        """Unstructured text with links becomes one 'Extracted Resources' record."""
        from course_importer.ingestion.parser import StructuredTextParser

        records = StructuredTextParser().parse(
            "some links below\nhttps://youtu.be/abc123xyz\n", "dump.txt"
        )

        assert len(records) == 1
        assert records[0].get_text("topic") == "Extracted Resources"
        assert records[0].get_list("youtubeLinks") == ["https://youtu.be/abc123xyz"]

    def test_simple_list_fallback(self):
        """Unstructured text without links becomes one topic per line."""
        from course_importer.ingestion.parser import StructuredTextParser

        records = StructuredTextParser().parse("Arrays\nStrings\nGraphs\n", "list.txt")

        assert [r.get_text("topic") for r in records] == ["Arrays", "Strings", "Graphs"]

    @pytest.mark.parametrize("content", [b"", b"   \n\t\n", "\ufeff  "])
    def test_empty_content(self, content):
        """Whitespace-only content yields no records."""
        from course_importer.ingestion.parser import StructuredTextParser

        assert StructuredTextParser().parse(content, "empty.txt") == []

    def test_undecodable_bytes(self):
        """Invalid UTF-8 is a ParseError."""
        from course_importer.ingestion.parser import StructuredTextParser
        from course_importer.shared.exceptions import ParseError

        with pytest.raises(ParseError) as exc_info:
            StructuredTextParser().parse(b"\xff\xfe\xfa", "broken.txt")

        assert exc_info.value.file_name == "broken.txt"


# ─────────────────────────────────────────────────────────────────────────────
# Nested (YAML) Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNestedParser:
    """Tests for the NestedParser and the syllabus extractor."""

    def test_syllabus_records(self, sample_syllabus_yaml: str):
        """One record per week, in order; overview is not a record."""
        from course_importer.ingestion.parser import NestedParser

        records = NestedParser().parse(sample_syllabus_yaml, "dsa.yaml")

        assert [r.get_text("topic") for r in records] == ["Arrays", "Linked Lists"]
        assert all(r.get_text("course") == "DSA" for r in records)

    def test_syllabus_week_fields(self, sample_syllabus_yaml: str):
        """Links, subtopics, tasks and overview figures reach the preview."""
        from course_importer.ingestion.parser import NestedParser

        records = NestedParser().parse(sample_syllabus_yaml, "dsa.yaml")
        preview = _preview(records, 0)

        assert preview.youtube_links == [VIDEO_URL]
        assert preview.subtopics == ["Traversal", "Two pointers", "Sliding window"]
        assert preview.tasks == ["Reverse an array in place"]
        assert preview.week == "1"
        assert preview.course == "DSA"
        assert preview.duration == "1 week"
        assert preview.difficulty == "intermediate"
        assert preview.metadata["courseDurationWeeks"] == "2"
        assert preview.metadata["creators"] == {"Hinglish Creator": "Striver"}
        assert preview.metadata["linkLanguages"] == {VIDEO_URL: "hi"}
        assert preview.error is None

    def test_syllabus_generated_description(self, sample_syllabus_yaml: str):
        """Without a description one is composed from topic, subtopics and creator."""
        from course_importer.ingestion.parser import NestedParser

        records = NestedParser().parse(sample_syllabus_yaml, "dsa.yaml")

        assert records[0].get_text("description") == (
            "Topic: Arrays | Subtopics: Traversal, Two pointers, Sliding window"
            " | Hinglish Creator: Striver"
        )

    def test_week_without_links_is_invalid(self, sample_syllabus_yaml: str):
        """A week with no links fails the content rule."""
        from course_importer.ingestion.parser import NestedParser

        records = NestedParser().parse(sample_syllabus_yaml, "dsa.yaml")
        preview = _preview(records, 1)

        assert preview.topic == "Linked Lists"
        assert preview.error.startswith("CONTENT LINKS ARE MANDATORY")

    def test_links_found_in_nested_values(self):
        """Links hidden in unlisted nested fields are still found."""
        from course_importer.ingestion.parser import NestedParser

        text = """
Web:
  - Topic: HTML
    Extras:
      reading:
        - https://example.com/html.pdf
"""
        records = NestedParser().parse(text, "web.yaml")

        assert records[0].get_list("pdfLinks") == ["https://example.com/html.pdf"]

    def test_list_root(self):
        """A YAML list yields one record per element."""
        from course_importer.ingestion.parser import NestedParser

        records = NestedParser().parse("- topic: Arrays\n- Strings\n", "list.yaml")

        assert [r.get_text("topic") for r in records] == ["Arrays", "Strings"]

    def test_courses_key(self):
        """A mapping with a courses list yields one record per course."""
        from course_importer.ingestion.parser import NestedParser

        text = "courses:\n  - title: Git\n  - title: Docker\n"
        records = NestedParser().parse(text, "courses.yml")

        assert [r.get_text("title") for r in records] == ["Git", "Docker"]

    def test_malformed_yaml(self):
        """YAML errors are wrapped in ParseError."""
        from course_importer.ingestion.parser import NestedParser
        from course_importer.shared.exceptions import ParseError

        with pytest.raises(ParseError):
            NestedParser().parse("key: [unclosed", "bad.yaml")


# ─────────────────────────────────────────────────────────────────────────────
# Object (JSON) Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestObjectParser:
    """Tests for the ObjectParser class."""

    def test_json_array(self, sample_json: str):
        """Each object becomes a record with its links classified."""
        from course_importer.ingestion.parser import ObjectParser

        records = ObjectParser().parse(sample_json, "courses.json")
        git = _preview(records, 0)
        docker = _preview(records, 1)

        assert git.topic == "Git Basics"
        assert git.youtube_links == ["https://www.youtube.com/watch?v=abcdefghijk"]
        assert git.pdf_links == ["https://example.com/git.pdf"]
        assert docker.topic == "Docker"
        assert docker.doc_links == ["https://docs.docker.com/get-started/"]
        assert docker.metadata["notes"] == "Read https://docs.docker.com/get-started/ first"

    def test_missing_topic_fallback(self):
        """An object without any topic-like key gets 'JSON Entry'."""
        from course_importer.ingestion.parser import ObjectParser

        records = ObjectParser().parse('{"video": "https://youtu.be/abc123xyz"}', "x.json")

        assert records[0].get_text("topic") == "JSON Entry"

    def test_malformed_json(self):
        """JSON errors are wrapped in ParseError with the library message."""
        from course_importer.ingestion.parser import ObjectParser
        from course_importer.shared.exceptions import ParseError

        with pytest.raises(ParseError) as exc_info:
            ObjectParser().parse("{not json", "bad.json")

        assert exc_info.value.reason
        assert "bad.json" in str(exc_info.value)


# ─────────────────────────────────────────────────────────────────────────────
# Heading (Markdown) Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestHeadingParser:
    """Tests for the HeadingParser class."""

    def test_one_record_per_heading(self, sample_markdown: str):
        """Each heading opens a record."""
        from course_importer.ingestion.parser import HeadingParser

        records = HeadingParser().parse(sample_markdown, "python.md")

        assert [r.get_text("topic") for r in records] == ["Python Basics", "Functions"]

    def test_heading_fields(self, sample_markdown: str):
        """Bullets, task lines, links and the first long line are collected."""
        from course_importer.ingestion.parser import HeadingParser

        records = HeadingParser().parse(sample_markdown, "python.md")
        preview = _preview(records, 0)

        assert preview.description == "An introduction to variables, types and control flow."
        assert preview.subtopics == ["Variables", "Loops"]
        assert preview.tasks == ["Task: write a number guessing game"]
        assert preview.doc_links == ["https://docs.python.org/3/tutorial/"]

    def test_description_skips_colon_lines(self):
        """Label lines such as 'Note: ...' never become the description."""
        from course_importer.ingestion.parser import HeadingParser

        records = HeadingParser().parse(
            "# Loops\nNote: this is a fairly long line\nA plain long description line here\n",
            "loops.md",
        )

        assert records[0].get_text("description") == "A plain long description line here"

    def test_file_links_attached_to_each_record(self, sample_markdown: str):
        """Links anywhere in the file are attached to every record."""
        from course_importer.ingestion.parser import HeadingParser

        records = HeadingParser().parse(sample_markdown, "python.md")

        for record in records:
            assert "https://www.youtube.com/watch?v=abcdefghijk" in record.get_list("youtubeLinks")

    def test_code_blocks_are_ignored(self):
        """Headings inside fenced code are not records."""
        from course_importer.ingestion.parser import HeadingParser

        text = "# Shell\n```\n# not a heading\n```\nhttps://youtu.be/abc123xyz\n"
        records = HeadingParser().parse(text, "shell.md")

        assert len(records) == 1


# ─────────────────────────────────────────────────────────────────────────────
# Spreadsheet Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSpreadsheetParser:
    """Tests for the SpreadsheetParser class."""

    def test_records_from_frame(self):
        """Row 1 is the header; empty rows are skipped; numbers become text."""
        import pandas as pd

        from course_importer.ingestion.parser import SpreadsheetParser

        frame = pd.DataFrame(
            [
                [" Topic ", "YouTube", "Week", "Notes"],
                ["Arrays", "https://youtu.be/abc123xyz", 1.0, None],
                [None, None, None, None],
                ["Strings", None, 2.0, "see https://example.com/a.pdf"],
            ],
            dtype=object,
        )
        records = SpreadsheetParser().records_from_frame(frame)

        assert len(records) == 2
        assert records[0].get_text("topic") == "Arrays"
        assert records[0].get_text("week") == "1"
        assert "notes" not in records[0]
        assert _preview(records, 1).pdf_links == ["https://example.com/a.pdf"]

    def test_empty_frame(self):
        """An empty sheet yields no records."""
        import pandas as pd

        from course_importer.ingestion.parser import SpreadsheetParser

        assert SpreadsheetParser().records_from_frame(pd.DataFrame()) == []

    def test_text_content_rejected(self):
        """Workbooks must be given as bytes."""
        from course_importer.ingestion.parser import SpreadsheetParser
        from course_importer.shared.exceptions import ParseError

        with pytest.raises(ParseError):
            SpreadsheetParser().parse("Topic", "sheet.xlsx")

    def test_corrupt_workbook(self):
        """Bytes that are not a workbook are a ParseError."""
        from course_importer.ingestion.parser import SpreadsheetParser
        from course_importer.shared.exceptions import ParseError

        with pytest.raises(ParseError):
            SpreadsheetParser().parse(b"not a workbook", "sheet.xlsx")


# ─────────────────────────────────────────────────────────────────────────────
# Dispatcher Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestFormatDispatcher:
    """Tests for the FormatDispatcher class."""

    @pytest.mark.parametrize(
        "file_name,family",
        [
            ("sheet.xlsx", "spreadsheet"),
            ("sheet.xls", "spreadsheet"),
            ("notes.txt", "structured_text"),
            ("rows.csv", "structured_text"),
            ("syllabus.yaml", "nested"),
            ("syllabus.YML", "nested"),
            ("courses.json", "object"),
            ("README.md", "heading"),
            ("guide.markdown", "heading"),
        ],
    )
    def test_routing(self, file_name: str, family: str):
        """Extensions route to their parser family, case-insensitively."""
        from course_importer.ingestion.dispatcher import FormatDispatcher

        assert FormatDispatcher().get_parser(file_name).name == family

    def test_unknown_extension(self):
        """Unsupported extensions raise FormatError."""
        from course_importer.ingestion.dispatcher import FormatDispatcher
        from course_importer.shared.exceptions import FormatError

        with pytest.raises(FormatError) as exc_info:
            FormatDispatcher().parse_content("slides.pdf", b"%PDF-1.4")

        assert exc_info.value.extension == ".pdf"
        assert ".json" in exc_info.value.supported

    def test_empty_file(self):
        """An empty file yields no records and a zero summary."""
        from course_importer.ingestion.dispatcher import FormatDispatcher
        from course_importer.preview.summary import summarize

        records = FormatDispatcher().parse_content("empty.txt", b"  \n")
        result = summarize([])

        assert records == []
        assert result.summary.total == 0
        assert result.summary.valid_count == 0
        assert result.summary.invalid_count == 0

    @pytest.mark.parametrize(
        "text,family",
        [
            ('[{"topic": "Loops"}]', "object"),
            ("- topic: Arrays\n- topic: Strings\n", "nested"),
            ("DSA:\n  - Topic: Arrays\n", "nested"),
            ("Topic: Networking\nYouTube: https://youtu.be/abc123xyz\n", "structured_text"),
            ("[not json", "structured_text"),
        ],
    )
    def test_sniffing(self, text: str, family: str):
        """Pasted text is routed by content."""
        from course_importer.ingestion.dispatcher import FormatDispatcher

        assert FormatDispatcher().sniff_parser(text).name == family

    def test_repeated_keys_stay_structured_text(self):
        """Flat text with repeated Topic lines keeps every record."""
        from course_importer.ingestion.dispatcher import FormatDispatcher

        records = FormatDispatcher().parse_text_content(
            "Topic: Arrays\nVideo: https://youtu.be/abc123xyz\n"
            "Topic: Strings\nVideo: https://youtu.be/def456uvw\n"
        )

        assert [r.get_text("topic") for r in records] == ["Arrays", "Strings"]

    def test_repeated_keys_with_bullet_list_stay_structured_text(self):
        """A bullet list under a field line does not turn repeated keys into YAML."""
        from course_importer.ingestion.dispatcher import FormatDispatcher
        from course_importer.ingestion.parser import StructuredTextParser

        text = (
            "Topic: Arrays\nYouTube: https://youtu.be/aaaaaaaaaaa\n"
            "Topic: Linked Lists\nYouTube: https://youtu.be/bbbbbbbbbbb\n"
            "Subtopics:\n- Singly linked\n- Doubly linked\n"
        )
        dispatcher = FormatDispatcher()

        records = dispatcher.parse_text_content(text)

        assert isinstance(dispatcher.sniff_parser(text), StructuredTextParser)
        assert [r.get_text("topic") for r in records] == ["Arrays", "Linked Lists"]
        assert records[1].get_list("subtopics") == ["Singly linked", "Doubly linked"]

    def test_strict_yaml_rejects_duplicate_keys(self):
        """Repeated mapping keys are a YAML error for sniffing."""
        import yaml

        from course_importer.ingestion.parser import load_strict_yaml

        with pytest.raises(yaml.YAMLError):
            load_strict_yaml("Topic: Arrays\nTopic: Strings\n")

        assert load_strict_yaml("base: &base\n  a: 1\nitem:\n  <<: *base\n  b: 2\n") == {
            "base": {"a": 1},
            "item": {"a": 1, "b": 2},
        }

    def test_extract_topics(self):
        """Topic-like lines are pulled from free text, deduplicated."""
        from course_importer.ingestion.dispatcher import extract_topics

        text = "Week 1: Arrays\n- Linked lists\nrandom line\n1. Graphs\n- Linked lists\n"

        assert extract_topics(text) == ["Arrays", "Linked lists", "Graphs"]
