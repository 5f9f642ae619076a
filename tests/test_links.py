"""
Tests for Link Extraction.
==========================

Tests for:
- TextCleaner: Whitespace and invisible character handling
- classify_url: First-match-wins classification
- LinkExtractor: Ordering, dedup, idempotence, minimum length
"""

import pytest

from course_importer.shared.schemas import LinkKind


# ─────────────────────────────────────────────────────────────────────────────
# Cleaner Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCleaner:
    """Tests for the TextCleaner class."""

    def test_clean_collapses_whitespace(self):
        """Runs of spaces, tabs and non-breaking spaces become one space."""
        from course_importer.ingestion.cleaner import TextCleaner

        result = TextCleaner().clean("Topic:\t\t Arrays  and   loops")

        assert result == "Topic: Arrays and loops"

    def test_clean_removes_zero_width_characters(self):
        """Zero-width characters are dropped."""
        from course_importer.ingestion.cleaner import TextCleaner

        result = TextCleaner().clean("https://you\u200btu.be/abc123xyz")

        assert result == "https://youtu.be/abc123xyz"

    def test_clean_normalizes_line_endings(self):
        """CRLF and CR become LF."""
        from course_importer.ingestion.cleaner import TextCleaner

        assert TextCleaner().lines("a line\r\nb line\rc line") == ["a line", "b line", "c line"]

    def test_clean_handles_none(self):
        """None becomes an empty string."""
        from course_importer.ingestion.cleaner import TextCleaner

        assert TextCleaner().clean(None) == ""

    def test_clean_text_shortcut(self):
        """clean_text uses the shared default cleaner."""
        from course_importer.ingestion.cleaner import clean_text

        assert clean_text("  Arrays\u00a0 and  loops ") == "Arrays and loops"


# ─────────────────────────────────────────────────────────────────────────────
# Classification Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestClassifyUrl:
    """Tests for classify_url."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/playlist?list=PL1234567890",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
            "https://www.youtube-nocookie.com/embed/dQw4w9WgXcQ",
            "https://vimeo.com/123456789",
            "https://cdn.example.com/lecture.mp4",
        ],
    )
    def test_video_urls(self, url: str):
        """Video platform and video file links are videos."""
        from course_importer.ingestion.links import classify_url

        assert classify_url(url) == LinkKind.VIDEO

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/notes/week1.pdf",
            "https://example.com/files/notes.PDF?download=1",
            "https://example.com/export?format=pdf",
        ],
    )
    def test_pdf_urls(self, url: str):
        """PDF extension and PDF export links are PDFs."""
        from course_importer.ingestion.links import classify_url

        assert classify_url(url) == LinkKind.PDF

    @pytest.mark.parametrize(
        "url",
        [
            "https://docs.google.com/document/d/abc/edit",
            "https://github.com/org/repo",
            "https://example.com/slides.pptx",
            "https://docs.python.org/3/tutorial/",
        ],
    )
    def test_document_urls(self, url: str):
        """Office files, cloud storage, code hosting and docs sites are documents."""
        from course_importer.ingestion.links import classify_url

        assert classify_url(url) == LinkKind.DOCUMENT

    def test_video_wins_over_document(self):
        """A video file on a docs host is still a video (first match wins)."""
        from course_importer.ingestion.links import classify_url

        assert classify_url("https://docs.example.com/intro.mp4") == LinkKind.VIDEO

    def test_other_and_non_links(self):
        """Unknown sites and non-link text are OTHER."""
        from course_importer.ingestion.links import classify_url

        assert classify_url("https://example.com/about") == LinkKind.OTHER
        assert classify_url("not a link") == LinkKind.OTHER

    def test_is_document_url_accepts_pdf(self):
        """PDFs satisfy the document predicate."""
        from course_importer.ingestion.links import is_document_url

        assert is_document_url("https://example.com/a.pdf")

    @pytest.mark.parametrize(
        "url",
        [
            "https://drive.google.com/file/d/1AbCdEf/view",
            "https://docs.google.com/document/d/1AbCdEf/export?format=pdf",
            "https://www.dropbox.com/s/abc123/notes",
            "https://onedrive.live.com/redir?resid=ABC123",
        ],
    )
    def test_is_pdf_url_accepts_cloud_viewers(self, url: str):
        """Cloud viewer links pass as PDF links while still classified as documents."""
        from course_importer.ingestion.links import is_pdf_url

        assert is_pdf_url(url)

    def test_is_pdf_url_rejects_other_documents(self):
        """Plain office files are not PDF links."""
        from course_importer.ingestion.links import is_pdf_url

        assert not is_pdf_url("https://example.com/slides.pptx")
        assert not is_pdf_url("not a link")


# ─────────────────────────────────────────────────────────────────────────────
# Extractor Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestLinkExtractor:
    """Tests for the LinkExtractor class."""

    TEXT = (
        "Watch https://youtu.be/abc123xyz, then read https://example.com/a.pdf.\n"
        "Docs: www.python.org/doc/ and https://example.com/about\n"
        "Again: https://youtu.be/abc123xyz"
    )

    def test_extract_buckets(self):
        """Each link lands in its bucket, in source order."""
        from course_importer.ingestion.links import LinkExtractor

        links = LinkExtractor().extract(self.TEXT)

        assert links.video == ["https://youtu.be/abc123xyz"]
        assert links.pdf == ["https://example.com/a.pdf"]
        assert links.document == ["https://www.python.org/doc/"]
        assert links.other == ["https://example.com/about"]

    def test_extract_is_idempotent(self):
        """Extracting twice yields identical, identically ordered output."""
        from course_importer.ingestion.links import LinkExtractor

        extractor = LinkExtractor()

        assert extractor.extract(self.TEXT) == extractor.extract(self.TEXT)

    def test_url_in_exactly_one_bucket(self):
        """No URL appears in more than one bucket."""
        from course_importer.ingestion.links import LinkExtractor

        links = LinkExtractor().extract(self.TEXT)
        everything = links.video + links.pdf + links.document + links.other

        assert len(everything) == len(set(everything))

    def test_short_matches_are_dropped(self):
        """Candidates shorter than the minimum length are noise."""
        from course_importer.ingestion.links import LinkExtractor

        links = LinkExtractor(min_link_length=20).extract("see http://a.io and https://youtu.be/abc123xyz")

        assert links.other == []
        assert links.video == ["https://youtu.be/abc123xyz"]

    def test_trailing_punctuation_is_trimmed(self):
        """Sentence punctuation is not part of the URL."""
        from course_importer.ingestion.links import LinkExtractor

        links = LinkExtractor().extract("(see https://github.com/org/repo).")

        assert links.document == ["https://github.com/org/repo"]

    def test_extract_all_keeps_first_seen_order(self):
        """extract_all merges texts in order without repeats."""
        from course_importer.ingestion.links import LinkExtractor

        links = LinkExtractor().extract_all(
            ["https://youtu.be/bbbbbbbbbbb", None, "https://youtu.be/aaaaaaaaaaa https://youtu.be/bbbbbbbbbbb"]
        )

        assert links.video == ["https://youtu.be/bbbbbbbbbbb", "https://youtu.be/aaaaaaaaaaa"]

    def test_empty_text(self):
        """Empty input gives empty buckets."""
        from course_importer.ingestion.links import extract_links

        links = extract_links("")

        assert links.is_empty()
        assert len(links) == 0
