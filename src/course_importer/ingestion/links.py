"""
Links Module - Find and classify URLs in free text.
===================================================

Every parser hands text to the LinkExtractor, which:
1. Normalizes whitespace through the TextCleaner
2. Tokenizes candidate URLs (http(s):// and bare www.) in source order
3. Classifies each candidate exactly once against LINK_CLASSIFIERS
   (video, pdf, document; first match wins, the rest is "other")
4. Drops candidates shorter than the configured minimum length
5. Deduplicates each bucket, keeping first-seen order

Because a candidate is classified once, a URL can never land in more
than one bucket.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from course_importer.ingestion.cleaner import TextCleaner, get_cleaner
from course_importer.shared.config import get_settings
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import LinkKind
from course_importer.shared.utils import dedupe

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Patterns
# ─────────────────────────────────────────────────────────────────────────────

_URL_CHARS = r"[^\s<>\"'{}|\\^`\[\]()]"

CANDIDATE_PATTERN = re.compile(
    rf"https?://{_URL_CHARS}+"
    rf"|www\.{_URL_CHARS}+\.[a-z]{{2,}}{_URL_CHARS}*",
    re.IGNORECASE,
)

LINK_SHAPE_PATTERN = re.compile(r"^(?:https?://|www\.)\S+$", re.IGNORECASE)

_TRAILING_PUNCTUATION = ".,;:!?'\")]}>"

_HOST = r"^https?://(?:[\w-]+\.)*"
_END = r"(?:[/?#:]|$)"


def _host(*domains: str) -> re.Pattern[str]:
    """Pattern matching any of the domains (and their subdomains)."""
    alternatives = "|".join(domains)
    return re.compile(rf"{_HOST}(?:{alternatives}){_END}", re.IGNORECASE)


def _path(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


VIDEO_PATTERNS: tuple[re.Pattern[str], ...] = (
    # YouTube in all shapes: watch, embed, short links, playlists, shorts,
    # live, channels, handles, mobile, music, gaming and regional domains
    _host(
        r"youtube\.[a-z]{2,3}(?:\.[a-z]{2})?",
        r"youtube-nocookie\.com",
        r"youtu\.be",
    ),
    # Other video platforms
    _host(
        r"vimeo\.com",
        r"dailymotion\.com",
        r"dai\.ly",
        r"twitch\.tv",
        r"fb\.watch",
        r"tiktok\.com",
        r"wistia\.(?:com|net)",
        r"wi\.st",
        r"brightcove\.(?:com|net)",
        r"videopress\.com",
        r"loom\.com",
        r"ted\.com",
        r"bilibili\.com",
    ),
    _path(r"^https?://(?:[\w-]+\.)*facebook\.com/(?:[^/]+/)?(?:videos?|watch)"),
    _path(r"^https?://(?:[\w-]+\.)*instagram\.com/(?:reels?|tv)/"),
    # Course platforms
    _host(
        r"coursera\.org",
        r"udemy\.com",
        r"edx\.org",
        r"khanacademy\.org",
        r"pluralsight\.com",
        r"skillshare\.com",
        r"udacity\.com",
        r"freecodecamp\.org",
        r"codecademy\.com",
    ),
    # Meeting recordings
    _path(r"^https?://(?:[\w-]+\.)*zoom\.us/rec/"),
    _path(r"^https?://(?:[\w-]+\.)*webex\.com/(?:[\w-]+/)*(?:recordingservice|ldr\.php)"),
    _path(r"^https?://meet\.google\.com/.*record"),
    # Direct video files
    _path(r"\.(?:mp4|avi|mov|wmv|flv|webm|mkv|m4v|3gp|ogv)(?:[?#]|$)"),
)

PDF_PATTERNS: tuple[re.Pattern[str], ...] = (
    _path(r"\.pdf(?:[?#]|$)"),
    _path(r"^https?://[^?#]*/pdfs?/"),
    _path(r"[?&](?:format|type|output)=pdf(?:&|#|$)"),
    _host(r"pdfhost\.io", r"pdfdrive\.com", r"docdroid\.net"),
)

DOCUMENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Office and text file links
    _path(
        r"\.(?:docx?|pptx?|xlsx?|odt|ods|odp|rtf|txt|md|csv|json|xml|yaml|yml"
        r"|epub|pages|key|numbers|ipynb)(?:[?#]|$)"
    ),
    # Cloud storage and office suites
    _host(
        r"docs\.google\.com",
        r"drive\.google\.com",
        r"dropbox\.com",
        r"box\.com",
        r"onedrive\.live\.com",
        r"1drv\.ms",
        r"sharepoint\.com",
        r"icloud\.com",
    ),
    # Note-taking and wikis
    _host(
        r"notion\.so",
        r"notion\.site",
        r"atlassian\.net",
        r"confluence\.[\w.-]+",
        r"obsidian\.md",
        r"wikipedia\.org",
        r"wikibooks\.org",
    ),
    # Code hosting
    _host(
        r"github\.com",
        r"gist\.github\.com",
        r"raw\.githubusercontent\.com",
        r"github\.io",
        r"gitlab\.com",
        r"bitbucket\.org",
    ),
    # Documentation sites
    _host(r"readthedocs\.(?:io|org)", r"gitbook\.(?:io|com)", r"devdocs\.io"),
    _path(r"^https?://docs?\."),
    _path(r"^https?://[^?#]*(?:/docs?/|/documentation|/wiki/|/manual/|/guide/)"),
    # Academic
    _host(
        r"arxiv\.org",
        r"scholar\.google\.com",
        r"researchgate\.net",
        r"academia\.edu",
        r"jstor\.org",
        r"sciencedirect\.com",
        r"springer\.com",
        r"ieeexplore\.ieee\.org",
        r"dl\.acm\.org",
    ),
    # Articles and Q&A
    _host(
        r"medium\.com",
        r"dev\.to",
        r"hashnode\.dev",
        r"substack\.com",
        r"stackoverflow\.com",
        r"stackexchange\.com",
        r"w3schools\.com",
        r"geeksforgeeks\.org",
        r"developer\.mozilla\.org",
        r"tutorialspoint\.com",
    ),
    # Learning management systems
    _host(r"instructure\.com", r"moodle\.[\w.-]+", r"blackboard\.com"),
    # Presentations and file hosts
    _host(
        r"slideshare\.net",
        r"speakerdeck\.com",
        r"prezi\.com",
        r"scribd\.com",
        r"mediafire\.com",
        r"wetransfer\.com",
        r"mega\.nz",
    ),
)

# Ordered (kind, patterns) pairs; the first kind with a matching pattern wins
LINK_CLASSIFIERS: tuple[tuple[LinkKind, tuple[re.Pattern[str], ...]], ...] = (
    (LinkKind.VIDEO, VIDEO_PATTERNS),
    (LinkKind.PDF, PDF_PATTERNS),
    (LinkKind.DOCUMENT, DOCUMENT_PATTERNS),
)

# Viewer hosts that commonly serve PDFs; accepted in explicit PDF fields
PDF_VIEWER_PATTERNS: tuple[re.Pattern[str], ...] = (
    _host(
        r"docs\.google\.com",
        r"drive\.google\.com",
        r"dropbox\.com",
        r"onedrive\.live\.com",
        r"1drv\.ms",
    ),
)


# ─────────────────────────────────────────────────────────────────────────────
# Classification Helpers
# ─────────────────────────────────────────────────────────────────────────────


def normalize_candidate(token: str) -> str:
    """
    Trim trailing punctuation and add a scheme to bare www. links.

    Example:
        >>> normalize_candidate("www.example.com/page).")
        'https://www.example.com/page'
    """
    url = token.strip().rstrip(_TRAILING_PUNCTUATION)
    if url.lower().startswith("www."):
        url = f"https://{url}"
    return url


def is_link(value: object) -> bool:
    """Whether a value is a single link-shaped string."""
    return isinstance(value, str) and bool(LINK_SHAPE_PATTERN.match(value.strip()))


def classify_url(url: str) -> LinkKind:
    """
    Classify one URL into exactly one LinkKind.

    Non-link strings are classified as OTHER.

    Example:
        >>> classify_url("https://youtu.be/dQw4w9WgXcQ")
        <LinkKind.VIDEO: 'video'>
    """
    if not is_link(url):
        return LinkKind.OTHER
    candidate = normalize_candidate(url)
    for kind, patterns in LINK_CLASSIFIERS:
        if any(pattern.search(candidate) for pattern in patterns):
            return kind
    return LinkKind.OTHER


def is_video_url(url: str) -> bool:
    return classify_url(url) == LinkKind.VIDEO


def is_pdf_url(url: str) -> bool:
    """PDF links, plus cloud viewer links that usually hold a PDF."""
    if classify_url(url) == LinkKind.PDF:
        return True
    return is_link(url) and any(
        pattern.search(normalize_candidate(url)) for pattern in PDF_VIEWER_PATTERNS
    )


def is_document_url(url: str) -> bool:
    """PDFs count as documents too."""
    return classify_url(url) in (LinkKind.PDF, LinkKind.DOCUMENT)


# ─────────────────────────────────────────────────────────────────────────────
# Extraction Result
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ExtractedLinks:
    """Links found in a piece of text, one list per LinkKind."""

    video: list[str] = field(default_factory=list)
    pdf: list[str] = field(default_factory=list)
    document: list[str] = field(default_factory=list)
    other: list[str] = field(default_factory=list)

    def bucket(self, kind: LinkKind) -> list[str]:
        """Get the list for a kind."""
        return {
            LinkKind.VIDEO: self.video,
            LinkKind.PDF: self.pdf,
            LinkKind.DOCUMENT: self.document,
            LinkKind.OTHER: self.other,
        }[LinkKind(kind)]

    def add(self, kind: LinkKind, url: str) -> None:
        bucket = self.bucket(kind)
        if url not in bucket:
            bucket.append(url)

    def merge(self, other: "ExtractedLinks") -> "ExtractedLinks":
        """Return a new result with other's links appended after ours."""
        return ExtractedLinks(
            video=dedupe([*self.video, *other.video]),
            pdf=dedupe([*self.pdf, *other.pdf]),
            document=dedupe([*self.document, *other.document]),
            other=dedupe([*self.other, *other.other]),
        )

    def capped(self, limit: int) -> "ExtractedLinks":
        """Return a copy with at most `limit` links per bucket."""
        return ExtractedLinks(
            video=self.video[:limit],
            pdf=self.pdf[:limit],
            document=self.document[:limit],
            other=self.other[:limit],
        )

    def content_links(self) -> list[str]:
        """Video, PDF and document links (everything except other)."""
        return [*self.video, *self.pdf, *self.document]

    def is_empty(self) -> bool:
        return not (self.video or self.pdf or self.document or self.other)

    @property
    def has_content(self) -> bool:
        return bool(self.video or self.pdf or self.document)

    def __len__(self) -> int:
        return len(self.video) + len(self.pdf) + len(self.document) + len(self.other)


# ─────────────────────────────────────────────────────────────────────────────
# Link Extractor Class
# ─────────────────────────────────────────────────────────────────────────────


class LinkExtractor:
    """
    Extract and classify links from free text.

    Example:
        >>> extractor = LinkExtractor()
        >>> links = extractor.extract("Watch https://youtu.be/abc123xyz and read www.python.org/doc/")
        >>> links.video
        ['https://youtu.be/abc123xyz']
        >>> links.document
        ['https://www.python.org/doc/']
    """

    def __init__(
        self,
        min_link_length: Optional[int] = None,
        cleaner: Optional[TextCleaner] = None,
    ):
        """
        Initialize the extractor.

        Args:
            min_link_length: Shortest accepted link (uses config if None)
            cleaner: Text cleaner (uses defaults if None)
        """
        settings = get_settings()
        self.min_link_length = (
            min_link_length
            if min_link_length is not None
            else settings.parsing.min_link_length
        )
        self.cleaner = cleaner or get_cleaner()

    def candidates(self, text: Optional[str]) -> list[str]:
        """Normalized URL candidates in source order (may repeat)."""
        if not text:
            return []
        cleaned = self.cleaner.clean(text)
        found = []
        for match in CANDIDATE_PATTERN.finditer(cleaned):
            url = normalize_candidate(match.group(0))
            if len(url) < self.min_link_length:
                continue
            found.append(url)
        return found

    def extract(self, text: Optional[str]) -> ExtractedLinks:
        """
        Extract links from text.

        Args:
            text: Any text, possibly containing URLs

        Returns:
            ExtractedLinks with deduplicated, ordered buckets
        """
        result = ExtractedLinks()
        for url in self.candidates(text):
            result.add(classify_url(url), url)
        return result

    def extract_all(self, texts: Iterable[Optional[str]]) -> ExtractedLinks:
        """Extract from several texts, keeping first-seen order across them."""
        result = ExtractedLinks()
        for text in texts:
            for url in self.candidates(text):
                result.add(classify_url(url), url)
        return result


# ─────────────────────────────────────────────────────────────────────────────
# Convenience Functions
# ─────────────────────────────────────────────────────────────────────────────


def extract_links(text: Optional[str]) -> ExtractedLinks:
    """
    Extract links using the default configuration.

    Example:
        >>> extract_links("Slides: https://example.com/week1.pdf").pdf
        ['https://example.com/week1.pdf']
    """
    return LinkExtractor().extract(text)
