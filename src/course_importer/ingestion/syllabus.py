"""
Syllabus Module - Extract week records from nested syllabus documents.
======================================================================

Handles the two-level syllabus shape:

    Overview:
      - Course: DSA
        Duration (Weeks): 12
        Modules: 12
    DSA:
      - Week: 1
        Tech Topic: Arrays
        Subtopics: Traversal, Two pointers
        Hinglish Resource Link: https://youtu.be/...
        Practice Task: Reverse an array in place

Top-level keys are course names mapping to ordered lists of week
mappings. Reserved keys (Overview) carry course-level figures, never
module data. Each week mapping becomes one RawRecord.
"""

from typing import Any, Optional

from course_importer.ingestion.links import LinkExtractor
from course_importer.ingestion.records import RawRecord, iter_strings
from course_importer.shared.config import get_settings
from course_importer.shared.logging import get_logger
from course_importer.shared.utils import dedupe, format_scalar, split_list

logger = get_logger(__name__)

# Generic list-of-records key, handled by the nested parser itself
COURSES_KEY = "courses"

TOPIC_KEYS = ("Tech Topic", "Topic", "Title", "Module", "Name")
WEEK_KEYS = ("Week", "Week Number", "Week No")
SUBTOPIC_KEYS = ("Subtopics", "Sub Topics", "Sub-topics", "Topics Covered")
TASK_KEYS = ("Practice Task", "Task", "Tasks", "Assignment", "Exercise", "Project")
DESCRIPTION_KEYS = ("Description", "Summary", "About")
DURATION_KEYS = ("Duration", "Time", "Length")
DIFFICULTY_KEYS = ("Difficulty", "Level")
CREATOR_KEYS = (
    ("Hinglish Creator", "Hinglish Creator"),
    ("English Creator", "English Creator"),
    ("Creator", "Creator"),
)
# Localized link fields and the language of the video they hold
LANGUAGE_LINK_KEYS = (
    ("Hinglish Resource Link", "hi"),
    ("English Resource Link", "en"),
)
LINK_KEYS = (
    "Hinglish Resource Link",
    "English Resource Link",
    "Resource Link",
    "Resource Links",
    "Video Link",
    "Video Links",
    "YouTube Link",
    "Youtube Link",
    "Video URL",
    "Video",
    "PDF",
    "PDF Link",
    "Document",
    "Document Link",
    "URL",
    "Link",
    "Links",
    "Resources",
)


def _is_week_list(value: Any) -> bool:
    return isinstance(value, list) and any(isinstance(item, dict) for item in value)


class SyllabusExtractor:
    """
    Turn a course-name -> weeks mapping into RawRecords.

    Example:
        >>> extractor = SyllabusExtractor()
        >>> records = extractor.extract({"DSA": [{"Topic": "Arrays"}]})
        >>> records[0].get_text("topic")
        'Arrays'
    """

    def __init__(
        self,
        link_extractor: Optional[LinkExtractor] = None,
        reserved_keys: Optional[list[str]] = None,
        max_scan_depth: Optional[int] = None,
    ):
        """
        Initialize the extractor.

        Args:
            link_extractor: Link extractor (creates one if None)
            reserved_keys: Overview-style keys to skip (uses config if None)
            max_scan_depth: Depth bound of the recursive link scan (uses config if None)
        """
        settings = get_settings()
        self.config = settings.syllabus
        self.link_extractor = link_extractor or LinkExtractor()
        self.reserved_keys = {
            key.lower() for key in (reserved_keys or self.config.reserved_keys)
        }
        self.max_scan_depth = max_scan_depth or settings.parsing.max_scan_depth

    def is_syllabus(self, data: Any) -> bool:
        """Whether a mapping has at least one course key holding week mappings."""
        if not isinstance(data, dict):
            return False
        return any(
            _is_week_list(value)
            for key, value in data.items()
            if not self._is_reserved(key)
        )

    def extract(self, data: dict[str, Any]) -> list[RawRecord]:
        """
        Extract one RawRecord per week mapping.

        Args:
            data: Parsed top-level mapping

        Returns:
            Records in document order (courses, then weeks)
        """
        overview = self._read_overview(data)
        records: list[RawRecord] = []

        for course_name, weeks in data.items():
            if self._is_reserved(course_name):
                continue
            if not _is_week_list(weeks):
                logger.debug(f"Skipping non-syllabus key: {course_name}")
                continue

            course = str(course_name).strip()
            for index, week in enumerate(weeks):
                if not isinstance(week, dict):
                    logger.debug(f"Skipping non-mapping week {index + 1} in {course}")
                    continue
                records.append(
                    self._week_record(course, index, week, overview.get(course.lower(), {}))
                )

        logger.debug(f"Extracted {len(records)} syllabus records")
        return records

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _is_reserved(self, key: Any) -> bool:
        text = str(key).strip().lower()
        return text in self.reserved_keys or text == COURSES_KEY

    def _read_overview(self, data: dict[str, Any]) -> dict[str, dict[str, str]]:
        """Map lower-cased course name -> overview figures."""
        figures: dict[str, dict[str, str]] = {}
        for key, value in data.items():
            if str(key).strip().lower() not in self.reserved_keys:
                continue
            entries = value if isinstance(value, list) else [value]
            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                fields = RawRecord(entry)
                course = fields.get_text("Course", "Name", "Title")
                if not course:
                    continue
                overview: dict[str, str] = {}
                duration = fields.get_text("Duration (Weeks)", "Duration", "Weeks")
                modules = fields.get_text("Modules", "Module Count")
                if duration:
                    overview["courseDurationWeeks"] = duration
                if modules:
                    overview["courseModuleCount"] = modules
                figures[course.lower()] = overview
        return figures

    def _week_record(
        self,
        course: str,
        index: int,
        week: dict[str, Any],
        overview: dict[str, str],
    ) -> RawRecord:
        fields = RawRecord(week)
        week_number = fields.get_text(*WEEK_KEYS) or str(index + 1)
        topic = fields.get_text(*TOPIC_KEYS) or f"{course} - Week {week_number}"

        # Known link fields first, then every string anywhere in the week
        alias_texts = [text for key in LINK_KEYS for text in fields.get_list(key)]
        link_languages = {
            url: language
            for key, language in LANGUAGE_LINK_KEYS
            for text in fields.get_list(key)
            for url in self.link_extractor.extract(text).video
        }
        links = self.link_extractor.extract_all(
            [*alias_texts, *iter_strings(week, self.max_scan_depth)]
        )

        subtopics = dedupe(split_list(fields.get_list(*SUBTOPIC_KEYS)))
        tasks = dedupe(
            text.strip() for key in TASK_KEYS for text in fields.get_list(key)
        )

        creators: dict[str, str] = {}
        for key, label in CREATOR_KEYS:
            value = fields.get_text(key)
            if value:
                creators[label] = value

        record = RawRecord(
            {
                "topic": topic,
                "course": course,
                "week": week_number,
                "youtubeLinks": links.video,
                "pdfLinks": links.pdf,
                "docLinks": links.document,
                "subtopics": subtopics,
                "tasks": tasks,
                "description": self._description(fields, topic, subtopics, creators),
                "duration": fields.get_text(*DURATION_KEYS) or self.config.default_duration,
                "difficulty": fields.get_text(*DIFFICULTY_KEYS)
                or self.config.default_difficulty,
            }
        )
        record.set(
            "metadata",
            {
                "weekNumber": week_number,
                "courseCategory": course,
                "originalWeek": {str(k): v for k, v in week.items()},
                "otherLinks": links.other,
                "creators": creators,
                "linkLanguages": link_languages,
                **overview,
            },
        )
        return record

    def _description(
        self,
        fields: RawRecord,
        topic: str,
        subtopics: list[str],
        creators: dict[str, str],
    ) -> str:
        explicit = fields.get_text(*DESCRIPTION_KEYS)
        if explicit:
            return explicit

        parts = []
        if fields.get_text("Tech Topic", "Topic"):
            parts.append(f"Topic: {topic}")
        if subtopics:
            parts.append(f"Subtopics: {', '.join(subtopics)}")
        for label, value in creators.items():
            parts.append(f"{label}: {format_scalar(value)}")

        if not parts:
            return self.config.default_description
        return self.config.description_separator.join(parts)
