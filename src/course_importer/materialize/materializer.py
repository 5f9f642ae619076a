"""
Materializer Module - Build Course entities from valid previews.
================================================================

Two commit modes:
- MULTI_COURSE: every valid preview becomes its own single-module course
- SINGLE_COURSE: all valid previews become the ordered modules of one course

Video links are canonicalized to embed URLs. Within one course, each
embed URL appears once, attached to the first module that references it.
Links that cannot be canonicalized are dropped from videoLinks.

Output is a CommitRequest; nothing is sent anywhere from here.
"""

from dataclasses import dataclass, field
from typing import Optional

from course_importer.materialize.categories import infer_category
from course_importer.materialize.embed import canonicalize_video_url
from course_importer.materialize.schedule import generate_schedule, week_label
from course_importer.shared.config import MaterializationConfig, get_settings
from course_importer.shared.exceptions import MaterializationError
from course_importer.shared.logging import get_logger
from course_importer.shared.schemas import (
    CommitMode,
    CommitRequest,
    ContentType,
    Course,
    CourseImportPreview,
    Difficulty,
    Module,
    VideoLink,
)
from course_importer.shared.utils import (
    dedupe,
    generate_course_id,
    generate_module_id,
    generate_video_id,
)

logger = get_logger(__name__)

LANGUAGE_NAMES = {"en": "English", "hi": "Hindi"}

# Creator label looked up first for each language
CREATOR_LABELS = {"hi": "Hinglish Creator", "en": "English Creator"}

DIFFICULTY_HINTS: tuple[tuple[Difficulty, tuple[str, ...]], ...] = (
    (Difficulty.BEGINNER, ("begin", "basic", "easy", "intro", "novice")),
    (Difficulty.INTERMEDIATE, ("inter", "medium", "moderate")),
    (Difficulty.ADVANCED, ("advanc", "hard", "expert")),
)


@dataclass
class MaterializeOptions:
    """Caller choices for one commit."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    visibility: Optional[str] = None
    status: Optional[str] = None
    tags: list[str] = field(default_factory=list)


def normalize_difficulty(value: Optional[str], default: str = "beginner") -> Difficulty:
    """
    Map a free difficulty label onto beginner/intermediate/advanced.

    Example:
        >>> normalize_difficulty("Medium").value
        'intermediate'
    """
    text = (value or "").strip().lower()
    for difficulty, hints in DIFFICULTY_HINTS:
        if any(hint in text for hint in hints):
            return difficulty
    return Difficulty(default)


class CourseMaterializer:
    """
    Convert valid previews into a commit request.

    Example:
        >>> materializer = CourseMaterializer()
        >>> request = materializer.materialize(previews, CommitMode.MULTI_COURSE)
        >>> len(request.courses) == len(previews)
        True
    """

    def __init__(self, config: Optional[MaterializationConfig] = None):
        """
        Initialize the materializer.

        Args:
            config: Materialization settings (uses config file if None)
        """
        self.config = config or get_settings().materialization

    def materialize(
        self,
        previews: list[CourseImportPreview],
        mode: CommitMode | str = CommitMode.SINGLE_COURSE,
        options: Optional[MaterializeOptions] = None,
    ) -> CommitRequest:
        """
        Build the courses for one submission.

        Args:
            previews: Validated previews; those with an error are skipped
            mode: Single-course or multi-course
            options: Title, category and other overrides

        Returns:
            CommitRequest holding one course (single) or N courses (multi)

        Raises:
            MaterializationError: No valid previews, or no title in single mode
        """
        options = options or MaterializeOptions()
        mode = CommitMode(mode)

        valid = [preview for preview in previews if not preview.error]
        skipped = len(previews) - len(valid)
        if skipped:
            logger.info(f"Skipping {skipped} invalid preview(s)")
        if not valid:
            raise MaterializationError("No valid previews to import")

        if mode == CommitMode.SINGLE_COURSE:
            courses = [self.build_course(valid, options)]
        else:
            courses = [
                self.build_standalone_course(preview, position, options)
                for position, preview in enumerate(valid)
            ]

        logger.info(
            f"Materialized {len(courses)} course(s) with "
            f"{sum(len(course.modules) for course in courses)} module(s)"
        )
        return CommitRequest(courses=courses)

    # ─────────────────────────────────────────────────────────────────────────
    # Courses
    # ─────────────────────────────────────────────────────────────────────────

    def build_course(
        self,
        previews: list[CourseImportPreview],
        options: MaterializeOptions,
    ) -> Course:
        """All previews as the modules of one course."""
        title = (options.title or "").strip() or self._common_course_name(previews)
        if not title:
            raise MaterializationError(
                "A course title is required for single-course import "
                "(the previews do not share a course name)"
            )

        seen: set[str] = set()
        modules = [
            self.build_module(preview, index, seen) for index, preview in enumerate(previews)
        ]
        duration = self._course_duration(previews, modules)
        category = options.category or infer_category(title, [m.title for m in modules])

        return Course(
            id=generate_course_id(title, 0),
            title=title,
            description=options.description
            or (
                f"Comprehensive {title} course with {len(modules)} modules covering "
                "essential topics and practical skills."
            ),
            category=category,
            difficulty=normalize_difficulty(
                options.difficulty or previews[0].difficulty, self.config.default_difficulty
            ),
            visibility=options.visibility or self.config.default_visibility,
            status=options.status or self.config.default_status,
            duration=duration,
            estimated_hours=len(modules) * self.config.hours_per_module,
            modules=modules,
            tags=dedupe([category, *options.tags]),
            suggested_schedule=generate_schedule(modules, duration),
        )

    def build_standalone_course(
        self,
        preview: CourseImportPreview,
        position: int,
        options: MaterializeOptions,
    ) -> Course:
        """One preview as a single-module course."""
        module = self.build_module(preview, 0, set())
        duration = preview.duration or "1 week"
        category = options.category or infer_category(preview.topic, [preview.course or ""])

        return Course(
            id=generate_course_id(preview.topic, position),
            title=preview.topic,
            description=module.description,
            category=category,
            difficulty=normalize_difficulty(
                options.difficulty or preview.difficulty, self.config.default_difficulty
            ),
            visibility=options.visibility or self.config.default_visibility,
            status=options.status or self.config.default_status,
            duration=duration,
            estimated_hours=self.config.hours_per_module,
            modules=[module],
            tags=dedupe([category, *options.tags]),
            suggested_schedule=generate_schedule([module], duration),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Modules
    # ─────────────────────────────────────────────────────────────────────────

    def build_module(
        self,
        preview: CourseImportPreview,
        index: int,
        seen: set[str],
    ) -> Module:
        """
        Build one module.

        Args:
            preview: Source preview
            index: 0-based module position
            seen: Embed URLs already used in this course (updated in place)
        """
        languages = preview.metadata.get("linkLanguages") or {}
        creators = preview.metadata.get("creators") or {}

        video_links: list[VideoLink] = []
        first_embed: Optional[str] = None
        for url in preview.youtube_links:
            result = canonicalize_video_url(url)
            if not result.ok:
                logger.debug(f"Not canonicalizable, left out of videoLinks: {url}")
                continue
            first_embed = first_embed or result.embed_url
            if result.embed_url in seen:
                logger.debug(f"Duplicate video in course, already attached: {result.embed_url}")
                continue
            seen.add(result.embed_url)

            lang_code = languages.get(url, self.config.default_lang_code)
            lang_name = LANGUAGE_NAMES.get(lang_code, self.config.default_lang_name)
            video_links.append(
                VideoLink(
                    id=generate_video_id(index, len(video_links)),
                    lang_code=lang_code,
                    lang_name=lang_name,
                    youtube_embed_url=result.embed_url,
                    title=f"{preview.topic} - {lang_name} Tutorial",
                    creator=creators.get(CREATOR_LABELS.get(lang_code, ""))
                    or creators.get("Creator"),
                    is_playlist=result.is_playlist,
                )
            )

        resources = dedupe(
            [*preview.pdf_links, *preview.doc_links, *(d.url for d in preview.uploaded_documents)]
        )

        return Module(
            id=generate_module_id(index),
            title=preview.topic,
            description=preview.description or f"Learn about {preview.topic}",
            content_type=ContentType.VIDEO if preview.youtube_links else ContentType.TEXT,
            content_url=first_embed or next(iter(resources), None),
            estimated_time=preview.duration or self.config.default_estimated_time,
            subtopics=list(preview.subtopics or []),
            practice_task="\n".join(preview.tasks or []),
            video_links=video_links,
            resources=resources,
            order=index,
            week=week_label_or_none(preview.week),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _common_course_name(previews: list[CourseImportPreview]) -> str:
        names = {(preview.course or "").strip() for preview in previews}
        if len(names) == 1:
            return names.pop()
        return ""

    @staticmethod
    def _course_duration(previews: list[CourseImportPreview], modules: list[Module]) -> str:
        declared = previews[0].metadata.get("courseDurationWeeks")
        if declared:
            return f"{declared} weeks"
        weeks = dedupe(week_label(module, position) for position, module in enumerate(modules))
        return f"{len(weeks)} week{'s' if len(weeks) != 1 else ''}"


def week_label_or_none(week: Optional[str]) -> Optional[str]:
    return week.strip() if week and week.strip() else None


def materialize(
    previews: list[CourseImportPreview],
    mode: CommitMode | str = CommitMode.SINGLE_COURSE,
    options: Optional[MaterializeOptions] = None,
) -> CommitRequest:
    """Materialize previews with a default materializer."""
    return CourseMaterializer().materialize(previews, mode, options)
