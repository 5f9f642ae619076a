"""
Categories Module - Infer a course category from its names.
===========================================================

Keyword sets are checked in order; the first set with a whole-word match
wins. The course title is checked before module topics, so a title such
as "Full Stack Web Development" decides the category even when a module
is called "Intro to Machine Learning".
"""

import re
from typing import Iterable, Optional

from course_importer.shared.config import get_settings

# (category, keywords), checked in order
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Web Development",
        ("full-stack", "full stack", "web development", "javascript", "react", "node", "html", "css"),
    ),
    ("Programming", ("dsa", "algorithm", "algorithms", "data structure", "data structures")),
    ("DevOps", ("devops", "docker", "kubernetes", "ci/cd")),
    ("Language Learning", ("english", "communication", "grammar", "vocabulary")),
    ("Design", ("design", "ui", "ux", "figma")),
    ("AI & Machine Learning", ("ai", "machine learning", "ml", "deep learning")),
    ("Interview Preparation", ("aptitude", "interview")),
)


def _compile(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"(?<![a-z0-9])(?:{alternatives})(?![a-z0-9])", re.I)


CATEGORY_PATTERNS = tuple(
    (category, _compile(keywords)) for category, keywords in CATEGORY_KEYWORDS
)


def match_category(text: str) -> Optional[str]:
    """
    Category of the first keyword set found in text, or None.

    Example:
        >>> match_category("DSA Bootcamp")
        'Programming'
        >>> match_category("Guitar basics") is None
        True
    """
    if not text:
        return None
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return None


def infer_category(title: str, topics: Iterable[str] = ()) -> str:
    """
    Infer a category from the course title, then from module topics.

    Args:
        title: Course title
        topics: Module topics in order

    Returns:
        Matched category, or the configured default
    """
    for text in (title, *topics):
        category = match_category(text)
        if category:
            return category
    return get_settings().materialization.default_category
