"""
Schedule Module - Week-by-week schedule document for a course.
==============================================================

Builds the Markdown schedule attached to a materialized course:

    # Course Schedule

    **Duration:** 2 weeks
    **Total Modules:** 2

    ## Week 1: Arrays

    **Topics Covered:**
    - Traversal

    **Practice Task:** Reverse an array

    **Resources:**
    - [PDF Document](https://example.com/arrays.pdf)

    ---
"""

from course_importer.shared.schemas import Module

# (substring, label), first match wins
RESOURCE_TYPES: tuple[tuple[tuple[str, ...], str], ...] = (
    ((".pdf",), "PDF Document"),
    ((".doc",), "Word Document"),
    ((".ppt",), "Presentation"),
    ((".xls",), "Spreadsheet"),
    (("github.com", "gitlab.com"), "Code Repository"),
    (("medium.com", "dev.to"), "Article"),
    (("stackoverflow.com",), "Q&A Forum"),
    (("docs.", "documentation"), "Documentation"),
    (("blog",), "Blog Post"),
    (("tutorial",), "Tutorial"),
    ((".png", ".jpg", ".jpeg", ".gif"), "Image"),
)


def resource_type(url: str) -> str:
    """
    Human label for a resource URL.

    Example:
        >>> resource_type("https://github.com/org/repo")
        'Code Repository'
    """
    if not url:
        return "Unknown"
    lowered = url.lower()
    for needles, label in RESOURCE_TYPES:
        if any(needle in lowered for needle in needles):
            return label
    return "Web Resource"


def week_label(module: Module, position: int) -> str:
    """Explicit week of a module, else its 1-based position."""
    return (module.week or "").strip() or str(position + 1)


def generate_schedule(modules: list[Module], duration: str) -> str:
    """
    Render the schedule for an ordered module list.

    Args:
        modules: Course modules in order
        duration: Course duration label, e.g. "4 weeks"

    Returns:
        Markdown document
    """
    lines = [
        "# Course Schedule",
        "",
        f"**Duration:** {duration}",
        f"**Total Modules:** {len(modules)}",
        "",
    ]

    for position, module in enumerate(modules):
        lines.append(f"## Week {week_label(module, position)}: {module.title}")
        lines.append("")

        if module.subtopics:
            lines.append("**Topics Covered:**")
            lines.extend(f"- {subtopic}" for subtopic in module.subtopics)
            lines.append("")

        if module.practice_task:
            lines.append(f"**Practice Task:** {module.practice_task}")
            lines.append("")

        if module.video_links or module.resources:
            lines.append("**Resources:**")
            for video in module.video_links:
                lines.append(f"- [{video.title or 'Video'}]({video.youtube_embed_url})")
            for url in module.resources:
                lines.append(f"- [{resource_type(url)}]({url})")
            lines.append("")

        lines.append("---")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
