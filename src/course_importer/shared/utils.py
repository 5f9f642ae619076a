"""
Utilities Module - Common helper functions.
==========================================

Provides utility functions for:
- Hashing (SHA256 for deterministic IDs and idempotency keys)
- ID generation (stable, reproducible IDs)
- List handling (order-preserving dedup, delimiter splitting)
- Text decoding and file I/O (JSON)
"""

import hashlib
import json
import re
from pathlib import Path
from typing import Any, Iterable, Optional

from course_importer.shared.logging import get_logger

logger = get_logger(__name__)

# Delimiters for list-like strings ("a, b; c | d")
LIST_DELIMITERS = re.compile(r"[,;|]")


# ─────────────────────────────────────────────────────────────────────────────
# Hashing Functions
# ─────────────────────────────────────────────────────────────────────────────


def compute_hash(text: str, algorithm: str = "sha256") -> str:
    """
    Compute hash of text content.

    Args:
        text: Text to hash
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Hexadecimal hash string

    Example:
        >>> compute_hash("hello world")
        'b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9'
    """
    hasher = hashlib.new(algorithm)
    hasher.update(text.encode("utf-8"))
    return hasher.hexdigest()


def compute_payload_hash(payload: Any) -> str:
    """Hash a JSON-serializable payload over its canonical (sorted) form."""
    canonical = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)
    return compute_hash(canonical)


# ─────────────────────────────────────────────────────────────────────────────
# ID Generation
# ─────────────────────────────────────────────────────────────────────────────


def slugify(text: str) -> str:
    """
    Normalize free text for use in IDs.

    Example:
        >>> slugify("Full Stack  Web Dev!")
        'full-stack-web-dev'
    """
    normalized = re.sub(r"[^a-z0-9]+", "-", text.strip().lower())
    return normalized.strip("-")


def generate_course_id(title: str, position: int = 0) -> str:
    """
    Generate a stable course ID.

    Format: course-{slug}-{hash_prefix}

    Args:
        title: Course title
        position: Position of the course in its submission

    Returns:
        Stable course ID

    Example:
        >>> generate_course_id("Intro to Python")[:23]
        'course-intro-to-python-'
    """
    slug = slugify(title)[:40] or "untitled"
    digest = compute_hash(f"{title}|{position}")[:8]
    return f"course-{slug}-{digest}"


def generate_module_id(index: int) -> str:
    """Generate a module ID from its 0-based position (module-1, module-2, ...)."""
    return f"module-{index + 1}"


def generate_video_id(module_index: int, video_index: int) -> str:
    """Generate a video link ID from module and video positions."""
    return f"video-{module_index}-{video_index}"


# ─────────────────────────────────────────────────────────────────────────────
# List Utilities
# ─────────────────────────────────────────────────────────────────────────────


def dedupe(items: Iterable[str]) -> list[str]:
    """
    Remove duplicates and blanks, keeping first occurrence order.

    Example:
        >>> dedupe(["a", "b", "a", "", "c"])
        ['a', 'b', 'c']
    """
    seen: set[str] = set()
    result = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def split_list(value: Any, pattern: re.Pattern[str] = LIST_DELIMITERS) -> list[str]:
    """
    Split a list-like value into trimmed, non-empty strings.

    Strings are split on the delimiter pattern; lists are flattened one
    level and each element split in turn.

    Example:
        >>> split_list("loops, functions; classes")
        ['loops', 'functions', 'classes']
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        parts: list[str] = []
        for item in value:
            parts.extend(split_list(item, pattern))
        return parts
    return [part.strip() for part in pattern.split(str(value)) if part.strip()]


# ─────────────────────────────────────────────────────────────────────────────
# Text & File I/O
# ─────────────────────────────────────────────────────────────────────────────


def decode_text(content: bytes | str, encoding: str = "utf-8-sig") -> str:
    """
    Decode file bytes to text, tolerating a UTF-8 byte order mark.

    Raises:
        UnicodeDecodeError: If the bytes are not valid in the encoding
    """
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    return content.decode(encoding)


def format_scalar(value: Any) -> Optional[str]:
    """
    Render a scalar cell or field value as text.

    Integral floats lose their trailing ".0"; None and NaN become None.

    Example:
        >>> format_scalar(3.0)
        '3'
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value != value:  # NaN
            return None
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    Save data to a JSON file, creating parent directories.

    Args:
        file_path: Path to JSON file
        data: Data to save (must be JSON serializable)
        indent: Indentation level (default: 2)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False, default=str)

    logger.debug(f"Saved JSON to {file_path}")
