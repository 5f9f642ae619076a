"""
Records Module - The loosely typed field bag produced by parsers.
=================================================================

A RawRecord is an ordered map from field name to one of three value
kinds:
- TEXT: a single string (numbers and booleans are rendered as text)
- TEXT_LIST: a list of strings
- NESTED: a mapping, or a list holding mappings/lists

Parsers build records; the normalizer reads them through the accessors
below instead of poking at arbitrary attributes. Alias lookups try an
exact key first and fall back to a case-insensitive match.

iter_strings() walks any nested value depth-first with a depth bound and
a cycle guard, since syllabus input is untrusted.
"""

from enum import Enum
from typing import Any, Iterator, Optional, Union

from course_importer.shared.utils import format_scalar

RawValue = Union[str, list[str], dict[str, Any], list[Any]]

DEFAULT_MAX_DEPTH = 32


class ValueKind(str, Enum):
    """Kind tag of a RawRecord value."""

    TEXT = "text"
    TEXT_LIST = "text_list"
    NESTED = "nested"


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def coerce_value(value: Any) -> Optional[RawValue]:
    """
    Coerce an arbitrary parsed value into a RawValue.

    Returns None for values that carry nothing (None, NaN).

    Example:
        >>> coerce_value(3)
        '3'
        >>> coerce_value(["a", 2])
        ['a', '2']
    """
    if isinstance(value, (list, tuple)):
        if all(_is_scalar(item) for item in value):
            return [text for text in (format_scalar(item) for item in value) if text is not None]
        return list(value)
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items()}
    if _is_scalar(value):
        return format_scalar(value)
    return format_scalar(str(value))


def kind_of(value: RawValue) -> ValueKind:
    """Tag a coerced value."""
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return ValueKind.TEXT_LIST
    return ValueKind.NESTED


def iter_strings(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[str]:
    """
    Yield every string reachable from a value, depth-first, in order.

    Mapping keys are not yielded, only values. Containers deeper than
    max_depth are skipped, and a container already on the current path
    is not entered again.

    Example:
        >>> list(iter_strings({"a": ["x", {"b": "y"}], "c": 1}))
        ['x', 'y', '1']
    """
    on_path: set[int] = set()

    def walk(node: Any, depth: int) -> Iterator[str]:
        if isinstance(node, str):
            yield node
            return
        if isinstance(node, (dict, list, tuple)):
            if depth > max_depth or id(node) in on_path:
                return
            on_path.add(id(node))
            try:
                children = node.values() if isinstance(node, dict) else node
                for child in children:
                    yield from walk(child, depth + 1)
            finally:
                on_path.discard(id(node))
            return
        text = format_scalar(node)
        if text:
            yield text

    yield from walk(value, 0)


class RawRecord:
    """
    Ordered field bag from one parser.

    Example:
        >>> record = RawRecord({"Topic": "Loops", "Week": 2})
        >>> record.get_text("topic")
        'Loops'
        >>> record.get_text("week")
        '2'
    """

    def __init__(self, fields: Optional[dict[str, Any]] = None):
        self._fields: dict[str, RawValue] = {}
        for key, value in (fields or {}).items():
            self.set(key, value)

    # Mapping-like access ---------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Set a field, coercing the value; None/NaN values are ignored."""
        coerced = coerce_value(value)
        if coerced is None:
            return
        self._fields[str(key)] = coerced

    def __getitem__(self, key: str) -> RawValue:
        return self._fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RawRecord):
            return self._fields == other._fields
        return NotImplemented

    def __repr__(self) -> str:
        return f"RawRecord({self._fields!r})"

    def keys(self) -> list[str]:
        return list(self._fields)

    def items(self) -> list[tuple[str, RawValue]]:
        return list(self._fields.items())

    def to_dict(self) -> dict[str, RawValue]:
        """Shallow copy of the fields."""
        return dict(self._fields)

    def kind(self, key: str) -> Optional[ValueKind]:
        """Kind tag of a field, or None if absent."""
        if key not in self._fields:
            return None
        return kind_of(self._fields[key])

    # Alias lookups ----------------------------------------------------------

    def find_key(self, *aliases: str) -> Optional[str]:
        """
        Find the first field matching any alias.

        Each alias is tried exactly first, then case-insensitively
        (ignoring surrounding whitespace), before moving to the next.
        """
        lowered = {key.strip().lower(): key for key in reversed(list(self._fields))}
        for alias in aliases:
            if alias in self._fields:
                return alias
            match = lowered.get(alias.strip().lower())
            if match is not None:
                return match
        return None

    def get(self, *aliases: str) -> Optional[RawValue]:
        key = self.find_key(*aliases)
        return self._fields[key] if key is not None else None

    def get_text(self, *aliases: str) -> Optional[str]:
        """
        First non-empty text value among the aliases.

        Text lists are joined with ", "; nested values are skipped.
        """
        for alias in aliases:
            key = self.find_key(alias)
            if key is None:
                continue
            value = self._fields[key]
            kind = kind_of(value)
            if kind == ValueKind.TEXT and value.strip():
                return value.strip()
            if kind == ValueKind.TEXT_LIST and value:
                return ", ".join(value)
        return None

    def get_list(self, *aliases: str) -> list[str]:
        """
        Values of the first present alias as a list of strings.

        A text value becomes a one-item list; nested values are flattened
        with iter_strings.
        """
        for alias in aliases:
            key = self.find_key(alias)
            if key is None:
                continue
            value = self._fields[key]
            kind = kind_of(value)
            if kind == ValueKind.TEXT:
                return [value] if value.strip() else []
            if kind == ValueKind.TEXT_LIST:
                return [item for item in value if item.strip()]
            return list(iter_strings(value))
        return []

    def get_nested(self, key: str) -> Optional[Union[dict[str, Any], list[Any]]]:
        """The nested value under a key, or None if absent or not nested."""
        found = self.find_key(key)
        if found is None:
            return None
        value = self._fields[found]
        return value if kind_of(value) == ValueKind.NESTED else None

    def strings(self, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[str]:
        """Every string in the record, in field order."""
        return iter_strings(list(self._fields.values()), max_depth)
