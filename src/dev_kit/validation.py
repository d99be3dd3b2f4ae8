"""Front-matter parsing for SKILL.md documents.

SKILL.md front-matter is a deliberately small subset of YAML: a flat map of
bare or quoted scalars with true/false coercion. No nesting, no lists. This
module parses exactly that subset so behavior does not depend on a YAML
library's interpretation.
"""

from __future__ import annotations

import re

from dev_kit.types import FrontmatterValue

DELIMITER = "---"

OPENING_ERROR = "SKILL.md must start with YAML frontmatter (---)"
CLOSING_ERROR = "SKILL.md frontmatter must end with ---"

_QUOTES = re.compile(r"^['\"]|['\"]$")


class FrontmatterResult:
    """Result of parsing frontmatter from content."""

    __slots__ = ("closed", "data", "errors", "opened", "success")

    def __init__(
        self,
        data: dict[str, FrontmatterValue] | None = None,
        errors: list[str] | None = None,
        opened: bool = True,
        closed: bool = True,
    ) -> None:
        """Initialize frontmatter result.

        Args:
            data: Parsed key/value pairs.
            errors: List of parsing errors encountered.
            opened: Whether the opening delimiter was found.
            closed: Whether the closing delimiter was found.
        """
        self.data = data or {}
        self.errors = errors or []
        self.opened = opened
        self.closed = closed
        self.success = len(self.errors) == 0


def parse_frontmatter(content: str) -> FrontmatterResult:
    """Parse the front-matter block of a SKILL.md document.

    The first non-empty line must be '---' and a later line must be '---'
    again. The lines in between are parsed with `parse_frontmatter_block`.

    Args:
        content: The full markdown content.

    Returns:
        FrontmatterResult with the parsed map and any errors.

    Example:
        >>> result = parse_frontmatter("---\\nname: test\\n---\\nBody")
        >>> result.success
        True
        >>> result.data
        {'name': 'test'}
    """
    lines = content.splitlines()

    start = next((i for i, line in enumerate(lines) if line.strip()), None)
    if start is None or lines[start].strip() != DELIMITER:
        return FrontmatterResult(errors=[OPENING_ERROR], opened=False, closed=False)

    end = next(
        (i for i in range(start + 1, len(lines)) if lines[i].strip() == DELIMITER),
        None,
    )
    if end is None:
        return FrontmatterResult(errors=[CLOSING_ERROR], closed=False)

    return FrontmatterResult(data=parse_frontmatter_block(lines[start + 1 : end]))


def parse_frontmatter_block(lines: list[str]) -> dict[str, FrontmatterValue]:
    """Parse flat 'key: value' lines.

    Blank lines, '#' comments and lines without a colon are ignored. The
    literals true/false become booleans; a leading and a trailing quote are
    stripped from other values.
    """
    fields: dict[str, FrontmatterValue] = {}

    for line in lines:
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue

        key, sep, value = trimmed.partition(":")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        value = value.strip()

        if value == "true":
            fields[key] = True
        elif value == "false":
            fields[key] = False
        else:
            fields[key] = _QUOTES.sub("", value)

    return fields
