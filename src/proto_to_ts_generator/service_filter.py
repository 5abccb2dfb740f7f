"""Whitelist/blacklist filtering of proto service names."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Optional

WILDCARD = "*"


@dataclass(frozen=True)
class PatternMatcher:
    """A filter pattern, compiled as a regex or kept as a literal substring."""

    pattern: str
    kind: Literal["regex", "literal"]
    regex: Optional[re.Pattern[str]] = None

    def matches(self, service_name: str) -> bool:
        """Return whether the service name matches this pattern."""
        if self.regex is not None:
            return self.regex.search(service_name) is not None
        return self.pattern in service_name


def compile_pattern(pattern: str) -> PatternMatcher:
    """Compile a pattern, falling back to a literal when it is not a valid regex.

    Args:
        pattern (str): User-supplied pattern such as ``Admin$`` or ``[invalid``.

    Returns:
        PatternMatcher: Regex matcher, or literal substring matcher on failure.
    """
    try:
        compiled = re.compile(pattern)
    except re.error:
        return PatternMatcher(pattern=pattern, kind="literal")
    return PatternMatcher(pattern=pattern, kind="regex", regex=compiled)


def matches_any_pattern(service_name: str, patterns: Optional[Sequence[str]]) -> bool:
    """Return whether the service name matches at least one pattern."""
    if not patterns:
        return False
    return any(compile_pattern(pattern).matches(service_name) for pattern in patterns)


def should_include_service(service_name: str, include_patterns: Optional[Sequence[str]]) -> bool:
    """Evaluate the whitelist.

    ``None`` includes everything, an empty list includes nothing and a ``*``
    anywhere in the list includes everything.
    """
    if include_patterns is None:
        return True
    if not include_patterns:
        return False
    if WILDCARD in include_patterns:
        return True
    return matches_any_pattern(service_name, include_patterns)


def should_exclude_service(service_name: str, exclude_patterns: Optional[Sequence[str]]) -> bool:
    """Evaluate the blacklist; absent or empty patterns never exclude."""
    return matches_any_pattern(service_name, exclude_patterns)


def should_generate_service(
    service_name: str,
    include_patterns: Optional[Sequence[str]] = None,
    exclude_patterns: Optional[Sequence[str]] = None,
) -> bool:
    """Apply the whitelist first, then the blacklist to the included services."""
    if not should_include_service(service_name, include_patterns):
        return False
    return not should_exclude_service(service_name, exclude_patterns)


def parse_pattern_list(value: Optional[str]) -> Optional[list[str]]:
    """Split a comma-separated flag value into patterns.

    ``None`` stays ``None`` (no filter); an empty string gives an empty list.
    """
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]
