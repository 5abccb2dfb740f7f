"""Rewrite generated field names to their declared proto ``json_name``."""

from __future__ import annotations

import re

from .naming import snake_to_camel

_JSON_NAME_RE = re.compile(r"(\w+)\s+(\w+)\s*=\s*\d+\s*\[.*?json_name\s*=\s*\"(\w+)\".*?\];?")


def extract_json_name_mappings(proto_source: str) -> dict[str, str]:
    """Collect ``json_name`` field options from proto source.

    Args:
        proto_source (str): Text of one ``.proto`` file.

    Returns:
        dict[str, str]: Generated camelCase field name -> declared JSON name.
    """
    mappings: dict[str, str] = {}
    for match in _JSON_NAME_RE.finditer(proto_source):
        mappings[snake_to_camel(match.group(2))] = match.group(3)
    return mappings


def apply_json_name_mappings(content: str, mappings: dict[str, str]) -> tuple[str, bool]:
    """Replace field declarations (``name =`` or ``name:``) with their JSON names.

    Args:
        content (str): Generated TypeScript source.
        mappings (dict[str, str]): Output of :func:`extract_json_name_mappings`.

    Returns:
        tuple[str, bool]: Rewritten source and whether anything changed.
    """
    modified = False
    for camel_name, json_name in mappings.items():
        if camel_name == json_name:
            continue
        field_re = re.compile(rf"(\s+){re.escape(camel_name)}(\s*(?:=|:))")
        content, count = field_re.subn(rf"\g<1>{json_name}\g<2>", content)
        if count:
            modified = True
    return content, modified
