"""Naming helpers for generated TypeScript identifiers."""

from __future__ import annotations

import re

_GENERATED_SUFFIX_RE = re.compile(r"_pb$")
_VERSION_DIR_RE = re.compile(r"^v\d+$")
_SNAKE_SEGMENT_RE = re.compile(r"_([a-z])")
_SERVICE_SUFFIX = "Service"


def to_canonical_case(token: str) -> str:
    """Convert a snake_case token to PascalCase.

    Segments are compared case-insensitively, so ``order_reward``,
    ``Order_Reward`` and ``ORDER_REWARD`` all give ``OrderReward``. A segment
    that is already PascalCase is kept, which makes the conversion idempotent.

    Args:
        token (str): Token to convert.

    Returns:
        str: PascalCase form of the token, or an empty string.
    """
    return "".join(_canonical_segment(segment) for segment in token.split("_"))


def _canonical_segment(segment: str) -> str:
    if not segment:
        return ""
    if segment[0].isupper() and any(char.islower() for char in segment):
        return segment
    return segment[0].upper() + segment[1:].lower()


def type_name_from_path(path: str) -> str:
    """Derive the PascalCase type name from the file stem of a schema path."""
    file_name = path.split("/")[-1]
    return to_canonical_case(_GENERATED_SUFFIX_RE.sub("", file_name))


def module_key_from_path(path: str) -> str:
    """Return the module directory of ``{root}/{module}/{version}/{stem}``.

    The leftmost version directory (``v1``, ``v2`` ...) with a directory in
    front of it wins. Without one, the first directory is used, and a bare
    file name has no module key.
    """
    parts = path.split("/")
    directories = parts[:-1]
    for index, segment in enumerate(directories):
        if index > 0 and _VERSION_DIR_RE.match(segment):
            return directories[index - 1]
    return parts[0] if len(parts) > 1 else ""


def import_alias(path: str) -> str:
    """Build the private import binding ``_{Module}{TypeName}`` for a schema path."""
    type_name = type_name_from_path(path)
    module_key = module_key_from_path(path)
    if not module_key:
        return f"_{type_name}"
    return f"_{to_canonical_case(module_key)}{type_name}"


def lower_first(name: str) -> str:
    """Lower-case the first character, e.g. ``Product`` -> ``product``."""
    return name[:1].lower() + name[1:]


def service_client_name(service_name: str) -> str:
    """Strip one trailing ``Service`` from a service name.

    A name that is exactly ``Service`` is returned unchanged.
    """
    if service_name.endswith(_SERVICE_SUFFIX) and service_name != _SERVICE_SUFFIX:
        return service_name[: -len(_SERVICE_SUFFIX)]
    return service_name


def snake_to_camel(name: str) -> str:
    """Convert a proto field name to the camelCase name protoc-gen-es emits."""
    return _SNAKE_SEGMENT_RE.sub(lambda match: match.group(1).upper(), name)
