"""Nested-namespace type index for generated protobuf modules."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from .model_types import NamespaceGroup, TypeIndexEntry
from .naming import import_alias, module_key_from_path, to_canonical_case, type_name_from_path

_ROOT_NAMESPACE = "Root"
_GENERATED_IMPORT_PREFIX = "../generated"

_HEADER_LINES: tuple[str, ...] = (
    "// Types Index - Auto-generated type aggregation",
    "// DO NOT EDIT: This file is automatically generated",
)

_USAGE_LINES: tuple[str, ...] = (
    "//",
    "// This file aggregates all protobuf-generated types using nested namespaces",
    "// grouped by module.",
    "// Each module (e.g., models, product, common) becomes a namespace containing its types.",
    "//",
    "// Usage:",
    "//   import { Models, Product, Common } from '@/api/rpc-service/pim/types'",
    "//   type C1 = Models.Category.Category",
    "//   type C2 = Product.Category.Category",
    "//   type E = Common.Error.Error",
)


@dataclass
class _IndexAccumulator:
    occurrences: Counter[tuple[str, str]] = field(default_factory=Counter)
    used_aliases: set[str] = field(default_factory=set)
    used_exports: set[tuple[str, str]] = field(default_factory=set)
    used_namespaces: set[str] = field(default_factory=set)

    def claim_alias(self, alias: str) -> str:
        candidate = alias
        counter = 2
        while candidate in self.used_aliases:
            candidate = f"{alias}{counter}"
            counter += 1
        self.used_aliases.add(candidate)
        return candidate

    def claim_export(self, module_key: str, export_name: str) -> str:
        candidate = export_name
        counter = 2
        while (module_key, candidate) in self.used_exports:
            candidate = f"{export_name}{counter}"
            counter += 1
        self.used_exports.add((module_key, candidate))
        return candidate

    def claim_namespace(self, namespace: str) -> str:
        candidate = namespace
        counter = 2
        while candidate in self.used_namespaces:
            candidate = f"{namespace}{counter}"
            counter += 1
        self.used_namespaces.add(candidate)
        return candidate


def group_type_files(type_files: Sequence[str]) -> list[NamespaceGroup]:
    """Group schema paths into namespace blocks keyed by module.

    Modules keep their first-seen order and so do the paths inside a module.
    The Nth occurrence (N >= 2) of a type name within one module is exported
    as ``TypeName{N}`` and imported as ``{alias}{N}``.
    Module keys that canonicalize to the same namespace (``root`` and the
    empty key both give ``Root``) are told apart with a numeric suffix.

    Args:
        type_files (Sequence[str]): Generated module paths without extension.

    Returns:
        list[NamespaceGroup]: One group per distinct module key.
    """
    accumulator = _IndexAccumulator()
    entries_by_module: dict[str, list[TypeIndexEntry]] = {}

    for file_path in _unique(type_files):
        module_key = module_key_from_path(file_path)
        type_name = type_name_from_path(file_path)
        accumulator.occurrences[(module_key, type_name)] += 1
        occurrence = accumulator.occurrences[(module_key, type_name)]
        suffix = str(occurrence) if occurrence > 1 else ""

        entry = TypeIndexEntry(
            file_path=file_path,
            module_key=module_key,
            type_name=type_name,
            export_name=accumulator.claim_export(module_key, f"{type_name}{suffix}"),
            alias=accumulator.claim_alias(f"{import_alias(file_path)}{suffix}"),
        )
        entries_by_module.setdefault(module_key, []).append(entry)

    return [
        NamespaceGroup(
            module_key=module_key,
            namespace=accumulator.claim_namespace(_namespace_name(module_key)),
            entries=tuple(entries),
        )
        for module_key, entries in entries_by_module.items()
    ]


def generate_types_index_file(type_files: Sequence[str]) -> str:
    """Render ``types/index.ts`` aggregating generated types by module.

    Args:
        type_files (Sequence[str]): Generated module paths without extension.

    Returns:
        str: Generated TypeScript source.
    """
    if not type_files:
        lines = [
            *_HEADER_LINES,
            "",
            "// No type files found; no types found to aggregate",
            "export {}",
        ]
        return "\n".join(lines) + "\n"

    groups = group_type_files(type_files)
    entries_by_path = {entry.file_path: entry for group in groups for entry in group.entries}

    import_lines = [
        f"import * as {entries_by_path[path].alias} from '{_GENERATED_IMPORT_PREFIX}/{path}'"
        for path in _unique(type_files)
    ]
    namespace_blocks = [_render_namespace(group) for group in groups]

    lines = [
        *_HEADER_LINES,
        *_USAGE_LINES,
        "",
        *import_lines,
        "",
        "\n\n".join(namespace_blocks),
    ]
    return "\n".join(lines) + "\n"


def _render_namespace(group: NamespaceGroup) -> str:
    lines = [f"export namespace {group.namespace} {{"]
    for entry in group.entries:
        lines.append(f"  export import {entry.export_name} = {entry.alias}")
    lines.append("}")
    return "\n".join(lines)


def _namespace_name(module_key: str) -> str:
    return to_canonical_case(module_key) if module_key else _ROOT_NAMESPACE


def _unique(paths: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(paths))
