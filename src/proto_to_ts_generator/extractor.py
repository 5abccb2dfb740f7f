"""Service metadata extraction from protoc-gen-es generated modules."""

from __future__ import annotations

import posixpath
import re

from .model_types import MethodInfo, ServiceInfo

_IMPORT_RE = re.compile(r"import\s+(?:type\s+)?\{([^}]+)\}\s+from\s+[\"']([^\"']+)[\"']")
_SERVICE_RE = re.compile(r"export const (\w+):\s*GenService<\{([\s\S]*?)\}>\s*=")
_METHOD_RE = re.compile(
    r"(\w+):\s*\{[^}]*?methodKind:\s*[\"']unary[\"'];\s*"
    r"input:\s*typeof\s+(\w+)Schema;\s*output:\s*typeof\s+(\w+)Schema;"
)
_SCHEMA_SUFFIX = "Schema"


def extract_service_infos(content: str, import_path: str) -> list[ServiceInfo]:
    """Extract every service declared in a generated ``_pb`` module.

    One module may declare several services (e.g. ``CampaignService`` and
    ``CampaignAdminService``); they share the module's import map. Only unary
    methods are recognised.

    Args:
        content (str): Source text of the generated module.
        import_path (str): Module path relative to the generated root, without extension.

    Returns:
        list[ServiceInfo]: Services in declaration order.
    """
    imports = extract_named_imports(content, import_path)
    services: list[ServiceInfo] = []
    for service_match in _SERVICE_RE.finditer(content):
        methods = tuple(
            MethodInfo(
                name=method_match.group(1),
                input_type=method_match.group(2),
                input_schema=f"{method_match.group(2)}{_SCHEMA_SUFFIX}",
                output_type=method_match.group(3),
                output_schema=f"{method_match.group(3)}{_SCHEMA_SUFFIX}",
            )
            for method_match in _METHOD_RE.finditer(service_match.group(2))
        )
        services.append(
            ServiceInfo(
                service_name=service_match.group(1),
                import_path=import_path,
                methods=methods,
                imports=dict(imports),
            )
        )
    return services


def extract_named_imports(content: str, import_path: str) -> dict[str, str]:
    """Map each named import of a module to its origin.

    Relative specifiers are resolved against ``import_path`` so the result
    lives in the same path space; package specifiers are kept verbatim.
    """
    imports: dict[str, str] = {}
    for match in _IMPORT_RE.finditer(content):
        origin = _resolve_specifier(match.group(2), import_path)
        for symbol in match.group(1).split(","):
            name = symbol.strip()
            if name.startswith("type "):
                name = name[len("type ") :].strip()
            if name:
                imports[name] = origin
    return imports


def _resolve_specifier(specifier: str, import_path: str) -> str:
    if not specifier.startswith("."):
        return specifier
    base_dir = posixpath.dirname(import_path)
    return posixpath.normpath(posixpath.join(base_dir, specifier))
