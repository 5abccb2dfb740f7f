"""Discovery of proto sources, generated modules and buf module metadata."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml

from .model_types import BufModuleInfo

logger = logging.getLogger(__name__)

THIRD_PARTY_DIRS: frozenset[str] = frozenset(
    {"google", "buf", "connect", "protoc-gen-openapiv2", "validate", "relay"}
)

_PB_SUFFIX = "_pb.ts"
_SERVICE_MARKER = "GenService<{"
_BUF_YAML = "buf.yaml"
_BUF_REGISTRY_PREFIX = "buf.build/"


def find_pb_files(directory: Path) -> list[Path]:
    """Return every generated ``*_pb.ts`` module below ``directory``, sorted."""
    if not directory.is_dir():
        return []
    return sorted(path for path in directory.rglob(f"*{_PB_SUFFIX}") if path.is_file())


def find_type_files(generated_dir: Path) -> list[str]:
    """Return generated type modules as slash-delimited paths without ``.ts``.

    Modules under third-party directories (``google``, ``buf`` ...) are skipped.
    """
    type_files: list[str] = []
    for path in find_pb_files(generated_dir):
        relative = path.relative_to(generated_dir)
        if is_third_party(relative):
            continue
        type_files.append(relative.with_suffix("").as_posix())
    return sorted(type_files)


def find_service_files(generated_dir: Path) -> list[Path]:
    """Return generated modules that declare at least one ``GenService``."""
    service_files: list[Path] = []
    for path in find_pb_files(generated_dir):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable generated module %s: %s", path, exc)
            continue
        if _SERVICE_MARKER in content:
            service_files.append(path)
    return service_files


def find_proto_files(directory: Path) -> list[Path]:
    """Return every ``.proto`` file below ``directory``, sorted."""
    if not directory.is_dir():
        return []
    return sorted(path for path in directory.rglob("*.proto") if path.is_file())


def is_third_party(relative_path: Path) -> bool:
    """Return whether a path relative to the generated root is vendored output."""
    return any(part in THIRD_PARTY_DIRS for part in relative_path.parts[:-1])


def find_buf_module_root(start: Path) -> Optional[BufModuleInfo]:
    """Walk up from ``start`` to the nearest directory holding ``buf.yaml``.

    Args:
        start (Path): Directory to start searching from.

    Returns:
        Optional[BufModuleInfo]: Workspace root plus module path, or ``None``.
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        buf_yaml = directory / _BUF_YAML
        if not buf_yaml.is_file():
            continue
        document = _load_buf_yaml(buf_yaml)
        module_path = _module_path(document)
        if module_path is None:
            return BufModuleInfo(root=str(directory))
        if ".." in Path(module_path).parts:
            logger.warning(
                "Ignoring module path outside workspace in %s: %s", buf_yaml, module_path
            )
            return BufModuleInfo(root=str(directory))
        return BufModuleInfo(root=str(directory), module_path=str(directory / module_path))
    return None


def extract_buf_dependencies(buf_yaml: Path) -> list[str]:
    """Return the buf registry modules listed under ``deps`` (commit pins dropped)."""
    if not buf_yaml.is_file():
        return []
    document = _load_buf_yaml(buf_yaml)
    deps = document.get("deps")
    if not isinstance(deps, list):
        return []
    modules: list[str] = []
    for dep in deps:
        if isinstance(dep, str) and dep.startswith(_BUF_REGISTRY_PREFIX):
            modules.append(dep.split(":", maxsplit=1)[0])
    return modules


def _load_buf_yaml(path: Path) -> dict[str, object]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return {}
    except yaml.YAMLError as exc:
        logger.warning("Could not parse %s: %s", path, exc)
        return {}
    if not isinstance(payload, dict):
        return {}
    return payload


def _module_path(document: dict[str, object]) -> Optional[str]:
    modules = document.get("modules")
    if isinstance(modules, list):
        for module in modules:
            if isinstance(module, dict) and isinstance(module.get("path"), str):
                return module["path"]
    build = document.get("build")
    if isinstance(build, dict):
        roots = build.get("roots")
        if isinstance(roots, list) and roots and isinstance(roots[0], str):
            return roots[0]
    root = document.get("root")
    if isinstance(root, str):
        return root
    return None
