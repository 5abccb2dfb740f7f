"""Filesystem writers for generated client packages."""

from __future__ import annotations

import shutil
from pathlib import Path

from .model_types import ServiceEntry

SERVICES_INDEX = "index.ts"
TYPES_INDEX = "index.ts"
CONNECT_CLIENT = "connect-client.ts"


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def reset_directory(directory: Path) -> None:
    """Remove a previously generated directory and recreate it empty.

    Args:
        directory (Path): Directory holding stale generated output.
    """
    try:
        if directory.exists():
            shutil.rmtree(directory)
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Failed to reset output directory {directory}: {exc}") from exc


def write_service_client(*, services_dir: Path, service: ServiceEntry, source: str) -> Path:
    """Write ``<camelName>.client.ts`` for one service.

    Args:
        services_dir (Path): Generated services directory.
        service (ServiceEntry): Service the module belongs to.
        source (str): Rendered client module.

    Returns:
        Path: Path of the written module.
    """
    path = services_dir / f"{service.camel_name}.client.ts"
    _write_file(path, source)
    return path


def write_services_index(*, services_dir: Path, source: str) -> Path:
    """Write the services package ``index.ts``."""
    path = services_dir / SERVICES_INDEX
    _write_file(path, source)
    return path


def write_types_index(*, types_dir: Path, source: str) -> Path:
    """Write ``types/index.ts``, creating the directory when needed."""
    _ensure_directory(types_dir)
    path = types_dir / TYPES_INDEX
    _write_file(path, source)
    return path


def write_connect_client(*, api_dir: Path, source: str) -> Path:
    """Write the shared ``connect-client.ts`` unless one already exists.

    Args:
        api_dir (Path): Directory the service packages import the transport from.
        source (str): Rendered connect client module.

    Returns:
        Path: Path of the existing or newly written module.
    """
    path = api_dir / CONNECT_CLIENT
    if path.exists():
        return path
    _ensure_directory(api_dir)
    _write_file(path, source)
    return path


def write_text(path: Path, content: str) -> None:
    """Write a single text file, creating parent directories."""
    _ensure_directory(path.parent)
    _write_file(path, content)


def _ensure_directory(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Failed to create directory {directory}: {exc}") from exc


def _write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to write file {path}: {exc}") from exc
