"""Internal datatypes for service metadata, type indexing and generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Optional


@dataclass(frozen=True)
class MethodInfo:
    """One unary RPC method of a generated service descriptor."""

    name: str = ""
    input_type: str = ""
    input_schema: str = ""
    output_type: str = ""
    output_schema: str = ""


@dataclass(frozen=True)
class ServiceInfo:
    """Service metadata extracted from a generated ``_pb`` module."""

    service_name: str
    import_path: str
    methods: tuple[MethodInfo, ...] = ()
    imports: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceEntry:
    """A generated service client, as listed in the services index."""

    name: str
    camel_name: str
    service_name: str = ""


@dataclass(frozen=True)
class TypeIndexEntry:
    """One re-exported type inside a namespace block of the types index."""

    file_path: str
    module_key: str
    type_name: str
    export_name: str
    alias: str


@dataclass(frozen=True)
class NamespaceGroup:
    """All type entries sharing one module key."""

    module_key: str
    namespace: str
    entries: tuple[TypeIndexEntry, ...]


@dataclass(frozen=True)
class BufModuleInfo:
    """Location of a buf module or workspace on disk."""

    root: str
    module_path: Optional[str] = None


@dataclass(frozen=True)
class GenerationResult:
    """Generation output metadata."""

    services_dir: str
    types_dir: str
    services: tuple[ServiceEntry, ...]
    type_files: tuple[str, ...]
    json_name_updated_files: tuple[str, ...]
    warnings: tuple[str, ...]
