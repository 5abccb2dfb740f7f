"""High-level generator orchestration."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from .buf_config import generate_buf_gen_yaml
from .buf_runner import DEFAULT_BUF_EXECUTABLE, BufGenerateError, run_buf_generate
from .extractor import extract_service_infos
from .json_name import apply_json_name_mappings, extract_json_name_mappings
from .model_types import GenerationResult, ServiceEntry, ServiceInfo
from .naming import lower_first, service_client_name
from .scanner import (
    extract_buf_dependencies,
    find_buf_module_root,
    find_pb_files,
    find_proto_files,
    find_service_files,
    find_type_files,
    is_third_party,
)
from .service_filter import should_generate_service
from .templates import (
    generate_connect_client_module,
    generate_service_wrapper,
    generate_services_index_file,
)
from .type_index import generate_types_index_file
from .writer import (
    WriteError,
    reset_directory,
    write_connect_client,
    write_service_client,
    write_services_index,
    write_text,
    write_types_index,
)

logger = logging.getLogger(__name__)

_BUF_YAML = "buf.yaml"
TEMP_BUF_GEN_TEMPLATE = "buf.gen.temp.yaml"


def run_generation(
    *,
    generated_dir: Path,
    services_dir: Path,
    module_name: Optional[str] = None,
    include_patterns: Optional[Sequence[str]] = None,
    exclude_patterns: Optional[Sequence[str]] = None,
    proto_dir: Optional[Path] = None,
) -> GenerationResult:
    """Generate service clients and the types index from protoc-gen-es output.

    Args:
        generated_dir (Path): Root of the protoc-gen-es output tree.
        services_dir (Path): Directory for client modules; ``types`` is created beside it.
        module_name (Optional[str]): Module the services directory is nested under.
        include_patterns (Optional[Sequence[str]]): Service whitelist patterns.
        exclude_patterns (Optional[Sequence[str]]): Service blacklist patterns.
        proto_dir (Optional[Path]): Proto sources to scan for ``json_name`` options.

    Returns:
        GenerationResult: Generated services, type files and warnings.
    """
    warnings: list[str] = []
    types_dir = services_dir.parent / "types"

    updated_files: list[str] = []
    if proto_dir is not None:
        updated_files = _apply_json_names(
            proto_dir=proto_dir,
            generated_dir=generated_dir,
            warnings=warnings,
        )

    service_infos = _collect_service_infos(generated_dir=generated_dir, warnings=warnings)
    if not service_infos:
        warnings.append(f"No service files found in generated directory {generated_dir}")

    reset_directory(services_dir)
    reset_directory(types_dir)

    services = _write_service_clients(
        service_infos=service_infos,
        services_dir=services_dir,
        module_name=module_name,
        include_patterns=include_patterns,
        exclude_patterns=exclude_patterns,
        warnings=warnings,
    )
    if service_infos and not services:
        warnings.append("No services generated (no service matched the include/exclude patterns)")

    write_services_index(
        services_dir=services_dir,
        source=generate_services_index_file(services, module_name),
    )
    type_files = find_type_files(generated_dir)
    write_types_index(types_dir=types_dir, source=generate_types_index_file(type_files))
    api_dir = services_dir.parent.parent if module_name else services_dir.parent
    write_connect_client(api_dir=api_dir, source=generate_connect_client_module())
    logger.info(
        "Generated %d service client(s) and a types index over %d module(s)",
        len(services),
        len(type_files),
    )

    return GenerationResult(
        services_dir=str(services_dir),
        types_dir=str(types_dir),
        services=tuple(services),
        type_files=tuple(type_files),
        json_name_updated_files=tuple(updated_files),
        warnings=tuple(warnings),
    )


def write_buf_gen_config(
    *,
    proto_dir: Path,
    output_dir: str,
    config_path: Path,
    additional_modules: Sequence[str] = (),
    go_package_prefix: Optional[str] = None,
) -> str:
    """Synthesize ``buf.gen.yaml`` for a proto directory and write it.

    The nearest ``buf.yaml`` above ``proto_dir`` decides the input directory
    and contributes its registry dependencies.

    Args:
        proto_dir (Path): Directory containing the proto sources.
        output_dir (str): Directory protoc-gen-es should write to.
        config_path (Path): Where to write the config.
        additional_modules (Sequence[str]): Extra buf modules to add as inputs.
        go_package_prefix (Optional[str]): Managed-mode override value.

    Returns:
        str: The written config text.
    """
    input_dir = proto_dir
    buf_deps: list[str] = []
    module_info = find_buf_module_root(proto_dir)
    if module_info is not None:
        input_dir = Path(module_info.module_path or module_info.root)
        buf_deps = extract_buf_dependencies(Path(module_info.root) / _BUF_YAML)
        logger.info("Using buf module %s with %d dependencies", input_dir, len(buf_deps))

    for module in additional_modules:
        if module not in buf_deps:
            buf_deps.append(module)

    content = generate_buf_gen_yaml(
        output_dir=output_dir,
        input_dir=str(input_dir),
        buf_deps=buf_deps,
        go_package_prefix=go_package_prefix,
    )
    write_text(config_path, content)
    return content


def generate_from_protos(
    *,
    proto_dir: Path,
    generated_dir: Path,
    services_dir: Path,
    module_name: Optional[str] = None,
    include_patterns: Optional[Sequence[str]] = None,
    exclude_patterns: Optional[Sequence[str]] = None,
    additional_modules: Sequence[str] = (),
    go_package_prefix: Optional[str] = None,
    working_dir: Optional[Path] = None,
    buf_executable: str = DEFAULT_BUF_EXECUTABLE,
) -> GenerationResult:
    """Run the full pipeline: ``buf generate`` followed by :func:`run_generation`.

    A temporary template is written to ``working_dir`` and always removed
    afterwards. The generated directory is emptied before buf writes to it.

    Args:
        proto_dir (Path): Directory containing the proto sources.
        generated_dir (Path): Directory protoc-gen-es writes to.
        services_dir (Path): Directory for client modules.
        module_name (Optional[str]): Module the services directory is nested under.
        include_patterns (Optional[Sequence[str]]): Service whitelist patterns.
        exclude_patterns (Optional[Sequence[str]]): Service blacklist patterns.
        additional_modules (Sequence[str]): Extra buf modules to add as inputs.
        go_package_prefix (Optional[str]): Managed-mode override value.
        working_dir (Optional[Path]): Directory buf runs in; defaults to the current one.
        buf_executable (str): Name or path of the buf binary.

    Returns:
        GenerationResult: Generated services, type files and warnings.
    """
    working_dir = working_dir or Path.cwd()
    template_path = working_dir / TEMP_BUF_GEN_TEMPLATE
    write_buf_gen_config(
        proto_dir=proto_dir,
        output_dir=str(generated_dir),
        config_path=template_path,
        additional_modules=additional_modules,
        go_package_prefix=go_package_prefix,
    )
    try:
        reset_directory(generated_dir)
        run_buf_generate(
            template_path=template_path,
            working_dir=working_dir,
            buf_executable=buf_executable,
        )
    finally:
        template_path.unlink(missing_ok=True)

    return run_generation(
        generated_dir=generated_dir,
        services_dir=services_dir,
        module_name=module_name,
        include_patterns=include_patterns,
        exclude_patterns=exclude_patterns,
        proto_dir=proto_dir,
    )


def _apply_json_names(*, proto_dir: Path, generated_dir: Path, warnings: list[str]) -> list[str]:
    mappings: dict[str, str] = {}
    for proto_file in find_proto_files(proto_dir):
        try:
            mappings.update(extract_json_name_mappings(proto_file.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as exc:
            warnings.append(f"Could not read proto file {proto_file}: {exc}")
    if not mappings:
        return []

    updated: list[str] = []
    for pb_file in find_pb_files(generated_dir):
        try:
            content = pb_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            warnings.append(f"Could not read generated module {pb_file}: {exc}")
            continue
        rewritten, modified = apply_json_name_mappings(content, mappings)
        if not modified:
            continue
        write_text(pb_file, rewritten)
        updated.append(pb_file.relative_to(generated_dir).as_posix())
    return updated


def _collect_service_infos(*, generated_dir: Path, warnings: list[str]) -> list[ServiceInfo]:
    service_infos: list[ServiceInfo] = []
    for service_file in find_service_files(generated_dir):
        relative = service_file.relative_to(generated_dir)
        if is_third_party(relative):
            continue
        try:
            content = service_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            warnings.append(f"Could not parse {service_file}: {exc}")
            continue
        service_infos.extend(
            extract_service_infos(content, relative.with_suffix("").as_posix())
        )
    return service_infos


def _write_service_clients(
    *,
    service_infos: list[ServiceInfo],
    services_dir: Path,
    module_name: Optional[str],
    include_patterns: Optional[Sequence[str]],
    exclude_patterns: Optional[Sequence[str]],
    warnings: list[str],
) -> list[ServiceEntry]:
    services: list[ServiceEntry] = []
    for service_info in service_infos:
        if not should_generate_service(
            service_info.service_name, include_patterns, exclude_patterns
        ):
            logger.info("Skipped service %s (filtered)", service_info.service_name)
            continue
        name = service_client_name(service_info.service_name)
        entry = ServiceEntry(
            name=name,
            camel_name=lower_first(name),
            service_name=service_info.service_name,
        )
        if any(existing.camel_name == entry.camel_name for existing in services):
            warnings.append(
                f"Skipped {service_info.service_name}: "
                f"client name {entry.camel_name} already generated"
            )
            continue
        write_service_client(
            services_dir=services_dir,
            service=entry,
            source=generate_service_wrapper(name, service_info, module_name),
        )
        services.append(entry)
    return services


__all__ = [
    "BufGenerateError",
    "GenerationResult",
    "WriteError",
    "generate_from_protos",
    "run_generation",
    "write_buf_gen_config",
]
