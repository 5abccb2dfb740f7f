"""Command line interface for protoc-gen-es client generation."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from .buf_runner import DEFAULT_BUF_EXECUTABLE
from .generator import (
    BufGenerateError,
    GenerationResult,
    WriteError,
    generate_from_protos,
    run_generation,
    write_buf_gen_config,
)
from .loader import ConfigLoadError, ProjectConfig, load_project_config
from .service_filter import parse_pattern_list
from .verify import format_report, verify_buf_gen_yaml

DEFAULT_BUF_GEN_PATH = "buf.gen.yaml"


class CLIError(RuntimeError):
    """Raised when CLI execution fails."""


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="proto-to-ts-generator",
        description=(
            "Generate Connect-RPC service clients and a types index from protoc-gen-es output"
        ),
    )
    parser.add_argument("--config", help="Path to a YAML project configuration file")
    parser.add_argument("--verbose", action="store_true", help="Log progress information")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate",
        help="Run buf generate, then write service clients and indexes",
    )
    generate.add_argument("--proto-dir", required=True, help="Directory containing proto sources")
    _add_service_arguments(generate)
    _add_buf_arguments(generate)
    generate.add_argument(
        "--buf",
        default=DEFAULT_BUF_EXECUTABLE,
        help="buf executable to run (default: buf)",
    )

    wrappers = subparsers.add_parser(
        "wrappers",
        help="Generate service clients, the services index and the types index",
    )
    wrappers.add_argument(
        "--proto-dir",
        help="Proto sources to scan for json_name options before generating",
    )
    _add_service_arguments(wrappers)

    buf_gen = subparsers.add_parser("buf-gen", help="Write a buf.gen.yaml for protoc-gen-es")
    buf_gen.add_argument("--proto-dir", required=True, help="Directory containing proto sources")
    buf_gen.add_argument("--output-dir", help="Directory protoc-gen-es writes to")
    _add_buf_arguments(buf_gen)
    buf_gen.add_argument("--out", default=DEFAULT_BUF_GEN_PATH, help="Config file to write")
    buf_gen.add_argument(
        "--verify",
        action="store_true",
        help="Validate the written config against the buf v2 schema",
    )
    return parser


def _add_service_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument("--generated-dir", help="Root of the protoc-gen-es output tree")
    subparser.add_argument("--services-dir", help="Output directory for service clients")
    subparser.add_argument("--module-name", help="Module name, e.g. pim or ciam")
    subparser.add_argument(
        "--include-services",
        help="Comma-separated whitelist patterns ('*' for all, empty for none)",
    )
    subparser.add_argument(
        "--exclude-services",
        help="Comma-separated blacklist patterns, applied after the whitelist",
    )


def _add_buf_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--buf-dep",
        action="append",
        default=[],
        help="Additional buf module input (repeatable)",
    )
    subparser.add_argument("--go-package-prefix", help="Managed-mode go_package_prefix override")


def main(argv: Optional[list[str]] = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = load_project_config(Path(args.config)) if args.config else ProjectConfig()
        if args.command == "generate":
            return _run_generate(args, config)
        if args.command == "wrappers":
            return _run_wrappers(args, config)
        return _run_buf_gen(args, config)
    except (ConfigLoadError, WriteError, BufGenerateError, CLIError) as exc:
        parser.error(str(exc))
        return 2


def _run_generate(args: argparse.Namespace, config: ProjectConfig) -> int:
    options = _service_options(args, config)
    result = generate_from_protos(
        proto_dir=Path(args.proto_dir),
        additional_modules=[*config.additional_modules, *args.buf_dep],
        go_package_prefix=args.go_package_prefix or config.go_package_prefix,
        buf_executable=args.buf,
        **options,
    )
    _print_result(result)
    return 0


def _run_wrappers(args: argparse.Namespace, config: ProjectConfig) -> int:
    options = _service_options(args, config)
    result = run_generation(
        proto_dir=Path(args.proto_dir) if args.proto_dir else None,
        **options,
    )
    _print_result(result)
    return 0


def _service_options(args: argparse.Namespace, config: ProjectConfig) -> dict[str, object]:
    generated_dir = args.generated_dir or config.output_dir
    module_name = args.module_name or config.module_name
    services_dir = args.services_dir or config.services_dir
    if not services_dir and config.rpc_service_dir:
        services_root = Path(config.rpc_service_dir)
        if module_name:
            services_root = services_root / module_name
        services_dir = str(services_root / "services")
    if not services_dir:
        raise CLIError("--services-dir is required (or services_dir in the config file)")

    include_patterns = parse_pattern_list(args.include_services)
    if include_patterns is None:
        include_patterns = config.include_services
    exclude_patterns = parse_pattern_list(args.exclude_services)
    if exclude_patterns is None:
        exclude_patterns = config.exclude_services

    return {
        "generated_dir": Path(generated_dir),
        "services_dir": Path(services_dir),
        "module_name": module_name,
        "include_patterns": include_patterns,
        "exclude_patterns": exclude_patterns,
    }


def _print_result(result: GenerationResult) -> None:
    for warning in result.warnings:
        print(f"Warning: {warning}")
    for service in result.services:
        print(f"Generated {service.name} client")
    print(f"Total services generated: {len(result.services)}")


def _run_buf_gen(args: argparse.Namespace, config: ProjectConfig) -> int:
    out_path = Path(args.out)
    content = write_buf_gen_config(
        proto_dir=Path(args.proto_dir),
        output_dir=args.output_dir or config.output_dir,
        config_path=out_path,
        additional_modules=[*config.additional_modules, *args.buf_dep],
        go_package_prefix=args.go_package_prefix or config.go_package_prefix,
    )
    print(f"Wrote {out_path}")

    if args.verify:
        report = verify_buf_gen_yaml(content)
        print(format_report(report))
        if not report.ok:
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
