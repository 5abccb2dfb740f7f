"""Connect-RPC client and types index generator for protoc-gen-es output."""

from __future__ import annotations

from .buf_config import BufGenConfig, generate_buf_gen_yaml, parse_buf_gen_yaml
from .cli import main
from .generator import generate_from_protos, run_generation, write_buf_gen_config
from .model_types import GenerationResult, MethodInfo, ServiceInfo
from .service_filter import should_exclude_service, should_generate_service, should_include_service
from .templates import generate_service_wrapper, generate_services_index_file
from .type_index import generate_types_index_file

__all__ = [
    "BufGenConfig",
    "GenerationResult",
    "MethodInfo",
    "ServiceInfo",
    "generate_buf_gen_yaml",
    "generate_from_protos",
    "generate_service_wrapper",
    "generate_services_index_file",
    "generate_types_index_file",
    "main",
    "parse_buf_gen_yaml",
    "run_generation",
    "should_exclude_service",
    "should_generate_service",
    "should_include_service",
    "write_buf_gen_config",
]
