"""TypeScript source templates for Connect-RPC service clients."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from .model_types import ServiceEntry, ServiceInfo
from .naming import lower_first

_GENERATED_PATH = "../generated"
_CONNECT_CLIENT_PATH = "../connect-client"
_MODULE_CONNECT_CLIENT_PATH = "../../connect-client"
_PACKAGE_SPECIFIER_PREFIX = "@"

_DO_NOT_EDIT = "// DO NOT EDIT: This file is automatically generated"


def generate_service_wrapper(
    name: str,
    service_info: ServiceInfo,
    module_name: Optional[str] = None,
) -> str:
    """Render the client module for one service.

    Args:
        name (str): Client prefix, usually the service name without ``Service``.
        service_info (ServiceInfo): Extracted service metadata.
        module_name (Optional[str]): Module the services directory is nested under.

    Returns:
        str: Generated TypeScript source for ``<camelName>.client.ts``.
    """
    service_name = service_info.service_name
    camel_name = lower_first(name)
    connect_client_path = _MODULE_CONNECT_CLIENT_PATH if module_name else _CONNECT_CLIENT_PATH
    message_types = _referenced_message_types(service_info)

    lines = [
        f"// {name} Service Client - Auto-generated",
        _DO_NOT_EDIT,
        f"// Source: {service_name} from {service_info.import_path}",
        "",
        "import { createClient, type Client } from '@connectrpc/connect'",
    ]
    lines.extend(_import_lines(service_info, message_types))
    lines.append(f"import {{ transport }} from '{connect_client_path}'")
    lines.extend(
        [
            "",
            "/**",
            f" * {name} Service Client",
            " * Created using Connect-RPC's createClient with configured transport.",
            f" * Type inference is automatically derived from {service_name} definition.",
            " */",
            f"export type {name}Client = Client<typeof {service_name}>",
            "",
            f"export const {camel_name}Client: {name}Client = "
            f"createClient({service_name}, transport)",
        ]
    )
    if message_types:
        lines.extend(["", f"export type {{ {', '.join(message_types)} }}"])
    return "\n".join(lines) + "\n"


def generate_services_index_file(
    services: Sequence[ServiceEntry],
    module_name: Optional[str] = None,
) -> str:
    """Render ``services/index.ts`` re-exporting every client and the types namespace.

    Args:
        services (Sequence[ServiceEntry]): Generated service clients, in output order.
        module_name (Optional[str]): Module name recorded in the header.

    Returns:
        str: Generated TypeScript source.
    """
    lines = ["// Services Index - Auto-generated exports", _DO_NOT_EDIT]
    if module_name:
        lines.append(f"// Module: {module_name}")
    lines.append("")
    for service in services:
        lines.append(
            f"export {{ {service.camel_name}Client, type {service.name}Client }} "
            f"from './{service.camel_name}.client'"
        )
    if not services:
        lines.append("export {}")
    lines.extend(
        [
            "",
            "// Export types namespace for IDE auto-completion",
            "// Usage: pimService.types.ProductFilter, pimService.types.Product, etc.",
            "export * as types from '../types'",
        ]
    )
    return "\n".join(lines) + "\n"


def generate_connect_client_module() -> str:
    """Render the shared ``connect-client.ts`` that provides ``transport``."""
    return """/**
 * API Client configuration for Connect-RPC
 * Using @theplant/fetch-middleware for advanced request/response handling
 */
import type { Interceptor } from '@connectrpc/connect'
import { createConnectTransport } from '@connectrpc/connect-web'
import {
  createFetchClient,
  formatProtoErrorMiddleware,
} from '@theplant/fetch-middleware'

// Use binary format (protobuf) instead of JSON
const useBinaryFormat = false

// API base URL from environment
const API_BASE_URL =
  (import.meta.env.VITE_API_BASE_URL as string | undefined) || ''

export const connectFetchClient = createFetchClient({
  fetchInit: {
    credentials: 'include',
    headers: {
      Accept: useBinaryFormat ? 'application/proto' : 'application/json',
      'X-Ensure-Connect-Error': 'true',
    },
  },
  middlewares: [formatProtoErrorMiddleware()],
})

const errorInterceptor: Interceptor = (next) => async (req) => {
  try {
    return await next(req)
  } catch (err) {
    console.error('[Connect-RPC Error]', err)
    throw err
  }
}

export const transport = createConnectTransport({
  baseUrl: API_BASE_URL,
  fetch: connectFetchClient,
  useBinaryFormat,
  interceptors: [errorInterceptor],
})
"""


def _referenced_message_types(service_info: ServiceInfo) -> list[str]:
    names: list[str] = []
    for method in service_info.methods:
        for type_name in (method.input_type, method.output_type):
            if type_name and type_name not in names and type_name != service_info.service_name:
                names.append(type_name)
    return names


def _import_lines(service_info: ServiceInfo, message_types: list[str]) -> list[str]:
    symbols_by_path: dict[str, list[str]] = {service_info.import_path: [service_info.service_name]}
    for type_name in message_types:
        origin = service_info.imports.get(type_name) or service_info.import_path
        symbols_by_path.setdefault(origin, []).append(f"type {type_name}")

    return [
        f"import {{ {', '.join(symbols)} }} from '{_module_specifier(path)}'"
        for path, symbols in symbols_by_path.items()
    ]


def _module_specifier(path: str) -> str:
    if path.startswith(_PACKAGE_SPECIFIER_PREFIX):
        return path
    return f"{_GENERATED_PATH}/{path}"
