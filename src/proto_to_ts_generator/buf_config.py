"""Synthesis and best-effort parsing of ``buf.gen.yaml``.

The reader is a regex extractor over the shapes :func:`render_buf_gen_yaml`
emits: top-level ``version``/``managed``/``inputs``/``plugins`` keys with
their entries indented below them. Documents outside that subset yield a
partially populated :class:`BufGenConfig` instead of an error.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

BUF_GEN_VERSION = "v2"
ES_PLUGIN = "protoc-gen-es"
ES_PLUGIN_OPTIONS: tuple[str, ...] = ("target=ts", "import_extension=none")
GO_PACKAGE_PREFIX_OPTION = "go_package_prefix"

_VERSION_RE = re.compile(r"^version:[ \t]*(\S+)", re.MULTILINE)
_ENABLED_RE = re.compile(r"enabled:[ \t]*(true|false)\b")
_MODULE_RE = re.compile(r"module:[ \t]*(\S+)")
_DIRECTORY_RE = re.compile(r"directory:[ \t]*(\S+)")
_OVERRIDE_ENTRY_RE = re.compile(r"file_option:[ \t]*(\S+)\s*\n[ \t]*value:[ \t]*(\S+)")
_LIST_ITEM_RE = re.compile(r"^[ \t]*-[ \t]+", re.MULTILINE)
_PLUGIN_SOURCE_RE = re.compile(r"^(local|remote):[ \t]*(\S+)", re.MULTILINE)
_PLUGIN_OUT_RE = re.compile(r"^[ \t]*out:[ \t]*(\S+)", re.MULTILINE)
_OPT_ITEM_RE = re.compile(r"^[ \t]*-[ \t]*(\S+)", re.MULTILINE)


class ManagedModule(BaseModel):
    """A module excluded from managed-mode rewriting."""

    module: str


class ManagedOverride(BaseModel):
    """A managed-mode file option override."""

    file_option: str
    value: str


class ManagedConfig(BaseModel):
    """The ``managed`` section."""

    enabled: bool
    disable: Optional[list[ManagedModule]] = None
    override: Optional[list[ManagedOverride]] = None


class BufInput(BaseModel):
    """One entry of the ``inputs`` section."""

    directory: Optional[str] = None
    module: Optional[str] = None


class BufPlugin(BaseModel):
    """One entry of the ``plugins`` section."""

    local: Optional[str] = None
    remote: Optional[str] = None
    out: str
    opt: Optional[list[str]] = None


class BufGenConfig(BaseModel):
    """Structured ``buf.gen.yaml``; every section is optional for partial parses."""

    version: Optional[str] = None
    managed: Optional[ManagedConfig] = None
    inputs: Optional[list[BufInput]] = None
    plugins: Optional[list[BufPlugin]] = None


def build_buf_gen_config(
    output_dir: str,
    input_dir: str,
    buf_deps: Sequence[str] = (),
    go_package_prefix: Optional[str] = None,
) -> BufGenConfig:
    """Build the generation config for the protoc-gen-es plugin.

    Args:
        output_dir (str): Directory the plugin writes generated modules to.
        input_dir (str): Directory holding the proto sources.
        buf_deps (Sequence[str]): Buf registry modules the inputs depend on.
        go_package_prefix (Optional[str]): Managed-mode ``go_package_prefix`` override.

    Returns:
        BufGenConfig: Config ready for :func:`render_buf_gen_yaml`.
    """
    managed = ManagedConfig(
        enabled=True,
        disable=[ManagedModule(module=dep) for dep in buf_deps] or None,
        override=(
            [ManagedOverride(file_option=GO_PACKAGE_PREFIX_OPTION, value=go_package_prefix)]
            if go_package_prefix
            else None
        ),
    )
    inputs = [BufInput(directory=input_dir)]
    inputs.extend(BufInput(module=dep) for dep in buf_deps)
    return BufGenConfig(
        version=BUF_GEN_VERSION,
        managed=managed,
        inputs=inputs,
        plugins=[BufPlugin(local=ES_PLUGIN, out=output_dir, opt=list(ES_PLUGIN_OPTIONS))],
    )


def render_buf_gen_yaml(config: BufGenConfig) -> str:
    """Render a config as ``buf.gen.yaml`` text.

    Args:
        config (BufGenConfig): Config to render; missing sections are omitted.

    Returns:
        str: YAML document text.
    """
    sections: list[list[str]] = []
    if config.version is not None:
        sections.append([f"version: {config.version}"])
    if config.managed is not None:
        sections.append(_render_managed(config.managed))
    if config.inputs:
        sections.append(_render_inputs(config.inputs))
    if config.plugins:
        sections.append(_render_plugins(config.plugins))
    return "\n\n".join("\n".join(section) for section in sections) + "\n"


def generate_buf_gen_yaml(
    output_dir: str,
    input_dir: str,
    buf_deps: Sequence[str] = (),
    go_package_prefix: Optional[str] = None,
) -> str:
    """Generate ``buf.gen.yaml`` text for the given directories and dependencies."""
    return render_buf_gen_yaml(
        build_buf_gen_config(
            output_dir=output_dir,
            input_dir=input_dir,
            buf_deps=buf_deps,
            go_package_prefix=go_package_prefix,
        )
    )


def parse_buf_gen_yaml(content: str) -> BufGenConfig:
    """Recover structured config from ``buf.gen.yaml`` text on a best-effort basis.

    Parse failures are logged as warnings and the sections extracted before
    the failure are returned.

    Args:
        content (str): Existing configuration text.

    Returns:
        BufGenConfig: Partially or fully populated config.
    """
    fields: dict[str, object] = {}
    try:
        version_match = _VERSION_RE.search(content)
        if version_match:
            fields["version"] = version_match.group(1)

        managed_block = _top_level_block(content, "managed")
        if managed_block is not None:
            fields["managed"] = _parse_managed(managed_block)

        inputs_block = _top_level_block(content, "inputs")
        if inputs_block is not None:
            fields["inputs"] = _parse_inputs(inputs_block)

        plugins_block = _top_level_block(content, "plugins")
        if plugins_block is not None:
            fields["plugins"] = _parse_plugins(plugins_block)
    except (TypeError, ValueError, re.error) as exc:
        logger.warning("Could not parse buf.gen.yaml: %s", exc)

    return _partial_config(fields)


def _render_managed(managed: ManagedConfig) -> list[str]:
    lines = ["managed:", f"  enabled: {'true' if managed.enabled else 'false'}"]
    if managed.disable:
        lines.append("  disable:")
        lines.extend(f"    - module: {entry.module}" for entry in managed.disable)
    if managed.override:
        lines.append("  override:")
        for override in managed.override:
            lines.append(f"    - file_option: {override.file_option}")
            lines.append(f"      value: {override.value}")
    return lines


def _render_inputs(inputs: list[BufInput]) -> list[str]:
    lines = ["inputs:"]
    for entry in inputs:
        if entry.directory is not None:
            lines.append(f"  - directory: {entry.directory}")
        elif entry.module is not None:
            lines.append(f"  - module: {entry.module}")
    return lines


def _render_plugins(plugins: list[BufPlugin]) -> list[str]:
    lines = ["plugins:"]
    for plugin in plugins:
        if plugin.local == ES_PLUGIN:
            lines.append(
                "  # Generate types and Connect-RPC service definitions using protoc-gen-es v2"
            )
        if plugin.remote is not None:
            lines.append(f"  - remote: {plugin.remote}")
        else:
            lines.append(f"  - local: {plugin.local}")
        lines.append(f"    out: {plugin.out}")
        if plugin.opt:
            lines.append("    opt:")
            lines.extend(f"      - {option}" for option in plugin.opt)
    return lines


def _top_level_block(content: str, key: str) -> Optional[str]:
    match = re.search(
        rf"^{re.escape(key)}:[^\n]*\n?((?:[ \t]+[^\n]*\n?|-[^\n]*\n?|[ \t]*\n)*)",
        content,
        re.MULTILINE,
    )
    if match is None:
        return None
    return match.group(1)


def _nested_block(block: str, key: str) -> Optional[str]:
    match = re.search(
        rf"^(?P<indent>[ \t]*){re.escape(key)}:[^\n]*\n?"
        rf"(?P<body>(?:(?P=indent)[ \t]+[^\n]*\n?|(?P=indent)-[^\n]*\n?|[ \t]*\n)*)",
        block,
        re.MULTILINE,
    )
    if match is None:
        return None
    return match.group("body")


def _parse_managed(block: str) -> ManagedConfig:
    enabled_match = _ENABLED_RE.search(block)
    managed = ManagedConfig(enabled=enabled_match is not None and enabled_match.group(1) == "true")

    disable_block = _nested_block(block, "disable")
    if disable_block is not None:
        managed.disable = [
            ManagedModule(module=match.group(1)) for match in _MODULE_RE.finditer(disable_block)
        ]

    override_block = _nested_block(block, "override")
    if override_block is not None:
        managed.override = [
            ManagedOverride(file_option=match.group(1), value=match.group(2))
            for match in _OVERRIDE_ENTRY_RE.finditer(override_block)
        ]
    return managed


def _parse_inputs(block: str) -> list[BufInput]:
    inputs = [BufInput(directory=match.group(1)) for match in _DIRECTORY_RE.finditer(block)]
    inputs.extend(BufInput(module=match.group(1)) for match in _MODULE_RE.finditer(block))
    return inputs


def _parse_plugins(block: str) -> list[BufPlugin]:
    plugins: list[BufPlugin] = []
    for item in _split_list_items(block):
        source_match = _PLUGIN_SOURCE_RE.search(item)
        out_match = _PLUGIN_OUT_RE.search(item)
        if source_match is None or out_match is None:
            continue
        plugin = BufPlugin(out=out_match.group(1))
        setattr(plugin, source_match.group(1), source_match.group(2))
        opt_block = _nested_block(item, "opt")
        if opt_block is not None:
            plugin.opt = [match.group(1) for match in _OPT_ITEM_RE.finditer(opt_block)]
        plugins.append(plugin)
    return plugins


def _split_list_items(block: str) -> list[str]:
    starts = [match.start() for match in _LIST_ITEM_RE.finditer(block)]
    items: list[str] = []
    for index, start in enumerate(starts):
        end = starts[index + 1] if index + 1 < len(starts) else len(block)
        item = block[start:end]
        # top-level items only; nested option lists are indented further
        if _indent_width(item) == _indent_width(block[starts[0] :]):
            items.append(_LIST_ITEM_RE.sub("", item, count=1))
        elif items:
            items[-1] += item
    return items


def _indent_width(text: str) -> int:
    return len(text) - len(text.lstrip(" \t"))


def _partial_config(fields: dict[str, object]) -> BufGenConfig:
    try:
        return BufGenConfig.model_validate(fields)
    except ValidationError as exc:
        logger.warning("Discarding unparseable buf.gen.yaml sections: %s", exc)
        return BufGenConfig(version=_string_or_none(fields.get("version")))


def _string_or_none(value: object) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None
