"""Tests for buf.gen.yaml synthesis and best-effort parsing."""

from __future__ import annotations

import logging
from typing import Optional

import pytest
import yaml

from proto_to_ts_generator.buf_config import (
    BufGenConfig,
    build_buf_gen_config,
    generate_buf_gen_yaml,
    parse_buf_gen_yaml,
    render_buf_gen_yaml,
)


def test_generated_config_targets_protoc_gen_es() -> None:
    """The plugin section writes TypeScript without import extensions."""
    content = generate_buf_gen_yaml(output_dir="./src/generated", input_dir="./proto")

    assert content.startswith("version: v2\n")
    assert "local: protoc-gen-es" in content
    assert "out: ./src/generated" in content
    assert "- target=ts" in content
    assert "- import_extension=none" in content
    assert "directory: ./proto" in content
    assert "enabled: true" in content
    assert "disable:" not in content


def test_generated_config_is_valid_yaml() -> None:
    """The rendered text loads into the expected structure."""
    content = generate_buf_gen_yaml(
        output_dir="src/gen",
        input_dir="proto",
        buf_deps=["buf.build/googleapis/googleapis"],
    )

    document = yaml.safe_load(content)
    assert document == {
        "version": "v2",
        "managed": {
            "enabled": True,
            "disable": [{"module": "buf.build/googleapis/googleapis"}],
        },
        "inputs": [
            {"directory": "proto"},
            {"module": "buf.build/googleapis/googleapis"},
        ],
        "plugins": [
            {
                "local": "protoc-gen-es",
                "out": "src/gen",
                "opt": ["target=ts", "import_extension=none"],
            }
        ],
    }


def test_dependencies_are_disabled_and_added_as_inputs() -> None:
    """Every registry dependency shows up in both sections."""
    deps = ["buf.build/googleapis/googleapis", "buf.build/bufbuild/protovalidate"]
    content = generate_buf_gen_yaml(output_dir="out", input_dir="proto", buf_deps=deps)

    assert content.count("module: buf.build/googleapis/googleapis") == 2
    assert content.count("module: buf.build/bufbuild/protovalidate") == 2


def test_go_package_prefix_override() -> None:
    """A prefix becomes a managed-mode file option override."""
    content = generate_buf_gen_yaml(
        output_dir="out",
        input_dir="proto",
        go_package_prefix="github.com/acme/gen",
    )

    document = yaml.safe_load(content)
    assert document["managed"]["override"] == [
        {"file_option": "go_package_prefix", "value": "github.com/acme/gen"}
    ]


def test_render_matches_generate() -> None:
    """Rendering the built config gives the same text as the shortcut."""
    config = build_buf_gen_config(output_dir="out", input_dir="proto", buf_deps=["buf.build/a/b"])

    assert render_buf_gen_yaml(config) == generate_buf_gen_yaml(
        output_dir="out", input_dir="proto", buf_deps=["buf.build/a/b"]
    )


@pytest.mark.parametrize(
    ("buf_deps", "go_package_prefix"),
    [
        ((), None),
        (("buf.build/googleapis/googleapis",), None),
        (("buf.build/googleapis/googleapis", "buf.build/bufbuild/protovalidate"), "github.com/x"),
    ],
)
def test_parse_recovers_generated_config(
    buf_deps: tuple[str, ...], go_package_prefix: Optional[str]
) -> None:
    """Parsing generated text gives back the config it was rendered from."""
    built = build_buf_gen_config(
        output_dir="./src/lib/api/generated",
        input_dir="./proto",
        buf_deps=buf_deps,
        go_package_prefix=go_package_prefix,
    )

    parsed = parse_buf_gen_yaml(render_buf_gen_yaml(built))

    assert parsed.model_dump() == built.model_dump()


def test_parse_recovers_input_and_output_directories() -> None:
    """The input directory and plugin output survive a round trip."""
    parsed = parse_buf_gen_yaml(generate_buf_gen_yaml(output_dir="web/gen", input_dir="api/proto"))

    assert parsed.version == "v2"
    assert parsed.inputs is not None
    assert parsed.inputs[0].directory == "api/proto"
    assert parsed.plugins is not None
    assert parsed.plugins[0].out == "web/gen"
    assert parsed.plugins[0].local == "protoc-gen-es"


def test_parse_handwritten_remote_plugin() -> None:
    """A remote plugin written by hand is recognised."""
    content = (
        "version: v2\n"
        "plugins:\n"
        "  - remote: buf.build/bufbuild/es\n"
        "    out: gen\n"
    )

    parsed = parse_buf_gen_yaml(content)

    assert parsed.plugins is not None
    assert parsed.plugins[0].remote == "buf.build/bufbuild/es"
    assert parsed.plugins[0].out == "gen"
    assert parsed.plugins[0].opt is None


def test_parse_garbage_returns_empty_config() -> None:
    """Unrecognised text yields a config with no sections."""
    parsed = parse_buf_gen_yaml("this is not a buf config")

    assert parsed == BufGenConfig()


def test_parse_partial_document() -> None:
    """Recognised sections are kept and incomplete plugins are dropped."""
    parsed = parse_buf_gen_yaml("version: v2\nplugins:\n  - local: protoc-gen-es\n")

    assert parsed.version == "v2"
    assert parsed.managed is None
    assert parsed.inputs is None
    assert parsed.plugins == []


def test_parse_non_text_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    """Input that cannot be searched is reported and not raised."""
    with caplog.at_level(logging.WARNING, logger="proto_to_ts_generator.buf_config"):
        parsed = parse_buf_gen_yaml(None)  # type: ignore[arg-type]

    assert parsed == BufGenConfig()
    assert "Could not parse buf.gen.yaml" in caplog.text


def test_parse_compact_list_indentation() -> None:
    """List items written flush with their key are recognised."""
    content = (
        "version: v2\n"
        "managed:\n"
        "  enabled: true\n"
        "  disable:\n"
        "  - module: buf.build/googleapis/googleapis\n"
        "inputs:\n"
        "- directory: proto\n"
        "- module: buf.build/googleapis/googleapis\n"
        "plugins:\n"
        "- local: protoc-gen-es\n"
        "  out: gen\n"
        "  opt:\n"
        "  - target=ts\n"
    )

    parsed = parse_buf_gen_yaml(content)

    assert parsed.managed is not None
    assert parsed.managed.disable is not None
    assert [entry.module for entry in parsed.managed.disable] == [
        "buf.build/googleapis/googleapis"
    ]
    assert parsed.inputs is not None
    assert [entry.directory for entry in parsed.inputs] == ["proto", None]
    assert [entry.module for entry in parsed.inputs] == [None, "buf.build/googleapis/googleapis"]
    assert parsed.plugins is not None
    assert parsed.plugins[0].local == "protoc-gen-es"
    assert parsed.plugins[0].out == "gen"
    assert parsed.plugins[0].opt == ["target=ts"]
