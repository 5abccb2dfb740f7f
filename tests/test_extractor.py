"""Tests for service metadata extraction and json_name rewriting."""

from __future__ import annotations

from proto_to_ts_generator.extractor import extract_named_imports, extract_service_infos
from proto_to_ts_generator.json_name import apply_json_name_mappings, extract_json_name_mappings
from proto_to_ts_generator.model_types import MethodInfo

from .fixture_helpers import read_fixture

SERVICE_MODULE = "pim/product/v1/service_pb"


def test_extracts_every_service_in_declaration_order() -> None:
    """Both services of the module are found with their unary methods."""
    services = extract_service_infos(read_fixture(f"generated/{SERVICE_MODULE}.ts"), SERVICE_MODULE)

    assert [service.service_name for service in services] == [
        "ProductService",
        "ProductAdminService",
    ]
    assert services[0].import_path == SERVICE_MODULE
    assert services[0].methods == (
        MethodInfo(
            name="getProduct",
            input_type="GetProductRequest",
            input_schema="GetProductRequestSchema",
            output_type="GetProductResponse",
            output_schema="GetProductResponseSchema",
        ),
        MethodInfo(
            name="getCategory",
            input_type="GetProductRequest",
            input_schema="GetProductRequestSchema",
            output_type="Category",
            output_schema="CategorySchema",
        ),
    )
    assert [method.name for method in services[1].methods] == ["deleteProduct"]


def test_imports_are_resolved_into_generated_paths() -> None:
    """Relative imports become generated-tree paths; packages stay verbatim."""
    services = extract_service_infos(read_fixture(f"generated/{SERVICE_MODULE}.ts"), SERVICE_MODULE)

    imports = services[1].imports
    assert imports["Category"] == "pim/product/v1/category_pb"
    assert imports["Error"] == "pim/common/v1/error_pb"
    assert imports["ErrorSchema"] == "pim/common/v1/error_pb"
    assert imports["Message"] == "@bufbuild/protobuf"
    assert imports["GenService"] == "@bufbuild/protobuf/codegenv2"


def test_named_imports_strip_inline_type_modifiers() -> None:
    """``type`` on a single specifier is not part of the symbol."""
    content = 'import { type Foo, Bar } from "./foo_pb";\n'

    assert extract_named_imports(content, "a/v1/service_pb") == {
        "Foo": "a/v1/foo_pb",
        "Bar": "a/v1/foo_pb",
    }


def test_module_without_services() -> None:
    """Type-only modules yield no services."""
    assert extract_service_infos(read_fixture("generated/pim/common/v1/error_pb.ts"), "x") == []


def test_non_unary_methods_are_ignored() -> None:
    """Streaming methods are not recognised."""
    content = """
export const StreamService: GenService<{
  watch: {
    methodKind: "server_streaming";
    input: typeof WatchRequestSchema;
    output: typeof WatchResponseSchema;
  },
}> = /*@__PURE__*/
  serviceDesc(file_stream, 0);
"""

    (service,) = extract_service_infos(content, "stream_pb")

    assert service.service_name == "StreamService"
    assert service.methods == ()


def test_json_name_mappings_from_proto_source() -> None:
    """Only fields carrying a json_name option are mapped."""
    mappings = extract_json_name_mappings(read_fixture("proto/pim/common/v1/error.proto"))

    assert mappings == {"errorMessage": "message"}


def test_json_name_mappings_with_other_options() -> None:
    """The option may sit among other field options."""
    source = 'string display_name = 3 [deprecated = true, json_name = "label"];\n'

    assert extract_json_name_mappings(source) == {"displayName": "label"}


def test_apply_json_name_mappings_rewrites_declarations() -> None:
    """Property declarations are renamed; unrelated text is untouched."""
    content = read_fixture("generated/pim/common/v1/error_pb.ts")

    rewritten, modified = apply_json_name_mappings(content, {"errorMessage": "message"})

    assert modified
    assert "  message: string;" in rewritten
    assert "errorMessage" not in rewritten
    assert "  code: string;" in rewritten


def test_apply_json_name_mappings_reports_no_change() -> None:
    """Identity mappings and absent fields leave the source as is."""
    content = "export type A = {\n  code: string;\n};\n"

    rewritten, modified = apply_json_name_mappings(content, {"code": "code", "other": "x"})

    assert not modified
    assert rewritten == content


def test_streaming_method_does_not_swallow_following_unary_method() -> None:
    """Each unary method keeps its own name after a streaming one."""
    content = """
export const MixedService: GenService<{
  watch: {
    methodKind: "server_streaming";
    input: typeof WatchRequestSchema;
    output: typeof WatchResponseSchema;
  },
  getItem: {
    methodKind: "unary";
    input: typeof GetItemRequestSchema;
    output: typeof GetItemResponseSchema;
  },
}> = /*@__PURE__*/
  serviceDesc(file_mixed, 0);
"""

    (service,) = extract_service_infos(content, "mixed_pb")

    assert service.methods == (
        MethodInfo(
            name="getItem",
            input_type="GetItemRequest",
            input_schema="GetItemRequestSchema",
            output_type="GetItemResponse",
            output_schema="GetItemResponseSchema",
        ),
    )
