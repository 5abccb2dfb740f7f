"""Unit tests for service whitelist/blacklist filtering."""

from __future__ import annotations

from proto_to_ts_generator.service_filter import (
    compile_pattern,
    parse_pattern_list,
    should_exclude_service,
    should_generate_service,
    should_include_service,
)


def test_include_undefined_empty_and_wildcard() -> None:
    """``None`` includes all, ``[]`` includes none and ``*`` includes all."""
    assert should_include_service("UserService", None)
    assert not should_include_service("UserService", [])
    assert should_include_service("AdminService", ["*"])
    assert should_include_service("AnyService", ["*", "Other"])


def test_include_patterns_are_regular_expressions() -> None:
    """An anchored pattern requires a suffix match."""
    patterns = ["CustomerService$", "PublicService$"]

    assert should_include_service("UserCustomerService", patterns)
    assert should_include_service("ApiPublicService", patterns)
    assert not should_include_service("CustomerServiceAdmin", patterns)
    assert not should_include_service("AdminService", patterns)


def test_exclude_without_patterns_never_excludes() -> None:
    """Absent or empty blacklists keep everything."""
    assert not should_exclude_service("UserService", None)
    assert not should_exclude_service("UserService", [])


def test_exclude_matches_unanchored_and_anchored_patterns() -> None:
    """Plain words match anywhere; anchors restrict the position."""
    assert should_exclude_service("UserAdminService", ["Admin"])
    assert should_exclude_service("InternalService", ["Admin", "Internal"])
    assert not should_exclude_service("UserService", ["Admin", "Internal"])
    assert should_exclude_service("UserAdmin", ["Admin$"])
    assert not should_exclude_service("AdminService", ["Admin$"])
    assert should_exclude_service("AdminService", ["^Admin"])
    assert not should_exclude_service("UserAdminService", ["^Admin"])


def test_invalid_regex_falls_back_to_substring() -> None:
    """A pattern that does not compile is matched literally."""
    assert should_exclude_service("Service[invalid", ["[invalid"])
    assert not should_exclude_service("UserService", ["[invalid"])


def test_compile_pattern_reports_its_kind() -> None:
    """Compilation outcome is explicit."""
    regex = compile_pattern("Admin$")
    literal = compile_pattern("[invalid")

    assert regex.kind == "regex"
    assert regex.regex is not None
    assert literal.kind == "literal"
    assert literal.regex is None
    assert literal.matches("Service[invalid")


def test_exclude_is_case_sensitive() -> None:
    """Matching does not fold case."""
    assert should_exclude_service("adminService", ["admin"])
    assert not should_exclude_service("AdminService", ["admin"])


def test_generate_applies_whitelist_then_blacklist() -> None:
    """Only whitelisted services are tested against the blacklist."""
    include = ["CustomerService$"]
    exclude = ["Test"]

    assert should_generate_service("UserCustomerService", include, exclude)
    assert not should_generate_service("TestCustomerService", include, exclude)
    assert not should_generate_service("AdminService", include, exclude)


def test_generate_defaults_and_wildcard() -> None:
    """Defaults include everything; wildcard plus blacklist removes matches."""
    assert should_generate_service("UserService")
    assert should_generate_service("UserService", ["*"], [])
    assert not should_generate_service("UserService", [], [])
    assert not should_generate_service("AdminService", ["*"], ["Admin", "Internal"])
    assert should_generate_service("UserService", ["*"], ["Admin", "Internal"])


def test_generate_complex_scenario() -> None:
    """Customer services only, minus test and mock variants."""
    include = ["CustomerService$"]
    exclude = ["^Test", "Mock"]

    assert should_generate_service("LoyaltyCustomerService", include, exclude)
    assert not should_generate_service("TestCustomerService", include, exclude)
    assert not should_generate_service("MockCustomerService", include, exclude)


def test_parse_pattern_list() -> None:
    """Comma-separated flag values become pattern lists."""
    assert parse_pattern_list(None) is None
    assert parse_pattern_list("") == []
    assert parse_pattern_list("Admin, Internal ,,Test$") == ["Admin", "Internal", "Test$"]
    assert parse_pattern_list("*") == ["*"]
