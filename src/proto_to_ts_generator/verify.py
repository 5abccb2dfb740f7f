"""Schema verification of synthesized ``buf.gen.yaml`` documents."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

import yaml
from jsonschema.validators import validator_for

from .yaml_types import YAMLMapping, YAMLValue

_STRING: YAMLMapping = {"type": "string", "minLength": 1}

BUF_GEN_V2_SCHEMA: YAMLMapping = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["version", "plugins"],
    "properties": {
        "version": {"const": "v2"},
        "clean": {"type": "boolean"},
        "managed": {
            "type": "object",
            "required": ["enabled"],
            "properties": {
                "enabled": {"type": "boolean"},
                "disable": {"type": "array", "items": {"type": "object"}},
                "override": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["value"],
                        "properties": {"file_option": _STRING, "field_option": _STRING},
                    },
                },
            },
            "additionalProperties": False,
        },
        "inputs": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "minProperties": 1,
                "properties": {"directory": _STRING, "module": _STRING},
            },
        },
        "plugins": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["out"],
                "oneOf": [
                    {"required": ["local"]},
                    {"required": ["remote"]},
                    {"required": ["protoc_builtin"]},
                ],
                "properties": {
                    "local": _STRING,
                    "remote": _STRING,
                    "protoc_builtin": _STRING,
                    "out": _STRING,
                    "opt": {
                        "anyOf": [_STRING, {"type": "array", "items": _STRING}],
                    },
                },
            },
        },
    },
    "additionalProperties": False,
}


@dataclass(frozen=True)
class VerificationProblem:
    """One schema violation in a config document."""

    path: str
    message: str


@dataclass(frozen=True)
class VerificationReport:
    """Result of verifying one config document."""

    problems: tuple[VerificationProblem, ...]

    @property
    def ok(self) -> bool:
        """Whether the document passed verification."""
        return not self.problems


def verify_buf_gen_yaml(content: str) -> VerificationReport:
    """Validate ``buf.gen.yaml`` text against the buf v2 generation schema.

    Args:
        content (str): Config document text.

    Returns:
        VerificationReport: Problems found, empty when the document is valid.
    """
    try:
        document: YAMLValue = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        return VerificationReport(problems=(VerificationProblem(path="$", message=str(exc)),))

    validator_cls = validator_for(BUF_GEN_V2_SCHEMA)
    validator = validator_cls(BUF_GEN_V2_SCHEMA)
    errors = sorted(
        validator.iter_errors(document),
        key=lambda error: [str(part) for part in error.absolute_path],
    )
    problems = tuple(
        VerificationProblem(path=_format_path(error.absolute_path), message=error.message)
        for error in errors
    )
    return VerificationReport(problems=problems)


def format_report(report: VerificationReport) -> str:
    """Render report as CLI output text."""
    lines = [f"Problems: {len(report.problems)}"]
    for problem in report.problems:
        lines.append(f"- {problem.path}: {problem.message}")
    return "\n".join(lines)


def _format_path(parts: Iterable[Union[str, int]]) -> str:
    text = "$"
    for part in parts:
        text += f"[{part}]" if isinstance(part, int) else f".{part}"
    return text
