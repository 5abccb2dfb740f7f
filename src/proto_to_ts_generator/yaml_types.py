"""Typing aliases for values deserialized with ``yaml.safe_load``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeAlias, Union

YAMLScalar: TypeAlias = Union[str, int, float, bool, None]
YAMLValue: TypeAlias = Union[YAMLScalar, list["YAMLValue"], Mapping[str, "YAMLValue"]]
YAMLMapping: TypeAlias = Mapping[str, YAMLValue]
