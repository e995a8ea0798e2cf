"""Labeled status base classes.

Statuses are declared once as enum members carrying their display label,
so the value -> label lookup table exists exactly once per enum class.

Usage:
    class MyStatus(LabeledStatusEnum):
        PENDING = Label("pending", display="未处理")
        DONE = Label("done", display="已完成", final=True)

    MyStatus.DONE.display       # "已完成"
    MyStatus.labels()["done"]   # "已完成"
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Label:
    """Status definition with stored value, display name, and finality."""

    value: str
    display: str = ""
    final: bool = False

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Status value may not be empty")


# Registry to store Label metadata for each enum class
_label_registries: dict[type, dict[str, Label]] = {}

# value -> display maps, built on first access and never rebuilt
_label_maps: dict[type, Mapping[str, str]] = {}


class LabeledStatusEnum(StrEnum):
    """Base class for status enums with display labels.

    The enum value is the string stored in the DB; metadata is accessible via .meta
    """

    def __new__(cls, label: Label | str) -> "LabeledStatusEnum":
        if isinstance(label, Label):
            value = label.value
            _label_registries.setdefault(cls, {})[value] = label
        else:
            value = label

        obj = str.__new__(cls, value)
        obj._value_ = value
        return obj

    @property
    def meta(self) -> Label:
        """Get metadata for this status."""
        registry = _label_registries.get(type(self), {})
        return registry.get(self._value_, Label(self._value_))

    @property
    def display(self) -> str:
        """Human-readable label, falling back to the raw value."""
        return self.meta.display or self._value_

    @property
    def is_final(self) -> bool:
        return self.meta.final

    @classmethod
    def labels(cls) -> Mapping[str, str]:
        """Read-only value -> display mapping for this enum."""
        labels = _label_maps.get(cls)
        if labels is None:
            labels = MappingProxyType({member.value: member.display for member in cls})
            _label_maps[cls] = labels
        return labels

    @classmethod
    def final_states(cls) -> "frozenset[Any]":
        """States after which no further transition is expected."""
        return frozenset(s for s in cls if s.is_final)
