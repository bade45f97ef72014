from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Device:
    """
    A push target. Hashable so pushes can report a set of submitted devices.

    `parameters` may carry a per-device "badge" offset.
    """

    token: str
    parameters: Mapping[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self.parameters.get(name, default)


@dataclass(slots=True)
class Message:
    text: str
    options: dict[str, Any] = field(default_factory=dict)

    def has_option(self, name: str) -> bool:
        return name in self.options

    def get_option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)
