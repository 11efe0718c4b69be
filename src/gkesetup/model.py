# model.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List

from .errors import ContextKeyError

# Step states
PENDING = "pending"
EXECUTED = "executed"
ABORTED = "aborted"


@dataclass(frozen=True)
class ProvisioningStep:
    """
    One statically defined provisioning step.

    `description` and `prompt` may contain `{Key}` placeholders naming
    EnvironmentContext keys; they are filled when the step starts.
    """
    description: str
    action: Callable[[Any], None]
    requires_confirmation: bool = False
    prompt: str | None = None


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one external command."""
    args: List[str]
    output: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


@dataclass
class FirewallRule:
    name: str
    allowed: List[str] = field(default_factory=list)
    source_ranges: List[str] = field(default_factory=list)


class EnvironmentContext(Mapping):
    """
    Identifiers derived during a run (project id, service account email,
    external IP, ...), consumed by later steps.

    Keys are write-once: `ctx[key] = value` refuses to overwrite. A step that
    recreates a resource uses `replace()` instead. Reading a key that no step
    has produced yet raises ContextKeyError.
    """

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}

    def __getitem__(self, key: str) -> str:
        try:
            return self._values[key]
        except KeyError:
            raise ContextKeyError(key) from None

    def __setitem__(self, key: str, value: str) -> None:
        if key in self._values:
            raise ValueError(f"{key} is already set to {self._values[key]!r}; use replace() to overwrite")
        self._values[key] = str(value)

    def replace(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"EnvironmentContext({self._values!r})"
