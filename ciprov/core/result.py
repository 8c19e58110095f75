"""Result type for explicit error propagation.

Every provisioning step returns ``Ok(value)`` or ``Err(error)`` instead of
raising, so the caller decides whether to stop and can tell which step failed.

Usage:
    def parse_port(text: str) -> Result[int, str]:
        if not text.isdigit():
            return Err(f"not a number: {text!r}")
        return Ok(int(text))

    match parse_port("8080"):
        case Ok(port):
            print(port)
        case Err(message):
            print(message)

Callers narrow with ``isinstance(result, Err)`` and return early.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
