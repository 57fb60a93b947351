"""Tagged outcomes for best-effort browser probes.

A probe either produced a value (``Probe.ok``) or could not tell
(``Probe.unknown``). Callers pick the conservative default explicitly
instead of relying on a swallowed exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Probe(Generic[T]):
    value: T | None = None
    known: bool = True
    error: str | None = None

    @classmethod
    def ok(cls, value: T) -> "Probe[T]":
        return cls(value=value, known=True)

    @classmethod
    def unknown(cls, error: str = "") -> "Probe[Any]":
        return cls(value=None, known=False, error=error)

    def or_default(self, default: T) -> T:
        return self.value if self.known else default


async def attempt(awaitable: Awaitable[T]) -> Probe[T]:
    """Await a browser call and capture its outcome as a Probe."""
    try:
        return Probe.ok(await awaitable)
    except Exception as e:
        return Probe.unknown(str(e)[:300])
