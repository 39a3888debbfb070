"""Ok/Err result values.

Dispatch services return a Result instead of raising for the failures they
expect (unsupported platform, missing artifact, bad manifest). Callers branch
with ``isinstance`` or ``match``:

    match dispatch_run(manifest, key, args, dist_dir=dist):
        case Ok(code):
            raise SystemExit(code)
        case Err(error):
            console.error(error.message)

Operating-system failures are not wrapped; they still raise ``OSError``.
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

    def unwrap_or(self, default: T) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result carrying ``error``."""

    error: E

    def unwrap_or(self, default: T) -> T:
        return default

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
