"""
result.py - stage outcomes for the query pipeline.

A stage never raises for a failing user callback; it returns Err holding a
StageError with the original exception. Stages chain with ``bind``, so the
first Err skips every stage after it:

    first.execute(rows).bind(second.execute)

Query.run hands the final Result to the caller, Query.execute unwraps it and
re-raises the stored exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class Result(ABC, Generic[T, E]):
    """
    Either Ok(value) after a stage succeeded, or Err(error) after it failed.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a monad.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    @abstractmethod
    def bind(self, f: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        """Feed an Ok value to the next stage; an Err is returned as-is."""
        raise NotImplementedError

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self) -> T:
        """Value of an Ok. An Err raises ValueError."""
        if isinstance(self, Ok):
            return self.value
        raise ValueError(f"Cannot unwrap Err: {self}")


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Stage output rows.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a value-object.
    """
    value: T

    def bind(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return f(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Result[Any, E]):
    """A failed stage; later stages never see it.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a value-object.
    """
    error: E

    def bind(self, f: Callable[[Any], Result[U, E]]) -> Result[U, E]:
        return self  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


def identity(x: T) -> T:
    """Identity function."""
    return x


@dataclass(frozen=True)
class StageError:
    """Error that occurred while a query stage was running.

    ``cause`` is the exception raised by the user callback, kept as-is.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a value-object.
    """
    stage: str
    message: str
    cause: Optional[BaseException] = None

    def __str__(self) -> str:
        if self.cause:
            return f"[{self.stage}] {self.message}: {self.cause}"
        return f"[{self.stage}] {self.message}"


StageResult = Result[T, StageError]


def stage_ok(value: T) -> StageResult[T]:
    """Create a successful stage result."""
    return Ok(value)


def stage_err(stage: str, message: str, cause: Optional[BaseException] = None) -> StageResult[Any]:
    """Create a failed stage result."""
    return Err(StageError(stage, message, cause))


__all__ = [
    "Result", "Ok", "Err",
    "StageError", "StageResult",
    "stage_ok", "stage_err",
    "identity",
]
