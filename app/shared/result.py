"""
Result type for railway-oriented error propagation.

A Result is either a success carrying a value or a failure carrying a
typed error, never both. Services return Results for every expected
failure mode instead of raising; the interface layer leaves the Result
world only through ``match``.

Once a Result is a failure, every combinator in a chain skips its
function and carries the original error to the end of the chain. The
``*_async`` variants keep that guarantee across ``await``: a failed
Result never awaits the next step.

Usage:
    result = validate(name)
    result = await result.bind_async(lambda _: check_duplicate(name))
    result = await result.map_async(lambda _: repository.save(entity))
    return result.map(to_dto).tap(lambda dto: logger.info("saved %s", dto.id))
"""

from typing import Any, Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
R = TypeVar("R")


class ResultAccessError(RuntimeError):
    """Raised when reading the value of a failure or the error of a success."""


class Unit:
    """Zero-information success payload for effect-only operations.

    There is exactly one instance, ``UNIT``.
    """

    __slots__ = ()
    _instance: "Unit | None" = None

    def __new__(cls) -> "Unit":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "()"

    def __reduce__(self) -> tuple:
        return (Unit, ())


UNIT = Unit()


class Result(Generic[T, E]):
    """Success-or-error value with short-circuiting combinators."""

    __slots__ = ("_is_success", "_value", "_error")

    def __init__(self, is_success: bool, value: Any, error: Any) -> None:
        object.__setattr__(self, "_is_success", is_success)
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_error", error)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def success(cls, value: T) -> "Result[T, E]":
        """Build a success variant."""
        return cls(True, value, None)

    @classmethod
    def failure(cls, error: E) -> "Result[T, E]":
        """Build a failure variant.

        Raises:
            ValueError: If ``error`` is None.
        """
        if error is None:
            raise ValueError("A failed Result requires an error")
        return cls(False, None, error)

    @classmethod
    def unit(cls) -> "Result[Unit, E]":
        """Build the void success carrying ``UNIT``."""
        return cls(True, UNIT, None)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def is_success(self) -> bool:
        return self._is_success

    @property
    def is_failure(self) -> bool:
        return not self._is_success

    @property
    def value(self) -> T:
        if not self._is_success:
            raise ResultAccessError("Cannot access value of a failed result")
        return self._value

    @property
    def error(self) -> E:
        if self._is_success:
            raise ResultAccessError("Cannot access error of a successful result")
        return self._error

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Result is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return (
            self._is_success == other._is_success
            and self._value == other._value
            and self._error == other._error
        )

    def __hash__(self) -> int:
        return hash((self._is_success, self._value, self._error))

    def __repr__(self) -> str:
        if self._is_success:
            return f"Success({self._value!r})"
        return f"Failure({self._error!r})"

    # ------------------------------------------------------------------
    # Exit point
    # ------------------------------------------------------------------

    def match(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[E], R],
    ) -> R:
        """Run exactly one branch and return its outcome."""
        if self._is_success:
            return on_success(self._value)
        return on_failure(self._error)

    # ------------------------------------------------------------------
    # Synchronous combinators
    # ------------------------------------------------------------------

    def _propagate(self) -> "Result[Any, E]":
        return Result(False, None, self._error)

    def map(self, mapper: Callable[[T], U]) -> "Result[U, E]":
        """Transform the success value; failures pass through untouched."""
        if not self._is_success:
            return self._propagate()
        return Result.success(mapper(self._value))

    def bind(self, binder: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        """Chain a step that itself returns a Result."""
        if not self._is_success:
            return self._propagate()
        return binder(self._value)

    def tap(self, action: Callable[[T], Any]) -> "Result[T, E]":
        """Run a side effect on success and return this Result unchanged."""
        if self._is_success:
            action(self._value)
        return self

    # ------------------------------------------------------------------
    # Asynchronous combinators
    # ------------------------------------------------------------------

    async def map_async(
        self, mapper: Callable[[T], Awaitable[U]]
    ) -> "Result[U, E]":
        if not self._is_success:
            return self._propagate()
        return Result.success(await mapper(self._value))

    async def bind_async(
        self, binder: Callable[[T], Awaitable["Result[U, E]"]]
    ) -> "Result[U, E]":
        if not self._is_success:
            return self._propagate()
        return await binder(self._value)

    async def tap_async(
        self, action: Callable[[T], Awaitable[Any]]
    ) -> "Result[T, E]":
        if self._is_success:
            await action(self._value)
        return self


VoidResult = Result[Unit, E]
