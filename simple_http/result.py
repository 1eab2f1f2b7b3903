"""Typed result returned by dispatcher and codec operations."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from simple_http.exceptions import SimpleHTTPError

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Either a value or the error that prevented producing it.

    A failed result always has ``value`` set to None, so code that only
    cares about the success path can keep checking ``result.value``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: T | None = None
    error: SimpleHTTPError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SimpleHTTPError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """True when the operation succeeded."""
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, default: Any) -> Any:
        return self.value if self.error is None else default
