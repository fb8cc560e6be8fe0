"""Result type returned by the persistence gateway."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    """Outcome of a gateway call. Gateway methods never raise."""

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "GatewayResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException | str) -> "GatewayResult[T]":
        return cls(ok=False, error=str(error))

    def value_or(self, default: T) -> T:
        if self.ok and self.value is not None:
            return self.value
        return default
