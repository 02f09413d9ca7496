"""
Tagged result type used at every crypto component boundary.

A component returns either ``Ok(value)`` or ``Err(kind, message)``; callers
must check which one they got before touching the value.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from .errors import ErrorKind, VaultCryptoError, exception_for, public_message

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        """Raise the exception class that matches this error's kind."""
        raise exception_for(self.kind)(self.message)

    def unwrap_or(self, default: Any) -> Any:
        return default

    @property
    def public_message(self) -> str:
        return public_message(self.kind)

    @classmethod
    def from_exception(cls, exc: VaultCryptoError) -> "Err":
        return cls(exc.kind, exc.message)


Result = Union[Ok[T], Err]


def returns_result(fn: Callable[..., T]) -> Callable[..., Result]:
    """
    Wrap a function that raises ``VaultCryptoError`` so it returns a Result.

    The wrapped function's return value becomes ``Ok(value)`` and any
    ``VaultCryptoError`` becomes ``Err``. Other exceptions are bugs and are
    not caught here; each component maps primitive failures to its own kind
    before they reach this boundary.
    """

    @functools.wraps(fn)
    def wrapper(*args, **kwargs) -> Result:
        try:
            return Ok(fn(*args, **kwargs))
        except VaultCryptoError as exc:
            logger.debug("%s failed: %s", fn.__qualname__, exc.kind.value)
            return Err.from_exception(exc)

    return wrapper
