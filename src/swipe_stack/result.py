# file: src/swipe_stack/result.py
"""
Result type for remote calls.

Remote sources never raise for expected failures (network down, timeout,
bad status, garbage payload). They return either Ok(value) or Err(error),
and the caller branches with isinstance().
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    DECODE = "decode"
    NOT_CONFIGURED = "not_configured"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RemoteError:
    kind: ErrorKind
    message: str
    status: Optional[int] = None

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.kind.value} ({self.status}): {self.message}"
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: RemoteError


Result = Union[Ok[T], Err]


def err(kind: ErrorKind, message: str, status: Optional[int] = None) -> Err:
    return Err(RemoteError(kind=kind, message=message, status=status))
