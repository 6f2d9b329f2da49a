"""Typed operation results and the error taxonomy.

Every public operation returns an `Outcome`: either `value` is set, or `error`
carries an `OperationError` whose `kind` names the policy decision that stopped
the operation. Transports map kinds to their own status codes.

Inside the core, validation steps raise `Rejected`; the operation boundary
(`guarded`) turns it into an `Outcome`. `StoreUnavailable` raised by a store is
reported as kind ``store_unavailable`` with the store's message untouched and
is never retried here.
"""
from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal

logger = logging.getLogger(__name__)


ErrorKind = Literal[
    "not_found",
    "access_denied",
    "not_open",
    "full",
    "already_joined",
    "already_completed",
    "ended",
    "invalid_answer",
    "answer_count_mismatch",
    "invalid_state",
    "invalid_question",
    "invalid_contest",
    "contest_started",
    "store_unavailable",
]


@dataclass(frozen=True)
class OperationError:
    """Represents a policy rejection (pure core, no transport codes)."""

    kind: ErrorKind
    message: str | None = None


@dataclass(frozen=True)
class Outcome:
    """Result of a core operation."""

    value: Any = None
    error: OperationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> str | None:
        return self.error.kind if self.error else None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise Rejected(self.error.kind, self.error.message)
        return self.value


class StoreUnavailable(Exception):
    """Raised by a store when the durable backend cannot serve the request."""


class Rejected(Exception):
    """Internal control flow: a validation step refused the operation."""

    def __init__(self, kind: ErrorKind, message: str | None = None):
        super().__init__(message or kind)
        self.error = OperationError(kind=kind, message=message)


def guarded(func: Callable[..., Any]) -> Callable[..., Outcome]:
    """Run `func` and wrap its return value (or rejection) in an `Outcome`."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Outcome:
        try:
            return Outcome(value=func(*args, **kwargs))
        except Rejected as exc:
            logger.warning(f"{func.__name__} rejected: {exc.error.kind} ({exc.error.message})")
            return Outcome(error=exc.error)
        except StoreUnavailable as exc:
            logger.warning(f"{func.__name__} failed: store unavailable: {exc}")
            return Outcome(error=OperationError(kind="store_unavailable", message=str(exc)))

    return wrapper
