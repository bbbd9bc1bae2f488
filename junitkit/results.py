"""Results of executing a test, possibly several times because of retries."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Iterator, Union


class ExecutionResult(enum.Enum):
    """Whether a test passed, failed, or could not be executed."""

    PASS = enum.auto()
    FAIL = enum.auto()
    EXEC_FAIL = enum.auto()

    def is_success(self) -> bool:
        """Return True if the test passed."""
        return self is ExecutionResult.PASS


@dataclass(frozen=True)
class ExecuteStatus:
    """Information about a single execution of a test."""

    attempt: int
    """The current attempt, in the range ``[1, total_attempts]``."""
    total_attempts: int
    """The number of times the test may be run: one more than the number of retries."""
    result: ExecutionResult
    start_time: datetime
    time_taken: timedelta
    stdout: bytes = b""
    stderr: bytes = b""


@dataclass(frozen=True)
class SuccessDescription:
    """The test was run once and passed."""

    single_status: ExecuteStatus


@dataclass(frozen=True)
class FlakyDescription:
    """The test was run more than once and finally passed."""

    last_status: ExecuteStatus
    prior_statuses: tuple[ExecuteStatus, ...]


@dataclass(frozen=True)
class FailureDescription:
    """Every run of the test failed."""

    first_status: ExecuteStatus
    last_status: ExecuteStatus
    retries: tuple[ExecuteStatus, ...]


ExecutionDescription = Union[SuccessDescription, FlakyDescription, FailureDescription]


class ExecutionStatuses:
    """All executions of a test, including retries. Never empty."""

    __slots__ = ("_statuses",)

    def __init__(self, statuses: Iterable[ExecuteStatus]) -> None:
        self._statuses = tuple(statuses)
        if not self._statuses:
            raise ValueError("execution statuses must not be empty")

    def last_status(self) -> ExecuteStatus:
        """Return the last execution status, typically used as the final result."""
        return self._statuses[-1]

    def __iter__(self) -> Iterator[ExecuteStatus]:
        return iter(self._statuses)

    def __reversed__(self) -> Iterator[ExecuteStatus]:
        return reversed(self._statuses)

    def __len__(self) -> int:
        return len(self._statuses)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ExecutionStatuses):
            return self._statuses == other._statuses
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._statuses)

    def __repr__(self) -> str:
        return f"ExecutionStatuses({list(self._statuses)!r})"

    def describe(self) -> ExecutionDescription:
        """Classify these executions as a success, a flaky pass, or a failure."""
        last = self.last_status()
        if last.result.is_success():
            if len(self._statuses) > 1:
                return FlakyDescription(last_status=last, prior_statuses=self._statuses[:-1])
            return SuccessDescription(single_status=last)
        return FailureDescription(
            first_status=self._statuses[0],
            last_status=last,
            retries=self._statuses[1:],
        )