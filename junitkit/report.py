"""Data model for JUnit/XUnit reports: reports, suites, cases, statuses and reruns."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional, Union

_STRIPPED_CHARS = dict.fromkeys(
    [*range(0x00, 0x09), 0x0B, 0x0C, *range(0x0E, 0x20)]
)


class NonSuccessKind(enum.Enum):
    """Whether a test failed in an expected way (failure) or an unexpected way (error)."""

    FAILURE = "failure"
    ERROR = "error"


class Output:
    """Text written to standard output or standard error, with characters invalid in XML removed."""

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        self._text = str(text).translate(_STRIPPED_CHARS)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Output":
        """Create an output from raw bytes, decoding them as UTF-8 lossily."""
        return cls(bytes(data).decode("utf-8", errors="replace"))

    @property
    def text(self) -> str:
        return self._text

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Output({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Output):
            return self._text == other._text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._text)


OutputLike = Union[Output, str, bytes, bytearray, None]


def _to_output(value: OutputLike) -> Optional[Output]:
    if value is None or isinstance(value, Output):
        return value
    if isinstance(value, (bytes, bytearray)):
        return Output.from_bytes(value)
    if isinstance(value, str):
        return Output(value)
    raise TypeError(f"expected str, bytes or Output, got {type(value).__name__}")


class _OutputField:
    """Descriptor that stores standard output/error as an `Output`, converting on assignment."""

    def __set_name__(self, owner: type, name: str) -> None:
        self._attr = "_" + name

    def __get__(self, instance: object, owner: type | None = None) -> Optional[Output]:
        if instance is None:
            return None
        return getattr(instance, self._attr, None)

    def __set__(self, instance: object, value: OutputLike) -> None:
        object.__setattr__(instance, self._attr, _to_output(value))


@dataclass
class Property:
    """A custom property set during test execution, e.g. an environment variable."""

    name: str
    value: str


@dataclass
class TestRerun:
    """A rerun of a test: a flaky run of a passing test or a retry of a failing one."""

    __test__ = False

    kind: NonSuccessKind
    timestamp: Optional[datetime] = None
    time: Optional[timedelta] = None
    message: Optional[str] = None
    type: Optional[str] = None
    stack_trace: Optional[str] = None
    system_out: Optional[Output] = _OutputField()
    system_err: Optional[Output] = _OutputField()
    description: Optional[str] = None


class _Variant(enum.Enum):
    SUCCESS = "success"
    NON_SUCCESS = "non-success"
    SKIPPED = "skipped"


class TestCaseStatus:
    """The outcome of a test case: success, non-success (failure or error) or skipped.

    Create instances with `success()`, `non_success(kind)` or `skipped()`. Message, type and
    description are ignored for successes; reruns are ignored for skipped tests.
    """

    __test__ = False
    __slots__ = ("_variant", "_kind", "_message", "_type", "_description", "_reruns")

    def __init__(self, variant: _Variant, kind: Optional[NonSuccessKind] = None) -> None:
        if (variant is _Variant.NON_SUCCESS) != (kind is not None):
            raise ValueError("a kind is required for, and only for, non-success statuses")
        self._variant = variant
        self._kind = kind
        self._message: Optional[str] = None
        self._type: Optional[str] = None
        self._description: Optional[str] = None
        self._reruns: list[TestRerun] = []

    @classmethod
    def success(cls) -> "TestCaseStatus":
        return cls(_Variant.SUCCESS)

    @classmethod
    def non_success(cls, kind: NonSuccessKind) -> "TestCaseStatus":
        return cls(_Variant.NON_SUCCESS, NonSuccessKind(kind))

    @classmethod
    def skipped(cls) -> "TestCaseStatus":
        return cls(_Variant.SKIPPED)

    @property
    def is_success(self) -> bool:
        return self._variant is _Variant.SUCCESS

    @property
    def is_skipped(self) -> bool:
        return self._variant is _Variant.SKIPPED

    @property
    def kind(self) -> Optional[NonSuccessKind]:
        """The non-success kind, or None for successes and skips."""
        return self._kind

    @property
    def message(self) -> Optional[str]:
        return self._message

    @message.setter
    def message(self, value: Optional[str]) -> None:
        if not self.is_success:
            self._message = value

    @property
    def type(self) -> Optional[str]:
        return self._type

    @type.setter
    def type(self, value: Optional[str]) -> None:
        if not self.is_success:
            self._type = value

    @property
    def description(self) -> Optional[str]:
        return self._description

    @description.setter
    def description(self, value: Optional[str]) -> None:
        if not self.is_success:
            self._description = value

    @property
    def reruns(self) -> list[TestRerun]:
        """Flaky runs for a success, retries for a non-success; always empty when skipped."""
        return self._reruns

    def add_rerun(self, rerun: TestRerun) -> None:
        self.add_reruns([rerun])

    def add_reruns(self, reruns: Iterable[TestRerun]) -> None:
        if self.is_skipped:
            return
        self._reruns.extend(reruns)

    def _key(self) -> tuple:
        return (
            self._variant,
            self._kind,
            self._message,
            self._type,
            self._description,
            self._reruns,
        )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TestCaseStatus):
            return self._key() == other._key()
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = [self._variant.value]
        if self._kind is not None:
            parts.append(f"kind={self._kind.name}")
        for name in ("message", "type", "description"):
            value = getattr(self, "_" + name)
            if value is not None:
                parts.append(f"{name}={value!r}")
        if self._reruns:
            parts.append(f"reruns={self._reruns!r}")
        return f"TestCaseStatus({', '.join(parts)})"


@dataclass
class TestCase:
    """A single test case."""

    __test__ = False

    name: str
    status: TestCaseStatus
    classname: Optional[str] = None
    assertions: Optional[int] = None
    timestamp: Optional[datetime] = None
    time: Optional[timedelta] = None
    system_out: Optional[Output] = _OutputField()
    system_err: Optional[Output] = _OutputField()
    extra: dict[str, str] = field(default_factory=dict)


@dataclass
class TestSuite:
    """A group of test cases, with counts kept up to date by `add_test_case`."""

    __test__ = False

    name: str
    tests: int = 0
    disabled: int = 0
    errors: int = 0
    failures: int = 0
    timestamp: Optional[datetime] = None
    time: Optional[timedelta] = None
    test_cases: list[TestCase] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)
    system_out: Optional[Output] = _OutputField()
    system_err: Optional[Output] = _OutputField()
    extra: dict[str, str] = field(default_factory=dict)

    def add_property(self, property: Union[Property, tuple[str, str]]) -> None:
        if not isinstance(property, Property):
            name, value = property
            property = Property(name, value)
        self.properties.append(property)

    def add_properties(self, properties: Iterable[Union[Property, tuple[str, str]]]) -> None:
        for prop in properties:
            self.add_property(prop)

    def add_test_case(self, test_case: TestCase) -> None:
        """Add a test case and update the test, failure, error and disabled counts."""
        self.tests += 1
        status = test_case.status
        if status.is_skipped:
            self.disabled += 1
        elif status.kind is NonSuccessKind.FAILURE:
            self.failures += 1
        elif status.kind is NonSuccessKind.ERROR:
            self.errors += 1
        self.test_cases.append(test_case)

    def add_test_cases(self, test_cases: Iterable[TestCase]) -> None:
        for test_case in test_cases:
            self.add_test_case(test_case)


@dataclass
class Report:
    """The root of a JUnit report."""

    name: str
    timestamp: Optional[datetime] = None
    time: Optional[timedelta] = None
    tests: int = 0
    failures: int = 0
    errors: int = 0
    test_suites: list[TestSuite] = field(default_factory=list)

    def add_test_suite(self, test_suite: TestSuite) -> None:
        """Add a test suite and update the test, failure and error counts."""
        self.tests += test_suite.tests
        self.failures += test_suite.failures
        self.errors += test_suite.errors
        self.test_suites.append(test_suite)

    def add_test_suites(self, test_suites: Iterable[TestSuite]) -> None:
        for test_suite in test_suites:
            self.add_test_suite(test_suite)