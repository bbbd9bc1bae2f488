"""Serialization of a `Report` to JUnit/XUnit XML in the Jenkins format."""

from __future__ import annotations

import io
from datetime import datetime, timedelta
from typing import IO, Iterable, Optional, Union

from .report import (
    NonSuccessKind,
    Output,
    Property,
    Report,
    TestCase,
    TestCaseStatus,
    TestRerun,
    TestSuite,
)

_INDENT = " " * 4

_ESCAPES = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        "&": "&amp;",
        "'": "&apos;",
        '"': "&quot;",
    }
)

_FLAKY_TAGS = {
    NonSuccessKind.FAILURE: "flakyFailure",
    NonSuccessKind.ERROR: "flakyError",
}
_RERUN_TAGS = {
    NonSuccessKind.FAILURE: "rerunFailure",
    NonSuccessKind.ERROR: "rerunError",
}
_STATUS_TAGS = {
    NonSuccessKind.FAILURE: "failure",
    NonSuccessKind.ERROR: "error",
}

Attributes = Iterable[tuple[str, str]]


def _escape(text: str) -> str:
    return text.translate(_ESCAPES)


def _format_attributes(attributes: Attributes) -> str:
    return "".join(f' {key}="{_escape(value)}"' for key, value in attributes)


class _IndentingWriter:
    """Accumulates XML, placing each tag on its own indented line unless it follows text."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._depth = 0
        self._line_break = False

    def _open_line(self) -> None:
        if self._line_break:
            self._parts.append("\n" + _INDENT * self._depth)

    def declaration(self) -> None:
        self._open_line()
        self._parts.append('<?xml version="1.0" encoding="UTF-8"?>')
        self._line_break = True

    def start(self, tag: str, attributes: Attributes = ()) -> None:
        self._open_line()
        self._parts.append(f"<{tag}{_format_attributes(attributes)}>")
        self._depth += 1
        self._line_break = True

    def end(self, tag: str) -> None:
        self._depth = max(self._depth - 1, 0)
        self._open_line()
        self._parts.append(f"</{tag}>")
        self._line_break = True

    def empty(self, tag: str, attributes: Attributes = ()) -> None:
        self._open_line()
        self._parts.append(f"<{tag}{_format_attributes(attributes)}/>")
        self._line_break = True

    def text(self, text: str) -> None:
        self._parts.append(_escape(text))
        self._line_break = False

    def indent(self) -> None:
        self._parts.append("\n" + _INDENT * self._depth)

    def getvalue(self) -> str:
        return "".join(self._parts)


def _format_timestamp(timestamp: datetime) -> str:
    offset = timestamp.utcoffset()
    if offset is None:
        raise ValueError("timestamps must carry a UTC offset")
    millis = timestamp.microsecond // 1000
    total_minutes = int(offset.total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return (
        f"{timestamp.year:04d}-{timestamp.month:02d}-{timestamp.day:02d}"
        f"T{timestamp.hour:02d}:{timestamp.minute:02d}:{timestamp.second:02d}"
        f".{millis:03d}{sign}{hours:02d}:{minutes:02d}"
    )


def _format_time(time: timedelta) -> str:
    seconds = time.total_seconds()
    if seconds < 0:
        raise ValueError("durations must not be negative")
    return f"{seconds:.3f}"


def _timing_attributes(
    timestamp: Optional[datetime], time: Optional[timedelta]
) -> list[tuple[str, str]]:
    attributes = []
    if timestamp is not None:
        attributes.append(("timestamp", _format_timestamp(timestamp)))
    if time is not None:
        attributes.append(("time", _format_time(time)))
    return attributes


def _write_output(output: Output, tag: str, writer: _IndentingWriter) -> None:
    writer.start(tag)
    writer.text(output.text)
    writer.end(tag)


def _write_outputs(
    system_out: Optional[Output], system_err: Optional[Output], writer: _IndentingWriter
) -> None:
    if system_out is not None:
        _write_output(system_out, "system-out", writer)
    if system_err is not None:
        _write_output(system_err, "system-err", writer)


def _write_report(report: Report, writer: _IndentingWriter) -> None:
    attributes = [
        ("name", report.name),
        ("tests", str(report.tests)),
        ("failures", str(report.failures)),
        ("errors", str(report.errors)),
    ]
    attributes += _timing_attributes(report.timestamp, report.time)
    writer.start("testsuites", attributes)
    for test_suite in report.test_suites:
        _write_test_suite(test_suite, writer)
    writer.end("testsuites")


def _write_test_suite(test_suite: TestSuite, writer: _IndentingWriter) -> None:
    attributes = [
        ("name", test_suite.name),
        ("tests", str(test_suite.tests)),
        ("disabled", str(test_suite.disabled)),
        ("errors", str(test_suite.errors)),
        ("failures", str(test_suite.failures)),
    ]
    attributes += _timing_attributes(test_suite.timestamp, test_suite.time)
    attributes += test_suite.extra.items()
    writer.start("testsuite", attributes)

    if test_suite.properties:
        writer.start("properties")
        for prop in test_suite.properties:
            _write_property(prop, writer)
        writer.end("properties")

    for test_case in test_suite.test_cases:
        _write_test_case(test_case, writer)

    _write_outputs(test_suite.system_out, test_suite.system_err, writer)
    writer.end("testsuite")


def _write_property(prop: Property, writer: _IndentingWriter) -> None:
    writer.empty("property", [("name", prop.name), ("value", prop.value)])


def _write_test_case(test_case: TestCase, writer: _IndentingWriter) -> None:
    attributes = [("name", test_case.name)]
    if test_case.classname is not None:
        attributes.append(("classname", test_case.classname))
    if test_case.assertions is not None:
        attributes.append(("assertions", str(test_case.assertions)))
    attributes += _timing_attributes(test_case.timestamp, test_case.time)
    attributes += test_case.extra.items()
    writer.start("testcase", attributes)

    _write_test_case_status(test_case.status, writer)

    _write_outputs(test_case.system_out, test_case.system_err, writer)
    writer.end("testcase")


def _write_test_case_status(status: TestCaseStatus, writer: _IndentingWriter) -> None:
    if status.is_success:
        for rerun in status.reruns:
            _write_rerun(rerun, _FLAKY_TAGS, writer)
    elif status.is_skipped:
        _write_status(status, "skipped", writer)
    else:
        _write_status(status, _STATUS_TAGS[status.kind], writer)
        for rerun in status.reruns:
            _write_rerun(rerun, _RERUN_TAGS, writer)


def _write_status(status: TestCaseStatus, tag: str, writer: _IndentingWriter) -> None:
    attributes = []
    if status.message is not None:
        attributes.append(("message", status.message))
    if status.type is not None:
        attributes.append(("type", status.type))

    if status.description is None:
        writer.empty(tag, attributes)
    else:
        writer.start(tag, attributes)
        writer.text(status.description)
        writer.end(tag)


def _write_rerun(
    rerun: TestRerun, tags: dict[NonSuccessKind, str], writer: _IndentingWriter
) -> None:
    tag = tags[rerun.kind]
    attributes = _timing_attributes(rerun.timestamp, rerun.time)
    if rerun.message is not None:
        attributes.append(("message", rerun.message))
    if rerun.type is not None:
        attributes.append(("type", rerun.type))
    writer.start(tag, attributes)

    needs_indent = False
    if rerun.description is not None:
        writer.text(rerun.description)
        needs_indent = True

    # The reference schema orders these as stack trace, standard output, standard error.
    if rerun.stack_trace is not None:
        if needs_indent:
            writer.indent()
            needs_indent = False
        writer.start("stackTrace")
        writer.text(rerun.stack_trace)
        writer.end("stackTrace")

    for output, output_tag in (
        (rerun.system_out, "system-out"),
        (rerun.system_err, "system-err"),
    ):
        if output is None:
            continue
        if needs_indent:
            writer.indent()
            needs_indent = False
        _write_output(output, output_tag, writer)

    writer.end(tag)


def report_to_string(report: Report) -> str:
    """Serialize a report to an XML string, including the declaration and a trailing newline."""
    writer = _IndentingWriter()
    writer.declaration()
    _write_report(report, writer)
    writer.indent()
    return writer.getvalue()


def serialize_report(report: Report, writer: Union[IO[str], IO[bytes]]) -> None:
    """Write a report as XML to a text or binary stream; binary streams receive UTF-8."""
    text = report_to_string(report)
    if isinstance(writer, io.TextIOBase):
        writer.write(text)
    elif isinstance(writer, (io.RawIOBase, io.BufferedIOBase)):
        writer.write(text.encode("utf-8"))
    else:
        try:
            writer.write(text)  # type: ignore[arg-type]
        except TypeError:
            writer.write(text.encode("utf-8"))  # type: ignore[arg-type]