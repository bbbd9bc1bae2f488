# junitkit

`junitkit` builds JUnit/XUnit XML reports, the format most CI systems and test
dashboards read. It also carries the small pieces a test runner needs to keep
track of a run: per-attempt execution results, flaky and retried tests, run
statistics, stopwatches, output-format selection and Ctrl-C handling.

The package has no runtime dependencies beyond the standard library.

## Building a report

A `Report` holds `TestSuite`s, and each suite holds `TestCase`s. The outcome
of a test case is a `TestCaseStatus`: a success, a non-success (a failure or
an error, see `NonSuccessKind`) or a skip.

```python
from junitkit.report import NonSuccessKind, Report, TestCase, TestCaseStatus, TestSuite
from junitkit.serialize import report_to_string

report = Report("my-test-run")
suite = TestSuite("my-test-suite")
suite.add_test_cases([
    TestCase("success-case", TestCaseStatus.success()),
    TestCase("failure-case", TestCaseStatus.non_success(NonSuccessKind.FAILURE)),
])
report.add_test_suite(suite)

print(report_to_string(report), end="")
```

which prints

```xml
<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="my-test-run" tests="2" failures="1" errors="0">
    <testsuite name="my-test-suite" tests="2" disabled="0" errors="0" failures="1">
        <testcase name="success-case">
        </testcase>
        <testcase name="failure-case">
            <failure/>
        </testcase>
    </testsuite>
</testsuites>
```

Use `add_test_case` / `add_test_cases` and `add_test_suite` /
`add_test_suites` rather than appending to the lists yourself: they keep the
`tests`, `failures`, `errors` and `disabled` counts up to date.

`serialize_report` writes the same XML to a stream. Text streams receive
the string; binary streams receive it encoded as UTF-8:

```python
from junitkit.serialize import serialize_report

with open("junit.xml", "w", encoding="utf-8") as fh:
    serialize_report(report, fh)
```

### What the report can hold

- Timestamps and durations on reports, suites, cases and reruns. Timestamps
  are `datetime` values that must carry a UTC offset. They are written in
  RFC 3339 form with milliseconds, for example
  `2021-04-01T10:52:37.000-08:00`. Durations are `timedelta` values written
  as seconds with three decimals. A naive timestamp or a negative duration
  raises `ValueError` when the report is serialized.
- Standard output and standard error as `Output` values. You can assign a
  `str`, `bytes` or `Output` to `system_out` / `system_err`; it is converted
  to `Output`. Control characters that XML does not allow are removed, for
  example the escape byte of ANSI colour codes. Tab, newline and carriage
  return are kept. `Output.from_bytes` decodes raw bytes as UTF-8, replacing
  invalid sequences.
- Status details. `TestCaseStatus` has `message`, `type` and `description`.
  Setting them on a success has no effect. The description becomes the text
  of the `failure`, `error` or `skipped` element.
- Suite properties, added with `add_property` or `add_properties`. Each one
  is a `Property` or a `(name, value)` tuple. Suites and test cases can also
  carry extra attributes in their `extra` dict.
- Reruns as `TestRerun` values. On a successful test they become
  `flakyFailure` / `flakyError` elements; on a failed test they become
  `rerunFailure` / `rerunError`. Attach them with `TestCaseStatus.add_rerun`
  or `add_reruns`; skipped tests ignore them. A rerun may hold a message,
  type, description, stack trace and its own output.

Special characters in attribute values and text are escaped.

## Tracking a test run

- `junitkit.results`
  - `ExecutionResult` is `PASS`, `FAIL` or `EXEC_FAIL`.
  - `ExecuteStatus` holds one attempt: attempt number, total attempts,
    result, start time, time taken, stdout and stderr.
  - `ExecutionStatuses` holds every attempt of a test and is never empty.
  - `ExecutionStatuses.describe()` returns a `SuccessDescription` (one
    passing run), a `FlakyDescription` (passed after earlier failures) or a
    `FailureDescription` (every run failed).
- `junitkit.stats`
  - `RunStats` counts passed, flaky, failed, failed-to-execute and skipped
    tests.
  - `RunStats.on_test_finished` records a finished test by the result of its
    last attempt.
  - `RunStats.is_success()` is false if any test failed or could not run, or
    if fewer tests ran than were expected.
- `junitkit.stopwatch`
  - `StopwatchStart.now()` records a UTC wall-clock start and a monotonic
    reference.
  - `elapsed()` returns the time since then.
  - `end()` returns a `StopwatchEnd` with the start time and the duration.
- `junitkit.output_format`
  - `OutputFormat.parse` accepts `plain`, `json` and `json-pretty` (see
    `OutputFormat.variants()`) and raises `OutputFormatParseError`, a
    `ValueError`, for anything else.
  - `OutputFormat.serializable` gives the matching `SerializableFormat`, or
    `None` for plain.
  - `SerializableFormat.to_writer` writes a JSON-serializable value, compact
    or indented by two spaces, to a text or binary stream.
- `junitkit.signals`
  - `SignalHandler.install()` installs a SIGINT handler that queues
    `SignalEvent.INTERRUPTED`. Only one may be installed at a time; a second
    call raises `SignalHandlerError`.
  - `receive(timeout)` returns the next event, or `None` on timeout.
  - `close()`, or leaving a `with` block, restores the previous handler.
  - `SignalHandler.noop()` never produces events; its `receive` returns
    `None` at once.

## What it does not do

`junitkit` has no command-line tool. It does not discover, list or run tests
itself, and it does not read JUnit XML back in. It provides the report model,
the XML writer and the bookkeeping types for a runner built on top of it.

## Running the tests

```
pip install -e ".[test]"
pytest
```