import io
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import pytest

from junitkit.report import (
    NonSuccessKind,
    Property,
    Report,
    TestCase,
    TestCaseStatus,
    TestRerun,
    TestSuite,
)
from junitkit.serialize import report_to_string, serialize_report


def _tz(hours):
    return timezone(timedelta(hours=hours))


def basic_report():
    report = Report("my-test-run")
    report.timestamp = datetime(2021, 4, 1, 10, 52, 37, tzinfo=_tz(-8))
    report.time = timedelta(seconds=42, microseconds=234567.890)

    suite = TestSuite("testsuite0")
    suite.timestamp = datetime(2021, 4, 1, 10, 52, 39, tzinfo=_tz(-8))

    case = TestCase("testcase0", TestCaseStatus.success())
    case.system_out = "testcase0-output"
    suite.add_test_case(case)

    status = TestCaseStatus.non_success(NonSuccessKind.FAILURE)
    status.description = "this is the failure description"
    status.message = "testcase1-message"
    case = TestCase("testcase1", status)
    case.system_err = "some sort of failure output"
    case.time = timedelta(milliseconds=4242)
    suite.add_test_case(case)

    status = TestCaseStatus.non_success(NonSuccessKind.ERROR)
    status.description = "testcase2 error description"
    status.type = "error type"
    case = TestCase("testcase2", status)
    case.time = timedelta(microseconds=421.580)
    suite.add_test_case(case)

    status = TestCaseStatus.skipped()
    status.type = "skipped type"
    status.message = "skipped message"
    case = TestCase("testcase3", status)
    case.timestamp = datetime(2021, 4, 1, 11, 52, 41, tzinfo=_tz(-7))
    case.assertions = 20
    case.system_out = "testcase3 output"
    case.system_err = "testcase3 error"
    suite.add_test_case(case)

    status = TestCaseStatus.success()
    rerun = TestRerun(NonSuccessKind.FAILURE)
    rerun.type = "flaky failure type"
    rerun.description = "this is a flaky failure description"
    status.add_rerun(rerun)
    rerun = TestRerun(NonSuccessKind.ERROR)
    rerun.type = "flaky error type"
    rerun.system_out = "flaky system output"
    rerun.system_err = "flaky system error with \x1b[34mANSI escape codes\x1b[39m"
    rerun.stack_trace = "flaky stack trace"
    rerun.description = "flaky error description"
    status.add_rerun(rerun)
    case = TestCase("testcase4", status)
    case.time = timedelta(milliseconds=661661)
    suite.add_test_case(case)

    status = TestCaseStatus.non_success(NonSuccessKind.FAILURE)
    status.description = "main test failure description"
    rerun = TestRerun(NonSuccessKind.FAILURE)
    rerun.type = "retry failure type"
    status.add_rerun(rerun)
    rerun = TestRerun(NonSuccessKind.ERROR)
    rerun.type = "retry error type"
    rerun.system_out = "retry error system output"
    rerun.stack_trace = "retry error stack trace"
    status.add_rerun(rerun)
    case = TestCase("testcase5", status)
    case.time = timedelta(milliseconds=156)
    suite.add_test_case(case)

    suite.add_property(Property("env", "FOOBAR"))
    report.add_test_suite(suite)
    return report


EXPECTED_BASIC = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="my-test-run" tests="6" failures="2" errors="1" timestamp="2021-04-01T10:52:37.000-08:00" time="42.235">
    <testsuite name="testsuite0" tests="6" disabled="1" errors="1" failures="2" timestamp="2021-04-01T10:52:39.000-08:00">
        <properties>
            <property name="env" value="FOOBAR"/>
        </properties>
        <testcase name="testcase0">
            <system-out>testcase0-output</system-out>
        </testcase>
        <testcase name="testcase1" time="4.242">
            <failure message="testcase1-message">this is the failure description</failure>
            <system-err>some sort of failure output</system-err>
        </testcase>
        <testcase name="testcase2" time="0.000">
            <error type="error type">testcase2 error description</error>
        </testcase>
        <testcase name="testcase3" assertions="20" timestamp="2021-04-01T11:52:41.000-07:00">
            <skipped message="skipped message" type="skipped type"/>
            <system-out>testcase3 output</system-out>
            <system-err>testcase3 error</system-err>
        </testcase>
        <testcase name="testcase4" time="661.661">
            <flakyFailure type="flaky failure type">this is a flaky failure description</flakyFailure>
            <flakyError type="flaky error type">flaky error description
                <stackTrace>flaky stack trace</stackTrace>
                <system-out>flaky system output</system-out>
                <system-err>flaky system error with [34mANSI escape codes[39m</system-err>
            </flakyError>
        </testcase>
        <testcase name="testcase5" time="0.156">
            <failure>main test failure description</failure>
            <rerunFailure type="retry failure type">
            </rerunFailure>
            <rerunError type="retry error type">
                <stackTrace>retry error stack trace</stackTrace>
                <system-out>retry error system output</system-out>
            </rerunError>
        </testcase>
    </testsuite>
</testsuites>
"""

EXPECTED_SIMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="my-test-run" tests="2" failures="1" errors="0">
    <testsuite name="my-test-suite" tests="2" disabled="0" errors="0" failures="1">
        <testcase name="success-case">
        </testcase>
        <testcase name="failure-case">
            <failure/>
        </testcase>
    </testsuite>
</testsuites>
"""


def simple_report():
    report = Report("my-test-run")
    suite = TestSuite("my-test-suite")
    suite.add_test_cases(
        [
            TestCase("success-case", TestCaseStatus.success()),
            TestCase("failure-case", TestCaseStatus.non_success(NonSuccessKind.FAILURE)),
        ]
    )
    report.add_test_suite(suite)
    return report


def test_simple_report_matches_documented_output():
    assert report_to_string(simple_report()) == EXPECTED_SIMPLE


def test_basic_report_fixture():
    assert report_to_string(basic_report()) == EXPECTED_BASIC


def test_basic_report_is_well_formed_xml():
    root = ET.fromstring(report_to_string(basic_report()).encode("utf-8"))
    assert root.tag == "testsuites"
    suite = root.find("testsuite")
    assert [case.get("name") for case in suite.findall("testcase")] == [
        f"testcase{i}" for i in range(6)
    ]
    flaky = suite.findall("testcase")[4].find("flakyError")
    assert flaky.find("stackTrace").text == "flaky stack trace"


def test_serialize_to_text_stream():
    buffer = io.StringIO()
    serialize_report(simple_report(), buffer)
    assert buffer.getvalue() == EXPECTED_SIMPLE


def test_serialize_to_binary_stream():
    buffer = io.BytesIO()
    serialize_report(simple_report(), buffer)
    assert buffer.getvalue() == EXPECTED_SIMPLE.encode("utf-8")


def test_empty_report():
    assert report_to_string(Report("empty")) == (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<testsuites name="empty" tests="0" failures="0" errors="0">\n'
        "</testsuites>\n"
    )


def test_attribute_and_text_escaping():
    status = TestCaseStatus.non_success(NonSuccessKind.ERROR)
    status.message = 'a<b & "c"'
    status.description = "it's > x"
    suite = TestSuite("s")
    suite.add_test_case(TestCase("t", status))
    report = Report("r")
    report.add_test_suite(suite)
    xml = report_to_string(report)
    assert '<error message="a&lt;b &amp; &quot;c&quot;">it&apos;s &gt; x</error>' in xml
    parsed = ET.fromstring(xml.encode("utf-8"))
    error = parsed.find("testsuite/testcase/error")
    assert error.get("message") == 'a<b & "c"'
    assert error.text == "it's > x"


def test_classname_and_extra_attributes_order():
    case = TestCase("t", TestCaseStatus.success(), classname="pkg.mod")
    case.extra["file"] = "mod.py"
    suite = TestSuite("s")
    suite.extra["hostname"] = "localhost"
    suite.add_test_case(case)
    report = Report("r")
    report.add_test_suite(suite)
    xml = report_to_string(report)
    assert '<testcase name="t" classname="pkg.mod" file="mod.py">' in xml
    assert (
        '<testsuite name="s" tests="1" disabled="0" errors="0" failures="0" hostname="localhost">'
        in xml
    )


def test_timestamp_truncates_milliseconds_and_formats_offset():
    report = Report("r")
    report.timestamp = datetime(2022, 1, 2, 3, 4, 5, 123999, tzinfo=timedelta_tz(5, 30))
    xml = report_to_string(report)
    assert 'timestamp="2022-01-02T03:04:05.123+05:30"' in xml


def timedelta_tz(hours, minutes):
    return timezone(timedelta(hours=hours, minutes=minutes))


def test_time_rounds_to_three_decimals():
    report = Report("r")
    report.time = timedelta(milliseconds=1500)
    assert 'time="1.500"' in report_to_string(report)


def test_naive_timestamp_is_rejected():
    report = Report("r")
    report.timestamp = datetime(2021, 4, 1, 10, 52, 37)
    with pytest.raises(ValueError):
        report_to_string(report)


def test_negative_time_is_rejected():
    report = Report("r")
    report.time = timedelta(seconds=-1)
    with pytest.raises(ValueError):
        report_to_string(report)


def test_rerun_with_timing_and_message_attributes():
    rerun = TestRerun(
        NonSuccessKind.FAILURE,
        timestamp=datetime(2021, 4, 1, 0, 0, 0, tzinfo=timezone.utc),
        time=timedelta(seconds=2),
        message="boom",
    )
    status = TestCaseStatus.non_success(NonSuccessKind.ERROR)
    status.add_rerun(rerun)
    suite = TestSuite("s")
    suite.add_test_case(TestCase("t", status))
    report = Report("r")
    report.add_test_suite(suite)
    xml = report_to_string(report)
    assert (
        '<rerunFailure timestamp="2021-04-01T00:00:00.000+00:00" time="2.000" message="boom">'
        in xml
    )
    assert "<error/>" in xml


def test_suite_outputs_follow_test_cases():
    suite = TestSuite("s")
    suite.add_test_case(TestCase("t", TestCaseStatus.success()))
    suite.system_out = "out"
    suite.system_err = b"err\x00"
    report = Report("r")
    report.add_test_suite(suite)
    xml = report_to_string(report)
    assert xml.index("</testcase>") < xml.index("<system-out>out</system-out>")
    assert "<system-err>err</system-err>" in xml