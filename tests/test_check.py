"""Tests for pmd_report/check.py"""

import logging
import textwrap
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from pmd_report.check import (
    ResultsFileError,
    ViolationCheckFailure,
    ViolationChecker,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

FOO_VIOLATION = """\
    <violation beginline="7" endline="7" begincolumn="5" endcolumn="12"
               rule="UnusedVar" ruleset="Unused Code Rules" package="com.x"
               class="Foo" method="bar" variable="x" priority="3">
    x unused
    </violation>
"""

BAR_VIOLATION = """\
    <violation beginline="12" endline="12" rule="EmptyCatchBlock"
               ruleset="Basic Rules" package="com.x" class="Bar" priority="1">
    Avoid empty catch blocks
    </violation>
"""


def write_results(tmp_path: Path, *violations: str, name: str = "pmd.xml") -> Path:
    body = "".join(textwrap.dedent(v) for v in violations)
    p = tmp_path / name
    p.write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<pmd version="4.2.5" timestamp="2010-04-30T21:42:59.000">\n'
        '<file name="/src/com/x/Foo.java">\n'
        f"{body}"
        "</file>\n"
        "</pmd>\n",
        encoding="utf-8",
    )
    return p


def _element(xml: str) -> ET.Element:
    return ET.fromstring(textwrap.dedent(xml))


@pytest.fixture
def log(caplog):
    caplog.set_level(logging.INFO, logger="pmd_report.check")
    return caplog


def _lines(caplog) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]


# ---------------------------------------------------------------------------
# check(): threshold
# ---------------------------------------------------------------------------

def test_violation_at_or_below_threshold_fails(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION)
    failed = ViolationChecker().check(p, "violation", "PMD violation", 5)
    assert failed is True
    assert _lines(log) == ["PMD violation: com.x.Foo:7 Rule:UnusedVar Priority:3 x unused."]


def test_priority_equal_to_threshold_fails(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION)
    assert ViolationChecker().check(p, "violation", "PMD violation", 3) is True


def test_violation_above_threshold_passes(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION)
    failed = ViolationChecker().check(p, "violation", "PMD violation", 2)
    assert failed is False
    assert _lines(log) == []


def test_verbose_logs_warnings(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION, BAR_VIOLATION)
    failed = ViolationChecker(verbose=True).check(p, "violation", "PMD violation", 2)
    assert failed is True
    assert _lines(log) == [
        "PMD warning: com.x.Foo:7 Rule:UnusedVar Priority:3 x unused.",
        "PMD violation: com.x.Bar:12 Rule:EmptyCatchBlock Priority:1 Avoid empty catch blocks.",
    ]


def test_count_violations(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION, BAR_VIOLATION, BAR_VIOLATION)
    checker = ViolationChecker()
    assert checker.count_violations(p, "violation", 5) == 3
    assert checker.count_violations(p, "violation", 1) == 2
    assert checker.count_violations(p, "violation", 0) == 0


def test_threshold_zero_fails_only_priority_zero(tmp_path, log):
    p = write_results(tmp_path, BAR_VIOLATION, '<violation rule="R" class="Z" priority="0">t</violation>\n')
    assert ViolationChecker().count_violations(p, "violation", 0) == 1
    assert _lines(log) == ["PMD violation: Z: Rule:R Priority:0 t."]


def test_no_violations_passes(tmp_path, log):
    p = write_results(tmp_path)
    assert ViolationChecker().check(p, "violation", "PMD violation", 5) is False


def test_only_matching_elements_are_counted(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION)
    assert ViolationChecker().check(p, "error", "PMD error", 5) is False
    assert _lines(log) == []


def test_namespaced_results_file(tmp_path, log):
    p = tmp_path / "pmd.xml"
    p.write_text(
        '<pmd xmlns="http://pmd.sourceforge.net/report/2.0.0" version="6.55.0">'
        '<file name="/src/Foo.java">'
        '<violation beginline="1" rule="R" class="Foo" priority="2">msg</violation>'
        "</file></pmd>",
        encoding="utf-8",
    )
    assert ViolationChecker().check(p, "violation", "PMD violation", 5) is True
    assert _lines(log) == ["PMD violation: Foo:1 Rule:R Priority:2 msg."]


def test_violations_across_several_files(tmp_path, log):
    p = tmp_path / "pmd.xml"
    p.write_text(
        '<pmd version="4.2.5">'
        '<file name="/src/A.java">'
        '<violation beginline="1" rule="R" class="A" priority="1">a1</violation>'
        '<violation beginline="2" rule="R" class="A" priority="4">a2</violation>'
        "</file>"
        '<file name="/src/B.java">'
        '<violation beginline="3" rule="R" class="B" priority="2">b1</violation>'
        "</file>"
        '<file name="/src/C.java"/>'
        "</pmd>",
        encoding="utf-8",
    )
    assert ViolationChecker(verbose=True).count_violations(p, "violation", 3) == 2
    assert _lines(log) == [
        "PMD violation: A:1 Rule:R Priority:1 a1.",
        "PMD warning: A:2 Rule:R Priority:4 a2.",
        "PMD violation: B:3 Rule:R Priority:2 b1.",
    ]


def test_finished_file_elements_are_released(tmp_path, monkeypatch, log):
    p = write_results(tmp_path, FOO_VIOLATION, BAR_VIOLATION)
    roots = []
    iterparse = ET.iterparse

    def recording_iterparse(source, events=None):
        for event, element in iterparse(source, events=events):
            if not roots:
                roots.append(element)
            yield event, element

    monkeypatch.setattr(ET, "iterparse", recording_iterparse)
    assert ViolationChecker().count_violations(p, "violation", 5) == 2
    assert len(roots[0]) == 0


def test_empty_results_file(tmp_path):
    p = tmp_path / "pmd.xml"
    p.write_text("", encoding="utf-8")
    with pytest.raises(ResultsFileError, match="Failed to parse"):
        ViolationChecker().check(p, "violation", "PMD violation", 5)


# ---------------------------------------------------------------------------
# check(): skip / fail_on_violation
# ---------------------------------------------------------------------------

def test_skip_reads_nothing(tmp_path, log):
    missing = tmp_path / "does-not-exist.xml"
    failed = ViolationChecker(skip=True, fail_on_violation=True).check(
        missing, "violation", "PMD violation", 5
    )
    assert failed is False
    assert log.records == []


def test_skip_ignores_failing_file(tmp_path, log):
    p = write_results(tmp_path, BAR_VIOLATION)
    assert ViolationChecker(skip=True).check(p, "violation", "PMD violation", 5) is False
    assert log.records == []


def test_fail_on_violation_raises_summary(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION, BAR_VIOLATION)
    checker = ViolationChecker(fail_on_violation=True)
    with pytest.raises(ViolationCheckFailure, match="2 PMD violation found") as excinfo:
        checker.check(p, "violation", "PMD violation", 5)
    assert excinfo.value.count == 2
    assert excinfo.value.failure_label == "PMD violation"
    assert len(_lines(log)) == 2


def test_fail_on_violation_passes_when_nothing_fails(tmp_path, log):
    p = write_results(tmp_path, FOO_VIOLATION)
    checker = ViolationChecker(fail_on_violation=True)
    assert checker.check(p, "violation", "PMD violation", 2) is False


def test_check_pmd_reads_target_directory(tmp_path, log):
    write_results(tmp_path, FOO_VIOLATION)
    assert ViolationChecker().check_pmd(tmp_path, failure_priority=3) is True
    assert ViolationChecker().check_pmd(tmp_path, failure_priority=2) is False


# ---------------------------------------------------------------------------
# check(): malformed input
# ---------------------------------------------------------------------------

def test_missing_results_file(tmp_path):
    with pytest.raises(ResultsFileError, match="unable to find"):
        ViolationChecker().check(tmp_path / "pmd.xml", "violation", "PMD violation", 5)


def test_malformed_xml(tmp_path):
    p = tmp_path / "pmd.xml"
    p.write_text("<pmd><file><violation priority='1'></file>", encoding="utf-8")
    with pytest.raises(ResultsFileError, match="Failed to parse"):
        ViolationChecker().check(p, "violation", "PMD violation", 5)


@pytest.mark.parametrize("attrs", ['rule="R"', 'rule="R" priority="high"'])
def test_invalid_priority(tmp_path, attrs):
    p = write_results(tmp_path, f"<violation {attrs}>text</violation>\n")
    with pytest.raises(ResultsFileError, match="priority"):
        ViolationChecker().check(p, "violation", "PMD violation", 5)


# ---------------------------------------------------------------------------
# extract_record()
# ---------------------------------------------------------------------------

def test_extract_record_reads_attributes_and_trimmed_text():
    record = ViolationChecker.extract_record(_element(FOO_VIOLATION))
    assert record["class"] == "Foo"
    assert record["package"] == "com.x"
    assert record["beginline"] == "7"
    assert record["priority"] == "3"
    assert record["text"] == "x unused"


def test_extract_record_keeps_attribute_case():
    record = ViolationChecker.extract_record(
        _element('<violation Rule="A" rule="b" priority="1"/>')
    )
    assert record == {"Rule": "A", "rule": "b", "priority": "1"}


def test_extract_record_without_text():
    record = ViolationChecker.extract_record(_element('<violation priority="1"/>'))
    assert "text" not in record


def test_extract_record_ignores_text_after_child():
    record = ViolationChecker.extract_record(
        _element('<violation priority="1"><detail/>trailing</violation>')
    )
    assert "text" not in record


# ---------------------------------------------------------------------------
# report_details()
# ---------------------------------------------------------------------------

def test_report_details_without_package(log):
    ViolationChecker().report_details(
        {"class": "Foo", "beginline": "3", "rule": "R", "priority": "2", "text": "t"},
        "violation",
    )
    assert _lines(log) == ["PMD violation: Foo:3 Rule:R Priority:2 t."]


def test_report_details_falls_back_to_filename(log):
    ViolationChecker().report_details(
        {"filename": "/src/Foo.java", "package": "com.x", "beginline": "9",
         "rule": "R", "priority": "4", "text": "t"},
        "warning",
    )
    assert _lines(log) == ["PMD warning: /src/Foo.java:9 Rule:R Priority:4 t."]


def test_report_details_uses_tool_name(log):
    ViolationChecker(tool_name="CPD").report_details(
        {"class": "Foo", "beginline": "1", "rule": "R", "priority": "1", "text": "t"},
        "violation",
    )
    assert _lines(log)[0].startswith("CPD violation: ")
