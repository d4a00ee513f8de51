"""Threshold check over a PMD XML results file.

Usage:
    checker = ViolationChecker(verbose=True, fail_on_violation=True)
    checker.check("target/pmd.xml", "violation", "PMD violation", 3)

A violation counts against the build when its ``priority`` is lower than or
equal to the threshold. Lower numbers are more severe; thresholds run
from 0, the strictest, to 5, the loosest.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_PRIORITY = 0
MIN_PRIORITY = 5
DEFAULT_FAILURE_PRIORITY = MIN_PRIORITY

PMD_RESULTS_FILE = "pmd.xml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CheckError(Exception):
    """Base exception for all check errors."""


class ResultsFileError(CheckError):
    """Raised when the results file is missing, unreadable or malformed."""


class ViolationCheckFailure(CheckError):
    """Raised when failing violations were found and the build should stop."""

    def __init__(self, count: int, failure_label: str) -> None:
        self.count = count
        self.failure_label = failure_label
        super().__init__(f"{count} {failure_label} found")


# ---------------------------------------------------------------------------
# Checker
# ---------------------------------------------------------------------------

class ViolationChecker:
    """Count and log the violations of an XML results file."""

    def __init__(
        self,
        tool_name: str = "PMD",
        skip: bool = False,
        verbose: bool = False,
        fail_on_violation: bool = False,
    ) -> None:
        self.tool_name = tool_name
        self.skip = skip
        self.verbose = verbose
        self.fail_on_violation = fail_on_violation

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def check(
        self,
        results_path,
        item_kind: str,
        failure_label: str,
        priority_threshold: int,
    ) -> bool:
        """Return True when at least one ``item_kind`` element is failing.

        Args:
            results_path:       XML results file written by the analyzer.
            item_kind:          Element name of one violation (``"violation"``).
                                Also used as the severity word of failing lines.
            failure_label:      Wording of the failure summary, e.g.
                                ``"PMD violation"``.
            priority_threshold: Least severe priority that still fails.

        Raises:
            ResultsFileError:      the file is missing or cannot be parsed.
            ViolationCheckFailure: violations were found and
                                   ``fail_on_violation`` is set.
        """
        if self.skip:
            return False

        count = self.count_violations(results_path, item_kind, priority_threshold)
        if count and self.fail_on_violation:
            raise ViolationCheckFailure(count, failure_label)
        return count > 0

    def check_pmd(
        self,
        target_directory,
        failure_priority: int = DEFAULT_FAILURE_PRIORITY,
        results_file: str = PMD_RESULTS_FILE,
    ) -> bool:
        """Run :meth:`check` against ``<target_directory>/pmd.xml``."""
        return self.check(
            Path(target_directory) / results_file,
            "violation",
            "PMD violation",
            failure_priority,
        )

    def count_violations(self, results_path, item_kind: str, priority_threshold: int) -> int:
        """Stream *results_path*, log each reported violation and return the failing count."""
        path = Path(results_path)
        if not path.exists():
            raise ResultsFileError(f"Unable to perform check, unable to find {path}")

        count = 0
        try:
            with path.open("rb") as f:
                events = ET.iterparse(f, events=("start", "end"))
                _, root = next(events)
                depth = 1
                for event, element in events:
                    if event == "start":
                        depth += 1
                        continue
                    depth -= 1

                    if _local_name(element.tag) == item_kind:
                        record = self.extract_record(element)
                        element.clear()

                        if _priority(record, path) <= priority_threshold:
                            count += 1
                            self.report_details(record, item_kind)
                        elif self.verbose:
                            self.report_details(record, "warning")

                    # a direct child of the root is complete
                    if depth == 1:
                        root.clear()
        except ET.ParseError as exc:
            raise ResultsFileError(f"Failed to parse '{path}': {exc}") from exc
        except OSError as exc:
            raise ResultsFileError(f"Unable to read '{path}': {exc}") from exc

        logger.debug("%d failing %s(s) in %s", count, item_kind, path)
        return count

    @staticmethod
    def extract_record(element: ET.Element) -> dict[str, str]:
        """Return the attributes of *element* plus its leading text.

        The text node directly after the start tag, if any, is stored
        stripped under ``"text"``. Text after a child element is ignored.
        """
        record = dict(element.attrib)
        if element.text is not None:
            record["text"] = element.text.strip()
        return record

    def report_details(self, record: dict[str, str], severity: str) -> None:
        """Log one line describing *record*."""
        if "class" in record:
            location = record["class"]
            if "package" in record:
                location = f"{record['package']}.{location}"
        else:
            location = record.get("filename", "")

        logger.info(
            "%s %s: %s:%s Rule:%s Priority:%s %s.",
            self.tool_name,
            severity,
            location,
            record.get("beginline", ""),
            record.get("rule", ""),
            record.get("priority", ""),
            record.get("text", ""),
        )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1]


def _priority(record: dict[str, str], path: Path) -> int:
    value = record.get("priority")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ResultsFileError(
            f"Invalid or missing priority {value!r} in '{path}'"
        ) from None
