"""CPD (copy/paste detector) report generator.

Usage:
    generator = CpdReportGenerator(sink, file_map, load_bundle(), aggregate=True)
    generator.generate(matches)      # writes the whole report, then closes sink

Each duplicate becomes one table: a header row, one row per location and a
last row holding the duplicated code.
"""

import logging
import os
from typing import Iterable, Mapping

from pmd_report.bundle import get_string
from pmd_report.models import FileInfo, Mark, Match, normalize_path
from pmd_report.sink import Sink

logger = logging.getLogger(__name__)

CPD_URL = "http://pmd.sourceforge.net/cpd.html"
DEFAULT_PMD_VERSION = "4.2.5"


class UnknownSourceFileError(Exception):
    """Raised when a match points at a file missing from the file map."""


class CpdReportGenerator:
    """Render CPD matches through a :class:`~pmd_report.sink.Sink`."""

    def __init__(
        self,
        sink: Sink,
        file_map: Mapping[str, FileInfo],
        bundle: Mapping[str, str],
        aggregate: bool = False,
        source_extension: str = ".java",
        pmd_version: str = DEFAULT_PMD_VERSION,
    ) -> None:
        self.sink = sink
        self.file_map = file_map
        self.bundle = bundle
        self.aggregate = aggregate
        self.source_extension = source_extension
        self.pmd_version = pmd_version

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def begin_document(self) -> None:
        """Write the document head, the introduction and open the duplicates section."""
        sink = self.sink
        title = self._string("report.cpd.title")

        sink.head()
        sink.title()
        sink.text(title)
        sink.title_end()
        sink.head_end()

        sink.body()

        sink.section()
        sink.section_title()
        sink.text(title)
        sink.section_title_end()

        sink.paragraph()
        sink.text(self._string("report.cpd.cpdlink") + " ")
        sink.link(CPD_URL)
        sink.text("CPD")
        sink.link_end()
        sink.text(f" {self.pmd_version}.")
        sink.paragraph_end()

        sink.section_end()

        sink.section()
        sink.section_title()
        sink.text(self._string("report.cpd.dupes"))
        sink.section_title_end()

    def generate(self, matches: Iterable[Match]) -> None:
        """Write the full report for *matches* and close the sink.

        Matches are rendered in the order given. An empty iterable yields a
        single "no problems" paragraph.

        Raises:
            UnknownSourceFileError: a match refers to a file with no
                                    ``FileInfo`` entry.
        """
        self.begin_document()

        count = 0
        for match in matches:
            self._write_match(match)
            count += 1

        if count == 0:
            self.sink.paragraph()
            self.sink.text(self._string("report.cpd.noProblems"))
            self.sink.paragraph_end()

        logger.debug("CPD report written with %d duplication(s)", count)

        self.sink.section_end()
        self.sink.body_end()
        self.sink.flush()
        self.sink.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_match(self, match: Match) -> None:
        sink = self.sink
        sides = [
            (mark, self._file_info(mark.source_id))
            for mark in (match.first_mark, match.second_mark)
        ]

        sink.table()

        sink.table_row()
        self._header_cell("report.cpd.column.file")
        if self.aggregate:
            self._header_cell("report.cpd.column.project")
        self._header_cell("report.cpd.column.line")
        sink.table_row_end()

        for mark, info in sides:
            self._write_mark(mark, info)

        sink.table_row()
        sink.table_cell(colspan=3 if self.aggregate else 2)
        sink.verbatim()
        sink.text(match.source_code_slice)
        sink.verbatim_end()
        sink.table_cell_end()
        sink.table_row_end()

        sink.table_end()

    def _write_mark(self, mark: Mark, info: FileInfo) -> None:
        sink = self.sink
        filename = relative_name(normalize_path(mark.source_id), info.source_directory)

        sink.table_row()

        sink.table_cell()
        sink.text(filename)
        sink.table_cell_end()

        if self.aggregate:
            sink.table_cell()
            sink.text(info.project_name)
            sink.table_cell_end()

        sink.table_cell()
        if info.xref_location is not None:
            sink.link(self.xref_link(info.xref_location, filename, mark.begin_line))
            sink.text(str(mark.begin_line))
            sink.link_end()
        else:
            sink.text(str(mark.begin_line))
        sink.table_cell_end()

        sink.table_row_end()

    def xref_link(self, xref_location: str, filename: str, line: int) -> str:
        """Return the cross-reference URL for *line* of *filename*."""
        if self.source_extension and filename.endswith(self.source_extension):
            filename = filename[: -len(self.source_extension)] + ".html"
        filename = filename.replace("\\", "/")
        return f"{xref_location}/{filename}#{line}"

    def _file_info(self, source_id: str) -> FileInfo:
        info = self.file_map.get(normalize_path(source_id))
        if info is None:
            raise UnknownSourceFileError(
                f"No source file information for '{source_id}'"
            )
        return info

    def _header_cell(self, key: str) -> None:
        self.sink.table_header_cell()
        self.sink.text(self._string(key))
        self.sink.table_header_cell_end()

    def _string(self, key: str) -> str:
        return get_string(self.bundle, key)


def relative_name(path: str, source_directory: str) -> str:
    """Strip *source_directory* and the following separator from *path*.

    Only the length of the source root is used, so overlapping roots are
    not disambiguated: whichever ``FileInfo`` the file map returns wins.
    """
    root = os.path.join(os.path.abspath(os.fspath(source_directory)), "")
    return path[len(root):]
