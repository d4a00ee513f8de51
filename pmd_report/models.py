"""Data models shared by the CPD report and the violation check.

Contains dataclasses describing the output of an external CPD run:
    - Mark      one location of a duplicate (file + line)
    - Match     two marks sharing a code snippet
    - FileInfo  source root / xref / project metadata for a source file
"""

import os
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Mark:
    source_id: str
    begin_line: int


@dataclass(frozen=True)
class Match:
    first_mark: Mark
    second_mark: Mark
    source_code_slice: str
    line_count: int = 0


@dataclass(frozen=True)
class FileInfo:
    source_directory: str
    xref_location: str | None = None
    project_id: str = ""
    project_name: str = ""


def normalize_path(path) -> str:
    """Return the key used for *path* in a file map."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def build_file_map(entries: Iterable[tuple[str, FileInfo]]) -> dict[str, FileInfo]:
    """Build a ``{absolute path: FileInfo}`` mapping from ``(path, info)`` pairs.

    Keys are normalized with :func:`normalize_path`; a later entry for the
    same path replaces an earlier one.
    """
    return {normalize_path(path): info for path, info in entries}
