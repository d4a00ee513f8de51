"""Localized report text.

Usage:
    bundle = load_bundle()                   # built-in English strings
    bundle = load_bundle("cpd-fr.yaml")      # defaults overridden from YAML
    title  = get_string(bundle, "report.cpd.title")
"""

from pathlib import Path

import yaml


class BundleError(Exception):
    """Raised when a string table cannot be loaded or lacks a key."""


DEFAULT_BUNDLE: dict[str, str] = {
    "report.cpd.title": "CPD Report",
    "report.cpd.cpdlink": "The following document contains the results of",
    "report.cpd.dupes": "Duplications",
    "report.cpd.noProblems": "CPD found no problems in your source code.",
    "report.cpd.column.file": "File",
    "report.cpd.column.project": "Project",
    "report.cpd.column.line": "Line",
}


def load_bundle(path: str | None = None) -> dict[str, str]:
    """Return the default strings, overridden by the YAML mapping at *path*.

    Raises:
        BundleError: if the file is missing, malformed, or not a flat
                     mapping of strings.
    """
    bundle = dict(DEFAULT_BUNDLE)
    if path is None:
        return bundle

    bundle_path = Path(path)
    if not bundle_path.exists():
        raise BundleError(f"Bundle file not found: '{path}'")

    try:
        with bundle_path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise BundleError(f"Failed to parse '{path}': {exc}") from exc

    if raw is None:
        return bundle
    if not isinstance(raw, dict):
        raise BundleError(f"'{path}' must be a YAML mapping at the top level.")

    bundle.update({str(k): str(v) for k, v in raw.items()})
    return bundle


def get_string(bundle, key: str) -> str:
    try:
        return bundle[key]
    except KeyError:
        raise BundleError(f"Missing bundle key '{key}'") from None
