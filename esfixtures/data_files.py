"""Loading of fixture data files (.json, .ndjson, .jsonl)."""

import json
from pathlib import Path
from typing import Any, Union

from .exceptions import DataFileError

JSON_SUFFIXES = {".json"}
LINE_SUFFIXES = {".ndjson", ".jsonl"}


def resolve_data_path(raw_path: Union[str, Path]) -> Path:
    """Resolve a data file path; relative paths are taken from the cwd."""
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def load_data_file(raw_path: Union[str, Path]) -> Any:
    """Read a fixture data file.

    ``.json`` files hold any JSON value (a list of documents, a bulk entry
    list, index settings...). ``.ndjson``/``.jsonl`` files hold one JSON
    value per non-empty line and are returned as a list.

    Raises:
        DataFileError: If the file is missing, has an unknown extension or
            contains invalid JSON
    """
    path = resolve_data_path(raw_path)
    suffix = path.suffix.lower()
    if suffix not in JSON_SUFFIXES | LINE_SUFFIXES:
        raise DataFileError(
            f"Unsupported data file type {suffix or '(none)'}: {path.name} "
            f"(expected .json, .ndjson or .jsonl)"
        )
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DataFileError(f"Data file not found: {path}") from e
    except OSError as e:
        raise DataFileError(f"Cannot read data file {path}: {e}") from e

    if suffix in JSON_SUFFIXES:
        try:
            return json.loads(text)
        except ValueError as e:
            raise DataFileError(f"Invalid JSON in {path.name}: {e}") from e

    values = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            values.append(json.loads(line))
        except ValueError as e:
            raise DataFileError(f"Invalid JSON in {path.name} line {line_no}: {e}") from e
    return values
