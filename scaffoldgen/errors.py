# File: scaffoldgen/errors.py
"""
scaffoldgen - Exception Taxonomy
================================

Every failure the pipeline can raise derives from ``ScaffoldError`` so the
orchestrator can catch one type and turn it into a failed report.

Two families:

* ``InputNotFoundError`` — the schema-input directory or the required
  columns file is absent.  Also a ``FileNotFoundError``.
* ``SchemaInputError`` — the inputs exist but cannot be turned into a
  valid ``SchemaDocument``.  Also a ``ValueError``.

``ConfigError`` stands apart: the generation settings file is broken.
``ArtifactPathConflictError`` is raised after derivation, when two
documents of one run would write different content to the same file.

All of them are fatal for the invocation: no artifact descriptor is ever
derived from a document that failed to assemble.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

logger: logging.Logger = logging.getLogger("scaffoldgen.errors")


class ScaffoldError(Exception):
    """Root of every scaffoldgen failure."""

    code: str = "SCAFFOLD_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self)}


# ---------------------------------------------------------------------------
# Missing input
# ---------------------------------------------------------------------------


class InputNotFoundError(ScaffoldError, FileNotFoundError):
    """The schema-input directory (or a required file in it) is absent."""

    code = "INPUT_NOT_FOUND"

    def __init__(self, path: Union[str, Path], message: Optional[str] = None) -> None:
        self.path: str = str(path)
        super().__init__(message or f"Schema input not found: {self.path}")

    def __str__(self) -> str:
        return self.args[0]


class MissingRequiredInputError(InputNotFoundError):
    """The ``{name}_columns`` file is absent (the only hard dependency)."""

    code = "MISSING_REQUIRED_INPUT"

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(path, f"Columns file not found: {path}")


# ---------------------------------------------------------------------------
# Invalid input
# ---------------------------------------------------------------------------


class SchemaInputError(ScaffoldError, ValueError):
    """Base for parse and validation failures of the tabular inputs."""

    code = "SCHEMA_INPUT_ERROR"


class MalformedRowError(SchemaInputError):
    """A row's field count does not match the header's field count."""

    code = "MALFORMED_ROW"

    def __init__(self, path: Union[str, Path], line: int, expected: int, actual: int) -> None:
        self.path: str = str(path)
        self.line: int = line
        self.expected: int = expected
        self.actual: int = actual
        super().__init__(
            f"{self.path}:{line}: expected {expected} field(s), got {actual}."
        )


class UnreadableInputError(SchemaInputError):
    """The file is not valid UTF-8 or cannot be parsed as delimited text."""

    code = "UNREADABLE_INPUT"

    def __init__(self, path: Union[str, Path], line: int, reason: str) -> None:
        self.path: str = str(path)
        self.line: int = line
        self.reason: str = reason
        super().__init__(f"{self.path}:{line}: {reason}")


class DuplicateColumnError(SchemaInputError):
    code = "DUPLICATE_COLUMN"

    def __init__(self, name: str) -> None:
        self.name: str = name
        super().__init__(f"Column '{name}' is declared more than once.")


class UnknownColumnTypeError(SchemaInputError):
    code = "UNKNOWN_COLUMN_TYPE"

    def __init__(self, column: str, token: str) -> None:
        self.column: str = column
        self.token: str = token
        super().__init__(f"Column '{column}' has unknown type '{token}'.")


class DanglingPrimaryKeyColumnError(SchemaInputError):
    """A composite primary key lists a column the columns input lacks."""

    code = "DANGLING_PRIMARY_KEY_COLUMN"

    def __init__(self, missing: Sequence[str], available: Sequence[str]) -> None:
        self.missing: List[str] = list(missing)
        self.available: List[str] = list(available)
        super().__init__(
            f"Primary key column(s) {self.missing} not found in columns input. "
            f"Available columns: {self.available}"
        )


class UnknownColumnReferenceError(SchemaInputError):
    """An index (or other secondary input) names an undeclared column."""

    code = "UNKNOWN_COLUMN_REFERENCE"

    def __init__(self, source: str, column: str) -> None:
        self.source: str = source
        self.column: str = column
        super().__init__(f"{source} references undeclared column '{column}'.")


class InvalidValueError(SchemaInputError):
    """A cell holds a value that cannot be interpreted."""

    code = "INVALID_VALUE"


class ConfigError(ScaffoldError, ValueError):
    """The configuration file is unreadable or holds invalid settings."""

    code = "CONFIG_ERROR"


class DuplicateDocumentError(SchemaInputError):
    """Two requests in one run resolve to the same (table, api version)."""

    code = "DUPLICATE_DOCUMENT"

    def __init__(self, table_name: str, api_version: Optional[str]) -> None:
        self.table_name: str = table_name
        self.api_version: Optional[str] = api_version
        super().__init__(
            f"Table '{table_name}' (api version: {api_version or 'default'}) "
            f"is requested more than once in this run."
        )


class ArtifactPathConflictError(ScaffoldError):
    """Two documents in one run render different content to the same path."""

    code = "ARTIFACT_PATH_CONFLICT"

    def __init__(self, path: str, first: str, second: str) -> None:
        self.path: str = path
        self.documents: List[str] = [first, second]
        super().__init__(
            f"'{path}' is rendered differently by '{first}' and '{second}'; "
            f"generate them in separate runs."
        )


__all__: List[str] = [
    "ScaffoldError",
    "InputNotFoundError",
    "MissingRequiredInputError",
    "SchemaInputError",
    "MalformedRowError",
    "UnreadableInputError",
    "DuplicateColumnError",
    "UnknownColumnTypeError",
    "DanglingPrimaryKeyColumnError",
    "UnknownColumnReferenceError",
    "InvalidValueError",
    "DuplicateDocumentError",
    "ArtifactPathConflictError",
    "ConfigError",
]

logger.debug("scaffoldgen.errors loaded — %d public symbols.", len(__all__))
