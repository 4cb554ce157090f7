# File: scaffoldgen/reader.py
"""
scaffoldgen - Tabular Reader
============================

Parses one delimited-text schema file into an ordered stream of
``{header: value}`` records.

Contract:
    - Lazy: records are produced while the file is read, in file order.
    - Header names are trimmed and lower-cased; values are trimmed.
    - Blank lines and ``#`` comment lines are skipped.
    - A row whose field count differs from the header raises
      ``MalformedRowError`` carrying the physical line number.
    - Undecodable bytes and csv parser failures raise
      ``UnreadableInputError``, also with the line number.
    - An empty file is a valid "zero records" result.
"""

from __future__ import annotations

import codecs
import csv
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from scaffoldgen.errors import InputNotFoundError, MalformedRowError, UnreadableInputError

logger: logging.Logger = logging.getLogger("scaffoldgen.reader")

Record = Dict[str, str]

# Suffix → delimiter; anything else is read as CSV.
_DELIMITERS: Dict[str, str] = {
    ".csv": ",",
    ".tsv": "\t",
    ".tab": "\t",
}


def delimiter_for(path: Path) -> str:
    """Infer the field delimiter from the file suffix."""
    return _DELIMITERS.get(path.suffix.lower(), ",")


def _is_skippable(row: List[str]) -> bool:
    if not row or all(not cell.strip() for cell in row):
        return True
    return row[0].lstrip().startswith("#")


def _undecodable_line(path: Path) -> int:
    """Physical line holding the first byte sequence that is not UTF-8."""
    raw: bytes = path.read_bytes()
    if raw.startswith(codecs.BOM_UTF8):
        raw = raw[len(codecs.BOM_UTF8):]
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        return raw.count(b"\n", 0, exc.start) + 1
    return 0


def read_records(
    path: Union[str, Path],
    delimiter: Optional[str] = None,
) -> Iterator[Record]:
    """
    Yield one record per data row of *path*.

    Args:
        path: File to read (UTF-8, optional BOM).
        delimiter: Field separator; inferred from the suffix when omitted.

    Raises:
        InputNotFoundError: *path* does not exist.
        MalformedRowError: a row has the wrong number of fields.
        UnreadableInputError: the file is not UTF-8 or not parseable.
    """
    file_path: Path = Path(path)
    if not file_path.is_file():
        raise InputNotFoundError(file_path)

    sep: str = delimiter or delimiter_for(file_path)
    logger.debug("Reading %s (delimiter=%r).", file_path, sep)

    with open(file_path, "r", encoding="utf-8-sig", newline="") as fh:
        reader = csv.reader(fh, delimiter=sep)
        header: Optional[List[str]] = None
        count: int = 0

        try:
            for row in reader:
                if _is_skippable(row):
                    continue

                if header is None:
                    header = [cell.strip().lower() for cell in row]
                    continue

                if len(row) != len(header):
                    raise MalformedRowError(
                        file_path, reader.line_num, len(header), len(row)
                    )

                count += 1
                yield {key: value.strip() for key, value in zip(header, row)}
        except UnicodeDecodeError as exc:
            raise UnreadableInputError(
                file_path, _undecodable_line(file_path), "not valid UTF-8 text"
            ) from exc
        except csv.Error as exc:
            raise UnreadableInputError(file_path, reader.line_num, str(exc)) from exc

    logger.debug("Read %d record(s) from %s.", count, file_path.name)


def read_all(path: Union[str, Path], delimiter: Optional[str] = None) -> List[Record]:
    """Eager convenience wrapper around ``read_records``."""
    return list(read_records(path, delimiter))


__all__: List[str] = [
    "Record",
    "delimiter_for",
    "read_records",
    "read_all",
]

logger.debug("scaffoldgen.reader loaded.")
