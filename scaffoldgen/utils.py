# File: scaffoldgen/utils.py
"""
scaffoldgen - Utility Functions & Helpers
=========================================
String-case transforms, English inflection, atomic file writes and the
step ``Timer`` shared by the generation pipeline.

- Case and inflection functions are pure and cached with
  ``@lru_cache(maxsize=None)``; the naming engine calls them once per
  artifact kind for the same handful of table names.
- Inflection only touches the *last* snake segment, so
  ``favorite_points`` → ``favorite_point``.
- File writes go through a temp file in the target directory and
  ``os.replace`` so a crash never leaves a half-written artifact.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("scaffoldgen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_ACRONYM_BOUNDARY_RE: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY_RE: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]+")

# Irregular nouns that show up as table names.
_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "datum": "data",
    "index": "indices",
    "matrix": "matrices",
    "status": "statuses",
    "address": "addresses",
    "leaf": "leaves",
    "knife": "knives",
    "life": "lives",
    "wife": "wives",
    "half": "halves",
    "shelf": "shelves",
}
_IRREGULAR_SINGULARS: Dict[str, str] = {v: k for k, v in _IRREGULAR_PLURALS.items()}

# Words that are the same in both numbers.
_UNCOUNTABLE: Tuple[str, ...] = (
    "equipment",
    "information",
    "metadata",
    "news",
    "series",
    "species",
)


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _words(name: str) -> Tuple[str, ...]:
    """Split any casing style into lower-case words."""
    s: str = _ACRONYM_BOUNDARY_RE.sub(r"\1 \2", name)
    s = _WORD_BOUNDARY_RE.sub(r"\1 \2", s)
    s = _NON_ALPHANUM_RE.sub(" ", s)
    return tuple(w.lower() for w in s.split())


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Examples:
        >>> to_snake_case("FavoritePoint")
        'favorite_point'
        >>> to_snake_case("favorite-points")
        'favorite_points'
    """
    return "_".join(_words(name))


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Examples:
        >>> to_pascal_case("favorite_point")
        'FavoritePoint'
    """
    return "".join(w.capitalize() for w in _words(name))


@functools.lru_cache(maxsize=None)
def to_kebab_case(name: str) -> str:
    """URL-friendly form, e.g. ``favorite_points`` → ``favorite-points``."""
    return "-".join(_words(name))


# ---------------------------------------------------------------------------
# Inflection
# ---------------------------------------------------------------------------


def _split_last(name: str) -> Tuple[str, str]:
    head, sep, last = name.rpartition("_")
    return head + sep, last


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Pluralise the last snake segment of *name*.

    Examples:
        >>> to_plural("favorite_point")
        'favorite_points'
        >>> to_plural("category")
        'categories'
    """
    if not name:
        return ""
    head, word = _split_last(name)
    lower: str = word.lower()

    if lower in _UNCOUNTABLE or lower in _IRREGULAR_SINGULARS:
        return name
    if lower in _IRREGULAR_PLURALS:
        return head + _IRREGULAR_PLURALS[lower]

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        return name + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    return name + "s"


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """
    Singularise the last snake segment of *name*.

    Examples:
        >>> to_singular("favorite_points")
        'favorite_point'
        >>> to_singular("addresses")
        'address'
    """
    if not name:
        return ""
    head, word = _split_last(name)
    lower: str = word.lower()

    if lower in _UNCOUNTABLE or lower in _IRREGULAR_PLURALS:
        return name
    if lower in _IRREGULAR_SINGULARS:
        return head + _IRREGULAR_SINGULARS[lower]

    if lower.endswith("ies") and len(lower) > 3:
        return name[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes")):
        return name[:-2]
    if lower.endswith("s") and not lower.endswith(("ss", "us", "is")):
        return name[:-1]
    return name


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str) -> int:
    """
    Atomically write *content* (UTF-8) to *path*.

    The data goes to a temporary sibling first and is moved into place
    with ``os.replace``.

    Returns:
        Number of bytes written.
    """
    ensure_directory(path.parent)
    encoded: bytes = content.encode("utf-8")

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    if not content:
        return 0
    return content.count("\n") + (0 if content.endswith("\n") else 1)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for pipeline steps.

    Usage:
        with Timer("assemble") as t:
            ...
        t.elapsed_ms
    """

    __slots__ = ("label", "start_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.elapsed: float = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        logger.debug("Timer [%s]: %.2f ms", self.label, self.elapsed_ms)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed_ms:.2f}ms>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_snake_case",
    "to_pascal_case",
    "to_kebab_case",
    "to_plural",
    "to_singular",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("scaffoldgen.utils loaded — %d public symbols.", len(__all__))
