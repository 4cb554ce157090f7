# File: scaffoldgen/mode.py
"""
scaffoldgen - Generation Mode Resolver
======================================
Tags an assembled document as ``create`` (fresh table, required
semantics) or ``alter`` (incremental change, optional-if-present
semantics for every field).
"""

from __future__ import annotations

import logging
from typing import List

from scaffoldgen.errors import InvalidValueError
from scaffoldgen.models import GenerationMode, SchemaDocument

logger: logging.Logger = logging.getLogger("scaffoldgen.mode")


def resolve_mode(document: SchemaDocument, alter: bool) -> SchemaDocument:
    """
    Return a copy of *document* tagged with the requested mode.

    Raises:
        InvalidValueError: a create request marks a column as ``change``;
            a fresh table has no existing column to modify.
    """
    mode: GenerationMode = GenerationMode.ALTER if alter else GenerationMode.CREATE

    if mode == GenerationMode.CREATE:
        changed: List[str] = [c.name for c in document.columns if c.change]
        if changed:
            raise InvalidValueError(
                f"Column(s) {changed} are marked 'change' but '{document.table_name}' "
                f"is being created; use alter mode."
            )

    logger.debug("Resolved %s as %s.", document.table_name, mode.value)
    return document.model_copy(update={"mode": mode.value})


__all__: List[str] = ["resolve_mode"]

logger.debug("scaffoldgen.mode loaded.")
