"""Mutation engine: atomic batches of edits against positional sections.

All indices in a batch refer to the collection *before* the batch. Deletes
act simultaneously, so an update's landing slot is its original index minus
the number of deletions below it. A delete and an update aimed at the same
original index resolve in favour of the delete.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import ValidationError as PydanticValidationError

from resume_agents.errors import EditIndexError, ValidationError
from resume_agents.models.edits import EditAction, EditOperation
from resume_agents.models.resume import SECTION_ENTRY_TYPES, ResumeDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class MutationResult(Generic[T]):
    items: list[T]
    changes: list[str] = field(default_factory=list)


def _describe(op: EditOperation) -> list[str]:
    if op.changes:
        return list(op.changes)
    section = op.target_collection.value
    if op.action is EditAction.DELETE:
        return [f"Removed {section} entry #{op.target_index + 1}"]
    if op.is_append:
        return [f"Added {section} entry"]
    return [f"Updated {section} entry #{op.target_index + 1}"]


def _dedupe(lines: list[str]) -> list[str]:
    return list(dict.fromkeys(line for line in lines if line))


def validate_indices(size: int, ops: Sequence[EditOperation]) -> None:
    """Raise EditIndexError for the first out-of-range target index."""
    valid_range = (0, size - 1) if size else None
    for op in ops:
        if op.target_index is None:
            continue
        if not 0 <= op.target_index < size:
            raise EditIndexError(op.target_index, valid_range)


def apply_edits(collection: Sequence[T], ops: Sequence[EditOperation]) -> MutationResult[T]:
    """Apply ``ops`` to a copy of ``collection``; the input is never touched."""
    if not ops:
        return MutationResult(items=list(collection))

    deletions = [op for op in ops if op.action is EditAction.DELETE]
    updates = [op for op in ops if op.action is EditAction.UPDATE and op.target_index is not None]
    appends = [op for op in ops if op.is_append]

    validate_indices(len(collection), deletions + updates)

    deleted = sorted({op.target_index for op in deletions}, reverse=True)
    deleted_set = set(deleted)

    surviving_updates = []
    for op in updates:
        if op.target_index in deleted_set:
            logger.info(
                "Dropping update to %s[%d]: the same batch deletes it",
                op.target_collection.value, op.target_index,
            )
            continue
        surviving_updates.append(op)

    working = list(collection)
    for index in deleted:
        del working[index]

    for op in surviving_updates:
        shift = sum(1 for d in deleted if d < op.target_index)
        working[op.target_index - shift] = op.payload

    for op in appends:
        working.append(op.payload)

    changes: list[str] = []
    seen_deletes: set[int] = set()
    for op in ops:
        if op.action is EditAction.DELETE:
            if op.target_index in seen_deletes and not op.changes:
                continue
            seen_deletes.add(op.target_index)
        elif op.target_index is not None and op.target_index in deleted_set:
            continue
        changes.extend(_describe(op))

    return MutationResult(items=working, changes=_dedupe(changes))


def coerce_payload(op: EditOperation) -> EditOperation:
    """Validate an update payload against the section's entry type."""
    if op.action is EditAction.DELETE:
        return op
    entry_type = SECTION_ENTRY_TYPES[op.target_collection.value]
    payload: Any = op.payload
    if isinstance(payload, entry_type):
        return op
    try:
        entry = entry_type.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Invalid {op.target_collection.value} entry in edit operation: {exc.error_count()} error(s)"
        ) from exc
    return op.model_copy(update={"payload": entry})


def apply_to_document(
    doc: ResumeDocument, ops: Sequence[EditOperation]
) -> tuple[ResumeDocument, list[str]]:
    """Apply a batch that may span several sections, all or nothing."""
    if not ops:
        return doc, []

    coerced = [coerce_payload(op) for op in ops]
    grouped: dict[str, list[EditOperation]] = {}
    for op in coerced:
        grouped.setdefault(op.target_collection.value, []).append(op)

    # Validate every section before computing any result.
    for section, section_ops in grouped.items():
        validate_indices(len(getattr(doc, section)), section_ops)

    updates: dict[str, list] = {}
    changes: list[str] = []
    for section, section_ops in grouped.items():
        result = apply_edits(getattr(doc, section), section_ops)
        updates[section] = result.items
        changes.extend(result.changes)

    return doc.model_copy(update=updates, deep=True), _dedupe(changes)
