"""Decide the rename operation for one physical column."""

from dataclasses import dataclass

from redshift_dataset_annotator.logging_config import get_logger
from redshift_dataset_annotator.models import ColumnAnnotation
from redshift_dataset_annotator.operations import RenameColumnOperation
from redshift_dataset_annotator.reconcile.classifier import OperationBuckets
from redshift_dataset_annotator.reconcile.policy import Decision, resolve

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenameOutcome:
    """Where the column's name moved from and to in this pass.

    old_column_name is the name other operations currently use for the
    column; logical_column_name is the name they must use afterwards.
    """

    physical_column_name: str
    old_column_name: str
    logical_column_name: str
    changed: bool = False

    @property
    def moved(self) -> bool:
        return self.old_column_name != self.logical_column_name


def _current_name(existing: RenameColumnOperation | None, physical: str) -> str:
    # A blank rename target leaves the column under its physical name.
    if existing is None or not existing.new_column_name.strip():
        return physical
    return existing.new_column_name


def resolve_rename(
    buckets: OperationBuckets,
    annotation: ColumnAnnotation,
    force_rename: bool,
    table_id: str = "",
) -> RenameOutcome:
    """Introduce, keep or overwrite the rename for annotation.column_name."""
    physical = annotation.column_name
    existing = buckets.renames.get(physical)

    if annotation.name is None:
        current = _current_name(existing, physical)
        return RenameOutcome(physical, current, current)

    requested = annotation.name
    decision = resolve(
        existing.new_column_name if existing is not None else None,
        requested,
        force_rename,
    )

    if decision is Decision.INTRODUCE:
        buckets.renames[physical] = RenameColumnOperation(
            column_name=physical, new_column_name=requested
        )
        logger.info(
            "rename_column_introduced",
            column=physical,
            new_name=requested,
            logical_table=table_id,
        )
        return RenameOutcome(physical, physical, requested, changed=True)

    assert existing is not None
    if decision is Decision.OVERWRITE:
        previous = _current_name(existing, physical)
        existing.new_column_name = requested
        logger.info(
            "rename_column_rewritten",
            column=physical,
            old_name=previous,
            new_name=requested,
            logical_table=table_id,
        )
        return RenameOutcome(physical, previous, requested, changed=True)

    logger.debug(
        "rename_column_kept",
        column=physical,
        current_name=existing.new_column_name,
        requested_name=requested,
        logical_table=table_id,
    )
    return RenameOutcome(physical, existing.new_column_name, existing.new_column_name)
