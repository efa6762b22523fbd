"""Merge a requested column description into the column's tag operation."""

from redshift_dataset_annotator.logging_config import get_logger
from redshift_dataset_annotator.operations import (
    ColumnDescription,
    ColumnTag,
    TagColumnOperation,
)
from redshift_dataset_annotator.reconcile.classifier import OperationBuckets
from redshift_dataset_annotator.reconcile.policy import Decision, resolve

logger = get_logger(__name__)


def merge_description(
    buckets: OperationBuckets,
    column_name: str,
    description: str,
    force_update_description: bool,
    table_id: str = "",
) -> bool:
    """Apply `description` to the tag operation of logical column `column_name`.

    Only the first description-carrying tag entry is considered; other tag
    entries (geographic roles, later descriptions) are left alone.

    Returns:
        True if the tag operation was created or modified.
    """
    new_entry = ColumnTag(column_description=ColumnDescription(text=description))

    op = buckets.tags.get(column_name)
    if op is None:
        buckets.tags[column_name] = TagColumnOperation(
            column_name=column_name, tags=[new_entry]
        )
        logger.info("column_description_added", column=column_name, logical_table=table_id)
        return True

    entry = op.first_description_tag()
    if entry is None:
        op.tags.append(new_entry)
        logger.info("column_description_appended", column=column_name, logical_table=table_id)
        return True

    # first_description_tag() guarantees column_description is set
    current = (entry.column_description.text or "").strip()  # type: ignore[union-attr]
    decision = resolve(current, description, force_update_description)
    if decision is Decision.KEEP:
        logger.debug("column_description_kept", column=column_name, logical_table=table_id)
        return False

    entry.column_description.text = description  # type: ignore[union-attr]
    logger.info(
        "column_description_updated",
        column=column_name,
        was_blank=not current,
        logical_table=table_id,
    )
    return True
