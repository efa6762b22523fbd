"""Partition a logical table's transform operations into typed buckets.

Single-column operations (rename, cast, tag, untag) are keyed by the column
they act on; create-columns, filter and project keep their relative order;
anything else lands in ``others`` untouched.
"""

from dataclasses import dataclass, field

from redshift_dataset_annotator.logging_config import get_logger
from redshift_dataset_annotator.operations import (
    CastColumnTypeOperation,
    CreateColumnsOperation,
    FilterOperation,
    OtherOperation,
    ProjectOperation,
    RenameColumnOperation,
    TagColumnOperation,
    TransformOperation,
    UntagColumnOperation,
)

logger = get_logger(__name__)


@dataclass
class OperationBuckets:
    """Working state of one logical table during reconciliation."""

    renames: dict[str, RenameColumnOperation] = field(default_factory=dict)
    casts: dict[str, CastColumnTypeOperation] = field(default_factory=dict)
    tags: dict[str, TagColumnOperation] = field(default_factory=dict)
    untags: dict[str, UntagColumnOperation] = field(default_factory=dict)
    create_columns: list[CreateColumnsOperation] = field(default_factory=list)
    filters: list[FilterOperation] = field(default_factory=list)
    projects: list[ProjectOperation] = field(default_factory=list)
    others: list[OtherOperation] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "rename": len(self.renames),
            "cast": len(self.casts),
            "tag": len(self.tags),
            "untag": len(self.untags),
            "create_columns": len(self.create_columns),
            "filter": len(self.filters),
            "project": len(self.projects),
            "other": len(self.others),
        }


def _put(bucket: dict, op, table_id: str) -> None:
    if op.column_name in bucket:
        logger.warning(
            "duplicate_column_operation",
            kind=op.kind.value,
            column=op.column_name,
            logical_table=table_id,
        )
    bucket[op.column_name] = op


def classify(operations: list[TransformOperation], table_id: str = "") -> OperationBuckets:
    """Partition operations into buckets. Duplicate keys: last one wins."""
    buckets = OperationBuckets()
    for op in operations:
        if isinstance(op, RenameColumnOperation):
            _put(buckets.renames, op, table_id)
        elif isinstance(op, CastColumnTypeOperation):
            _put(buckets.casts, op, table_id)
        elif isinstance(op, TagColumnOperation):
            _put(buckets.tags, op, table_id)
        elif isinstance(op, UntagColumnOperation):
            _put(buckets.untags, op, table_id)
        elif isinstance(op, CreateColumnsOperation):
            buckets.create_columns.append(op)
        elif isinstance(op, FilterOperation):
            buckets.filters.append(op)
        elif isinstance(op, ProjectOperation):
            buckets.projects.append(op)
        else:
            logger.warning(
                "unknown_transform_operation_kept",
                operation=op.name,
                logical_table=table_id,
            )
            buckets.others.append(op)
    return buckets
