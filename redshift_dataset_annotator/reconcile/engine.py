"""Reconcile one logical table's transform operations with column annotations.

The pass runs classify -> resolve renames -> cascade -> merge descriptions
-> rebuild on deep copies of its inputs. Nothing the caller holds is
mutated; the caller commits TableReconciliation.data_transforms and
.column_level_permission_rules only after the whole pass succeeded.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from redshift_dataset_annotator.logging_config import get_logger
from redshift_dataset_annotator.models import ColumnAnnotations
from redshift_dataset_annotator.operations import parse_operations, to_wire
from redshift_dataset_annotator.reconcile.cascade import cascade_rename
from redshift_dataset_annotator.reconcile.classifier import classify
from redshift_dataset_annotator.reconcile.descriptions import merge_description
from redshift_dataset_annotator.reconcile.policy import ReconcilePolicy
from redshift_dataset_annotator.reconcile.rebuild import rebuild
from redshift_dataset_annotator.reconcile.renames import RenameOutcome, resolve_rename

logger = get_logger(__name__)


@dataclass
class TableReconciliation:
    """Result of reconciling one logical table."""

    logical_table_id: str
    data_transforms: list[dict[str, Any]]
    column_level_permission_rules: list[dict[str, Any]]
    changed: bool = False
    renames: list[RenameOutcome] = field(default_factory=list)


def reconcile_logical_table(
    data_transforms: list[dict[str, Any]],
    column_names: list[str],
    annotations: ColumnAnnotations,
    policy: ReconcilePolicy,
    column_level_permission_rules: list[dict[str, Any]] | None = None,
    logical_table_id: str = "",
) -> TableReconciliation:
    """Compute the new DataTransforms list for one logical table.

    Args:
        data_transforms: Wire-format transform operations of the logical table.
        column_names: Physical input column names, in table order. Annotations
            for columns not listed here are ignored.
        annotations: Physical column name -> requested name/description.
        policy: Force flags for renames and descriptions.
        column_level_permission_rules: Dataset-level rules; a rewritten copy is
            returned, the argument itself is not modified.
        logical_table_id: Used for log context only.

    Raises:
        MalformedOperationError: If a known operation kind fails validation.
    """
    rules = copy.deepcopy(column_level_permission_rules or [])
    buckets = classify(parse_operations(copy.deepcopy(data_transforms)), logical_table_id)
    changed = False
    outcomes: list[RenameOutcome] = []

    for column_name in column_names:
        annotation = annotations.get(column_name)
        if annotation is None:
            logger.debug("column_not_annotated", column=column_name, logical_table=logical_table_id)
            continue

        outcome = resolve_rename(buckets, annotation, policy.force_rename, logical_table_id)
        outcomes.append(outcome)
        changed |= outcome.changed

        if outcome.moved:
            changed |= cascade_rename(
                buckets,
                outcome.old_column_name,
                outcome.logical_column_name,
                rules,
                logical_table_id,
            )

        if annotation.description is None:
            logger.debug("column_without_description", column=column_name, logical_table=logical_table_id)
            continue

        changed |= merge_description(
            buckets,
            outcome.logical_column_name,
            annotation.description,
            policy.force_update_description,
            logical_table_id,
        )

    logger.debug(
        "transform_operations_rebuilt",
        logical_table=logical_table_id,
        changed=changed,
        **buckets.counts(),
    )
    return TableReconciliation(
        logical_table_id=logical_table_id,
        data_transforms=to_wire(rebuild(buckets)),
        column_level_permission_rules=rules,
        changed=changed,
        renames=outcomes,
    )
