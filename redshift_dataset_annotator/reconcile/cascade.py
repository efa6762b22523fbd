"""Propagate a column rename into every operation that references the old name.

Expression rewriting (create-columns, filter) is a literal substring
replace, not an expression-aware rewrite: ``amt`` -> ``amount`` also turns
``amt_total`` into ``amount_total``. Keyed and list references (cast, tag,
untag, project, column-level permission rules) only match exact names.
"""

from typing import Any

from redshift_dataset_annotator.logging_config import get_logger
from redshift_dataset_annotator.reconcile.classifier import OperationBuckets

logger = get_logger(__name__)


def _rekey(bucket: dict, old: str, new: str, kind: str, table_id: str) -> bool:
    op = bucket.pop(old, None)
    if op is None:
        return False
    if new in bucket:
        logger.warning(
            "column_operation_overwritten",
            kind=kind,
            column=new,
            logical_table=table_id,
        )
    op.column_name = new
    bucket[new] = op
    logger.debug("column_operation_rekeyed", kind=kind, old_name=old, new_name=new, logical_table=table_id)
    return True


def rewrite_permission_rules(rules: list[dict[str, Any]], old: str, new: str) -> bool:
    """Rename exact matches in each ColumnLevelPermissionRule's ColumnNames, in place."""
    changed = False
    for rule in rules:
        names = rule.get("ColumnNames") or []
        for i, name in enumerate(names):
            if name == old:
                names[i] = new
                changed = True
                logger.debug("permission_rule_column_renamed", index=i, old_name=old, new_name=new)
    return changed


def cascade_rename(
    buckets: OperationBuckets,
    old: str,
    new: str,
    permission_rules: list[dict[str, Any]] | None = None,
    table_id: str = "",
) -> bool:
    """Rewrite references to `old` as `new`. Returns True if anything changed."""
    if not old or old == new:
        return False

    changed = False
    changed |= _rekey(buckets.casts, old, new, "cast", table_id)
    changed |= _rekey(buckets.tags, old, new, "tag", table_id)
    changed |= _rekey(buckets.untags, old, new, "untag", table_id)

    for op in buckets.create_columns:
        for column in op.columns:
            if old in column.expression:
                column.expression = column.expression.replace(old, new)
                changed = True
                logger.debug(
                    "create_column_expression_rewritten",
                    column=column.column_name,
                    expression=column.expression,
                    logical_table=table_id,
                )

    for op in buckets.filters:
        if op.condition_expression and old in op.condition_expression:
            op.condition_expression = op.condition_expression.replace(old, new)
            changed = True
            logger.debug(
                "filter_expression_rewritten",
                expression=op.condition_expression,
                logical_table=table_id,
            )

    for op in buckets.projects:
        for i, name in enumerate(op.projected_columns):
            if name == old:
                op.projected_columns[i] = new
                changed = True
                logger.debug("projected_column_renamed", index=i, old_name=old, new_name=new, logical_table=table_id)

    if permission_rules:
        changed |= rewrite_permission_rules(permission_rules, old, new)

    return changed
