"""Reconciliation engine: merge column annotations into transform operations.

Usage:
    from redshift_dataset_annotator.reconcile import ReconcilePolicy, reconcile_logical_table
"""

from redshift_dataset_annotator.reconcile.cascade import cascade_rename
from redshift_dataset_annotator.reconcile.classifier import OperationBuckets, classify
from redshift_dataset_annotator.reconcile.descriptions import merge_description
from redshift_dataset_annotator.reconcile.engine import TableReconciliation, reconcile_logical_table
from redshift_dataset_annotator.reconcile.policy import Decision, ReconcilePolicy, resolve
from redshift_dataset_annotator.reconcile.rebuild import rebuild
from redshift_dataset_annotator.reconcile.renames import RenameOutcome, resolve_rename

__all__ = [
    "Decision",
    "OperationBuckets",
    "ReconcilePolicy",
    "RenameOutcome",
    "TableReconciliation",
    "cascade_rename",
    "classify",
    "merge_description",
    "rebuild",
    "reconcile_logical_table",
    "resolve",
    "resolve_rename",
]
