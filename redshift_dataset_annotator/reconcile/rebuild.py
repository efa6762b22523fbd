"""Flatten operation buckets back into one ordered operation list."""

from redshift_dataset_annotator.operations import TransformOperation
from redshift_dataset_annotator.reconcile.classifier import OperationBuckets


def rebuild(buckets: OperationBuckets) -> list[TransformOperation]:
    """Concatenate buckets in the fixed order:
    rename, cast, tag, untag, create-columns, filter, project, other.

    Keyed buckets keep dict insertion order, so an unchanged input
    produces the same list on every run.
    """
    operations: list[TransformOperation] = []
    operations.extend(buckets.renames.values())
    operations.extend(buckets.casts.values())
    operations.extend(buckets.tags.values())
    operations.extend(buckets.untags.values())
    operations.extend(buckets.create_columns)
    operations.extend(buckets.filters)
    operations.extend(buckets.projects)
    operations.extend(buckets.others)
    return operations
