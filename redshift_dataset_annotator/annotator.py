"""Annotate a QuickSight dataset with Redshift column comments.

One call to Annotator.annotate() is one run:

1. DescribeDataSet and copy it into an UpdateDataSet request.
2. For every relational physical table on a Redshift data source, fetch
   the column annotations once and reconcile every logical table built
   on it.
3. Submit UpdateDataSet if anything changed (unless dry run).

A failing data source only skips its own physical table; a failing
logical table is left as it was. Errors describing or updating the
dataset itself propagate unchanged and nothing is submitted.
"""

import json
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

from redshift_dataset_annotator.dataset import build_update_input, data_source_ref
from redshift_dataset_annotator.errors import (
    InvalidArnError,
    MalformedAnnotationError,
    MalformedOperationError,
    NotFoundError,
    SourceUnavailableError,
    TransportError,
    UnsupportedSourceTypeError,
)
from redshift_dataset_annotator.logging_config import get_logger
from redshift_dataset_annotator.models import ColumnAnnotations, RelationalTable
from redshift_dataset_annotator.protocols import AnnotationSourceProtocol, QuickSightProtocol
from redshift_dataset_annotator.reconcile import ReconcilePolicy, reconcile_logical_table

logger = get_logger(__name__)

REDSHIFT_SOURCE_TYPE = "REDSHIFT"

# Errors that skip one physical table instead of aborting the run.
_SOURCE_ERRORS = (
    SourceUnavailableError,
    UnsupportedSourceTypeError,
    MalformedAnnotationError,
    InvalidArnError,
    NotFoundError,
    TransportError,
)


@dataclass
class AnnotateOptions:
    data_set_id: str
    dry_run: bool = False
    force_rename: bool = False
    force_update_description: bool = False
    verbose: bool = False

    @property
    def policy(self) -> ReconcilePolicy:
        return ReconcilePolicy(
            force_rename=self.force_rename,
            force_update_description=self.force_update_description,
        )


@dataclass
class AnnotateResult:
    """Outcome of one annotate run."""

    data_set_id: str
    need_update: bool = False
    update_input: dict[str, Any] = field(default_factory=dict)
    submitted: bool = False
    ingestion_id: str | None = None
    skipped_physical_tables: dict[str, str] = field(default_factory=dict)
    skipped_logical_tables: dict[str, str] = field(default_factory=dict)


class Annotator:
    """Runs annotate against a QuickSight API and an annotation source.

    Data source descriptions and column annotations are memoized per run
    and never invalidated within it.
    """

    def __init__(
        self,
        quicksight: QuickSightProtocol,
        annotation_source: AnnotationSourceProtocol,
        account_id: str,
        out: TextIO | None = None,
    ):
        self._quicksight = quicksight
        self._annotation_source = annotation_source
        self._account_id = account_id
        self._out = out or sys.stdout
        self._data_sources: dict[str, dict[str, Any]] = {}
        self._annotations: dict[tuple[str, str, str], ColumnAnnotations] = {}

    def annotate(self, options: AnnotateOptions) -> AnnotateResult:
        """Run one reconciliation of `options.data_set_id`.

        Raises:
            NotFoundError, RemoteConflictError, TransportError: From
                DescribeDataSet or UpdateDataSet, unmodified.
        """
        self._data_sources.clear()
        self._annotations.clear()

        if options.dry_run:
            logger.info("dry_run_start", data_set_id=options.data_set_id)

        update_input = self._load_update_input(options.data_set_id)
        result = AnnotateResult(data_set_id=options.data_set_id, update_input=update_input)
        policy = options.policy

        for physical_table_id, physical_table in (update_input.get("PhysicalTableMap") or {}).items():
            logger.debug("physical_table_found", physical_table=physical_table_id)
            table = RelationalTable.from_physical_table(physical_table)
            if table is None:
                logger.debug("physical_table_not_relational", physical_table=physical_table_id)
                continue

            try:
                annotations = self._fetch_annotations(table)
            except _SOURCE_ERRORS as e:
                logger.warning(
                    "physical_table_skipped",
                    physical_table=physical_table_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                result.skipped_physical_tables[physical_table_id] = str(e)
                continue
            if annotations is None:
                result.skipped_physical_tables[physical_table_id] = "data source is not redshift"
                continue

            result.need_update |= self._apply(
                update_input, physical_table_id, table, annotations, policy, result
            )

        if not result.need_update:
            logger.info("no_changes_skip_update", data_set_id=options.data_set_id)
            if options.dry_run:
                logger.info("dry_run_end", data_set_id=options.data_set_id)
            return result

        if options.verbose:
            print(json.dumps(update_input, indent=2, ensure_ascii=False, default=str), file=self._out)

        if options.dry_run:
            logger.info("dry_run_end", data_set_id=options.data_set_id)
            return result

        response = self._quicksight.update_data_set(update_input)
        result.submitted = True
        result.ingestion_id = response.get("IngestionId")
        logger.info(
            "data_set_updated",
            data_set_id=options.data_set_id,
            ingestion_id=result.ingestion_id or "",
        )
        return result

    def _load_update_input(self, data_set_id: str) -> dict[str, Any]:
        response = self._quicksight.describe_data_set(self._account_id, data_set_id)
        status = response.get("Status", 200)
        if status != 200:
            raise TransportError(f"unexpected data set status: {status}")
        data_set = response["DataSet"]
        logger.debug("data_set_described", arn=data_set.get("Arn", ""), name=data_set.get("Name", ""))
        return build_update_input(data_set)

    def _describe_data_source(self, data_source_arn: str) -> dict[str, Any]:
        if data_source_arn not in self._data_sources:
            account_id, data_source_id = data_source_ref(data_source_arn)
            self._data_sources[data_source_arn] = self._quicksight.describe_data_source(
                account_id, data_source_id
            )
        return self._data_sources[data_source_arn]

    def _fetch_annotations(self, table: RelationalTable) -> ColumnAnnotations | None:
        """Annotations for `table`, or None if its data source is not Redshift."""
        data_source = self._describe_data_source(table.data_source_arn)
        source_type = data_source.get("Type", "")
        if source_type != REDSHIFT_SOURCE_TYPE:
            logger.debug(
                "data_source_not_redshift",
                data_source=table.data_source_arn,
                type=source_type,
            )
            return None

        key = table.cache_key()
        if key not in self._annotations:
            logger.debug(
                "column_annotations_fetch",
                table=table.qualified_name,
                data_source=table.data_source_arn,
            )
            self._annotations[key] = self._annotation_source.fetch_column_annotations(
                data_source, table
            )
        return self._annotations[key]

    def _apply(
        self,
        update_input: dict[str, Any],
        physical_table_id: str,
        table: RelationalTable,
        annotations: ColumnAnnotations,
        policy: ReconcilePolicy,
        result: AnnotateResult,
    ) -> bool:
        changed = False
        for logical_table_id, logical_table in (update_input.get("LogicalTableMap") or {}).items():
            source = logical_table.get("Source") or {}
            if source.get("PhysicalTableId") != physical_table_id:
                continue
            logger.debug(
                "logical_table_found",
                logical_table=logical_table_id,
                physical_table=physical_table_id,
            )
            try:
                reconciled = reconcile_logical_table(
                    logical_table.get("DataTransforms") or [],
                    table.column_names,
                    annotations,
                    policy,
                    update_input.get("ColumnLevelPermissionRules"),
                    logical_table_id,
                )
            except MalformedOperationError as e:
                logger.warning(
                    "logical_table_skipped",
                    logical_table=logical_table_id,
                    error=str(e),
                )
                result.skipped_logical_tables[logical_table_id] = str(e)
                continue

            if reconciled.data_transforms or "DataTransforms" in logical_table:
                logical_table["DataTransforms"] = reconciled.data_transforms
            if "ColumnLevelPermissionRules" in update_input:
                update_input["ColumnLevelPermissionRules"] = reconciled.column_level_permission_rules
            changed |= reconciled.changed
        return changed
