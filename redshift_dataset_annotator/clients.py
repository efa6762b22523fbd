"""Concrete implementations of external service protocols.

These classes implement the protocols defined in protocols.py using boto3:
QuickSight for datasets and data sources, the Redshift Data API for
column comments. botocore errors are translated into the exceptions of
redshift_dataset_annotator.errors at this boundary.

For unit testing, use the fakes in tests/fakes.py instead.
"""

import time
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from redshift_dataset_annotator.config import settings
from redshift_dataset_annotator.errors import (
    MalformedAnnotationError,
    NotFoundError,
    RemoteConflictError,
    SourceUnavailableError,
    TransportError,
    UnsupportedSourceTypeError,
)
from redshift_dataset_annotator.logging_config import get_logger
from redshift_dataset_annotator.models import ColumnAnnotation, ColumnAnnotations, RelationalTable
from redshift_dataset_annotator.profiles import Profiles, resolve_connection

logger = get_logger(__name__)

# First comment line is the logical name, the rest is the description.
COLUMN_COMMENTS_SQL = """
with comments as (
    select
        schemaname
        ,relname as tablename
        ,attname as columnname
        ,trim('\\n' from description) as comment
    from pg_stat_user_tables, pg_attribute
    left join pg_description colcom ON pg_attribute.attnum = colcom.objsubid and pg_attribute.attrelid = colcom.objoid
    where pg_attribute.attrelid = pg_stat_user_tables.relid
)
select
    columnname as column_name
    ,trim(split_part(comment,'\\n',1)) as name
    ,case when strpos(comment,'\\n') > 0 then nullif(trim(substring(comment from strpos(comment,'\\n')+1 )),'') end as description
from comments
where schemaname = :schema
    and tablename = :table
"""

_NOT_FOUND_CODES = {"ResourceNotFoundException"}
_CONFLICT_CODES = {"ConflictException", "ResourceExistsException", "ConcurrentUpdatingException"}


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


def _translate_quicksight_error(operation: str, e: Exception) -> Exception:
    if isinstance(e, ClientError):
        code = _error_code(e)
        if code in _NOT_FOUND_CODES:
            return NotFoundError(f"{operation}: {e}")
        if code in _CONFLICT_CODES:
            return RemoteConflictError(f"{operation}: {e}")
    return TransportError(f"{operation}: {e}")


class LiveQuickSightClient:
    """Real QuickSight client. Implements QuickSightProtocol."""

    def __init__(self, region: str | None = None, session: boto3.session.Session | None = None):
        self._session = session or boto3.session.Session(region_name=region or settings.aws_region)
        self._client = self._session.client("quicksight")
        self._sts = self._session.client("sts")
        logger.info("quicksight_client_initialised", region=self._session.region_name)

    def caller_account_id(self) -> str:
        """Resolve the AWS account id of the current credentials via STS."""
        try:
            return self._sts.get_caller_identity()["Account"]
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"GetCallerIdentity: {e}") from e

    def describe_data_set(self, account_id: str, data_set_id: str) -> dict[str, Any]:
        try:
            return self._client.describe_data_set(AwsAccountId=account_id, DataSetId=data_set_id)
        except (ClientError, BotoCoreError) as e:
            raise _translate_quicksight_error("DescribeDataSet", e) from e

    def describe_data_source(self, account_id: str, data_source_id: str) -> dict[str, Any]:
        try:
            response = self._client.describe_data_source(
                AwsAccountId=account_id, DataSourceId=data_source_id
            )
        except (ClientError, BotoCoreError) as e:
            raise _translate_quicksight_error("DescribeDataSource", e) from e
        return response["DataSource"]

    def update_data_set(self, update_input: dict[str, Any]) -> dict[str, Any]:
        try:
            return self._client.update_data_set(**update_input)
        except (ClientError, BotoCoreError) as e:
            raise _translate_quicksight_error("UpdateDataSet", e) from e


class LiveRedshiftAnnotationSource:
    """Reads column comments through the Redshift Data API.

    Implements AnnotationSourceProtocol.
    """

    def __init__(
        self,
        profiles: Profiles,
        region: str | None = None,
        session: boto3.session.Session | None = None,
        timeout_seconds: float | None = None,
        poll_interval_seconds: float | None = None,
    ):
        self._profiles = profiles
        session = session or boto3.session.Session(region_name=region or settings.aws_region)
        self._client = session.client("redshift-data")
        self._timeout = timeout_seconds if timeout_seconds is not None else settings.redshift_query_timeout_seconds
        self._poll_interval = (
            poll_interval_seconds
            if poll_interval_seconds is not None
            else settings.redshift_poll_interval_seconds
        )

    def fetch_column_annotations(
        self, data_source: dict[str, Any], table: RelationalTable
    ) -> ColumnAnnotations:
        parameters = (data_source.get("DataSourceParameters") or {}).get("RedshiftParameters")
        if parameters is None:
            raise UnsupportedSourceTypeError(
                f"data source {data_source.get('Arn', '')} is not redshift "
                f"(type={data_source.get('Type', 'UNKNOWN')})"
            )
        connection = resolve_connection(parameters, self._profiles)
        rows = self._run_query(
            connection.execute_statement_args(),
            [
                {"name": "schema", "value": table.schema_name or "public"},
                {"name": "table", "value": table.name},
            ],
        )
        return self._to_annotations(rows)

    def _run_query(self, target: dict[str, Any], parameters: list[dict[str, str]]) -> list[dict[str, Any]]:
        logger.debug("redshift_query_start", **target)
        try:
            statement_id = self._client.execute_statement(
                Sql=COLUMN_COMMENTS_SQL, Parameters=parameters, **target
            )["Id"]
            self._wait(statement_id)
            return self._fetch_rows(statement_id)
        except (ClientError, BotoCoreError) as e:
            raise SourceUnavailableError(f"redshift query failed: {e}") from e

    def _wait(self, statement_id: str) -> None:
        deadline = time.monotonic() + self._timeout
        try:
            while True:
                description = self._client.describe_statement(Id=statement_id)
                status = description["Status"]
                if status == "FINISHED":
                    return
                if status in ("FAILED", "ABORTED"):
                    raise SourceUnavailableError(
                        f"redshift statement {statement_id} {status.lower()}: "
                        f"{description.get('Error', '')}"
                    )
                if time.monotonic() >= deadline:
                    self._cancel(statement_id)
                    raise SourceUnavailableError(
                        f"redshift statement {statement_id} timed out after {self._timeout}s"
                    )
                time.sleep(self._poll_interval)
        except KeyboardInterrupt:
            self._cancel(statement_id)
            raise

    def _cancel(self, statement_id: str) -> None:
        try:
            self._client.cancel_statement(Id=statement_id)
        except (ClientError, BotoCoreError) as e:
            logger.warning("redshift_cancel_failed", statement_id=statement_id, error=str(e))

    def _fetch_rows(self, statement_id: str) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {"Id": statement_id}
        while True:
            page = self._client.get_statement_result(**kwargs)
            names = [c.get("name") or c.get("label") for c in page.get("ColumnMetadata", [])]
            for record in page.get("Records", []):
                rows.append({name: _field_value(f) for name, f in zip(names, record)})
            token = page.get("NextToken")
            if not token:
                break
            kwargs["NextToken"] = token
        logger.debug("redshift_query_complete", statement_id=statement_id, row_count=len(rows))
        return rows

    @staticmethod
    def _to_annotations(rows: list[dict[str, Any]]) -> ColumnAnnotations:
        annotations: ColumnAnnotations = {}
        for row in rows:
            column_name = row.get("column_name")
            if not column_name:
                raise MalformedAnnotationError(f"annotation row without column_name: {row}")
            annotations[column_name] = ColumnAnnotation(
                column_name=column_name,
                name=row.get("name"),
                description=row.get("description"),
            )
        return annotations


def _field_value(field: dict[str, Any]) -> Any:
    """Unwrap a Redshift Data API Field union."""
    if field.get("isNull"):
        return None
    for key in ("stringValue", "longValue", "doubleValue", "booleanValue", "blobValue"):
        if key in field:
            return field[key]
    return None
