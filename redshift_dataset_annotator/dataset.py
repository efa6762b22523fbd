"""Helpers for QuickSight dataset definitions and ARNs."""

import copy
from dataclasses import dataclass
from typing import Any

from redshift_dataset_annotator.errors import InvalidArnError

# DataSet keys carried over into an UpdateDataSet request.
UPDATABLE_KEYS = (
    "DataSetId",
    "Name",
    "ImportMode",
    "PhysicalTableMap",
    "LogicalTableMap",
    "ColumnGroups",
    "FieldFolders",
    "RowLevelPermissionDataSet",
    "RowLevelPermissionTagConfiguration",
    "ColumnLevelPermissionRules",
    "DataSetUsageConfiguration",
)


@dataclass(frozen=True)
class Arn:
    partition: str
    service: str
    region: str
    account_id: str
    resource: str


def parse_arn(value: str) -> Arn:
    """Split an ARN into its parts.

    Raises:
        InvalidArnError: If `value` is not of the form arn:partition:service:region:account:resource.
    """
    parts = value.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn" or not parts[5]:
        raise InvalidArnError(f"invalid arn: {value!r}")
    return Arn(*parts[1:])


def data_source_ref(data_source_arn: str) -> tuple[str, str]:
    """Return (account id, data source id) of a QuickSight data source ARN.

    Raises:
        InvalidArnError: If the ARN is not a QuickSight data source ARN.
    """
    arn = parse_arn(data_source_arn)
    if arn.service != "quicksight" or not arn.resource.startswith("datasource/"):
        raise InvalidArnError(f"{data_source_arn} is not quicksight data source arn")
    return arn.account_id, arn.resource[len("datasource/"):]


def build_update_input(data_set: dict[str, Any]) -> dict[str, Any]:
    """Turn a DescribeDataSet DataSet into an UpdateDataSet request.

    All carried-over values are deep copies; absent keys are omitted.

    Raises:
        InvalidArnError: If the dataset ARN is malformed.
    """
    arn = parse_arn(data_set.get("Arn", ""))
    update_input: dict[str, Any] = {"AwsAccountId": arn.account_id}
    for key in UPDATABLE_KEYS:
        if data_set.get(key) is not None:
            update_input[key] = copy.deepcopy(data_set[key])
    return update_input
