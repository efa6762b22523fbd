"""Protocols (interfaces) for external dependencies.

The annotate run talks to QuickSight and to the warehouse only through
these protocols, never through boto3 directly.

Unit tests provide in-memory implementations.

Usage:
    # In production (cli.py):
    from redshift_dataset_annotator.clients import LiveQuickSightClient
    quicksight = LiveQuickSightClient(region="ap-northeast-1")

    # In tests:
    from tests.fakes import FakeQuickSightClient
    quicksight = FakeQuickSightClient(data_sets={...})
"""

from typing import Any, Protocol, runtime_checkable

from redshift_dataset_annotator.models import ColumnAnnotations, RelationalTable


@runtime_checkable
class QuickSightProtocol(Protocol):
    """Interface for the QuickSight dataset API.

    Concrete implementations:
    - LiveQuickSightClient (redshift_dataset_annotator/clients.py), boto3
    - FakeQuickSightClient (tests/fakes.py), in-memory fake for unit tests
    """

    def caller_account_id(self) -> str:
        """Return the AWS account id of the current credentials.

        Raises:
            TransportError: If the identity cannot be resolved.
        """
        ...

    def describe_data_set(self, account_id: str, data_set_id: str) -> dict[str, Any]:
        """Describe a dataset.

        Returns:
            The DescribeDataSet response, with keys DataSet and Status.

        Raises:
            NotFoundError: If the dataset does not exist.
            TransportError: For any other failure.
        """
        ...

    def describe_data_source(self, account_id: str, data_source_id: str) -> dict[str, Any]:
        """Describe a data source.

        Returns:
            The DataSource structure (keys Type, DataSourceParameters, ...).

        Raises:
            NotFoundError: If the data source does not exist.
            TransportError: For any other failure.
        """
        ...

    def update_data_set(self, update_input: dict[str, Any]) -> dict[str, Any]:
        """Submit an UpdateDataSet request.

        Returns:
            The UpdateDataSet response (IngestionId, IngestionArn, Status, ...).

        Raises:
            NotFoundError: If the dataset no longer exists.
            RemoteConflictError: If the dataset was modified concurrently.
            TransportError: For any other failure.
        """
        ...


@runtime_checkable
class AnnotationSourceProtocol(Protocol):
    """Interface for reading column annotations from the warehouse.

    Concrete implementations:
    - LiveRedshiftAnnotationSource (redshift_dataset_annotator/clients.py)
    - FakeAnnotationSource (tests/fakes.py)
    """

    def fetch_column_annotations(
        self, data_source: dict[str, Any], table: RelationalTable
    ) -> ColumnAnnotations:
        """Return physical column name -> annotation for one table.

        Args:
            data_source: The QuickSight DataSource structure the table belongs to.
            table: The physical table.

        Raises:
            UnsupportedSourceTypeError: If the data source is not Redshift.
            SourceUnavailableError: If the warehouse or query cannot be reached.
            MalformedAnnotationError: If a result row has no column name.
        """
        ...
