"""Tests that verify fake implementations satisfy their protocols,
and that the protocol pattern works correctly."""

import pytest

from redshift_dataset_annotator.clients import LiveQuickSightClient, LiveRedshiftAnnotationSource
from redshift_dataset_annotator.errors import NotFoundError, SourceUnavailableError
from redshift_dataset_annotator.models import RelationalTable
from redshift_dataset_annotator.protocols import AnnotationSourceProtocol, QuickSightProtocol
from tests.fakes import (
    ACCOUNT_ID,
    FakeAnnotationSource,
    FakeQuickSightClient,
    make_data_set,
    redshift_data_source,
    relational_table,
)


class TestFakeQuickSightClient:
    """Verify FakeQuickSightClient satisfies QuickSightProtocol."""

    def test_satisfies_protocol(self):
        """FakeQuickSightClient must be a valid QuickSightProtocol implementation."""
        assert isinstance(FakeQuickSightClient(), QuickSightProtocol)

    def test_describe_data_set_returns_copy(self):
        """Mutating a described data set must not change the registered one."""
        client = FakeQuickSightClient()
        client.add_data_set(make_data_set("sales", {}, {}))

        response = client.describe_data_set(ACCOUNT_ID, "sales")
        response["DataSet"]["Name"] = "changed"

        assert client.describe_data_set(ACCOUNT_ID, "sales")["DataSet"]["Name"] == "sales"
        assert response["Status"] == 200

    def test_describe_unknown_data_set_raises(self):
        with pytest.raises(NotFoundError):
            FakeQuickSightClient().describe_data_set(ACCOUNT_ID, "missing")

    def test_describe_data_source_tracks_calls(self):
        client = FakeQuickSightClient()
        client.add_data_source(redshift_data_source("ds-1"))

        client.describe_data_source(ACCOUNT_ID, "ds-1")
        client.describe_data_source(ACCOUNT_ID, "ds-1")

        assert client.described_data_sources == ["ds-1", "ds-1"]

    def test_fail_raises_registered_error(self):
        client = FakeQuickSightClient()
        client.fail("update_data_set", NotFoundError("gone"))
        with pytest.raises(NotFoundError, match="gone"):
            client.update_data_set({"DataSetId": "sales"})
        assert client.updates == []


class TestFakeAnnotationSource:
    """Verify FakeAnnotationSource satisfies AnnotationSourceProtocol."""

    def test_satisfies_protocol(self):
        assert isinstance(FakeAnnotationSource(), AnnotationSourceProtocol)

    def test_returns_registered_annotations(self):
        source = FakeAnnotationSource()
        source.add_annotations("sales", {"amt": ("amount", "Sales amount")})
        table = RelationalTable.model_validate(relational_table("sales", ["amt"])["RelationalTable"])

        annotations = source.fetch_column_annotations(redshift_data_source(), table)

        assert annotations["amt"].name == "amount"
        assert annotations["amt"].description == "Sales amount"
        assert source.fetched == [("public", "sales")]

    def test_unregistered_table_is_empty(self):
        table = RelationalTable.model_validate(relational_table("other", ["a"])["RelationalTable"])
        assert FakeAnnotationSource().fetch_column_annotations(redshift_data_source(), table) == {}

    def test_fail_raises_registered_error(self):
        source = FakeAnnotationSource()
        source.fail("sales", SourceUnavailableError("down"))
        table = RelationalTable.model_validate(relational_table("sales", ["amt"])["RelationalTable"])
        with pytest.raises(SourceUnavailableError):
            source.fetch_column_annotations(redshift_data_source(), table)


class TestLiveClients:
    """The boto3-backed clients expose the same protocol surface."""

    def test_live_quicksight_satisfies_protocol(self):
        assert isinstance(LiveQuickSightClient(region="us-east-1"), QuickSightProtocol)

    def test_live_annotation_source_satisfies_protocol(self):
        from redshift_dataset_annotator.profiles import new_profiles

        source = LiveRedshiftAnnotationSource(new_profiles(), region="us-east-1")
        assert isinstance(source, AnnotationSourceProtocol)
