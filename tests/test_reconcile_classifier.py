"""Tests for partitioning operations into buckets and rebuilding them."""

from redshift_dataset_annotator.operations import parse_operations, to_wire
from redshift_dataset_annotator.reconcile import classify, rebuild

RENAME = {"RenameColumnOperation": {"ColumnName": "amt", "NewColumnName": "amount"}}
CAST = {"CastColumnTypeOperation": {"ColumnName": "amount", "NewColumnType": "DECIMAL"}}
TAG = {"TagColumnOperation": {"ColumnName": "amount", "Tags": [{"ColumnDescription": {"Text": "Amount"}}]}}
UNTAG = {"UntagColumnOperation": {"ColumnName": "id", "TagNames": ["COLUMN_DESCRIPTION"]}}
CREATE = {"CreateColumnsOperation": {"Columns": [{"ColumnName": "x2", "Expression": "amount * 2"}]}}
FILTER = {"FilterOperation": {"ConditionExpression": "amount > 0"}}
PROJECT = {"ProjectOperation": {"ProjectedColumns": ["amount", "id"]}}
OTHER = {"OverrideDatasetParameterOperation": {"ParameterName": "p"}}


class TestClassify:
    def test_every_kind_lands_in_its_bucket(self):
        buckets = classify(parse_operations([OTHER, PROJECT, FILTER, CREATE, UNTAG, TAG, CAST, RENAME]))

        assert list(buckets.renames) == ["amt"]
        assert list(buckets.casts) == ["amount"]
        assert list(buckets.tags) == ["amount"]
        assert list(buckets.untags) == ["id"]
        assert len(buckets.create_columns) == 1
        assert len(buckets.filters) == 1
        assert len(buckets.projects) == 1
        assert len(buckets.others) == 1

    def test_counts(self):
        buckets = classify(parse_operations([RENAME, FILTER, FILTER]))
        assert buckets.counts() == {
            "rename": 1,
            "cast": 0,
            "tag": 0,
            "untag": 0,
            "create_columns": 0,
            "filter": 2,
            "project": 0,
            "other": 0,
        }

    def test_duplicate_column_operation_last_wins(self):
        second = {"RenameColumnOperation": {"ColumnName": "amt", "NewColumnName": "total"}}
        buckets = classify(parse_operations([RENAME, second]))
        assert buckets.renames["amt"].new_column_name == "total"
        assert buckets.counts()["rename"] == 1

    def test_unkeyed_buckets_keep_relative_order(self):
        first = {"FilterOperation": {"ConditionExpression": "a > 0"}}
        second = {"FilterOperation": {"ConditionExpression": "b > 0"}}
        buckets = classify(parse_operations([second, RENAME, first]))
        assert [f.condition_expression for f in buckets.filters] == ["b > 0", "a > 0"]

    def test_empty_input(self):
        assert sum(classify([]).counts().values()) == 0


class TestRebuild:
    def test_fixed_bucket_order(self):
        shuffled = [OTHER, PROJECT, FILTER, CREATE, UNTAG, TAG, CAST, RENAME]
        rebuilt = to_wire(rebuild(classify(parse_operations(shuffled))))
        assert rebuilt == [RENAME, CAST, TAG, UNTAG, CREATE, FILTER, PROJECT, OTHER]

    def test_is_stable(self):
        ordered = [RENAME, CAST, TAG, UNTAG, CREATE, FILTER, PROJECT, OTHER]
        once = to_wire(rebuild(classify(parse_operations(ordered))))
        twice = to_wire(rebuild(classify(parse_operations(once))))
        assert once == ordered
        assert twice == once
