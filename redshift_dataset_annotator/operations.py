"""Pydantic models for QuickSight logical-table transform operations.

QuickSight serializes a transform operation as a single-key object, e.g.
``{"RenameColumnOperation": {"ColumnName": "amt", "NewColumnName": "amount"}}``.
parse_operation() turns that into a typed model carrying a ``kind``
discriminant; to_wire() turns it back. Unknown keys inside a payload are
kept (``extra="allow"``), and operation kinds this module does not know
are wrapped verbatim in OtherOperation.

Usage:
    from redshift_dataset_annotator.operations import parse_operations
    ops = parse_operations(logical_table["DataTransforms"])
"""

from __future__ import annotations

import copy
import enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from redshift_dataset_annotator.errors import MalformedOperationError


class OperationKind(str, enum.Enum):
    RENAME = "RenameColumnOperation"
    CAST = "CastColumnTypeOperation"
    TAG = "TagColumnOperation"
    UNTAG = "UntagColumnOperation"
    CREATE_COLUMNS = "CreateColumnsOperation"
    FILTER = "FilterOperation"
    PROJECT = "ProjectOperation"
    OTHER = "Other"


class _WireModel(BaseModel):
    """Base for models that mirror a QuickSight API structure."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class _Operation(_WireModel):
    def to_wire(self) -> dict[str, Any]:
        return {self.kind.value: self.payload()}  # type: ignore[attr-defined]


# -- Nested structures ---------------------------------------------------------


class ColumnDescription(_WireModel):
    text: str | None = Field(default=None, alias="Text")


class ColumnTag(_WireModel):
    """One entry of a TagColumnOperation. Either a description or a geographic role."""

    column_description: ColumnDescription | None = Field(
        default=None, alias="ColumnDescription"
    )
    column_geographic_role: str | None = Field(
        default=None, alias="ColumnGeographicRole"
    )


class CalculatedColumn(_WireModel):
    column_name: str = Field(alias="ColumnName")
    column_id: str | None = Field(default=None, alias="ColumnId")
    expression: str = Field(alias="Expression")


# -- Operations ----------------------------------------------------------------


class RenameColumnOperation(_Operation):
    kind: Literal[OperationKind.RENAME] = Field(default=OperationKind.RENAME, exclude=True)
    column_name: str = Field(alias="ColumnName")
    new_column_name: str = Field(alias="NewColumnName")


class CastColumnTypeOperation(_Operation):
    kind: Literal[OperationKind.CAST] = Field(default=OperationKind.CAST, exclude=True)
    column_name: str = Field(alias="ColumnName")
    new_column_type: str | None = Field(default=None, alias="NewColumnType")
    format: str | None = Field(default=None, alias="Format")


class TagColumnOperation(_Operation):
    kind: Literal[OperationKind.TAG] = Field(default=OperationKind.TAG, exclude=True)
    column_name: str = Field(alias="ColumnName")
    tags: list[ColumnTag] = Field(default_factory=list, alias="Tags")

    def first_description_tag(self) -> ColumnTag | None:
        """Return the first tag entry that carries a description, if any."""
        for tag in self.tags:
            if tag.column_description is not None:
                return tag
        return None


class UntagColumnOperation(_Operation):
    kind: Literal[OperationKind.UNTAG] = Field(default=OperationKind.UNTAG, exclude=True)
    column_name: str = Field(alias="ColumnName")
    tag_names: list[str] = Field(default_factory=list, alias="TagNames")


class CreateColumnsOperation(_Operation):
    kind: Literal[OperationKind.CREATE_COLUMNS] = Field(
        default=OperationKind.CREATE_COLUMNS, exclude=True
    )
    columns: list[CalculatedColumn] = Field(default_factory=list, alias="Columns")


class FilterOperation(_Operation):
    kind: Literal[OperationKind.FILTER] = Field(default=OperationKind.FILTER, exclude=True)
    condition_expression: str | None = Field(default=None, alias="ConditionExpression")


class ProjectOperation(_Operation):
    kind: Literal[OperationKind.PROJECT] = Field(default=OperationKind.PROJECT, exclude=True)
    projected_columns: list[str] = Field(default_factory=list, alias="ProjectedColumns")


class OtherOperation(BaseModel):
    """An operation kind this module does not model. Round-trips untouched."""

    kind: Literal[OperationKind.OTHER] = OperationKind.OTHER
    raw: dict[str, Any]

    @property
    def name(self) -> str:
        return ",".join(self.raw) or "<empty>"

    def to_wire(self) -> dict[str, Any]:
        return copy.deepcopy(self.raw)


TransformOperation = Union[
    RenameColumnOperation,
    CastColumnTypeOperation,
    TagColumnOperation,
    UntagColumnOperation,
    CreateColumnsOperation,
    FilterOperation,
    ProjectOperation,
    OtherOperation,
]

_MODELS: dict[str, type[_Operation]] = {
    OperationKind.RENAME.value: RenameColumnOperation,
    OperationKind.CAST.value: CastColumnTypeOperation,
    OperationKind.TAG.value: TagColumnOperation,
    OperationKind.UNTAG.value: UntagColumnOperation,
    OperationKind.CREATE_COLUMNS.value: CreateColumnsOperation,
    OperationKind.FILTER.value: FilterOperation,
    OperationKind.PROJECT.value: ProjectOperation,
}


def parse_operation(raw: dict[str, Any]) -> TransformOperation:
    """Parse one wire-format transform operation.

    Raises:
        MalformedOperationError: If a known operation kind fails validation.
    """
    if len(raw) == 1:
        key, body = next(iter(raw.items()))
        model = _MODELS.get(key)
        if model is not None:
            try:
                return model.model_validate(body)  # type: ignore[return-value]
            except ValidationError as e:
                raise MalformedOperationError(f"invalid {key}: {e}") from e
    return OtherOperation(raw=copy.deepcopy(raw))


def parse_operations(raw_operations: list[dict[str, Any]]) -> list[TransformOperation]:
    return [parse_operation(raw) for raw in raw_operations]


def to_wire(operations: list[TransformOperation]) -> list[dict[str, Any]]:
    return [op.to_wire() for op in operations]
