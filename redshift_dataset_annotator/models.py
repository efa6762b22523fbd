"""Pydantic models for warehouse-side inputs to the reconciliation.

ColumnAnnotation is what an annotation source returns per physical column.
RelationalTable mirrors the QuickSight PhysicalTableMap RelationalTable
entry the annotations are fetched for.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColumnAnnotation(BaseModel):
    """Logical name and description requested for one physical column.

    Blank strings are normalized to None so callers only test for None.
    """

    model_config = ConfigDict(frozen=True)

    column_name: str
    name: str | None = None
    description: str | None = None

    @field_validator("column_name")
    @classmethod
    def _require_column_name(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "column_name must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("name", "description")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None


ColumnAnnotations = dict[str, ColumnAnnotation]


class InputColumn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(alias="Name")
    type: str | None = Field(default=None, alias="Type")


class RelationalTable(BaseModel):
    """A physical table backed by a warehouse table."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    data_source_arn: str = Field(alias="DataSourceArn")
    catalog: str | None = Field(default=None, alias="Catalog")
    schema_name: str | None = Field(default=None, alias="Schema")
    name: str = Field(alias="Name")
    input_columns: list[InputColumn] = Field(default_factory=list, alias="InputColumns")

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.input_columns]

    @property
    def qualified_name(self) -> str:
        return f'"{self.schema_name or "public"}"."{self.name}"'

    def cache_key(self) -> tuple[str, str, str]:
        return (self.data_source_arn, self.schema_name or "public", self.name)

    @classmethod
    def from_physical_table(cls, physical_table: dict[str, Any]) -> RelationalTable | None:
        """Return the RelationalTable of a PhysicalTableMap entry, or None for other kinds."""
        relational = physical_table.get("RelationalTable")
        if relational is None:
            return None
        return cls.model_validate(relational)
