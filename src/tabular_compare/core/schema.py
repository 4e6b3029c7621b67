"""Input models describing one side of a comparison.

A snapshot is the already-fetched object graph of a tabular model: every
object exposes an internal name (stable identity), a display name and an
opaque definition.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class SchemaObject(BaseModel):
    """A named schema object with an opaque definition."""

    internal_name: str = Field(..., min_length=1, description="Stable identity key")
    name: str = Field(..., description="Display name, may change between runs")
    definition: str = Field(default="", description="Opaque definition text")

    @field_validator("definition", mode="before")
    @classmethod
    def normalize_definition(cls, v: Any) -> str:
        """Treat absent definitions as empty text."""
        if v is None:
            return ""
        return v


class TableObject(SchemaObject):
    """A table, which scopes its relationships, measures and KPIs."""

    relationships: list[SchemaObject] = Field(default_factory=list)
    measures: list[SchemaObject] = Field(default_factory=list)
    kpis: list[SchemaObject] = Field(default_factory=list)


class SchemaSnapshot(BaseModel):
    """All objects of one tabular model, grouped by top-level kind."""

    name: str = Field(default="", description="Model or database name")
    compatibility_level: int = Field(default=1200, ge=1100)
    connections: list[SchemaObject] = Field(default_factory=list)
    data_sources: list[SchemaObject] = Field(default_factory=list)
    tables: list[TableObject] = Field(default_factory=list)
    expressions: list[SchemaObject] = Field(default_factory=list)
    perspectives: list[SchemaObject] = Field(default_factory=list)
    cultures: list[SchemaObject] = Field(default_factory=list)
    roles: list[SchemaObject] = Field(default_factory=list)
    actions: list[SchemaObject] = Field(default_factory=list)

    @property
    def object_count(self) -> int:
        """Total number of objects, table children included."""
        count = (
            len(self.connections)
            + len(self.data_sources)
            + len(self.tables)
            + len(self.expressions)
            + len(self.perspectives)
            + len(self.cultures)
            + len(self.roles)
            + len(self.actions)
        )
        for table in self.tables:
            count += len(table.relationships) + len(table.measures) + len(table.kpis)
        return count
