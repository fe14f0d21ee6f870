"""
Pydantic models for the schema document grammar.

The same grammar is shared by YAML and XML documents: XML attributes and
child elements become mapping keys, repeated children (``table``, ``view``,
``column``) become lists. Models only check the *shape* of the document;
naming and cross-entity rules are enforced by schema validation, so a
document that parses here may still be rejected at compile time.
"""

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from sqlayout.infrastructure.schema.core import (
    Column,
    ColumnType,
    ConflictPolicy,
    ForeignKeySpec,
    GeneratedMode,
    GeneratedSpec,
    NotNullSpec,
    PrimaryKeySpec,
    ReferentialAction,
    Schema,
    SortOrder,
    Table,
    UniqueSpec,
    View,
    ViewColumn,
)

CONSTRAINT_ELEMENTS = ("pk", "fk", "unique", "not_null", "generated")


class _DocumentModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class _OnConflictDocument(_DocumentModel):
    on_conflict: Optional[ConflictPolicy] = Field(None, description="ON CONFLICT policy")

    @field_validator("on_conflict", mode="before")
    @classmethod
    def _parse_on_conflict(cls, value: Any) -> Any:
        return None if value is None else ConflictPolicy.from_str(value)


class PrimaryKeyDocument(_OnConflictDocument):
    """``<pk order=".." on_conflict=".." autoincrement=".."/>``"""

    order: Optional[SortOrder] = Field(None, description="Ascending or Descending")
    autoincrement: bool = Field(False, description="Emit AUTOINCREMENT")

    @field_validator("order", mode="before")
    @classmethod
    def _parse_order(cls, value: Any) -> Any:
        return None if value is None else SortOrder.from_str(value)

    def to_spec(self) -> PrimaryKeySpec:
        return PrimaryKeySpec(
            order=self.order, on_conflict=self.on_conflict, autoincrement=self.autoincrement
        )


class UniqueDocument(_OnConflictDocument):
    def to_spec(self) -> UniqueSpec:
        return UniqueSpec(on_conflict=self.on_conflict)


class NotNullDocument(_OnConflictDocument):
    def to_spec(self) -> NotNullSpec:
        return NotNullSpec(on_conflict=self.on_conflict)


class ForeignKeyDocument(_DocumentModel):
    """``<fk foreign_table=".." foreign_column=".." on_delete=".." on_update=".." deferrable=".."/>``"""

    foreign_table: str = Field(..., description="Referenced table")
    foreign_column: str = Field(..., description="Referenced column")
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None
    deferrable: bool = False

    @field_validator("on_delete", "on_update", mode="before")
    @classmethod
    def _parse_action(cls, value: Any) -> Any:
        return None if value is None else ReferentialAction.from_str(value)

    def to_spec(self) -> ForeignKeySpec:
        return ForeignKeySpec(
            foreign_table=self.foreign_table,
            foreign_column=self.foreign_column,
            on_delete=self.on_delete,
            on_update=self.on_update,
            deferrable=self.deferrable,
        )


class GeneratedDocument(_DocumentModel):
    """``<generated expr=".." as="Virtual|Stored"/>``"""

    expr: str = Field(..., min_length=1, description="Generation expression, passed through verbatim")
    mode: Optional[GeneratedMode] = Field(
        None, validation_alias=AliasChoices("as", "mode"), description="Virtual or Stored"
    )

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Any:
        return None if value is None else GeneratedMode.from_str(value)

    def to_spec(self) -> GeneratedSpec:
        return GeneratedSpec(expr=self.expr, mode=self.mode)


class ColumnDocument(_DocumentModel):
    name: str
    type: ColumnType
    pk: Optional[PrimaryKeyDocument] = None
    fk: Optional[ForeignKeyDocument] = None
    unique: Optional[UniqueDocument] = None
    not_null: Optional[NotNullDocument] = None
    generated: Optional[GeneratedDocument] = None

    @model_validator(mode="before")
    @classmethod
    def _empty_constraints(cls, data: Any) -> Any:
        # `unique:` / `unique: true` in YAML and `<unique/>` in XML mark a bare constraint
        if isinstance(data, dict):
            data = dict(data)
            for key in CONSTRAINT_ELEMENTS:
                if key in data and (data[key] is None or data[key] is True):
                    data[key] = {}
                elif key in data and data[key] is False:
                    del data[key]
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> Any:
        return ColumnType.from_str(value)

    def to_column(self) -> Column:
        return Column(
            name=self.name,
            column_type=self.type,
            primary_key=self.pk.to_spec() if self.pk else None,
            foreign_key=self.fk.to_spec() if self.fk else None,
            unique=self.unique.to_spec() if self.unique else None,
            not_null=self.not_null.to_spec() if self.not_null else None,
            generated=self.generated.to_spec() if self.generated else None,
        )


class TableDocument(_DocumentModel):
    name: str
    without_rowid: bool = False
    strict: bool = False
    columns: List[ColumnDocument] = Field(
        default_factory=list, validation_alias=AliasChoices("column", "columns")
    )

    def to_table(self) -> Table:
        return Table(
            name=self.name,
            columns=tuple(c.to_column() for c in self.columns),
            without_rowid=self.without_rowid,
            strict=self.strict,
        )


class ViewColumnDocument(_DocumentModel):
    name: str


class ViewDocument(_DocumentModel):
    name: str
    select: str
    temp: bool = False
    columns: List[Union[ViewColumnDocument, str]] = Field(
        default_factory=list, validation_alias=AliasChoices("column", "columns")
    )

    def to_view(self) -> View:
        names = [c if isinstance(c, str) else c.name for c in self.columns]
        return View(
            name=self.name,
            select=self.select,
            columns=tuple(ViewColumn(n) for n in names),
            temp=self.temp,
        )


class SchemaDocument(_DocumentModel):
    tables: List[TableDocument] = Field(
        default_factory=list, validation_alias=AliasChoices("table", "tables")
    )
    views: List[ViewDocument] = Field(
        default_factory=list, validation_alias=AliasChoices("view", "views")
    )

    def to_schema(self) -> Schema:
        return Schema(
            tables=tuple(t.to_table() for t in self.tables),
            views=tuple(v.to_view() for v in self.views),
        )


__all__ = [
    "CONSTRAINT_ELEMENTS",
    "PrimaryKeyDocument",
    "ForeignKeyDocument",
    "UniqueDocument",
    "NotNullDocument",
    "GeneratedDocument",
    "ColumnDocument",
    "TableDocument",
    "ViewColumnDocument",
    "ViewDocument",
    "SchemaDocument",
]
