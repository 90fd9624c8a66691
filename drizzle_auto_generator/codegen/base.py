"""
Shared building blocks for the TypeScript renderers.

Small helpers for literals, plus the base class every declaration renderer
derives from.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..constants import OutputText
from ..domain.models import ForeignKeySite, PropertyDef, RelationshipEdge, SchemaModel
from .imports import ImportTracker

INDENT = OutputText.INDENT


def quote(value: str) -> str:
    """Render a TypeScript single-quoted string literal."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def sql_literal(expression: str) -> str:
    """Wrap a raw SQL expression in the ``sql`` template tag, unescaped."""
    return f"sql`{expression}`"


def column_refs(table_var: str, fields: Iterable[str]) -> str:
    """Render ``table.a, table.b`` style column references."""
    return ", ".join(f"{table_var}.{name}" for name in fields)


def foreign_key_actions(on_delete: Optional[str], on_update: Optional[str]) -> str:
    """Render the trailing ``, { onDelete: ..., onUpdate: ... }`` of a reference."""
    actions = []
    if on_delete:
        actions.append(f"onDelete: {quote(on_delete)}")
    if on_update:
        actions.append(f"onUpdate: {quote(on_update)}")
    return f", {{ {', '.join(actions)} }}" if actions else ""


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def is_column(prop: PropertyDef, schema: SchemaModel) -> bool:
    """
    Check whether a property becomes a table column.

    Properties typed as a collected model, or as any list of models, are
    relations rather than columns.
    """
    type_ref = prop.type
    if type_ref.is_array:
        return type_ref.element is None or not type_ref.element.is_model
    if type_ref.is_model:
        return schema.get_model(type_ref.name) is None
    return True


def has_column(schema: SchemaModel, model_name: str, field_name: Optional[str]) -> bool:
    model = schema.get_model(model_name)
    if model is None or not field_name:
        return False
    prop = model.get_property(field_name)
    return prop is not None and is_column(prop, schema)


def resolve_foreign_key(edge: RelationshipEdge, schema: SchemaModel) -> Optional[ForeignKeySite]:
    """The key column of an edge, when both of its anchors are real columns."""
    site = edge.foreign_key()
    if site is None:
        return None
    if not has_column(schema, site.owner_model, site.owner_field):
        return None
    if not has_column(schema, site.referenced_model, site.referenced_field):
        return None
    return site


class DeclarationRenderer(ABC):
    """Abstract strategy for one section of the generated schema."""

    def __init__(self, imports: ImportTracker):
        self.imports = imports

    @abstractmethod
    def render_blocks(self, schema: SchemaModel) -> List[str]:
        """Render the declarations of this section, in collection order."""
        pass
