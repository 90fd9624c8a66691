"""
Table declarations.

Each collected model becomes a ``pgTable`` with one column per scalar or enum
property, an optional table callback (composite key, unique constraints,
indexes) and the paired select/insert row types.
"""

import logging
from typing import List, Optional

from ..constants import DefaultValues
from ..domain.models import ModelDef, PropertyDef, SchemaModel, SqlExpression
from ..domain.naming import table_variable_name
from ..domain.type_mapping import TypeMapper
from .base import (
    INDENT,
    DeclarationRenderer,
    column_refs,
    foreign_key_actions,
    is_column,
    quote,
    resolve_foreign_key,
    sql_literal,
    upper_first,
)
from .imports import ImportTracker

logger = logging.getLogger(__name__)


class TableRenderer(DeclarationRenderer):
    """Renders the ``pgTable`` declaration of every collected model."""

    def __init__(self, imports: ImportTracker, type_mapper: Optional[TypeMapper] = None):
        super().__init__(imports)
        self.type_mapper = type_mapper or TypeMapper(imports)

    def render_blocks(self, schema: SchemaModel) -> List[str]:
        return [self.render_table(model, schema) for model in schema.models]

    def render_table(self, model: ModelDef, schema: SchemaModel) -> str:
        """
        Render a table declaration with its row types.

        Args:
            model: Model to render
            schema: Resolved schema the model belongs to

        Returns:
            TypeScript source of the table and its two row types
        """
        self.imports.require("pgTable")
        table_var = table_variable_name(model.name)

        columns = [
            f"{INDENT}{prop.name}: {self.render_column(model, prop, schema)},"
            for prop in model.properties.values()
            if is_column(prop, schema)
        ]
        callback = self.render_callback(model)

        lines = [f"export const {table_var} = pgTable({quote(model.qualified_table_name)}, {{"]
        lines.extend(columns)
        if callback:
            lines.append("}, (table) => ({")
            lines.extend(f"{INDENT}{entry}," for entry in callback)
            lines.append("}));")
        else:
            lines.append("});")

        lines.append("")
        lines.append(f"export type {model.name} = typeof {table_var}.$inferSelect;")
        lines.append(f"export type New{model.name} = typeof {table_var}.$inferInsert;")
        return "\n".join(lines)

    def render_column(self, model: ModelDef, prop: PropertyDef, schema: SchemaModel) -> str:
        """Render the builder chain of a single column."""
        column = f"{self.type_mapper.map_property(prop)}({quote(prop.column_name)})"

        if prop.type.is_array:
            column += ".array()"

        column += self._reference_clause(model, prop, schema)

        if prop.is_primary_key:
            column += ".primaryKey()"
            if prop.is_auto_increment:
                column += ".generatedAlwaysAsIdentity()"
            elif prop.is_uuid and prop.uuid_default_random:
                column += ".defaultRandom()"
        else:
            if not prop.optional:
                column += ".notNull()"
            if prop.is_uuid and prop.uuid_default_random:
                column += ".defaultRandom()"

        column += self._default_clause(prop)

        if prop.is_unique:
            column += f".unique({quote(prop.unique_name)})" if prop.unique_name else ".unique()"

        return column

    def _reference_clause(self, model: ModelDef, prop: PropertyDef, schema: SchemaModel) -> str:
        """Reference clause for the first edge whose key column is this property."""
        for edge in schema.relationships:
            site = resolve_foreign_key(edge, schema)
            if site is None:
                continue
            if site.owner_model != model.name or site.owner_field != prop.name:
                continue

            target_var = table_variable_name(site.referenced_model)
            actions = foreign_key_actions(edge.on_delete, edge.on_update)
            return f".references(() => {target_var}.{site.referenced_field}{actions})"
        return ""

    def _default_clause(self, prop: PropertyDef) -> str:
        """
        Render the default value of a column.

        Booleans and numbers pass through, quoted strings pass through, the
        current-timestamp spellings become ``defaultNow()``, and any other
        string is treated as a raw SQL expression.
        """
        value = prop.default_value
        if value is None:
            return ""

        if isinstance(value, SqlExpression):
            self.imports.needs_sql()
            return f".default({sql_literal(value.expression)})"

        # bool is an int subclass, check it first
        if isinstance(value, bool):
            return f".default({'true' if value else 'false'})"

        if isinstance(value, (int, float)):
            return f".default({value})"

        if value in DefaultValues.CURRENT_TIMESTAMP:
            return ".defaultNow()"

        if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
            return f".default({value})"

        if DefaultValues.NUMERIC_LITERAL.match(value) or value in DefaultValues.BOOLEAN_LITERALS:
            return f".default({value})"

        self.imports.needs_sql()
        return f".default({sql_literal(value)})"

    def render_callback(self, model: ModelDef) -> List[str]:
        """Entries of the table callback: composite key, unique constraints, indexes."""
        entries = []

        if model.composite_key is not None:
            self.imports.require("primaryKey")
            options = f"columns: [{column_refs('table', model.composite_key.fields)}]"
            if model.composite_key.name:
                options += f", name: {quote(model.composite_key.name)}"
            entries.append(f"pk: primaryKey({{ {options} }})")

        for constraint in model.unique_constraints:
            self.imports.require("unique")
            key = "".join(upper_first(column) for column in constraint.columns)
            name = quote(constraint.name) if constraint.name else ""
            entries.append(
                f"{key[:1].lower()}{key[1:]}Unique: unique({name}).on({column_refs('table', constraint.columns)})"
            )

        for prop in model.properties.values():
            if not prop.is_indexed:
                continue
            self.imports.require("index")
            index_name = prop.index_name or f"{model.table_name}_{prop.name}_idx"
            if prop.index_expression:
                self.imports.needs_sql()
                target = sql_literal(prop.index_expression)
            else:
                target = f"table.{prop.name}"
            entries.append(f"{prop.name}Idx: index({quote(index_name)}).on({target})")

        return entries
