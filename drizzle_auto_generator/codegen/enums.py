"""Enum declarations."""

from typing import List

from ..domain.models import EnumDef, SchemaModel
from ..domain.naming import enum_variable_name
from .base import DeclarationRenderer, quote


class EnumRenderer(DeclarationRenderer):
    """Renders one ``pgEnum`` per collected enum."""

    def render_blocks(self, schema: SchemaModel) -> List[str]:
        return [self.render_enum(enum) for enum in schema.enums]

    def render_enum(self, enum: EnumDef) -> str:
        self.imports.require("pgEnum")
        members = ", ".join(quote(member) for member in enum.members)
        return (
            f"export const {enum_variable_name(enum.name)} = "
            f"pgEnum({quote(enum.db_name)}, [{members}]);"
        )
