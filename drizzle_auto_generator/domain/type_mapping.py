"""
Type mapping domain logic for Drizzle Auto Generator.

Maps declared property types to Drizzle column builders. The mapper never
rejects a type: unknown scalars and anything that is not a scalar or an enum
fall back to ``text``.
"""

from typing import Optional, Protocol, Tuple

from ..constants import SCALAR_TO_DRIZZLE, DrizzleColumnTypes, ScalarCategories
from ..declarations import TypeRef
from .models import PropertyDef
from .naming import enum_variable_name


class SymbolSink(Protocol):
    """Anything that records the column builders a schema needs to import."""

    def require(self, symbol: str) -> object:
        """Record a symbol from the pg-core module."""
        ...


def is_string_type(type_ref: Optional[TypeRef]) -> bool:
    """Check if a type is the string scalar."""
    return (
        type_ref is not None
        and type_ref.is_scalar
        and type_ref.name in ScalarCategories.STRING_TYPES
    )


def is_integer_type(type_ref: Optional[TypeRef]) -> bool:
    """Check if a type is one of the integer scalars."""
    return (
        type_ref is not None
        and type_ref.is_scalar
        and type_ref.name in ScalarCategories.INTEGER_TYPES
    )


class TypeMapper:
    """
    Maps declared types to Drizzle column types.

    Every mapping registers the chosen builder with the import sink of the
    current run, so a generated schema imports exactly what it uses.

    Example:
        >>> mapper = TypeMapper(ImportTracker())
        >>> mapper.map_scalar("int32")
        ('integer', 'integer')
    """

    def __init__(self, imports: SymbolSink):
        self.imports = imports

    def map_scalar(self, name: str) -> Tuple[str, str]:
        """
        Map a scalar name to its column type.

        Args:
            name: Declared scalar name (``string``, ``int64``, ...)

        Returns:
            Tuple of (column type, import symbol); both are the same builder
        """
        column_type = SCALAR_TO_DRIZZLE.get(name, DrizzleColumnTypes.FALLBACK)
        self.imports.require(column_type)
        return column_type, column_type

    def map_type(self, type_ref: TypeRef) -> str:
        """Map any property type, unwrapping arrays to their element type."""
        if type_ref.is_array and type_ref.element is not None:
            return self.map_type(type_ref.element)

        if type_ref.is_enum:
            # Enum columns reference the generated enum, nothing to import
            return enum_variable_name(type_ref.name)

        if type_ref.is_scalar:
            column_type, _ = self.map_scalar(type_ref.name)
            return column_type

        self.imports.require(DrizzleColumnTypes.FALLBACK)
        return DrizzleColumnTypes.FALLBACK

    def map_property(self, prop: PropertyDef) -> str:
        """Column builder for a property; UUID-marked properties always use ``uuid``."""
        if prop.is_uuid:
            self.imports.require(DrizzleColumnTypes.UUID)
            return DrizzleColumnTypes.UUID
        return self.map_type(prop.type)
