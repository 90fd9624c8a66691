"""
Domain module for Drizzle Auto Generator.

This module contains the resolved schema model and the schema-inference logic
(type mapping, foreign key heuristics, junction detection and relationship
resolution), separated from declaration loading and code rendering.
"""

from .models import (
    CompositeKey,
    EdgeKind,
    EnumDef,
    GenerationResult,
    ModelDef,
    PropertyDef,
    RelationshipEdge,
    RelationshipKind,
    SchemaModel,
    SqlExpression,
    UniqueConstraint,
)

from .type_mapping import (
    TypeMapper,
    is_integer_type,
    is_string_type,
)

from .relationships import (
    JunctionDetector,
    RelationshipResolver,
    match_foreign_key,
)

from .naming import (
    enum_variable_name,
    lower_first,
    pluralize,
    relations_variable_name,
    strip_foreign_key_suffix,
    table_variable_name,
)

__all__ = [
    # Core models
    'CompositeKey',
    'EdgeKind',
    'EnumDef',
    'GenerationResult',
    'ModelDef',
    'PropertyDef',
    'RelationshipEdge',
    'RelationshipKind',
    'SchemaModel',
    'SqlExpression',
    'UniqueConstraint',

    # Type mapping
    'TypeMapper',
    'is_integer_type',
    'is_string_type',

    # Relationships
    'JunctionDetector',
    'RelationshipResolver',
    'match_foreign_key',

    # Naming
    'enum_variable_name',
    'lower_first',
    'pluralize',
    'relations_variable_name',
    'strip_foreign_key_suffix',
    'table_variable_name',
]
