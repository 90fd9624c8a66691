"""
Centralized constants for Drizzle Auto Generator.

This module contains the scalar type mapping table, the filters applied while
collecting declarations, foreign key naming patterns and the fixed text
fragments of the generated output. Everything here is read-only.
"""

import re
from typing import Dict, FrozenSet, List, Pattern, Tuple


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    OUTPUT_DIR = "./generated_drizzle"
    SOURCE_DIR = "src"
    SCHEMA_FILE = "schema.ts"
    INDEX_FILE = "index.ts"
    NO_EMIT = False


# =============================================================================
# SCALAR TYPE MAPPINGS
# =============================================================================

class DrizzleColumnTypes:
    """Drizzle pg-core column builders."""

    TEXT = "text"
    SMALLINT = "smallint"
    INTEGER = "integer"
    BIGINT = "bigint"
    REAL = "real"
    DOUBLE_PRECISION = "doublePrecision"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    INTERVAL = "interval"
    BYTEA = "bytea"
    JSONB = "jsonb"
    UUID = "uuid"

    # Fallback for anything the table does not know about
    FALLBACK = TEXT


# Declared scalar name to Drizzle column builder
SCALAR_TO_DRIZZLE: Dict[str, str] = {
    # strings
    "string": DrizzleColumnTypes.TEXT,

    # integers
    "int8": DrizzleColumnTypes.SMALLINT,
    "int16": DrizzleColumnTypes.SMALLINT,
    "int32": DrizzleColumnTypes.INTEGER,
    "int64": DrizzleColumnTypes.BIGINT,
    "uint8": DrizzleColumnTypes.SMALLINT,
    "uint16": DrizzleColumnTypes.INTEGER,
    "uint32": DrizzleColumnTypes.BIGINT,
    "uint64": DrizzleColumnTypes.BIGINT,
    "safeint": DrizzleColumnTypes.INTEGER,
    "integer": DrizzleColumnTypes.BIGINT,

    # floats
    "float32": DrizzleColumnTypes.REAL,
    "float64": DrizzleColumnTypes.DOUBLE_PRECISION,
    "float": DrizzleColumnTypes.DOUBLE_PRECISION,
    "numeric": DrizzleColumnTypes.NUMERIC,
    "decimal": DrizzleColumnTypes.NUMERIC,
    "decimal128": DrizzleColumnTypes.NUMERIC,

    # boolean
    "boolean": DrizzleColumnTypes.BOOLEAN,

    # date/time
    "plainDate": DrizzleColumnTypes.DATE,
    "plainTime": DrizzleColumnTypes.TIME,
    "utcDateTime": DrizzleColumnTypes.TIMESTAMP,
    "offsetDateTime": DrizzleColumnTypes.TIMESTAMP,
    "duration": DrizzleColumnTypes.INTERVAL,

    # binary
    "bytes": DrizzleColumnTypes.BYTEA,

    # json/unknown
    "unknown": DrizzleColumnTypes.JSONB,
    "object": DrizzleColumnTypes.JSONB,
}


class ScalarCategories:
    """Scalar names grouped by what the relationship heuristics care about."""

    STRING_TYPES: FrozenSet[str] = frozenset({"string"})

    INTEGER_TYPES: FrozenSet[str] = frozenset({
        "int8", "int16", "int32", "int64",
        "uint8", "uint16", "uint32", "safeint",
    })


# =============================================================================
# DECLARATION FILTERS
# =============================================================================

class DeclarationFilters:
    """Names and namespaces that never become tables or enums."""

    INTERNAL_PREFIX = "_"

    # Structural and reflection built-ins
    BUILT_IN_MODELS: FrozenSet[str] = frozenset({
        "Array",
        "Record",
        "ServiceOptions",
        "DiscriminatedOptions",
        "ExampleOptions",
        "OperationExample",
        "VisibilityFilter",
        "EnumMember",
        "Model",
        "Scalar",
        "Enum",
        "Union",
        "ModelProperty",
        "Operation",
        "Namespace",
        "Interface",
        "UnionVariant",
        "StringTemplate",
    })

    # Framework namespaces (matched against the innermost namespace name)
    RESERVED_NAMESPACES: FrozenSet[str] = frozenset({"TypeSpec", "Reflection", "Drizzle"})

    # Any namespace path starting with this is reserved as well
    RESERVED_NAMESPACE_PREFIX = "TypeSpec"


# =============================================================================
# RELATIONSHIP HEURISTICS
# =============================================================================

class ForeignKeyPatterns:
    """Naming conventions recognised as foreign keys, in priority order."""

    PATTERNS: Tuple[Pattern[str], ...] = (
        re.compile(r"^(.+)id$"),
        re.compile(r"^(.+)_id$"),
        re.compile(r"^id_(.+)$"),
    )

    PLURAL_SUFFIX = "s"


class JunctionShape:
    """Bounds for detecting an undeclared junction table."""

    MIN_PROPERTIES = 2
    MAX_PROPERTIES = 5
    MIN_FOREIGN_KEYS = 2


class RelationshipDefaults:
    """Default values for relationships."""

    REFERENCED_FIELD = "id"
    FOREIGN_KEY_SUFFIX = "Id"

    # Accepted ON DELETE / ON UPDATE actions
    FOREIGN_KEY_ACTIONS: FrozenSet[str] = frozenset({
        "cascade", "restrict", "set null", "set default", "no action",
    })


# =============================================================================
# GENERATED OUTPUT
# =============================================================================

class ImportModules:
    """Module specifiers of the two tracked import namespaces."""

    PG_CORE = "drizzle-orm/pg-core"
    CORE = "drizzle-orm"


class CoreCapabilities:
    """Symbols from the core module, requested by capability."""

    SQL = "sql"
    RELATIONS = "relations"


class DefaultValues:
    """Default value spellings with special rendering."""

    CURRENT_TIMESTAMP: FrozenSet[str] = frozenset({"now()", "CURRENT_TIMESTAMP"})
    BOOLEAN_LITERALS: FrozenSet[str] = frozenset({"true", "false"})
    NUMERIC_LITERAL: Pattern[str] = re.compile(r"^\d+(\.\d+)?$")


class OutputText:
    """Fixed comments and fragments of generated files."""

    SCHEMA_HEADER = "// generated drizzle schema from model declarations"
    ENUMS_SECTION = "// enums"
    TABLES_SECTION = "// tables"
    RELATIONS_SECTION = "// relations"

    EMPTY_SCHEMA: List[str] = [
        "// no models found in declaration graph",
        "// add table-marked models to generate drizzle tables",
    ]

    INDEX_HEADER = "// generated exports"

    INDENT = "  "


class IdentifierRules:
    """Shape of table, schema and column names accepted upstream."""

    IDENTIFIER: Pattern[str] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
