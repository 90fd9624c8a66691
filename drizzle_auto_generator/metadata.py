"""
Annotation side table for declarations.

``MetadataBuilder`` registers annotations (table, column, id, relation, ...)
against declarations, validating their arguments on the way in. Rejected
annotations become ``Diagnostic`` entries and are never stored. ``build()``
freezes the registered state into a ``MetadataStore``, the read-only lookup
object handed to the schema engine for one generation run.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .declarations import EnumDecl, ModelDecl, PropertyDecl
from .validators import AnnotationValidator, ValidationResult

logger = logging.getLogger(__name__)

Target = Union[ModelDecl, PropertyDecl, EnumDecl]
FieldList = Union[str, Sequence[str], None]


# =============================================================================
# ANNOTATION OPTIONS
# =============================================================================

@dataclass(frozen=True)
class TableOptions:
    name: Optional[str] = None
    schema: Optional[str] = None


@dataclass(frozen=True)
class ColumnOptions:
    name: Optional[str] = None


@dataclass(frozen=True)
class UuidOptions:
    default_random: bool = False


@dataclass(frozen=True)
class IndexOptions:
    name: Optional[str] = None
    expression: Optional[str] = None


@dataclass(frozen=True)
class UniqueOptions:
    name: Optional[str] = None
    columns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CompositeIdOptions:
    fields: Tuple[str, ...]
    name: Optional[str] = None


@dataclass(frozen=True)
class RelationOptions:
    """
    Options shared by every relation annotation.

    ``fields`` are the local anchor columns, ``references`` the remote ones.
    """

    name: Optional[str] = None
    fields: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()
    on_delete: Optional[str] = None
    on_update: Optional[str] = None

    @property
    def first_field(self) -> Optional[str]:
        return self.fields[0] if self.fields else None

    @property
    def first_reference(self) -> Optional[str]:
        return self.references[0] if self.references else None


@dataclass(frozen=True)
class ManyToManyOptions(RelationOptions):
    through: Optional[str] = None
    foreign_key: Optional[str] = None


@dataclass(frozen=True)
class Configuration:
    """Namespace-level settings."""

    schema: Optional[str] = None


@dataclass(frozen=True)
class Diagnostic:
    """A rejected annotation."""

    code: str
    target: str
    message: str

    def __str__(self) -> str:
        return f"{self.code} on {self.target}: {self.message}"


def _as_tuple(value: FieldList) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _describe(target: Any) -> str:
    return getattr(target, "qualified_name", None) or getattr(target, "name", str(target))


class StateKey(Enum):
    """Slots of the side table."""

    TABLE = "table"
    TABLE_OPTIONS = "table_options"
    JUNCTION = "junction"
    COLUMN_OPTIONS = "column_options"
    MAP = "map"
    PRIMARY_KEY = "primary_key"
    COMPOSITE_ID = "composite_id"
    AUTO_INCREMENT = "auto_increment"
    UUID = "uuid"
    UUID_OPTIONS = "uuid_options"
    UNIQUE = "unique"
    UNIQUE_OPTIONS = "unique_options"
    INDEX = "index"
    INDEX_OPTIONS = "index_options"
    DEFAULT_VALUE = "default_value"
    SQL_EXPRESSION = "sql_expression"
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"
    RELATION = "relation"
    RELATION_OPTIONS = "relation_options"
    CONFIG = "config"


FLAG_KEYS = frozenset({
    StateKey.TABLE,
    StateKey.JUNCTION,
    StateKey.PRIMARY_KEY,
    StateKey.AUTO_INCREMENT,
    StateKey.UUID,
    StateKey.UNIQUE,
    StateKey.INDEX,
    StateKey.ONE_TO_ONE,
    StateKey.ONE_TO_MANY,
    StateKey.MANY_TO_ONE,
    StateKey.MANY_TO_MANY,
    StateKey.RELATION,
})


# =============================================================================
# READ-ONLY STORE
# =============================================================================

class MetadataStore:
    """
    Read-only lookup from declaration identity to annotation state.

    Every accessor returns ``None`` or ``False`` for metadata that was never
    registered; nothing here raises for missing state.
    """

    def __init__(
        self,
        flags: Optional[Dict[StateKey, Set[Any]]] = None,
        maps: Optional[Dict[StateKey, Dict[Any, Any]]] = None,
    ):
        flags = flags or {}
        maps = maps or {}
        self._flags: Dict[StateKey, FrozenSet[Any]] = {
            key: frozenset(flags.get(key, ())) for key in FLAG_KEYS
        }
        self._maps: Dict[StateKey, Mapping[Any, Any]] = {
            key: MappingProxyType(dict(maps.get(key, {})))
            for key in StateKey if key not in FLAG_KEYS
        }

    def _has(self, key: StateKey, target: Any) -> bool:
        return target in self._flags[key]

    def _get(self, key: StateKey, target: Any) -> Any:
        return self._maps[key].get(target)

    # tables
    def is_table(self, model: ModelDecl) -> bool:
        return self._has(StateKey.TABLE, model)

    def get_table_options(self, model: ModelDecl) -> Optional[TableOptions]:
        return self._get(StateKey.TABLE_OPTIONS, model)

    def get_table_name(self, model: ModelDecl) -> str:
        options = self.get_table_options(model)
        if options and options.name:
            return options.name
        return model.name.lower()

    def is_junction(self, model: ModelDecl) -> bool:
        return self._has(StateKey.JUNCTION, model)

    # columns
    def get_column_options(self, prop: PropertyDecl) -> Optional[ColumnOptions]:
        return self._get(StateKey.COLUMN_OPTIONS, prop)

    def get_mapped_name(self, prop: PropertyDecl) -> Optional[str]:
        return self._get(StateKey.MAP, prop)

    def get_column_name(self, prop: PropertyDecl) -> str:
        """Column name with ``map`` taking precedence over the column option."""
        mapped = self.get_mapped_name(prop)
        if mapped:
            return mapped
        options = self.get_column_options(prop)
        if options and options.name:
            return options.name
        return prop.name

    # keys
    def is_primary_key(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.PRIMARY_KEY, prop)

    def get_composite_id(self, model: ModelDecl) -> Optional[CompositeIdOptions]:
        return self._get(StateKey.COMPOSITE_ID, model)

    def is_auto_increment(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.AUTO_INCREMENT, prop)

    def is_uuid(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.UUID, prop)

    def get_uuid_options(self, prop: PropertyDecl) -> Optional[UuidOptions]:
        return self._get(StateKey.UUID_OPTIONS, prop)

    # constraints
    def is_unique(self, target: Union[ModelDecl, PropertyDecl]) -> bool:
        return self._has(StateKey.UNIQUE, target)

    def get_unique_options(self, target: Union[ModelDecl, PropertyDecl]) -> Optional[UniqueOptions]:
        return self._get(StateKey.UNIQUE_OPTIONS, target)

    def is_indexed(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.INDEX, prop)

    def get_index_options(self, prop: PropertyDecl) -> Optional[IndexOptions]:
        return self._get(StateKey.INDEX_OPTIONS, prop)

    def get_default_value(self, prop: PropertyDecl) -> Optional[Union[str, int, float, bool]]:
        return self._get(StateKey.DEFAULT_VALUE, prop)

    def get_sql_expression(self, prop: PropertyDecl) -> Optional[str]:
        return self._get(StateKey.SQL_EXPRESSION, prop)

    # relations
    def is_one_to_one(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.ONE_TO_ONE, prop)

    def is_one_to_many(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.ONE_TO_MANY, prop)

    def is_many_to_one(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.MANY_TO_ONE, prop)

    def is_many_to_many(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.MANY_TO_MANY, prop)

    def is_relation(self, prop: PropertyDecl) -> bool:
        return self._has(StateKey.RELATION, prop)

    def get_relation_options(self, prop: PropertyDecl) -> Optional[RelationOptions]:
        return self._get(StateKey.RELATION_OPTIONS, prop)

    # namespaces
    def get_configuration(self, namespace: Optional[str]) -> Optional[Configuration]:
        """
        Find the configuration for a namespace.

        Walks up the dotted namespace path, so ``Blog.Admin`` inherits the
        configuration registered on ``Blog``.
        """
        parts = namespace.split(".") if namespace else []
        while parts:
            config = self._get(StateKey.CONFIG, ".".join(parts))
            if config is not None:
                return config
            parts.pop()
        return None


# =============================================================================
# BUILDER
# =============================================================================

class MetadataBuilder:
    """
    Registers annotations against declarations.

    Each method mirrors one annotation of the declaration language and returns
    whether the annotation was registered. Invalid arguments are reported as
    diagnostics instead of raising.

    Example:
        >>> builder = MetadataBuilder()
        >>> builder.table(user, name="users")
        True
        >>> store = builder.build()
    """

    def __init__(self):
        self._flags: Dict[StateKey, Set[Any]] = {key: set() for key in FLAG_KEYS}
        self._maps: Dict[StateKey, Dict[Any, Any]] = {
            key: {} for key in StateKey if key not in FLAG_KEYS
        }
        self.diagnostics: List[Diagnostic] = []

    def build(self) -> MetadataStore:
        """Freeze the registered state into a read-only store."""
        return MetadataStore(self._flags, self._maps)

    def _report(self, code: str, target: Any, result: ValidationResult) -> bool:
        """Record diagnostics for a failed validation; returns True when valid."""
        if result.is_valid:
            return True
        for error in result.errors:
            diagnostic = Diagnostic(code, _describe(target), error)
            self.diagnostics.append(diagnostic)
            logger.warning(f"Skipping annotation: {diagnostic}")
        return False

    def _mark(self, key: StateKey, target: Any) -> None:
        self._flags[key].add(target)

    def _set(self, key: StateKey, target: Any, value: Any) -> None:
        self._maps[key][target] = value

    # tables
    def table(self, model: ModelDecl, name: Optional[str] = None, schema: Optional[str] = None) -> bool:
        if not self._report("invalid-table-name", model,
                            AnnotationValidator.validate_table_options(name, None)):
            return False
        if not self._report("invalid-schema-name", model,
                            AnnotationValidator.validate_table_options(None, schema)):
            return False

        self._mark(StateKey.TABLE, model)
        if name is not None or schema is not None:
            self._set(StateKey.TABLE_OPTIONS, model, TableOptions(name=name, schema=schema))
        return True

    def junction(self, model: ModelDecl) -> bool:
        """Mark a junction table; junctions are always tables too."""
        self._mark(StateKey.JUNCTION, model)
        self._mark(StateKey.TABLE, model)
        return True

    # columns
    def column(self, prop: PropertyDecl, name: Optional[str] = None) -> bool:
        if not self._report("invalid-column-name", prop,
                            AnnotationValidator.validate_column_name(name)):
            return False
        self._set(StateKey.COLUMN_OPTIONS, prop, ColumnOptions(name=name))
        return True

    def map(self, prop: PropertyDecl, column_name: str) -> bool:
        if not self._report("invalid-column-name", prop,
                            AnnotationValidator.validate_column_name(column_name or "")):
            return False
        self._set(StateKey.MAP, prop, column_name)
        return True

    # keys
    def id(
        self,
        target: Union[ModelDecl, PropertyDecl],
        name: Optional[str] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> bool:
        """Mark a primary key property, or a composite key on a model."""
        if isinstance(target, PropertyDecl):
            self._mark(StateKey.PRIMARY_KEY, target)
            return True

        if not fields:
            return False
        self._set(StateKey.COMPOSITE_ID, target, CompositeIdOptions(fields=tuple(fields), name=name))
        return True

    def auto_increment(self, prop: PropertyDecl) -> bool:
        self._mark(StateKey.AUTO_INCREMENT, prop)
        return True

    def uuid(self, prop: PropertyDecl, default_random: Optional[bool] = None) -> bool:
        self._mark(StateKey.UUID, prop)
        if default_random is not None:
            self._set(StateKey.UUID_OPTIONS, prop, UuidOptions(default_random=default_random))
        return True

    # constraints
    def unique(
        self,
        target: Union[ModelDecl, PropertyDecl],
        name: Optional[str] = None,
        columns: Optional[Sequence[str]] = None,
    ) -> bool:
        self._mark(StateKey.UNIQUE, target)
        if name or columns:
            self._set(StateKey.UNIQUE_OPTIONS, target,
                      UniqueOptions(name=name, columns=tuple(columns or ())))
        return True

    def index(self, prop: PropertyDecl, name: Optional[str] = None, expression: Optional[str] = None) -> bool:
        self._mark(StateKey.INDEX, prop)
        if name or expression:
            self._set(StateKey.INDEX_OPTIONS, prop, IndexOptions(name=name, expression=expression))
        return True

    def default_value(self, prop: PropertyDecl, value: Union[str, int, float, bool, None]) -> bool:
        if not self._report("invalid-default-value", prop,
                            AnnotationValidator.validate_default_value(value)):
            return False
        self._set(StateKey.DEFAULT_VALUE, prop, value)
        return True

    def sql(self, prop: PropertyDecl, expression: Optional[str]) -> bool:
        if not self._report("invalid-sql-expression", prop,
                            AnnotationValidator.validate_sql_expression(expression)):
            return False
        self._set(StateKey.SQL_EXPRESSION, prop, expression)
        return True

    # relations
    def _relation(self, key: StateKey, prop: PropertyDecl, options: Optional[RelationOptions]) -> bool:
        if options is not None:
            result = AnnotationValidator.validate_foreign_key_actions(options.on_delete, options.on_update)
            if not self._report("invalid-relation-config", prop, result):
                return False

        self._mark(key, prop)
        if options is not None:
            self._set(StateKey.RELATION_OPTIONS, prop, options)
        return True

    @staticmethod
    def relation_options(
        name: Optional[str] = None,
        fields: FieldList = None,
        references: FieldList = None,
        on_delete: Optional[str] = None,
        on_update: Optional[str] = None,
    ) -> RelationOptions:
        return RelationOptions(
            name=name,
            fields=_as_tuple(fields),
            references=_as_tuple(references),
            on_delete=on_delete,
            on_update=on_update,
        )

    def one_to_one(self, prop: PropertyDecl, options: Optional[RelationOptions] = None) -> bool:
        return self._relation(StateKey.ONE_TO_ONE, prop, options)

    def one_to_many(self, prop: PropertyDecl, options: Optional[RelationOptions] = None) -> bool:
        return self._relation(StateKey.ONE_TO_MANY, prop, options)

    def many_to_one(self, prop: PropertyDecl, options: Optional[RelationOptions] = None) -> bool:
        return self._relation(StateKey.MANY_TO_ONE, prop, options)

    def many_to_many(self, prop: PropertyDecl, options: Optional[ManyToManyOptions] = None) -> bool:
        through = options.through if options is not None else None
        if not self._report("invalid-relation-config", prop,
                            AnnotationValidator.validate_many_to_many(through)):
            return False
        return self._relation(StateKey.MANY_TO_MANY, prop, options)

    def relation(self, prop: PropertyDecl, options: Optional[RelationOptions] = None) -> bool:
        return self._relation(StateKey.RELATION, prop, options)

    # namespaces
    def config(self, namespace: str, schema: Optional[str] = None) -> bool:
        if not self._report("invalid-schema-name", namespace,
                            AnnotationValidator.validate_table_options(None, schema)):
            return False
        self._set(StateKey.CONFIG, namespace, Configuration(schema=schema))
        return True
