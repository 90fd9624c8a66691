"""
Core domain models for Drizzle Auto Generator.

These models represent the resolved relational schema and are independent of
the declaration format they were collected from and of the code they are
rendered into.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..declarations import TypeRef
from ..metadata import RelationOptions


class RelationshipKind(Enum):
    """Relationship tags a property can carry."""

    NONE = "none"
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"
    GENERIC = "generic"


class EdgeKind(Enum):
    """Kinds a resolved relationship edge can have after normalisation."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"


@dataclass(frozen=True)
class SqlExpression:
    """Marker for a raw SQL default, rendered through the ``sql`` template tag."""

    expression: str

    def __str__(self) -> str:
        return self.expression


DefaultValue = Union[str, int, float, bool, SqlExpression]


@dataclass(frozen=True)
class CompositeKey:
    fields: Tuple[str, ...]
    name: Optional[str] = None


@dataclass(frozen=True)
class UniqueConstraint:
    """Model-level unique constraint over several columns."""

    columns: Tuple[str, ...]
    name: Optional[str] = None


@dataclass(frozen=True)
class PropertyDef:
    """
    A collected property with every annotation already resolved.

    ``column_name`` has its precedence applied (map override, then column
    option, then property name). ``default_value`` holds a ``SqlExpression``
    when a raw SQL annotation was present.
    """

    name: str
    type: TypeRef
    optional: bool = False
    column_name: Optional[str] = None

    # Keys
    is_primary_key: bool = False
    is_auto_increment: bool = False
    is_uuid: bool = False
    uuid_default_random: bool = False

    # Constraints
    is_unique: bool = False
    unique_name: Optional[str] = None
    is_indexed: bool = False
    index_name: Optional[str] = None
    index_expression: Optional[str] = None
    default_value: Optional[DefaultValue] = None

    # Relationship tag
    relationship_kind: RelationshipKind = RelationshipKind.NONE
    relation_options: Optional[RelationOptions] = None

    def __post_init__(self):
        if self.column_name is None:
            object.__setattr__(self, "column_name", self.name)

    @property
    def has_relationship(self) -> bool:
        return self.relationship_kind is not RelationshipKind.NONE


@dataclass(frozen=True)
class ModelDef:
    """
    A collected table model.

    ``properties`` keeps declaration order, which is the column order of the
    generated table.
    """

    name: str
    namespace: str = ""
    properties: Dict[str, PropertyDef] = field(default_factory=dict)
    table_name: Optional[str] = None
    schema_name: Optional[str] = None
    composite_key: Optional[CompositeKey] = None
    unique_constraints: Tuple[UniqueConstraint, ...] = ()
    is_junction: bool = False

    def __post_init__(self):
        if self.table_name is None:
            object.__setattr__(self, "table_name", self.name.lower())

    @property
    def lower_name(self) -> str:
        return self.name.lower()

    @property
    def qualified_table_name(self) -> str:
        """Table name prefixed with its schema, if any."""
        if self.schema_name:
            return f"{self.schema_name}.{self.table_name}"
        return self.table_name

    def get_property(self, name: str) -> Optional[PropertyDef]:
        return self.properties.get(name)


@dataclass(frozen=True)
class EnumDef:
    """Enum with ordered, unique member values."""

    name: str
    members: Tuple[str, ...] = ()

    @property
    def db_name(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class ForeignKeySite:
    """Where a key column lives and what it points at."""

    owner_model: str
    owner_field: Optional[str]
    referenced_model: str
    referenced_field: str


@dataclass(frozen=True)
class RelationshipEdge:
    """
    Directed relationship between two models.

    ``from_model`` is the "one" side of one-to-many edges. ``declared_kind``
    keeps the tag the edge was derived from, so a many-to-one annotation stays
    distinguishable after it was normalised into a swapped one-to-many edge;
    heuristic edges carry ``RelationshipKind.NONE``.
    """

    kind: EdgeKind
    from_model: str
    to_model: str
    from_field: Optional[str] = None
    to_field: Optional[str] = None
    junction_table: Optional[str] = None
    relation_name: Optional[str] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None
    declared_kind: RelationshipKind = RelationshipKind.NONE

    @property
    def is_many_to_many(self) -> bool:
        return self.kind is EdgeKind.MANY_TO_MANY

    @property
    def is_inferred(self) -> bool:
        return self.declared_kind is RelationshipKind.NONE

    def foreign_key(self) -> Optional["ForeignKeySite"]:
        """
        Locate the key column this edge implies.

        One-to-one edges keep the key on the declaring side; one-to-many edges
        keep it on the "many" side. Many-to-many edges have no key column of
        their own.
        """
        if self.is_many_to_many:
            return None
        if self.kind is EdgeKind.ONE_TO_ONE:
            return ForeignKeySite(self.from_model, self.from_field, self.to_model, self.to_field or "id")
        return ForeignKeySite(self.to_model, self.to_field, self.from_model, self.from_field or "id")

    def dedup_key(self) -> Tuple:
        return (
            self.kind,
            self.from_model,
            self.to_model,
            self.from_field or "id",
            self.to_field,
            self.junction_table,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'kind': self.kind.value,
            'from_model': self.from_model,
            'to_model': self.to_model,
            'from_field': self.from_field,
            'to_field': self.to_field,
            'junction_table': self.junction_table,
            'relation_name': self.relation_name,
            'declared_kind': self.declared_kind.value,
        }


@dataclass
class SchemaModel:
    """
    The resolved unit handed to rendering.

    Built once per generation run and not mutated afterwards.
    """

    models: List[ModelDef] = field(default_factory=list)
    enums: List[EnumDef] = field(default_factory=list)
    relationships: List[RelationshipEdge] = field(default_factory=list)
    model_lookup: Dict[str, ModelDef] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.models and not self.enums

    def get_model(self, name: str) -> Optional[ModelDef]:
        return self.model_lookup.get(name.lower())

    def edges_from(self, model_name: str) -> List[RelationshipEdge]:
        return [edge for edge in self.relationships if edge.from_model == model_name]

    def edges_to(self, model_name: str) -> List[RelationshipEdge]:
        return [edge for edge in self.relationships if edge.to_model == model_name]


@dataclass
class GenerationResult:
    """Result of a generation run."""

    schema_source: str
    index_source: str
    written_files: List[str] = field(default_factory=list)
    skipped: bool = False
