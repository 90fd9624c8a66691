"""
Declaration loading for Drizzle Auto Generator.

Declarations are written as YAML documents, validated with pydantic and
turned into a ``Program`` plus the ``MetadataStore`` holding their
annotations. A document looks like::

    namespace: Blog
    config: {schema: app}
    enums:
      - name: Status
        members: {Active: active, Inactive: inactive}
    models:
      - name: Post
        table: true
        properties:
          - {name: id, type: string, id: true}
          - name: author
            type: User
            manyToOne: {fields: authorId, references: id, onDelete: cascade}
          - {name: authorId, type: string}

Type names resolve against the models and enums of every loaded document;
anything else is a scalar. ``X[]`` declares a list.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .declarations import EnumDecl, ModelDecl, Program, PropertyDecl, TypeRef
from .exceptions import DeclarationError
from .metadata import Diagnostic, ManyToManyOptions, MetadataBuilder, MetadataStore, RelationOptions

logger = logging.getLogger(__name__)

ARRAY_SUFFIX = "[]"


# --- Pydantic Models for the Declaration Document ---
class _Spec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class TableSpec(_Spec):
    name: Optional[str] = None
    db_schema: Optional[str] = Field(default=None, alias="schema")


class ColumnSpec(_Spec):
    name: Optional[str] = None


class UuidSpec(_Spec):
    default_random: bool = Field(default=False, alias="defaultRandom")


class IndexSpec(_Spec):
    name: Optional[str] = None
    expression: Optional[str] = None


class UniqueSpec(_Spec):
    name: Optional[str] = None
    columns: Optional[List[str]] = None


class CompositeIdSpec(_Spec):
    name: Optional[str] = None
    fields: List[str] = Field(default_factory=list)


class RelationSpec(_Spec):
    name: Optional[str] = None
    fields: Union[str, List[str], None] = None
    references: Union[str, List[str], None] = None
    on_delete: Optional[str] = Field(default=None, alias="onDelete")
    on_update: Optional[str] = Field(default=None, alias="onUpdate")


class ManyToManySpec(RelationSpec):
    through: Optional[str] = None
    foreign_key: Optional[str] = Field(default=None, alias="foreignKey")


class PropertySpec(_Spec):
    name: str = Field(..., min_length=1)
    type: str = Field(default="string", min_length=1)
    optional: bool = False

    id: bool = False
    auto_increment: bool = Field(default=False, alias="autoIncrement")
    uuid: Union[bool, UuidSpec] = False
    unique: Union[bool, UniqueSpec] = False
    index: Union[bool, IndexSpec] = False
    default: Union[bool, int, float, str, None] = None
    sql: Optional[str] = None
    column: Optional[ColumnSpec] = None
    map: Optional[str] = None

    one_to_one: Union[bool, RelationSpec, None] = Field(default=None, alias="oneToOne")
    one_to_many: Union[bool, RelationSpec, None] = Field(default=None, alias="oneToMany")
    many_to_one: Union[bool, RelationSpec, None] = Field(default=None, alias="manyToOne")
    many_to_many: Optional[ManyToManySpec] = Field(default=None, alias="manyToMany")
    relation: Union[bool, RelationSpec, None] = None


class ModelSpec(_Spec):
    name: str = Field(..., min_length=1)
    table: Union[bool, TableSpec] = False
    junction: bool = False
    id: Optional[CompositeIdSpec] = None
    unique: Optional[UniqueSpec] = None
    properties: List[PropertySpec] = Field(default_factory=list)


class EnumSpec(_Spec):
    name: str = Field(..., min_length=1)
    members: Union[List[str], Dict[str, Union[str, int, float, None]]] = Field(default_factory=list)


class ConfigSpec(_Spec):
    db_schema: Optional[str] = Field(default=None, alias="schema")


class DeclarationDocument(_Spec):
    """One YAML declaration document."""

    namespace: str = ""
    config: Optional[ConfigSpec] = None
    enums: List[EnumSpec] = Field(default_factory=list)
    models: List[ModelSpec] = Field(default_factory=list)

    @field_validator("namespace", mode="before")
    @classmethod
    def check_namespace(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError(f"namespace must be a string, found: {type(v).__name__}")
        return v.strip()


@dataclass
class LoadResult:
    """Declarations and annotations loaded from a set of documents."""

    program: Program
    metadata: MetadataStore
    diagnostics: List[Diagnostic] = field(default_factory=list)


def parse_type(expression: str, model_names: Set[str], enum_names: Set[str]) -> TypeRef:
    """
    Parse a type expression.

    Example:
        >>> str(parse_type("Tag[]", {"Tag"}, set()))
        'Tag[]'
    """
    expression = expression.strip()
    if expression.endswith(ARRAY_SUFFIX):
        return TypeRef.array(parse_type(expression[:-len(ARRAY_SUFFIX)], model_names, enum_names))
    if expression in model_names:
        return TypeRef.model(expression)
    if expression in enum_names:
        return TypeRef.enum(expression)
    return TypeRef.scalar(expression)


class DeclarationLoader:
    """
    Loads YAML declaration documents into a program and its metadata.

    Documents are parsed first so type names can refer to models and enums of
    any loaded document; declarations are then created in document order.
    """

    def __init__(self):
        self.builder = MetadataBuilder()
        self.program = Program()

    def load_files(self, paths: Iterable[Union[str, Path]]) -> LoadResult:
        """
        Load declaration files in order.

        Raises:
            DeclarationError: when a file is missing, is not valid YAML or
                does not match the document format
        """
        documents = [(str(path), self.read_file(Path(path))) for path in paths]
        return self.load_documents(documents)

    @staticmethod
    def read_file(path: Path) -> Any:
        if not path.is_file():
            raise DeclarationError(f"Declaration file not found: {path}", source=str(path))
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DeclarationError(f"Error parsing YAML file {path}: {e}", source=str(path)) from e
        except OSError as e:
            raise DeclarationError(f"Error reading declaration file {path}: {e}", source=str(path)) from e

    def load_documents(self, documents: List[Tuple[str, Any]]) -> LoadResult:
        """Load already-parsed documents, given as (source, raw data) pairs."""
        parsed = [self.validate_document(source, raw) for source, raw in documents]

        model_names = {model.name for _, document in parsed for model in document.models}
        enum_names = {enum.name for _, document in parsed for enum in document.enums}

        for source, document in parsed:
            logger.debug(f"Loading declarations from {source}")
            self._load_document(document, model_names, enum_names)

        return LoadResult(
            program=self.program,
            metadata=self.builder.build(),
            diagnostics=list(self.builder.diagnostics),
        )

    @staticmethod
    def validate_document(source: str, raw: Any) -> Tuple[str, DeclarationDocument]:
        if raw is None:
            return source, DeclarationDocument()
        if not isinstance(raw, dict):
            raise DeclarationError(
                f"Declaration document must be a mapping, found: {type(raw).__name__}",
                source=source,
            )
        try:
            return source, DeclarationDocument.model_validate(raw)
        except ValidationError as e:
            context = {"source": source}
            for error in e.errors():
                loc_str = " -> ".join(str(loc_item) for loc_item in error.get("loc", ())) or "document"
                context[loc_str] = error.get("msg", "Unknown validation error")
            raise DeclarationError(
                "Declaration document does not match the expected format",
                context=context,
            ) from e

    def _load_document(self, document: DeclarationDocument, model_names: Set[str], enum_names: Set[str]) -> None:
        namespace = document.namespace

        if document.config is not None:
            self.builder.config(namespace, schema=document.config.db_schema)

        for enum_spec in document.enums:
            if isinstance(enum_spec.members, dict):
                members = dict(enum_spec.members)
            else:
                members = {member: None for member in enum_spec.members}
            self.program.add(EnumDecl(name=enum_spec.name, namespace=namespace, members=members))

        for model_spec in document.models:
            model = self.program.add(ModelDecl(name=model_spec.name, namespace=namespace))
            for prop_spec in model_spec.properties:
                prop = model.add_property(PropertyDecl(
                    name=prop_spec.name,
                    type=parse_type(prop_spec.type, model_names, enum_names),
                    optional=prop_spec.optional,
                ))
                self._register_property(prop, prop_spec)
            self._register_model(model, model_spec)

    def _register_model(self, model: ModelDecl, spec: ModelSpec) -> None:
        if isinstance(spec.table, TableSpec):
            self.builder.table(model, name=spec.table.name, schema=spec.table.db_schema)
        elif spec.table:
            self.builder.table(model)

        if spec.junction:
            self.builder.junction(model)

        if spec.id is not None:
            self.builder.id(model, name=spec.id.name, fields=spec.id.fields)

        if spec.unique is not None:
            self.builder.unique(model, name=spec.unique.name, columns=spec.unique.columns)

    def _register_property(self, prop: PropertyDecl, spec: PropertySpec) -> None:
        builder = self.builder
        given = spec.model_fields_set

        if spec.id:
            builder.id(prop)
        if spec.auto_increment:
            builder.auto_increment(prop)

        if isinstance(spec.uuid, UuidSpec):
            builder.uuid(prop, default_random=spec.uuid.default_random)
        elif spec.uuid:
            builder.uuid(prop)

        if isinstance(spec.unique, UniqueSpec):
            builder.unique(prop, name=spec.unique.name)
        elif spec.unique:
            builder.unique(prop)

        if isinstance(spec.index, IndexSpec):
            builder.index(prop, name=spec.index.name, expression=spec.index.expression)
        elif spec.index:
            builder.index(prop)

        # An explicit null default or empty sql is reported, not ignored
        if "default" in given:
            builder.default_value(prop, spec.default)
        if "sql" in given:
            builder.sql(prop, spec.sql)

        if spec.column is not None:
            builder.column(prop, name=spec.column.name)
        if "map" in given:
            builder.map(prop, spec.map or "")

        relations = (
            (spec.one_to_one, builder.one_to_one),
            (spec.one_to_many, builder.one_to_many),
            (spec.many_to_one, builder.many_to_one),
            (spec.relation, builder.relation),
        )
        for relation_spec, register in relations:
            if isinstance(relation_spec, RelationSpec):
                register(prop, self._relation_options(relation_spec))
            elif relation_spec:
                register(prop)

        if spec.many_to_many is not None:
            builder.many_to_many(prop, self._relation_options(spec.many_to_many))

    @staticmethod
    def _relation_options(spec: RelationSpec) -> RelationOptions:
        options = MetadataBuilder.relation_options(
            name=spec.name,
            fields=spec.fields,
            references=spec.references,
            on_delete=spec.on_delete,
            on_update=spec.on_update,
        )
        if isinstance(spec, ManyToManySpec):
            return ManyToManyOptions(
                name=options.name,
                fields=options.fields,
                references=options.references,
                on_delete=options.on_delete,
                on_update=options.on_update,
                through=spec.through,
                foreign_key=spec.foreign_key,
            )
        return options


def load_declarations(paths: Iterable[Union[str, Path]]) -> LoadResult:
    """Load declaration files into a fresh program and metadata store."""
    return DeclarationLoader().load_files(paths)
