"""
Schema collection for Drizzle Auto Generator.

Walks a declaration ``Program`` and keeps what belongs in the generated
schema: table-marked models and user enums. Built-ins, internal names and
framework namespaces are skipped. The annotation state of every kept
declaration is resolved into immutable ``ModelDef`` / ``PropertyDef`` /
``EnumDef`` values.
"""

import logging
from typing import List, Optional, Tuple

from .constants import DeclarationFilters
from .declarations import EnumDecl, ModelDecl, Program, PropertyDecl
from .domain.models import (
    CompositeKey,
    DefaultValue,
    EnumDef,
    ModelDef,
    PropertyDef,
    RelationshipKind,
    SqlExpression,
    UniqueConstraint,
)
from .metadata import MetadataStore

logger = logging.getLogger(__name__)


def _innermost(namespace: Optional[str]) -> str:
    return namespace.rsplit(".", 1)[-1] if namespace else ""


def is_reserved_namespace(namespace: Optional[str]) -> bool:
    """Check if a namespace belongs to the framework rather than the user."""
    if not namespace:
        return False
    outermost = namespace.split(".", 1)[0]
    innermost = _innermost(namespace)
    return (
        innermost in DeclarationFilters.RESERVED_NAMESPACES
        or outermost in DeclarationFilters.RESERVED_NAMESPACES
        or innermost.startswith(DeclarationFilters.RESERVED_NAMESPACE_PREFIX)
    )


def is_internal_name(name: str) -> bool:
    return name.startswith(DeclarationFilters.INTERNAL_PREFIX)


def is_built_in_model(model: ModelDecl) -> bool:
    """Check if a model is a structural built-in or instantiated from one."""
    if model.name in DeclarationFilters.BUILT_IN_MODELS:
        return True
    source = _innermost(model.source_namespace)
    return source.startswith(DeclarationFilters.RESERVED_NAMESPACE_PREFIX)


class SchemaCollector:
    """
    Filters declarations down to schema models and enums.

    Example:
        >>> models, enums = SchemaCollector(store).collect(program)
    """

    def __init__(self, metadata: MetadataStore):
        self.metadata = metadata

    def collect(self, program: Program) -> Tuple[List[ModelDef], List[EnumDef]]:
        """
        Collect models and enums in declaration order.

        Args:
            program: Loaded declarations

        Returns:
            Tuple of (models, enums)
        """
        models = []
        enums = []

        for declaration in program.declarations:
            if isinstance(declaration, ModelDecl):
                if self._include_model(declaration):
                    models.append(self.collect_model(declaration))
            elif isinstance(declaration, EnumDecl):
                if self._include_enum(declaration):
                    enums.append(self.collect_enum(declaration))

        logger.debug(f"Collected {len(models)} models and {len(enums)} enums")
        return models, enums

    def _include_model(self, model: ModelDecl) -> bool:
        if is_internal_name(model.name) or is_built_in_model(model):
            return False
        if is_reserved_namespace(model.namespace):
            return False
        if not self.metadata.is_table(model):
            logger.debug(f"Skipping {model.qualified_name}: not marked as a table")
            return False
        return True

    def _include_enum(self, enum: EnumDecl) -> bool:
        return not is_internal_name(enum.name) and not is_reserved_namespace(enum.namespace)

    def collect_model(self, model: ModelDecl) -> ModelDef:
        """Resolve a model declaration and its annotations."""
        table_options = self.metadata.get_table_options(model)

        schema_name = table_options.schema if table_options else None
        if not schema_name:
            config = self.metadata.get_configuration(model.namespace)
            schema_name = config.schema if config else None

        composite = self.metadata.get_composite_id(model)
        composite_key = CompositeKey(composite.fields, composite.name) if composite else None

        unique_constraints = ()
        if self.metadata.is_unique(model):
            unique_options = self.metadata.get_unique_options(model)
            if unique_options and unique_options.columns:
                unique_constraints = (UniqueConstraint(unique_options.columns, unique_options.name),)
            else:
                logger.debug(f"Model-level unique on {model.name} names no columns, ignoring")

        return ModelDef(
            name=model.name,
            namespace=model.namespace,
            properties={
                name: self.collect_property(prop)
                for name, prop in model.properties.items()
            },
            table_name=self.metadata.get_table_name(model),
            schema_name=schema_name or None,
            composite_key=composite_key,
            unique_constraints=unique_constraints,
            is_junction=self.metadata.is_junction(model),
        )

    def collect_property(self, prop: PropertyDecl) -> PropertyDef:
        """Resolve a property declaration and its annotations."""
        uuid_options = self.metadata.get_uuid_options(prop)
        unique_options = self.metadata.get_unique_options(prop)
        index_options = self.metadata.get_index_options(prop)

        return PropertyDef(
            name=prop.name,
            type=prop.type,
            optional=prop.optional,
            column_name=self.metadata.get_column_name(prop),
            is_primary_key=self.metadata.is_primary_key(prop),
            is_auto_increment=self.metadata.is_auto_increment(prop),
            is_uuid=self.metadata.is_uuid(prop),
            uuid_default_random=bool(uuid_options and uuid_options.default_random),
            is_unique=self.metadata.is_unique(prop),
            unique_name=unique_options.name if unique_options else None,
            is_indexed=self.metadata.is_indexed(prop),
            index_name=index_options.name if index_options else None,
            index_expression=index_options.expression if index_options else None,
            default_value=self._default_value(prop),
            relationship_kind=self._relationship_kind(prop),
            relation_options=self.metadata.get_relation_options(prop),
        )

    def _default_value(self, prop: PropertyDecl) -> Optional[DefaultValue]:
        # A raw SQL expression wins over a plain default
        expression = self.metadata.get_sql_expression(prop)
        if expression:
            return SqlExpression(expression)
        return self.metadata.get_default_value(prop)

    def _relationship_kind(self, prop: PropertyDecl) -> RelationshipKind:
        """First registered tag in the order one-to-one, one-to-many, many-to-one, many-to-many, generic."""
        checks = (
            (self.metadata.is_one_to_one, RelationshipKind.ONE_TO_ONE),
            (self.metadata.is_one_to_many, RelationshipKind.ONE_TO_MANY),
            (self.metadata.is_many_to_one, RelationshipKind.MANY_TO_ONE),
            (self.metadata.is_many_to_many, RelationshipKind.MANY_TO_MANY),
            (self.metadata.is_relation, RelationshipKind.GENERIC),
        )
        for check, kind in checks:
            if check(prop):
                return kind
        return RelationshipKind.NONE

    def collect_enum(self, enum: EnumDecl) -> EnumDef:
        """Resolve an enum; members use their value when one was declared."""
        members = []
        for name, value in enum.members.items():
            member = str(value) if value is not None else name
            if member not in members:
                members.append(member)
        return EnumDef(name=enum.name, members=tuple(members))
