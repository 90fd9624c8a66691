"""
Relationship analysis domain logic for Drizzle Auto Generator.

This module turns explicit relation annotations and foreign-key naming
conventions into a single, deduplicated list of directed relationship edges.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..constants import ForeignKeyPatterns, JunctionShape, RelationshipDefaults
from ..declarations import TypeRef
from ..metadata import ManyToManyOptions, RelationOptions
from .models import EdgeKind, ModelDef, PropertyDef, RelationshipEdge, RelationshipKind
from .naming import default_foreign_key
from .type_mapping import is_integer_type, is_string_type

logger = logging.getLogger(__name__)

ForeignKey = Tuple[PropertyDef, ModelDef]


def match_foreign_key(property_name: str, models_by_lower_name: Dict[str, ModelDef]) -> Optional[ModelDef]:
    """
    Guess which model a property references from its name.

    Patterns are tried in a fixed order (``<name>id``, ``<name>_id``,
    ``id_<name>``). For each pattern hit the extracted token is looked up as
    is, then with a trailing ``s`` stripped, then with an ``s`` appended.
    The first lookup that succeeds wins.

    Args:
        property_name: Name of the property to analyze
        models_by_lower_name: Known models keyed by lowercased name

    Returns:
        The referenced model, or None when the name does not look like a key

    Example:
        >>> match_foreign_key("user_id", {"user": user_model}).name
        'User'
    """
    lowered = property_name.lower()

    for pattern in ForeignKeyPatterns.PATTERNS:
        match = pattern.match(lowered)
        if not match:
            continue

        token = match.group(1)
        suffix = ForeignKeyPatterns.PLURAL_SUFFIX
        singular = token[:-len(suffix)] if token.endswith(suffix) else token
        for candidate in (token, singular, f"{token}{suffix}"):
            referenced = models_by_lower_name.get(candidate)
            if referenced is not None:
                return referenced

    return None


class JunctionDetector:
    """
    Classifies models as many-to-many junction tables.

    Explicit junction marking always wins; otherwise a model qualifies by
    shape: a small number of properties, at least two of which are
    string/integer scalars named like foreign keys.
    """

    def __init__(self, model_lookup: Dict[str, ModelDef]):
        self.model_lookup = model_lookup

    def foreign_keys(self, model: ModelDef) -> List[ForeignKey]:
        """Foreign-key-shaped scalar properties of a model, in declaration order."""
        found = []
        for prop in model.properties.values():
            if not (is_string_type(prop.type) or is_integer_type(prop.type)):
                continue
            referenced = match_foreign_key(prop.name, self.model_lookup)
            if referenced is not None:
                found.append((prop, referenced))
        return found

    def is_junction_shaped(self, model: ModelDef) -> bool:
        """Check the structural junction heuristic, ignoring annotations."""
        count = len(model.properties)
        if count < JunctionShape.MIN_PROPERTIES or count > JunctionShape.MAX_PROPERTIES:
            return False
        return len(self.foreign_keys(model)) >= JunctionShape.MIN_FOREIGN_KEYS

    def is_junction(self, model: ModelDef) -> bool:
        return model.is_junction or self.is_junction_shaped(model)


class RelationshipResolver:
    """
    Resolves the relationship edges of a set of models.

    Explicit relation annotations are turned into edges first. A property
    with any explicit relation tag never reaches the naming heuristic, even
    when its annotation produced no edge.
    """

    def __init__(self, model_lookup: Dict[str, ModelDef]):
        """
        Initialize the resolver.

        Args:
            model_lookup: Models keyed by lowercased name
        """
        self.model_lookup = model_lookup
        self.junctions = JunctionDetector(model_lookup)

    def resolve(self, models: Iterable[ModelDef]) -> List[RelationshipEdge]:
        """
        Resolve every relationship between the given models.

        Args:
            models: Collected models in declaration order

        Returns:
            Deduplicated edges in the order models and properties were visited
        """
        edges: List[RelationshipEdge] = []
        complements: List[RelationshipEdge] = []
        processed_junctions: Set[str] = set()

        for model in models:
            anchored = self._explicit_anchor_fields(model)

            for prop in model.properties.values():
                if prop.has_relationship:
                    explicit = self._explicit_edges(model, prop)
                    if explicit:
                        edges.append(explicit[0])
                        complements.extend(explicit[1:])
                    continue

                if not (is_string_type(prop.type) or is_integer_type(prop.type)):
                    continue

                referenced = match_foreign_key(prop.name, self.model_lookup)
                if referenced is None:
                    continue

                if self.junctions.is_junction(model):
                    if model.name not in processed_junctions:
                        processed_junctions.add(model.name)
                        edges.extend(self._junction_edges(model))
                    continue

                if prop.name in anchored:
                    logger.debug(f"{model.name}.{prop.name} is anchored by an explicit relation, skipping inference")
                    continue

                logger.debug(f"Inferred {referenced.name} -> {model.name} via {prop.name}")
                edges.append(RelationshipEdge(
                    kind=EdgeKind.ONE_TO_MANY,
                    from_model=referenced.name,
                    to_model=model.name,
                    to_field=prop.name,
                ))

        # Complements go last so a relation declared on the far side keeps its own name
        return self._deduplicate(edges + complements)

    def _explicit_anchor_fields(self, model: ModelDef) -> Set[str]:
        """Local fields named by explicit non-many-to-many relations of a model."""
        anchored = set()
        for prop in model.properties.values():
            if prop.relationship_kind in (RelationshipKind.NONE, RelationshipKind.MANY_TO_MANY):
                continue
            if prop.relation_options is not None:
                anchored.update(prop.relation_options.fields)
        return anchored

    def _target_model(self, type_ref: TypeRef) -> Optional[ModelDef]:
        """Find the related model of a model or list-of-models type."""
        if type_ref.is_array and type_ref.element is not None:
            type_ref = type_ref.element
        if not type_ref.is_model:
            return None
        return self.model_lookup.get(type_ref.name.lower())

    @staticmethod
    def _classify_generic(prop: PropertyDef) -> RelationshipKind:
        """Pick a concrete relationship kind for a generic relation from the property shape."""
        if prop.type.is_array:
            return RelationshipKind.ONE_TO_MANY
        if prop.relation_options is not None and prop.relation_options.fields:
            return RelationshipKind.MANY_TO_ONE
        return RelationshipKind.ONE_TO_ONE

    def _explicit_edges(self, model: ModelDef, prop: PropertyDef) -> List[RelationshipEdge]:
        """
        Derive edges from an explicit relation annotation.

        Returns an empty list when the related model (or the junction of a
        many-to-many relation) is not part of the collected schema. For
        many-to-many the complementary edge follows the declared one.
        """
        target = self._target_model(prop.type)
        if target is None:
            logger.debug(f"{model.name}.{prop.name} has no collected target model, no relation emitted")
            return []

        options = prop.relation_options or RelationOptions()
        kind = prop.relationship_kind
        if kind is RelationshipKind.GENERIC:
            kind = self._classify_generic(prop)

        shared = dict(
            relation_name=options.name or prop.name,
            on_delete=options.on_delete,
            on_update=options.on_update,
            declared_kind=kind,
        )

        if kind is RelationshipKind.ONE_TO_ONE or kind is RelationshipKind.ONE_TO_MANY:
            edge_kind = EdgeKind.ONE_TO_ONE if kind is RelationshipKind.ONE_TO_ONE else EdgeKind.ONE_TO_MANY
            return [RelationshipEdge(
                kind=edge_kind,
                from_model=model.name,
                to_model=target.name,
                from_field=options.first_field or prop.name,
                to_field=options.first_reference or RelationshipDefaults.REFERENCED_FIELD,
                **shared,
            )]

        if kind is RelationshipKind.MANY_TO_ONE:
            # Stored from the "one" side so every one-to-many edge points the same way
            return [RelationshipEdge(
                kind=EdgeKind.ONE_TO_MANY,
                from_model=target.name,
                to_model=model.name,
                from_field=options.first_reference or RelationshipDefaults.REFERENCED_FIELD,
                to_field=options.first_field or prop.name,
                **shared,
            )]

        return self._many_to_many_edges(model, prop, target, options, shared)

    def _many_to_many_edges(
        self,
        model: ModelDef,
        prop: PropertyDef,
        target: ModelDef,
        options: RelationOptions,
        shared: dict,
    ) -> List[RelationshipEdge]:
        through = options.through if isinstance(options, ManyToManyOptions) else None
        junction = self.model_lookup.get(through.lower()) if through else None
        if junction is None:
            logger.debug(f"{model.name}.{prop.name} names no collected junction table, no relation emitted")
            return []

        from_field = (
            (options.foreign_key if isinstance(options, ManyToManyOptions) else None)
            or default_foreign_key(model.name)
        )
        to_field = options.first_reference or default_foreign_key(target.name)

        declared = RelationshipEdge(
            kind=EdgeKind.MANY_TO_MANY,
            from_model=model.name,
            to_model=target.name,
            from_field=from_field,
            to_field=to_field,
            junction_table=junction.name,
            **shared,
        )
        complement = RelationshipEdge(
            kind=EdgeKind.MANY_TO_MANY,
            from_model=target.name,
            to_model=model.name,
            from_field=to_field,
            to_field=from_field,
            junction_table=junction.name,
            on_delete=options.on_delete,
            on_update=options.on_update,
            declared_kind=RelationshipKind.MANY_TO_MANY,
        )
        return [declared, complement]

    def _junction_edges(self, junction: ModelDef) -> List[RelationshipEdge]:
        """
        Analyze a junction table to extract a many-to-many relationship.

        Only the first two foreign keys (in declaration order) form the pair;
        further foreign keys stay plain columns.
        """
        foreign_keys = self.junctions.foreign_keys(junction)
        if len(foreign_keys) < JunctionShape.MIN_FOREIGN_KEYS:
            return []

        (first_prop, first_model), (second_prop, second_model) = foreign_keys[:2]
        logger.debug(f"Detected junction {junction.name} between {first_model.name} and {second_model.name}")

        return [
            RelationshipEdge(
                kind=EdgeKind.MANY_TO_MANY,
                from_model=first_model.name,
                to_model=second_model.name,
                from_field=first_prop.name,
                to_field=second_prop.name,
                junction_table=junction.name,
            ),
            RelationshipEdge(
                kind=EdgeKind.MANY_TO_MANY,
                from_model=second_model.name,
                to_model=first_model.name,
                from_field=second_prop.name,
                to_field=first_prop.name,
                junction_table=junction.name,
            ),
        ]

    def _deduplicate(self, edges: List[RelationshipEdge]) -> List[RelationshipEdge]:
        """Remove duplicate edges, keeping the first occurrence."""
        seen = set()
        unique_edges = []

        for edge in edges:
            key = edge.dedup_key()
            if key in seen:
                logger.debug(f"Skipping duplicate relationship {edge.from_model} -> {edge.to_model}")
                continue
            seen.add(key)
            unique_edges.append(edge)

        return unique_edges
