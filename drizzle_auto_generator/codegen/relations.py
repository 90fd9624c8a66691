"""
Relation declarations.

Every model with relationships gets one ``relations(...)`` block. Entries are
split into to-one entries (``one(...)``) and to-many entries (``many(...)``).
Junction models instead get one ``one(...)`` per foreign key so both sides of
the bridge are always expressed.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from ..constants import RelationshipDefaults
from ..domain.models import EdgeKind, ModelDef, RelationshipEdge, RelationshipKind, SchemaModel
from ..domain.naming import (
    pluralize,
    relations_variable_name,
    strip_foreign_key_suffix,
    table_variable_name,
)
from ..domain.relationships import JunctionDetector
from .base import INDENT, DeclarationRenderer, quote, resolve_foreign_key, upper_first

logger = logging.getLogger(__name__)


@dataclass
class RelationEntry:
    """One entry of a relations block before its final name is known."""

    name: str
    # Name tried when ``name`` is already taken in the block
    alternative: Optional[str]
    call: str
    target_var: str
    fields: Optional[str] = None
    references: Optional[str] = None
    relation_name: Optional[str] = None

    def render(self, name: str) -> str:
        if self.fields is None and self.relation_name is None:
            return f"{INDENT}{name}: {self.call}({self.target_var}),"

        if self.fields is None:
            return (
                f"{INDENT}{name}: {self.call}({self.target_var}, "
                f"{{ relationName: {quote(self.relation_name)} }}),"
            )

        inner = INDENT * 2
        lines = [
            f"{INDENT}{name}: {self.call}({self.target_var}, {{",
            f"{inner}fields: [{self.fields}],",
            f"{inner}references: [{self.references}],",
        ]
        if self.relation_name is not None:
            lines.append(f"{inner}relationName: {quote(self.relation_name)},")
        lines.append(f"{INDENT}}}),")
        return "\n".join(lines)


def _pair(edge: RelationshipEdge) -> FrozenSet[str]:
    return frozenset((edge.from_model, edge.to_model))


class RelationsRenderer(DeclarationRenderer):
    """Renders the relation blocks of every collected model."""

    def render_blocks(self, schema: SchemaModel) -> List[str]:
        detector = JunctionDetector(schema.model_lookup)
        labels = self._disambiguation_labels(schema)

        blocks = []
        for model in schema.models:
            block = None
            if detector.is_junction(model):
                block = self.render_junction(model, detector)
            if block is None:
                block = self.render_model(model, schema, labels)
            if block is not None:
                blocks.append(block)
        return blocks

    def _disambiguation_labels(self, schema: SchemaModel) -> Dict[int, str]:
        """
        Labels for edges that need a ``relationName``.

        Needed when more than one edge links the same pair of models, and for
        self-referencing edges. Keyed by edge position in the schema.
        """
        keyed = [
            (position, edge)
            for position, edge in enumerate(schema.relationships)
            if not edge.is_many_to_many
        ]
        pair_counts = Counter(_pair(edge) for _, edge in keyed)

        labels = {}
        for position, edge in keyed:
            if pair_counts[_pair(edge)] < 2 and edge.from_model != edge.to_model:
                continue
            site = edge.foreign_key()
            labels[position] = (
                edge.relation_name
                or (site.owner_field if site else None)
                or f"{edge.from_model.lower()}_{edge.to_model.lower()}"
            )
        return labels

    def render_model(self, model: ModelDef, schema: SchemaModel, labels: Dict[int, str]) -> Optional[str]:
        """Render the relations block of a regular model, or None when it has no relations."""
        table_var = table_variable_name(model.name)
        one_entries: List[RelationEntry] = []
        many_entries: List[RelationEntry] = []

        for position, edge in enumerate(schema.relationships):
            label = labels.get(position)

            if edge.kind is EdgeKind.MANY_TO_MANY:
                if edge.from_model == model.name and edge.junction_table:
                    name = edge.relation_name or pluralize(edge.to_model.lower())
                    many_entries.append(RelationEntry(
                        name=name,
                        alternative=None,
                        call="many",
                        target_var=table_variable_name(edge.junction_table),
                    ))
                continue

            if edge.kind is EdgeKind.ONE_TO_ONE:
                if edge.from_model == model.name:
                    one_entries.append(self._owner_entry(
                        edge, schema, table_var,
                        name=edge.relation_name or edge.to_model.lower(),
                        target=edge.to_model,
                        label=label,
                    ))
                if edge.to_model == model.name:
                    one_entries.append(RelationEntry(
                        name=edge.from_model.lower(),
                        alternative=None,
                        call="one",
                        target_var=table_variable_name(edge.from_model),
                        relation_name=label,
                    ))
                continue

            # one-to-many: "many" lives on from_model, the key on to_model
            if edge.to_model == model.name:
                if edge.declared_kind is RelationshipKind.MANY_TO_ONE:
                    name = edge.relation_name
                else:
                    name = edge.from_model.lower()
                one_entries.append(self._owner_entry(
                    edge, schema, table_var,
                    name=name,
                    target=edge.from_model,
                    label=label,
                ))
            if edge.from_model == model.name:
                plural = pluralize(edge.to_model.lower())
                if edge.declared_kind is RelationshipKind.ONE_TO_MANY:
                    name = edge.relation_name
                else:
                    name = plural
                anchor = strip_foreign_key_suffix(edge.to_field) if edge.to_field else None
                many_entries.append(RelationEntry(
                    name=name,
                    alternative=f"{anchor}{upper_first(plural)}" if anchor else None,
                    call="many",
                    target_var=table_variable_name(edge.to_model),
                    relation_name=label,
                ))

        entries = one_entries + many_entries
        if not entries:
            return None

        return self._render_block(model, entries, bool(one_entries), bool(many_entries))

    def _owner_entry(
        self,
        edge: RelationshipEdge,
        schema: SchemaModel,
        table_var: str,
        name: str,
        target: str,
        label: Optional[str],
    ) -> RelationEntry:
        """To-one entry on the model holding the key column."""
        target_var = table_variable_name(target)
        site = resolve_foreign_key(edge, schema)
        if site is None:
            logger.debug(f"Relation {edge.from_model} -> {edge.to_model} has no key column, rendering without fields")
            return RelationEntry(name=name, alternative=None, call="one",
                                 target_var=target_var, relation_name=label)

        return RelationEntry(
            name=name,
            alternative=strip_foreign_key_suffix(site.owner_field),
            call="one",
            target_var=target_var,
            fields=f"{table_var}.{site.owner_field}",
            references=f"{target_var}.{site.referenced_field}",
            relation_name=label,
        )

    def render_junction(self, model: ModelDef, detector: JunctionDetector) -> Optional[str]:
        """Render one to-one entry per foreign key of a junction model."""
        foreign_keys = detector.foreign_keys(model)
        if len(foreign_keys) < 2:
            return None

        table_var = table_variable_name(model.name)
        entries = []
        for prop, referenced in foreign_keys:
            target_var = table_variable_name(referenced.name)
            entries.append(RelationEntry(
                name=referenced.name.lower(),
                alternative=strip_foreign_key_suffix(prop.name),
                call="one",
                target_var=target_var,
                fields=f"{table_var}.{prop.name}",
                references=f"{target_var}.{RelationshipDefaults.REFERENCED_FIELD}",
            ))

        return self._render_block(model, entries, True, False)

    def _render_block(self, model: ModelDef, entries: List[RelationEntry], has_one: bool, has_many: bool) -> str:
        self.imports.needs_relations()

        helpers = ", ".join(name for name, used in (("one", has_one), ("many", has_many)) if used)
        lines = [
            f"export const {relations_variable_name(model.name)} = "
            f"relations({table_variable_name(model.name)}, ({{ {helpers} }}) => ({{"
        ]
        for entry, name in zip(entries, self._resolve_names(entries)):
            lines.append(entry.render(name))
        lines.append("}));")
        return "\n".join(lines)

    @staticmethod
    def _resolve_names(entries: List[RelationEntry]) -> List[str]:
        """Resolve naming conflicts between entries of one block."""
        names_used = set()
        resolved = []

        for entry in entries:
            name = entry.name
            if name in names_used and entry.alternative and entry.alternative not in names_used:
                name = entry.alternative

            original_name = name
            counter = 1
            while name in names_used:
                name = f"{original_name}_{counter}"
                counter += 1

            names_used.add(name)
            resolved.append(name)

        return resolved
