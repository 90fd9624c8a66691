"""
Schema model construction for Drizzle Auto Generator.

This module orchestrates the schema engine: it collects the declarations,
resolves relationships and returns the ``SchemaModel`` handed to rendering.

Example:
    >>> schema = build_schema_model(program, builder.build())
    >>> source = generate_drizzle_schema(program, builder.build())
"""

import logging

from .collector import SchemaCollector
from .codegen.code_generator import SchemaRenderer
from .declarations import Program
from .domain.models import SchemaModel
from .domain.relationships import RelationshipResolver
from .metadata import MetadataStore

logger = logging.getLogger(__name__)


def build_schema_model(program: Program, metadata: MetadataStore) -> SchemaModel:
    """
    Collect declarations and resolve their relationships.

    Args:
        program: Loaded declarations
        metadata: Annotation side table for this run

    Returns:
        A fresh, fully resolved schema model
    """
    models, enums = SchemaCollector(metadata).collect(program)
    model_lookup = {model.lower_name: model for model in models}

    logger.debug(f"Resolving relationships between {len(models)} models")
    relationships = RelationshipResolver(model_lookup).resolve(models)

    return SchemaModel(
        models=models,
        enums=enums,
        relationships=relationships,
        model_lookup=model_lookup,
    )


def generate_drizzle_schema(program: Program, metadata: MetadataStore) -> str:
    """Run the whole engine and return the text of ``schema.ts``."""
    return SchemaRenderer().render(build_schema_model(program, metadata))
