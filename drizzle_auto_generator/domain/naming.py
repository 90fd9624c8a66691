"""
Naming convention utilities for Drizzle Auto Generator.

This module derives the identifiers used in generated code (table, relation
and enum variables) and the default names of relation entries.
"""

import inflect

from ..constants import RelationshipDefaults


# Initialize inflect engine for pluralization
p = inflect.engine()


def lower_first(name: str) -> str:
    """
    Lowercase the first character of a name.

    Example:
        >>> lower_first("OrderStatus")
        'orderStatus'
    """
    return name[:1].lower() + name[1:]


def table_variable_name(model_name: str) -> str:
    """
    Name of the exported table variable for a model.

    Args:
        model_name: Declared model name

    Returns:
        Variable name such as ``userroleTable``

    Example:
        >>> table_variable_name("UserRole")
        'userroleTable'
    """
    return f"{model_name.lower()}Table"


def relations_variable_name(model_name: str) -> str:
    """Name of the exported relations variable for a model."""
    return f"{model_name.lower()}Relations"


def enum_variable_name(enum_name: str) -> str:
    """
    Name of the exported enum variable.

    Example:
        >>> enum_variable_name("OrderStatus")
        'orderStatusEnum'
    """
    return f"{lower_first(enum_name)}Enum"


def pluralize(word: str) -> str:
    """
    Pluralize a word for to-many relation names.

    Args:
        word: Singular word, usually a lowercased model name

    Returns:
        Plural form (``category`` becomes ``categories``)
    """
    if not word:
        return word
    plural = p.plural(word)
    return plural or f"{word}s"


def default_foreign_key(model_name: str) -> str:
    """Default foreign key column pointing at a model (``userId`` for ``User``)."""
    return f"{model_name.lower()}{RelationshipDefaults.FOREIGN_KEY_SUFFIX}"


def strip_foreign_key_suffix(column_name: str) -> str:
    """
    Generate a relation name from a foreign key column name.

    Args:
        column_name: Foreign key column (e.g., 'reviewerId', 'reviewer_id')

    Returns:
        Name without the key marker (e.g., 'reviewer')
    """
    lowered = column_name.lower()
    if lowered.endswith("_id") and len(column_name) > 3:
        return column_name[:-3]
    if lowered.startswith("id_") and len(column_name) > 3:
        return column_name[3:]
    if lowered.endswith("id") and len(column_name) > 2:
        return column_name[:-2]
    return column_name
