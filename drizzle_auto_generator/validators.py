"""
Validation utilities for Drizzle Auto Generator.

These checks run while annotations are registered, before anything reaches
the schema engine. An annotation that fails validation is reported and never
stored, so the engine only ever sees well-formed metadata.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from .constants import IdentifierRules, RelationshipDefaults


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    errors: List[str]
    warnings: List[str]

    def __post_init__(self):
        """Ensure consistency."""
        if self.errors and self.is_valid:
            self.is_valid = False

    def add_error(self, error: str) -> None:
        """Add an error."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning."""
        self.warnings.append(warning)


def validate_identifier(name: str, context: str = "identifier") -> ValidationResult:
    """
    Validate a SQL identifier (table, schema or column name).

    Args:
        name: Identifier to validate
        context: Context for error messages

    Returns:
        Validation result
    """
    result = ValidationResult(True, [], [])

    if not name:
        result.add_error(f"{context} cannot be empty")
        return result

    if not IdentifierRules.IDENTIFIER.match(name):
        result.add_error(f"{context} '{name}' must be a valid identifier")

    # PostgreSQL truncates identifiers past 63 bytes
    if len(name) > 63:
        result.add_warning(f"{context} '{name}' is longer than 63 characters")

    return result


class AnnotationValidator:
    """Validates annotation arguments before they are registered."""

    @staticmethod
    def validate_table_options(name: Optional[str], schema: Optional[str]) -> ValidationResult:
        """Validate the optional table and schema names of a table annotation."""
        result = ValidationResult(True, [], [])

        if name is not None:
            table_result = validate_identifier(name, "Table name")
            for error in table_result.errors:
                result.add_error(error)

        if schema is not None:
            schema_result = validate_identifier(schema, "Schema name")
            for error in schema_result.errors:
                result.add_error(error)

        return result

    @staticmethod
    def validate_column_name(name: Optional[str]) -> ValidationResult:
        """Validate a column name override."""
        if name is None:
            return ValidationResult(True, [], [])
        return validate_identifier(name, "Column name")

    @staticmethod
    def validate_default_value(value: Any) -> ValidationResult:
        """Validate a plain default value."""
        result = ValidationResult(True, [], [])

        if value is None:
            result.add_error("Default value cannot be null")
        elif not isinstance(value, (str, int, float, bool)):
            result.add_error(
                f"Default value must be a string, number or boolean, got {type(value).__name__}"
            )

        return result

    @staticmethod
    def validate_sql_expression(expression: Optional[str]) -> ValidationResult:
        """Validate a raw SQL expression."""
        result = ValidationResult(True, [], [])

        if not expression or not expression.strip():
            result.add_error("SQL expression cannot be empty")

        return result

    @staticmethod
    def validate_many_to_many(through: Optional[str]) -> ValidationResult:
        """Validate the options of a many-to-many relation."""
        result = ValidationResult(True, [], [])

        if not through:
            result.add_error("many-to-many relationships require a 'through' table")

        return result

    @staticmethod
    def validate_foreign_key_actions(
        on_delete: Optional[str], on_update: Optional[str]
    ) -> ValidationResult:
        """Validate ON DELETE / ON UPDATE actions of a relation."""
        result = ValidationResult(True, [], [])

        for label, action in (("onDelete", on_delete), ("onUpdate", on_update)):
            if action is not None and action not in RelationshipDefaults.FOREIGN_KEY_ACTIONS:
                allowed = ", ".join(sorted(RelationshipDefaults.FOREIGN_KEY_ACTIONS))
                result.add_error(f"{label} action '{action}' is not one of: {allowed}")

        return result
