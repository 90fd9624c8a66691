"""
Custom exception hierarchy for Drizzle Auto Generator.

This module provides a comprehensive exception system with rich context
and error recovery guidance for contributors and users.
"""

from typing import Dict, Any, Optional, List


class DrizzleAutoGeneratorError(Exception):
    """
    Base exception for all Drizzle Auto Generator errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [super().__str__()]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(DrizzleAutoGeneratorError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify all required fields are present",
                "Check the documentation for configuration examples"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class DeclarationError(DrizzleAutoGeneratorError):
    """Raised when a declaration document cannot be read or understood."""

    def __init__(self, message: str, source: str = None, declaration: str = None, **kwargs):
        context = kwargs.get('context', {})
        if source:
            context['source'] = source
        if declaration:
            context['declaration'] = declaration

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the YAML syntax of the declaration file",
                "Verify every model and enum has a name",
                "Check property entries use the documented keys",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="DECLARATION_ERROR"
        )


class CodeGenerationError(DrizzleAutoGeneratorError):
    """Raised when generated artifacts cannot be written."""

    def __init__(self, message: str, component: str = None, path: str = None, **kwargs):
        context = kwargs.get('context', {})
        if component:
            context['component'] = component  # e.g., 'schema', 'index'
        if path:
            context['path'] = path

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the output directory is writable",
                "Verify there is enough free disk space",
                "Try writing to a different output directory"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CODE_GENERATION_ERROR"
        )

