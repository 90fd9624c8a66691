"""
Drizzle code generation package.

Renders a resolved schema model as TypeScript source for Drizzle ORM.
"""

from .code_generator import CodeGenerator, SchemaRenderer, setup_jinja_env
from .imports import ImportTracker

__all__ = [
    'CodeGenerator',
    'ImportTracker',
    'SchemaRenderer',
    'setup_jinja_env',
]
