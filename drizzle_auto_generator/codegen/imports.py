"""
Import tracking for generated schemas.

Symbols are recorded while declarations are rendered and turned into the
import block once everything else is done, so the block lists exactly what
the file uses.
"""

from typing import Dict, List, Set

from ..constants import CoreCapabilities, ImportModules


class ImportTracker:
    """
    Tracks the symbols a generated schema needs from Drizzle.

    Two namespaces are kept apart: the pg-core column/table builders and the
    core module (``sql``, ``relations``). Each is a set, so requiring a symbol
    twice is harmless.

    Example:
        >>> imports = ImportTracker()
        >>> _ = imports.require("text").require("pgTable").needs_sql()
        >>> print(imports.render())
        import { pgTable, text } from 'drizzle-orm/pg-core';
        import { sql } from 'drizzle-orm';
    """

    def __init__(self):
        self._pg_core: Set[str] = set()
        self._core: Set[str] = set()

    def require(self, symbol: str) -> "ImportTracker":
        """Require a symbol from the pg-core module."""
        self._pg_core.add(symbol)
        return self

    def require_core(self, capability: str) -> "ImportTracker":
        """Require a symbol from the core module."""
        self._core.add(capability)
        return self

    def needs_sql(self) -> "ImportTracker":
        return self.require_core(CoreCapabilities.SQL)

    def needs_relations(self) -> "ImportTracker":
        return self.require_core(CoreCapabilities.RELATIONS)

    @property
    def pg_core_symbols(self) -> List[str]:
        return sorted(self._pg_core)

    @property
    def core_symbols(self) -> List[str]:
        return sorted(self._core)

    def render(self) -> str:
        """Render one sorted import statement per non-empty namespace, pg-core first."""
        namespaces: Dict[str, List[str]] = {
            ImportModules.PG_CORE: self.pg_core_symbols,
            ImportModules.CORE: self.core_symbols,
        }
        statements = [
            f"import {{ {', '.join(symbols)} }} from '{module}';"
            for module, symbols in namespaces.items()
            if symbols
        ]
        return "\n".join(statements)
