"""
Drizzle schema code generator.

``SchemaRenderer`` turns a resolved ``SchemaModel`` into the text of
``schema.ts``; ``CodeGenerator`` is the facade that renders both artifacts and
writes them under the output directory.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..constants import DefaultConfig, OutputText
from ..domain.models import GenerationResult, SchemaModel
from ..domain.type_mapping import TypeMapper
from ..exceptions import CodeGenerationError
from .base import DeclarationRenderer
from .enums import EnumRenderer
from .imports import ImportTracker
from .relations import RelationsRenderer
from .tables import TableRenderer

logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to the package
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        # TypeScript output, never HTML-escape
        autoescape=select_autoescape(["html", "xml"], default_for_string=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    return env


def render_template(env: Environment, template_name: str, context: Dict[str, Any]) -> str:
    """Renders a Jinja template to a string."""
    template = env.get_template(template_name)
    return template.render(context)


class SchemaRenderer:
    """
    Renders a resolved schema as Drizzle source.

    Each call works on a fresh ``ImportTracker``, so rendering the same
    schema twice yields identical text.
    """

    def __init__(self, env: Environment = None):
        self.env = env or setup_jinja_env()

    def render(self, schema: SchemaModel) -> str:
        """
        Render ``schema.ts``.

        Args:
            schema: Resolved schema model

        Returns:
            Generated source text; a fixed placeholder when there is nothing to declare
        """
        if schema.is_empty:
            return render_template(self.env, "schema.ts.j2", {
                "placeholder": "\n".join(OutputText.EMPTY_SCHEMA),
            })

        imports = ImportTracker()
        sections = self._renderers(imports)
        enums, tables, relations = (renderer.render_blocks(schema) for renderer in sections)

        # The import block is rendered last, once every section registered its symbols
        return render_template(self.env, "schema.ts.j2", {
            "header": OutputText.SCHEMA_HEADER,
            "import_block": imports.render(),
            "enums_section": OutputText.ENUMS_SECTION,
            "enums": self._join(enums),
            "tables_section": OutputText.TABLES_SECTION,
            "tables": self._join(tables),
            "relations_section": OutputText.RELATIONS_SECTION,
            "relations": self._join(relations),
        })

    @staticmethod
    def _renderers(imports: ImportTracker) -> List[DeclarationRenderer]:
        return [
            EnumRenderer(imports),
            TableRenderer(imports, TypeMapper(imports)),
            RelationsRenderer(imports),
        ]

    @staticmethod
    def _join(blocks: List[str]) -> str:
        return "\n\n".join(blocks)

    def render_index(self, schema_file: str = DefaultConfig.SCHEMA_FILE) -> str:
        """Render the re-export module for the generated schema."""
        return render_template(self.env, "index.ts.j2", {
            "header": OutputText.INDEX_HEADER,
            "schema_module": Path(schema_file).stem,
        })


class CodeGenerator:
    """Facade for rendering and writing the generated artifacts."""

    def __init__(
        self,
        output_dir: str = DefaultConfig.OUTPUT_DIR,
        source_dir: str = DefaultConfig.SOURCE_DIR,
        schema_file: str = DefaultConfig.SCHEMA_FILE,
        index_file: str = DefaultConfig.INDEX_FILE,
        renderer: SchemaRenderer = None,
    ):
        self.output_dir = Path(output_dir)
        self.source_path = self.output_dir / source_dir
        self.schema_file = schema_file
        self.index_file = index_file
        self.renderer = renderer or SchemaRenderer()

    def render(self, schema: SchemaModel) -> GenerationResult:
        """Render both artifacts without touching the filesystem."""
        return GenerationResult(
            schema_source=self.renderer.render(schema),
            index_source=self.renderer.render_index(self.schema_file),
        )

    def generate(self, schema: SchemaModel, no_emit: bool = False) -> GenerationResult:
        """
        Render and write ``schema.ts`` and ``index.ts``.

        Args:
            schema: Resolved schema model
            no_emit: Skip generation entirely; nothing is rendered or written

        Returns:
            Generation result listing the written files
        """
        if no_emit:
            logger.info("Emission disabled, skipping generation")
            return GenerationResult(schema_source="", index_source="", skipped=True)

        result = self.render(schema)
        # Both artifacts are rendered before the first write
        for file_name, content in (
            (self.schema_file, result.schema_source),
            (self.index_file, result.index_source),
        ):
            path = self.source_path / file_name
            self.write_file(path, content)
            result.written_files.append(str(path))

        return result

    def write_file(self, output_path: Path, content: str) -> None:
        """Write generated content, creating parent directories as needed."""
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Error writing generated file '{output_path}': {e}")
            raise CodeGenerationError(
                f"Could not write generated file: {e}",
                component=output_path.stem,
                path=str(output_path),
            ) from e

        logger.info(f"Generated file: {output_path}")
