import argparse
import logging
import sys
from typing import List, Optional

from drizzle_auto_generator.config_validation import load_config
from drizzle_auto_generator.loader import LoadResult, load_declarations
from drizzle_auto_generator.mapper import build_schema_model
from drizzle_auto_generator.codegen import CodeGenerator
from drizzle_auto_generator.exceptions import DrizzleAutoGeneratorError

from drizzle_auto_generator.colored_logging import (
    setup_colored_logging,
    get_colored_logger,
    log_success,
    log_progress,
    log_highlight,
    log_section
)

# Note: Colored logging will be configured after parsing args
logger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a Drizzle ORM (PostgreSQL) schema from model declarations."
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "-i",
        "--input",
        dest="inputs",
        action="append",
        help="Declaration file (YAML) to load. May be given several times. Overrides config file setting.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory to write the generated sources to. Overrides config file setting.",
    )
    parser.add_argument(
        "--no-emit",
        action="store_true",
        default=None,
        help="Load and resolve declarations without writing any file.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the generated schema instead of writing files.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    return parser


def main(argv: Optional[List[str]] = None):
    # --- Argument Parsing ---
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    use_colors = not args.no_color
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=use_colors)

    global logger
    logger = get_colored_logger(__name__)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")
    if args.no_color:
        logger.debug("Color output disabled.")

    # --- Main Execution Pipeline ---
    try:
        # 1. Load Configuration
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        log_success(logger, "Configuration loaded and validated successfully.")
        logger.debug(f"Effective configuration loaded: {config}")

        if not config.inputs:
            logger.warning("No declaration files given. Use -i/--input or 'inputs' in the config file.")

        # 2. Load Declarations
        log_section(logger, "Declarations")
        log_progress(logger, f"Loading {len(config.inputs)} declaration file(s)...")
        loaded: LoadResult = load_declarations(config.inputs)
        if loaded.diagnostics:
            logger.warning(f"{len(loaded.diagnostics)} annotation(s) were skipped.")
        log_success(logger, "Declarations loaded successfully.")

        # 3. Build Schema Model
        log_section(logger, "Schema Model")
        log_progress(logger, "Collecting tables and resolving relationships...")
        schema = build_schema_model(loaded.program, loaded.metadata)
        log_success(
            logger,
            f"Resolved {len(schema.models)} table(s), {len(schema.enums)} enum(s) "
            f"and {len(schema.relationships)} relationship(s).",
        )

        # 4. Generate Drizzle Code
        log_section(logger, "Drizzle Code Generation")
        generator = CodeGenerator(
            output_dir=config.output_dir,
            source_dir=config.source_dir,
            schema_file=config.schema_file,
            index_file=config.index_file,
        )
        if config.no_emit:
            logger.info("Nothing was generated (no_emit is set).")
            return

        if args.stdout:
            result = generator.render(schema)
            sys.stdout.write(result.schema_source)
            return

        result = generator.generate(schema)

        # --- Success ---
        log_section(logger, "COMPLETION")
        log_success(logger, "Drizzle schema generated successfully.")
        for path in result.written_files:
            log_highlight(logger, path)

    # --- Error Handling ---
    except DrizzleAutoGeneratorError as e:
        logger.error(f"{e}", exc_info=args.verbose)
        sys.exit(1)
    except Exception as e:
        logger.error(
            f"An unexpected error occurred during generation: {e}", exc_info=True
        )
        sys.exit(1)


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
