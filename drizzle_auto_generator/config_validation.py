"""
Configuration schema and loading for Drizzle Auto Generator.

Configuration comes from an optional YAML file, overridden by the command-line
arguments that were actually given, and is validated with pydantic.
"""

from argparse import Namespace
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Self

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .constants import DefaultConfig
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# --- Pydantic Models for Configuration Schema ---
class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    inputs: List[str] = Field(
        default_factory=list,
        description="Declaration files (YAML) to load, in order.",
    )
    output_dir: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Directory for generated output.",
    )
    source_dir: str = Field(
        DefaultConfig.SOURCE_DIR,
        min_length=1,
        description="Sub-directory of output_dir receiving the generated files.",
    )
    schema_file: str = Field(
        DefaultConfig.SCHEMA_FILE,
        min_length=1,
        description="File name of the generated schema module.",
    )
    index_file: str = Field(
        DefaultConfig.INDEX_FILE,
        min_length=1,
        description="File name of the generated re-export module.",
    )
    no_emit: bool = Field(
        default=DefaultConfig.NO_EMIT,
        description="Skip generation entirely.",
    )

    @field_validator("inputs", mode="before")
    @classmethod
    def check_inputs(cls, v: Any) -> List[str]:
        """Accept a single path or a list of non-empty paths."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            raise ValueError("inputs must be a path or a list of paths.")

        processed_list = []
        for index, item in enumerate(v):
            if not isinstance(item, str):
                raise ValueError(
                    f"Item at index {index} must be a string, found: {type(item).__name__}"
                )
            stripped_item = item.strip()
            if not stripped_item:
                raise ValueError(f"Item at index {index} cannot be empty or just whitespace.")
            processed_list.append(stripped_item)
        return processed_list

    @field_validator("schema_file", "index_file")
    @classmethod
    def check_typescript_file(cls, v: str) -> str:
        """Generated modules are plain TypeScript file names."""
        if Path(v).name != v:
            raise ValueError(f"'{v}' must be a file name, not a path.")
        if not v.endswith(".ts"):
            raise ValueError(f"'{v}' must end with '.ts'.")
        return v

    @model_validator(mode="after")
    def check_file_names(self) -> Self:
        """Perform cross-field validation checks."""
        if self.schema_file == self.index_file:
            raise ValueError("schema_file and index_file must be different files.")
        return self

    model_config = ConfigDict(
        extra="ignore",  # Allow and ignore extra fields from input dict
    )


# --- Validation Function ---
def validate_and_parse_config(config_dict: Dict[str, Any], config_file: Optional[str] = None) -> ToolConfigSchema:
    """
    Validates a raw configuration dictionary against the ToolConfigSchema.

    Raises:
        ConfigurationError: with one context entry per invalid field
    """
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully against schema.")
        return validated_config
    except ValidationError as e:
        context = {}
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
            context[loc_str] = error.get("msg", "Unknown validation error")

        raise ConfigurationError(
            "Configuration validation failed",
            config_file=config_file,
            context=context,
        ) from e


def load_config(config_path: Optional[str], cli_args: Namespace) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.

    Raises:
        ConfigurationError: when the file cannot be read or parsed, or validation fails
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        config_file = Path(config_path)
        if not config_file.is_file():
            raise ConfigurationError(
                f"Config file not found at {config_path}",
                config_file=config_path,
            )
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Error parsing YAML file {config_path}: {e}",
                config_file=config_path,
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Error reading config file {config_path}: {e}",
                config_file=config_path,
            ) from e

        if yaml_config and isinstance(yaml_config, dict):
            raw_config.update(yaml_config)
            # Relative inputs in a config file are relative to that file
            inputs = raw_config.get("inputs")
            if isinstance(inputs, str):
                inputs = [inputs]
            if isinstance(inputs, list):
                base = config_file.resolve().parent
                raw_config["inputs"] = [
                    str(base / item) if isinstance(item, str) and not Path(item).is_absolute() else item
                    for item in inputs
                ]
            logger.debug(f"Loaded configuration from {config_path}")
        elif yaml_config:
            logger.warning(f"Content in config file {config_path} is not a dictionary. Ignoring file content.")

    # 2. Override with CLI arguments (only those explicitly provided)
    overridden_keys = set()
    for key, value in vars(cli_args).items():
        if value is not None and key in ToolConfigSchema.model_fields:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {sorted(overridden_keys)}")

    # 3. Validate
    logger.debug("Validating final configuration...")
    validated_config = validate_and_parse_config(raw_config, config_file=config_path)

    # 4. Post-validation adjustments
    validated_config.output_dir = str(Path(validated_config.output_dir).resolve())

    logger.debug("Configuration loaded and validated successfully.")
    return validated_config
