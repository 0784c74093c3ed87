"""
Configuration models and YAML I/O for bank-statement-ingest.

Two layers of configuration live here:

- ``ParserConfig``: the in-memory state a ``ParserBuilder`` accumulates
  (content, filename hint, explicit format). Validated on every assignment
  so an unknown format name fails at the setter, not later.
- ``IngestConfig``: the file-level run configuration that maps 1:1 to
  ``ingest.yaml`` (source file + output settings), used by ``ingest()`` and
  ``scripts/run_ingest.py``.

Key functions:
- load_config(path) -> IngestConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- generate_default_config(...) -> IngestConfig: Build a config for a file.

Why Pydantic + YAML:
- Pydantic gives us strict validation, type coercion, and clear error messages.
- YAML is human-editable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

from bank_statement_ingest.exceptions import ConfigError
from bank_statement_ingest.format_registry import FileFormat

logger = logging.getLogger(__name__)


class ParserConfig(BaseModel):
    """Builder state: what to parse and how to resolve its format."""

    model_config = ConfigDict(validate_assignment=True)

    content: str | None = None
    filename: str | None = None
    file_format: FileFormat | None = None


class SourceConfig(BaseModel):
    """Source file information."""

    input_path: str = Field(..., description="Path to the OFX/QFX statement file")
    encoding: str = Field(
        "utf-8",
        description="Text encoding of the file (OFX 1.x exports are often cp1252)",
    )
    file_format: FileFormat | None = Field(
        None, description="Explicit format; auto-detected when omitted"
    )


class OutputConfig(BaseModel):
    """Output settings."""

    output_dir: str = Field("outputs/", description="Directory for output files")
    output_format: Literal["csv", "parquet"] = Field(
        "parquet", description="Output format"
    )
    table_name: str = Field(
        "transactions", min_length=1, description="Output file stem"
    )


class IngestConfig(BaseModel):
    """Top-level run configuration. Maps 1:1 to ingest.yaml."""

    source: SourceConfig
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_config(path: str | Path) -> IngestConfig:
    """Load and validate ingest.yaml into an IngestConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return IngestConfig.model_validate(raw)


def save_config(config: IngestConfig, path: str | Path) -> None:
    """Serialize an IngestConfig to YAML.

    Writes a human-readable YAML file with a header comment.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# bank-statement-ingest configuration\n")
        f.write("# Edit this file to change the source encoding, output format, etc.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)


def generate_default_config(
    input_path: str,
    output_dir: str = "outputs/",
    output_format: Literal["csv", "parquet"] = "parquet",
    encoding: str = "utf-8",
) -> IngestConfig:
    """Build an IngestConfig for a statement file.

    The output table is named after the input file's stem.
    """
    return IngestConfig(
        source=SourceConfig(input_path=input_path, encoding=encoding),
        output=OutputConfig(
            output_dir=output_dir,
            output_format=output_format,
            table_name=Path(input_path).stem or "transactions",
        ),
    )
