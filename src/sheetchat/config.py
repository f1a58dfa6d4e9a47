"""Configuration model for the sheetchat processor.

Provides ``SheetChatConfig`` with all tunable parameters and sensible
defaults.  Supports loading overrides from YAML or JSON files via the
``from_file()`` classmethod.
"""

from __future__ import annotations

import json
import pathlib

from pydantic import BaseModel, Field


class SheetChatConfig(BaseModel):
    """All tunable parameters with sensible defaults.

    Override individual values via constructor kwargs or load a complete
    config from a file with ``SheetChatConfig.from_file(path)``.
    """

    # --- Identity ---
    parser_version: str = "sheetchat:1.0.0"

    # --- Security / Resource Limits ---
    max_file_size_mb: int = 50
    supported_extensions: list[str] = [".xlsx", ".xlsm", ".xls", ".csv"]
    max_rows_per_sheet: int = Field(
        default=100_000,
        ge=1,
        description="Rows kept per sheet, header included; the rest are dropped.",
    )

    # --- Parsing ---
    date_format: str = "%Y-%m-%d %H:%M:%S"
    skip_chart_sheets: bool = True

    # --- Rendering ---
    summary_sample_rows: int = Field(
        default=3,
        ge=0,
        description="Data rows shown per sheet in the summary.",
    )
    context_row_limit: int = Field(
        default=10,
        ge=0,
        description="Data rows rendered per sheet in the AI context.",
    )
    missing_placeholder: str = "N/A"

    # --- Logging / PII safety ---
    log_sample_data: bool = False

    @classmethod
    def from_file(cls, path: str) -> SheetChatConfig:
        """Load configuration from a YAML or JSON file.

        File format is detected by extension: ``.yaml`` / ``.yml`` for YAML,
        ``.json`` for JSON.  Any keys present in the file override the
        corresponding defaults; keys not present retain their defaults.

        Args:
            path: Filesystem path to the configuration file.

        Returns:
            A fully-populated ``SheetChatConfig`` instance.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If the file extension is not recognized.
        """
        file_path = pathlib.Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = file_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            import yaml

            with open(file_path) as fh:
                data = yaml.safe_load(fh)
        elif suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            raise ValueError(
                f"Unsupported config file extension '{suffix}'. "
                "Use .yaml, .yml, or .json."
            )

        if data is None:
            data = {}

        return cls(**data)
