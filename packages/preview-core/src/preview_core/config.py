"""Runtime configuration for catalog-preview.

This module handles loading preview.yaml configuration:
- PreviewConfig: Frozen pydantic model of the runtime settings
- load_config(): Read preview.yaml from an explicit path, the
  PREVIEW_CONFIG environment variable, or the working directory,
  then apply environment variable overrides
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from preview_core.errors import ConfigurationError

logger = structlog.get_logger(__name__)

# Environment variables
CONFIG_ENV_VAR = "PREVIEW_CONFIG"
RUN_MODE_ENV_VAR = "PREVIEW_RUN_MODE"
LOG_LEVEL_ENV_VAR = "PREVIEW_LOG_LEVEL"

# Standard config file name, looked up in the working directory
CONFIG_FILE_NAME = "preview.yaml"

RunMode = Literal["user", "server"]


class PreviewConfig(BaseModel):
    """Runtime settings for the preview compiler.

    Attributes:
        run_mode: "server" when running as a networked service, "user" for
            local/CLI invocations. Compilation errors are only logged by the
            orchestrator in server mode.
        log_level: Minimum log level for the console.
        json_logs: Render console logs as JSON instead of human-readable text.
        default_environment: Environment assigned to nodes that have none.
        rerun_baseline_in_preview: Re-run the baseline compile inside the
            preview log scope before the preview compile.

    Example:
        >>> config = PreviewConfig(run_mode="server")
        >>> config.networked
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    run_mode: RunMode = Field(default="user", description="user or server")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level",
    )
    json_logs: bool = Field(default=False, description="Render console logs as JSON")
    default_environment: str = Field(
        default="production",
        min_length=1,
        description="Environment for nodes without one",
    )
    rerun_baseline_in_preview: bool = Field(
        default=True,
        description="Re-run the baseline compile inside the preview log scope",
    )

    @property
    def networked(self) -> bool:
        return self.run_mode == "server"


def _find_config_file(path: Path | str | None) -> Path | None:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    local = Path(CONFIG_FILE_NAME)
    if local.exists():
        return local
    return None


def load_config(path: Path | str | None = None) -> PreviewConfig:
    """Load runtime configuration.

    Lookup order:
    1. Explicit ``path``
    2. PREVIEW_CONFIG environment variable
    3. ./preview.yaml
    4. Defaults

    PREVIEW_RUN_MODE and PREVIEW_LOG_LEVEL override file values.

    Args:
        path: Optional explicit path to preview.yaml.

    Returns:
        Validated PreviewConfig.

    Raises:
        ConfigurationError: If the file is missing, not valid YAML, or
            fails validation.
    """
    config_file = _find_config_file(path)
    raw: dict[str, Any] = {}

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError("Configuration file not found", file_path=str(config_file))
        try:
            loaded = yaml.safe_load(config_file.read_text())
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                "Invalid YAML",
                file_path=str(config_file),
                internal_details=str(exc),
            ) from exc
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(
                "Configuration must be a mapping",
                file_path=str(config_file),
            )
        raw = loaded or {}
        logger.debug("config_loaded", path=str(config_file))

    if run_mode := os.environ.get(RUN_MODE_ENV_VAR):
        raw["run_mode"] = run_mode
    if log_level := os.environ.get(LOG_LEVEL_ENV_VAR):
        raw["log_level"] = log_level.upper()

    try:
        return PreviewConfig.model_validate(raw)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field_path = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            file_path=str(config_file) if config_file else None,
            field_path=field_path or None,
            internal_details=str(exc),
        ) from exc
