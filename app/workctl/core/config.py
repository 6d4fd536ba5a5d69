"""Runtime configuration for workctl.

Configuration is stored in ~/.config/workctl/config.toml. Every key is
optional; a missing file means defaults.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from workctl.core.paths import get_backup_dir, get_config_path
from workctl.models.report import HealthThresholds


class ThresholdConfig(BaseModel):
    """Verification health thresholds.

    Attributes:
        mostly_successful_below: Failed fraction under which a report
            with failures is still "mostly successful".
    """

    model_config = ConfigDict(extra="forbid")

    mostly_successful_below: Annotated[
        float,
        Field(ge=0.0, le=1.0, description="Failed fraction threshold"),
    ] = 0.25

    def to_thresholds(self) -> HealthThresholds:
        """Convert to the report model's threshold type."""
        return HealthThresholds(mostly_successful_below=self.mostly_successful_below)


class WorkctlConfig(BaseModel):
    """Configuration for install, verify and uninstall runs.

    Attributes:
        backup_dir: Directory receiving backup archives (None = state dir).
        retry_attempts: Total attempts for transient backend failures.
        retry_delay_seconds: Fixed delay between attempts.
        command_timeout_seconds: Timeout for a single install/remove call.
        thresholds: Verification health thresholds.
        warnings_fail_verify: If True, verification warnings fail the run.
        single_instance: Hold an exclusive lock during install/uninstall.
        purge_on_remove: Remove APT configuration files with packages.
    """

    model_config = ConfigDict(extra="forbid")

    backup_dir: Annotated[
        Path | None,
        Field(description="Backup archive directory"),
    ] = None
    retry_attempts: Annotated[
        int,
        Field(ge=1, le=5, description="Attempts for transient failures (1-5)"),
    ] = 2
    retry_delay_seconds: Annotated[
        float,
        Field(ge=0.0, le=60.0, description="Delay between attempts"),
    ] = 1.0
    command_timeout_seconds: Annotated[
        int,
        Field(ge=30, le=7200, description="Backend command timeout (30-7200)"),
    ] = 900
    thresholds: Annotated[
        ThresholdConfig,
        Field(description="Verification thresholds"),
    ] = ThresholdConfig()
    warnings_fail_verify: Annotated[
        bool,
        Field(description="Treat verification warnings as failures"),
    ] = False
    single_instance: Annotated[
        bool,
        Field(description="Refuse to run twice at the same time"),
    ] = True
    purge_on_remove: Annotated[
        bool,
        Field(description="Purge APT configuration files on removal"),
    ] = True

    @property
    def effective_backup_dir(self) -> Path:
        """Configured backup directory, or the state default."""
        if self.backup_dir is None:
            return get_backup_dir()
        return self.backup_dir.expanduser()


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> WorkctlConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default path.

    Returns:
        Validated WorkctlConfig; defaults if the file doesn't exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content is invalid.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return WorkctlConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return WorkctlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: WorkctlConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written to a temporary file in the same directory and
    moved into place with os.replace().

    Args:
        config: The configuration to save.
        path: Target path. If None, uses the default path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
