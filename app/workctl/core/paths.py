"""XDG-compliant path management for workctl.

XDG defaults:
- Config: ~/.config/workctl/ (config.toml, manifest.toml, theme.toml)
- State: ~/.local/state/workctl/ (history, logs, backups, lock file)
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "workctl"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/workctl/ (or XDG_CONFIG_HOME/workctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data is the operation history, logs and backup archives; it
    persists between runs but is not configuration.

    Returns:
        Path to ~/.local/state/workctl/ (or XDG_STATE_HOME/workctl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Path to ~/.config/workctl/config.toml."""
    return get_config_dir() / "config.toml"


def get_manifest_path() -> Path:
    """Path to the optional user manifest, ~/.config/workctl/manifest.toml."""
    return get_config_dir() / "manifest.toml"


def get_theme_path() -> Path:
    """Path to the optional theme override, ~/.config/workctl/theme.toml."""
    return get_config_dir() / "theme.toml"


def get_history_path() -> Path:
    """Get the operation history file path.

    Returns:
        Path to ~/.local/state/workctl/history.jsonl.
    """
    return get_state_dir() / "history.jsonl"


def get_log_dir() -> Path:
    """Directory holding one text log per tool mode."""
    return get_state_dir() / "logs"


def get_log_path(mode: str) -> Path:
    """Get the text log path for a tool mode.

    Args:
        mode: Tool mode name ("install", "verify" or "uninstall").

    Returns:
        Path to ~/.local/state/workctl/logs/<mode>.log.
    """
    return get_log_dir() / f"{mode}.log"


def get_backup_dir() -> Path:
    """Get the default backup archive directory.

    Returns:
        Path to ~/.local/state/workctl/backups/.
    """
    return get_state_dir() / "backups"


def get_lock_path() -> Path:
    """Path to the single-instance lock file."""
    return get_state_dir() / "workctl.lock"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")


def ensure_log_dir() -> Path:
    """Create the log directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_log_dir(), "log")


def ensure_backup_dir(path: Path | None = None) -> Path:
    """Create the backup directory if it doesn't exist.

    Args:
        path: Custom backup directory. Defaults to the state backup dir.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(path or get_backup_dir(), "backup")


def expand_user_path(path: str) -> Path:
    """Expand a manifest path such as ``~/Workspace`` against $HOME.

    Args:
        path: Path string, optionally starting with ``~``.

    Returns:
        Absolute path.
    """
    return Path(path).expanduser()
