from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

CONFIG_ENV_VAR = "RXLISTBOX_CONFIG"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class BindingConfig:
    """
    Runtime switches for list box bindings.

    Notes
    -----
    The consistency checks guard programming errors only. Disabling them does
    not change what a correct program displays.
    """

    enforce_thread_affinity: bool
    check_proxy_consistency: bool
    log_level: str  # "DEBUG" | "INFO" | "WARNING" | "ERROR" | "CRITICAL"
    show_error_dialogs: bool

    @staticmethod
    def defaults() -> "BindingConfig":
        return BindingConfig(
            enforce_thread_affinity=True,
            check_proxy_consistency=True,
            log_level="WARNING",
            show_error_dialogs=False,
        )


def resolve_config_path() -> Path:
    """
    Resolve where the configuration file lives.

    Preference order:
    1) $RXLISTBOX_CONFIG if set
    2) $XDG_CONFIG_HOME/rxlistbox/config.json
    3) ~/.config/rxlistbox/config.json
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit)

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "rxlistbox" / "config.json"

    return Path.home() / ".config" / "rxlistbox" / "config.json"


def load_binding_config(path: Path | None = None) -> BindingConfig:
    """
    Load binding configuration from disk.

    Parameters
    ----------
    path:
        Configuration file. If None, `resolve_config_path()` is used.

    Returns
    -------
    BindingConfig
        Loaded configuration, or defaults if missing/unreadable. Invalid
        individual values fall back to their defaults.
    """
    config_path = resolve_config_path() if path is None else path
    defaults = BindingConfig.defaults()
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return defaults
    except (OSError, ValueError):
        return defaults
    if not isinstance(payload, dict):
        return defaults

    def _flag(name: str, default: bool) -> bool:
        value = payload.get(name, default)
        return value if isinstance(value, bool) else default

    log_level = payload.get("log_level", defaults.log_level)
    if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
        log_level = defaults.log_level

    return BindingConfig(
        enforce_thread_affinity=_flag("enforce_thread_affinity", defaults.enforce_thread_affinity),
        check_proxy_consistency=_flag("check_proxy_consistency", defaults.check_proxy_consistency),
        log_level=log_level.upper(),
        show_error_dialogs=_flag("show_error_dialogs", defaults.show_error_dialogs),
    )


def config_as_dict(config: BindingConfig) -> dict[str, object]:
    """Return the JSON-ready representation of `config`."""
    return {
        "check_proxy_consistency": config.check_proxy_consistency,
        "enforce_thread_affinity": config.enforce_thread_affinity,
        "log_level": config.log_level,
        "show_error_dialogs": config.show_error_dialogs,
    }


def save_binding_config(path: Path, config: BindingConfig) -> None:
    """
    Save binding configuration to disk.

    Parameters
    ----------
    path:
        Destination file. Parent directories are created as needed.
    config:
        Configuration to persist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_as_dict(config), indent=2, sort_keys=True), encoding="utf-8")
