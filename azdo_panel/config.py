"""Configuration for azdo-panel."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from azdo_panel.exceptions import ConfigurationError
from azdo_panel.feedback import DEFAULT_FEEDBACK_SECONDS
from azdo_panel.transport import DEFAULT_API_VERSION, RetryConfig


def _default_state_path() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "azdo-panel" / "credentials.json"


@dataclass(frozen=True)
class PanelConfig:
    """Panel configuration."""

    state_path: Path = field(default_factory=_default_state_path)
    api_version: str = DEFAULT_API_VERSION
    timeout: float = 30.0
    copy_feedback_seconds: float = DEFAULT_FEEDBACK_SECONDS
    # 1 keeps repository fetches strictly sequential
    max_concurrent_fetches: int = 1
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_env(cls) -> "PanelConfig":
        """
        Create a configuration from environment variables.

        Environment variables (all optional):
            AZDO_PANEL_STATE_PATH: JSON file holding the saved credentials
            AZDO_PANEL_API_VERSION: REST api-version (default: 7.0)
            AZDO_PANEL_TIMEOUT: Request timeout in seconds (default: 30)
            AZDO_PANEL_COPY_FEEDBACK_SECONDS: How long "copied" stays shown (default: 2)
            AZDO_PANEL_MAX_CONCURRENT_FETCHES: Repository fetches in flight (default: 1)

        Raises:
            ConfigurationError: If a numeric variable does not parse or is out of range
        """
        defaults = cls()
        state_path = os.environ.get("AZDO_PANEL_STATE_PATH")

        timeout = _env_number("AZDO_PANEL_TIMEOUT", defaults.timeout, float)
        feedback = _env_number(
            "AZDO_PANEL_COPY_FEEDBACK_SECONDS", defaults.copy_feedback_seconds, float
        )
        max_fetches = _env_number(
            "AZDO_PANEL_MAX_CONCURRENT_FETCHES", defaults.max_concurrent_fetches, int
        )

        if timeout <= 0:
            raise ConfigurationError("AZDO_PANEL_TIMEOUT must be positive")
        if feedback < 0:
            raise ConfigurationError("AZDO_PANEL_COPY_FEEDBACK_SECONDS must not be negative")
        if max_fetches < 1:
            raise ConfigurationError("AZDO_PANEL_MAX_CONCURRENT_FETCHES must be at least 1")

        return cls(
            state_path=Path(state_path).expanduser() if state_path else defaults.state_path,
            api_version=os.environ.get("AZDO_PANEL_API_VERSION", defaults.api_version),
            timeout=timeout,
            copy_feedback_seconds=feedback,
            max_concurrent_fetches=max_fetches,
        )


def _env_number(name: str, default: float, kind: type) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: {raw!r}") from None
