"""Configuration loading with YAML support and environment overrides.

Settings are read from ``config/inspector.yaml`` (or the file named by
``WEBKIT_INSPECTOR_CONFIG``), with an optional ``environments:`` section whose
entry for the active environment (``WEBKIT_INSPECTOR_ENV``, default
``production``) is deep-merged over the base values.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .capture.browser_factory import BrowserConfig, BrowserEngineType
from .errors import ConfigLoadError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "WEBKIT_INSPECTOR_CONFIG"
ENVIRONMENT_ENV = "WEBKIT_INSPECTOR_ENV"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "inspector.yaml"
DEFAULT_SCREENSHOT_DIR = Path("~/webkit-inspector-screenshots")


class ViewportConfig(BaseModel):
    """Viewport size applied to every session context."""

    model_config = ConfigDict(extra="forbid")

    width: int = Field(default=1920, ge=1)
    height: int = Field(default=1080, ge=1)


class InspectorConfig(BaseModel):
    """Root configuration for the session manager."""

    model_config = ConfigDict(extra="forbid")

    engine: str = Field(default=BrowserEngineType.WEBKIT, description="Browser engine to launch")
    headless: bool = Field(default=True, description="Run browsers without a window")
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    slow_mo: int = Field(default=0, ge=0, description="Delay in milliseconds added to each engine operation")
    user_agent: Optional[str] = Field(default=None, description="User-Agent override for every session")
    extra_headers: Dict[str, str] = Field(
        default_factory=dict,
        description="HTTP headers added to every request"
    )
    ignore_https_errors: bool = Field(default=False, description="Accept invalid TLS certificates")
    locale: Optional[str] = Field(default=None, description="Browser locale, e.g. en-US")
    timezone: Optional[str] = Field(default=None, description="Timezone ID, e.g. America/New_York")
    screenshot_dir: Path = Field(
        default=DEFAULT_SCREENSHOT_DIR,
        description="Directory screenshots are written to"
    )
    navigation_timeout_ms: Optional[int] = Field(
        default=None,
        ge=0,
        description="Navigation timeout; engine default when absent"
    )
    selector_timeout_ms: Optional[int] = Field(
        default=None,
        ge=0,
        description="Element lookup timeout; engine default when absent"
    )
    inspect_text_limit: int = Field(default=500, ge=0, description="Max characters of element text")
    log_level: str = Field(default="INFO", description="Root logging level used by the CLI")

    @field_validator('engine')
    @classmethod
    def validate_engine(cls, v):
        valid_engines = {BrowserEngineType.WEBKIT, BrowserEngineType.CHROMIUM, BrowserEngineType.FIREFOX}
        v = v.lower()
        if v not in valid_engines:
            raise ValueError(f"engine must be one of: {sorted(valid_engines)}")
        return v

    @field_validator('screenshot_dir')
    @classmethod
    def expand_screenshot_dir(cls, v):
        return Path(v).expanduser()

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v

    def to_browser_config(self) -> BrowserConfig:
        """Build the browser launch configuration for new sessions."""
        return BrowserConfig(
            engine=self.engine,
            headless=self.headless,
            slow_mo=self.slow_mo,
            viewport={'width': self.viewport.width, 'height': self.viewport.height},
            user_agent=self.user_agent,
            extra_headers=self.extra_headers,
            ignore_https_errors=self.ignore_https_errors,
            locale=self.locale,
            timezone=self.timezone,
        )


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environment: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> InspectorConfig:
    """Load InspectorConfig from YAML with environment overrides.

    Args:
        config_path: Path to YAML config file. If None, uses
            ``WEBKIT_INSPECTOR_CONFIG`` or the bundled default location, and
            falls back to built-in defaults when that file does not exist.
        environment: Environment name for override selection. If None, uses
            ``WEBKIT_INSPECTOR_ENV``.
        overrides: Additional configuration overrides to apply last.

    Returns:
        Validated InspectorConfig instance.

    Raises:
        ConfigLoadError: If an explicit file is missing, unparseable or invalid.
    """
    explicit = config_path is not None or os.getenv(CONFIG_PATH_ENV) is not None
    if config_path is None:
        config_path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    config_data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML config: {e}") from e
        except OSError as e:
            raise ConfigLoadError(f"Failed to read config file: {e}") from e
    elif explicit:
        raise ConfigLoadError(f"Config file not found: {config_path}")
    else:
        logger.debug(f"No config file at {config_path}, using defaults")

    if not isinstance(config_data, dict):
        raise ConfigLoadError("Config file must contain a YAML dictionary")

    if environment is None:
        environment = os.getenv(ENVIRONMENT_ENV, "production")

    environments = config_data.pop("environments", None) or {}
    if environment in environments:
        config_data = _deep_merge(config_data, environments[environment])
        logger.info(f"Applied environment overrides for: {environment}")

    if overrides:
        config_data = _deep_merge(config_data, overrides)
        logger.debug("Applied additional configuration overrides")

    try:
        return InspectorConfig(**config_data)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid configuration: {e}") from e


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
