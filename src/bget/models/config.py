"""Pydantic configuration models for bget."""

import json
import os
import re
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import ConfigError, ConfigErrorCode
from ..options import Option


def _expand_env_var(value: Optional[str]) -> Optional[str]:
    """Expand environment variable references in a string.

    Supports $VAR and ${VAR} syntax. Returns original value if
    the env var is not set.
    """
    if value is None:
        return None

    # Match $VAR or ${VAR}
    pattern = r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)"

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


class ClientConfig(BaseModel):
    """
    Default settings applied to every new client.

    Supports environment variable expansion in ``proxy_auth`` using
    $VAR or ${VAR} syntax, so credentials can stay out of config files:
        proxy_auth: 'user:${PROXY_PASSWORD}'

    Example:
        config = ClientConfig.from_file(Path("bget.yaml"))
        client = BgetHttp("https://example.com", config=config)
    """

    user_agent: Optional[str] = Field(None, description="User-Agent header to send")
    timeout: Optional[float] = Field(None, gt=0, description="Total transfer timeout in seconds")
    connect_timeout: Optional[float] = Field(None, gt=0, description="Connection timeout in seconds")
    follow_redirects: bool = Field(False, description="Follow Location headers")
    max_redirects: int = Field(30, ge=0, description="Maximum redirects to follow")
    verify_ssl: bool = Field(True, description="Verify the server's TLS certificate")
    ca_bundle: Optional[Path] = Field(None, description="CA bundle used to verify the server")
    proxy: Optional[str] = Field(None, description="Proxy URL (e.g. http://proxy:3128)")
    proxy_auth: Optional[str] = Field(None, description="Proxy credentials as user:password")
    headers: dict[str, list[str]] = Field(default_factory=dict, description="Request headers sent by default")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "WARNING",
        description="Logging level for the bget logger",
    )

    model_config = {"extra": "forbid"}

    @field_validator("headers", mode="before")
    @classmethod
    def _wrap_header_values(cls, v: Any) -> Any:
        """Allow a single string where a list of values is expected."""
        if isinstance(v, dict):
            return {name: [values] if isinstance(values, str) else values for name, values in v.items()}
        return v

    def model_post_init(self, __context: object) -> None:
        """Expand environment variables in sensitive fields after init."""
        if self.proxy_auth:
            object.__setattr__(self, "proxy_auth", _expand_env_var(self.proxy_auth))

    def to_options(self) -> dict[Option, Any]:
        """
        Translate the config into transfer options.

        Returns:
            Options to seed a client with; headers are not included
        """
        options: dict[Option, Any] = {
            Option.FOLLOWLOCATION: self.follow_redirects,
            Option.MAXREDIRS: self.max_redirects,
            Option.SSL_VERIFYPEER: self.verify_ssl,
        }
        if self.user_agent is not None:
            options[Option.USERAGENT] = self.user_agent
        if self.timeout is not None:
            options[Option.TIMEOUT] = self.timeout
        if self.connect_timeout is not None:
            options[Option.CONNECTTIMEOUT] = self.connect_timeout
        if self.ca_bundle is not None:
            options[Option.CAINFO] = str(self.ca_bundle)
        if self.proxy:
            options[Option.PROXY] = self.proxy
            if self.proxy_auth:
                options[Option.PROXYUSERPWD] = self.proxy_auth
        return options

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ClientConfig":
        """
        Create configuration from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            ClientConfig instance

        Raises:
            ConfigError: If configuration values are invalid
        """
        try:
            return cls.model_validate(config_dict or {})
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}", ConfigErrorCode.INVALID_CONFIG) from e

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "ClientConfig":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML config file

        Returns:
            ClientConfig instance

        Raises:
            ImportError: If pyyaml is not installed
            FileNotFoundError: If config file doesn't exist
        """
        try:
            import yaml
        except ImportError as e:
            raise ImportError("PyYAML is required for YAML config. Install with: pip install bget[yaml]") from e

        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            config_dict = yaml.safe_load(f)

        return cls.from_dict(config_dict)

    @classmethod
    def from_json(cls, json_path: Path) -> "ClientConfig":
        """
        Load configuration from JSON file.

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        if not json_path.exists():
            raise FileNotFoundError(f"Config file not found: {json_path}")

        with open(json_path) as f:
            config_dict = json.load(f)

        return cls.from_dict(config_dict)

    @classmethod
    def from_file(cls, config_path: Path) -> "ClientConfig":
        """Load configuration from file, picking the format from the suffix."""
        suffix = config_path.suffix.lower()

        if suffix in [".yaml", ".yml"]:
            return cls.from_yaml(config_path)
        elif suffix == ".json":
            return cls.from_json(config_path)
        raise ConfigError(
            f"Unsupported config file format: {suffix or config_path.name}",
            ConfigErrorCode.INVALID_CONFIG,
        )
