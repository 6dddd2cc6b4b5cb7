"""Tests for client configuration loading."""

import json
from pathlib import Path

import pytest
from bget import ClientConfig, ConfigError, ConfigErrorCode, Option


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self):
        """Test the default configuration."""
        config = ClientConfig()
        assert config.follow_redirects is False
        assert config.max_redirects == 30
        assert config.verify_ssl is True
        assert config.headers == {}
        assert config.log_level == "WARNING"

    def test_to_options_defaults(self):
        """Test options produced by the default configuration."""
        assert ClientConfig().to_options() == {
            Option.FOLLOWLOCATION: False,
            Option.MAXREDIRS: 30,
            Option.SSL_VERIFYPEER: True,
        }

    def test_to_options_full(self):
        """Test options produced by a full configuration."""
        config = ClientConfig(
            user_agent="Bget/1.0",
            timeout=20,
            connect_timeout=5,
            follow_redirects=True,
            ca_bundle=Path("/etc/ssl/ca.pem"),
            proxy="http://proxy.local:3128",
            proxy_auth="user:secret",
        )
        options = config.to_options()
        assert options[Option.USERAGENT] == "Bget/1.0"
        assert options[Option.TIMEOUT] == 20
        assert options[Option.CONNECTTIMEOUT] == 5
        assert options[Option.FOLLOWLOCATION] is True
        assert options[Option.CAINFO] == "/etc/ssl/ca.pem"
        assert options[Option.PROXY] == "http://proxy.local:3128"
        assert options[Option.PROXYUSERPWD] == "user:secret"

    def test_proxy_auth_without_proxy_ignored(self):
        """Test that proxy credentials need a proxy."""
        assert Option.PROXYUSERPWD not in ClientConfig(proxy_auth="user:secret").to_options()

    def test_header_strings_wrapped(self):
        """Test that single header values are accepted."""
        config = ClientConfig(headers={"Accept": "text/html", "X-Foo": ["Bar", "Baz"]})
        assert config.headers == {"Accept": ["text/html"], "X-Foo": ["Bar", "Baz"]}

    def test_env_var_expansion(self, monkeypatch):
        """Test that proxy credentials expand environment variables."""
        monkeypatch.setenv("BGET_PROXY_PASSWORD", "hunter2")
        config = ClientConfig(proxy="proxy:3128", proxy_auth="user:${BGET_PROXY_PASSWORD}")
        assert config.proxy_auth == "user:hunter2"

    def test_unset_env_var_kept(self, monkeypatch):
        """Test that unknown variables are left as written."""
        monkeypatch.delenv("BGET_UNSET_VAR", raising=False)
        assert ClientConfig(proxy_auth="user:$BGET_UNSET_VAR").proxy_auth == "user:$BGET_UNSET_VAR"

    def test_invalid_values(self):
        """Test that invalid values raise ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            ClientConfig.from_dict({"timeout": -1})
        assert exc_info.value.code == ConfigErrorCode.INVALID_CONFIG

    def test_unknown_keys_rejected(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ConfigError):
            ClientConfig.from_dict({"retries": 3})

    def test_empty_dict(self):
        """Test that an empty document gives the defaults."""
        assert ClientConfig.from_dict({}) == ClientConfig()


class TestConfigFiles:
    """Tests for loading configuration files."""

    def test_load_from_yaml(self, tmp_path):
        """Test loading configuration from YAML."""
        yaml_file = tmp_path / "bget.yaml"
        yaml_file.write_text(
            """
user_agent: Better Getter
timeout: 15
follow_redirects: true
headers:
  Accept: text/html
  X-Foo:
    - Bar
    - Baz
log_level: DEBUG
"""
        )

        config = ClientConfig.from_file(yaml_file)

        assert config.user_agent == "Better Getter"
        assert config.timeout == 15
        assert config.follow_redirects is True
        assert config.headers == {"Accept": ["text/html"], "X-Foo": ["Bar", "Baz"]}
        assert config.log_level == "DEBUG"

    def test_empty_yaml(self, tmp_path):
        """Test that an empty YAML file gives the defaults."""
        yaml_file = tmp_path / "bget.yml"
        yaml_file.write_text("")
        assert ClientConfig.from_file(yaml_file) == ClientConfig()

    def test_load_from_json(self, tmp_path):
        """Test loading configuration from JSON."""
        json_file = tmp_path / "bget.json"
        json_file.write_text(json.dumps({"proxy": "http://proxy:3128", "verify_ssl": False}))

        config = ClientConfig.from_file(json_file)

        assert config.proxy == "http://proxy:3128"
        assert config.verify_ssl is False

    def test_missing_file(self, tmp_path):
        """Test loading a file that does not exist."""
        with pytest.raises(FileNotFoundError):
            ClientConfig.from_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        """Test that unknown file formats are rejected."""
        ini_file = tmp_path / "bget.ini"
        ini_file.write_text("[bget]\n")
        with pytest.raises(ConfigError) as exc_info:
            ClientConfig.from_file(ini_file)
        assert exc_info.value.code == ConfigErrorCode.INVALID_CONFIG
