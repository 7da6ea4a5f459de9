"""Tests for RouterConfig and config loading."""

import dataclasses
import json
from pathlib import Path

import pytest

from wayfinder.config import RouterConfig, base_url, load_config
from wayfinder.errors import ConfigurationError


class TestRouterConfig:
    def test_defaults(self) -> None:
        config = RouterConfig()
        assert config.protocol == "http"
        assert config.host == "127.0.0.1"
        assert config.debug is False
        assert config.languages == ("en-US",)
        config.validate()

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            RouterConfig().port = 1  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"protocol": "ftp"},
            {"port": 0},
            {"https_port": 70000},
            {"default_language": "fr-FR"},
            {"max_upload_size": -1},
        ],
    )
    def test_validate_rejects(self, overrides: dict[str, object]) -> None:
        with pytest.raises(ConfigurationError):
            RouterConfig(**overrides).validate()


class TestBaseURL:
    def test_http(self) -> None:
        assert base_url(RouterConfig(port=1235)) == "http://127.0.0.1:1235"

    def test_https_uses_https_port(self) -> None:
        assert base_url(RouterConfig(protocol="https", https_port=1236)) == "https://127.0.0.1:1236"

    def test_default_port_omitted(self) -> None:
        assert base_url(RouterConfig(port=80)) == "http://127.0.0.1"
        assert base_url(RouterConfig(protocol="https", https_port=443)) == "https://127.0.0.1"

    def test_domain_preferred(self) -> None:
        assert base_url(RouterConfig(domain="example.org", port=8080)) == "http://example.org:8080"


class TestLoadConfig:
    def _write(self, tmp_path: Path, data: object) -> Path:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data))
        return path

    def test_camel_and_snake_case(self, tmp_path: Path) -> None:
        path = self._write(
            tmp_path,
            {"protocol": "https", "httpsPort": 1236, "max_upload_size": 100, "languages": ["en-US", "fr-FR"]},
        )
        config = load_config(path)
        assert config.protocol == "https"
        assert config.https_port == 1236
        assert config.max_upload_size == 100
        assert config.languages == ("en-US", "fr-FR")

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Unknown config key"):
            load_config(self._write(tmp_path, {"prot": "http"}))

    def test_not_an_object(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(self._write(tmp_path, ["http"]))

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_config(tmp_path / "missing.json")

    def test_invalid_value(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Invalid protocol"):
            load_config(self._write(tmp_path, {"protocol": "gopher"}))
