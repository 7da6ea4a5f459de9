"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``load_config`` reads the same settings from
a JSON file.
"""

import json
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from wayfinder.errors import ConfigurationError

_PROTOCOLS = ("http", "https")
_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(protocol="https", host="0.0.0.0", https_port=8443)
    """

    # Server
    protocol: str = "http"
    host: str = "127.0.0.1"
    port: int = 8080
    https_port: int = 8081
    domain: str = ""  # Public host used in redirects and built URLs
    debug: bool = False

    # Localization
    default_language: str = "en-US"
    languages: tuple[str, ...] = ("en-US",)

    # Limits
    max_upload_size: int = 10 * 1024 * 1024  # 10 MB

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if any value is out of range."""
        if self.protocol not in _PROTOCOLS:
            msg = f"Invalid protocol {self.protocol!r}. Expected one of: {', '.join(_PROTOCOLS)}."
            raise ConfigurationError(msg)
        for name in ("port", "https_port"):
            value = getattr(self, name)
            if not 0 < value < 65536:
                msg = f"Invalid {name} {value!r}. Ports must be between 1 and 65535."
                raise ConfigurationError(msg)
        if self.default_language not in self.languages:
            msg = (
                f"Default language {self.default_language!r} is not in the "
                f"available languages {self.languages!r}."
            )
            raise ConfigurationError(msg)
        if self.max_upload_size < 0:
            msg = "max_upload_size cannot be negative."
            raise ConfigurationError(msg)


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def load_config(path: str | Path) -> RouterConfig:
    """Load and validate a ``RouterConfig`` from a JSON file.

    Keys may be written in camelCase (``httpsPort``) or snake_case
    (``https_port``). Unknown keys are rejected so typos surface at
    startup instead of silently falling back to defaults.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read config file {str(path)!r}: {exc}"
        raise ConfigurationError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Config file {str(path)!r} is not valid JSON: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(raw, dict):
        msg = f"Config file {str(path)!r} must contain a JSON object."
        raise ConfigurationError(msg)

    known = {f.name for f in fields(RouterConfig)}
    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = _snake_case(key)
        if name not in known:
            msg = f"Unknown config key {key!r} in {str(path)!r}."
            raise ConfigurationError(msg)
        values[name] = tuple(value) if isinstance(value, list) else value

    config = RouterConfig(**values)
    config.validate()
    return config


def base_url(config: RouterConfig) -> str:
    """Return ``protocol://host[:port]`` for building absolute URLs.

    The port is omitted when it is the default for the scheme.
    """
    port = config.https_port if config.protocol == "https" else config.port
    host = config.domain or config.host
    if _DEFAULT_PORTS.get(config.protocol) == port:
        return f"{config.protocol}://{host}"
    return f"{config.protocol}://{host}:{port}"
