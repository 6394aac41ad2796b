"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``AppConfig.from_env()`` layers ``ROOST_*``
environment variables over a ``.env`` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from roost.errors import ConfigurationError

ENV_PREFIX = "ROOST_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, secret_key="s3cr3t")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    root_path: str = ""

    # Security
    secret_key: str = ""

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Database
    database_url: str = "sqlite:///roost.db"
    database_echo: bool = False

    # Sessions
    session_cookie: str = "roost_session"
    session_ttl: int = 3600
    session_secure: bool = False

    @classmethod
    def from_env(
        cls,
        env_file: str | Path | None = ".env",
        *,
        environ: dict[str, str] | None = None,
        **overrides: Any,
    ) -> AppConfig:
        """Build a config from ``ROOST_<FIELD>`` variables.

        Values come from *env_file* (when it exists), then the process
        environment (or *environ*), then keyword *overrides*, later sources
        winning. Field names map to upper-case keys, e.g. ``session_ttl``
        reads ``ROOST_SESSION_TTL``.

        Raises ``ConfigurationError`` for values that do not parse as the
        field's type.
        """
        merged: dict[str, str | None] = {}
        if env_file is not None and Path(env_file).is_file():
            merged.update(dotenv_values(env_file))
        merged.update(os.environ if environ is None else environ)

        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = merged.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _parse(f.name, raw, f.default)
        values.update(overrides)
        return cls(**values)


def _parse(name: str, raw: str, default: Any) -> Any:
    """Coerce an environment string to the type of the field's default."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        msg = f"{ENV_PREFIX}{name.upper()} must be a boolean, got {raw!r}"
        raise ConfigurationError(msg)
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            msg = f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}"
            raise ConfigurationError(msg) from None
    return raw
