"""
Runtime configuration for doc-boost.

Everything is read from environment variables once, at startup, into a
frozen ``Settings`` value that entry points pass down explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

# ─── Constants ────────────────────────────────────────────────────────────────

ENV_PREFIX: Final[str] = "DOCBOOST_"
DEFAULT_CONNECTION: Final[str] = "default"
_DB_FILENAME: Final[str] = "documentation.db"
_URL_PREFIX: Final[str] = "DOCBOOST_DATABASE_URL"
_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""

    data_dir: Path
    index_path: Path
    log_level: str = "WARNING"
    api_docs_dir: Path | None = None
    connections: Mapping[str, str] = field(default_factory=dict)


def _data_dir(environ: Mapping[str, str]) -> Path:
    """Return the data directory, honouring ``DOCBOOST_DATA_DIR``."""
    env_dir = environ.get("DOCBOOST_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / ".docboost"


def _connection_urls(environ: Mapping[str, str]) -> dict[str, str]:
    """
    Collect SQLAlchemy URLs for named schema connections.

    ``DOCBOOST_DATABASE_URL`` names the ``default`` connection and
    ``DOCBOOST_DATABASE_URL_REPORTING`` names ``reporting``.
    """
    urls: dict[str, str] = {}
    for key, value in environ.items():
        if not key.startswith(_URL_PREFIX) or not value:
            continue
        suffix = key[len(_URL_PREFIX):]
        if not suffix:
            urls[DEFAULT_CONNECTION] = value
        elif suffix.startswith("_") and len(suffix) > 1:
            urls[suffix[1:].lower()] = value
    return urls


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from *environ* (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    data_dir = _data_dir(env)

    index_env = env.get("DOCBOOST_INDEX_PATH")
    index_path = Path(index_env).expanduser() if index_env else data_dir / _DB_FILENAME

    api_env = env.get("DOCBOOST_API_DOCS_DIR")

    return Settings(
        data_dir=data_dir,
        index_path=index_path,
        log_level=env.get("DOCBOOST_LOG_LEVEL", "WARNING").upper(),
        api_docs_dir=Path(api_env).expanduser() if api_env else None,
        connections=_connection_urls(env),
    )


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Send log records to stderr; stdout is reserved for JSON-RPC traffic."""
    logging.basicConfig(
        level=level,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
