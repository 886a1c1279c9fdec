"""Server settings.

Read from the environment (and a ``.env`` file in the working directory)
once at startup; the CLI in ``rpcserver.__main__`` can override them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

ENV_PREFIX = "BATCHRPC_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(slots=True, frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8100
    path: str = "/rpc"
    log_level: str = "info"
    content_types: tuple[str, ...] = ("application/json",)
    stop_on_error: bool = False
    # 0 disables response compression
    gzip_min_size: int = 0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``BATCHRPC_*`` variables.

        With no *env* given, ``.env`` is loaded into ``os.environ`` first.
        Raises ``ValueError`` on malformed values.
        """
        if env is None:
            load_dotenv(os.path.join(Path.cwd(), ".env"))
            env = os.environ

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        defaults = cls()
        content_types = get("CONTENT_TYPES")
        return cls(
            host=get("HOST") or defaults.host,
            port=_int(get("PORT"), defaults.port, "PORT"),
            path=get("PATH") or defaults.path,
            log_level=(get("LOG_LEVEL") or defaults.log_level).lower(),
            content_types=(
                tuple(ct.strip() for ct in content_types.split(",") if ct.strip())
                if content_types
                else defaults.content_types
            ),
            stop_on_error=_bool(get("STOP_ON_ERROR"), defaults.stop_on_error, "STOP_ON_ERROR"),
            gzip_min_size=_int(get("GZIP_MIN_SIZE"), defaults.gzip_min_size, "GZIP_MIN_SIZE"),
        )


def _int(raw: str | None, default: int, name: str) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


def _bool(raw: str | None, default: bool, name: str) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")
