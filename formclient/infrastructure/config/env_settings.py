# formclient/infrastructure/config/env_settings.py
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, Field

ENV_PREFIX = "FORMCLIENT_"


class ClientSettings(BaseModel):
    """Process-wide defaults for builders and responses."""

    user_agent: Optional[str] = Field(
        default=None,
        description="User-Agent sent when the request does not set one",
    )
    log_level: str = Field(default="INFO", description="Level used by setup_console_logging")
    dump_dir: str = Field(default="tmp/http", description="Directory for ResponseView.dump files")


def _read_prefixed(values: Dict[str, Optional[str]]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for key, value in values.items():
        if value is None or not key.startswith(ENV_PREFIX):
            continue
        out[key[len(ENV_PREFIX):].lower()] = value
    return out


def load_settings(env_file: Optional[Path] = None) -> ClientSettings:
    """
    Build settings from FORMCLIENT_* variables.

    `.env` (current directory unless `env_file` is given) supplies defaults;
    the process environment overrides it.
    """
    path = env_file if env_file is not None else Path.cwd() / ".env"
    merged: Dict[str, str] = {}
    if path.exists():
        merged.update(_read_prefixed(dotenv_values(path)))
    merged.update(_read_prefixed(dict(os.environ)))

    known = set(ClientSettings.model_fields)
    return ClientSettings(**{k: v for k, v in merged.items() if k in known})


@lru_cache(maxsize=1)
def get_settings() -> ClientSettings:
    return load_settings()
