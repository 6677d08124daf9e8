"""Runtime environment helpers."""

from __future__ import annotations

import os
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

_TRUTHY_VALUES = {"1", "true", "yes", "on"}
_FALSY_VALUES = {"0", "false", "no", "off"}


def env_flag(env: Mapping[str, str], name: str) -> bool | None:
    """Read a boolean switch from env; None when unset or unrecognized."""
    raw = env.get(name, "").strip().lower()
    if raw in _TRUTHY_VALUES:
        return True
    if raw in _FALSY_VALUES:
        return False
    return None


def load_runtime_env(*, filename: str = ".env") -> bool:
    """Load a dotenv file from cwd or its parents, never overriding exported values."""
    if env_flag(os.environ, "CODETAG_DISABLE_DOTENV"):
        return False
    dotenv_path = find_dotenv(filename=filename, usecwd=True)
    if not dotenv_path:
        return False
    return bool(load_dotenv(dotenv_path=dotenv_path, override=False))
