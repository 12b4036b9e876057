from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from proofread.adapters.openai_rest import DEFAULT_BASE_URL
from proofread.app.orchestrator import WAIT_DELAY_MS

_log = logging.getLogger(__name__)


def _default_config_dir() -> str:
    xdg = os.getenv("XDG_CONFIG_HOME", "").strip()
    if xdg:
        return xdg
    return os.path.join(os.path.expanduser("~"), ".config")


@dataclass
class RuntimeSettings:
    """Process-wide settings resolved once at startup."""

    config_dir: str = field(default_factory=_default_config_dir)
    home_dir: str = field(default_factory=lambda: os.path.expanduser("~"))
    api_base_url: str = DEFAULT_BASE_URL
    request_timeout_s: float = 60
    wait_delay_ms: int = WAIT_DELAY_MS
    max_workers: int = 4

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RuntimeSettings":
        """Build settings from ``PROOFREAD_*`` variables.

        Invalid numbers fall back to the defaults with a warning.
        """
        env = os.environ if env is None else env
        settings = cls()
        config_dir = (env.get("PROOFREAD_CONFIG_DIR") or "").strip()
        if config_dir:
            settings.config_dir = os.path.expanduser(config_dir)
        elif (env.get("XDG_CONFIG_HOME") or "").strip():
            settings.config_dir = env["XDG_CONFIG_HOME"].strip()
        base_url = (env.get("PROOFREAD_API_BASE_URL") or "").strip()
        if base_url:
            settings.api_base_url = base_url
        settings.request_timeout_s = _coerce_positive(
            env, "PROOFREAD_REQUEST_TIMEOUT_S", settings.request_timeout_s, float
        )
        settings.wait_delay_ms = _coerce_positive(
            env, "PROOFREAD_WAIT_DELAY_MS", settings.wait_delay_ms, int
        )
        return settings


def _coerce_positive(env: Mapping[str, str], key: str, default, kind):
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = kind(raw)
    except ValueError:
        _log.warning("Ignoring %s=%r: not a number", key, raw)
        return default
    if value <= 0:
        _log.warning("Ignoring %s=%r: must be positive", key, raw)
        return default
    return value


__all__ = ["RuntimeSettings"]
