"""Runtime configuration knobs for the trade evaluation engine.

Tunables that shape the local fallback computations (simulation volatility,
draft chart weights, leaderboard scoring mode) live in a thread-safe
:class:`SettingsManager` so the API layer can inspect and override them at
runtime. Deployment settings (remote service URL, credentials, timeouts) are
read from the environment; ``.env`` / ``.env.local`` files next to this module
are loaded first without clobbering variables that are already set.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional

import httpx


def _load_local_env() -> None:
    """Populate os.environ with values from .env files if present."""

    env_dir = Path(__file__).resolve().parent
    for filename in (".env.local", ".env"):
        path = env_dir / filename
        if not path.exists():
            continue
        try:
            for raw_line in path.read_text().splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if key and key not in os.environ:
                    os.environ[key] = value
        except OSError:
            continue


_load_local_env()

logger = logging.getLogger(__name__)


class SettingsManager:
    """Thread-safe accessor for mutable engine knobs.

    The manager stores a copy of the default settings and exposes ``get``/``set``
    helpers. ``snapshot`` returns a plain dictionary that can be embedded in
    API responses without risking mid-request mutation.
    """

    def __init__(self, defaults: Dict[str, Any]) -> None:
        self._defaults = dict(defaults)
        self._settings = dict(defaults)
        self._lock = RLock()

    def get(self, name: str) -> Any:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            return self._settings[name]

    def set(self, name: str, value: Any) -> None:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            self._settings[name] = value

    def reset(self, name: str | None = None) -> None:
        with self._lock:
            if name is None:
                self._settings = dict(self._defaults)
                return
            if name not in self._defaults:
                raise KeyError(f"Unknown setting '{name}'")
            self._settings[name] = self._defaults[name]

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._settings)


GM_SCORE_MODES = ("accepted_sum", "average_shortcut")

_DEFAULT_SETTINGS: Dict[str, Any] = {
    "default_num_simulations": 1000,
    "max_num_simulations": 10000,
    "volatility_low_sigma": 5.0,
    "volatility_medium_sigma": 10.0,
    "volatility_high_sigma": 18.0,
    "injury_probability": 0.15,
    "injury_max_penalty": 20.0,
    "development_center": 0.4,
    "development_scale": 8.0,
    "draft_weight_legacy": 0.20,
    "draft_weight_modern": 0.30,
    "draft_weight_surplus": 0.30,
    "draft_weight_academic": 0.20,
    "gm_score_mode": "accepted_sum",
}

SETTINGS_HELP: Dict[str, str] = {
    "default_num_simulations": "Monte Carlo sample count used when a request omits num_simulations.",
    "max_num_simulations": "Upper bound accepted for num_simulations on a single request.",
    "volatility_low_sigma": "Standard deviation (grade points) of the 'low' volatility tier.",
    "volatility_medium_sigma": "Standard deviation (grade points) of the 'medium' volatility tier.",
    "volatility_high_sigma": "Standard deviation (grade points) of the 'high' volatility tier.",
    "injury_probability": "Chance that a simulated outcome takes an injury shock.",
    "injury_max_penalty": "Largest grade penalty an injury shock can apply (drawn uniformly from 0 to this value).",
    "development_center": "Uniform draw is shifted by this value before scaling; below 0.5 biases development upward.",
    "development_scale": "Width (grade points) of the player-development adjustment.",
    "draft_weight_legacy": "Weight of the legacy pick-value chart in the synthesized draft score.",
    "draft_weight_modern": "Weight of the modern empirical chart in the synthesized draft score.",
    "draft_weight_surplus": "Weight of the surplus-value chart in the synthesized draft score.",
    "draft_weight_academic": "Weight of the academic chart in the synthesized draft score.",
    "gm_score_mode": "Leaderboard total_gm_score formula: 'accepted_sum' or legacy 'average_shortcut'.",
}

settings = SettingsManager(_DEFAULT_SETTINGS)


DEFAULT_REMOTE_BASE_URL = "https://datalab.sportsmockery.com"
DEFAULT_REMOTE_TIMEOUT = 25.0


def _is_http_url(value: str) -> bool:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


@dataclass(frozen=True)
class RemoteConfig:
    """Connection details for the authoritative grading service."""

    base_url: str = DEFAULT_REMOTE_BASE_URL
    timeout: float = DEFAULT_REMOTE_TIMEOUT
    service_key: Optional[str] = None
    anon_key: Optional[str] = None

    @classmethod
    def from_environment(cls) -> "RemoteConfig":
        timeout = DEFAULT_REMOTE_TIMEOUT
        timeout_raw = os.getenv("GM_REMOTE_TIMEOUT")
        if timeout_raw:
            try:
                timeout = float(timeout_raw)
            except ValueError:
                logger.warning("Invalid GM_REMOTE_TIMEOUT '%s'; defaulting to %s", timeout_raw, DEFAULT_REMOTE_TIMEOUT)
        base_url = os.getenv("GM_REMOTE_BASE_URL") or DEFAULT_REMOTE_BASE_URL
        if not _is_http_url(base_url):
            logger.warning("Invalid GM_REMOTE_BASE_URL '%s'; defaulting to %s", base_url, DEFAULT_REMOTE_BASE_URL)
            base_url = DEFAULT_REMOTE_BASE_URL
        return cls(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            service_key=os.getenv("GM_SERVICE_ROLE_KEY") or None,
            anon_key=os.getenv("GM_ANON_KEY") or None,
        )


def trades_path_from_environment() -> Optional[Path]:
    raw = os.getenv("TRADES_PATH")
    if not raw:
        return None
    path = Path(raw)
    if not path.is_absolute():
        path = Path(__file__).resolve().parent / raw
    return path
