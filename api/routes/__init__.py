"""Route registration helpers."""

from . import (  # noqa: F401
    config,
    draft,
    gm,
    health,
    leaderboard,
)

__all__ = [
    "config",
    "draft",
    "gm",
    "health",
    "leaderboard",
]
