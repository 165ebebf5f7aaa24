"""Shared FastAPI dependencies (auth, trade store and orchestrator access)."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from config import RemoteConfig, trades_path_from_environment
from orchestrator import EvaluationOrchestrator
from remote_client import RemoteEvaluationClient
from trades import InMemoryTradeStore, TradeStore, load_trade_store


class APISettings:
    """Runtime settings for the API layer."""

    def __init__(self) -> None:
        self.api_key = os.environ.get("GM_API_KEY")


def get_api_settings() -> APISettings:
    return APISettings()


async def require_api_key(
    settings: Annotated[APISettings, Depends(get_api_settings)],
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    """Validate the ``X-API-Key`` header if an API key is configured."""

    if settings.api_key is None:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def get_bearer_token(authorization: str | None = Header(default=None)) -> Optional[str]:
    """Extract the caller's bearer token so it can be forwarded upstream."""

    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    token = token.strip()
    if not token.isascii():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Bearer token must be ASCII")
    return token


@lru_cache(maxsize=1)
def _load_store() -> InMemoryTradeStore:
    return load_trade_store(trades_path_from_environment())


def get_trade_store() -> TradeStore:
    return _load_store()


def get_remote_client() -> RemoteEvaluationClient:
    return RemoteEvaluationClient(RemoteConfig.from_environment())


def get_orchestrator(
    store: Annotated[TradeStore, Depends(get_trade_store)],
    remote: Annotated[RemoteEvaluationClient, Depends(get_remote_client)],
) -> EvaluationOrchestrator:
    return EvaluationOrchestrator(store, remote)
