"""HTTP client for the authoritative trade grading service.

Each call walks an ordered list of authentication strategies. A strategy that
is rejected with 401, or whose caller token cannot be sent as a header, hands
over to the next one; any other failure ends the walk. The caller receives
either :class:`Authoritative` or :class:`Unavailable` and never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import httpx

from config import RemoteConfig

logger = logging.getLogger(__name__)

USER_AGENT = "GM-Trade-Engine/remote-client"
SOURCE_HEADER = "gm-trade-engine"


@dataclass(frozen=True)
class RemoteRequest:
    url: str
    payload: Dict[str, Any]
    timeout: float
    headers: Dict[str, str] = field(default_factory=dict)


# Per-strategy outcomes -------------------------------------------------------


@dataclass(frozen=True)
class Success:
    payload: Dict[str, Any]


@dataclass(frozen=True)
class RetryableFailure:
    reason: str


@dataclass(frozen=True)
class FatalFailure:
    reason: str


Outcome = Union[Success, RetryableFailure, FatalFailure]


# Call results ----------------------------------------------------------------


@dataclass(frozen=True)
class Authoritative:
    payload: Dict[str, Any]
    strategy: str


@dataclass(frozen=True)
class Unavailable:
    reason: str


RemoteResult = Union[Authoritative, Unavailable]


class AuthStrategy:
    """One way of authenticating against the grading service."""

    name = "base"
    # Credentials supplied by the caller; unusable ones hand over to the next strategy.
    caller_supplied = False

    def auth_headers(self) -> Dict[str, str]:
        raise NotImplementedError

    def attempt(self, client: httpx.Client, request: RemoteRequest) -> Outcome:
        headers = dict(request.headers)
        headers.update(self.auth_headers())
        try:
            response = client.post(request.url, json=request.payload, headers=headers, timeout=request.timeout)
        except UnicodeEncodeError:
            reason = "credentials contain characters that cannot be sent in a header"
            return RetryableFailure(reason) if self.caller_supplied else FatalFailure(reason)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return FatalFailure(f"{type(exc).__name__}: {exc}")

        if response.status_code == 401:
            return RetryableFailure("401 Unauthorized")
        if not response.is_success:
            return FatalFailure(f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            return FatalFailure("response body is not valid JSON")
        if not isinstance(body, dict):
            return FatalFailure("response body is not a JSON object")
        if body.get("success") is not True:
            detail = body.get("error") or "success flag missing or false"
            return FatalFailure(str(detail))
        return Success(body)


class UserTokenStrategy(AuthStrategy):
    name = "user_token"
    caller_supplied = True

    def __init__(self, token: str) -> None:
        self.token = token

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class ServiceBearerStrategy(AuthStrategy):
    name = "service_bearer"

    def __init__(self, key: str) -> None:
        self.key = key

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.key}"}


class ServiceApiKeyStrategy(AuthStrategy):
    name = "service_apikey"

    def __init__(self, key: str) -> None:
        self.key = key

    def auth_headers(self) -> Dict[str, str]:
        return {"apikey": self.key}


class AnonKeyStrategy(AuthStrategy):
    name = "anon_key"

    def __init__(self, key: str) -> None:
        self.key = key

    def auth_headers(self) -> Dict[str, str]:
        return {"apikey": self.key, "Authorization": f"Bearer {self.key}"}


def build_strategies(user_token: Optional[str], config: RemoteConfig) -> List[AuthStrategy]:
    """Strategies in priority order; missing credentials drop their entry."""

    strategies: List[AuthStrategy] = []
    if user_token:
        strategies.append(UserTokenStrategy(user_token))
    if config.service_key:
        strategies.append(ServiceBearerStrategy(config.service_key))
        strategies.append(ServiceApiKeyStrategy(config.service_key))
    if config.anon_key:
        strategies.append(AnonKeyStrategy(config.anon_key))
    return strategies


class RemoteEvaluationClient:
    """Posts evaluation requests to the grading service."""

    def __init__(
        self,
        config: Optional[RemoteConfig] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or RemoteConfig.from_environment()
        self._transport = transport

    def url_for(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def post(self, endpoint: str, payload: Dict[str, Any], *, user_token: Optional[str] = None) -> RemoteResult:
        strategies = build_strategies(user_token, self.config)
        if not strategies:
            return Unavailable("no credentials available for the grading service")

        request = RemoteRequest(
            url=self.url_for(endpoint),
            payload=payload,
            timeout=self.config.timeout,
            headers={"User-Agent": USER_AGENT, "X-Source": SOURCE_HEADER},
        )
        last_reason = "no strategy attempted"
        with httpx.Client(timeout=self.config.timeout, transport=self._transport) as client:
            for strategy in strategies:
                outcome = strategy.attempt(client, request)
                if isinstance(outcome, Success):
                    logger.debug("%s answered via %s", endpoint, strategy.name)
                    return Authoritative(payload=outcome.payload, strategy=strategy.name)
                if isinstance(outcome, RetryableFailure):
                    logger.debug("%s rejected %s (%s); trying next strategy", endpoint, strategy.name, outcome.reason)
                    last_reason = f"{strategy.name}: {outcome.reason}"
                    continue
                return Unavailable(f"{strategy.name}: {outcome.reason}")
        return Unavailable(f"all auth strategies rejected ({last_reason})")
