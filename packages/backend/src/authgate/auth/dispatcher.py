"""Authentication dispatcher — routes a request to a named strategy.

Learn: The registry is an explicit mapping built once at startup by
build_authenticator(); nothing registers itself at import time.

    authenticator = build_authenticator(settings, store)
    result = await authenticator.authenticate("jwt", request)

The dispatcher is immutable after construction, so concurrent requests
share it without locking.
"""

from types import MappingProxyType
from typing import Iterable, Mapping

import structlog
from starlette.requests import Request

from authgate.auth.result import AuthError, AuthResult, Unauthenticated
from authgate.auth.store import UserStore
from authgate.auth.strategies import AuthStrategy, JwtStrategy, LocalStrategy
from authgate.config import Settings

logger = structlog.get_logger()


class UnknownStrategyError(KeyError):
    """Raised when a guard asks for a strategy that was never registered."""


class Authenticator:
    """Holds the strategy registry and runs extract → verify per request."""

    def __init__(self, strategies: Iterable[AuthStrategy]):
        registry: dict[str, AuthStrategy] = {}
        for strategy in strategies:
            if strategy.name in registry:
                raise ValueError(f"Duplicate strategy '{strategy.name}'")
            registry[strategy.name] = strategy
        self._strategies: Mapping[str, AuthStrategy] = MappingProxyType(registry)

    @property
    def strategies(self) -> Mapping[str, AuthStrategy]:
        return self._strategies

    def get(self, name: str) -> AuthStrategy:
        strategy = self._strategies.get(name)
        if strategy is None:
            available = ", ".join(sorted(self._strategies))
            raise UnknownStrategyError(f"Unknown strategy '{name}'. Available: {available}")
        return strategy

    async def authenticate(self, name: str, request: Request) -> AuthResult:
        """Run one strategy against one request.

        Strategies report errors as AuthError themselves; anything that
        still escapes (a bug in extract, say) is converted here so the
        caller always gets a result.
        """
        strategy = self.get(name)
        try:
            data = await strategy.extract(request)
            if isinstance(data, Unauthenticated):
                return data
            return await strategy.verify(data)
        except Exception as e:
            logger.exception("auth.dispatch_error", strategy=name)
            return AuthError(e)


def build_authenticator(settings: Settings, store: UserStore) -> Authenticator:
    """Wire both strategies against one store and the configured key."""
    return Authenticator(
        [
            JwtStrategy(store, settings.jwt_config()),
            LocalStrategy(store, username_field="email", password_field="password"),
        ]
    )
