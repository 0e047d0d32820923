"""FastAPI route guards.

Learn: These are used as Depends() in route handlers. Each one runs a
single strategy through the Authenticator stored on app.state and
either returns the resolved User (also attached to request.state.user)
or raises a 401.

Any non-success outcome gets the same response, so a client can't tell
a wrong password from an unknown email or a store outage. Errors are
logged server-side with their cause. No session is created: every
request authenticates on its own.
"""

import structlog
from fastapi import HTTPException, Request

from authgate.auth.dispatcher import Authenticator
from authgate.auth.result import AuthError, Success
from authgate.db.models import User

logger = structlog.get_logger()


def get_authenticator(request: Request) -> Authenticator:
    """The Authenticator installed by the app factory / lifespan."""
    return request.app.state.authenticator


async def _guard(strategy: str, request: Request) -> User:
    result = await get_authenticator(request).authenticate(strategy, request)

    if isinstance(result, Success):
        request.state.user = result.user
        return result.user

    if isinstance(result, AuthError):
        logger.error(
            "auth.strategy_error",
            strategy=strategy,
            error=repr(result.cause),
        )
    else:
        logger.info("auth.denied", strategy=strategy, reason=result.reason)

    raise HTTPException(status_code=401, detail="Unauthorized")


async def require_token(request: Request) -> User:
    """Require a valid token in the authorization header."""
    return await _guard("jwt", request)


async def require_password(request: Request) -> User:
    """Require a matching email/password in the request."""
    return await _guard("local", request)
