"""Authentication strategies — pluggable verification procedures.

Learn: A strategy does two things:
1. extract(request) pulls its input out of the HTTP request
   (credentials from the body, a token from a header). Returning
   Unauthenticated here short-circuits verification.
2. verify(input) resolves that input to a user via the UserStore.

Both report an AuthResult. Unexpected exceptions become AuthError and
are never raised into the dispatcher.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Union

import structlog
from starlette.requests import Request

from authgate.auth.jwt import TokenError, decode_token, token_from_header
from authgate.auth.result import AuthError, AuthResult, Success, Unauthenticated
from authgate.auth.store import UserStore
from authgate.config import JwtConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str


class AuthStrategy(ABC):
    """Abstract base for authentication strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy identifier used by the dispatcher, e.g. 'local', 'jwt'."""

    @abstractmethod
    async def extract(self, request: Request) -> Union[Any, Unauthenticated]:
        """Pull this strategy's input out of the request."""

    @abstractmethod
    async def verify(self, data: Any) -> AuthResult:
        """Resolve extracted input to an authentication outcome."""


class LocalStrategy(AuthStrategy):
    """Email + password login. The email doubles as the username."""

    name = "local"

    def __init__(
        self,
        store: UserStore,
        username_field: str = "email",
        password_field: str = "password",
    ):
        self.store = store
        self.username_field = username_field
        self.password_field = password_field

    async def extract(self, request: Request) -> Union[Credentials, Unauthenticated]:
        """Read credentials from a JSON body, falling back to the query string."""
        body: dict = {}
        raw = await request.body()
        if raw:
            try:
                parsed = await request.json()
            except ValueError:
                return Unauthenticated("Missing credentials")
            if not isinstance(parsed, dict):
                return Unauthenticated("Missing credentials")
            body = parsed

        username = self._field(body, request, self.username_field)
        password = self._field(body, request, self.password_field)
        if not isinstance(username, str) or not isinstance(password, str):
            return Unauthenticated("Missing credentials")
        if not username or not password:
            return Unauthenticated("Missing credentials")
        return Credentials(email=username, password=password)

    @staticmethod
    def _field(body: dict, request: Request, name: str) -> Any:
        # The query string is only consulted for fields the body lacks.
        if name in body:
            return body[name]
        return request.query_params.get(name)

    async def verify(self, data: Credentials) -> AuthResult:
        try:
            user = await self.store.find_by_email(data.email)
            if user is None:
                return Unauthenticated()
            if not await user.compare_password(data.password):
                return Unauthenticated()
            return Success(user)
        except Exception as e:
            return AuthError(e)


class JwtStrategy(AuthStrategy):
    """Signed token in a request header, resolved to a user by its subject.

    Learn: Signature and expiry are checked by PyJWT during extract();
    verify() only runs on a payload that already decoded cleanly.
    """

    name = "jwt"

    def __init__(self, store: UserStore, config: JwtConfig):
        self.store = store
        self.config = config

    async def extract(self, request: Request) -> Union[dict, Unauthenticated]:
        token = token_from_header(request.headers.get(self.config.header), self.config.scheme)
        if token is None:
            return Unauthenticated("No auth token")
        try:
            return decode_token(token, self.config)
        except TokenError as e:
            return Unauthenticated(str(e))

    async def verify(self, data: dict) -> AuthResult:
        subject = data.get("sub")
        if not subject:
            return Unauthenticated("Token has no subject")
        try:
            user = await self.store.find_by_id(subject)
        except Exception as e:
            return AuthError(e)
        if user is None:
            logger.info("auth.subject_missing", subject=subject)
            return Unauthenticated()
        return Success(user)
