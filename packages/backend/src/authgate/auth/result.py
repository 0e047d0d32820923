"""Authentication outcomes.

Learn: Every strategy answers with exactly one of three values instead
of calling back or raising:

- Success(user)          credentials/token resolved to a user
- Unauthenticated(reason) expected failure: wrong password, unknown
                          email, bad token, deleted user
- AuthError(cause)       unexpected failure: store down, bug

Guards treat the last two the same way (401), so the client can't tell
"wrong password" from "database down".
"""

from dataclasses import dataclass
from typing import Union

from authgate.db.models import User


@dataclass(frozen=True)
class Success:
    user: User

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Unauthenticated:
    reason: str = "Unauthorized"

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class AuthError:
    cause: BaseException

    @property
    def ok(self) -> bool:
        return False


AuthResult = Union[Success, Unauthenticated, AuthError]
