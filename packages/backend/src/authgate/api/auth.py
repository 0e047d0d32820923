"""Auth API — sign-up, sign-in, current user.

Learn: Routes for the two authentication paths:
- POST /auth/signup → create an account → token
- POST /auth/signin → email/password (require_password) → token
- GET /auth/me → token (require_token) → current user info

Sign-in never sees a password itself: the local strategy has already
checked it by the time the handler runs.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from authgate.auth.guards import require_password, require_token
from authgate.auth.jwt import create_access_token
from authgate.auth.store import EmailTakenError
from authgate.db.models import User

router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8)


class TokenResponse(BaseModel):
    token: str


class UserRead(BaseModel):
    id: uuid.UUID
    email: str

    model_config = {"from_attributes": True}


def _token_for(request: Request, user: User) -> TokenResponse:
    config = request.app.state.settings.jwt_config()
    return TokenResponse(token=create_access_token(str(user.id), config))


# ─── Sign up ─────────────────────────────────────────────


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(body: SignupRequest, request: Request):
    """Create a new account and return a token for it."""
    store = request.app.state.user_store
    try:
        user = await store.create(body.email, body.password)
    except EmailTakenError:
        raise HTTPException(status_code=409, detail="Email is in use")
    return _token_for(request, user)


# ─── Sign in ─────────────────────────────────────────────


@router.post("/signin", response_model=TokenResponse)
async def signin(request: Request, user: User = Depends(require_password)):
    """Exchange a valid email/password for a token."""
    return _token_for(request, user)


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(user: User = Depends(require_token)):
    """Get the current authenticated user's info."""
    return user
