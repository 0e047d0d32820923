"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Health and auth routers are open at the router level. The auth
routes that need an identity declare require_password / require_token
themselves. New protected routers should be included with
dependencies=[Depends(require_token)].
"""

from fastapi import APIRouter

from authgate.api.auth import router as auth_router
from authgate.api.health import router as health_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
