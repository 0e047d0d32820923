"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown of the database engine and
builds the Authenticator from the Settings object.

Passing user_store to create_app() installs auth immediately and skips
the database entirely; tests use this with a MemoryUserStore.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from authgate import __version__
from authgate.api import api_router
from authgate.auth.dispatcher import build_authenticator
from authgate.auth.store import SqlUserStore, UserStore
from authgate.config import Settings, get_settings

logger = structlog.get_logger()


def install_auth(app: FastAPI, settings: Settings, store: UserStore) -> None:
    """Attach the store and a freshly built Authenticator to app.state."""
    app.state.user_store = store
    app.state.authenticator = build_authenticator(settings, store)
    logger.info(
        "authgate.auth_installed",
        strategies=sorted(app.state.authenticator.strategies),
        token_header=settings.token_header,
        token_scheme=settings.token_scheme or "raw",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown. The engine lives exactly as long as the process serves.
    """
    settings: Settings = app.state.settings
    logger.info(
        "authgate.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if getattr(app.state, "authenticator", None) is not None:
        yield
        logger.info("authgate.shutdown")
        return

    from authgate.db.engine import build_engine, build_session_factory, create_tables

    engine = build_engine(settings)
    if settings.create_tables:
        await create_tables(engine)
    store = SqlUserStore(build_session_factory(engine), bcrypt_rounds=settings.bcrypt_rounds)
    install_auth(app, settings, store)

    yield

    logger.info("authgate.shutdown")
    await engine.dispose()


def create_app(
    settings: Optional[Settings] = None,
    user_store: Optional[UserStore] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="authgate",
        description="Password and token authentication",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.authenticator = None

    if user_store is not None:
        install_auth(app, settings, user_store)

    # Request flow: RequestId → handler
    from authgate.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: authgate.main:app)
app = create_app()
