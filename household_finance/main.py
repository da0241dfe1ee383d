import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .db.dal import Database
from .db.seed import seed_currencies
from .routers import (
    health,
    users,
    households,
    currencies,
    rates,
    transactions,
    balances,
)


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    The store handle and settings are attached to app.state; routers reach
    them only through dependencies.
    """
    settings = settings_override or get_settings()
    if settings.db_path is None:
        settings.init_post_load()
    init_logging(debug=settings.debug)

    # Schema + reference currencies (idempotent) so fresh test DBs are usable
    try:
        seed_currencies(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logging.getLogger("household_finance").exception(
            "failed to initialise database on startup"
        )
        raise

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.db = Database(settings.db_path)  # type: ignore[arg-type]

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(errors.StoreError, errors.store_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(households.router)
    app.include_router(currencies.router)
    app.include_router(rates.router)
    app.include_router(transactions.router)
    app.include_router(balances.router)

    @app.get("/")
    async def root():
        return {"message": "Household Finance API", "version": settings.version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
