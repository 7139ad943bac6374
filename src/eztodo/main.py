from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import NotFound, PersistenceError, ValidationError
from .logging_config import setup_logging
from .routers import history as history_router
from .routers import plans as plans_router
from .routers import todos as todos_router
from .settings import Settings, get_settings
from .state import AppState

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
    {"name": "plans", "description": "CRUD operations for recurring Plans and the refresh command."},
    {"name": "history", "description": "Read-only ledger of completions and generated occurrences."},
]


def _validation_response(message: str, detail: list) -> JSONResponse:
    """
    Consistent JSON structure for validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "...",
            "detail": [... pydantic error details ...]
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": message,
            "detail": jsonable_encoder(detail),
        },
    )


# PUBLIC_INTERFACE
def create_app(state: Optional[AppState] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app serving the command surface over local HTTP.

    When no state is given, one is loaded from `settings` (or the environment).
    """
    settings = settings or (state.settings if state is not None else get_settings())
    setup_logging(settings.log_level, settings.log_dir)
    state = state or AppState.from_settings(settings)

    app = FastAPI(
        title="EzTodo Store",
        description="Local data layer for todos, recurring plans and their history.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.eztodo = state

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _validation_response("Request validation failed", exc.errors())

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _validation_response(exc.message, exc.errors)

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": f"{exc.kind} not found"})

    @app.exception_handler(PersistenceError)
    async def persistence_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Request %s %s failed to persist: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "PersistenceError",
                "message": "Changes could not be saved to disk and were not applied",
                "detail": str(exc.cause),
            },
        )

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and where data is stored.
        """
        return {"message": "Healthy", "data_dir": str(state.settings.data_dir)}

    app.include_router(todos_router.router)
    app.include_router(plans_router.router)
    app.include_router(history_router.router)
    return app
