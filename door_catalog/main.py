# COMPONENT: FASTAPI APPLICATION ENTRY POINT
# REQUIREMENTS SATISFIED:
#   - API initialization and routing
#   - Middleware configuration (logging + CORS)
#   - Error-to-response mapping for every route
#   - AWS Lambda compatibility via Mangum
"""
door_catalog/main.py

Primary application entry point for the door catalog backend. This
module assembles the FastAPI application, registers middleware and
exception handlers, mounts the routers, and exposes the AWS Lambda
handler.

Execution Order (Intentional):
    1. Settings and (optional) auth configuration are read from the
       environment; .env is loaded by door_catalog.config
    2. FastAPI app is created and the door store / token cache are
       attached to app.state
    3. Request logging middleware is attached
    4. CORS middleware is configured from ALLOWED_ORIGINS
    5. Exception handlers map service errors to JSON bodies
    6. Routers are mounted: /api/doors, /health, /, and /token when
       the auth configuration is present
    7. The Mangum handler is created for AWS Lambda deployment

Key Design Decisions:
    - create_app() takes the store and token cache as arguments so tests
      can build an app around an in-memory store or a fake upstream.
    - A partially configured token proxy is a startup error (ConfigError);
      a fully absent one just leaves /token unmounted.
    - Stack traces are only returned to clients in APP_ENV=development.
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from door_catalog.api.middleware.log_requests import RequestLogger
from door_catalog.api.responses import error_body, error_response
from door_catalog.api.routers.doors import router as doors_router
from door_catalog.api.routers.system import router as system_router
from door_catalog.api.routers.token import router as token_router
from door_catalog.config import AuthConfig, Settings
from door_catalog.errors import DoorCatalogError
from door_catalog.repositories.doors_repo import DoorRepo
from door_catalog.services.doors import DoorService
from door_catalog.services.storage import get_door_repo
from door_catalog.services.token_cache import TokenCache
from door_catalog.utils.logging import get_logger

logger = get_logger("main")


def _install_error_handlers(app: FastAPI, debug: bool) -> None:
    @app.exception_handler(DoorCatalogError)
    async def door_catalog_error(request: Request, exc: DoorCatalogError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
        else:
            logger.info("%s %s rejected: %s %s", request.method, request.url.path, exc.code, exc.message)
        return error_response(exc, debug=debug)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        logger.info("%s %s invalid body: %s", request.method, request.url.path, exc.errors())
        body = error_body(
            "invalid_input",
            "Request body is missing or malformed",
            exc=exc,
            debug=debug,
            problems=[
                {"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()
            ],
        )
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            body = error_body("route_not_found", f"Route not found: {request.method} {request.url.path}")
        else:
            body = error_body("http_error", str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = error_body(
            "internal_error", "Internal server error",
            details=str(exc) if debug else None, exc=exc, debug=debug,
        )
        return JSONResponse(status_code=500, content=body)


def create_app(
    settings: Optional[Settings] = None,
    repo: Optional[DoorRepo] = None,
    token_cache: Optional[TokenCache] = None,
    auth_config: Optional[AuthConfig] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if token_cache is None:
        auth_config = auth_config or AuthConfig.from_env_optional()
        if auth_config is not None:
            token_cache = TokenCache(auth_config)

    app = FastAPI(title="Door Catalog API", debug=False)
    app.state.settings = settings
    app.state.door_service = DoorService(repo if repo is not None else get_door_repo(settings))
    app.state.token_cache = token_cache

    app.add_middleware(RequestLogger)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app, settings.debug)

    app.include_router(doors_router, prefix="/api")
    app.include_router(system_router)
    if token_cache is not None:
        app.include_router(token_router)
    else:
        logger.warning("AUTH_* not configured, /token proxy disabled")

    logger.info("Door catalog app created: store=%s env=%s", settings.door_store, settings.app_env)
    return app


app = create_app()

handler = Mangum(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
