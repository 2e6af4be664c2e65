from contextlib import asynccontextmanager
from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog import CatalogStore
from config import Settings, load_settings
from database import connect
from errors import StorefrontError
from log import configure_logging
from order_store import OrderStore
from payment_gateway import PaymentGateway, PaymentProvider, build_provider
from routers import auth, newsletter, orders, payments, products

logger = structlog.get_logger(__name__)

_UNSET: Any = object()


def _field(loc) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        content = {"success": False, "error": exc.message}
        if exc.details:
            content["errors"] = exc.details
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = [{"field": _field(e["loc"]), "message": e["msg"]} for e in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Validation failed", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(PyMongoError)
    async def storage_error(request: Request, exc: PyMongoError):
        logger.error("Database error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def ensure_indexes(app: FastAPI) -> None:
    db = app.state.db
    if db is None:
        return
    try:
        db["newsletter"].create_index("email", unique=True)
        app.state.orders.ensure_indexes()
    except PyMongoError as e:
        logger.warning("Index creation failed, continuing without indexes", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes(app)
    yield


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[Database] = _UNSET,
    provider: Optional[PaymentProvider] = _UNSET,
) -> FastAPI:
    """
    Build the API. db and provider default to what the settings describe;
    pass None explicitly to run without a database or payment provider.
    """
    settings = settings or load_settings()
    configure_logging(settings)

    if db is _UNSET:
        db = connect(settings)
    if provider is _UNSET:
        provider = build_provider(settings)

    app = FastAPI(title="Storefront API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.db = db
    app.state.catalog = None
    app.state.orders = None
    app.state.gateway = None
    if db is not None:
        app.state.catalog = CatalogStore(db)
        app.state.orders = OrderStore(db)
        app.state.gateway = PaymentGateway(app.state.orders, provider)
    else:
        logger.warning("DATABASE_URL / DATABASE_NAME not set, running without storage")

    register_error_handlers(app)

    @app.get("/")
    def root():
        return {"message": "Storefront API running"}

    @app.get("/health")
    def health():
        resp = {
            "status": "OK",
            "database": "Not Configured",
            "payments": "Enabled" if provider is not None else "Disabled",
            "collections": [],
        }
        if db is not None:
            try:
                resp["collections"] = db.list_collection_names()[:10]
                resp["database"] = "Connected"
            except Exception as e:
                logger.warning("Database health check failed", error=str(e))
                resp["database"] = f"Connected but error: {str(e)[:80]}"
        return resp

    app.include_router(products.router)
    app.include_router(orders.router)
    app.include_router(payments.router)
    app.include_router(newsletter.router)
    app.include_router(auth.router)
    return app


app = create_app()
