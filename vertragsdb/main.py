import asyncio
from fastapi import FastAPI, Depends, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from vertragsdb.config import settings
from vertragsdb.database import init_db, close_db, get_db
from vertragsdb.logging_config import setup_logging
from vertragsdb.middleware.correlation import CorrelationIdMiddleware
from vertragsdb.services.auth_service import init_token_signer
from vertragsdb.services.storage import get_storage

# Import models so they are registered with Base.metadata
import vertragsdb.models  # noqa: F401

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("starting_vertragsdb", env=settings.ENVIRONMENT)
    init_token_signer(settings)
    await init_db()
    yield
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Global exception handlers: every error body has the shape
# {"error": {"code": "...", "message": "..."}}
# ---------------------------------------------------------------------------

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, str):
        detail = {"error": {"code": "HTTP_ERROR", "message": detail}}
    elif isinstance(detail, dict) and "error" not in detail:
        detail = {"error": detail}
    return JSONResponse(
        status_code=exc.status_code, content=detail, headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
            }
        },
    )


app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With", "X-Request-ID"],
)


@app.get("/health", tags=["System"])
async def health(
    response: Response,
    db: AsyncSession = Depends(get_db),
    storage=Depends(get_storage),
):
    health_status = {"status": "healthy", "version": settings.APP_VERSION, "checks": {}}

    try:
        await db.execute(text("SELECT 1"))
        health_status["checks"]["db"] = "ok"
    except Exception as e:
        logger.error("health_check_db_failed", error=str(e))
        health_status["checks"]["db"] = "error"
        health_status["status"] = "unhealthy"

    try:
        await asyncio.to_thread(storage.ping)
        health_status["checks"]["storage"] = "ok"
    except Exception as e:
        logger.error("health_check_storage_failed", error=str(e))
        health_status["checks"]["storage"] = "error"
        health_status["status"] = "unhealthy"

    if health_status["status"] == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return health_status


# --- Routers ---
from vertragsdb.routes.auth import router as auth_router  # noqa: E402
from vertragsdb.routes.users import router as users_router  # noqa: E402
from vertragsdb.routes.contracts import router as contracts_router  # noqa: E402
from vertragsdb.routes.documents import router as documents_router  # noqa: E402
from vertragsdb.routes.categories import router as categories_router  # noqa: E402
from vertragsdb.routes.reports import router as reports_router  # noqa: E402

api_prefix = settings.API_PREFIX.rstrip("/")

app.include_router(auth_router, prefix=f"{api_prefix}/auth", tags=["Auth"])
app.include_router(users_router, prefix=f"{api_prefix}/users", tags=["Users"])
app.include_router(contracts_router, prefix=f"{api_prefix}/contracts", tags=["Contracts"])
app.include_router(documents_router, prefix=api_prefix, tags=["Documents"])
app.include_router(categories_router, prefix=f"{api_prefix}/categories", tags=["Categories"])
app.include_router(reports_router, prefix=f"{api_prefix}/reports", tags=["Reports"])
