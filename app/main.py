from contextlib import asynccontextmanager
import logging
import os
from pathlib import Path
import traceback

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from mangum import Mangum

from app.api.routes import auth, batches, health, migrations, payments, reservations
from app.core.config import check_auth_settings, db_configured, settings
from app.core.errors import AppError, StorageError
from app.core.logging import configure_logging
from app.db.connection import Database

configure_logging()
logger = logging.getLogger(__name__)

API_PREFIX = "/api"
api_gateway_base_path = os.getenv("API_GATEWAY_BASE_PATH", "").strip()
if api_gateway_base_path and not api_gateway_base_path.startswith("/"):
    api_gateway_base_path = f"/{api_gateway_base_path}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_auth_settings(settings)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    db = None
    if db_configured():
        db = Database(settings)
    else:
        logger.warning("Database configuration is missing; storage routes will fail")
    app.state.db = db
    try:
        yield
    finally:
        if db is not None:
            db.close()
        app.state.db = None


app = FastAPI(
    title="RifaApp API",
    version="1.0.0",
    openapi_url=f"{API_PREFIX}/openapi.json",
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

api_router = APIRouter(prefix=API_PREFIX)
api_router.include_router(auth.router)
api_router.include_router(health.router)
api_router.include_router(migrations.router)
api_router.include_router(reservations.router)
api_router.include_router(payments.router)
api_router.include_router(batches.router)
app.include_router(api_router)

app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/", include_in_schema=False)
def root():
    return {"ok": True, "service": "RifaApp API"}


@app.exception_handler(AppError)
def app_error_handler(_: Request, exc: AppError):
    detail = exc.detail
    if isinstance(exc, StorageError):
        detail = StorageError.default_detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": detail, "type": exc.error_type},
    )


@app.exception_handler(HTTPException)
def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "http_error"},
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(_: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": jsonable_errors(exc),
            "message": "Incomplete data",
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("Unhandled error")
    if settings.expose_errors:
        detail = {
            "type": exc.__class__.__name__,
            "message": str(exc) or "Unhandled error",
            "trace": traceback.format_exc(),
        }
    else:
        detail = "Internal Server Error"
    return JSONResponse(status_code=500, content={"detail": detail, "type": "server_error"})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


handler = Mangum(app, api_gateway_base_path=api_gateway_base_path or None)
