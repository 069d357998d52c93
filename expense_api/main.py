import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from expense_api.core.config import Settings, settings as default_settings
from expense_api.core.errors import ExpenseAPIError
from expense_api.core.logging_config import configure_logging
from expense_api.db.session import Database, get_db
from expense_api.routers import expenses
from expense_api.services.mailer import Mailer, build_mailer

logger = logging.getLogger(__name__)


def _field_errors(exc: RequestValidationError) -> list:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(err.get("msg", "")).replace("Value error, ", "")
        details.append({"field": ".".join(loc), "message": message})
    return details


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ExpenseAPIError)
    async def domain_error(request, exc: ExpenseAPIError):
        body = {"error": exc.message}
        if exc.details is not None:
            body["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request, exc: RequestValidationError):
        details = _field_errors(exc)
        first = details[0] if details else {"field": "", "message": "Invalid request"}
        summary = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
        return JSONResponse(status_code=400, content={"error": summary, "details": details})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        body = {"error": "Database error"}
        if settings.EXPOSE_ERROR_DETAILS:
            body["details"] = str(exc)
        return JSONResponse(status_code=500, content=body)

    @app.exception_handler(Exception)
    async def server_error(request, exc: Exception):
        logger.exception("Server error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings = None, database: Database = None, mailer: Mailer = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database.from_settings(settings)
        # Force database to create tables
        db.create_all()
        app.state.db = db
        app.state.mailer = mailer or build_mailer(settings)
        logger.info("Expense API started, mail %s", "enabled" if settings.MAIL_ENABLED else "disabled")
        try:
            yield
        finally:
            db.dispose()
            logger.info("Database pool closed")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count"],
    )

    register_exception_handlers(app, settings)
    app.include_router(expenses.router)

    @app.get("/")
    def read_root():
        return {
            "message": f"{settings.PROJECT_NAME} is running",
            "version": settings.PROJECT_VERSION,
            "status": "healthy",
        }

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
            return {"status": "online", "database": "connected"}
        except SQLAlchemyError as e:
            logger.error("Health check failed: %s", e)
            return {"status": "online", "database": "disconnected"}

    return app


app = create_app()
