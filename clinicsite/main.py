"""
FastAPI application entry point.
Main application instance with middleware, exception handlers and routes.
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import asyncio
import os

from clinicsite.config import settings
from clinicsite.database import AsyncSessionLocal, init_db, close_db
from clinicsite.exceptions import AdminLoginRequired, NotFoundError
from clinicsite.routes import admin, site
from clinicsite.services.analytics_service import record_visit
from clinicsite.services.content_service import seed_defaults
from clinicsite.services.image_storage import UPLOAD_URL_PREFIX
from clinicsite.templating import BARE_LAYOUT, render, redirect_to
from clinicsite.utils.rate_limit import limiter, get_client_identifier

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Paths that are not counted as page visits
UNTRACKED_PREFIXES = ("/admin", "/css", "/js", "/images", UPLOAD_URL_PREFIX, "/favicon.ico")

# Create FastAPI application instance
app = FastAPI(
    title=settings.SITE_TITLE,
    version=settings.SITE_VERSION,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Throttled form posts get the page they came from instead of a JSON body."""
    logger.warning(f"Rate limit exceeded on {request.url.path} for {get_client_identifier(request)}: {exc.detail}")
    if request.url.path == "/admin/login":
        return render(
            request, "admin/login", {"error": "Too many login attempts. Please try again later."},
            layout=BARE_LAYOUT, status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        )
    if request.url.path == "/contact":
        return redirect_to("/", fragment="contact", error=1)
    return _rate_limit_exceeded_handler(request, exc)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Record public page visits (best effort) and log each response."""
    method = request.method
    path = request.url.path

    if not path.startswith(UNTRACKED_PREFIXES):
        try:
            async with AsyncSessionLocal() as session:
                await record_visit(
                    session,
                    get_client_identifier(request),
                    request.headers.get("user-agent"),
                    path,
                    request.headers.get("referer"),
                )
        except Exception as e:
            logger.warning(f"Visit logging skipped for {path}: {str(e)}")

    response = await call_next(request)
    logger.info(f"Response status: {response.status_code} for {method} {path}")
    return response


# Include routers
app.include_router(site.router, tags=["site"])
app.include_router(admin.auth_router, tags=["admin"])
app.include_router(admin.router, tags=["admin"])

app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


# Exception Handlers
@app.exception_handler(AdminLoginRequired)
async def admin_login_required_handler(request: Request, exc: AdminLoginRequired):
    """Anonymous admin requests go to the login page; the handler never runs."""
    logger.info(f"Unauthenticated {request.method} {request.url.path}, redirecting to login")
    return redirect_to("/admin/login")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return render(request, "errors/404", {"message": exc.message}, status_code=status.HTTP_404_NOT_FOUND)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unmatched routes get the 404 page; other HTTP errors stay plain text."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return render(request, "errors/404", {"message": None}, status_code=status.HTTP_404_NOT_FOUND)

    logger.error(f"HTTPException on {request.method} {request.url.path}: {exc.status_code} {exc.detail}")
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed path parameters (e.g. a non-numeric id) are treated as unknown pages."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return render(request, "errors/404", {"message": None}, status_code=status.HTTP_404_NOT_FOUND)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions without leaking details to the client."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}:\n"
        f"  Error: {str(exc)}\n"
        f"  Error type: {type(exc).__name__}",
        exc_info=True
    )
    return render(request, "errors/500", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.on_event("startup")
async def startup_event():
    """
    Create tables and seed default content.
    Non-blocking: the app still starts if the database is unavailable, and
    pages render with empty content.
    """
    os.makedirs(settings.upload_dir, exist_ok=True)

    try:
        await init_db()
        async with AsyncSessionLocal() as session:
            await seed_defaults(session)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(
            f"Failed to initialize database on startup: {str(e)}\n"
            f"The application will continue to run, but pages will render without stored content."
        )


@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on application shutdown."""
    try:
        await close_db()
    except Exception as e:
        # Ignore cancellation errors during shutdown - they're expected
        if not isinstance(e, (KeyboardInterrupt, asyncio.CancelledError)):
            logger.warning(f"Error during database shutdown: {str(e)}")


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server running on http://localhost:{settings.PORT}")
    logger.info(f"Admin: http://localhost:{settings.PORT}/admin/login")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
