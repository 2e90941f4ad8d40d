"""
EstateHub - Real-estate platform API.
Hosts the mortgage calculator with request tracing, rate limiting and a uniform error envelope.
"""
import time
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from estatehub.core.config import settings
from estatehub.core.errors import format_validation_errors
from estatehub.core.logger import logger
from estatehub.core.rate_limit import RateLimiter
from estatehub.mortgage.router import info_router as mortgage_info_router
from estatehub.mortgage.router import router as mortgage_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management (startup/shutdown hooks)."""
    logger.info(f"Initializing {settings.APP_NAME} v{settings.VERSION}")
    yield
    logger.info("Shutting down application")


def build_rate_limiter() -> Optional[RateLimiter]:
    if not settings.RATE_LIMIT_ENABLED:
        return None
    return RateLimiter(
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        block_seconds=settings.RATE_LIMIT_BLOCK_SECONDS
    )


def create_app(rate_limiter: Optional[RateLimiter] = None, trusted_proxy_hosts: Optional[str] = None) -> FastAPI:
    """
    Application factory.
    The rate limiter is injected so deployments can swap its store and tests can tune its limits.

    Middleware order, outermost first: proxy headers, CORS, correlation ID, rate limit.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Real-estate platform API: mortgage payment, affordability and loan comparison calculators.",
        lifespan=lifespan
    )
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else build_rate_limiter()

    @app.middleware("http")
    async def enforce_rate_limit(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Applies the per-client request budget before any route runs."""
        limiter: Optional[RateLimiter] = request.app.state.rate_limiter
        if limiter is None:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        decision = limiter.hit(client, request.method, request.url.path)

        if not decision.allowed:
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": decision.message},
                headers=decision.headers()
            )

        response = await call_next(request)
        response.headers.update(decision.headers())
        return response

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """
        Middleware for distributed tracing.
        Injects a unique Correlation ID into the request context and propagates it to the response headers.
        """
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid4()))
        request.state.correlation_id = correlation_id

        start_time = time.time()

        logger.info(
            f"Request: {request.method} {request.url.path}",
            extra={"correlation_id": correlation_id}
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(
            f"Response: {response.status_code} | {process_time:.3f}s",
            extra={"correlation_id": correlation_id}
        )

        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Correlation-ID"],
    )

    # Resolves request.client from X-Forwarded-For so each user gets their own rate limit bucket
    app.add_middleware(
        ProxyHeadersMiddleware,
        trusted_hosts=trusted_proxy_hosts if trusted_proxy_hosts is not None else settings.TRUSTED_PROXY_HOSTS
    )

    app.include_router(mortgage_router, prefix=f"{settings.API_PREFIX}/mortgage", tags=["Mortgage"])
    app.include_router(mortgage_info_router)

    @app.get("/api-info", tags=["Health"])
    def api_info() -> Dict[str, Any]:
        """
        Endpoint exposing API metadata and service discovery links.
        """
        return {
            "app": settings.APP_NAME,
            "version": settings.VERSION,
            "status": "online",
            "endpoints": {
                "mortgage_calculate": f"{settings.API_PREFIX}/mortgage/calculate",
                "mortgage_affordability": f"{settings.API_PREFIX}/mortgage/affordability",
                "mortgage_compare": f"{settings.API_PREFIX}/mortgage/compare",
                "docs": "/docs",
                "redoc": "/redoc"
            }
        }

    @app.get("/health", tags=["Health"])
    def health_check() -> Dict[str, str]:
        """
        Liveness probe endpoint for orchestration systems.
        """
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.VERSION
        }

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Rejects invalid payloads with one message per offending field."""
        correlation_id = getattr(request.state, "correlation_id", "N/A")
        errors = format_validation_errors(exc.errors())

        logger.info(
            f"Validation failed: {request.method} {request.url.path} | fields={sorted(errors)}",
            extra={"correlation_id": correlation_id}
        )

        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Validation failed", "errors": errors}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Wraps HTTP errors, including unknown routes, in the API error envelope."""
        correlation_id = getattr(request.state, "correlation_id", "N/A")

        logger.info(
            f"HTTPException: {exc.status_code} | {request.method} {request.url.path}",
            extra={"correlation_id": correlation_id}
        )

        message = exc.detail
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"

        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message, "correlation_id": correlation_id},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Global exception barrier.
        Captures unhandled exceptions, logs stack traces with Correlation IDs,
        and returns a sanitized 500 Internal Server Error response.
        """
        correlation_id = getattr(request.state, "correlation_id", "N/A")

        logger.error(
            f"Unhandled exception: {str(exc)}",
            exc_info=True,
            extra={"correlation_id": correlation_id}
        )

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Internal Server Error",
                "correlation_id": correlation_id
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "estatehub.main:app",
        host="0.0.0.0",  # nosec
        port=8000,
        reload=settings.DEBUG
    )
