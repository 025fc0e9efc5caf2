# inkblog/main.py

"""inkblog backend: a blog API with a cache-aside read path."""

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from inkblog import __version__
from inkblog.configs import settings
from inkblog.errors import (
    CacheExceptionError,
    DatabaseError,
    InvalidRecommendationError,
    NotFoundError,
    UploadError,
    UserAuthenticationError,
    auth_exception_handler,
    cache_exception_handler,
    database_exception_handler,
    domain_exception_handler,
)
from inkblog.managers import limiter, rate_limit_exceeded_handler
from inkblog.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from inkblog.routes import (
    admin_router,
    blog_router,
    category_router,
    file_router,
    tag_router,
    topic_router,
    user_router,
)
from inkblog.utils.helpers import today_str

API_PREFIX = "/api/v1"

app = FastAPI(
    title=settings.APP_NAME,
    description="Blog API with cache-aside reads and buffered view counts",
    version=__version__,
    lifespan=lifespan,
    swagger_ui_parameters={"docExpansion": "none", "operationsSorter": "method"},
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)

api = APIRouter(prefix=API_PREFIX)
routes = [
    blog_router,
    category_router,
    tag_router,
    topic_router,
    user_router,
    file_router,
    admin_router,
]
_ = [api.include_router(router) for router in routes]
app.include_router(api)

app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)

errors = [
    (CacheExceptionError, cache_exception_handler),
    (RateLimitExceeded, rate_limit_exceeded_handler),
    (DatabaseError, database_exception_handler),
    (UserAuthenticationError, auth_exception_handler),
    (NotFoundError, domain_exception_handler),
    (InvalidRecommendationError, domain_exception_handler),
    (UploadError, domain_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

app.state.limiter = limiter
limiter: Limiter = app.state.limiter


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01 00:00:00",
                        "cache": {"backend": "redis", "status": "healthy"},
                        "database": "ok",
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
@limiter.exempt
async def health_check(request: Request) -> ORJSONResponse:
    """
    Health check endpoint.

    Parameters
    ----------
    request : Request
        Current request context.

    Returns
    -------
    ORJSONResponse
        Version, timestamp, cache backend status and database reachability.
    """
    cache_health = await request.app.state.cache_manager.health_check()
    database_ok = await request.app.state.database.ping()
    return ORJSONResponse(
        {
            "version": app.version,
            "status": "ok" if database_ok else "degraded",
            "timestamp": today_str(),
            "cache": {"backend": cache_health.backend, "status": cache_health.status},
            "database": "ok" if database_ok else "unavailable",
        },
    )
