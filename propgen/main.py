import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from propgen.api.v1.health import router as health_router
from propgen.api.v1.auth import router as auth_router
from propgen.api.v1.proposals import router as proposals_router
from propgen.api.v1.knowledge import router as knowledge_router
from propgen.api.v1.settings import router as settings_router
from propgen.core.errors import PersistenceFailure
from propgen.core.rate_limit import limiter
from propgen.core.config import settings
from propgen.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

app = FastAPI(title="Proposal Generator API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=(settings.cors_allow_origin_regex or "").strip() or None,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(PersistenceFailure)
async def persistence_failure_handler(request: Request, exc: PersistenceFailure):
    logger.error("persistence_failure path=%s error=%s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage is temporarily unavailable. Please try again."},
    )


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(auth_router, prefix="/v1", tags=["Auth"])
app.include_router(proposals_router, prefix="/v1", tags=["Proposals"])
app.include_router(knowledge_router, prefix="/v1", tags=["Knowledge Base"])
app.include_router(settings_router, prefix="/v1", tags=["Settings"])
