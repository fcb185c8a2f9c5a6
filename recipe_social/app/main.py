# recipe_social/app/main.py
from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipe_social import __version__
from recipe_social.app.config import settings
from recipe_social.app.deps import get_repositories, get_token_service
from recipe_social.app.domain.errors import SocialError
from recipe_social.app.routers.auth import router as auth_router
from recipe_social.app.routers.comments import router as comments_router
from recipe_social.app.routers.posts import router as posts_router
from recipe_social.app.routers.users import router as users_router
from recipe_social.app.schemas.common import ErrorResponse

# Logging simples no stdout (bom para dev e containers)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Recipe Social API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(posts_router)
app.include_router(comments_router)


def _error_body(message: str, detail: str | None) -> dict:
    error = detail if not settings.is_production else None
    return ErrorResponse(message=message, error=error).model_dump(exclude_none=True)


@app.exception_handler(SocialError)
async def social_error_handler(request: Request, exc: SocialError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Invalid request", details),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", str(exc)),
    )


@app.on_event("startup")
async def startup() -> None:
    purged = get_token_service(get_repositories()).purge_expired()
    logger.info("Startup complete (storage=%s, purged revocations=%d)", settings.STORAGE_BACKEND, purged)


@app.get("/health")
def health():
    return {"ok": True}
