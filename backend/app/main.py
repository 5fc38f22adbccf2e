# main.py
"""
Point d'entrée de l'API Experta.
Enregistre tous les modules via leurs routers.

Chaîne d'une requête :
    log → CORS → sanitize (corps + query) → routing
    → sanitize_path_params → authentification / rôle → service
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import AsyncSessionLocal, engine, ping
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.shared.deps import DbDep
from app.shared.sanitize import SanitizeMiddleware, sanitize_path_params

from app.modules.auth.router       import router as auth_router
from app.modules.users.router      import router as users_router
from app.modules.projets.router    import router as projets_router
from app.modules.missions.router   import router as missions_router
from app.modules.documents.router  import router as documents_router
from app.modules.amo.router        import router as amo_router
from app.modules.partenaire.router import router as partenaire_router

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ADMIN_PASSWORD:
        from app.seed.seed_admin import ensure_admin
        async with AsyncSessionLocal() as db:
            await ensure_admin(db)
    logger.info("%s %s démarrée", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
    dependencies=[Depends(sanitize_path_params)],
)

app.add_middleware(SanitizeMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    if request.method != "OPTIONS":
        logger.info(
            "%s %s → %s (%.1f ms)",
            request.method, request.url.path, response.status_code,
            (time.perf_counter() - start) * 1000,
        )
    return response


register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(projets_router)
app.include_router(missions_router)
app.include_router(documents_router, prefix="/api/documents")
app.include_router(documents_router, prefix="/api/client-documents")
app.include_router(amo_router)
app.include_router(partenaire_router)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/", tags=["Status"])
async def root(db: DbDep):
    return {
        "message": "API Experta Backend est en fonctionnement!",
        "version": settings.VERSION,
        "database": "connectée" if await ping(db) else "non connectée",
        "timestamp": _now(),
    }


@app.get("/health", tags=["Status"])
async def health(db: DbDep):
    return {
        "status": "OK",
        "database": "healthy" if await ping(db) else "unhealthy",
        "uptime": round(time.monotonic() - STARTED_AT, 1),
        "timestamp": _now(),
    }
