import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import Settings, load_settings
from .db import make_engine
from .errors import ProgressError
from .logger import setup_logging
from .memory_store import MemoryProgressStore
from .routers.progress import router as progress_router
from .routers.users import router as users_router
from .store import ProgressStore, SqlProgressStore
from .tracker import ProgressTracker

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> ProgressStore:
    if settings.offline_mode:
        return MemoryProgressStore()
    return SqlProgressStore(make_engine(settings.database_url), default_user_id=settings.default_user_id)


def create_app(settings: Optional[Settings] = None, store: Optional[ProgressStore] = None) -> FastAPI:
    settings = settings or load_settings()
    store = store or build_store(settings)

    app = FastAPI(title="Phase Progress API")
    app.state.settings = settings
    app.state.tracker = ProgressTracker(store, settings)
    logger.info("Progress tracker ready in %s mode", settings.mode)

    # =========================
    # CORS (Frontend → Backend)
    # =========================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================
    # Error mapping
    # =========================
    @app.exception_handler(ProgressError)
    async def progress_error_handler(request: Request, exc: ProgressError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = ", ".join(".".join(str(p) for p in err.get("loc", ())[1:]) or "body" for err in errors)
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {fields}"})

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception):
        logger.exception("Error in %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Server error"})

    # =========================
    # GLOBAL OPTIONS HANDLER
    # (Fixes 400 preflight issue)
    # =========================
    @app.options("/{path:path}")
    async def options_handler(request: Request, path: str):
        return Response(status_code=200)

    # =========================
    # Health check
    # =========================
    @app.get("/")
    def health():
        return {"status": "ok", "service": "phase-progress-backend", "mode": settings.mode}

    # =========================
    # Register routers
    # =========================
    app.include_router(progress_router)
    app.include_router(users_router)
    return app


_settings = load_settings()
setup_logging(_settings.log_level, _settings.log_file)
app = create_app(_settings)
