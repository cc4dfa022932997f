# backend/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn, logging, random
from datetime import datetime
from typing import Optional

from coach.config import Settings, get_settings
from coach.errors import QuotaExceeded
from coach.models.database import make_engine, make_session_factory
from coach.models.session_cache import SessionCache

# Routers
from coach.routers import analysis, auth, questions, sessions

# Services
from coach.services.analysis_service import AnalysisService
from coach.services.auth_service import AuthService, CredentialVerifier
from coach.services.llm import GeminiBackend
from coach.services.question_service import QuestionGeneratorService
from coach.services.scoring import HeuristicScorer
from coach.services.session_service import SessionService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_factory=None,
    backend: Optional[GeminiBackend] = None,
    rng: Optional[random.Random] = None,
    verifier: Optional[CredentialVerifier] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Interview Coach API", description="Interview practice backend API", version="1.0.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
    )

    # Instantiate services ONCE and attach to app.state for the routers
    rng = rng or random.Random()
    backend = backend or GeminiBackend(settings)
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.backend = backend
    app.state.auth_service = AuthService(settings, verifier)
    app.state.session_service = SessionService(settings.free_daily_session_limit, SessionCache())
    app.state.analysis_service = AnalysisService(backend, HeuristicScorer(rng))
    app.state.question_service = QuestionGeneratorService(backend, rng)

    # Routers
    app.include_router(auth.router,      prefix="/api/auth",      tags=["auth"])
    app.include_router(sessions.router,  prefix="/api/sessions",  tags=["sessions"])
    app.include_router(analysis.router,  prefix="/api/analysis",  tags=["analysis"])
    app.include_router(questions.router, prefix="/api/questions", tags=["questions"])

    @app.get("/")
    async def root():
        return {"message": "Interview Coach API is running", "version": "1.0.0"}

    @app.get("/api/health")
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "services": {
                "analysis": "gemini" if app.state.backend.available else "heuristic",
                "database": "active" if app.state.session_factory is not None else "pending",
            },
        }

    @app.exception_handler(QuotaExceeded)
    async def quota_exceeded_handler(request: Request, exc: QuotaExceeded):
        return JSONResponse(status_code=429, content={"message": str(exc), "limit": exc.limit})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Global exception: %s", exc, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal server error", "detail": str(exc)})

    @app.on_event("startup")
    async def startup_event():
        logger.info("Interview Coach API starting up...")
        if app.state.session_factory is None:
            app.state.session_factory = make_session_factory(make_engine(settings.database_url))
        await app.state.backend.initialize()
        logger.info("Interview Coach API startup complete")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Interview Coach API shutting down...")
        await app.state.backend.cleanup()
        app.state.session_service.cache.clear()
        logger.info("Interview Coach API shutdown complete")

    return app


logging.basicConfig(level=get_settings().log_level)

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
