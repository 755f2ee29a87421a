import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from syllabuild.api.router import api_router
from syllabuild.core.config import Settings, get_settings
from syllabuild.core.errors import SyllabuildError
from syllabuild.core.logger import log_buffer, setup_logging
from syllabuild.schemas.ai import HealthResponse

logger = logging.getLogger(__name__)


def _serve_frontend(app: FastAPI, dist_dir: str):
    """Serve the pre-built single-page app; unknown paths fall back to index.html."""
    root = os.path.realpath(dist_dir)
    index_file = os.path.join(root, "index.html")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def frontend(full_path: str):
        # API paths registered above take precedence; anything left under /api is a miss
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")
        candidate = os.path.realpath(os.path.join(root, full_path))
        if full_path and candidate.startswith(root + os.sep) and os.path.isfile(candidate):
            return FileResponse(candidate)
        return FileResponse(index_file)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Turns an uploaded syllabus into an interactive course with a final test and a remediation path.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Production serves API and bundle from one origin, so cross-origin access stays off
    if not settings.is_production:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list or ["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(SyllabuildError)
    async def syllabuild_error_handler(request: Request, exc: SyllabuildError):
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Request failed"})

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def health_check():
        """Health check endpoint."""
        return HealthResponse(
            ok=True,
            env=settings.environment,
            time=datetime.now(timezone.utc).isoformat(),
        )

    @app.get("/api/logs", tags=["health"])
    def get_logs():
        """Recent generation pipeline steps."""
        return log_buffer.get_logs()

    app.include_router(api_router, prefix="/api")

    if settings.is_production:
        if os.path.isdir(settings.frontend_dist):
            _serve_frontend(app, settings.frontend_dist)
        else:
            logger.warning(f"{settings.frontend_dist} not found. Did you run the frontend build step?")
    else:
        logger.info(f"CORS origin(s): {settings.cors_origin}")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("syllabuild.main:app", host="0.0.0.0", port=get_settings().port)
