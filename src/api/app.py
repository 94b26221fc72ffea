"""FastAPI application for the local review UI.

Routes are thin: they validate input, call the stores or the apply engine,
and return JSON. Errors are returned as ``{"error": message}``.
"""

import logging
from typing import Any

from fastapi import Body, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.schemas import AcceptRequest, JobEntry, JobsResponse
from src.core.config import DEFAULT_NAMESPACE, Settings
from src.core.store import InvalidNamespaceError, ProfileStore, SuggestionStore
from src.review.engine import ApplyEngine

logger = logging.getLogger(__name__)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with stores rooted at ``settings.storage``."""
    settings = settings or Settings()
    profiles = ProfileStore(settings.storage)
    suggestions = SuggestionStore(settings.storage)
    engine = ApplyEngine(profiles, suggestions)

    app = FastAPI(
        title="Resume Review API",
        description="Review and apply resume suggestions against a local profile",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.engine = engine

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 400 (not 422) with a readable message."""
        return _error(_describe(exc), 400)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/api/jobs", response_model=JobsResponse, response_model_by_alias=True)
    def list_jobs() -> JobsResponse:
        """Namespaces that have suggestions to review."""
        return JobsResponse(jobs=[
            JobEntry(id=name, label=name, has_suggestions=True)
            for name in suggestions.list_namespaces()
        ])

    @app.get("/api/suggestions", response_model=None)
    def get_suggestions(job_id: str | None = Query(default=None, alias="jobId")) -> Any:
        if not job_id:
            return _error("Missing jobId parameter", 400)
        try:
            data = suggestions.load(None if job_id == DEFAULT_NAMESPACE else job_id)
        except InvalidNamespaceError as exc:
            return _error(str(exc), 400)
        if data is None:
            return _error("No suggestions found", 404)
        return data.model_dump(by_alias=True)

    @app.post("/api/accept", response_model=None)
    def accept(body: AcceptRequest) -> Any:
        """Apply the selected suggestions to the profile."""
        try:
            result = engine.apply_by_ids(body.ids, body.namespace)
        except InvalidNamespaceError as exc:
            return _error(str(exc), 400)
        except Exception as exc:
            logger.error("Apply failed for %s: %s", body.namespace or DEFAULT_NAMESPACE, exc)
            return _error(str(exc), 500)
        return result.model_dump(by_alias=True)

    @app.get("/api/profile", response_model=None)
    def get_profile() -> Any:
        if not profiles.exists():
            return _error("No profile found", 404)
        profile = profiles.load()
        if profile is None:
            return _error("Invalid profile JSON", 500)
        return profile

    @app.put("/api/profile", response_model=None)
    def put_profile(profile: dict[str, Any] = Body(...)) -> Any:
        """Replace the profile. The previous one is kept as the backup."""
        name = profile.get("name")
        if not isinstance(name, str) or not name.strip():
            return _error("name is required", 400)
        profiles.backup()
        profiles.save(profile)
        return {"success": True}

    return app
