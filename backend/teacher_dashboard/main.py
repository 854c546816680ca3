"""FastAPI application for the teacher dashboard.

Run from the repository root: uvicorn teacher_dashboard.main:app --app-dir backend --reload
"""
from __future__ import annotations
import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .cache import TTLCache
from .dashboard import DashboardQueryService, StaticScopeAverages
from .db import ensure_schema, make_engine
from .errors import DashboardError
from .repository import JsonScoreRepository, ScoreRepository, SqlScoreRepository
from .routers import auth, dashboard, health, reference
from .security import AuthGate
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> ScoreRepository:
	if settings.database_url:
		engine = make_engine(settings.database_url)
		ensure_schema(engine)
		return SqlScoreRepository(engine)
	return JsonScoreRepository(settings.data_dir)


def create_app(
	settings: Optional[Settings] = None,
	*,
	repository: Optional[ScoreRepository] = None,
	clock: Callable[[], float] = time.time,
	cache_clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
	settings = settings or default_settings
	logging.basicConfig(level=settings.log_level.upper())

	repository = repository or build_repository(settings)
	cache = TTLCache(clock=cache_clock, max_entries=settings.cache_max_entries)

	app = FastAPI(title="Teacher Dashboard API")
	app.state.settings = settings
	app.state.repository = repository
	app.state.cache = cache
	app.state.auth_gate = AuthGate(repository, settings, clock=clock)
	app.state.dashboard_service = DashboardQueryService(
		repository,
		cache,
		StaticScopeAverages(settings.school_average, settings.district_average),
		reference_ttl=settings.reference_cache_ttl_minutes * 60,
		dashboard_ttl=settings.dashboard_cache_ttl_minutes * 60,
		bucket_width=settings.distribution_bucket_width,
	)

	@app.exception_handler(DashboardError)
	def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
		headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
		if exc.status_code >= 500:
			logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
		return JSONResponse(
			status_code=exc.status_code,
			content={"message": exc.message, "code": exc.code},
			headers=headers,
		)

	@app.exception_handler(RequestValidationError)
	def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
		parts = []
		for err in exc.errors():
			loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query"))
			parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
		return JSONResponse(
			status_code=400,
			content={"message": "; ".join(parts) or "Invalid request", "code": "invalid_request"},
		)

	@app.exception_handler(Exception)
	def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
		# Do not leak exception details to the client
		logger.exception("Unhandled exception")
		return JSONResponse(status_code=500, content={"message": "Internal server error", "code": "internal_error"})

	origins = settings.cors_origin_list
	app.add_middleware(
		CORSMiddleware,
		allow_origins=origins,
		allow_credentials="*" not in origins,
		allow_methods=["GET", "POST", "OPTIONS"],
		allow_headers=["*"],
	)

	prefix = settings.api_prefix.rstrip("/")
	app.include_router(health.router, prefix=prefix)
	app.include_router(auth.router, prefix=prefix)
	app.include_router(reference.router, prefix=prefix)
	app.include_router(dashboard.router, prefix=prefix)

	@app.on_event("startup")
	def startup_event():
		# Load the source collections up front; a failure here is retried per request
		try:
			repository.warm()
		except DashboardError as exc:
			logger.warning("Could not preload dashboard data: %s", exc.message)

	return app


app = create_app()
