"""
HomeForPup Matching — FastAPI Application Layer

Endpoints:
  1. POST /matching/recommendations — Breed + puppy recommendations
  2. POST /matching/preferences     — Save adopter match preferences
  3. GET  /matching/preferences     — Load saved match preferences
  4. GET  /breeds                   — Breed catalog search/list
  5. GET  /breeds/{breed_id}        — Breed lookup
  6. GET  /health                   — Health check

Auth: API key header mapped to a user id
"""
from __future__ import annotations
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import (
    APIRouter, BackgroundTasks, Depends, FastAPI, Header, HTTPException, Query, Request,
)
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from activity_tracker import ActivityTracker
from asyncpg_repository import AsyncPGRepository, DatabasePool
from breed_catalog import BreedCatalog
from config import Settings, configure_logging, get_settings
from models import (
    Breed, BreedListResponse, HealthResponse, PreferencesResponse,
    RecommendRequest, RecommendResponse, SavedPreferences,
)
from recommendation_engine import RecommendationEngine, normalize_preferences
from repositories import CatalogRepository, build_seeded_repository

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

_router = APIRouter()

REQUIRED_PREFERENCE_FIELDS = [
    ('activity_level', 'activityLevel'),
    ('living_space', 'livingSpace'),
    ('family_size', 'familySize'),
    ('experience_level', 'experienceLevel'),
]


# ============================================================
# Application State (built once per app by the lifespan)
# ============================================================

class AppState:
    """Holds all shared service instances."""
    settings: Settings
    repo: CatalogRepository
    catalog: BreedCatalog
    recommender: RecommendationEngine
    tracker: ActivityTracker
    db: Optional[DatabasePool]
    start_time: float

    def __init__(self):
        self.start_time = time.monotonic()
        self.db = None


def get_state(request: Request) -> AppState:
    return request.app.state.services


# ============================================================
# App Factory / Lifespan
# ============================================================

def create_app(
    settings: Optional[Settings] = None,
    repo: Optional[CatalogRepository] = None,
    tracker: Optional[ActivityTracker] = None,
) -> FastAPI:
    """
    Build the application. Overrides are used instead of the configured
    backends, which is how tests inject in-memory collaborators.
    """
    cfg = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize services on startup, cleanup on shutdown."""
        configure_logging(cfg)
        logger.info("Starting HomeForPup matching service...")

        state = AppState()
        state.settings = cfg

        # --- Repository ---
        if repo is not None:
            state.repo = repo
        elif cfg.catalog_backend == "postgres":
            state.db = DatabasePool(cfg.asyncpg_dsn, cfg.db_pool_min, cfg.db_pool_max)
            await state.db.initialize()
            state.repo = AsyncPGRepository(state.db)
        else:
            state.repo = build_seeded_repository()

        # --- Matching ---
        state.catalog = BreedCatalog(state.repo)
        state.recommender = RecommendationEngine(
            state.catalog,
            state.repo,
            top_k=cfg.recommendation_top_k,
            puppy_limit=cfg.puppy_listing_limit,
            catalog_limit=cfg.catalog_fetch_limit,
        )

        # --- Activity ---
        state.tracker = tracker or ActivityTracker(
            cfg.activity_api_url, timeout=cfg.activity_timeout_seconds)

        app.state.services = state
        logger.info(
            "System ready. Environment: %s, catalog backend: %s",
            cfg.environment, cfg.catalog_backend if repo is None else "injected")
        yield

        # Shutdown
        logger.info("Shutting down HomeForPup matching service...")
        await state.tracker.close()
        if state.db is not None:
            await state.db.close()

    app = FastAPI(
        title="HomeForPup Matching API",
        description="Breed compatibility scoring, breed catalog and puppy "
                    "recommendations for prospective adopters.",
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = int((time.monotonic() - start) * 1000)
        response.headers["X-Response-Time-Ms"] = str(elapsed)
        return response

    app.include_router(_router)
    return app


# ============================================================
# Auth & Dependencies
# ============================================================

class AuthContext(BaseModel):
    user_id: str
    api_key: str
    anonymous: bool = False


async def get_auth(
    state: AppState = Depends(get_state),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> AuthContext:
    """Validate API key and return auth context."""
    if not x_api_key:
        # Development mode: allow unauthenticated
        if state.settings.environment == "development":
            return AuthContext(user_id="anonymous", api_key="none", anonymous=True)
        raise HTTPException(401, "Missing X-API-Key header")

    user_id = state.settings.api_key_map.get(x_api_key)
    if not user_id:
        raise HTTPException(403, "Invalid API key")
    return AuthContext(user_id=user_id, api_key=x_api_key)


async def require_user(auth: AuthContext = Depends(get_auth)) -> AuthContext:
    if auth.anonymous:
        raise HTTPException(401, "Unauthorized")
    return auth


# ============================================================
# Routes
# ============================================================

@_router.post("/matching/recommendations", response_model=RecommendResponse,
              tags=["Matching"])
async def recommend_breeds(
    request: RecommendRequest,
    state: AppState = Depends(get_state),
    auth: AuthContext = Depends(get_auth),
):
    """
    Rank breeds against adopter preferences and attach matching puppies.

    Unknown preference values are accepted and scored neutrally.
    """
    try:
        response = await state.recommender.recommend(request)
    except Exception as e:
        logger.exception("Recommendation failed")
        raise HTTPException(500, f"Recommendation error: {str(e)}")

    logger.info(
        "[recommend] user=%s activity=%s space=%s results=%d scored=%d",
        auth.user_id, request.activity_level, request.living_space,
        len(response.breeds), response.total_breeds_scored)
    return response


@_router.post("/matching/preferences", response_model=PreferencesResponse,
              tags=["Matching"])
async def save_preferences(
    request: RecommendRequest,
    background_tasks: BackgroundTasks,
    state: AppState = Depends(get_state),
    auth: AuthContext = Depends(require_user),
):
    """Save the adopter's match preferences and record the activity."""
    for attr, wire_name in REQUIRED_PREFERENCE_FIELDS:
        value = getattr(request, attr)
        if value is None or value == "":
            raise HTTPException(400, f"Missing required field: {wire_name}")

    saved = SavedPreferences(
        user_id=auth.user_id,
        preferences=normalize_preferences(request),
        updated_at=datetime.now(timezone.utc).isoformat(),
    )
    try:
        saved = await state.repo.save_match_preferences(saved)
    except Exception as e:
        logger.exception("Saving match preferences failed")
        raise HTTPException(500, f"Preferences error: {str(e)}")

    background_tasks.add_task(
        state.tracker.track_preferences_updated, auth.user_id, saved.preferences)
    return PreferencesResponse(match_preferences=saved)


@_router.get("/matching/preferences", response_model=SavedPreferences,
             tags=["Matching"])
async def load_preferences(
    state: AppState = Depends(get_state),
    auth: AuthContext = Depends(require_user),
):
    saved = await state.repo.get_match_preferences(auth.user_id)
    if saved is None:
        raise HTTPException(404, "No saved match preferences")
    return saved


@_router.get("/breeds", response_model=BreedListResponse, tags=["Breeds"])
async def list_breeds(
    search: str = Query("", description="Name, alt name or keyword"),
    category: str = Query("All", description="Sporting|Hound|Working|..."),
    size: str = Query("All", description="Toy|Small|Medium|Large|Giant"),
    breed_type: str = Query("All", alias="breedType", description="purebred|designer"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    sort_by: str = Query("name", alias="sortBy", description="name|category|size|breedType"),
    state: AppState = Depends(get_state),
):
    """Search and filter the live breed catalog."""
    try:
        return await state.catalog.list_breeds(
            search=search, category=category, size=size, breed_type=breed_type,
            page=page, limit=limit, sort_by=sort_by,
        )
    except Exception as e:
        logger.exception("Breed listing failed")
        raise HTTPException(500, f"Breed listing error: {str(e)}")


@_router.get("/breeds/{breed_id}", response_model=Breed, tags=["Breeds"])
async def get_breed(breed_id: str, state: AppState = Depends(get_state)):
    """Look up a breed by id ('breed-12' or '12')."""
    breed = await state.catalog.get_breed(breed_id)
    if breed is None:
        raise HTTPException(404, f"Breed not found: {breed_id}")
    return breed


@_router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(state: AppState = Depends(get_state)):
    """System health check."""
    components = {
        "repository": {
            "status": "healthy",
            "backend": type(state.repo).__name__,
        },
        "recommendation_engine": {
            "status": "healthy",
            "top_k": state.recommender.top_k,
        },
        "activity_tracker": {
            "status": "enabled" if state.tracker.enabled else "disabled",
        },
    }
    return HealthResponse(
        status="healthy",
        components=components,
        version=VERSION,
        uptime_seconds=int(time.monotonic() - state.start_time),
    )


app = create_app()


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")
