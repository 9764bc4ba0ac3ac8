"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException

from affinity_engine.catalog_registry import CatalogRegistry
from affinity_engine.config_loader import AppConfig, load_config, save_config
from affinity_engine.models import (
    AffinityTagSchema, CatalogInfoResponse, HealthResponse, MatchByCategoryRequest,
    MatchInterestsRequest, MatchResultSchema, RefreshResponse, SchedulerStatus,
    SettingsUpdateRequest,
)
from affinity_engine.refresh_scheduler import RefreshScheduler
from affinity_engine.tag_catalog import CatalogSnapshot, TagCategory
from affinity_engine.tag_matcher import TagMatcher

logger = logging.getLogger(__name__)


def _load_catalog_file() -> CatalogSnapshot:
    """Tag source for refreshes: the catalog JSON named in config."""
    path = app.state.config.catalog.resolved_tags_path()
    return CatalogSnapshot.from_json(path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config and the tag catalog on startup."""
    config = load_config()
    app.state.config = config

    registry = CatalogRegistry(config.matching, config.normalizer)
    app.state.registry = registry
    app.state.scheduler = RefreshScheduler(registry, _load_catalog_file)

    tags_path = config.catalog.resolved_tags_path()
    if tags_path.exists():
        registry.publish(CatalogSnapshot.from_json(tags_path))
        app.state.scheduler.last_run = registry.snapshot().refreshed_at
    else:
        logger.error(
            f"No affinity tag catalog at {tags_path}. "
            "Run: python scripts/build_tag_catalog.py <crm-export.csv>"
        )

    if config.catalog.auto_refresh:
        app.state.scheduler.schedule(config.catalog.refresh_interval)

    yield

    await app.state.scheduler.shutdown()


app = FastAPI(title="Affinity Tag Matcher", lifespan=lifespan)


def _require_matcher() -> TagMatcher:
    matcher = app.state.registry.matcher()
    if matcher is None:
        raise HTTPException(
            status_code=503,
            detail="Affinity tag catalog not loaded. Run: python scripts/build_tag_catalog.py",
        )
    return matcher


# --- API Routes ---

@app.get("/api/health")
async def health() -> HealthResponse:
    registry: CatalogRegistry = app.state.registry
    snapshot = registry.snapshot()
    return HealthResponse(
        status="ok",
        catalog_loaded=registry.is_loaded,
        tag_count=len(snapshot) if snapshot else 0,
        matching_threshold=registry.matching.acceptance_threshold,
    )


@app.get("/api/affinity-tags")
async def list_tags() -> List[AffinityTagSchema]:
    snapshot = app.state.registry.snapshot()
    if snapshot is None:
        return []
    return [AffinityTagSchema.from_tag(t) for t in snapshot]


@app.get("/api/affinity-tags/search")
async def search_tags(q: str, limit: int = 5) -> List[AffinityTagSchema]:
    matcher = app.state.registry.matcher()
    if matcher is None:
        return []
    return [AffinityTagSchema.from_tag(t) for t in matcher.find_similar_tags(q, limit=limit)]


@app.post("/api/affinity-tags/match")
def match_tags(req: MatchInterestsRequest) -> List[MatchResultSchema]:
    """Match extracted interests (and optionally the raw transcript) to tags."""
    matcher = _require_matcher()
    results = matcher.match_interests(
        req.professional_interests,
        req.personal_interests,
        req.philanthropic_priorities,
        raw_transcript=req.transcript,
    )
    logger.info(f"Matched affinity tags: {[r.tag.name for r in results]}")
    return [MatchResultSchema.from_result(r) for r in results]


@app.post("/api/affinity-tags/match-category")
def match_tags_by_category(req: MatchByCategoryRequest) -> List[MatchResultSchema]:
    matcher = _require_matcher()
    try:
        category = TagCategory.parse(req.category)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    results = matcher.match_by_category(req.interests, category)
    return [MatchResultSchema.from_result(r) for r in results]


@app.post("/api/affinity-tags/refresh")
async def refresh_tags() -> RefreshResponse:
    """Reload the catalog file and publish it as a new snapshot."""
    scheduler: RefreshScheduler = app.state.scheduler
    try:
        total = await scheduler.refresh_now()
    except Exception as e:
        logger.exception("Affinity tag refresh failed")
        raise HTTPException(status_code=500, detail=f"Failed to refresh affinity tags: {str(e)}")

    return RefreshResponse(
        success=True,
        total=total,
        last_refresh=scheduler.last_run,
        message=f"Refreshed {total} affinity tags",
    )


def _catalog_info() -> CatalogInfoResponse:
    cfg: AppConfig = app.state.config
    scheduler: RefreshScheduler = app.state.scheduler
    snapshot = app.state.registry.snapshot()
    return CatalogInfoResponse(
        total=len(snapshot) if snapshot else 0,
        last_refresh=scheduler.last_run,
        auto_refresh=cfg.catalog.auto_refresh,
        refresh_interval=cfg.catalog.refresh_interval,
        matching_threshold=cfg.matching.threshold_percent,
        scheduler_status=SchedulerStatus(**scheduler.status()),
    )


@app.get("/api/affinity-tags/info")
async def catalog_info() -> CatalogInfoResponse:
    return _catalog_info()


@app.put("/api/affinity-tags/settings")
async def update_settings(req: SettingsUpdateRequest) -> CatalogInfoResponse:
    cfg: AppConfig = app.state.config

    if req.auto_refresh is not None:
        cfg.catalog.auto_refresh = req.auto_refresh
    if req.refresh_interval is not None:
        cfg.catalog.refresh_interval = req.refresh_interval

    if req.matching_threshold is not None:
        # Settings use the 0-100 scale; 1 means 1%, not 100%
        percent = max(0.0, min(100.0, req.matching_threshold))
        cfg.matching = cfg.matching.model_copy(update={"acceptance_threshold": percent / 100.0})
        app.state.registry.reconfigure(cfg.matching)

    app.state.scheduler.update_schedule(cfg.catalog.auto_refresh, cfg.catalog.refresh_interval)

    save_config(cfg)
    return _catalog_info()


if __name__ == "__main__":
    import uvicorn

    server = load_config().server
    uvicorn.run("affinity_engine.main:app", host=server.host, port=server.port)
