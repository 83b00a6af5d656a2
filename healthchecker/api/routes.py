"""API routes for the health check report.

Endpoints:
  GET  /api/health/report           — run all checks, full snapshot + grouped view
  GET  /api/health/metadata         — categories, providers, check list (no execution)
  GET  /api/health/category/{slug}  — run one category
  GET  /api/health/check/{slug}     — run one check
  GET  /api/health/stats            — counts, served from cache within the TTL
  POST /api/health/run              — run all checks with an optional deadline
  POST /api/health/cache/clear      — drop cached results
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from healthchecker.errors import NoChecksAvailableError
from healthchecker.runner import HealthCheckRunner

logger = logging.getLogger(__name__)

health_router = APIRouter()


# ── Request / response models ───────────────────────────────────────────────


class RunBody(BaseModel):
    deadlineSec: float | None = None


class CheckResultResponse(BaseModel):
    status: str
    title: str
    description: str
    slug: str
    category: str
    provider: str
    docsUrl: str | None = None
    actionUrl: str | None = None


class StatsResponse(BaseModel):
    critical: int
    warning: int
    good: int
    total: int
    lastRun: str | None = None
    partial: bool = False


def _runner(request: Request) -> HealthCheckRunner:
    return request.app.state.runner


@health_router.get("/health/report")
def report(
    request: Request,
    status: str | None = Query(default=None),
    category: str | None = Query(default=None),
) -> dict[str, Any]:
    """Run every check and return the export snapshot plus a filtered grouping."""
    runner = _runner(request)
    runner.run()

    data = runner.to_dict()
    grouped = runner.get_filtered_results(status, category)
    data["grouped"] = {
        slug: [r.to_dict() for r in results] for slug, results in grouped.items()
    }
    return data


@health_router.get("/health/metadata")
def metadata(request: Request) -> dict[str, Any]:
    """Everything the UI needs to draw placeholders before checks run."""
    try:
        return _runner(request).get_metadata()
    except NoChecksAvailableError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e


@health_router.get("/health/category/{category}")
def run_category(category: str, request: Request) -> dict[str, Any]:
    results = _runner(request).run_category(category)
    return {
        "category": category,
        "results": [r.to_dict() for r in results],
    }


@health_router.get("/health/check/{slug}", response_model=CheckResultResponse)
def run_check(slug: str, request: Request) -> dict[str, Any]:
    result = _runner(request).run_single_check(slug)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Health check not found: {slug}")
    return result.to_dict()


@health_router.get("/health/stats", response_model=StatsResponse)
def stats(request: Request, ttl: int | None = Query(default=None)) -> dict[str, Any]:
    """Dashboard polling endpoint. ``ttl=0`` forces a fresh run."""
    runner = _runner(request)
    if ttl is None:
        ttl = runner.settings.cache_ttl_seconds
    return runner.get_stats_with_cache(ttl)


@health_router.post("/health/cache/clear")
def clear_cache(request: Request) -> dict[str, str]:
    _runner(request).clear_cache()
    return {"status": "cache cleared"}


@health_router.post("/health/run", response_model=StatsResponse)
def run_all(request: Request, body: RunBody | None = None) -> dict[str, Any]:
    """Run every check now. Checks still running at the deadline are abandoned."""
    runner = _runner(request)
    deadline = body.deadlineSec if body else None
    runner.run(deadline=deadline)
    stats = runner.to_dict()
    return {**stats["stats"], "lastRun": stats["lastRun"], "partial": stats["partial"]}
