"""FastAPI router for region lookups.

Endpoints are registered on an ``APIRouter`` so that a larger application
can mount them; the standalone ``app`` includes the router directly::

    uvicorn quhua.server:app --port 8430

The tree is installed once with ``init_region_tree`` (or ``POST
/api/regions/load``) and is read-only afterwards. All handlers are
synchronous; FastAPI runs them in a thread pool, which is safe because
queries never modify the tree.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from quhua.config import DuplicatePolicy, QueryConfig
from quhua.core.region import DivisionRecord
from quhua.errors import QuhuaError
from quhua.hierarchy import HierarchyBuilder, RegionTree
from quhua.loaders import LoaderRegistry
from quhua.query import RegionQueryEngine
from quhua.validation import ErrorFormatter, InputValidator, ValidationError

logger = logging.getLogger("quhua")

router = APIRouter(prefix="/api/regions")

app = FastAPI(
    title="quhua API",
    description="Administrative-division lookup by code and by name",
    version="0.1.0",
)

# ---------------------------------------------------------------------------
# Module-level state (initialized by init_region_tree)
# ---------------------------------------------------------------------------

_tree: RegionTree | None = None
_engine: RegionQueryEngine | None = None
_validator = InputValidator(strict_codes=False)
_formatter = ErrorFormatter()


def init_region_tree(
    records: Sequence[DivisionRecord], config: QueryConfig | None = None
) -> RegionTree:
    """Build the tree served by the router, replacing any previous one.

    The previous tree is only dereferenced, never released: handlers that
    already hold its engine keep reading it until they finish.

    Args:
        records: Division records in source order.
        config: Query configuration. Uses defaults when None.

    Returns:
        The newly built tree.

    Raises:
        BuildFailure: If the tree cannot be built; the old tree stays active.
    """
    global _tree, _engine

    cfg = config or QueryConfig()
    tree = HierarchyBuilder.build(records, config=cfg)
    _tree, _engine = tree, RegionQueryEngine(tree, cfg)
    return tree


def reset_region_tree() -> None:
    """Drop the active tree without tearing it down."""
    global _tree, _engine

    _tree, _engine = None, None


def get_engine() -> RegionQueryEngine:
    """Return the active query engine or raise.

    Raises:
        HTTPException: If no tree has been loaded.
    """
    if _engine is None:
        raise HTTPException(status_code=503, detail="Region data not loaded")
    return _engine


# ---------------------------------------------------------------------------
# Pydantic request models
# ---------------------------------------------------------------------------


class LoadRequest(BaseModel):
    """Request body for loading a region file."""

    path: str = Field(..., min_length=1)
    name_search_limit: int = Field(default=5, ge=1, le=100)
    retain_index: bool = True
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.FIRST_WINS


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health")
def health_check() -> dict[str, Any]:
    """Return service health and whether region data is loaded."""
    return {
        "status": "ok",
        "service": "quhua",
        "version": "0.1.0",
        "loaded": _tree is not None,
    }


@router.post("/load")
def load_regions(request: LoadRequest) -> dict[str, Any]:
    """Load a region file and rebuild the tree."""
    try:
        path = _validator.validate_file_path(
            request.path, allowed_extensions=tuple(LoaderRegistry.supported_extensions())
        )
        loader = LoaderRegistry.open(path)
        records = loader.load_records(path)
        config = QueryConfig(
            name_search_limit=request.name_search_limit,
            retain_index=request.retain_index,
            duplicate_policy=request.duplicate_policy,
        )
        tree = init_region_tree(records, config)
    except ValidationError as exc:
        raise HTTPException(
            status_code=400, detail=_formatter.format_load_error(exc).to_dict()
        ) from exc
    except QuhuaError as exc:
        logger.warning("Region load failed: %s", exc)
        raise HTTPException(
            status_code=422, detail=_formatter.format_load_error(exc).to_dict()
        ) from exc

    return {"loaded": True, "statistics": tree.get_statistics(), "loader": loader.report()}


@router.get("/stats")
def region_statistics() -> dict[str, Any]:
    """Return statistics of the loaded tree."""
    engine = get_engine()
    return {"statistics": engine.tree.get_statistics(), "config": engine.config.to_dict()}


@router.get("/search")
def search_regions(
    q: str = Query(..., description="Substring of the region name"),
    limit: int | None = Query(default=None, ge=1, le=100),
) -> dict[str, Any]:
    """Find regions whose name contains ``q``."""
    engine = get_engine()
    try:
        pattern = _validator.validate_name_query(q)
    except ValidationError as exc:
        raise HTTPException(
            status_code=400, detail=_formatter.format_query_error(exc).to_dict()
        ) from exc
    return engine.find_by_name(pattern, limit=limit).to_dict()


@router.get("/{code}")
def get_region(code: str) -> dict[str, Any]:
    """Look up a region by exact code."""
    engine = get_engine()
    try:
        cleaned = _validator.validate_code(code)
    except ValidationError as exc:
        raise HTTPException(
            status_code=400, detail=_formatter.format_query_error(exc).to_dict()
        ) from exc

    result = engine.find_by_code(cleaned)
    if not result.found:
        raise HTTPException(status_code=404, detail=f"Region not found: {cleaned}")
    return result.to_dict()


app.include_router(router, tags=["regions"])
