"""Main application entry point with FastAPI."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .config import get_settings
from .database import check_database_health, dispose_engine, get_db, list_tables
from .errors import AuthenticationRequired
from .schemas import SearchHistoryEntry, SearchParams, SearchResult
from .search import search_recipes
from .search_history import clear_history, delete_history_entry, list_history

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    logger.info("Starting recipebox...")
    tables = list_tables()
    logger.info(f"Tables in database: {tables}")
    if "recipes_fts" not in tables:
        logger.warning("recipes_fts is missing; run migrations or `recipebox-admin setup-fts`")

    yield

    logger.info("Shutting down recipebox...")
    dispose_engine()
    logger.info("recipebox shutdown complete")


app = FastAPI(
    title="recipebox",
    description="Recipe search with full-text matching and search history",
    version="1.0.0",
    lifespan=lifespan,
)


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> int:
    """Caller identity forwarded by the session provider."""
    if not x_user_id or not x_user_id.isdigit() or int(x_user_id) < 1:
        raise AuthenticationRequired()
    return int(x_user_id)


@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint.

    Verifies database connection and returns status.
    """
    if check_database_health(db):
        return {
            "status": "healthy",
            "database": "connected",
        }
    raise HTTPException(
        status_code=503,
        detail={"status": "unhealthy", "database": "disconnected"},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "recipebox",
        "status": "running",
        "version": "1.0.0",
    }


@app.post("/recipes/search", response_model=SearchResult)
def search(
    params: SearchParams,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    result = search_recipes(db, user_id, params)
    # Persists the history row written during the search
    db.commit()
    return result


@app.get("/search/history", response_model=list[SearchHistoryEntry])
def get_history(
    limit: int | None = Query(default=None, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return list_history(db, user_id, limit)


@app.delete("/search/history/{query:path}")
def delete_history(
    query: str,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        deleted = delete_history_entry(db, user_id, query)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "deleted": deleted}


@app.delete("/search/history")
def clear_all_history(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    removed = clear_history(db, user_id)
    return {"success": True, "removed": removed}
