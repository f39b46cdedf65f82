"""Health check endpoints."""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from db.connection import get_db
from db.models import Topic, Signal
from models.signal import SignalStatus
from config.settings import settings

router = APIRouter()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.environment, "timestamp": _timestamp()}


@router.get("/health/db")
async def database_health(db: Session = Depends(get_db)):
    """Database connectivity check, with topic and active signal counts."""
    try:
        topic_count = db.query(func.count(Topic.id)).scalar()
        active_count = db.query(func.count(Signal.id)).filter(
            Signal.status == SignalStatus.ACTIVE
        ).scalar()
    except SQLAlchemyError as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
            "timestamp": _timestamp(),
        }

    return {
        "status": "healthy",
        "database": "connected",
        "dialect": db.get_bind().dialect.name,
        "topics": topic_count,
        "active_signals": active_count,
        "timestamp": _timestamp(),
    }


@router.get("/health/config")
async def config_check(request: Request):
    """Whether a scan can run: judge client built, data sources set."""
    judge_ready = getattr(request.app.state, "judge_client", None) is not None
    sources = {
        "gamma": settings.gamma_api_base,
        "clob": settings.clob_api_base,
    }
    ready = judge_ready and all(sources.values())

    return {
        "status": "healthy" if ready else "degraded",
        "judge": {"model": settings.judge_model, "configured": judge_ready},
        "sources": sources,
        "min_edge_bps": settings.min_edge_bps,
        "timestamp": _timestamp(),
    }
