"""Shared FastAPI dependencies."""
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from db.connection import get_db
from db.store import SignalStore
from src.market_cache import MarketCache


def get_store(db: Session = Depends(get_db)) -> SignalStore:
    return SignalStore(db)


def get_judge_client(request: Request):
    """The judge client built at startup."""
    client = getattr(request.app.state, "judge_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Judge is not configured (OPENAI_KEY missing)")
    return client


def get_market_cache(request: Request) -> MarketCache:
    return request.app.state.market_cache
