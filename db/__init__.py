"""Database module for Polymarket Topic Signals."""
from db.connection import get_db, init_db, make_engine, session_scope, SessionLocal, engine
from db.models import (
    Base,
    Topic,
    Signal,
)
from db.store import SignalStore, SignalNotFoundError, InvalidStatusTransition
from db.seed import seed_topics

__all__ = [
    "get_db",
    "init_db",
    "make_engine",
    "session_scope",
    "SessionLocal",
    "engine",
    "Base",
    "Topic",
    "Signal",
    "SignalStore",
    "SignalNotFoundError",
    "InvalidStatusTransition",
    "seed_topics",
]
