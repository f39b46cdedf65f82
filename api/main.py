"""
FastAPI application for Polymarket Topic Signals.

Provides HTTP endpoints for:
- Browsing topics and their signals
- Scanning a topic for new signals
- Dismissing / adding signals
- Looking up a single market
- System health checks
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from db.connection import init_db, session_scope
from db.seed import seed_topics
from src.estimate_fair_value import build_judge_client
from src.market_cache import MarketCache
from api.routes import health, topics, signals, markets


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    print("🚀 Starting Polymarket Topic Signals API...")
    init_db()
    with session_scope() as db:
        created = seed_topics(db)
    print(f"✅ Database initialized ({created} topics seeded)")

    # Built once, shared by every request
    app.state.judge_client = build_judge_client(settings) if settings.openai_api_key else None
    app.state.market_cache = MarketCache(settings.market_cache_ttl_seconds)
    if app.state.judge_client is None:
        print("⚠️  OPENAI_KEY not set - scans will fail until it is configured")

    yield

    # Shutdown
    print("👋 Shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Polymarket Topic Signals API",
    description="AI-judged mispricing signals for topic-filtered prediction markets",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "development" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(topics.router, prefix="/api/topics", tags=["Topics"])
app.include_router(signals.router, prefix="/api/signals", tags=["Signals"])
app.include_router(markets.router, prefix="/api/markets", tags=["Markets"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Polymarket Topic Signals API",
        "version": "1.0.0",
        "environment": settings.environment,
        "docs": "/docs",
        "health": "/health",
    }
