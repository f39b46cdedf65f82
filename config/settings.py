"""
Centralized configuration for Polymarket Topic Signals.

All configuration values are defined here. Locally they come from the .env
file; in production they come from the environment.
"""
from pathlib import Path
from functools import lru_cache
from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import Field

# Load the project .env regardless of the working directory
load_dotenv(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=True, alias="DEBUG")

    # ==========================================================================
    # JUDGE (OpenAI-compatible chat completions)
    # ==========================================================================
    openai_api_key: str = Field(default="", alias="OPENAI_KEY")
    openai_base_url: str = Field(default="", alias="OPENAI_BASE_URL")
    judge_model: str = Field(default="gpt-5", alias="JUDGE_MODEL")
    judge_timeout_seconds: float = Field(default=120.0, alias="JUDGE_TIMEOUT_SECONDS")
    judge_max_retries: int = Field(default=2, alias="JUDGE_MAX_RETRIES")
    judge_max_completion_tokens: int = Field(default=4096, alias="JUDGE_MAX_COMPLETION_TOKENS")

    # ==========================================================================
    # DATABASE
    # ==========================================================================
    database_url: str = Field(
        default="sqlite:///./data/signals.db",
        alias="DATABASE_URL"
    )

    # ==========================================================================
    # POLYMARKET ENDPOINTS
    # ==========================================================================
    gamma_api_base: str = Field(default="https://gamma-api.polymarket.com", alias="GAMMA_API_BASE")
    clob_api_base: str = Field(default="https://clob.polymarket.com", alias="CLOB_API_BASE")

    # Timeouts (seconds)
    listing_timeout_seconds: float = Field(default=15.0, alias="LISTING_TIMEOUT_SECONDS")
    quote_timeout_seconds: float = Field(default=3.0, alias="QUOTE_TIMEOUT_SECONDS")
    market_lookup_timeout_seconds: float = Field(default=10.0, alias="MARKET_LOOKUP_TIMEOUT_SECONDS")

    listing_limit: int = Field(default=500, alias="LISTING_LIMIT")
    market_cache_ttl_seconds: float = Field(default=60.0, alias="MARKET_CACHE_TTL_SECONDS")

    # ==========================================================================
    # CANDIDATE SELECTION (from filter_markets.py / enrich_prices.py)
    # ==========================================================================
    max_candidates: int = Field(default=10, alias="MAX_CANDIDATES")
    min_keyword_matches: int = Field(default=3, alias="MIN_KEYWORD_MATCHES")
    fallback_candidates: int = Field(default=5, alias="FALLBACK_CANDIDATES")
    max_enriched: int = Field(default=5, alias="MAX_ENRICHED")

    # ==========================================================================
    # SIGNAL PARAMETERS (from compute_signals.py)
    # ==========================================================================
    min_edge_bps: int = Field(default=300, alias="MIN_EDGE_BPS")

    # ==========================================================================
    # JUDGE PRICING (USD per 1M tokens, used by cost_tracker.py)
    # ==========================================================================
    @property
    def judge_pricing(self) -> dict[str, dict[str, float]]:
        return {
            "gpt-5": {"input": 1.25, "output": 10.0},
            "gpt-5-mini": {"input": 0.25, "output": 2.0},
            "gpt-4o": {"input": 2.50, "output": 10.0},
            "gpt-4o-mini": {"input": 0.15, "output": 0.60},
        }

    def get_model_pricing(self, model: str) -> dict[str, float]:
        """Pricing for `model`; unknown models are priced as the configured judge."""
        pricing = self.judge_pricing
        return pricing.get(model) or pricing.get(self.judge_model) or pricing["gpt-5"]

    # ==========================================================================
    # PATHS
    # ==========================================================================
    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return Path(__file__).parent.parent

    @property
    def data_dir(self) -> Path:
        """Get the data directory."""
        return self.project_root / "data"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
