"""Shared fixtures: in-memory database and listing factories."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from sqlalchemy.orm import sessionmaker

from db.connection import make_engine
from db.models import Base
from db.store import SignalStore
from models.market import ListingCandidate


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite session per test."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db_session):
    return SignalStore(db_session)


def make_listing(
    market_id: str = "m1",
    question: str = "Will it rain tomorrow?",
    yes_price: float = 0.5,
    volume: float = 1000.0,
    description: str = None,
    subtitle: str = None,
    token_ids: list = None,
    end_date: str = None,
) -> ListingCandidate:
    """Create a test listing."""
    return ListingCandidate(
        id=market_id,
        question=question,
        subtitle=subtitle,
        description=description,
        outcomes=["Yes", "No"],
        outcome_prices=[yes_price, round(1 - yes_price, 6)],
        clob_token_ids=token_ids if token_ids is not None else [f"{market_id}-yes", f"{market_id}-no"],
        volume=volume,
        liquidity=500.0,
        end_date=end_date,
    )


def make_gamma_market(market_id="m1", question="Will it rain tomorrow?", prices=("0.5", "0.5"), **extra) -> dict:
    """Raw Gamma /markets item, with its JSON-string encoded arrays."""
    item = {
        "id": market_id,
        "question": question,
        "outcomes": json.dumps(["Yes", "No"]),
        "outcomePrices": json.dumps(list(prices)),
        "clobTokenIds": json.dumps([f"{market_id}-yes", f"{market_id}-no"]),
        "volume": "1000",
        "liquidity": "250",
        "active": True,
        "closed": False,
    }
    item.update(extra)
    return item


def make_judge_client(content: str, usage=None) -> MagicMock:
    """Judge client whose chat completion returns `content`."""
    response = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage or SimpleNamespace(prompt_tokens=1000, completion_tokens=200, total_tokens=1200),
    )
    client = MagicMock()
    client.chat.completions.create.return_value = response
    return client


def judge_payload(*analyses) -> str:
    return json.dumps({"analyses": list(analyses)})


def analysis(market_id, probability, side="YES", should_trade=True, explanation="Reasoning.") -> dict:
    return {
        "marketId": market_id,
        "aiProbability": probability,
        "side": side,
        "explanation": explanation,
        "shouldTrade": should_trade,
    }


def polymarket_session(markets, midpoints=None, events=None) -> MagicMock:
    """Session stub: /markets returns `markets`, /midpoint answers from `midpoints`."""
    midpoints = midpoints or {}

    def get(url, params=None, headers=None, timeout=None):
        resp = MagicMock()
        resp.ok = True
        if url.endswith("/markets"):
            resp.json.return_value = markets
        elif url.endswith("/events"):
            resp.json.return_value = events or []
        elif url.endswith("/midpoint"):
            mid = midpoints.get(params["token_id"])
            if mid is None:
                raise requests.ConnectionError("no quote")
            resp.json.return_value = {"mid": mid}
        else:
            raise AssertionError(f"unexpected url {url}")
        return resp

    session = MagicMock()
    session.get.side_effect = get
    return session
