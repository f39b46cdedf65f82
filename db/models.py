"""SQLAlchemy ORM models for Polymarket Topic Signals."""
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Float, Integer, DateTime, Text,
    ForeignKey, Enum, Index, JSON
)
from sqlalchemy.orm import DeclarativeBase, relationship

from models.signal import SignalStatus


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# MODELS
# =============================================================================

class Topic(Base):
    """A user-defined topic that scans run against."""
    __tablename__ = "topics"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    description = Column(Text)
    keywords = Column(JSON, nullable=False, default=list)  # Ordered list of keywords
    icon_name = Column(String(50), default="TrendingUp")
    active_signal_count = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    signals = relationship("Signal", back_populates="topic", cascade="all, delete-orphan")


class Signal(Base):
    """AI-detected mispricing. Prices are for the chosen side."""
    __tablename__ = "signals"

    id = Column(String(36), primary_key=True, default=_new_id)
    topic_id = Column(String(36), ForeignKey("topics.id", ondelete="CASCADE"), nullable=False)

    # Market
    market_id = Column(Text, nullable=False)
    market_question = Column(Text, nullable=False)
    market_description = Column(Text)

    # Pricing
    side = Column(String(3), nullable=False)  # "YES" or "NO"
    market_price = Column(Float, nullable=False)  # Current odds (0-1)
    ai_fair_price = Column(Float, nullable=False)  # Judge's fair price (0-1)
    edge_bps = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=False)

    # Market snapshot
    volume = Column(Float)
    liquidity = Column(Float)
    end_date = Column(DateTime)

    status = Column(Enum(SignalStatus, values_callable=lambda e: [m.value for m in e]),
                    default=SignalStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    topic = relationship("Topic", back_populates="signals")

    __table_args__ = (
        Index("idx_signals_topic_status", "topic_id", "status"),
        Index("idx_signals_created_at", "created_at"),
    )
