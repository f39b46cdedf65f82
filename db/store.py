"""
Persistence for topics and signals.

SignalStore is the only thing the scan pipeline writes through. It appends
signals and never reads them back for deduplication; status changes follow
the signal lifecycle (active -> dismissed | added).
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from db.models import Topic as TopicDB, Signal as SignalDB
from models.market import TopicProfile
from models.signal import Signal, SignalDraft, SignalStatus, can_transition


class SignalNotFoundError(LookupError):
    """No signal with the given id."""


class InvalidStatusTransition(ValueError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, current: SignalStatus, requested: SignalStatus):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move signal from {current.value} to {requested.value}")


def _to_topic(row: TopicDB) -> TopicProfile:
    return TopicProfile(
        id=row.id,
        name=row.name,
        keywords=list(row.keywords or []),
        description=row.description,
    )


def _to_signal(row: SignalDB) -> Signal:
    return Signal(
        id=row.id,
        topic_id=row.topic_id,
        market_id=row.market_id,
        market_question=row.market_question,
        market_description=row.market_description,
        side=row.side,
        market_price=row.market_price,
        ai_fair_price=row.ai_fair_price,
        edge_bps=row.edge_bps,
        explanation=row.explanation,
        volume=row.volume,
        liquidity=row.liquidity,
        end_date=row.end_date,
        status=row.status,
        created_at=row.created_at,
    )


class SignalStore:
    """Topic and signal persistence on a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Topics
    # -------------------------------------------------------------------------

    def get_topic(self, topic_id: str) -> Optional[TopicProfile]:
        row = self.db.get(TopicDB, topic_id)
        return _to_topic(row) if row else None

    def list_topics(self) -> list[TopicProfile]:
        rows = self.db.query(TopicDB).order_by(TopicDB.created_at, TopicDB.name).all()
        return [_to_topic(r) for r in rows]

    def get_topic_by_name(self, name: str) -> Optional[TopicProfile]:
        row = self.db.query(TopicDB).filter(TopicDB.name == name).first()
        return _to_topic(row) if row else None

    def create_topic(
        self,
        name: str,
        keywords: list[str],
        description: Optional[str] = None,
        icon_name: Optional[str] = None,
    ) -> TopicProfile:
        row = TopicDB(name=name, keywords=list(keywords), description=description)
        if icon_name:
            row.icon_name = icon_name
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _to_topic(row)

    def get_active_signal_count(self, topic_id: str) -> int:
        row = self.db.get(TopicDB, topic_id)
        return (row.active_signal_count or 0) if row else 0

    def update_topic_signal_count(self, topic_id: str) -> int:
        """Recount active signals for a topic and store the count."""
        count = self.db.query(func.count(SignalDB.id)).filter(
            SignalDB.topic_id == topic_id,
            SignalDB.status == SignalStatus.ACTIVE,
        ).scalar() or 0

        row = self.db.get(TopicDB, topic_id)
        if row:
            row.active_signal_count = count
            self.db.commit()
        return count

    # -------------------------------------------------------------------------
    # Signals
    # -------------------------------------------------------------------------

    def create_signals(self, drafts: list[SignalDraft]) -> list[Signal]:
        """Insert a batch of signals in one transaction. All start active."""
        rows = [SignalDB(**d.model_dump(), status=SignalStatus.ACTIVE) for d in drafts]
        if not rows:
            return []

        self.db.add_all(rows)
        self.db.commit()
        for row in rows:
            self.db.refresh(row)
        return [_to_signal(r) for r in rows]

    def get_signal(self, signal_id: str) -> Optional[Signal]:
        row = self.db.get(SignalDB, signal_id)
        return _to_signal(row) if row else None

    def get_signals(self, signal_ids: list[str]) -> list[Signal]:
        if not signal_ids:
            return []
        rows = self.db.query(SignalDB).filter(SignalDB.id.in_(signal_ids)).all()
        return [_to_signal(r) for r in rows]

    def get_signals_by_topic(self, topic_id: str) -> list[Signal]:
        rows = self.db.query(SignalDB).filter(
            SignalDB.topic_id == topic_id
        ).order_by(SignalDB.created_at.desc()).all()
        return [_to_signal(r) for r in rows]

    def update_signal_status(self, signal_id: str, status: SignalStatus) -> Signal:
        """
        Move a signal to a new status.

        Raises:
            SignalNotFoundError: unknown id
            InvalidStatusTransition: the lifecycle forbids the change
        """
        status = SignalStatus(status)
        row = self.db.get(SignalDB, signal_id)
        if row is None:
            raise SignalNotFoundError(signal_id)

        current = SignalStatus(row.status)
        if not can_transition(current, status):
            raise InvalidStatusTransition(current, status)

        row.status = status
        self.db.commit()
        self.update_topic_signal_count(row.topic_id)
        self.db.refresh(row)
        return _to_signal(row)
