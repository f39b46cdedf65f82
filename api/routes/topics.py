"""Topic endpoints, including the scan trigger."""
from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_store, get_judge_client
from config.settings import settings
from db.store import SignalStore
from src.estimate_fair_value import JudgeError
from src.orchestrator import ScanOrchestrator, TopicNotFoundError

router = APIRouter()


@router.get("")
async def list_topics(store: SignalStore = Depends(get_store)):
    """List all topics with their active signal counts."""
    return [
        {
            **t.model_dump(),
            "active_signal_count": store.get_active_signal_count(t.id),
        }
        for t in store.list_topics()
    ]


@router.get("/{topic_id}")
async def get_topic(topic_id: str, store: SignalStore = Depends(get_store)):
    """Get a single topic."""
    topic = store.get_topic(topic_id)
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")

    return {
        **topic.model_dump(),
        "active_signal_count": store.get_active_signal_count(topic.id),
    }


@router.get("/{topic_id}/signals")
async def list_topic_signals(topic_id: str, store: SignalStore = Depends(get_store)):
    """All signals for a topic, newest first."""
    return [s.model_dump(mode="json") for s in store.get_signals_by_topic(topic_id)]


@router.post("/{topic_id}/scan")
def scan_topic(
    topic_id: str,
    store: SignalStore = Depends(get_store),
    judge_client=Depends(get_judge_client),
):
    """
    Scan a topic for new signals.

    Runs the full pipeline synchronously. "No markets" and "no mispricings"
    are successful scans with an empty signal list; a judge failure is a 502.
    """
    orchestrator = ScanOrchestrator(store, judge_client, settings=settings, verbose=settings.debug)

    try:
        result = orchestrator.scan(topic_id)
    except TopicNotFoundError:
        raise HTTPException(status_code=404, detail="Topic not found")
    except JudgeError as e:
        print(f"❌ Scan failed for topic {topic_id}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to scan for signals: {e}")

    return {
        "message": result.message,
        "outcome": result.outcome.value,
        "created_signal_count": result.created_signal_count,
        "signals": [s.model_dump(mode="json") for s in result.signals],
    }
