"""Signal endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from api.dependencies import get_store
from db.store import SignalStore, SignalNotFoundError, InvalidStatusTransition
from models.signal import SignalStatus

router = APIRouter()


class SignalStatusUpdate(BaseModel):
    """Request to change a signal's status."""
    status: SignalStatus


@router.get("")
async def get_signals(
    ids: Optional[str] = Query(None, description="Comma-separated signal ids"),
    store: SignalStore = Depends(get_store),
):
    """Get specific signals by id."""
    signal_ids = [i for i in (ids or "").split(",") if i]
    return [s.model_dump(mode="json") for s in store.get_signals(signal_ids)]


@router.patch("/{signal_id}", status_code=204)
async def update_signal(
    signal_id: str,
    update: SignalStatusUpdate,
    store: SignalStore = Depends(get_store),
):
    """Dismiss a signal or mark it added to a strategy."""
    try:
        store.update_signal_status(signal_id, update.status)
    except SignalNotFoundError:
        raise HTTPException(status_code=404, detail="Signal not found")
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    return Response(status_code=204)
