# agent/unlockbt/routers/unlock_routes.py
"""
Unlock API Routes

GET /api/unlocks        — Unlock events (DropsTab when configured, else local)
GET /api/shortable      — Tokens with at least one shortable unlock
GET /api/token/{token}  — Unlocks + price series of one token
"""
import re
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from .deps import get_store, get_source
from ..backtest.data_loader import DataStore
from ..sources.dropstab import DropsTabSource, resolve_unlocks
from ..monitoring.logger import get_logger

logger = get_logger("api.unlocks")
router = APIRouter(prefix="/api", tags=["unlocks"])

TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@router.get("/unlocks")
async def list_unlocks(
    store: DataStore = Depends(get_store),
    source: DropsTabSource = Depends(get_source),
) -> List[Dict[str, Any]]:
    """
    Remote unlocks replace the local list for this response only; any
    remote failure or empty result serves the local fixtures.
    """
    outcome = await source.fetch_async()
    events, origin = resolve_unlocks(store.unlocks, outcome)
    logger.info("Unlocks served", source=origin, count=len(events))
    return [ev.to_dict() for ev in events]


@router.get("/shortable")
def list_shortable(store: DataStore = Depends(get_store)) -> List[str]:
    return store.unlocks.shortable_tokens()


@router.get("/token/{token}")
def token_detail(token: str, store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    if not TOKEN_RE.match(token):
        raise HTTPException(status_code=404, detail="Not found")
    return store.unlocks.token_detail(token, store.prices)
