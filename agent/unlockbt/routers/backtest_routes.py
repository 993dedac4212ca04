# agent/unlockbt/routers/backtest_routes.py
"""
Backtest API Routes

POST /api/backtest        — Buy N hours before each unlock, sell M hours after
POST /api/backtest/sweep  — Same strategy over a grid of (before, after) windows
"""
import json
from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .deps import get_store
from ..backtest.data_loader import DataStore
from ..backtest.engine import BacktestEngine, coerce_hours
from ..backtest.analytics import grid_search
from ..monitoring.logger import get_logger

logger = get_logger("api.backtest")
router = APIRouter(prefix="/api/backtest", tags=["backtest"])


# ─────────────────────────────────────────────
# Request models
# ─────────────────────────────────────────────

class BacktestRequest(BaseModel):
    """Offsets that are missing or not numbers fall back to 0 instead of failing."""
    model_config = ConfigDict(populate_by_name=True)

    token:        Optional[str] = None
    hours_before: float = Field(default=0.0, alias="hoursBefore")
    hours_after:  float = Field(default=0.0, alias="hoursAfter")

    @field_validator("token", mode="before")
    @classmethod
    def coerce_token(cls, v: Any) -> Optional[str]:
        return str(v) if v else None

    @field_validator("hours_before", "hours_after", mode="before")
    @classmethod
    def coerce_hours_value(cls, v: Any) -> float:
        return coerce_hours(v)


class SweepRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token:        Optional[str] = None
    hours_before: Optional[List[float]] = Field(default=None, alias="hoursBefore")
    hours_after:  Optional[List[float]] = Field(default=None, alias="hoursAfter")
    limit:        int = Field(default=10, ge=1, le=100)

    @field_validator("token", mode="before")
    @classmethod
    def coerce_token(cls, v: Any) -> Optional[str]:
        return str(v) if v else None

    @field_validator("hours_before", "hours_after", mode="before")
    @classmethod
    def coerce_hours_list(cls, v: Any) -> Optional[List[float]]:
        if v is None:
            return None
        if not isinstance(v, (list, tuple)):
            v = [v]
        # Duplicates after coercion ("x" and 0 both become 0) collapse
        return list(dict.fromkeys(coerce_hours(x) for x in v)) or None


# ─────────────────────────────────────────────
# Body parsing
# ─────────────────────────────────────────────

RequestModel = TypeVar("RequestModel", bound=BaseModel)


async def read_body(request: Request, model: Type[RequestModel]) -> RequestModel:
    """
    Parse the raw body as JSON whatever the Content-Type says, then
    validate it. Anything unusable is a 400 {"error"}.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw.strip() else {}
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = e.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        logger.warning("Rejected request body", path=request.url.path, error=message)
        raise HTTPException(status_code=400, detail=message)


# ─────────────────────────────────────────────
# Handlers
# ─────────────────────────────────────────────

def backtest_summary(req: BacktestRequest, store: DataStore) -> Dict[str, Any]:
    """Returns {trades, winRate, avgRoi}; 400 {"error"} without a token."""
    if not req.token:
        raise HTTPException(status_code=400, detail="Token is required")

    result = BacktestEngine(store).run(req.token, req.hours_before, req.hours_after)
    return result.summary()


def sweep_summary(req: SweepRequest, store: DataStore) -> Dict[str, Any]:
    """Grid search over hour windows, best avgRoi first."""
    if not req.token:
        raise HTTPException(status_code=400, detail="Token is required")

    rows = grid_search(store, req.token, req.hours_before, req.hours_after)
    logger.info("Sweep served", token=req.token, combinations=len(rows))
    return {
        "token":        req.token,
        "best":         rows[0] if rows else None,
        "results":      rows[:req.limit],
        "combinations": len(rows),
    }


# ─────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────

@router.post("")
async def run_backtest(request: Request, store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    req = await read_body(request, BacktestRequest)
    return backtest_summary(req, store)


@router.post("/sweep")
async def sweep_backtest(request: Request, store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    req = await read_body(request, SweepRequest)
    return sweep_summary(req, store)
