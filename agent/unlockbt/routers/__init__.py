# agent/unlockbt/routers/__init__.py
"""
API routers
"""
from .unlock_routes import router as unlock_router
from .backtest_routes import router as backtest_router

__all__ = ["unlock_router", "backtest_router"]
