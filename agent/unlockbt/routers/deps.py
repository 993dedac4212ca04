# agent/unlockbt/routers/deps.py
"""
Request dependencies — the store and remote source owned by the app.
"""
from fastapi import Request

from ..backtest.data_loader import DataStore
from ..sources.dropstab import DropsTabSource


def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_source(request: Request) -> DropsTabSource:
    return request.app.state.source
