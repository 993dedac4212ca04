# agent/unlockbt/sources/dropstab.py
"""
DropsTab unlock source — remote unlock events mapped to UnlockEvent.

Only active when DROPSTAB_API_KEY is set. Every problem (transport, HTTP
status, bad body, timeout) ends up as a FetchOutcome; nothing is raised to
the caller and nothing is retried.

Response format:
  {"data": [{"coin": "ARB", "date": "2024-03-16", "amount": 1100000000}, ...]}
"""
import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import requests

from .. import config
from ..backtest.events import UnlockEvent, UnlockStore
from ..backtest.data_loader import event_from_dict, to_amount
from ..utils.cache import get_cached, set_cached
from ..utils.timeutil import midnight_utc
from ..monitoring.logger import get_logger

logger = get_logger("sources.dropstab")

SUCCESS     = "success"
UNAVAILABLE = "unavailable"
FAILED      = "failed"


# ─────────────────────────────────────────────
# Outcome
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class FetchOutcome:
    """Result of one remote fetch: success, unavailable (empty / not attempted) or failed."""
    status: str
    events: Tuple[UnlockEvent, ...] = ()
    reason: str = ""
    source: str = "dropstab"

    @classmethod
    def success(cls, events: List[UnlockEvent], source: str = "dropstab") -> "FetchOutcome":
        return cls(status=SUCCESS, events=tuple(events), source=source)

    @classmethod
    def unavailable(cls, reason: str) -> "FetchOutcome":
        return cls(status=UNAVAILABLE, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "FetchOutcome":
        return cls(status=FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS and len(self.events) > 0


# ─────────────────────────────────────────────
# Normalization
# ─────────────────────────────────────────────

class MalformedResponse(ValueError):
    """Provider body does not have the expected shape."""


def normalize_record(raw: Any) -> Optional[UnlockEvent]:
    """
    One provider record -> UnlockEvent.

    The date is cut to its calendar day at 00:00 UTC. The provider has no
    shortable signal, so shortable is always False. Returns None for records
    without a coin or with an unreadable date.
    """
    if not isinstance(raw, dict):
        return None
    coin = raw.get("coin")
    if not coin:
        return None
    try:
        ts = midnight_utc(raw.get("date"))
    except ValueError:
        return None

    return UnlockEvent(
        token=str(coin),
        timestamp=ts,
        amount_usd=to_amount(raw.get("amount")),
        shortable=False,
    )


def parse_unlocks_payload(payload: Any) -> List[UnlockEvent]:
    """
    Provider body -> events.

    Raises:
        MalformedResponse: body is not an object or `data` is not a list
    """
    if not isinstance(payload, dict):
        raise MalformedResponse(f"expected object, got {type(payload).__name__}")

    data = payload.get("data")
    if data is None:
        return []
    if not isinstance(data, list):
        raise MalformedResponse(f"'data' must be a list, got {type(data).__name__}")

    events = []
    dropped = 0
    for raw in data:
        ev = normalize_record(raw)
        if ev is None:
            dropped += 1
            continue
        events.append(ev)

    if dropped:
        logger.warning("Dropped unusable unlock records", dropped=dropped, kept=len(events))
    return events


# ─────────────────────────────────────────────
# Source
# ─────────────────────────────────────────────

class DropsTabSource:

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        path: Optional[str] = None,
        timeout_s: Optional[float] = None,
        cache_ttl_s: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key     = config.DROPSTAB_API_KEY if api_key is None else api_key
        self.base_url    = (base_url or config.DROPSTAB_BASE_URL).rstrip("/")
        self.path        = path or config.DROPSTAB_UNLOCKS_PATH
        self.timeout_s   = config.DROPSTAB_TIMEOUT_S if timeout_s is None else timeout_s
        self.cache_ttl_s = config.UNLOCKS_CACHE_TTL_S if cache_ttl_s is None else cache_ttl_s
        self.cache_key   = config.UNLOCKS_CACHE_KEY
        self.session     = session or requests.Session()
        self.session.headers["User-Agent"] = "unlockbt/1.0"

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    # ── Public API ──

    def fetch(self) -> FetchOutcome:
        """Blocking fetch. Makes no call at all without an API key."""
        if not self.configured:
            return self._report(FetchOutcome.unavailable("no_api_key"))

        cached = self._from_cache()
        if cached is not None:
            return self._report(cached)

        return self._report(self._fetch_remote())

    async def fetch_async(self) -> FetchOutcome:
        """
        fetch() in the default executor, bounded by timeout_s overall.

        Timeout becomes failed("timeout"). Cancellation of the awaiting task
        propagates to the caller.
        """
        if not self.configured:
            return self._report(FetchOutcome.unavailable("no_api_key"))

        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, self.fetch),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            return self._report(FetchOutcome.failed("timeout"))

    # ── HTTP ──

    def _fetch_remote(self) -> FetchOutcome:
        try:
            resp = self.session.get(
                self.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout_s,
            )
            resp.raise_for_status()
        except requests.exceptions.Timeout:
            return FetchOutcome.failed("timeout")
        except requests.exceptions.HTTPError as e:
            return FetchOutcome.failed(f"http_status: {e.response.status_code if e.response is not None else '?'}")
        except requests.exceptions.RequestException as e:
            return FetchOutcome.failed(f"transport: {e}")

        try:
            payload = resp.json()
        except ValueError as e:
            return FetchOutcome.failed(f"invalid_json: {e}")

        try:
            events = parse_unlocks_payload(payload)
        except MalformedResponse as e:
            return FetchOutcome.failed(f"malformed: {e}")

        if not events:
            return FetchOutcome.unavailable("empty")

        self._to_cache(events)
        return FetchOutcome.success(events)

    # ── Redis cache (UNLOCKS_CACHE_TTL_S > 0) ──

    def _from_cache(self) -> Optional[FetchOutcome]:
        if self.cache_ttl_s <= 0:
            return None
        cached = get_cached(self.cache_key)
        if not cached:
            return None
        try:
            events = [event_from_dict(ev) for ev in cached]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Cached unlocks unreadable, refetching", error=str(e))
            return None
        return FetchOutcome.success(events, source="cache")

    def _to_cache(self, events: List[UnlockEvent]) -> None:
        if self.cache_ttl_s <= 0:
            return
        set_cached(self.cache_key, [ev.to_dict() for ev in events], ttl=self.cache_ttl_s)

    def _report(self, outcome: FetchOutcome) -> FetchOutcome:
        logger.fetch(
            outcome.status,
            reason=outcome.reason or None,
            events=len(outcome.events),
            source=outcome.source if outcome.status == SUCCESS else None,
        )
        return outcome


# ─────────────────────────────────────────────
# Fallback policy
# ─────────────────────────────────────────────

def resolve_unlocks(local: UnlockStore, outcome: FetchOutcome) -> Tuple[List[UnlockEvent], str]:
    """
    Remote events replace (never merge with) local ones when the fetch
    produced at least one event; otherwise the local collection verbatim.

    Returns:
        (events, source) where source is "dropstab", "cache" or "local"
    """
    if outcome.ok:
        return list(outcome.events), outcome.source

    if outcome.status == FAILED:
        logger.warning("Remote unlocks failed, serving local data", reason=outcome.reason)
    else:
        logger.debug("Remote unlocks unavailable, serving local data", reason=outcome.reason)
    return list(local.events), "local"
