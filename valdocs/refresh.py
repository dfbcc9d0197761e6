# Refresh orchestration for the Jötunn docs cache.
#
# One refresh round = fetch all five source pages concurrently, extract the
# ones that changed, carry the rest forward from the current snapshot, and
# install the result in a single store.install() call.
#
# Two entry points funnel into the same round:
#   ensure_fresh(): on-demand, no-op while the snapshot is within its expiry
#   refresh():      unconditional, used by the background timer and /refresh
#
# Rounds are serialized by _round_lock; ensure_fresh() checks expiry before
# and after taking it so a caller that waited on someone else's round returns
# without starting a second one.

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from valdocs.config import CacheOptions
from valdocs.extractors import extract_kind
from valdocs.fetcher import DocumentFetcher, Fetched, FetchError
from valdocs.models import KINDS, RefreshReport, Snapshot, SourceOutcome, SourceState
from valdocs.store import SnapshotStore

logger = logging.getLogger(__name__)


class RefreshOrchestrator:
    def __init__(
        self,
        options: CacheOptions,
        fetcher: DocumentFetcher,
        store: SnapshotStore,
        clock: Callable[[], float] = time.time,
    ):
        self.options = options
        self.fetcher = fetcher
        self.store = store
        self.clock = clock
        self._round_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ─────────────────────────────────────────
    # ON-DEMAND
    # ─────────────────────────────────────────

    def is_fresh(self) -> bool:
        last = self.store.last_refresh
        if last is None or not self.store.snapshot.has_data:
            return False
        return self.clock() - last < self.options.expiry.total_seconds()

    def ensure_fresh(self) -> RefreshReport:
        """Run a refresh round unless the snapshot has data and is within expiry."""
        if self.is_fresh():
            return RefreshReport(skipped=True, refreshed_at=self.store.last_refresh)

        with self._round_lock:
            if self.is_fresh():
                logger.debug("[REFRESH] another caller refreshed while we waited")
                return RefreshReport(skipped=True, refreshed_at=self.store.last_refresh)
            return self._run_round()

    def refresh(self) -> RefreshReport:
        """Run a refresh round now, ignoring the expiry window."""
        with self._round_lock:
            return self._run_round()

    # ─────────────────────────────────────────
    # ROUND
    # ─────────────────────────────────────────

    def _load_source(self, kind: str, url: str, token: Optional[str]):
        result = self.fetcher.fetch(url, token)
        if isinstance(result, Fetched):
            return SourceOutcome.FETCHED, tuple(extract_kind(kind, result.document)), result.token
        return SourceOutcome.UNCHANGED, None, result.token

    def _run_round(self) -> RefreshReport:
        urls = self.options.source_urls()
        previous = self.store.snapshot
        states = self.store.source_states()

        results = {}
        with ThreadPoolExecutor(max_workers=len(KINDS), thread_name_prefix="valdocs-fetch") as executor:
            futures = {
                kind: executor.submit(self._load_source, kind, urls[kind], states[kind].token)
                for kind in KINDS
            }
            for kind, future in futures.items():
                try:
                    results[kind] = future.result()
                except FetchError as e:
                    logger.warning("[FAIL] %s: %s, keeping previous records", kind, e)
                    results[kind] = (SourceOutcome.FAILED, None, None)
                except Exception:
                    logger.exception("[FAIL] %s: unexpected error, keeping previous records", kind)
                    results[kind] = (SourceOutcome.FAILED, None, None)

        now = self.clock()
        collections = {}
        new_states = {}
        report = RefreshReport()
        for kind in KINDS:
            outcome, records, token = results[kind]
            report.outcomes[kind] = outcome
            if outcome is SourceOutcome.FETCHED:
                collections[kind] = records
            else:
                collections[kind] = previous.records(kind)
            if outcome is not SourceOutcome.FAILED:
                new_states[kind] = SourceState(token=token, checked_at=now)

        any_fetched = any(o is SourceOutcome.FETCHED for o in report.outcomes.values())
        snapshot = Snapshot(**collections) if any_fetched else previous
        # a round where every source failed does not count towards freshness
        refreshed_at = now if new_states else None
        self.store.install(snapshot, new_states, refreshed_at)

        report.refreshed_at = self.store.last_refresh
        logger.info(
            "[REFRESH] %s | items=%d recipes=%d prefabs=%d pieces=%d characters=%d",
            ", ".join(f"{k}:{o.value}" for k, o in report.outcomes.items()),
            len(snapshot.items), len(snapshot.recipes), len(snapshot.prefabs),
            len(snapshot.pieces), len(snapshot.characters),
        )
        return report

    # ─────────────────────────────────────────
    # BACKGROUND TIMER
    # ─────────────────────────────────────────

    def start(self) -> None:
        """Warm the cache now (without blocking) and re-check every poll_interval."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_timer, name="valdocs-refresh", daemon=True)
        self._thread.start()
        logger.info("[TIMER] started, polling every %s", self.options.poll_interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the timer; an in-flight round is allowed to finish first."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            logger.info("[TIMER] stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run_timer(self) -> None:
        self._safely(self.ensure_fresh)
        interval = self.options.poll_interval.total_seconds()
        while not self._stop_event.wait(interval):
            self._safely(self.refresh)

    def _safely(self, round_fn) -> None:
        # the service keeps answering from the current snapshot no matter what
        try:
            round_fn()
        except Exception:
            logger.exception("[TIMER] background refresh failed; serving current snapshot")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
