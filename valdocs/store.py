# Holder for the current Snapshot plus its refresh bookkeeping.
# Readers take `store.snapshot` without locking (a single reference read);
# the snapshot, the round timestamp and the per-source tokens are only ever
# replaced together, under one lock, by install().

import threading
from typing import Optional

from valdocs.models import EMPTY_SNAPSHOT, KINDS, Snapshot, SourceState, initial_source_states


class SnapshotStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot = EMPTY_SNAPSHOT
        self._last_refresh: Optional[float] = None
        self._sources = initial_source_states()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def last_refresh(self) -> Optional[float]:
        with self._lock:
            return self._last_refresh

    def source_state(self, kind: str) -> SourceState:
        with self._lock:
            return self._sources[kind]

    def source_states(self) -> dict:
        with self._lock:
            return dict(self._sources)

    def install(self, snapshot: Snapshot, sources: dict, refreshed_at: Optional[float]) -> None:
        """
        Swap in a new snapshot with its source states in one step.

        `sources` only needs the kinds that changed; missing kinds keep their
        current state. A None `refreshed_at` leaves the round timestamp alone.
        """
        unknown = set(sources) - set(KINDS)
        if unknown:
            raise KeyError(f"unknown source kinds: {sorted(unknown)}")

        with self._lock:
            merged = dict(self._sources)
            merged.update(sources)
            self._sources = merged
            self._snapshot = snapshot
            if refreshed_at is not None:
                self._last_refresh = refreshed_at
