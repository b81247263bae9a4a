"""SnapshotFeed — sequence-tokened recomputation over a live incident feed.

Design notes:
    - Every submitted snapshot gets a monotonically increasing sequence
      token.  The computation runs off the event loop; before its result
      is published the feed checks, under an asyncio.Lock, that no newer
      snapshot has been published or is still being computed.  A
      superseded result is dropped and never published.  A snapshot that
      fails validation releases its token and supersedes nothing.
    - The feed holds the latest snapshot only so the admission gate and
      per-zone views have something to run against.  It does not persist
      anything and it does not own cluster identity.
    - Publication listeners are awaited in registration order after the
      lock is released.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Sequence

from incident_radar.core.cluster_engine import ClusterEngine
from incident_radar.domain.cluster import AdmissionDecision, ClusterResult
from incident_radar.domain.incident import Incident

logger = logging.getLogger(__name__)

ResultListener = Callable[[ClusterResult], Awaitable[None]]


class FeedStats:
    """Counters for observability endpoints."""

    __slots__ = ("submitted", "published", "superseded", "failed")

    def __init__(self) -> None:
        self.submitted = 0
        self.published = 0
        self.superseded = 0
        self.failed = 0

    def to_dict(self) -> dict:
        return {
            "submitted": self.submitted,
            "published": self.published,
            "superseded": self.superseded,
            "failed": self.failed,
        }


class SnapshotFeed:
    """Async-safe holder of the current snapshot and its published result.

    Args:
        engine: The ClusterEngine used for every recomputation.
    """

    def __init__(self, engine: ClusterEngine | None = None) -> None:
        self._engine = engine or ClusterEngine()
        self._lock = asyncio.Lock()
        self._issued = 0
        self._snapshot: tuple[Incident, ...] = ()
        self._snapshot_sequence = 0
        self._in_flight: set[int] = set()
        self._latest: ClusterResult | None = None
        self._listeners: list[ResultListener] = []
        self._stats = FeedStats()

    # ── Public API ───────────────────────────────────────────────────────

    def subscribe(self, listener: ResultListener) -> None:
        """Register a coroutine called with every published result."""
        self._listeners.append(listener)

    async def submit(
        self,
        incidents: Sequence[Incident],
        now: datetime | None = None,
    ) -> ClusterResult | None:
        """Replace the snapshot and recompute.

        Returns the published result, or None when a newer valid snapshot
        was published or is still being computed.

        Raises:
            InvalidCoordinate: If the snapshot holds a non-finite coordinate.
                The snapshot is not adopted in that case.
        """
        snapshot = tuple(incidents)
        async with self._lock:
            self._issued += 1
            sequence = self._issued
            self._in_flight.add(sequence)
            self._stats.submitted += 1

        try:
            result = await asyncio.to_thread(self._engine.compute, snapshot, now, sequence)
        except Exception:
            async with self._lock:
                self._in_flight.discard(sequence)
                self._stats.failed += 1
            logger.exception("Cluster computation failed for snapshot seq=%d", sequence)
            raise

        async with self._lock:
            self._in_flight.discard(sequence)
            if self._is_superseded(sequence):
                self._stats.superseded += 1
                logger.info(
                    "Dropping stale result seq=%d (published seq=%d, in flight: %s)",
                    sequence,
                    self._snapshot_sequence,
                    sorted(self._in_flight),
                )
                return None
            self._snapshot = snapshot
            self._snapshot_sequence = sequence
            self._latest = result
            self._stats.published += 1
            listeners = list(self._listeners)

        logger.debug(
            "Published seq=%d: %d cluster(s), %d unclustered",
            sequence,
            len(result.clusters),
            result.unclustered_count,
        )
        for listener in listeners:
            await listener(result)
        return result

    async def latest(self) -> ClusterResult | None:
        """The most recently published result, if any."""
        async with self._lock:
            return self._latest

    async def snapshot(self) -> tuple[Incident, ...]:
        """The snapshot behind the latest published result."""
        async with self._lock:
            return self._snapshot

    async def admit(
        self,
        candidate: Incident,
        now: datetime | None = None,
    ) -> AdmissionDecision:
        """Run the admission gate for *candidate* against the current snapshot.

        The feed is not modified: an accepted candidate only enters the
        snapshot once the storage layer has persisted it and a new
        snapshot is submitted.
        """
        existing = await self.snapshot()
        return await asyncio.to_thread(self._engine.check_admission, existing, candidate, now)

    async def zone_results(self, now: datetime | None = None) -> dict[str, ClusterResult]:
        """Per-zone clustering of the current snapshot."""
        existing = await self.snapshot()
        return await asyncio.to_thread(self._engine.compute_by_zone, existing, now)

    def _is_superseded(self, sequence: int) -> bool:
        # Caller holds the lock
        if sequence < self._snapshot_sequence:
            return True
        return any(s > sequence for s in self._in_flight)

    # ── Observability ────────────────────────────────────────────────────

    @property
    def issued_sequence(self) -> int:
        return self._issued

    @property
    def stats(self) -> dict:
        data = self._stats.to_dict()
        data["issued_sequence"] = self._issued
        data["snapshot_sequence"] = self._snapshot_sequence
        data["snapshot_size"] = len(self._snapshot)
        return data
