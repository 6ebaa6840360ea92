"""Batching statistics for batch coordinators.

Tracks how many requests were received, how many were absorbed by
deduplication, and how the resulting bulk fetches performed.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LoaderStats:
    """Statistics for a single BatchCoordinator.

    Attributes:
        total_requests: Total number of request() calls.
        deduplicated_requests: Requests answered with an existing future.
        batch_count: Number of bulk fetches that settled.
        keys_fetched: Total distinct keys handed to the fetch function.
        failed_batches: Number of bulk fetches that failed.
        total_fetch_ms: Total time spent in completed fetches.
    """

    total_requests: int = 0
    deduplicated_requests: int = 0
    batch_count: int = 0
    keys_fetched: int = 0
    failed_batches: int = 0
    total_fetch_ms: float = 0.0

    @property
    def avg_batch_size(self) -> float:
        """Calculate average number of distinct keys per batch.

        Returns:
            Average batch size or 0 if no batch has been flushed.
        """
        if self.batch_count == 0:
            return 0.0
        return self.keys_fetched / self.batch_count

    @property
    def avg_fetch_ms(self) -> float:
        """Calculate average fetch duration in milliseconds.

        Returns:
            Average duration or 0 if no batch has been flushed.
        """
        if self.batch_count == 0:
            return 0.0
        return self.total_fetch_ms / self.batch_count

    def record_request(self, *, deduplicated: bool) -> None:
        """Record a request() call."""
        self.total_requests += 1
        if deduplicated:
            self.deduplicated_requests += 1

    def record_batch(self, size: int, duration_ms: float, *, success: bool) -> None:
        """Record a finished bulk fetch.

        Args:
            size: Number of distinct keys in the batch.
            duration_ms: Time from fetch start to settlement.
            success: Whether the fetch returned a result.
        """
        self.batch_count += 1
        self.keys_fetched += size
        self.total_fetch_ms += duration_ms
        if not success:
            self.failed_batches += 1

    def to_dict(self) -> dict[str, int | float]:
        """Convert to dictionary for diagnostics.

        Returns:
            Dictionary with stats for diagnostics output.
        """
        return {
            "total_requests": self.total_requests,
            "deduplicated_requests": self.deduplicated_requests,
            "batch_count": self.batch_count,
            "keys_fetched": self.keys_fetched,
            "failed_batches": self.failed_batches,
            "avg_batch_size": round(self.avg_batch_size, 2),
            "avg_fetch_ms": round(self.avg_fetch_ms, 2),
        }


__all__ = ["LoaderStats"]
