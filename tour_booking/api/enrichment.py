"""
Booking enrichment.

Turns raw booking rows into destination records by looking up each row's
``booked_state_id`` on the destination service. Lookups run on a bounded
thread pool; results are always returned in input-row order.
"""

import time
from concurrent.futures import ThreadPoolExecutor, FIRST_EXCEPTION, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from tour_booking.domain.tour import Destination
from tour_booking.utils.logger import get_logger
from .destination_service import DestinationServiceClient
from .exceptions import TourAPIError

logger = get_logger(__name__)

STATE_ID_KEY = "booked_state_id"


class FailurePolicy(str, Enum):
    """What to do when a single row lookup fails."""

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


@dataclass
class EnrichmentFailure:
    """Placeholder for a row whose lookup failed under the best-effort policy."""

    index: int
    row: Dict[str, Any]
    error: str


EnrichedItem = Union[Destination, EnrichmentFailure]


class EnrichmentError(TourAPIError):
    """Raised under the fail-fast policy when any row lookup fails."""

    def __init__(self, index: int, row: Dict[str, Any], cause: Exception):
        super().__init__(
            operation="enrich_bookings",
            status_code=getattr(cause, "status_code", None),
            message=f"Destination lookup failed for booking row {index}: {cause}",
        )
        self.index = index
        self.row = row
        self.cause = cause


class BookingEnricher:
    """
    Bounded-concurrency fan-out of destination lookups.

    Attributes:
        client: Destination service client shared by all workers
        max_workers: Upper bound on concurrent lookups
        policy: Partial-failure policy
    """

    def __init__(
        self,
        client: DestinationServiceClient,
        max_workers: int = 4,
        policy: FailurePolicy = FailurePolicy.FAIL_FAST,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.client = client
        self.max_workers = max_workers
        self.policy = FailurePolicy(policy)

    def _lookup(self, row: Dict[str, Any]) -> Destination:
        if not isinstance(row, dict) or STATE_ID_KEY not in row:
            raise TourAPIError(
                operation="get_destination",
                message=f"Booking row has no '{STATE_ID_KEY}'",
            )
        return self.client.get_destination(row[STATE_ID_KEY])

    def enrich(self, rows: List[Dict[str, Any]]) -> List[EnrichedItem]:
        """
        Resolve every row, preserving order.

        Returns:
            One item per row. Under BEST_EFFORT, failed rows appear as
            EnrichmentFailure in their original position.

        Raises:
            EnrichmentError: Under FAIL_FAST, on the first failed lookup.
                No partial list is returned.
        """
        if not rows:
            return []

        start_time = time.time()
        workers = min(self.max_workers, len(rows))
        results: List[Optional[EnrichedItem]] = [None] * len(rows)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="enrich") as pool:
            futures = {pool.submit(self._lookup, row): idx for idx, row in enumerate(rows)}

            if self.policy is FailurePolicy.FAIL_FAST:
                done, pending = wait(futures, return_when=FIRST_EXCEPTION)
                failed = sorted(
                    (futures[f], f.exception()) for f in done if f.exception() is not None
                )
                if failed:
                    for future in pending:
                        future.cancel()
                    idx, cause = failed[0]
                    logger.error(
                        "Aborting enrichment after failed lookup",
                        operation="enrich_bookings",
                        context={
                            "row_index": idx,
                            "row_count": len(rows),
                            "cancelled": len(pending),
                        },
                        error=str(cause),
                    )
                    raise EnrichmentError(idx, rows[idx], cause) from cause

            for future, idx in futures.items():
                try:
                    results[idx] = future.result()
                except Exception as e:
                    if self.policy is FailurePolicy.FAIL_FAST:
                        raise EnrichmentError(idx, rows[idx], e) from e
                    logger.warning(
                        "Destination lookup failed; keeping failure marker",
                        operation="enrich_bookings",
                        context={"row_index": idx},
                        error=str(e),
                    )
                    results[idx] = EnrichmentFailure(index=idx, row=rows[idx], error=str(e))

        duration_ms = (time.time() - start_time) * 1000
        failures = sum(1 for item in results if isinstance(item, EnrichmentFailure))
        logger.info(
            f"Enriched {len(rows)} booking rows",
            operation="enrich_bookings",
            context={
                "row_count": len(rows),
                "workers": workers,
                "failures": failures,
                "policy": self.policy.value,
            },
            duration_ms=duration_ms,
        )
        return list(results)  # type: ignore[arg-type]
