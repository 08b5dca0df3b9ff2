"""Pairwise cost matrix construction."""

from __future__ import annotations

import logging
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Sequence

from ...config import settings
from ...exceptions import SegmentProviderError
from ...models.domain import Stop
from ..traffic.estimator import TrafficEstimator
from .models import CostMatrix, Segment
from .segment_provider import SegmentProvider

logger = logging.getLogger(__name__)


class MatrixBuilder:
    """Build the N x N segment matrix with one concurrent task per ordered stop pair."""

    def __init__(
        self,
        provider: SegmentProvider,
        estimator: TrafficEstimator,
        max_workers: int | None = None,
    ) -> None:
        self.provider = provider
        self.estimator = estimator
        self.max_workers = max_workers or settings.max_parallel_requests

    def _build_cell(self, origin: Stop, destination: Stop) -> tuple[Segment, str]:
        leg = self.provider.fetch(origin, destination)
        estimate = self.estimator.estimate(origin, destination, leg.duration_minutes, leg.distance_km)
        segment = Segment(
            distance_km=leg.distance_km,
            traffic_minutes=estimate.minutes,
            geometry=list(leg.geometry),
            instructions=list(leg.instructions),
        )
        return segment, estimate.source

    def build(self, stops: Sequence[Stop]) -> CostMatrix:
        n = len(stops)
        cells = [[Segment.unreachable() for _ in range(n)] for _ in range(n)]
        for i in range(n):
            cells[i][i] = Segment.identity()

        pairs = [(i, j) for i in range(n) for j in range(n) if i != j]
        failed: list[tuple[int, int]] = []
        sources: Counter[str] = Counter()
        if not pairs:
            return CostMatrix(cells=cells)

        start_time = time.time()
        logger.info(f"Building {n}x{n} cost matrix: {len(pairs)} stop pairs (max {self.max_workers} concurrent)")

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pairs))) as executor:
            future_to_pair = {
                executor.submit(self._build_cell, stops[i], stops[j]): (i, j)
                for i, j in pairs
            }
            for future in as_completed(future_to_pair):
                i, j = future_to_pair[future]
                try:
                    segment, source = future.result()
                except SegmentProviderError as exc:
                    failed.append((i, j))
                    logger.warning(f"Segment {stops[i].name} -> {stops[j].name} unavailable, marking unreachable: {exc}")
                    continue
                except Exception as exc:
                    failed.append((i, j))
                    logger.error(f"Unexpected error building segment {stops[i].name} -> {stops[j].name}: {exc}")
                    continue
                cells[i][j] = segment
                sources[source] += 1

        elapsed = time.time() - start_time
        if failed:
            logger.warning(
                f"Partial failure: {len(failed)}/{len(pairs)} stop pairs unreachable. "
                f"Elapsed time: {elapsed:.2f}s"
            )
        else:
            logger.info(f"Matrix built in {elapsed:.2f}s")
        if sources.get("fallback"):
            logger.warning(f"{sources['fallback']}/{len(pairs)} segments used the synthetic traffic estimate")

        return CostMatrix(cells=cells, failed_pairs=sorted(failed), estimate_sources=dict(sources))
