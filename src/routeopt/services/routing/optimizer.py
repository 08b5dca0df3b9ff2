"""Nearest-neighbour construction and 2-opt improvement for a single-vehicle tour.

Both steps score legs with the same :class:`WeightConfig`, so the score of the
returned tour equals the weighted totals reported by the assembler. 2-opt
evaluates O(N^2) candidates per pass at O(N) each; this is meant for a single
vehicle's stop list, not for hundreds of stops.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol, Sequence, Union

from .models import CostMatrix, Segment, TourPlan, WeightConfig

logger = logging.getLogger(__name__)

Matrix = Union[CostMatrix, Sequence[Sequence[Segment]]]


def leg_cost(segment: Segment, weights: WeightConfig) -> float:
    if not segment.is_reachable:
        return math.inf
    return weights.cost(segment.distance_km, segment.traffic_minutes)


def tour_score(tour: Sequence[int], matrix: Matrix, weights: WeightConfig) -> float:
    return sum(leg_cost(matrix[a][b], weights) for a, b in zip(tour, tour[1:]))


def nearest_neighbor(matrix: Matrix, weights: WeightConfig) -> list[int]:
    """Greedy tour from index 0; stops early if every unvisited stop is unreachable."""
    n = len(matrix)
    visited = {0}
    tour = [0]
    current = 0
    while len(visited) < n:
        best = -1
        min_cost = math.inf
        for candidate in range(n):
            if candidate in visited:
                continue
            cost = leg_cost(matrix[current][candidate], weights)
            if cost < min_cost:
                min_cost = cost
                best = candidate
        if best == -1:
            logger.warning(f"No reachable stop left from index {current}; {n - len(visited)} stops not visited")
            break
        tour.append(best)
        visited.add(best)
        current = best
    tour.append(0)
    return tour


def is_complete_tour(tour: Sequence[int], n: int) -> bool:
    return (
        len(tour) == n + 1
        and tour[0] == 0
        and tour[-1] == 0
        and sorted(tour[1:-1]) == list(range(1, n))
    )


class ImprovementStrategy(Protocol):
    def improve(self, tour: Sequence[int], matrix: Matrix, weights: WeightConfig) -> list[int]: ...


class TwoOptStrategy:
    """First-improvement 2-opt; the depot at both ends is never moved."""

    def improve(self, tour: Sequence[int], matrix: Matrix, weights: WeightConfig) -> list[int]:
        best_tour = list(tour)
        best_score = tour_score(best_tour, matrix, weights)
        length = len(best_tour)
        passes = 0

        improved = True
        while improved:
            improved = False
            passes += 1
            for i in range(1, length - 2):
                for j in range(i + 1, length - 1):
                    candidate = best_tour[:i] + best_tour[i : j + 1][::-1] + best_tour[j + 1 :]
                    score = tour_score(candidate, matrix, weights)
                    if score < best_score:
                        best_score = score
                        best_tour = candidate
                        improved = True
                        break
                if improved:
                    break

        logger.debug(f"2-opt converged after {passes} passes with score {best_score:.4f}")
        return best_tour


class RouteOptimizer:
    def __init__(self, weights: WeightConfig | None = None, strategy: ImprovementStrategy | None = None) -> None:
        self.weights = weights or WeightConfig()
        self.strategy = strategy or TwoOptStrategy()

    def optimize(self, matrix: Matrix) -> TourPlan:
        n = len(matrix)
        if n == 0:
            raise ValueError("Cannot optimize an empty cost matrix.")

        initial = nearest_neighbor(matrix, self.weights)
        initial_score = tour_score(initial, matrix, self.weights)
        tour = self.strategy.improve(initial, matrix, self.weights)
        score = tour_score(tour, matrix, self.weights)
        logger.info(f"Tour score {initial_score:.2f} after nearest neighbour, {score:.2f} after improvement")
        return TourPlan(tour=tour, score=score, complete=is_complete_tour(tour, n))
