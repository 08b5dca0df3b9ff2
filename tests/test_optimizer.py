import itertools
import math
import random

import pytest

from routeopt.models.domain import Stop
from routeopt.services.outputs import optimization_result_to_response
from routeopt.services.routing.assembler import assemble_result
from routeopt.services.routing.models import RouteMetrics, Segment, WeightConfig
from routeopt.services.routing.optimizer import (
    RouteOptimizer,
    TwoOptStrategy,
    is_complete_tour,
    nearest_neighbor,
    tour_score,
)

WEIGHTS = WeightConfig(distance_weight=0.4, traffic_weight=0.6)


def _matrix(distances, times=None):
    times = times or distances
    n = len(distances)
    return [
        [Segment(distance_km=distances[i][j], traffic_minutes=times[i][j]) for j in range(n)]
        for i in range(n)
    ]


def _random_matrix(n: int, seed: int):
    rng = random.Random(seed)
    distances = [[0.0 if i == j else rng.uniform(1, 20) for j in range(n)] for i in range(n)]
    times = [[0.0 if i == j else rng.uniform(2, 40) for j in range(n)] for i in range(n)]
    return _matrix(distances, times)


def _stops(n: int):
    return [Stop(name=f"S{i}", lat=40.0 + i * 0.01, lon=28.0 + i * 0.01) for i in range(n)]


def _brute_force_best(matrix) -> float:
    n = len(matrix)
    return min(
        tour_score([0, *perm, 0], matrix, WEIGHTS)
        for perm in itertools.permutations(range(1, n))
    )


@pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 8])
@pytest.mark.parametrize("seed", [1, 7, 42])
def test_nearest_neighbor_visits_every_stop_once(n, seed):
    matrix = _random_matrix(n, seed)

    tour = nearest_neighbor(matrix, WEIGHTS)

    assert len(tour) == n + 1
    assert tour[0] == tour[-1] == 0
    assert sorted(tour[1:-1]) == list(range(1, n))


def test_nearest_neighbor_breaks_ties_by_lowest_index():
    matrix = _matrix(
        [
            [0, 2, 2, 2],
            [2, 0, 2, 2],
            [2, 2, 0, 2],
            [2, 2, 2, 0],
        ]
    )

    assert nearest_neighbor(matrix, WEIGHTS) == [0, 1, 2, 3, 0]


def test_nearest_neighbor_uses_weighted_cost():
    # Leg to 1 is shorter but much slower; weighted, stop 2 is cheaper.
    distances = [[0, 1, 3], [1, 0, 1], [3, 1, 0]]
    times = [[0, 10, 3], [10, 0, 1], [3, 1, 0]]

    tour = nearest_neighbor(_matrix(distances, times), WEIGHTS)

    assert tour == [0, 2, 1, 0]


@pytest.mark.parametrize("n", [4, 5, 6, 7])
@pytest.mark.parametrize("seed", [3, 11, 99])
def test_two_opt_never_worsens_and_is_idempotent(n, seed):
    matrix = _random_matrix(n, seed)
    initial = nearest_neighbor(matrix, WEIGHTS)
    strategy = TwoOptStrategy()

    improved = strategy.improve(initial, matrix, WEIGHTS)

    assert tour_score(improved, matrix, WEIGHTS) <= tour_score(initial, matrix, WEIGHTS)
    assert is_complete_tour(improved, n)
    assert strategy.improve(improved, matrix, WEIGHTS) == improved


def test_two_opt_keeps_depot_fixed():
    matrix = _random_matrix(6, 5)

    improved = TwoOptStrategy().improve([0, 5, 4, 3, 2, 1, 0], matrix, WEIGHTS)

    assert improved[0] == 0
    assert improved[-1] == 0


def test_triangle_scenario_has_cost_three():
    matrix = _matrix([[0, 1, 1], [1, 0, 1], [1, 1, 0]])

    plan = RouteOptimizer(weights=WEIGHTS).optimize(matrix)

    assert plan.tour in ([0, 1, 2, 0], [0, 2, 1, 0])
    assert plan.score == pytest.approx(0.4 * 3 + 0.6 * 3)
    assert plan.complete


def test_two_opt_uncrosses_suboptimal_greedy_tour():
    # Greedy goes 0-1-2-3 and then pays the long 3->0 leg back.
    distances = [
        [0, 1, 2, 10],
        [1, 0, 2, 3],
        [2, 2, 0, 1],
        [10, 3, 1, 0],
    ]
    matrix = _matrix(distances)

    greedy = nearest_neighbor(matrix, WEIGHTS)
    plan = RouteOptimizer(weights=WEIGHTS).optimize(matrix)

    assert greedy == [0, 1, 2, 3, 0]
    assert tour_score(greedy, matrix, WEIGHTS) == pytest.approx(14.0)
    assert plan.tour == [0, 1, 3, 2, 0]
    assert plan.score == pytest.approx(7.0)
    assert plan.score == pytest.approx(_brute_force_best(matrix))


def test_unreachable_pair_is_not_chosen_while_alternatives_exist():
    inf = math.inf
    distances = [
        [0, 1, 1, 1],
        [1, 0, 1, 1],
        [1, 1, 0, 1],
        [1, 1, 1, 0],
    ]
    matrix = _matrix(distances)
    matrix[0][1] = Segment.unreachable()

    greedy = nearest_neighbor(matrix, WEIGHTS)
    plan = RouteOptimizer(weights=WEIGHTS).optimize(matrix)

    assert greedy[1] != 1
    assert (0, 1) not in list(zip(plan.tour, plan.tour[1:]))
    assert plan.score < inf
    assert plan.complete


def test_stop_unreachable_from_everywhere_yields_partial_tour():
    matrix = _matrix(
        [
            [0, 1, 2, 1],
            [1, 0, 1, 1],
            [2, 1, 0, 1],
            [1, 1, 1, 0],
        ]
    )
    for i in range(3):
        matrix[i][3] = Segment.unreachable()

    plan = RouteOptimizer(weights=WEIGHTS).optimize(matrix)
    result = assemble_result(_stops(4), plan.tour, matrix, WEIGHTS)

    assert plan.tour == [0, 1, 2, 0]
    assert plan.complete is False
    assert result.degraded is True
    assert result.unreached == ["S3"]


def test_optimizer_score_matches_assembled_totals():
    matrix = _random_matrix(7, 2024)
    stops = _stops(7)

    plan = RouteOptimizer(weights=WEIGHTS).optimize(matrix)
    result = assemble_result(stops, plan.tour, matrix, WEIGHTS)

    assert result.metrics.total_cost == pytest.approx(plan.score)
    assert plan.score == pytest.approx(
        WEIGHTS.distance_weight * result.metrics.total_distance_km
        + WEIGHTS.traffic_weight * result.metrics.total_time_min
    )
    assert len(result.segments) == len(plan.tour) - 1
    assert result.degraded is False


def test_single_stop_tour():
    plan = RouteOptimizer(weights=WEIGHTS).optimize(_matrix([[0]]))

    assert plan.tour == [0, 0]
    assert plan.score == 0
    assert plan.complete


def test_empty_matrix_is_rejected():
    with pytest.raises(ValueError):
        RouteOptimizer(weights=WEIGHTS).optimize([])


def test_replacement_strategy_is_used():
    class KeepInitial:
        def __init__(self):
            self.calls = 0

        def improve(self, tour, matrix, weights):
            self.calls += 1
            return list(tour)

    strategy = KeepInitial()
    matrix = _random_matrix(5, 8)

    plan = RouteOptimizer(weights=WEIGHTS, strategy=strategy).optimize(matrix)

    assert strategy.calls == 1
    assert plan.tour == nearest_neighbor(matrix, WEIGHTS)


def test_formatted_totals_mark_unreachable_legs():
    formatted = RouteMetrics(total_distance_km=math.inf, total_time_min=math.inf, total_cost=math.inf).formatted

    assert formatted == {"totalDistance": "unreachable", "totalTime": "unreachable", "totalCost": "unreachable"}
    assert RouteMetrics(12.345, 20.0, 16.938).formatted["totalDistance"] == "12.35 km"


def test_response_for_tour_over_unreachable_leg_has_no_infinities():
    matrix = _matrix([[0, 1, 2], [1, 0, 1], [2, 1, 0]])
    matrix[2][0] = Segment.unreachable()

    result = assemble_result(_stops(3), [0, 1, 2, 0], matrix, WEIGHTS)
    response = optimization_result_to_response(result)

    assert result.degraded is True
    assert response.total_cost is None
    assert response.metrics.total_distance == "unreachable"
    assert response.metrics.total_cost == "unreachable"
    assert response.metrics.total_distance_km is None
    assert "inf" not in response.model_dump_json()
