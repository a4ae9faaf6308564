"""
Synthetic performance statistics.

The numbers are shaped by the query (more joins, conditions and sorting
make it "slower") and otherwise drawn at random within fixed ranges.
They are illustrative only.
"""

from __future__ import annotations

import logging
import math
import random

from queryadvisor.analyzer.models import ExecutionPlan, QueryFeatures, StatisticsSnapshot

logger = logging.getLogger(__name__)

JOIN_TIME_MS = 30
CONDITION_TIME_MS = 10
SORT_TIME_MS = 40
CPU_TIME_RATIO = 0.7


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class StatisticsSynthesizer:
    """
    Draws a StatisticsSnapshot for one analyzed query.

    estimated_execution_time = randint(50, 149)
                               + 30 per join
                               + 10 per WHERE condition
                               + 40 if the query sorts
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def estimate_execution_time(self, features: QueryFeatures) -> int:
        return (
            self._rng.randint(50, 149)
            + JOIN_TIME_MS * len(features.join_predicates)
            + CONDITION_TIME_MS * len(features.where_conditions)
            + (SORT_TIME_MS if features.has_order_by else 0)
        )

    def synthesize(
        self,
        features: QueryFeatures,
        plan: ExecutionPlan | None = None,
    ) -> StatisticsSnapshot:
        estimated_time = self.estimate_execution_time(features)

        snapshot = StatisticsSnapshot(
            estimated_rows=self._rng.randint(1000, 9999),
            actual_rows=self._rng.randint(1000, 9999),
            estimated_execution_time=estimated_time,
            actual_execution_time=round_half_up(
                estimated_time * self._rng.uniform(0.8, 1.2)
            ),
            memory_grant=self._rng.randint(512, 1535),
            cpu_time=round_half_up(estimated_time * CPU_TIME_RATIO),
            logical_reads=self._rng.randint(100, 1099),
        )

        logger.debug(
            "Synthesized statistics: estimated %dms, actual %dms (plan cost %s)",
            snapshot.estimated_execution_time,
            snapshot.actual_execution_time,
            plan.total_cost if plan is not None else "n/a",
        )
        return snapshot
