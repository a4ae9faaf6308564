"""
Heuristic execution plan synthesis.

Turns extracted query features into an ordered list of SCAN, JOIN, FILTER
and SORT operations. Costs are drawn from the configured ranges; warnings
point at tables without indexes and at columns the registry does not
cover. Nothing here talks to a database: the plan is illustrative.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from queryadvisor.analyzer.clauses import filter_column, join_columns, sort_columns
from queryadvisor.analyzer.models import (
    ExecutionPlan,
    OperationType,
    PlanOperation,
    QueryFeatures,
)
from queryadvisor.config import CostModel, OperationCost
from queryadvisor.registry import IndexRegistrySnapshot

logger = logging.getLogger(__name__)

WILDCARD_WARNING = (
    "Wildcard pattern detected: '%' wildcards force a full scan instead of an index seek"
)


def missing_index_warning(table: str) -> str:
    return f"Table '{table}' has no indexes defined"


def uncovered_column_warning(kind: str, column: str) -> str:
    return f"{kind} column '{column}' is not covered by any index"


def function_warning(functions: Iterable[str]) -> str:
    return (
        "Functions in the query may prevent index usage: "
        + ", ".join(unique(functions))
    )


def unique(items: Iterable[str]) -> list[str]:
    """Drop exact duplicates, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


class PlanSynthesizer:
    """
    Builds an ExecutionPlan from QueryFeatures and a registry snapshot.

    Operations are emitted as all SCANs (one per table), then all JOINs
    (one per ON predicate), then all FILTERs (one per WHERE condition),
    then at most one SORT. Ids follow emission order starting at 1.

    Example:
        synthesizer = PlanSynthesizer(random.Random(7))
        plan = synthesizer.synthesize(features, registry)
        print(plan.total_cost, plan.warnings)
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        costs: CostModel | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self.costs = costs or CostModel()

    def _cost(self, op_cost: OperationCost) -> int:
        return op_cost.base + self._rng.randint(0, op_cost.spread - 1)

    def synthesize(
        self,
        features: QueryFeatures,
        registry: IndexRegistrySnapshot,
    ) -> ExecutionPlan:
        """Emit plan operations and warnings for one query."""
        steps: list[tuple[OperationType, int, str]] = []
        warnings: list[str] = []
        tables = features.tables

        for table in tables:
            if registry.has_entry(table):
                description = f"Clustered index scan on {table}"
            else:
                description = f"Table scan on {table}"
                warnings.append(missing_index_warning(table))
            steps.append((OperationType.SCAN, self._cost(self.costs.scan), description))

        for predicate in features.join_predicates:
            steps.append((
                OperationType.JOIN,
                self._cost(self.costs.join),
                f"Hash match join on {predicate}",
            ))
            for column in join_columns(predicate):
                if not registry.column_is_covered(column, tables):
                    warnings.append(uncovered_column_warning("Join", column))

        for condition in features.where_conditions:
            steps.append((
                OperationType.FILTER,
                self._cost(self.costs.filter),
                f"Filter rows where {condition}",
            ))
            column = filter_column(condition)
            if column and not registry.column_is_covered(column, tables):
                warnings.append(uncovered_column_warning("Filter", column))

        if features.order_by_clause is not None:
            steps.append((
                OperationType.SORT,
                self._cost(self.costs.sort),
                f"Sort by {features.order_by_clause}",
            ))
            for column in sort_columns(features.order_by_clause):
                if not registry.column_is_covered(column, tables):
                    warnings.append(uncovered_column_warning("Sort", column))

        if features.has_wildcard:
            warnings.append(WILDCARD_WARNING)
        if features.function_calls:
            warnings.append(function_warning(features.function_calls))

        operations = tuple(
            PlanOperation(id=index, type=op_type, cost=cost, description=description)
            for index, (op_type, cost, description) in enumerate(steps, start=1)
        )
        plan = ExecutionPlan(
            operations=operations,
            total_cost=sum(op.cost for op in operations),
            warnings=tuple(unique(warnings)),
        )

        logger.debug(
            "Synthesized plan: %d operation(s), total cost %d, %d warning(s)",
            len(plan.operations),
            plan.total_cost,
            len(plan.warnings),
        )
        return plan
