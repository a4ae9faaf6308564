"""
Recommendation generation.

Cross-references the extracted features, the synthesized plan and the
registry to produce index and query recommendations. Columns are not bound
to tables through a schema: every join, filter and sort column is
attributed to the first table of the query.
"""

from __future__ import annotations

import logging
import re

from queryadvisor.analyzer.clauses import filter_column, join_columns, sort_columns
from queryadvisor.analyzer.models import (
    ExecutionPlan,
    QueryFeatures,
    Recommendation,
    RecommendationType,
    Severity,
)
from queryadvisor.registry import IndexRegistrySnapshot

logger = logging.getLogger(__name__)

DEFAULT_HIGH_COST_THRESHOLD = 100

_NAME_UNSAFE_RE = re.compile(r"\W+")

_WILDCARD_RECOMMENDATION = Recommendation(
    type=RecommendationType.QUERY,
    severity=Severity.MEDIUM,
    description=(
        "Avoid leading wildcards in LIKE patterns; a pattern starting with '%' "
        "cannot use an index seek and scans every row"
    ),
    code=(
        "Change: WHERE Column LIKE '%value%'\n"
        "To: WHERE Column LIKE 'value%'"
    ),
)


def _index_name(prefix: str, *parts: str) -> str:
    return "_".join([prefix] + [_NAME_UNSAFE_RE.sub("_", p).strip("_") for p in parts])


def _column_index(
    table: str | None,
    column: str,
    severity: Severity,
    purpose: str,
) -> Recommendation:
    """Non-clustered index suggestion for a column attributed to ``table``."""
    if table is None:
        return Recommendation(
            type=RecommendationType.INDEX,
            severity=severity,
            description=f"Create a non-clustered index on column {column} {purpose}",
            code=f"CREATE NONCLUSTERED INDEX {_index_name('IX', column)} ON <table>({column});",
        )
    return Recommendation(
        type=RecommendationType.INDEX,
        severity=severity,
        description=f"Create a non-clustered index on {table}.{column} {purpose}",
        code=(
            f"CREATE NONCLUSTERED INDEX {_index_name('IX', table, column)} "
            f"ON {table}({column});"
        ),
    )


class RecommendationEngine:
    """
    Emits prioritized recommendations for one analyzed query.

    Emission order is tables, join columns, filter columns, sort columns,
    wildcard, functions, overall cost. That order is also severity order
    (high, then medium, then low). Identical records are emitted once.
    """

    def __init__(self, high_cost_threshold: int = DEFAULT_HIGH_COST_THRESHOLD) -> None:
        self.high_cost_threshold = high_cost_threshold

    def recommend(
        self,
        features: QueryFeatures,
        plan: ExecutionPlan,
        registry: IndexRegistrySnapshot,
    ) -> list[Recommendation]:
        recommendations: list[Recommendation] = []
        tables = features.tables
        owner = features.primary_table

        for table in tables:
            if not registry.has_entry(table):
                recommendations.append(self._primary_key_index(table))

        for predicate in features.join_predicates:
            for column in join_columns(predicate):
                if not registry.column_is_covered(column, tables):
                    recommendations.append(_column_index(
                        owner, column, Severity.HIGH, "to support the join",
                    ))

        for condition in features.where_conditions:
            column = filter_column(condition)
            if column and not registry.column_is_covered(column, tables):
                recommendations.append(_column_index(
                    owner, column, Severity.MEDIUM, "to speed up filtering",
                ))

        if features.order_by_clause is not None:
            for column in sort_columns(features.order_by_clause):
                if not registry.column_is_covered(column, tables):
                    recommendations.append(_column_index(
                        owner, column, Severity.MEDIUM, "to avoid an explicit sort",
                    ))

        if features.has_wildcard:
            recommendations.append(_WILDCARD_RECOMMENDATION)

        if features.function_calls:
            recommendations.append(self._function_advice(features.function_calls))

        if plan.total_cost > self.high_cost_threshold:
            recommendations.append(self._structural_review(plan.total_cost))

        result = self._deduplicate(recommendations)
        logger.debug("Generated %d recommendation(s)", len(result))
        return result

    @staticmethod
    def _deduplicate(recommendations: list[Recommendation]) -> list[Recommendation]:
        seen: set[Recommendation] = set()
        result: list[Recommendation] = []
        for rec in recommendations:
            if rec not in seen:
                seen.add(rec)
                result.append(rec)
        return result

    @staticmethod
    def _primary_key_index(table: str) -> Recommendation:
        return Recommendation(
            type=RecommendationType.INDEX,
            severity=Severity.HIGH,
            description=(
                f"Table {table} has no indexes; create a clustered primary key "
                f"index on {table}"
            ),
            code=(
                f"CREATE CLUSTERED INDEX {_index_name('PK', table)} "
                f"ON {table}({table.rsplit('.', 1)[-1]}ID);"
            ),
        )

    @staticmethod
    def _function_advice(functions: tuple[str, ...]) -> Recommendation:
        names = ", ".join(dict.fromkeys(functions))
        return Recommendation(
            type=RecommendationType.QUERY,
            severity=Severity.MEDIUM,
            description=(
                f"Functions ({names}) applied to columns prevent index usage; "
                "compare the bare column against a transformed value instead"
            ),
            code=(
                "Change: WHERE UPPER(LastName) = 'SMITH'\n"
                "To: WHERE LastName = 'Smith'"
            ),
        )

    @staticmethod
    def _structural_review(total_cost: int) -> Recommendation:
        return Recommendation(
            type=RecommendationType.QUERY,
            severity=Severity.LOW,
            description=(
                f"Estimated plan cost is {total_cost}; review the query structure "
                "for joins, filters or sorts that can be removed or simplified"
            ),
            code=(
                "-- Select only the columns you need, filter early,\n"
                "-- and drop ORDER BY when callers do not rely on it"
            ),
        )
