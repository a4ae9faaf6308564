"""
Data models for the analyzer module.

These models represent everything one analysis call derives from a query:
the extracted clause features, the synthetic plan, the recommendations
and the synthetic statistics. They're designed to be:
- Immutable (frozen=True): nothing changes after creation
- Serializable: easy JSON output for --format json
- Hashable: recommendations can be deduplicated by whole-record equality
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from queryadvisor.exceptions import InternalExtractionError


class QueryType(str, Enum):
    """Statement kind, classified by the leading keyword."""
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UNKNOWN = "UNKNOWN"


class OperationType(str, Enum):
    """Synthetic plan operation kinds, in emission order."""
    SCAN = "SCAN"
    JOIN = "JOIN"
    FILTER = "FILTER"
    SORT = "SORT"


class RecommendationType(str, Enum):
    INDEX = "index"
    QUERY = "query"
    STATISTICS = "statistics"


class Severity(str, Enum):
    """
    Severity levels for recommendations.

    HIGH: Missing index on a table or join key
    MEDIUM: Missing index on a filter/sort column, or an index-hostile pattern
    LOW: General structural advice
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    def __lt__(self, other: object) -> bool:
        """Enable sorting by severity (HIGH first)."""
        if not isinstance(other, Severity):
            return NotImplemented
        order = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}
        return order[self] < order[other]


_OPERATION_ORDER = {
    OperationType.SCAN: 0,
    OperationType.JOIN: 1,
    OperationType.FILTER: 2,
    OperationType.SORT: 3,
}


@dataclass(frozen=True)
class QueryFeatures:
    """
    Structural features extracted from one SQL statement.

    Attributes:
        query_type: Statement kind from the leading keyword
        tables: Distinct table names, first-seen order, case as written
        join_predicates: Raw ON-clause text per join, in source order
        where_conditions: WHERE predicates split at top-level AND/OR
        order_by_clause: Raw ORDER BY content, or None when absent
        order_by_columns: Leading column of each ORDER BY segment
        has_wildcard: A ``*`` or a ``%...%`` pattern occurs in the text
        function_calls: Every identifier directly followed by ``(``
    """
    query_type: QueryType = QueryType.UNKNOWN
    tables: tuple[str, ...] = ()
    join_predicates: tuple[str, ...] = ()
    where_conditions: tuple[str, ...] = ()
    order_by_clause: str | None = None
    order_by_columns: tuple[str, ...] = ()
    has_wildcard: bool = False
    function_calls: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(set(self.tables)) != len(self.tables):
            raise InternalExtractionError(
                f"Extracted table list contains duplicates: {list(self.tables)}"
            )
        if self.order_by_clause is None and self.order_by_columns:
            raise InternalExtractionError(
                "Order-by columns extracted without an ORDER BY clause"
            )

    @property
    def has_order_by(self) -> bool:
        return self.order_by_clause is not None

    @property
    def primary_table(self) -> str | None:
        """Table that ambiguous columns are attributed to (the first one)."""
        return self.tables[0] if self.tables else None

    def to_dict(self) -> dict[str, object]:
        return {
            "query_type": self.query_type.value,
            "tables": list(self.tables),
            "join_predicates": list(self.join_predicates),
            "where_conditions": list(self.where_conditions),
            "order_by_clause": self.order_by_clause,
            "order_by_columns": list(self.order_by_columns),
            "has_wildcard": self.has_wildcard,
            "function_calls": list(self.function_calls),
        }


class PlanOperation(BaseModel):
    """
    A single step of the synthetic execution plan.

    Attributes:
        id: 1-based position in the plan
        type: Operation kind
        cost: Heuristic cost (non-negative)
        description: Human-readable summary
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="1-based position in the plan")
    type: OperationType = Field(..., description="Operation kind")
    cost: int = Field(..., ge=0, description="Heuristic cost")
    description: str = Field(..., description="Human-readable summary")


class ExecutionPlan(BaseModel):
    """
    Synthetic execution plan.

    Invariants (checked on construction):
    - operation ids are exactly 1..len(operations)
    - operations are ordered SCAN*, JOIN*, FILTER*, SORT?
    - total_cost equals the sum of operation costs
    - warnings contain no duplicates
    """

    model_config = ConfigDict(frozen=True)

    operations: tuple[PlanOperation, ...] = Field(default_factory=tuple)
    total_cost: int = Field(default=0, ge=0)
    warnings: tuple[str, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_invariants(self) -> "ExecutionPlan":
        ids = [op.id for op in self.operations]
        if ids != list(range(1, len(self.operations) + 1)):
            raise ValueError(f"Operation ids must be contiguous from 1, got {ids}")

        ranks = [_OPERATION_ORDER[op.type] for op in self.operations]
        if ranks != sorted(ranks):
            raise ValueError("Operations must be ordered SCAN, JOIN, FILTER, SORT")
        if ranks.count(_OPERATION_ORDER[OperationType.SORT]) > 1:
            raise ValueError("A plan holds at most one SORT operation")

        cost_sum = sum(op.cost for op in self.operations)
        if self.total_cost != cost_sum:
            raise ValueError(
                f"total_cost {self.total_cost} does not match operation sum {cost_sum}"
            )

        if len(set(self.warnings)) != len(self.warnings):
            raise ValueError("Plan warnings must be unique")
        return self

    def operations_of(self, op_type: OperationType) -> tuple[PlanOperation, ...]:
        return tuple(op for op in self.operations if op.type == op_type)


class Recommendation(BaseModel):
    """
    A single optimization recommendation.

    Example:
        Recommendation(
            type=RecommendationType.INDEX,
            severity=Severity.HIGH,
            description="Create a non-clustered index on Customers.Email ...",
            code="CREATE NONCLUSTERED INDEX IX_Customers_Email ON Customers(Email);",
        )
    """

    model_config = ConfigDict(frozen=True)

    type: RecommendationType = Field(..., description="Recommendation category")
    severity: Severity = Field(..., description="Priority of the recommendation")
    description: str = Field(..., min_length=1, description="What to change and why")
    code: str = Field(default="", description="Example code illustrating the change")


class StatisticsSnapshot(BaseModel):
    """
    Synthetic performance counters.

    Times are milliseconds, memory_grant is kilobytes.
    """

    model_config = ConfigDict(frozen=True)

    estimated_rows: int = Field(..., ge=0)
    actual_rows: int = Field(..., ge=0)
    estimated_execution_time: int = Field(..., ge=0, description="Milliseconds")
    actual_execution_time: int = Field(..., ge=0, description="Milliseconds")
    memory_grant: int = Field(..., ge=0, description="Kilobytes")
    cpu_time: int = Field(..., ge=0, description="Milliseconds")
    logical_reads: int = Field(..., ge=0)

    def formatted(self) -> dict[str, str]:
        """Display strings with units, keyed by field name."""
        return {
            "estimated_rows": str(self.estimated_rows),
            "actual_rows": str(self.actual_rows),
            "estimated_execution_time": f"{self.estimated_execution_time}ms",
            "actual_execution_time": f"{self.actual_execution_time}ms",
            "memory_grant": f"{self.memory_grant}KB",
            "cpu_time": f"{self.cpu_time}ms",
            "logical_reads": str(self.logical_reads),
        }
