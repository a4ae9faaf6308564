"""
JSON schema definitions for stable output.

The schema is the single source of truth for JSON serialization of an
AnalysisBundle. Breaking changes only in major versions.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = "1.0"


class FeaturesSchema(BaseModel):
    """Schema for extracted clause features."""

    model_config = ConfigDict(frozen=True)

    query_type: str = Field(..., description="SELECT/INSERT/UPDATE/DELETE/UNKNOWN")
    tables: list[str] = Field(default_factory=list, description="Distinct tables, first-seen order")
    join_predicates: list[str] = Field(default_factory=list)
    where_conditions: list[str] = Field(default_factory=list)
    order_by_clause: str | None = Field(None)
    order_by_columns: list[str] = Field(default_factory=list)
    has_wildcard: bool = Field(False)
    function_calls: list[str] = Field(default_factory=list)


class OperationSchema(BaseModel):
    """Schema for one plan operation."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="1-based position in the plan")
    type: str = Field(..., description="SCAN/JOIN/FILTER/SORT")
    cost: int = Field(..., description="Heuristic cost")
    description: str = Field(..., description="Human-readable summary")


class PlanSchema(BaseModel):
    """Schema for the synthetic execution plan."""

    model_config = ConfigDict(frozen=True)

    total_cost: int = Field(..., description="Sum of operation costs")
    operations: list[OperationSchema] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class RecommendationSchema(BaseModel):
    """Schema for a single recommendation."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="index/query/statistics")
    severity: str = Field(..., description="high/medium/low")
    description: str = Field(..., description="What to change and why")
    code: str = Field("", description="Example code")


class StatisticsSchema(BaseModel):
    """Schema for synthetic statistics (times in ms, memory in KB)."""

    model_config = ConfigDict(frozen=True)

    estimated_rows: int
    actual_rows: int
    estimated_execution_time_ms: int
    actual_execution_time_ms: int
    memory_grant_kb: int
    cpu_time_ms: int
    logical_reads: int


class AnalysisBundleSchema(BaseModel):
    """
    Complete analysis output schema.

    This is the top-level schema for ``queryadvisor analyze --format json``.
    """

    model_config = ConfigDict(frozen=True)

    version: str = Field(SCHEMA_VERSION, description="Schema version")
    features: FeaturesSchema
    plan: PlanSchema
    recommendations: list[RecommendationSchema] = Field(default_factory=list)
    statistics: StatisticsSchema
