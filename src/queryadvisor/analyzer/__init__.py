"""Analysis pipeline: clause extraction, plan, recommendations, statistics."""

from queryadvisor.analyzer.clauses import (
    detect_functions,
    detect_joins,
    detect_order_by,
    detect_where_conditions,
    detect_wildcards,
    extract_features,
    extract_tables,
    filter_column,
    get_query_type,
    join_columns,
    sort_columns,
)
from queryadvisor.analyzer.models import (
    ExecutionPlan,
    OperationType,
    PlanOperation,
    QueryFeatures,
    QueryType,
    Recommendation,
    RecommendationType,
    Severity,
    StatisticsSnapshot,
)
from queryadvisor.analyzer.plan import PlanSynthesizer
from queryadvisor.analyzer.recommendations import RecommendationEngine
from queryadvisor.analyzer.statistics import StatisticsSynthesizer

__all__ = [
    # Extraction
    "extract_features",
    "get_query_type",
    "extract_tables",
    "detect_joins",
    "detect_where_conditions",
    "detect_order_by",
    "detect_wildcards",
    "detect_functions",
    "join_columns",
    "filter_column",
    "sort_columns",
    # Models
    "QueryFeatures",
    "QueryType",
    "OperationType",
    "PlanOperation",
    "ExecutionPlan",
    "Recommendation",
    "RecommendationType",
    "Severity",
    "StatisticsSnapshot",
    # Stages
    "PlanSynthesizer",
    "RecommendationEngine",
    "StatisticsSynthesizer",
]
