"""QueryAdvisor - heuristic SQL query analyzer with index recommendations."""

__version__ = "0.1.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from queryadvisor.exceptions import (
    QueryAdvisorError,
    AnalysisError,
    MalformedInputError,
    InternalExtractionError,
    RegistryError,
    ConfigurationError,
)

# Public API exports
from queryadvisor.analyzer.clauses import extract_features
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
from queryadvisor.config import (
    Config,
    CostModel,
    Environment,
    get_config,
)
from queryadvisor.engine import (
    AnalysisBundle,
    AnalysisService,
    analyze,
)
from queryadvisor.formatter import format_sql
from queryadvisor.registry import (
    IndexRegistryEntry,
    IndexRegistrySnapshot,
    column_is_covered,
    load_registry,
)

__all__ = [
    "__version__",
    # Exceptions
    "QueryAdvisorError",
    "AnalysisError",
    "MalformedInputError",
    "InternalExtractionError",
    "RegistryError",
    "ConfigurationError",
    # Orchestration
    "analyze",
    "AnalysisService",
    "AnalysisBundle",
    # Extraction and models
    "extract_features",
    "QueryFeatures",
    "QueryType",
    "OperationType",
    "PlanOperation",
    "ExecutionPlan",
    "Recommendation",
    "RecommendationType",
    "Severity",
    "StatisticsSnapshot",
    # Registry
    "IndexRegistryEntry",
    "IndexRegistrySnapshot",
    "column_is_covered",
    "load_registry",
    # Config
    "Config",
    "CostModel",
    "Environment",
    "get_config",
    # Adapters
    "format_sql",
]
