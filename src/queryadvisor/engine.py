"""
AnalysisService - orchestration layer for QueryAdvisor.

This is the single entry point for analyzing a query. The CLI and any
other front end should call this service rather than chaining the
pipeline stages themselves.

Pipeline (synchronous, no I/O):
    SQL text -> QueryFeatures -> ExecutionPlan -> recommendations
             -> StatisticsSnapshot -> AnalysisBundle

Usage:
    from queryadvisor.engine import AnalysisService

    service = AnalysisService()
    bundle = service.analyze(
        "SELECT * FROM Customers WHERE Email = 'a@b.c'",
        {"Customers": "CREATE CLUSTERED INDEX PK_Customers ON Customers(CustomerID);"},
    )
    for rec in bundle.recommendations:
        print(rec.severity.value, rec.description)
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from queryadvisor.analyzer.clauses import extract_features
from queryadvisor.analyzer.models import (
    ExecutionPlan,
    QueryFeatures,
    Recommendation,
    Severity,
    StatisticsSnapshot,
)
from queryadvisor.analyzer.plan import PlanSynthesizer
from queryadvisor.analyzer.recommendations import RecommendationEngine
from queryadvisor.analyzer.statistics import StatisticsSynthesizer
from queryadvisor.exceptions import (
    AnalysisError,
    InternalExtractionError,
    MalformedInputError,
)
from queryadvisor.registry import IndexRegistrySnapshot, RegistryLike

if TYPE_CHECKING:
    from queryadvisor.config import Config

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AnalysisBundle:
    """
    Everything one analysis call produces.

    Pure data for a presentation layer to render.
    """

    sql: str
    features: QueryFeatures
    plan: ExecutionPlan
    recommendations: tuple[Recommendation, ...]
    statistics: StatisticsSnapshot

    @property
    def has_high_severity(self) -> bool:
        return any(r.severity == Severity.HIGH for r in self.recommendations)

    def recommendations_by_severity(self, severity: Severity) -> list[Recommendation]:
        return [r for r in self.recommendations if r.severity == severity]


class AnalysisService:
    """
    Runs the analysis pipeline for one query at a time.

    All random draws (plan costs and statistics) come from one
    ``random.Random``; pass ``rng`` or configure ``random_seed`` to pin it.
    """

    def __init__(
        self,
        config: "Config | None" = None,
        rng: random.Random | None = None,
    ) -> None:
        if config is None:
            from queryadvisor.config import get_config
            config = get_config()
        self.config = config
        self._rng = rng or random.Random(config.random_seed)

        self.plan_synthesizer = PlanSynthesizer(self._rng, config.costs)
        self.recommendation_engine = RecommendationEngine(config.high_cost_threshold)
        self.statistics_synthesizer = StatisticsSynthesizer(self._rng)

    def analyze(self, sql: Any, registry: RegistryLike = None) -> AnalysisBundle:
        """
        Analyze one SQL statement against an index registry.

        Args:
            sql: Raw SQL text
            registry: IndexRegistrySnapshot, ``{table: definitions}`` mapping,
                iterable of pairs, or None for an empty registry. Read once,
                at call start.

        Returns:
            AnalysisBundle with plan, recommendations and statistics

        Raises:
            MalformedInputError: If sql is missing, not text or blank, or the
                registry has an unsupported shape
            AnalysisError: If any pipeline stage fails; no partial result
        """
        self._validate_sql(sql)
        snapshot = self._snapshot(registry)

        features = self._run_stage("extract", extract_features, sql)
        plan = self._run_stage(
            "plan", self.plan_synthesizer.synthesize, features, snapshot,
        )
        recommendations = self._run_stage(
            "recommend", self.recommendation_engine.recommend, features, plan, snapshot,
        )
        statistics = self._run_stage(
            "statistics", self.statistics_synthesizer.synthesize, features, plan,
        )

        bundle = AnalysisBundle(
            sql=sql,
            features=features,
            plan=plan,
            recommendations=tuple(recommendations),
            statistics=statistics,
        )

        logger.info(
            "Analyzed %s query over %d table(s): %d operation(s), cost %d, "
            "%d warning(s), %d recommendation(s)",
            features.query_type.value,
            len(features.tables),
            len(plan.operations),
            plan.total_cost,
            len(plan.warnings),
            len(bundle.recommendations),
        )
        return bundle

    @staticmethod
    def _validate_sql(sql: Any) -> None:
        if sql is None:
            raise MalformedInputError("No SQL query provided")
        if not isinstance(sql, str):
            raise MalformedInputError(
                f"SQL query must be text, got {type(sql).__name__}"
            )
        if not sql.strip():
            raise MalformedInputError("SQL query is empty")

    @staticmethod
    def _snapshot(registry: RegistryLike) -> IndexRegistrySnapshot:
        try:
            return IndexRegistrySnapshot.coerce(registry)
        except (TypeError, ValueError) as e:
            raise MalformedInputError(f"Invalid index registry: {e}") from e

    @staticmethod
    def _run_stage(stage: str, func: Callable[..., T], *args: Any) -> T:
        """Run one stage, turning unexpected failures into one AnalysisError."""
        try:
            return func(*args)
        except AnalysisError:
            raise
        except Exception as e:
            logger.warning("Analysis stage %s failed: %s", stage, e)
            if stage == "extract":
                raise InternalExtractionError(
                    f"Clause extraction failed: {e.__class__.__name__}: {e}",
                    original_error=e,
                ) from e
            raise AnalysisError.wrap(stage, e) from e


def analyze(
    sql: Any,
    registry: RegistryLike = None,
    config: "Config | None" = None,
) -> AnalysisBundle:
    """
    Convenience function to analyze a SQL query.

    Args:
        sql: The SQL query string
        registry: Index registry in any accepted shape

    Returns:
        AnalysisBundle for the query
    """
    return AnalysisService(config=config).analyze(sql, registry)
