"""
Output renderers for different formats.

Separates presentation logic from analysis logic. JSON goes through the
pydantic models in schema.py; no manual dict construction.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from queryadvisor.output.schema import (
    AnalysisBundleSchema,
    FeaturesSchema,
    OperationSchema,
    PlanSchema,
    RecommendationSchema,
    StatisticsSchema,
)

if TYPE_CHECKING:
    from queryadvisor.engine import AnalysisBundle

STATISTICS_LABELS = {
    "estimated_rows": "Estimated Rows",
    "actual_rows": "Actual Rows",
    "estimated_execution_time": "Estimated Time",
    "actual_execution_time": "Actual Time",
    "memory_grant": "Memory Grant",
    "cpu_time": "CPU Time",
    "logical_reads": "Logical Reads",
}


class OutputFormat(str, Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"


def render(bundle: "AnalysisBundle", format: OutputFormat = OutputFormat.TEXT) -> str:
    """
    Render an analysis bundle in the specified format.

    Args:
        bundle: Analysis result to render
        format: Output format (text, json, markdown)

    Returns:
        Formatted string
    """
    if format == OutputFormat.TEXT:
        return render_text(bundle)
    elif format == OutputFormat.JSON:
        return render_json(bundle)
    elif format == OutputFormat.MARKDOWN:
        return render_markdown(bundle)
    else:
        raise ValueError(f"Unknown output format: {format}")


# =============================================================================
# Schema-based serialization
# =============================================================================


def bundle_to_schema(bundle: "AnalysisBundle") -> AnalysisBundleSchema:
    """Convert an AnalysisBundle to the pydantic schema model."""
    features = bundle.features
    plan = bundle.plan
    stats = bundle.statistics

    return AnalysisBundleSchema(
        features=FeaturesSchema(
            query_type=features.query_type.value,
            tables=list(features.tables),
            join_predicates=list(features.join_predicates),
            where_conditions=list(features.where_conditions),
            order_by_clause=features.order_by_clause,
            order_by_columns=list(features.order_by_columns),
            has_wildcard=features.has_wildcard,
            function_calls=list(features.function_calls),
        ),
        plan=PlanSchema(
            total_cost=plan.total_cost,
            operations=[
                OperationSchema(
                    id=op.id,
                    type=op.type.value,
                    cost=op.cost,
                    description=op.description,
                )
                for op in plan.operations
            ],
            warnings=list(plan.warnings),
        ),
        recommendations=[
            RecommendationSchema(
                type=rec.type.value,
                severity=rec.severity.value,
                description=rec.description,
                code=rec.code,
            )
            for rec in bundle.recommendations
        ],
        statistics=StatisticsSchema(
            estimated_rows=stats.estimated_rows,
            actual_rows=stats.actual_rows,
            estimated_execution_time_ms=stats.estimated_execution_time,
            actual_execution_time_ms=stats.actual_execution_time,
            memory_grant_kb=stats.memory_grant,
            cpu_time_ms=stats.cpu_time,
            logical_reads=stats.logical_reads,
        ),
    )


def render_json(bundle: "AnalysisBundle") -> str:
    return bundle_to_schema(bundle).model_dump_json(indent=2)


# =============================================================================
# Text
# =============================================================================


def render_text(bundle: "AnalysisBundle") -> str:
    plan = bundle.plan
    lines = [
        "Query Execution Plan",
        f"Total Cost: {plan.total_cost}",
        "",
    ]

    for op in plan.operations:
        lines.append(f"  {op.id}. {op.type.value:<6} cost {op.cost:>3}  {op.description}")

    if plan.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"  - {warning}" for warning in plan.warnings)

    lines.append("")
    lines.append("Optimization Recommendations")
    if not bundle.recommendations:
        lines.append("  No recommendations.")
    for rec in bundle.recommendations:
        lines.append(f"  [{rec.severity.value.upper()}] {rec.type.value.upper()}: {rec.description}")
        for code_line in rec.code.splitlines():
            lines.append(f"      {code_line}")

    lines.append("")
    lines.append("Performance Statistics")
    for key, value in bundle.statistics.formatted().items():
        lines.append(f"  {STATISTICS_LABELS[key]:<15} {value}")

    return "\n".join(lines)


# =============================================================================
# Markdown
# =============================================================================


def render_markdown(bundle: "AnalysisBundle") -> str:
    plan = bundle.plan
    lines = [
        "## Query Execution Plan",
        "",
        f"**Total cost:** {plan.total_cost}",
        "",
        "| # | Operation | Cost | Description |",
        "|---|-----------|------|-------------|",
    ]
    for op in plan.operations:
        description = op.description.replace("|", "\\|")
        lines.append(f"| {op.id} | {op.type.value} | {op.cost} | {description} |")

    if plan.warnings:
        lines.append("")
        lines.append("### Warnings")
        lines.append("")
        lines.extend(f"- {warning}" for warning in plan.warnings)

    lines.append("")
    lines.append("## Optimization Recommendations")
    lines.append("")
    if not bundle.recommendations:
        lines.append("No recommendations.")
    for rec in bundle.recommendations:
        lines.append(
            f"- **{rec.severity.value.upper()}** ({rec.type.value}): {rec.description}"
        )
        if rec.code:
            lines.append("")
            lines.append("  ```sql")
            lines.extend(f"  {code_line}" for code_line in rec.code.splitlines())
            lines.append("  ```")

    lines.append("")
    lines.append("## Performance Statistics")
    lines.append("")
    lines.append("| Statistic | Value |")
    lines.append("|-----------|-------|")
    for key, value in bundle.statistics.formatted().items():
        lines.append(f"| {STATISTICS_LABELS[key]} | {value} |")

    return "\n".join(lines)
