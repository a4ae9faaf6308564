"""Output formatting and schema definitions."""

from queryadvisor.output.renderers import (
    OutputFormat,
    bundle_to_schema,
    render,
    render_json,
    render_markdown,
    render_text,
)
from queryadvisor.output.schema import (
    SCHEMA_VERSION,
    AnalysisBundleSchema,
    FeaturesSchema,
    OperationSchema,
    PlanSchema,
    RecommendationSchema,
    StatisticsSchema,
)

__all__ = [
    "OutputFormat",
    "render",
    "render_text",
    "render_json",
    "render_markdown",
    "bundle_to_schema",
    "SCHEMA_VERSION",
    "AnalysisBundleSchema",
    "FeaturesSchema",
    "OperationSchema",
    "PlanSchema",
    "RecommendationSchema",
    "StatisticsSchema",
]
