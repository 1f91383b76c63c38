"""
Result Formatter for presentation layers.

Attaches display metadata (short labels and colour tokens) to each
category of a ComplianceResult. Scores and ordering pass through
untouched.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.compliance_result import CategoryStatus, ComplianceResult, RiskForecast
from ..models.question import QuestionCategory

STATUS_STYLES: Dict[str, Dict[str, str]] = {
    CategoryStatus.EXCELLENT.value: {
        "color": "text-green-700",
        "bg_color": "bg-gradient-to-br from-green-100 to-green-200",
    },
    CategoryStatus.GOOD.value: {
        "color": "text-blue-700",
        "bg_color": "bg-gradient-to-br from-blue-100 to-blue-200",
    },
    CategoryStatus.NEEDS_ATTENTION.value: {
        "color": "text-orange-700",
        "bg_color": "bg-gradient-to-br from-orange-100 to-orange-200",
    },
    CategoryStatus.CRITICAL.value: {
        "color": "text-red-700",
        "bg_color": "bg-gradient-to-br from-red-100 to-red-200",
    },
}

CATEGORY_LABELS: Dict[str, str] = {
    QuestionCategory.CERTIFICATIONS.value: "Certification",
}


class _DisplayModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class CategoryDisplay(_DisplayModel):
    """A category score with its presentation metadata."""

    category: str = Field(..., description="Category name")
    label: str = Field(..., description="Short display name")
    score: int = Field(..., ge=0, le=100, description="Category score")
    status: str = Field(..., description="Status bucket")
    color: str = Field(..., description="Text colour token")
    bg_color: str = Field(..., description="Background style token")
    insight: str = Field(..., description="Representative insight")


class FormattedReport(_DisplayModel):
    """A ComplianceResult laid out for rendering."""

    overall_score: int = Field(..., ge=0, le=100)
    categories: List[CategoryDisplay] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)
    risk_forecast: RiskForecast = Field(default_factory=RiskForecast)


def label_for(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def style_for(status: str) -> Dict[str, str]:
    """Get the colour tokens for a status bucket."""
    return STATUS_STYLES.get(status, STATUS_STYLES[CategoryStatus.CRITICAL.value])


def format_result(result: ComplianceResult) -> FormattedReport:
    """Attach display metadata to every category of a result."""
    categories = []
    for category_score in result.category_scores:
        style = style_for(category_score.status)
        categories.append(
            CategoryDisplay(
                category=category_score.category,
                label=label_for(category_score.category),
                score=category_score.score,
                status=category_score.status,
                color=style["color"],
                bg_color=style["bg_color"],
                insight=category_score.insight,
            )
        )

    return FormattedReport(
        overall_score=result.overall_score,
        categories=categories,
        strengths=list(result.strengths),
        red_flags=list(result.red_flags),
        risk_forecast=result.risk_forecast,
    )
