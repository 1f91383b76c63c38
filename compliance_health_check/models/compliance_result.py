"""
Data models for compliance health check results.

This module defines the core data structures used to represent
the outcome of scoring a questionnaire, including status enums,
per-category scores, the risk forecast and persisted report records.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

RISK_FORECAST_PERIOD = "6-Month Risk Forecast"


class CategoryStatus(str, Enum):
    """Qualitative bucket for a category score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    NEEDS_ATTENTION = "needs-attention"
    CRITICAL = "critical"


class RiskProbability(str, Enum):
    """Likelihood label attached to a forecast risk."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    """Overall risk level of a stored report, derived from its score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class _ResultModel(BaseModel):
    """Immutable model serialised with the camelCase keys stored reports use."""

    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RiskItem(_ResultModel):
    """A penalty the company is exposed to if a gap stays open."""

    type: str = Field(..., description="Kind of risk, e.g. GST Late Filing Penalty")
    penalty: str = Field(..., description="Penalty or consequence description")
    probability: RiskProbability = Field(..., description="Likelihood: high, medium, low")


class RiskForecast(_ResultModel):
    """Forward-looking list of risks for a fixed period."""

    period: str = Field(RISK_FORECAST_PERIOD, description="Forecast horizon label")
    risks: List[RiskItem] = Field(default_factory=list, description="Forecast risks in evaluation order")


class CategoryScore(_ResultModel):
    """Score breakdown for one compliance category."""

    category: str = Field(..., description="Category name")
    score: int = Field(..., ge=0, le=100, description="Category score as a percentage")
    status: CategoryStatus = Field(..., description="Qualitative status derived from the score")
    insight: str = Field(..., description="Representative insight for the category")
    insights: List[str] = Field(default_factory=list, description="All insights recorded for the category")


class ComplianceResult(_ResultModel):
    """Result of scoring one set of questionnaire answers."""

    overall_score: int = Field(..., ge=0, le=100, description="Weighted overall score")
    category_scores: List[CategoryScore] = Field(..., description="One entry per category")
    strengths: List[str] = Field(default_factory=list, description="Areas earning full credit")
    red_flags: List[str] = Field(default_factory=list, description="Compliance gaps found")
    risk_forecast: RiskForecast = Field(default_factory=RiskForecast, description="Forecast penalties")

    def get_category(self, category: str) -> Optional[CategoryScore]:
        """Get the score entry for a category name."""
        for category_score in self.category_scores:
            if category_score.category == category:
                return category_score
        return None

    def get_categories_by_status(self, status: CategoryStatus) -> List[CategoryScore]:
        """Get all categories in a given status bucket."""
        value = status.value if isinstance(status, CategoryStatus) else status
        return [c for c in self.category_scores if c.status == value]

    def get_high_probability_risks(self) -> List[RiskItem]:
        """Get forecast risks flagged as high probability."""
        return [r for r in self.risk_forecast.risks if r.probability == RiskProbability.HIGH.value]

    def get_summary_statistics(self) -> Dict[str, Any]:
        """Get summary statistics for the result."""
        return {
            "overall_score": self.overall_score,
            "strengths_count": len(self.strengths),
            "red_flags_count": len(self.red_flags),
            "risks_count": len(self.risk_forecast.risks),
            "critical_categories": [c.category for c in self.get_categories_by_status(CategoryStatus.CRITICAL)],
        }


def risk_level_for(score: float) -> RiskLevel:
    """Map an overall score to the risk level shown on stored reports."""
    if score >= 80:
        return RiskLevel.LOW
    if score >= 60:
        return RiskLevel.MEDIUM
    if score >= 40:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


class HealthCheckRecord(BaseModel):
    """A scored assessment persisted for an owner."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique record identifier")
    owner_id: str = Field(..., description="Opaque identity of the caller who owns the record")
    assessment_date: datetime = Field(default_factory=datetime.now, description="When the assessment was saved")
    answers: Dict[str, str] = Field(..., description="Raw answers keyed by question id")
    follow_up_answers: Dict[str, str] = Field(default_factory=dict, description="Raw follow-up answers")
    result: ComplianceResult = Field(..., description="Computed compliance result")
    version: str = Field("1.0", description="Questionnaire version the answers were given against")

    @computed_field(alias="riskLevel")
    @property
    def risk_level(self) -> str:
        return risk_level_for(self.result.overall_score).value

    @property
    def score(self) -> int:
        return self.result.overall_score
