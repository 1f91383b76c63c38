"""
Startup Compliance Health Check Module

A self-assessment system that scores a startup's legal, tax, IP,
certification and financial compliance from a fixed questionnaire.

This module provides:
- A versioned question catalog with per-question scoring weights
- A deterministic scoring engine producing scores, strengths, red flags
  and a 6-month risk forecast
- Presentation metadata for category status buckets
- Persistence, shareable links and JSON/Excel export of scored reports
"""

from .core.question_catalog import category_of, get_question, weight_of
from .core.report_exporter import ReportExporter
from .core.report_store import ReportStore
from .core.result_formatter import FormattedReport, format_result
from .core.scoring_engine import ScoringEngine, score
from .core.share_links import ShareRegistry
from .models.compliance_result import CategoryScore, CategoryStatus, ComplianceResult, HealthCheckRecord
from .models.question import Question, QuestionCategory
from .utils.config import HealthCheckConfig

__version__ = "1.0.0"

__all__ = [
    "ScoringEngine",
    "score",
    "category_of",
    "get_question",
    "weight_of",
    "format_result",
    "FormattedReport",
    "ReportStore",
    "ReportExporter",
    "ShareRegistry",
    "ComplianceResult",
    "CategoryScore",
    "CategoryStatus",
    "HealthCheckRecord",
    "Question",
    "QuestionCategory",
    "HealthCheckConfig",
]
