"""
Scoring Engine for the startup compliance health check.

This module turns a set of questionnaire answers (plus the follow-up
counts some answers open) into a ComplianceResult: a weighted overall
score, a per-category breakdown, strengths, red flags and a 6-month
risk forecast.

Every question has its own rule, registered in RULES by question id.
A rule maps the literal answer string to the points earned (a fraction
of the question's weight) and a short insight, and may record a
strength, a red flag or a forecast risk. The engine is a pure function
of its inputs: it holds no state between calls and never raises for
malformed answers.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..models.compliance_result import (
    RISK_FORECAST_PERIOD,
    CategoryScore,
    CategoryStatus,
    ComplianceResult,
    RiskForecast,
    RiskItem,
    RiskProbability,
)
from .question_catalog import CATEGORY_ORDER, category_of, weight_of

logger = logging.getLogger(__name__)

MAX_STRENGTHS = 8
MAX_RED_FLAGS = 8
MAX_RISKS = 6

# Category insight when no question in it was answered
EMPTY_CATEGORY_INSIGHT = "Assessment completed"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class RuleOutcome:
    """Points and findings produced by one question's rule."""

    points: float
    insight: str
    strength: Optional[str] = None
    red_flag: Optional[str] = None
    risk: Optional[RiskItem] = None


Rule = Callable[[Any, float, Optional[str]], RuleOutcome]

RULES: Dict[int, Rule] = {}


def register_rule(question_id: int) -> Callable[[Rule], Rule]:
    """Register the scoring rule for a question id."""

    def decorator(rule: Rule) -> Rule:
        RULES[question_id] = rule
        return rule

    return decorator


def parse_leading_int(value: Any) -> Optional[int]:
    """Parse the integer at the start of a value ("3 months" -> 3), or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def follow_up_count(value: Any) -> int:
    """Count carried by a follow-up answer; anything not a positive integer counts as 1."""
    count = parse_leading_int(value)
    # zero and negative counts both clamp to 1 so penalties never go negative
    if count is None or count < 1:
        return 1
    return count


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(total: float, maximum: float) -> int:
    """Score as a whole percentage; 0 when nothing was scored."""
    if maximum <= 0:
        return 0
    return round_half_up(total / maximum * 100)


def status_for(score: int) -> CategoryStatus:
    """Bucket a percentage score into a qualitative status."""
    if score >= 85:
        return CategoryStatus.EXCELLENT
    if score >= 70:
        return CategoryStatus.GOOD
    if score >= 50:
        return CategoryStatus.NEEDS_ATTENTION
    return CategoryStatus.CRITICAL


def _risk(risk_type: str, penalty: str, probability: RiskProbability) -> RiskItem:
    return RiskItem(type=risk_type, penalty=penalty, probability=probability)


# Company & Legal Structure


@register_rule(1)
def _incorporation(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(
            weight,
            "Legally incorporated with proper registration",
            strength="Company is legally incorporated",
        )
    if answer == "No":
        return RuleOutcome(
            0,
            "Critical: Company not incorporated",
            red_flag="Company not legally incorporated",
            risk=_risk(
                "Legal Structure Risk",
                "Personal liability exposure + ₹1-10 Lakhs penalty",
                RiskProbability.HIGH,
            ),
        )
    return RuleOutcome(weight * 0.3, "Incorporation status unclear")


@register_rule(2)
def _mca_returns(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "MCA compliance up to date", strength="MCA annual returns filed on time")
    if answer == "No":
        return RuleOutcome(
            0,
            "MCA returns overdue - immediate action needed",
            red_flag="MCA annual returns not filed",
            risk=_risk("MCA Non-compliance", "₹50,000-5 Lakhs + Strike-off risk", RiskProbability.HIGH),
        )
    return RuleOutcome(weight * 0.5, "MCA filing status uncertain")


@register_rule(3)
def _din_kyc(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "All director KYC updated", strength="Director KYC compliance maintained")
    if answer == "No":
        directors = follow_up_count(follow_up)
        return RuleOutcome(
            0,
            f"KYC pending for {directors} director(s)",
            red_flag=f"DIN KYC pending for {directors} director(s)",
            risk=_risk(
                "Director KYC Penalty",
                f"₹5,000 per director (₹{5000 * directors} total)",
                RiskProbability.MEDIUM,
            ),
        )
    return RuleOutcome(weight * 0.6, "Director KYC status unclear")


# Taxation & GST


@register_rule(4)
def _gst_registration(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "GST registered and active", strength="GST registration active")
    if answer == "No":
        return RuleOutcome(
            0,
            "GST registration required",
            red_flag="GST registration missing",
            risk=_risk("GST Non-registration", "₹10,000 + 18% tax on turnover", RiskProbability.HIGH),
        )
    return RuleOutcome(weight * 0.4, "GST registration status unclear")


@register_rule(5)
def _gst_returns(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "GST compliance current", strength="GST returns filed on time")
    if answer == "No":
        months = follow_up_count(follow_up)
        return RuleOutcome(
            0,
            f"{months} months GST returns overdue",
            red_flag=f"GST returns missed for {months} month(s)",
            risk=_risk("GST Late Filing Penalty", f"₹{200 * months}/month + interest", RiskProbability.HIGH),
        )
    return RuleOutcome(weight * 0.5, "GST filing status uncertain")


@register_rule(6)
def _income_tax_returns(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "ITR compliance maintained", strength="Income Tax Returns filed")
    if answer == "No":
        years = follow_up_count(follow_up)
        estimate = min(100000, 5000 * years)
        return RuleOutcome(
            0,
            f"ITR overdue for {years} year(s)",
            red_flag=f"ITR not filed for {years} year(s)",
            risk=_risk(
                "Income Tax Penalty",
                f"₹5,000-1 Lakh per year (₹{estimate} estimated)",
                RiskProbability.HIGH,
            ),
        )
    return RuleOutcome(weight * 0.6, "ITR filing status unclear")


# Intellectual Property


@register_rule(7)
def _trademark(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "Brand legally protected", strength="Trademark protection secured")
    if answer == "No":
        return RuleOutcome(
            0,
            "Brand vulnerable to infringement",
            red_flag="Trademark not filed",
            risk=_risk("Brand Protection Risk", "₹2-5 Lakhs + legal costs", RiskProbability.HIGH),
        )
    return RuleOutcome(weight * 0.3, "Trademark status unclear")


@register_rule(8)
def _patents(answer, weight, follow_up):
    if answer == "Yes, filed patents":
        return RuleOutcome(weight, "Innovation legally protected", strength="Patent protection secured")
    if answer == "No, but have unique products/technology":
        return RuleOutcome(
            weight * 0.3,
            "Technology needs patent protection",
            red_flag="Unique technology not patent-protected",
            risk=_risk("IP Theft Risk", "Loss of competitive advantage", RiskProbability.MEDIUM),
        )
    if answer == "No unique products/technology":
        return RuleOutcome(weight * 0.8, "No patentable technology identified")
    return RuleOutcome(weight * 0.9, "Patent assessment not applicable")


@register_rule(9)
def _copyright(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "Creative works protected", strength="Copyright registrations maintained")
    return RuleOutcome(weight * 0.7, "Consider copyright for creative works")


# Certifications & Industry Licenses


@register_rule(10)
def _iso_certification(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "Quality standards certified", strength="ISO certification obtained")
    if answer == "No":
        return RuleOutcome(
            0,
            "ISO certification recommended",
            red_flag="ISO certification missing",
            risk=_risk("Market Access Risk", "Lost business opportunities", RiskProbability.MEDIUM),
        )
    return RuleOutcome(weight * 0.5, "ISO certification status unclear")


@register_rule(11)
def _industry_licenses(answer, weight, follow_up):
    if answer == "Yes, all required licenses":
        return RuleOutcome(weight, "Fully licensed for operations", strength="All industry licenses obtained")
    if answer == "Some licenses missing":
        return RuleOutcome(
            weight * 0.4,
            "Critical licenses missing",
            red_flag="Some industry licenses missing",
            risk=_risk(
                "Regulatory Compliance Risk",
                "₹1-10 Lakhs + operational shutdown",
                RiskProbability.HIGH,
            ),
        )
    if answer == "Not sure what licenses needed":
        return RuleOutcome(weight * 0.2, "License audit required", red_flag="License requirements not assessed")
    return RuleOutcome(weight * 0.9, "No special licenses required")


# Financial Health & Risk


@register_rule(12)
def _bookkeeping(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(
            weight,
            "Financial compliance maintained",
            strength="Proper financial record maintenance",
        )
    return RuleOutcome(
        0,
        "Bookkeeping needs improvement",
        red_flag="Inadequate bookkeeping practices",
        risk=_risk("Audit Risk", "₹25,000-2 Lakhs penalty", RiskProbability.MEDIUM),
    )


@register_rule(13)
def _overdue_liabilities(answer, weight, follow_up):
    if answer == "No":
        return RuleOutcome(weight, "Financial obligations current", strength="No overdue liabilities")
    if answer == "Yes":
        return RuleOutcome(
            0,
            "Overdue payments need attention",
            red_flag="Outstanding overdue liabilities",
            risk=_risk(
                "Financial Distress Risk",
                "Credit rating impact + legal action",
                RiskProbability.HIGH,
            ),
        )
    return RuleOutcome(weight * 0.6, "Liability status needs review")


@register_rule(14)
def _tax_planning(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "Tax optimization in place", strength="Tax planning implemented")
    return RuleOutcome(weight * 0.6, "Tax planning opportunity exists")


@register_rule(15)
def _compliance_officer(answer, weight, follow_up):
    if answer == "Yes":
        return RuleOutcome(weight, "Professional compliance oversight", strength="External compliance monitoring")
    return RuleOutcome(weight * 0.7, "Consider compliance officer engagement")


def _default_rule(answer, weight, follow_up):
    return RuleOutcome(weight * 0.5, "Response recorded")


class _CategoryAccumulator:
    """Running totals for one category during a single scoring run."""

    def __init__(self):
        self.total = 0.0
        self.max = 0.0
        self.insights: List[str] = []


def _normalise_keys(values: Optional[Mapping[Any, Any]]) -> Dict[int, Any]:
    """Key a mapping by integer question id, dropping keys that are not ids."""
    normalised: Dict[int, Any] = {}
    for key, value in (values or {}).items():
        question_id = parse_leading_int(key)
        if question_id is not None:
            normalised[question_id] = value
    return normalised


class ScoringEngine:
    """
    Deterministic compliance scoring engine.

    The engine reads the question catalog and the registered rules only;
    calling score() with the same answers always yields an equal result.
    """

    def __init__(self, rules: Optional[Dict[int, Rule]] = None):
        """Initialize the engine with a rule table (defaults to RULES)."""
        self.rules = rules if rules is not None else RULES
        self.logger = logging.getLogger(__name__)

    def score(
        self,
        answers: Optional[Mapping[Any, Any]],
        follow_up_answers: Optional[Mapping[Any, Any]] = None,
    ) -> ComplianceResult:
        """
        Score a set of questionnaire answers.

        Args:
            answers: Question id -> primary answer
            follow_up_answers: Question id -> follow-up reply (counts)

        Returns:
            ComplianceResult with overall and per-category scores
        """
        accumulators = {category: _CategoryAccumulator() for category in CATEGORY_ORDER}
        strengths: List[str] = []
        red_flags: List[str] = []
        risks: List[RiskItem] = []

        primary = _normalise_keys(answers)
        follow_ups = _normalise_keys(follow_up_answers)

        # Integer keys are evaluated in ascending order, which is catalog order
        for question_id in sorted(primary):
            category = category_of(question_id)
            if category is None:
                self.logger.debug(f"Ignoring answer for unknown question {question_id}")
                continue

            weight = weight_of(question_id)
            accumulator = accumulators[category]
            accumulator.max += weight

            rule = self.rules.get(question_id, _default_rule)
            outcome = rule(primary[question_id], weight, follow_ups.get(question_id))

            if outcome.strength:
                strengths.append(outcome.strength)
            if outcome.red_flag:
                red_flags.append(outcome.red_flag)
            if outcome.risk is not None:
                risks.append(outcome.risk)

            accumulator.total += outcome.points
            accumulator.insights.append(outcome.insight)

        category_scores = []
        total_score = 0.0
        max_score = 0.0
        for category in CATEGORY_ORDER:
            accumulator = accumulators[category]
            category_percentage = percentage(accumulator.total, accumulator.max)
            category_scores.append(
                CategoryScore(
                    category=category.value,
                    score=category_percentage,
                    status=status_for(category_percentage),
                    insight=accumulator.insights[0] if accumulator.insights else EMPTY_CATEGORY_INSIGHT,
                    insights=list(accumulator.insights),
                )
            )
            total_score += accumulator.total
            max_score += accumulator.max

        result = ComplianceResult(
            overall_score=percentage(total_score, max_score),
            category_scores=category_scores,
            strengths=strengths[:MAX_STRENGTHS],
            red_flags=red_flags[:MAX_RED_FLAGS],
            risk_forecast=RiskForecast(period=RISK_FORECAST_PERIOD, risks=risks[:MAX_RISKS]),
        )

        self.logger.debug(
            f"Scored {len(primary)} answers: overall {result.overall_score}, "
            f"{len(result.red_flags)} red flags"
        )
        return result


_default_engine = ScoringEngine()


def score(
    answers: Optional[Mapping[Any, Any]],
    follow_up_answers: Optional[Mapping[Any, Any]] = None,
) -> ComplianceResult:
    """Score answers with the default rule table."""
    return _default_engine.score(answers, follow_up_answers)
