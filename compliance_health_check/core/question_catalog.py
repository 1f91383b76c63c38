"""
Question Catalog for the startup compliance health check.

This module holds the fixed, versioned questionnaire: every question's
prompt, category, scoring weight and recognised answers. The catalog is
built once at import time and never mutated; every other component reads
from it.
"""

from typing import Dict, List, Optional

from ..models.question import FollowUp, Question, QuestionCategory

CATALOG_VERSION = "1.0"

# Weight used for a question the rules know about but the weight table does not
DEFAULT_WEIGHT = 10

CATEGORY_ORDER: List[QuestionCategory] = list(QuestionCategory)

PATENT_OPTIONS = [
    "Yes, filed patents",
    "No, but have unique products/technology",
    "No unique products/technology",
    "Not applicable",
]

LICENSE_OPTIONS = [
    "Yes, all required licenses",
    "Some licenses missing",
    "Not sure what licenses needed",
    "No special licenses required",
]

QUESTIONS: List[Question] = [
    # Company & Legal Structure
    Question(
        id=1,
        prompt="Is your company incorporated as a legal entity (Pvt Ltd, LLP, OPC)?",
        category=QuestionCategory.COMPANY_LEGAL,
        weight=25,
    ),
    Question(
        id=2,
        prompt="Have you filed your MCA annual returns (AOC-4, MGT-7) on time?",
        category=QuestionCategory.COMPANY_LEGAL,
        weight=20,
    ),
    Question(
        id=3,
        prompt="Is DIN KYC up to date for all directors?",
        category=QuestionCategory.COMPANY_LEGAL,
        weight=15,
        follow_up=FollowUp(
            trigger_answer="No",
            prompt="For how many directors is DIN KYC pending?",
            unit="director(s)",
        ),
    ),
    # Taxation & GST
    Question(
        id=4,
        prompt="Is your business registered under GST?",
        category=QuestionCategory.TAXATION_GST,
        weight=20,
    ),
    Question(
        id=5,
        prompt="Have you filed your GST returns on time?",
        category=QuestionCategory.TAXATION_GST,
        weight=25,
        follow_up=FollowUp(
            trigger_answer="No",
            prompt="For how many months were GST returns missed?",
            unit="month(s)",
        ),
    ),
    Question(
        id=6,
        prompt="Have you filed Income Tax Returns for the company?",
        category=QuestionCategory.TAXATION_GST,
        weight=20,
        follow_up=FollowUp(
            trigger_answer="No",
            prompt="For how many years has the ITR not been filed?",
            unit="year(s)",
        ),
    ),
    # Intellectual Property
    Question(
        id=7,
        prompt="Have you filed a trademark for your brand name or logo?",
        category=QuestionCategory.INTELLECTUAL_PROPERTY,
        weight=30,
    ),
    Question(
        id=8,
        prompt="Do you have patents for your products or technology?",
        category=QuestionCategory.INTELLECTUAL_PROPERTY,
        weight=25,
        options=PATENT_OPTIONS,
    ),
    Question(
        id=9,
        prompt="Have you registered copyrights for your creative works or software?",
        category=QuestionCategory.INTELLECTUAL_PROPERTY,
        weight=15,
    ),
    # Certifications & Industry Licenses
    Question(
        id=10,
        prompt="Does your company hold an ISO certification relevant to your industry?",
        category=QuestionCategory.CERTIFICATIONS,
        weight=25,
    ),
    Question(
        id=11,
        prompt="Do you hold all industry-specific licenses required for your operations?",
        category=QuestionCategory.CERTIFICATIONS,
        weight=30,
        options=LICENSE_OPTIONS,
    ),
    # Financial Health & Risk
    Question(
        id=12,
        prompt="Do you maintain proper books of accounts?",
        category=QuestionCategory.FINANCIAL_HEALTH,
        weight=20,
    ),
    Question(
        id=13,
        prompt="Do you have any outstanding overdue liabilities (loans, vendor dues, statutory dues)?",
        category=QuestionCategory.FINANCIAL_HEALTH,
        weight=25,
    ),
    Question(
        id=14,
        prompt="Have you implemented tax planning for the company?",
        category=QuestionCategory.FINANCIAL_HEALTH,
        weight=15,
    ),
    Question(
        id=15,
        prompt="Do you have a compliance officer or external firm monitoring compliance?",
        category=QuestionCategory.FINANCIAL_HEALTH,
        weight=20,
    ),
]

_QUESTIONS_BY_ID: Dict[int, Question] = {question.id: question for question in QUESTIONS}


def get_question(question_id: int) -> Optional[Question]:
    """Get a question by its id, or None if the id is not in the catalog."""
    return _QUESTIONS_BY_ID.get(question_id)


def all_questions() -> List[Question]:
    """Get every question in catalog order."""
    return list(QUESTIONS)


def questions_in(category: QuestionCategory) -> List[Question]:
    """Get the questions belonging to a category."""
    return [question for question in QUESTIONS if question.category == category]


def weight_of(question_id: int) -> float:
    """Get the scoring weight for a question, falling back to DEFAULT_WEIGHT."""
    question = _QUESTIONS_BY_ID.get(question_id)
    if question is None:
        return DEFAULT_WEIGHT
    return question.weight


def category_of(question_id: int) -> Optional[QuestionCategory]:
    """Get the owning category for a question, or None if unrecognised."""
    question = _QUESTIONS_BY_ID.get(question_id)
    if question is None:
        return None
    return question.category
