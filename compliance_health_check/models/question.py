"""
Data models for health check questions.

This module defines the data structures used to represent the
questionnaire items the compliance score is computed from.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionCategory(str, Enum):
    """Compliance areas a question can belong to, in report order."""

    COMPANY_LEGAL = "Company & Legal Structure"
    TAXATION_GST = "Taxation & GST"
    INTELLECTUAL_PROPERTY = "Intellectual Property"
    CERTIFICATIONS = "Certifications & Industry Licenses"
    FINANCIAL_HEALTH = "Financial Health & Risk"


class FollowUp(BaseModel):
    """Supplementary question asked when the primary answer triggers it."""

    model_config = ConfigDict(frozen=True)

    trigger_answer: str = Field(..., description="Primary answer that opens the follow-up")
    prompt: str = Field(..., description="Follow-up question text")
    unit: str = Field(..., description="What the numeric reply counts, e.g. month(s)")


class Question(BaseModel):
    """Represents a single questionnaire item."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0, description="Stable question identifier")
    prompt: str = Field(..., description="Question text shown to the user")
    category: QuestionCategory = Field(..., description="Compliance area the question scores into")
    weight: float = Field(..., gt=0, description="Maximum points this question contributes")
    options: List[str] = Field(default_factory=lambda: ["Yes", "No", "Not Sure"], description="Recognised answers")
    follow_up: Optional[FollowUp] = Field(None, description="Conditional follow-up question")

    def triggers_follow_up(self, answer: str) -> bool:
        """Check whether an answer opens this question's follow-up."""
        return self.follow_up is not None and answer == self.follow_up.trigger_answer

    def is_recognised(self, answer: str) -> bool:
        """Check whether an answer is one of the listed options."""
        return answer in self.options
