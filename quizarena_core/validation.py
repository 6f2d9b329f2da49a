"""
Request validation schemas using Pydantic v2
Validates contest, question and submission payloads before they reach the core
"""

import logging
import re
from datetime import datetime
from typing import Dict, List, Literal, Optional, Self, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .types import Answer, Option, Question

logger = logging.getLogger(__name__)


class ContestLimits:
    """Field limits and page sizes shared by the schemas and the core"""

    NAME_MIN = 3
    NAME_MAX = 100
    DESCRIPTION_MIN = 10
    DESCRIPTION_MAX = 500
    PRIZE_MIN = 5
    PRIZE_MAX = 200
    QUESTION_TEXT_MIN = 10
    QUESTION_TEXT_MAX = 500
    OPTION_TEXT_MAX = 200
    OPTIONS_MIN = 2
    OPTIONS_MAX = 10
    POINTS_MIN = 1
    POINTS_MAX = 10
    MAX_PARTICIPANTS_DEFAULT = 1000
    MAX_PARTICIPANTS_MAX = 10000

    DEFAULT_PAGE_SIZE = 10
    LEADERBOARD_LIMIT = 100


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        # Limit length
        return InputSanitizer.strip_control(value)[:max_length]

    @staticmethod
    def strip_control(value: str) -> str:
        """Strip whitespace and control characters without truncating"""
        value = value.strip()

        # Remove null bytes and other control characters (keep newlines/tabs)
        return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", value)


def _clean(value):
    # no truncation here: Field(max_length=...) must see the full input
    return InputSanitizer.strip_control(value) if isinstance(value, str) else value


# ==================== QUESTIONS ====================


class OptionIn(BaseModel):
    option: str = Field(..., min_length=1, max_length=ContestLimits.OPTION_TEXT_MAX)
    is_correct: bool = Field(..., alias="isCorrect")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("option", mode="before")
    @classmethod
    def clean_option(cls, v):
        return _clean(v)


class QuestionIn(BaseModel):
    """Question payload for add/edit; per-type invariants checked here and again in the core"""

    question_text: str = Field(
        ...,
        alias="questionText",
        min_length=ContestLimits.QUESTION_TEXT_MIN,
        max_length=ContestLimits.QUESTION_TEXT_MAX,
    )
    type: Literal["single-select", "multi-select", "true-false"]
    options: List[OptionIn] = Field(
        ..., min_length=ContestLimits.OPTIONS_MIN, max_length=ContestLimits.OPTIONS_MAX
    )
    points: int = Field(1, ge=ContestLimits.POINTS_MIN, le=ContestLimits.POINTS_MAX)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("question_text", mode="before")
    @classmethod
    def clean_text(cls, v):
        return _clean(v)

    @model_validator(mode="after")
    def validate_correct_options(self) -> Self:
        correct = sum(1 for o in self.options if o.is_correct)
        if correct == 0:
            raise ValueError("Question must have at least one correct option")
        if self.type == "true-false" and len(self.options) != 2:
            raise ValueError("True/False questions must have exactly 2 options")
        if self.type in ("single-select", "true-false") and correct != 1:
            raise ValueError(f"{self.type} questions must have exactly one correct option")
        return self

    def to_question(self) -> Question:
        return Question(
            text=self.question_text,
            type=self.type,
            options=tuple(Option(text=o.option, is_correct=o.is_correct) for o in self.options),
            points=self.points,
        )


# ==================== CONTESTS ====================


class ContestCreate(BaseModel):
    name: str = Field(..., min_length=ContestLimits.NAME_MIN, max_length=ContestLimits.NAME_MAX)
    description: str = Field(
        ...,
        min_length=ContestLimits.DESCRIPTION_MIN,
        max_length=ContestLimits.DESCRIPTION_MAX,
    )
    type: Literal["NORMAL", "VIP"]
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime = Field(..., alias="endTime")
    prize_info: str = Field(
        ...,
        alias="prizeInfo",
        min_length=ContestLimits.PRIZE_MIN,
        max_length=ContestLimits.PRIZE_MAX,
    )
    max_participants: int = Field(
        ContestLimits.MAX_PARTICIPANTS_DEFAULT,
        alias="maxParticipants",
        ge=1,
        le=ContestLimits.MAX_PARTICIPANTS_MAX,
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "description", "prize_info", mode="before")
    @classmethod
    def clean_text(cls, v):
        return _clean(v)

    @model_validator(mode="after")
    def validate_window(self) -> Self:
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class ContestUpdate(BaseModel):
    """Partial update; at least one field. Which fields are allowed depends on the lifecycle."""

    name: Optional[str] = Field(
        None, min_length=ContestLimits.NAME_MIN, max_length=ContestLimits.NAME_MAX
    )
    description: Optional[str] = Field(
        None,
        min_length=ContestLimits.DESCRIPTION_MIN,
        max_length=ContestLimits.DESCRIPTION_MAX,
    )
    type: Optional[Literal["NORMAL", "VIP"]] = None
    start_time: Optional[datetime] = Field(None, alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    prize_info: Optional[str] = Field(
        None,
        alias="prizeInfo",
        min_length=ContestLimits.PRIZE_MIN,
        max_length=ContestLimits.PRIZE_MAX,
    )
    max_participants: Optional[int] = Field(
        None, alias="maxParticipants", ge=1, le=ContestLimits.MAX_PARTICIPANTS_MAX
    )
    is_active: Optional[bool] = Field(None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "description", "prize_info", mode="before")
    @classmethod
    def clean_text(cls, v):
        return _clean(v)

    @model_validator(mode="after")
    def validate_fields(self) -> Self:
        if not self.changed_fields():
            raise ValueError("At least one field must be provided")
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self

    def changed_fields(self) -> Dict[str, object]:
        """Fields the caller actually supplied, keyed by core attribute name."""
        values = self.model_dump(exclude_none=True)
        if "type" in values:
            values["tier"] = values.pop("type")
        return values


# ==================== SUBMISSIONS ====================


class AnswerIn(BaseModel):
    question_index: int = Field(..., alias="questionIndex", ge=0)
    selected_options: List[int] = Field(..., alias="selectedOptions")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("selected_options")
    @classmethod
    def validate_option_indices(cls, v: List[int]) -> List[int]:
        for idx in v:
            if idx < 0:
                raise ValueError("Option index must be non-negative")
        return v


class SubmissionIn(BaseModel):
    answers: List[AnswerIn]

    def to_answers(self) -> Tuple[Answer, ...]:
        return tuple(
            Answer(question_index=a.question_index, selected_options=tuple(a.selected_options))
            for a in self.answers
        )


def parse_submission(payload: dict) -> SubmissionIn:
    """
    Validate a raw submission payload

    Raises:
        ValueError: If validation fails
    """
    try:
        return SubmissionIn(**payload)
    except Exception as e:
        logger.warning(f"Submission validation failed: {e}")
        raise ValueError(f"Invalid submission: {str(e)}")


# ==================== EXPORT ====================

__all__ = [
    "AnswerIn",
    "ContestCreate",
    "ContestLimits",
    "ContestUpdate",
    "InputSanitizer",
    "OptionIn",
    "QuestionIn",
    "SubmissionIn",
    "parse_submission",
]
