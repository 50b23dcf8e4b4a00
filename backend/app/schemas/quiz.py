"""
Quiz schemas: question sets, questions, options and assignments.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class QuestionSetCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    set_name: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=50)


class QuestionSetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    set_name: str
    category: str
    created_by: Optional[int] = None
    total_questions: int
    created_at: Optional[datetime] = None


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question_set_id: int
    question_text: Optional[str] = None
    question_image_url: Optional[str] = None
    question_type: str


class OptionCreate(BaseModel):
    """Accepts both ``{text, isCorrect}`` and ``{option_text, is_correct}``."""

    option_text: str = Field(
        min_length=1, validation_alias=AliasChoices("option_text", "text")
    )
    is_correct: bool = Field(
        default=False, validation_alias=AliasChoices("is_correct", "isCorrect")
    )


class OptionsCreate(BaseModel):
    question_id: int
    options: List[OptionCreate] = Field(min_length=1)


class QuestionOptionsCreate(BaseModel):
    options: List[OptionCreate] = Field(min_length=1)


class OptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question_id: int
    option_text: str
    is_correct: bool


class OptionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    option_text: str
    is_correct: bool


class QuestionWithOptions(QuestionResponse):
    options: List[OptionSummary] = []


class SetQuestions(BaseModel):
    set_id: int
    questions: List[QuestionWithOptions]


class AssignSetRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int
    category: str = Field(min_length=1)


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    question_set_id: int
    assigned_at: Optional[datetime] = None
