"""
Quiz router for the Recruiting Company API.

Set and question authoring, random set assignment, and retrieval of a
set's questions with their options.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.core.dependencies import AssignmentManagerDep, QuizManagerDep
from app.routers.auth import get_current_user
from app.routers.questions import attached
from app.schemas.quiz import (
    AssignSetRequest,
    AssignmentResponse,
    OptionResponse,
    QuestionOptionsCreate,
    QuestionResponse,
    QuestionSetCreate,
    QuestionSetResponse,
    QuestionWithOptions,
    SetQuestions
)
from app.schemas.user import CurrentUser


router = APIRouter()


@router.post("/set", status_code=status.HTTP_201_CREATED)
def create_set(
    set_data: QuestionSetCreate,
    quiz_manager: QuizManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Create a question set.
    """
    question_set = quiz_manager.create_set(set_data.set_name, set_data.category, current_user.id)
    return {
        "message": "Question set created successfully",
        "set": QuestionSetResponse.model_validate(question_set),
    }


@router.post("/question", status_code=status.HTTP_201_CREATED)
def create_question(
    quiz_manager: QuizManagerDep,
    question_set_id: int = Form(...),
    question_text: Optional[str] = Form(None),
    question_type: Optional[str] = Form(None),
    question_image: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Create a text or image question.
    """
    question = quiz_manager.create_question(
        question_set_id,
        question_text=question_text,
        image=attached(question_image),
        question_type=question_type,
    )
    return {
        "message": "Question created successfully",
        "question": QuestionResponse.model_validate(question),
    }


@router.post("/question/{question_id}/options", status_code=status.HTTP_201_CREATED)
def add_question_options(
    question_id: int,
    options_data: QuestionOptionsCreate,
    quiz_manager: QuizManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Add options to a question, all or nothing.
    """
    options = quiz_manager.add_options(question_id, options_data.options)
    return {
        "message": "Options added successfully",
        "options": [OptionResponse.model_validate(o) for o in options],
    }


@router.post("/assign-set", status_code=status.HTTP_201_CREATED)
def assign_set(
    assign_data: AssignSetRequest,
    assignment_manager: AssignmentManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Assign a random question set of the category to a user.
    """
    assignment = assignment_manager.assign_random_set(assign_data.user_id, assign_data.category)
    return {
        "message": "Set assigned successfully",
        "assigned": AssignmentResponse.model_validate(assignment),
    }


@router.get("/set/{set_id}/questions", response_model=SetQuestions)
def get_set_questions(
    set_id: int,
    assignment_manager: AssignmentManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Every question of a set with its options, ordered by question id.
    """
    questions = assignment_manager.get_set_questions(set_id)
    return {
        "set_id": set_id,
        "questions": [QuestionWithOptions.model_validate(q) for q in questions],
    }
