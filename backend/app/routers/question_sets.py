"""
Question set router for the Recruiting Company API.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, status

from app.core.dependencies import QuizManagerDep
from app.routers.auth import get_current_user
from app.schemas.quiz import QuestionSetCreate, QuestionSetResponse
from app.schemas.user import CurrentUser


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_question_set(
    set_data: QuestionSetCreate,
    quiz_manager: QuizManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Create a question set authored by the current user.
    """
    question_set = quiz_manager.create_set(set_data.set_name, set_data.category, current_user.id)
    return {"message": "Created", "data": QuestionSetResponse.model_validate(question_set)}


@router.get("")
def list_question_sets(
    quiz_manager: QuizManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    List all question sets, newest first.
    """
    return {
        "data": [QuestionSetResponse.model_validate(s) for s in quiz_manager.list_sets()]
    }


@router.delete("/{set_id}")
def delete_question_set(
    set_id: int,
    quiz_manager: QuizManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, str]:
    """
    Delete a question set with its questions, options and assignments.
    """
    quiz_manager.delete_set(set_id)
    return {"message": "Question set deleted successfully"}
