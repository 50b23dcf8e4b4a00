"""
Questions router for the Recruiting Company API.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.core.dependencies import QuizManagerDep
from app.routers.auth import get_current_user
from app.schemas.quiz import QuestionResponse
from app.schemas.user import CurrentUser


router = APIRouter()


def attached(upload: Optional[UploadFile]) -> Optional[UploadFile]:
    """Treat an empty file part as no file."""
    if upload is None or not upload.filename:
        return None
    return upload


@router.post("", status_code=status.HTTP_201_CREATED)
def create_question(
    quiz_manager: QuizManagerDep,
    question_set_id: int = Form(...),
    question_text: Optional[str] = Form(None),
    question_type: Optional[str] = Form(None),
    question_image: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Add a text or image question to a set.
    """
    question = quiz_manager.create_question(
        question_set_id,
        question_text=question_text,
        image=attached(question_image),
        question_type=question_type,
    )
    return {"message": "Question Added", "data": QuestionResponse.model_validate(question)}


@router.get("/{set_id}")
def list_questions(
    set_id: int,
    quiz_manager: QuizManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    List the questions of a set, without options.
    """
    return {
        "data": [QuestionResponse.model_validate(q) for q in quiz_manager.list_questions(set_id)]
    }
