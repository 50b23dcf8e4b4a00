"""
Options router for the Recruiting Company API.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, status

from app.core.dependencies import QuizManagerDep
from app.routers.auth import get_current_user
from app.schemas.quiz import OptionsCreate, OptionResponse
from app.schemas.user import CurrentUser


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def add_options(
    options_data: OptionsCreate,
    quiz_manager: QuizManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Add a list of options to a question, all or nothing.
    """
    options = quiz_manager.add_options(options_data.question_id, options_data.options)
    return {
        "message": "Options added",
        "options": [OptionResponse.model_validate(o) for o in options],
    }
