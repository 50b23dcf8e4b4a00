"""
API routers for the Recruiting Company API.

This module contains all API endpoint routers:
- auth: Registration, verification, login and password reset
- users: Profile and admin user listings
- passport: Passport details with photo and signature uploads
- question_sets, questions, options: Quiz content authoring
- quizz: Quiz authoring, random set assignment and set retrieval
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .users import router as users_router
from .passport import router as passport_router
from .question_sets import router as question_sets_router
from .questions import router as questions_router
from .options import router as options_router
from .quizz import router as quizz_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["users"]
)

api_router.include_router(
    passport_router,
    prefix="/passport",
    tags=["passport"]
)

api_router.include_router(
    question_sets_router,
    prefix="/question-sets",
    tags=["question-sets"]
)

api_router.include_router(
    questions_router,
    prefix="/questions",
    tags=["questions"]
)

api_router.include_router(
    options_router,
    prefix="/options",
    tags=["options"]
)

api_router.include_router(
    quizz_router,
    prefix="/quizz",
    tags=["quizz"]
)

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "users_router",
    "passport_router",
    "question_sets_router",
    "questions_router",
    "options_router",
    "quizz_router"
]
