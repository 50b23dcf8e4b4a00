"""Dependency injection for FastAPI routes.

Managers get a request-scoped database session; the mailer and file
storages are process-wide objects owned by the application (``app.state``).
"""

from typing import Annotated

from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.utils.assignment_manager import AssignmentManager
from app.utils.file_storage import FileStorage
from app.utils.mailer import Mailer
from app.utils.passport_manager import PassportManager
from app.utils.quiz_manager import QuizManager
from app.utils.user_manager import UserManager


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_passport_storage(request: Request) -> FileStorage:
    return request.app.state.passport_storage


def get_quiz_storage(request: Request) -> FileStorage:
    return request.app.state.quiz_storage


def get_user_manager(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
) -> UserManager:
    """Get UserManager instance; its mail goes out after the response."""
    return UserManager(db, mailer=mailer, background_tasks=background_tasks)


def get_passport_manager(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_passport_storage),
) -> PassportManager:
    """Get PassportManager instance with request-scoped DB session."""
    return PassportManager(db, storage)


def get_quiz_manager(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_quiz_storage),
) -> QuizManager:
    """Get QuizManager instance with request-scoped DB session."""
    return QuizManager(db, storage)


def get_assignment_manager(
    request: Request,
    db: Session = Depends(get_db),
) -> AssignmentManager:
    """Get AssignmentManager instance with request-scoped DB session."""
    return AssignmentManager(db, rng=getattr(request.app.state, "rng", None))


# Type aliases for dependency injection
UserManagerDep = Annotated[UserManager, Depends(get_user_manager)]
PassportManagerDep = Annotated[PassportManager, Depends(get_passport_manager)]
QuizManagerDep = Annotated[QuizManager, Depends(get_quiz_manager)]
AssignmentManagerDep = Annotated[AssignmentManager, Depends(get_assignment_manager)]
