"""Quiz content management.

Question sets, their questions (optionally with an image) and the answer
options of each question.
"""

import logging
from typing import Any, Iterable, List, Optional

from fastapi import UploadFile
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models.quiz import (
    Question,
    QuestionOption,
    QuestionSet,
    QuestionType,
    UserQuestionSetAssignment,
)
from app.utils.file_storage import FileStorage

logger = logging.getLogger(__name__)


def _option_value(option: Any, name: str, default: Any = None) -> Any:
    if isinstance(option, dict):
        return option.get(name, default)
    return getattr(option, name, default)


class QuizManager:
    """Manages question sets, questions and options."""

    def __init__(self, db: Session, storage: Optional[FileStorage] = None):
        """Initialize QuizManager.

        Args:
            db: SQLAlchemy Session.
            storage: Where question images live; required for image uploads.
        """
        self.db = db
        self.storage = storage

    # Question sets

    def create_set(self, set_name: str, category: str, author_id: Optional[int]) -> QuestionSet:
        if not set_name or not category:
            raise ValidationError("set_name and category are required")

        question_set = QuestionSet(
            set_name=set_name,
            category=category,
            created_by=author_id,
            total_questions=0,
        )
        self.db.add(question_set)
        self.db.commit()
        self.db.refresh(question_set)

        logger.info("Created question set %s in category %s", question_set.id, category)
        return question_set

    def list_sets(self) -> List[QuestionSet]:
        return self.db.query(QuestionSet).order_by(QuestionSet.id.desc()).all()

    def get_set(self, set_id: int) -> QuestionSet:
        question_set = self.db.get(QuestionSet, set_id)
        if question_set is None:
            raise NotFoundError("Question set not found")
        return question_set

    def delete_set(self, set_id: int) -> None:
        """Delete a set with its assignments, options and questions.

        Runs as one transaction; any failure rolls back every delete.
        Question images are removed from storage after the commit.

        Raises:
            NotFoundError: The set does not exist.
        """
        try:
            self.get_set(set_id)
            question_ids = self.db.query(Question.id).filter(
                Question.question_set_id == set_id
            )
            images = [
                row.question_image_url
                for row in self.db.query(Question.question_image_url).filter(
                    Question.question_set_id == set_id,
                    Question.question_image_url.isnot(None),
                )
            ]

            self.db.query(UserQuestionSetAssignment).filter(
                UserQuestionSetAssignment.question_set_id == set_id
            ).delete(synchronize_session=False)
            self.db.query(QuestionOption).filter(
                QuestionOption.question_id.in_(question_ids.scalar_subquery())
            ).delete(synchronize_session=False)
            self.db.query(Question).filter(
                Question.question_set_id == set_id
            ).delete(synchronize_session=False)
            deleted = self.db.query(QuestionSet).filter(
                QuestionSet.id == set_id
            ).delete(synchronize_session=False)
            if deleted == 0:
                raise NotFoundError("Question set not found")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if self.storage is not None:
            self.storage.delete_many(images)
        logger.info("Deleted question set %s", set_id)

    # Questions

    def create_question(
        self,
        set_id: int,
        question_text: Optional[str] = None,
        image: Optional[UploadFile] = None,
        question_type: Optional[str] = None,
    ) -> Question:
        """Create a question under a set.

        The type defaults to ``image`` when an image is attached, otherwise
        ``text``. The set's ``total_questions`` is incremented in the same
        transaction.

        Raises:
            NotFoundError: The set does not exist.
            ValidationError: Unknown type, no content, or ``image`` type
                without an image.
        """
        question_text = (question_text or "").strip() or None
        valid_types = [t.value for t in QuestionType]
        if question_type and question_type not in valid_types:
            raise ValidationError(f"question_type must be one of: {', '.join(valid_types)}")
        if question_type == QuestionType.IMAGE.value and image is None:
            raise ValidationError("An image question requires question_image")
        if question_text is None and image is None:
            raise ValidationError("question_text or question_image is required")

        self.get_set(set_id)

        filename = None
        if image is not None:
            if self.storage is None:
                raise ValidationError("Image uploads are not available")
            filename = self.storage.save(image, "question_image")

        question = Question(
            question_set_id=set_id,
            question_text=question_text,
            question_image_url=filename,
            question_type=question_type or (
                QuestionType.IMAGE.value if filename else QuestionType.TEXT.value
            ),
        )
        try:
            self.db.add(question)
            self.db.execute(
                update(QuestionSet)
                .where(QuestionSet.id == set_id)
                .values(total_questions=QuestionSet.total_questions + 1)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            if filename and self.storage is not None:
                self.storage.delete(filename)
            raise

        self.db.refresh(question)
        logger.info("Created %s question %s in set %s", question.question_type, question.id, set_id)
        return question

    def list_questions(self, set_id: int) -> List[Question]:
        return (
            self.db.query(Question)
            .filter(Question.question_set_id == set_id)
            .order_by(Question.id.asc())
            .all()
        )

    # Options

    def add_options(self, question_id: int, options: Iterable[Any]) -> List[QuestionOption]:
        """Insert a batch of options for a question, all or nothing.

        Each option may be a schema object or a dict with ``option_text``
        and ``is_correct``.

        Raises:
            ValidationError: Empty batch or an option without text.
            NotFoundError: The question does not exist.
        """
        options = list(options or [])
        if not options:
            raise ValidationError("Options array required")

        rows = []
        for option in options:
            text = _option_value(option, "option_text")
            if not text:
                raise ValidationError("Every option needs option_text")
            rows.append(QuestionOption(
                question_id=question_id,
                option_text=text,
                is_correct=bool(_option_value(option, "is_correct", False)),
            ))

        if self.db.get(Question, question_id) is None:
            raise NotFoundError("Question not found")

        try:
            self.db.add_all(rows)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for row in rows:
            self.db.refresh(row)
        logger.info("Added %d options to question %s", len(rows), question_id)
        return rows
