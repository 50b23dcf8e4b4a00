"""Random question set assignment and assigned-set retrieval."""

import logging
import random
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import NotFoundError
from app.models.quiz import Question, QuestionSet, UserQuestionSetAssignment
from app.models.user import User

logger = logging.getLogger(__name__)


class AssignmentManager:
    """Binds question sets to users and serves a set's question tree."""

    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    def assign_random_set(self, user_id: int, category: str) -> UserQuestionSetAssignment:
        """Pick one set of the category uniformly at random and assign it.

        Repeat calls create new assignments, possibly of the same set.

        Raises:
            NotFoundError: Unknown user, or no sets in the category.
        """
        if self.db.get(User, user_id) is None:
            raise NotFoundError("User not found")

        set_ids = [
            row.id
            for row in self.db.query(QuestionSet.id)
            .filter(QuestionSet.category == category)
            .order_by(QuestionSet.id)
        ]
        if not set_ids:
            raise NotFoundError("No sets found for this category")

        chosen = self.rng.choice(set_ids)
        assignment = UserQuestionSetAssignment(user_id=user_id, question_set_id=chosen)
        try:
            self.db.add(assignment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(assignment)
        logger.info(
            "Assigned set %s to user %s (category %s, %d candidates)",
            chosen, user_id, category, len(set_ids),
        )
        return assignment

    def get_set_questions(self, set_id: int) -> List[Question]:
        """Every question of a set with its options, by ascending id.

        Questions without options carry an empty ``options`` list.
        """
        return (
            self.db.query(Question)
            .options(selectinload(Question.options))
            .filter(Question.question_set_id == set_id)
            .order_by(Question.id.asc())
            .all()
        )
