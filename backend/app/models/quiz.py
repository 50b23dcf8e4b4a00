"""
Quiz models for the Recruiting Company API.

Defines QuestionSet, Question, QuestionOption and the
UserQuestionSetAssignment link between users and sets.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.database import Base


class QuestionType(str, Enum):
    """How a question is presented."""
    TEXT = "text"
    IMAGE = "image"


class QuestionSet(Base):
    """
    A named, categorized collection of quiz questions.
    """
    __tablename__ = "question_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    set_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Denormalized; incremented in the same transaction that creates a question
    total_questions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    questions = relationship(
        "Question",
        back_populates="question_set",
        order_by="Question.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("total_questions >= 0", name="check_total_questions_positive"),
    )

    def __repr__(self) -> str:
        return f"<QuestionSet(id={self.id}, set_name='{self.set_name}', category='{self.category}')>"


class Question(Base):
    """
    A single question belonging to exactly one set.
    """
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    question_set_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    question_image_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    question_type: Mapped[str] = mapped_column(
        String(10), default=QuestionType.TEXT.value, nullable=False
    )

    question_set = relationship("QuestionSet", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        order_by="QuestionOption.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, set_id={self.question_set_id}, type='{self.question_type}')>"


class QuestionOption(Base):
    """
    An answer option for a question, flagged correct or incorrect.
    """
    __tablename__ = "question_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    option_text: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    question = relationship("Question", back_populates="options")

    def __repr__(self) -> str:
        return f"<QuestionOption(id={self.id}, question_id={self.question_id}, is_correct={self.is_correct})>"


class UserQuestionSetAssignment(Base):
    """
    Binding of one question set to one user. Repeat assignments are allowed.
    """
    __tablename__ = "user_question_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    question_set_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index("idx_user_question_set", "user_id", "question_set_id"),
    )

    def __repr__(self) -> str:
        return f"<UserQuestionSetAssignment(user_id={self.user_id}, set_id={self.question_set_id})>"
