"""
Database models for the Recruiting Company API.

This module contains all SQLAlchemy models for the application:
- User models for authentication, verification and password reset
- Passport models for candidate passport details
- Quiz models for question sets, questions, options and assignments
"""

from app.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserRole, VerificationCode, PasswordResetToken, SELF_SERVICE_ROLES
from .passport import PassportDetail, PASSPORT_FIELDS, PASSPORT_DATE_FIELDS, PASSPORT_FILE_FIELDS
from .quiz import QuestionSet, Question, QuestionOption, UserQuestionSetAssignment, QuestionType

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "SELF_SERVICE_ROLES",
    "VerificationCode",
    "PasswordResetToken",
    "PassportDetail",
    "PASSPORT_FIELDS",
    "PASSPORT_DATE_FIELDS",
    "PASSPORT_FILE_FIELDS",
    "QuestionSet",
    "Question",
    "QuestionOption",
    "UserQuestionSetAssignment",
    "QuestionType"
]
