"""User management utilities.

This module provides account registration, email verification, login,
password reset and the admin user queries.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import BackgroundTasks
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.security import (
    as_utc,
    create_access_token,
    generate_password_reset_token,
    generate_verification_code,
    get_password_hash,
    utc_now,
    verify_password,
)
from app.models.user import (
    SELF_SERVICE_ROLES,
    PasswordResetToken,
    User,
    UserRole,
    VerificationCode,
)
from app.utils.mailer import Mailer

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
RESET_REQUESTED = "If the email exists, a reset link has been sent"


class UserManager:
    """Manages user accounts and their verification and reset records."""

    def __init__(
        self,
        db: Session,
        mailer: Optional[Mailer] = None,
        clock: Callable[[], datetime] = utc_now,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            mailer: Outgoing email client; mail is skipped when None.
            clock: Returns the current aware UTC time.
            background_tasks: When given, mail is sent after the response
                instead of inside the request.
        """
        self.db = db
        self.mailer = mailer
        self.clock = clock
        self.background_tasks = background_tasks

    def _send_mail(self, send: Callable[..., bool], *args) -> None:
        if self.background_tasks is not None:
            self.background_tasks.add_task(send, *args)
        else:
            send(*args)

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def register(
        self,
        email: str,
        name: str,
        password: str,
        role: str,
        phone: Optional[str] = None,
    ) -> User:
        """Create an unverified account and send its verification code.

        Raises:
            ValidationError: If a required field is missing or the role is
                not one of the self-service roles.
            ConflictError: If the email is already registered.
        """
        if not email or not name or not password or not role:
            raise ValidationError("Email, name, password, and role are required")
        if role not in SELF_SERVICE_ROLES:
            raise ValidationError("Role must be driver, welder, or student")

        if self.get_user_by_email(email):
            raise ConflictError("Email already registered")

        user = User(
            email=email,
            phone=phone,
            name=name,
            password_hash=get_password_hash(password),
            role=role,
            is_verified=False,
        )
        code = generate_verification_code()

        # Two concurrent registrations can both pass the check above;
        # the unique constraint on email decides
        try:
            self.db.add(user)
            self.db.flush()
            self.db.add(VerificationCode(
                user_id=user.id,
                code=code,
                expires_at=self.clock() + timedelta(
                    minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES
                ),
            ))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email already registered") from e

        self.db.refresh(user)
        logger.info("Registered user %s with role %s", user.id, user.role)

        if self.mailer is not None:
            self._send_mail(self.mailer.send_verification_email, email, code)

        return user

    def create_token(self, user: User) -> str:
        return create_access_token(
            subject=str(user.id),
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            additional_claims={
                "id": user.id,
                "email": user.email,
                "role": user.role,
            },
        )

    def login(self, email: str, password: str) -> Tuple[str, User]:
        """Check credentials and issue an access token.

        Unknown email and wrong password raise the same error.

        Raises:
            AuthenticationError: Bad credentials.
            AuthorizationError: Correct credentials, unverified email.
        """
        user = self.get_user_by_email(email)
        password_hash = user.password_hash if user is not None else None
        if not verify_password(password, password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.is_verified:
            raise AuthorizationError("Please verify your email before logging in")

        logger.info("User %s logged in", user.id)
        return self.create_token(user), user

    def verify_email(self, email: str, code: str) -> User:
        """Consume the newest verification code issued for an email.

        Raises:
            ValidationError: No code, expired code, or mismatched code.
        """
        record = (
            self.db.query(VerificationCode)
            .join(User, VerificationCode.user_id == User.id)
            .filter(User.email == email)
            .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
            .first()
        )
        if record is None:
            raise ValidationError("Verification code not found. Please register again.")

        now = self.clock()
        if now > as_utc(record.expires_at):
            self.db.query(VerificationCode).filter(
                VerificationCode.user_id == record.user_id,
                VerificationCode.expires_at < now,
            ).delete(synchronize_session=False)
            self.db.commit()
            raise ValidationError("Verification code expired. Please request a new one.")

        if record.code != code:
            raise ValidationError("Invalid verification code.")

        user = record.user

        # A concurrent attempt may already have consumed the code
        deleted = (
            self.db.query(VerificationCode)
            .filter(VerificationCode.id == record.id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.db.rollback()
            raise ValidationError("Verification code not found. Please register again.")

        # Older codes for the account are spent along with this one
        self.db.query(VerificationCode).filter(
            VerificationCode.user_id == user.id
        ).delete(synchronize_session=False)

        user.is_verified = True
        self.db.commit()
        self.db.refresh(user)

        logger.info("User %s verified their email", user.id)
        return user

    def request_password_reset(self, email: str) -> str:
        """Issue a reset token when the account exists.

        Returns the same message whether or not it does.
        """
        user = self.get_user_by_email(email)
        if user is None:
            return RESET_REQUESTED

        now = self.clock()
        self.db.query(PasswordResetToken).filter(
            PasswordResetToken.user_id == user.id,
            PasswordResetToken.expires_at < now,
        ).delete(synchronize_session=False)

        token = generate_password_reset_token()
        self.db.add(PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=now + timedelta(
                minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
            ),
        ))
        self.db.commit()
        logger.info("Password reset requested for user %s", user.id)

        if self.mailer is not None:
            self._send_mail(self.mailer.send_password_reset_email, user.email, token)

        return RESET_REQUESTED

    def reset_password(self, token: str, new_password: str) -> User:
        """Set a new password using a single-use reset token.

        Raises:
            ValidationError: Unknown, consumed or expired token.
        """
        record = (
            self.db.query(PasswordResetToken)
            .filter(PasswordResetToken.token == token)
            .first()
        )
        if record is None:
            raise ValidationError("Invalid or expired reset token")

        if self.clock() > as_utc(record.expires_at):
            raise ValidationError("Reset token expired")

        user = record.user
        user_id = record.user_id

        # Every outstanding token for the user is spent by one reset
        deleted = (
            self.db.query(PasswordResetToken)
            .filter(PasswordResetToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.db.rollback()
            raise ValidationError("Invalid or expired reset token")

        user.password_hash = get_password_hash(new_password)
        self.db.commit()
        self.db.refresh(user)

        logger.info("Password reset completed for user %s", user_id)
        return user

    def admin_reset_password(self, user_id: int, new_password: str) -> User:
        user = self.get_user(user_id)
        user.password_hash = get_password_hash(new_password)
        self.db.commit()
        self.db.refresh(user)

        logger.info("Admin reset password for user %s", user_id)
        return user

    def list_users(self, role: Optional[str] = None) -> List[User]:
        """List non-admin users, newest first.

        A role filter outside the self-service roles is ignored.
        """
        query = self.db.query(User).filter(User.role != UserRole.ADMIN.value)
        if role and role in SELF_SERVICE_ROLES:
            query = query.filter(User.role == role)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def user_stats(self) -> Dict[str, int]:
        rows = (
            self.db.query(User.role, func.count(User.id))
            .filter(User.role != UserRole.ADMIN.value)
            .group_by(User.role)
            .all()
        )
        by_role = dict(rows)
        verified = (
            self.db.query(func.count(User.id))
            .filter(User.role != UserRole.ADMIN.value, User.is_verified.is_(True))
            .scalar()
        )
        return {
            "totalUsers": sum(by_role.values()),
            "drivers": by_role.get(UserRole.DRIVER.value, 0),
            "welders": by_role.get(UserRole.WELDER.value, 0),
            "students": by_role.get(UserRole.STUDENT.value, 0),
            "verifiedUsers": verified or 0,
        }

    def ensure_admin(self, email: str, password: str, name: str) -> User:
        """Create the administrator account if it does not exist."""
        admin = self.get_user_by_email(email)
        if admin is not None:
            return admin

        admin = User(
            email=email,
            name=name,
            password_hash=get_password_hash(password),
            role=UserRole.ADMIN.value,
            is_verified=True,
        )
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        logger.info(f"Admin user created: {email}")
        return admin
