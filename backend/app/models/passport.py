"""
Passport detail model for the Recruiting Company API.
"""

from datetime import date, datetime
from typing import Optional
from sqlalchemy import Integer, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.database import Base


# Textual fields a candidate submits, in form order
PASSPORT_FIELDS = (
    "passport_type",
    "country_code",
    "passport_number",
    "full_name",
    "nationality",
    "sex",
    "date_of_birth",
    "place_of_birth",
    "date_of_issue",
    "date_of_expiry",
    "place_of_issue",
    "father_name",
    "spouse_name",
    "address",
)

PASSPORT_DATE_FIELDS = ("date_of_birth", "date_of_issue", "date_of_expiry")

PASSPORT_FILE_FIELDS = ("passport_photo", "signature")


class PassportDetail(Base):
    """
    One passport record per user, with photo and signature attachments.
    """
    __tablename__ = "passport_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    passport_type: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    country_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    passport_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    nationality: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sex: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    place_of_birth: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_of_issue: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    date_of_expiry: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    place_of_issue: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    father_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    spouse_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Stored filenames under the passport upload tree
    passport_photo: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    signature: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    user = relationship("User", back_populates="passport")

    def __repr__(self) -> str:
        return f"<PassportDetail(id={self.id}, user_id={self.user_id})>"

    @property
    def stored_files(self) -> list:
        """Filenames of the attachments currently referenced by this record."""
        return [name for name in (self.passport_photo, self.signature) if name]
