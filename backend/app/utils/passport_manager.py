"""Passport record management.

One passport record per user, with photo and signature files kept in a
FileStorage. Stored files follow the lifecycle of the record that
references them.
"""

import logging
from typing import Dict, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.passport import PASSPORT_FILE_FIELDS, PassportDetail
from app.models.user import User
from app.schemas.passport import PassportPatch
from app.utils.file_storage import FileStorage

logger = logging.getLogger(__name__)


class PassportManager:
    """Manages passport details and their attachments."""

    def __init__(self, db: Session, storage: FileStorage):
        self.db = db
        self.storage = storage

    def _store_files(self, files: Optional[Dict[str, UploadFile]]) -> Dict[str, str]:
        stored = {}
        try:
            for field in PASSPORT_FILE_FIELDS:
                upload = (files or {}).get(field)
                if upload is not None:
                    stored[field] = self.storage.save(upload, field)
        except Exception:
            self.storage.delete_many(stored.values())
            raise
        return stored

    def create(
        self,
        user_id: int,
        patch: PassportPatch,
        files: Optional[Dict[str, UploadFile]] = None,
    ) -> PassportDetail:
        """Create the user's passport record.

        Raises:
            ConflictError: If the user already has a record.
        """
        if self.db.query(PassportDetail.id).filter(PassportDetail.user_id == user_id).first():
            raise ConflictError("Passport details already submitted")

        stored = self._store_files(files)
        record = PassportDetail(user_id=user_id, **patch.as_values(), **stored)
        try:
            self.db.add(record)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            self.storage.delete_many(stored.values())
            raise ConflictError("Passport details already submitted") from e
        except Exception:
            self.db.rollback()
            self.storage.delete_many(stored.values())
            raise

        self.db.refresh(record)
        logger.info("Created passport %s for user %s", record.id, user_id)
        return record

    def get_mine(self, user_id: int) -> PassportDetail:
        record = (
            self.db.query(PassportDetail)
            .filter(PassportDetail.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Passport details not found")
        return record

    def list_all(self) -> List[Tuple[PassportDetail, User]]:
        return (
            self.db.query(PassportDetail, User)
            .join(User, PassportDetail.user_id == User.id)
            .order_by(PassportDetail.created_at.desc(), PassportDetail.id.desc())
            .all()
        )

    def update(
        self,
        user_id: int,
        patch: PassportPatch,
        files: Optional[Dict[str, UploadFile]] = None,
    ) -> PassportDetail:
        """Apply a partial update to the user's record.

        Only fields in the patch change. A new upload replaces the stored
        file, and the replaced file is removed once the update commits.

        Raises:
            ValidationError: Empty patch and no files.
            NotFoundError: The user has no record.
        """
        if not patch and not any((files or {}).values()):
            raise ValidationError("No fields to update")

        record = (
            self.db.query(PassportDetail)
            .filter(PassportDetail.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Passport record not found")

        stored = self._store_files(files)
        replaced = [getattr(record, field) for field in stored]

        try:
            patch.apply(record)
            for field, filename in stored.items():
                setattr(record, field, filename)
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.storage.delete_many(stored.values())
            raise

        self.storage.delete_many(replaced)
        self.db.refresh(record)
        logger.info(
            "Updated passport %s (fields=%s, files=%s)",
            record.id, sorted(patch.changes), sorted(stored),
        )
        return record

    def delete(self, passport_id: int) -> None:
        """Delete a record and its stored files.

        Raises:
            NotFoundError: No record with that id.
        """
        record = self.db.get(PassportDetail, passport_id)
        if record is None:
            raise NotFoundError("Passport not found")

        files = record.stored_files
        try:
            self.db.delete(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.storage.delete_many(files)
        logger.info("Deleted passport %s", passport_id)
