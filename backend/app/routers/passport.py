"""
Passport router for the Recruiting Company API.

Multipart endpoints for a candidate's passport details with photo and
signature uploads, plus admin listing and deletion.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Request, UploadFile, status
from starlette.datastructures import FormData, UploadFile as StarletteUploadFile

from app.core.dependencies import PassportManagerDep
from app.models.passport import PASSPORT_FILE_FIELDS
from app.routers.auth import get_current_user, get_current_admin_user
from app.schemas.passport import (
    PassportEnvelope,
    PassportList,
    PassportPatch,
    PassportResponse,
    PassportWithOwner
)
from app.schemas.user import CurrentUser


router = APIRouter()


async def read_form(request: Request) -> FormData:
    """Parse the multipart body before the handler runs in the threadpool."""
    return await request.form()


def _uploaded_files(form) -> Dict[str, UploadFile]:
    """Attachments present in the form, keyed by field name."""
    files = {}
    for field in PASSPORT_FILE_FIELDS:
        upload = form.get(field)
        if isinstance(upload, StarletteUploadFile) and upload.filename:
            files[field] = upload
    return files


@router.post("", response_model=PassportEnvelope, status_code=status.HTTP_201_CREATED)
def create_passport(
    passport_manager: PassportManagerDep,
    form: FormData = Depends(read_form),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Submit passport details with optional passport_photo and signature files.
    """
    patch = PassportPatch.from_form(form)
    record = passport_manager.create(current_user.id, patch, _uploaded_files(form))
    return {
        "message": "Passport created successfully",
        "passport": PassportResponse.model_validate(record),
    }


@router.get("/all", response_model=PassportList)
def list_passports(
    passport_manager: PassportManagerDep,
    admin_user: CurrentUser = Depends(get_current_admin_user),
) -> Dict[str, Any]:
    """
    List every passport record with its owner's contact details.
    """
    passports = []
    for record, user in passport_manager.list_all():
        item = PassportWithOwner.model_validate(record)
        item.email, item.name, item.phone = user.email, user.name, user.phone
        passports.append(item)
    return {"passports": passports}


@router.get("/me", response_model=PassportEnvelope)
def get_my_passport(
    passport_manager: PassportManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Get the signed-in user's passport details.
    """
    record = passport_manager.get_mine(current_user.id)
    return {"passport": PassportResponse.model_validate(record)}


@router.put("/me", response_model=PassportEnvelope)
def update_my_passport(
    passport_manager: PassportManagerDep,
    form: FormData = Depends(read_form),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Partially update passport details.

    Fields left out of the form or sent empty are unchanged; fields named
    in clear_fields are cleared.
    """
    patch = PassportPatch.from_form(form)
    record = passport_manager.update(current_user.id, patch, _uploaded_files(form))
    return {
        "message": "Passport updated successfully",
        "passport": PassportResponse.model_validate(record),
    }


@router.delete("/{passport_id}")
def delete_passport(
    passport_id: int,
    passport_manager: PassportManagerDep,
    admin_user: CurrentUser = Depends(get_current_admin_user),
) -> Dict[str, str]:
    """
    Delete a passport record and its stored files.
    """
    passport_manager.delete(passport_id)
    return {"message": "Passport record deleted successfully"}
