from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session
from typing import Dict, Optional
from pathlib import Path
import os
import logging
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from config import UPLOAD_DIR
from db import get_db
from models.auth.user_models import User
from services.avatar import is_valid_avatar_image
from services.current_user import get_current_user
from services.file_validation import FileInfo, get_file_validation_error
from services.password_policy import (
    get_password_strength,
    check_requirements,
    policy_violation_detail,
    validate_change_form,
    validate_password_strength,
)
from services.security import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# Schemas
class PasswordChangeBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None


class PasswordStrengthBody(BaseModel):
    password: str = ""


# Change password (all authenticated users)
@router.post("/change-password", response_model=dict)
def change_password(
    payload: PasswordChangeBody,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not payload.current_password or not payload.new_password:
        raise HTTPException(status_code=400, detail="Current password and new password are required")

    if payload.confirm_password is not None and payload.confirm_password != payload.new_password:
        raise HTTPException(status_code=400, detail="Passwords must match")

    if not validate_password_strength(payload.new_password)["is_valid"]:
        raise HTTPException(status_code=400, detail=policy_violation_detail(payload.new_password))

    if not verify_password(payload.current_password, current_user.password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    if verify_password(payload.new_password, current_user.password):
        raise HTTPException(status_code=400, detail="New password must be different from current password")

    current_user.password = hash_password(payload.new_password)
    db.commit()
    logger.info(f"Password updated for user {current_user.id}")
    return {"message": "Password updated successfully"}


# Live strength feedback for a password being typed
@router.post("/password-strength", response_model=dict)
def password_strength(payload: PasswordStrengthBody):
    return {
        **get_password_strength(payload.password),
        "requirements": check_requirements(payload.password),
        "isValid": validate_password_strength(payload.password)["is_valid"],
    }


# Field-level validation of the change-password form, without submitting it
@router.post("/validate-password-change", response_model=dict)
def validate_password_change(payload: PasswordChangeBody):
    values: Dict[str, str] = {
        "currentPassword": payload.current_password or "",
        "newPassword": payload.new_password or "",
        "confirmPassword": payload.confirm_password or "",
    }
    errors = validate_change_form(values)
    return {
        "isValid": not errors,
        "errors": errors,
        "strength": get_password_strength(values["newPassword"]),
    }


# Upload avatar for the current user
@router.post("/avatar", response_model=dict)
async def upload_avatar(
    avatar: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content = await avatar.read()
    info = FileInfo(filename=avatar.filename or "avatar", content_type=avatar.content_type, size=len(content))
    error = get_file_validation_error(info, allowed_types="avatars", file_type="avatar")
    if error:
        raise HTTPException(status_code=400, detail=error)
    if not is_valid_avatar_image(content, avatar.content_type):
        raise HTTPException(status_code=400, detail="Uploaded file is not a valid image")

    uploads_dir = Path(UPLOAD_DIR) / "avatars" / str(current_user.id)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    file_ext = os.path.splitext(avatar.filename or "")[1] or ".png"
    file_path = uploads_dir / f"avatar{file_ext.lower()}"
    with open(file_path, "wb") as buffer:
        buffer.write(content)

    current_user.avatar = file_path.as_posix()
    db.commit()
    return {"message": "Avatar uploaded successfully", "avatar": current_user.avatar}
