"""
Authentication endpoints: registration, login, password reset and profile.
"""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user
from app.core.rate_limit import auth_rate_limit
from app.core.security import create_access_token
from app.db.models.user import User
from app.db.session import get_db
from app.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
)
from app.schemas.common import envelope
from app.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a reset code has been sent"


def _session_payload(user: User) -> dict:
    return {
        "user": user_service.serialize_user(user),
        "token": create_access_token(user.id),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = user_service.create_user(db, payload.email, payload.password, payload.name)
    return envelope(_session_payload(user), message="User registered successfully")


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = user_service.authenticate(db, payload.email, payload.password)
    logger.info(f"User logged in: user_id={user.id}")
    return envelope(_session_payload(user), message="Login successful")


@router.post("/forgot-password", dependencies=[Depends(auth_rate_limit)])
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Issue a reset code when the account exists.

    The response is identical either way so it cannot be used to probe for accounts.
    """
    user = user_service.find_by_email(db, payload.email)
    if user:
        user_service.generate_reset_code(db, user.id)
    else:
        logger.info("Password reset requested for unknown email")
    return envelope(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", dependencies=[Depends(auth_rate_limit)])
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user_service.reset_password(db, payload.email, payload.otp, payload.new_password)
    return envelope(message="Password has been reset successfully")


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_service.change_password(db, user, payload.current_password, payload.new_password)
    return envelope(message="Password changed successfully")


@router.get("/me")
def get_profile(user: User = Depends(get_current_user)):
    return envelope({"user": user_service.serialize_user(user)})


@router.put("/profile")
def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(db, user, name=payload.name, avatar=payload.avatar)
    return envelope({"user": user_service.serialize_user(user)}, message="Profile updated successfully")


@router.post("/logout")
def logout(user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy."""
    logger.info(f"User logged out: user_id={user.id}")
    return envelope(message="Logged out successfully")


@router.delete("/account")
def delete_account(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user_service.delete_user(db, user.id)
    return envelope(message="Account deleted successfully")
