"""
Credential store: user identity, password hashes and reset codes.

Every function takes the SQLAlchemy session it works on; nothing here holds
a store handle of its own.
"""
import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import PASSWORD_RESET_OTP_MINUTES
from app.core.exceptions import DuplicateEmail, InternalError, InvalidCredentials, NotFound, ValidationError
from app.core.security import hash_password, verify_password
from app.db.models.application import Application
from app.db.models.user import User
from app.schemas.auth import UserResponse
from app.services.timestamps import next_timestamp, utcnow

logger = logging.getLogger(__name__)

INVALID_OTP_MESSAGE = "Invalid or expired OTP"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def serialize_user(user: User) -> dict:
    """Public JSON view of a user (no password hash, no reset state)."""
    return UserResponse.model_validate(user).model_dump(by_alias=True, mode="json")


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise InternalError() from e


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def find_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user(db: Session, user_id: str) -> User:
    user = find_by_id(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def create_user(db: Session, email: str, raw_password: str, name: str) -> User:
    """
    Register a new user.

    Raises:
        DuplicateEmail: A user with this email (ignoring case) already exists
    """
    email = normalize_email(email)
    if find_by_email(db, email):
        raise DuplicateEmail()

    now = utcnow()
    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(raw_password),
        avatar="",
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise DuplicateEmail()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create user: {e}", exc_info=True)
        raise InternalError() from e
    db.refresh(user)

    logger.info(f"User registered: user_id={user.id}")
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Return the user whose credentials match.

    Unknown email and wrong password fail the same way.
    """
    user = find_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


def update_password(db: Session, user_id: str, new_raw_password: str) -> User:
    user = get_user(db, user_id)
    user.password_hash = hash_password(new_raw_password)
    user.updated_at = next_timestamp(user.updated_at)
    _commit(db, "update password")
    db.refresh(user)
    logger.info(f"Password updated: user_id={user.id}")
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise InvalidCredentials("Current password is incorrect")
    return update_password(db, user.id, new_password)


def generate_reset_code(db: Session, user_id: str, now: Optional[datetime] = None) -> str:
    """
    Issue a 6-digit reset code valid for PASSWORD_RESET_OTP_MINUTES.

    A new code replaces any earlier one. The caller delivers it out of band.
    """
    user = get_user(db, user_id)
    now = now or utcnow()
    code = str(100000 + secrets.randbelow(900000))

    user.password_reset_otp = code
    user.password_reset_expires = now + timedelta(minutes=PASSWORD_RESET_OTP_MINUTES)
    user.updated_at = next_timestamp(user.updated_at, now)
    _commit(db, "store reset code")

    logger.info(f"Password reset code issued: user_id={user.id}")
    return code


def verify_reset_code(db: Session, user_id: str, code: str, now: Optional[datetime] = None) -> bool:
    """True only if code matches the stored one and it has not yet expired."""
    user = find_by_id(db, user_id)
    if not user or not user.password_reset_otp or not user.password_reset_expires:
        return False
    now = now or utcnow()
    if now >= user.password_reset_expires:
        return False
    code = str(code)
    if not code.isascii():
        return False
    return hmac.compare_digest(user.password_reset_otp.encode("ascii"), code.encode("ascii"))


def consume_reset_code(db: Session, user_id: str) -> None:
    user = get_user(db, user_id)
    user.password_reset_otp = None
    user.password_reset_expires = None
    user.updated_at = next_timestamp(user.updated_at)
    _commit(db, "clear reset code")


def reset_password(
    db: Session,
    email: str,
    code: str,
    new_password: str,
    now: Optional[datetime] = None,
) -> User:
    """
    Set a new password using a reset code.

    An unknown email fails exactly like a wrong code.
    """
    user = find_by_email(db, email)
    if not user or not verify_reset_code(db, user.id, code, now=now):
        raise ValidationError.for_field("otp", INVALID_OTP_MESSAGE)

    user.password_hash = hash_password(new_password)
    user.password_reset_otp = None
    user.password_reset_expires = None
    user.updated_at = next_timestamp(user.updated_at)
    _commit(db, "reset password")
    logger.info(f"Password reset for user_id={user.id}")
    return user


def update_profile(db: Session, user: User, name: Optional[str] = None, avatar: Optional[str] = None) -> User:
    if name is not None:
        user.name = name.strip()
    if avatar is not None:
        user.avatar = avatar.strip()
    user.updated_at = next_timestamp(user.updated_at)
    _commit(db, "update profile")
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: str) -> None:
    """Hard-delete a user together with every application they own."""
    user = get_user(db, user_id)
    deleted = db.query(Application).filter(Application.user_id == user.id).delete(synchronize_session=False)
    db.delete(user)
    _commit(db, "delete account")
    logger.info(f"Account deleted: user_id={user_id}, applications_removed={deleted}")
