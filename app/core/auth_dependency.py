from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.exceptions import AuthError, InvalidToken
from app.core.security import decode_access_token
from app.db.models.user import User
from app.db.session import get_db
from app.services.user_service import find_by_id

# auto_error=False so a missing header is rendered through AuthError like every other 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_current_user_id(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """Get the user id carried by the bearer token."""
    if not token:
        raise AuthError("Access denied. No token provided.")
    return decode_access_token(token)


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    """Get current User object from the bearer token."""
    user = find_by_id(db, user_id)
    if not user:
        raise InvalidToken("Token is not valid. User not found.")
    return user
