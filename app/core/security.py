import logging
import bcrypt
from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from app.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_DAYS, BCRYPT_ROUNDS
from app.core.exceptions import InvalidToken, TokenExpired

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72

# Only consulted for hashes bcrypt itself refuses to read (older passlib-era rows)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _truncate_password(password: str) -> bytes:
    """
    Encode a password for bcrypt, cutting it to 72 bytes on a character boundary.

    Validation rejects longer passwords before they get here; this only keeps
    bcrypt from raising if one slips through.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= BCRYPT_MAX_BYTES:
        return password_bytes
    logger.warning("Password exceeds 72 bytes, truncating before hashing")
    truncated = password_bytes[:BCRYPT_MAX_BYTES]
    # Drop a partial trailing UTF-8 sequence (a code point is at most 4 bytes)
    for cut in range(0, 4):
        try:
            return truncated[:len(truncated) - cut].decode("utf-8").encode("utf-8")
        except UnicodeDecodeError:
            continue
    return truncated


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt at the configured cost factor.

    Args:
        password: Plain text password (max 72 bytes in UTF-8)

    Returns:
        Salted bcrypt hash as a string

    Raises:
        ValueError: If the password cannot be hashed
    """
    try:
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(_truncate_password(password), salt).decode("utf-8")
    except (TypeError, ValueError) as e:
        logger.error(f"Password hashing failed: {e}")
        raise ValueError("Invalid password") from e


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """
    Verify a password against its stored hash.

    Returns False for a missing or unreadable hash instead of raising.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_truncate_password(password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        try:
            return pwd_context.verify(password, hashed)
        except Exception as e:
            logger.warning(f"Password verification failed for unreadable hash: {e}")
            return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a bearer token for user_id, valid for 30 days unless told otherwise."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Validate a bearer token and return the user id it carries.

    Raises:
        TokenExpired: The token's exp claim is in the past
        InvalidToken: Bad signature, malformed token or missing subject
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise InvalidToken()

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidToken()
    return user_id
