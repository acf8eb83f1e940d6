import uuid
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("JWT_HANDLER")

def create_access_token(data: dict, expires_minutes: int | None = None):
    """
    Creates a signed JWT with expiry and a unique jti.
    Returns (token, jti).
    """
    logger.debug("Access token creation requested")
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = now + timedelta(minutes=minutes)
    jti = uuid.uuid4().hex
    to_encode.update({"exp": expire, "iat": now, "jti": jti})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    logger.debug(f"Access token created with expiry {expire}")
    return encoded_jwt, jti

def decode_access_token(token: str) -> dict:
    """
    Decode JWT token and return payload.
    Raises ValueError if invalid or expired.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        raise ValueError("Invalid token") from e
