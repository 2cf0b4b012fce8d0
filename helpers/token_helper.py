import jwt
import datetime
from typing import Any, Dict

from config.settings import settings  # must define SECRET_KEY and ALGORITHM
from api.user.user_model import User


def create_access_token(
    payload: Dict[str, Any],
    expires_hours: int = settings.ACCESS_TOKEN_EXPIRE_HOURS,
) -> str:
    """
    Generate a JWT access token with the given payload and expiration.
    """
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=expires_hours)
    to_encode = payload.copy()
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user: User, expires_hours: int = settings.ACCESS_TOKEN_EXPIRE_HOURS) -> str:
    """
    JWT for a User, embedding:
      - sub   (user id)
      - role  (ADMIN | WORKER)
      - email
      - exp   (handled by create_access_token)
    """
    token_payload: Dict[str, Any] = {
        "sub":   user.id,
        "role":  user.role.value,
        "email": user.email,
    }
    return create_access_token(token_payload, expires_hours)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
