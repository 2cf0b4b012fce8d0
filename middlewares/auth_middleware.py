from typing import Optional

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.orm import Session
from config.database import get_db
from helpers.token_helper import decode_access_token
from api.user.user_model import User

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def auth_middleware(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Missing bearer token")

    try:
        decoded = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        # expired token → 401
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        # any other decode error → 401
        raise _unauthorized("Invalid token")

    user_id = decoded.get("sub")
    if not user_id:
        # token was structurally OK but payload missing
        raise _unauthorized("Invalid token payload")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise _unauthorized("User not found")
    if not user.active:
        raise _unauthorized("User is inactive")

    return {
        "id": user.id,
        "email": user.email,
        "role": user.role.value,
        "full_name": user.full_name,
    }
