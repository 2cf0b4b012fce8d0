from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from api.user.user_controller import login_user, get_profile
from api.user.user_schema import LoginRequest, TokenResponse, UserOut
from utils.deps import login_rate_limit

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ─── Authentication Routes ─────────────────────────────────────────────────────
@router.post(
    "/login",
    response_model=TokenResponse,
    dependencies=[Depends(login_rate_limit)],
)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """Sign in as ADMIN or WORKER."""
    return login_user(credentials, db)


@router.post(
    "/login-admin",
    response_model=TokenResponse,
    dependencies=[Depends(login_rate_limit)],
)
def login_admin(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """Sign in restricted to ADMIN accounts."""
    return login_user(credentials, db, admin_only=True)


@router.get("/me", response_model=UserOut)
def me(
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware)
):
    return get_profile(db, current_user)
