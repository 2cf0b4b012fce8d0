from datetime import datetime
from typing import Callable

from fastapi import HTTPException, Request, status

from api.attendance.lateness import utc_now
from api.uploads.uploads_service import FileStorage, get_attendance_storage, get_menu_storage
from config.settings import settings
from utils.cache_utils import RateLimiter


def get_clock() -> Callable[[], datetime]:
    """Server clock used by the check-in path; overridden in tests."""
    return utc_now


def get_photo_storage() -> FileStorage:
    return get_attendance_storage()


def get_image_storage() -> FileStorage:
    return get_menu_storage()


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "") if settings.TRUST_PROXY_HEADERS else ""
    ip = forwarded.split(",")[0].strip() or (request.client.host if request.client else "unknown")
    return f"ip:{ip}"


def login_rate_limit(request: Request) -> None:
    """Throttle login attempts per client using the store created at startup."""
    limit, window = settings.login_rate_limit
    limiter = RateLimiter(
        request.app.state.rate_limit_store,
        limit=limit,
        window_seconds=window,
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    allowed, info = limiter.is_allowed(f"login:{client_key(request)}")
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts, try again later",
            headers={
                "Retry-After": str(info["reset_in"]),
                "X-RateLimit-Limit": str(info["limit"]),
                "X-RateLimit-Remaining": str(info["remaining"]),
            },
        )
