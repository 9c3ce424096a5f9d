from collections.abc import Callable, Iterable
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from jose import JWTError, jwt
from starlette.requests import Request

from bos.core.config import get_settings

ADMIN_ROLE = "admin"


@dataclass
class AuthUser:
    sub: str
    roles: list[str]


def _anonymous() -> AuthUser:
    return AuthUser(sub="anonymous", roles=["guest"])


async def get_current_user(request: Request) -> AuthUser:
    auth_header = request.headers.get("authorization", "")
    token = auth_header.removeprefix("Bearer ").strip() if auth_header.startswith("Bearer ") else ""
    if not token:
        return _anonymous()

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return _anonymous()

    subject = str(payload.get("sub") or "anonymous")
    raw_roles = payload.get("roles")
    roles = [str(role) for role in raw_roles] if isinstance(raw_roles, list) else ["user"]

    context = getattr(request.state, "context", None)
    if context is not None:
        context.user_id = subject
    return AuthUser(sub=subject, roles=roles)


def missing_permissions(user: AuthUser, permissions: Iterable[str]) -> list[str]:
    """Rights from ``permissions`` the user lacks; admins lack none."""

    granted = set(user.roles)
    if ADMIN_ROLE in granted:
        return []
    return [permission for permission in permissions if permission not in granted]


def require_permissions(*permissions: str) -> Callable[[AuthUser], AuthUser]:
    async def checker(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        missing = missing_permissions(user, permissions)
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return checker
