"""Caller identity for API routes

The upstream identity service authenticates the user and forwards the
result in X-User-Id, X-User-Roles and X-Contact-Id headers. Routes turn
them into a CallerContext and apply the clinic's role checks.
"""

from typing import Optional
from fastapi import Depends, Header, Request, status
from libs.result import Error
from src.api.error import ClientError
from src.app.use_cases.billing.dtos import CallerContext

STAFF_ROLES = ("admin", "doctor")
ADMIN_ROLES = ("admin",)


def _auth_disabled(request: Request) -> bool:
    config = getattr(request.app.state, "config", None)
    return bool(getattr(config, "AUTH_DISABLED", False))


async def get_caller(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    x_user_roles: Optional[str] = Header(default=None),
    x_contact_id: Optional[int] = Header(default=None),
) -> CallerContext:
    if not x_user_id:
        if _auth_disabled(request):
            return CallerContext(caller_id="anonymous", roles=list(ADMIN_ROLES))
        raise ClientError(
            Error(code="UNAUTHENTICATED", message="Missing caller identity"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    roles = [role.strip() for role in (x_user_roles or "").split(",") if role.strip()]
    return CallerContext(caller_id=x_user_id, roles=roles, contact_id=x_contact_id)


def require_roles(*roles: str):
    """Dependency factory: the caller must hold one of the given roles"""

    async def dependency(
        request: Request, caller: CallerContext = Depends(get_caller)
    ) -> CallerContext:
        if _auth_disabled(request) or caller.has_any_role(*roles):
            return caller
        raise ClientError(
            Error(
                code="FORBIDDEN",
                message=f"Requires one of the roles: {', '.join(roles)}",
            ),
            status_code=status.HTTP_403_FORBIDDEN,
        )

    return dependency


def ensure_can_read_client(
    request: Request, caller: CallerContext, client_id: int
) -> None:
    """Staff read every invoice; a client only the invoices addressed to them"""
    if has_staff_access(request, caller):
        return
    if caller.contact_id is not None and caller.contact_id == client_id:
        return
    raise ClientError(
        Error(code="FORBIDDEN", message="Invoice belongs to another client"),
        status_code=status.HTTP_403_FORBIDDEN,
    )


def has_staff_access(request: Request, caller: CallerContext) -> bool:
    return _auth_disabled(request) or caller.has_any_role(*STAFF_ROLES)
