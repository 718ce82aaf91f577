from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from storefront.api.dependencies import AuthServiceDep
from storefront.core.auth import AdminUser, CurrentUser
from storefront.core.rate_limit import (
    client_address,
    enforce_auth_rate_limit,
    enforce_rate_limit,
)
from storefront.schemas.user import (
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.post(
    "/login",
    response_model=SessionResponse,
    dependencies=[Depends(enforce_auth_rate_limit)],
)
def login(payload: LoginRequest, request: Request, auth: AuthServiceDep) -> SessionResponse:
    """Authenticate with email and password.

    Repeated failures from the same client address lock the endpoint for that
    address (429) before credentials are checked again.
    """
    return auth.login(payload.email, payload.password, client_key=client_address(request))


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_auth_rate_limit)],
)
def register(payload: RegisterRequest, auth: AuthServiceDep) -> SessionResponse:
    return auth.register(payload.name, payload.email, payload.password)


@router.get("/profile", response_model=UserResponse)
def get_profile(user: CurrentUser, auth: AuthServiceDep) -> UserResponse:
    return auth.get_profile(user.id)


@router.put("/profile", response_model=SessionResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: CurrentUser,
    auth: AuthServiceDep,
) -> SessionResponse:
    return auth.update_profile(user.id, payload)


@router.post("/admin", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def create_admin(payload: RegisterRequest, admin: AdminUser, auth: AuthServiceDep) -> SessionResponse:
    """Create another administrator account (admins only)."""
    return auth.register(payload.name, payload.email, payload.password, is_admin=True)
