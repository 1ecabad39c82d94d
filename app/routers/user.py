"""
User router - authentication and user administration endpoints.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.access_policy import Actor
from app.core.dependencies import get_current_actor, get_current_user, get_user_service
from app.models.user import User
from app.schemas.user import (
    AgencyMembershipRequest,
    BootstrapAdminRequest,
    BrokerAssignmentRequest,
    LoginRequest,
    LoginResponse,
    PasswordChange,
    UserCreate,
    UserInactivate,
    UserRead,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/bootstrap", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def bootstrap_admin(
    data: BootstrapAdminRequest,
    service: UserService = Depends(get_user_service),
):
    """
    Create the first Admin user.

    Only available while the user directory is empty; no token required.
    """
    return await service.bootstrap_admin(data)


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    """Authenticate user and return JWT access token."""
    return await service.login(credentials)


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    data: UserCreate,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """
    Register a new user.

    The caller may only assign roles their own role allows.
    """
    return await service.register(actor, data)


@router.get("", response_model=List[UserRead])
async def list_users(
    status_filter: Optional[str] = Query("ativo", alias="status"),
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """List the users visible to the caller."""
    return await service.list_users(actor, status=status_filter)


@router.get("/me", response_model=UserRead)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get information about the currently authenticated user."""
    return current_user


@router.post("/assign-agency", response_model=UserRead)
async def assign_agency(
    data: AgencyMembershipRequest,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return await service.assign_agency(actor, data)


@router.post("/remove-agency", response_model=UserRead)
async def remove_agency(
    data: AgencyMembershipRequest,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return await service.remove_agency(actor, data)


@router.post("/assign-broker", response_model=UserRead)
async def assign_broker(
    data: BrokerAssignmentRequest,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return await service.assign_broker(actor, data)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return await service.get_user(actor, user_id)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """
    Update a user's information.

    Users may edit nome, email and telefone on their own record; other
    changes need a manager of the target user.
    """
    return await service.update_user(actor, user_id, data)


@router.put("/{user_id}/inactivate", response_model=UserRead)
async def inactivate_user(
    user_id: UUID,
    data: Optional[UserInactivate] = None,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return await service.inactivate_user(actor, user_id, data.motivo if data else None)


@router.put("/{user_id}/reactivate", response_model=UserRead)
async def reactivate_user(
    user_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return await service.reactivate_user(actor, user_id)


@router.put("/{user_id}/password")
async def change_password(
    user_id: UUID,
    data: PasswordChange,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    await service.change_password(actor, user_id, data)
    return {"message": "Senha alterada com sucesso"}
