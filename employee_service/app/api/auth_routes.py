from fastapi import APIRouter, Depends, status
from ..schemas import (
    AccountOut,
    AuthResponse,
    CreateUserRequest,
    LinkUserRequest,
    LoginRequest,
    ProfilePhotoRequest,
    RegisterRequest,
)
from ..models import User
from ..services.auth_service import auth_service
from .dependencies import get_current_account, require_admin


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest):
    return await auth_service.register(payload)


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest):
    return await auth_service.login(payload)


@router.get("/me", response_model=AccountOut)
async def me(account: User = Depends(get_current_account)):
    """Current account with its linked employee, if any"""
    return account


@router.post(
    "/create-user",
    response_model=AccountOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_user(payload: CreateUserRequest):
    """Create an account (admin only), optionally linked to an employee"""
    return await auth_service.create_user(payload)


@router.post("/link-user", response_model=AccountOut, dependencies=[Depends(require_admin)])
async def link_user(payload: LinkUserRequest):
    """Link an account to an employee; employee_id null unlinks"""
    return await auth_service.link_user(payload)


@router.put("/profile-photo", response_model=AccountOut)
async def set_profile_photo(payload: ProfilePhotoRequest, account: User = Depends(get_current_account)):
    return await auth_service.set_profile_photo(account.id, payload.photo_url)


@router.delete("/profile-photo", response_model=AccountOut)
async def delete_profile_photo(account: User = Depends(get_current_account)):
    return await auth_service.set_profile_photo(account.id, None)
