from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from taskboard.core.config import settings
from taskboard.core.database import get_db
from taskboard.core.security import decode_access_token
from taskboard.models.user import User
from taskboard.schemas.auth import (
    AuthResponse,
    EmailAvailability,
    EmailCheck,
    ProfileUpdate,
    ProfileUpdated,
    Token,
    UserLogin,
    UserProfile,
    UserRegister,
)
from taskboard.schemas.task import MessageResponse
from taskboard.services.users import UserService, issue_token

router = APIRouter(prefix="/auth", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/token")

async def get_current_user(token: Annotated[str, Depends(oauth2_scheme)], db: AsyncSession = Depends(get_db)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise credentials_exception

    user = await db.get(User, int(subject))
    if user is None:
        raise credentials_exception
    return user

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserRegister, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).register(user_in)
    return AuthResponse(user=UserProfile.model_validate(user), token=issue_token(user))

@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).authenticate(credentials.email, credentials.password)
    return AuthResponse(user=UserProfile.model_validate(user), token=issue_token(user))

@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: AsyncSession = Depends(get_db)
):
    # OAuth2PasswordRequestForm uses 'username' field, but we treat it as email
    user = await UserService(db).authenticate(form_data.username, form_data.password)
    return {"access_token": issue_token(user), "token_type": "bearer"}

@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """Logout endpoint (client-side token removal)"""
    return {"message": "Logged out successfully"}

@router.get("/me", response_model=UserProfile)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user profile information"""
    return current_user

@router.put("/profile", response_model=ProfileUpdated)
async def update_profile(
    profile_update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update user profile (name and/or email)"""
    user = await UserService(db).update_profile(current_user, profile_update)
    return ProfileUpdated(message="Profile updated successfully", user=UserProfile.model_validate(user))

@router.post("/check-email", response_model=EmailAvailability)
async def check_email(payload: EmailCheck, db: AsyncSession = Depends(get_db)):
    available = await UserService(db).email_available(payload.email)
    return EmailAvailability(
        available=available,
        message="Email is available" if available else "Email is already taken",
    )
