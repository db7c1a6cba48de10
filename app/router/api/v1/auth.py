"""
Authentication router - signup/login/logout.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.dependencies import validate_session, get_current_token
from app.service.auth_service import AuthService
from app.schema.auth import UserRegister, UserLogin, LoginResponse, MessageResponse, UserInfo
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=UserInfo, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """Register a new user."""
    user = AuthService(db).register_user(user_data)
    return UserInfo.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Login and get a bearer token."""
    return AuthService(db).login(login_data)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    current_user: Dict[str, Any] = Depends(validate_session),
    db: Session = Depends(get_db)
):
    """Invalidate the token server-side and sign out from Cognito."""
    token = get_current_token(request)
    AuthService(db).logout(token, current_user)
    logger.info(f"User logged out: {current_user['email']}")
    return MessageResponse(message="Logged out successfully")
