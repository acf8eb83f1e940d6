from fastapi import APIRouter, Body, Depends
from typing import Optional
from core.dependencies import get_current_user, CurrentUser
from core.exceptions import Unauthorized, ValidationError
from models.user import UserCreate, UserLogin, AuthResponse
from services.auth_service import issue_token, revoke_token
from services.metrics_service import metrics
from services.user_service import create_user, authenticate, to_user_out
from utils.logger import get_logger

logger = get_logger("AUTH_ROUTE")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

@router.post("", response_model=AuthResponse, response_model_exclude_none=True)
async def register(user: Optional[UserCreate] = Body(None)):
    """Register a new diner and log them in."""
    if user is None or not user.name or not user.email or not user.password:
        raise ValidationError("name, email, and password are required")
    logger.info(f"Attempting to register user with email: {user.email}")
    created = await create_user(user.name, user.email, user.password)
    token = await issue_token(created)
    return {"user": to_user_out(created), "token": token}

@router.put("", response_model=AuthResponse, response_model_exclude_none=True)
async def login(user: UserLogin):
    logger.info(f"Login attempt for: {user.email}")
    db_user = await authenticate(user.email, user.password)
    if not db_user:
        metrics.record_auth_attempt(False)
        raise Unauthorized("invalid credentials")
    token = await issue_token(db_user)
    metrics.record_auth_attempt(True)
    logger.info(f"Login successful: {user.email}")
    return {"user": to_user_out(db_user), "token": token}

@router.delete("")
async def logout(current_user: CurrentUser = Depends(get_current_user)):
    await revoke_token(current_user.jti)
    metrics.record_logout()
    logger.info(f"Logout: {current_user.email}")
    return {"message": "logout successful"}
