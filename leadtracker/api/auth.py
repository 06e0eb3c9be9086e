"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.core.exceptions import UnauthorizedError
from leadtracker.database import get_session
from leadtracker.schemas.auth import LoginRequest, LoginResponse
from leadtracker.schemas.user import UserResponse
from leadtracker.services.auth_service import AuthService

router = APIRouter(prefix=settings.API_PREFIX, tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_session)
):
    """Login with username and password."""
    auth_service = AuthService(session)
    try:
        user, token = await auth_service.login(request.username, request.password)
    except UnauthorizedError as e:
        body = LoginResponse(success=False, message=e.message)
        return JSONResponse(status_code=401, content=body.model_dump(by_alias=True))

    return LoginResponse(
        success=True,
        user=UserResponse.model_validate(user),
        message="Login successful",
        access_token=token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )
