from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status

from app.auth.schemas import LoginRequest, LoginResponse
from app.auth.security import create_access_token
from app.auth.services import AuthenticationManager
from app.core.exceptions import ServiceError
from app.core.security_config import get_authentication_manager

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    manager: AuthenticationManager = Depends(get_authentication_manager),
) -> LoginResponse:
    try:
        auth = await manager.authenticate(payload)
    except ServiceError as e:
        if e.status_code in {
            http_status.HTTP_401_UNAUTHORIZED,
            http_status.HTTP_403_FORBIDDEN,
        }:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        raise HTTPException(status_code=e.status_code, detail="Internal server error")

    issued_at = datetime.now(timezone.utc)
    access_token = create_access_token(auth, issued_at=issued_at)
    return LoginResponse(
        access_token=access_token,
        user=auth.user,
        capabilities=auth.capabilities,
        issued_at=issued_at,
    )
