from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import LoginRequest, LoginResponse
from app.auth.services import login_user
from app.core.exceptions import ServiceError
from app.core.schemas import ApiResponse, success_response
from app.db.session import get_db

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

LOGIN_MESSAGES = {
    "admin": "Logged in as administrator",
    "student": "Logged in as student",
    "guardian": "Logged in as guardian",
}


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[LoginResponse]:
    try:
        result = await login_user(db, payload)
    except ServiceError as e:
        if e.status_code == http_status.HTTP_500_INTERNAL_SERVER_ERROR:
            raise HTTPException(status_code=e.status_code, detail="Internal server error")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return success_response(result, LOGIN_MESSAGES[result.role.value])


@router.post("/logout", response_model=ApiResponse[dict])
async def logout() -> ApiResponse[dict]:
    # Identity is held client-side; nothing to revoke on the server.
    return success_response({"message": "Logged out successfully"}, "Logged out")


@router.get("/session", response_model=ApiResponse[dict])
async def session() -> ApiResponse[dict]:
    raise HTTPException(
        status_code=http_status.HTTP_401_UNAUTHORIZED,
        detail="Session management not yet implemented",
    )
