"""
Student sign-up and login.
"""

from fastapi import APIRouter, Depends, status

from campus_events.api.deps import get_auth_service
from campus_events.models.account import ROLE_STUDENT
from campus_events.schemas.account import AccountResponse, AuthResponse, LoginRequest, StudentCreate
from campus_events.services.auth_service import AuthService

router = APIRouter(prefix="/students", tags=["Students"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def student_signup(data: StudentCreate, service: AuthService = Depends(get_auth_service)):
    account, token = await service.register_student(data)
    return AuthResponse(token=token, account=AccountResponse.model_validate(account))


@router.post("/login", response_model=AuthResponse)
async def student_login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)):
    account, token = await service.login(ROLE_STUDENT, credentials)
    return AuthResponse(token=token, account=AccountResponse.model_validate(account))
