import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..application.services.auth_service import AuthService
from ..dependencies import get_auth_service
from ..exceptions import create_success_response
from ..schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.post("/register", status_code=201)
def register(body: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    user = auth_service.register(
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        specialization=body.specialization,
        photo_url=body.photo_url,
    )
    return JSONResponse(
        status_code=201,
        content=create_success_response(user.profile(), message="Registration successful"),
    )


@router.post("/login")
def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    user, token = auth_service.login(body.email, body.password, body.role)
    data = user.profile()
    data.update({"access_token": token, "token_type": "bearer"})
    return create_success_response(data, message="Login successful")
