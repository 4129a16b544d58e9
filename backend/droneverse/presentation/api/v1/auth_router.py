"""
Auth routes:
- POST /api/v1/auth/register
- POST /api/v1/auth/login
- POST /api/v1/auth/logout
- GET  /api/v1/auth/me

Login sets the signed session cookie; every other router resolves the user from it.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, EmailStr, Field

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.core.security.session import create_session_token, read_session_token
from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.user_entity import User
from droneverse.domain.exceptions import InvalidCredentialsError, PersistenceError, UserAlreadyExistsError
from droneverse.presentation.api.deps import current_user_id


router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
logger = get_logger("auth_router")


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: str
    name: str
    email: str

    @classmethod
    def from_entity(cls, user: User) -> "UserOut":
        return cls(id=user.id, name=user.name, email=user.email)


class UserResponse(BaseModel):
    user: UserOut


@router.post("/register", response_model=UserResponse, status_code=201)
def register(req: RegisterRequest):
    try:
        user = ServiceLocator.auth_usecase().register(req.name, req.email, req.password)
    except (UserAlreadyExistsError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        logger.error("Registration error: %s", e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
    return UserResponse(user=UserOut.from_entity(user))


@router.post("/login", response_model=UserResponse)
def login(req: LoginRequest, response: Response):
    try:
        user = ServiceLocator.auth_usecase().authenticate(req.email, req.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PersistenceError as e:
        logger.error("Login error: %s", e)
        raise HTTPException(status_code=500, detail="Internal Server Error")

    cfg = ServiceLocator.config()
    response.set_cookie(
        key=cfg.session_cookie_name,
        value=create_session_token(user.id, cfg.session_secret),
        max_age=cfg.session_max_age,
        httponly=True,
        samesite="strict",
        secure=cfg.app_env == "production",
    )
    return UserResponse(user=UserOut.from_entity(user))


@router.get("/me", response_model=UserResponse)
def me(user_id: str = Depends(current_user_id)):
    user = ServiceLocator.auth_usecase().get_user(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return UserResponse(user=UserOut.from_entity(user))


@router.post("/logout")
def logout(request: Request, response: Response):
    cfg = ServiceLocator.config()
    user_id = read_session_token(request.cookies.get(cfg.session_cookie_name), cfg.session_secret, cfg.session_max_age)
    if user_id:
        ServiceLocator.workspaces().drop(user_id)
    response.delete_cookie(cfg.session_cookie_name)
    return {"success": True, "message": "Logged out"}
