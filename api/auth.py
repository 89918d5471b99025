from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from api.models import UserCreate, UserResponse, LoginResponse
from api.dependencies import get_user_service, get_current_user
from api.rate_limit import limiter
from api.services.user_service import UserService, UserServiceException, ACCESS_TOKEN_COOKIE
from db.models.user import User
import os

router = APIRouter()


def _set_session_cookie(response: Response, token: str, max_age: int):
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=os.getenv("ENVIRONMENT") == "production",
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/hour")  # Strict limit for signup
def register(
    request: Request,
    response: Response,
    payload: UserCreate,
    user_service: UserService = Depends(get_user_service),
):
    try:
        user = user_service.signup(
            payload.email,
            payload.password,
            username=payload.username,
            full_name=payload.full_name or "",
        )
    except UserServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = user_service.login(payload.username, payload.password)
    _set_session_cookie(response, session["access_token"], session["expires_in"])
    return user


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")  # Prevent brute force
def login(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_service: UserService = Depends(get_user_service),
):
    try:
        session = user_service.login(form_data.username, form_data.password)
    except UserServiceException as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    _set_session_cookie(response, session["access_token"], session["expires_in"])
    return {
        "access_token": session["access_token"],
        "token_type": session["token_type"],
        "user": session["user"],
    }


@router.post("/logout", status_code=status.HTTP_200_OK)
def logout(response: Response):
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return {"status": "logged_out"}


@router.get("/user", response_model=UserResponse)
def current_user(current_user: User = Depends(get_current_user)):
    return current_user
