"""Account endpoints (/auth/register, /auth/login, /auth/token, /auth/me).

register and login return { access_token, token_type, user } so a client
can hold the token in memory and go straight to the dashboard.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from marketplace.api.dependencies import ReposDep, UserDep
from marketplace.core.config import SETTINGS
from marketplace.models.user import User
from marketplace.services import auth_service, token_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# --- Request / Response schemas -------------------------------------------


class LoginIn(BaseModel):
    email: str
    password: str


class RegisterIn(BaseModel):
    name: str
    email: str
    password: str


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    roles: list[str]


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(TokenOut):
    user: UserOut


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=str(user.id), email=user.email, name=user.name, roles=list(user.roles)
    )


def _issue_token(user: User) -> str:
    return token_service.create_access_token(
        sub=str(user.id), roles=list(user.roles) or ["user"]
    )


async def _authenticate_or_401(repos, email: str, password: str) -> User:
    user = await auth_service.authenticate_user(repos.users, email, password)
    if user is None:
        logger.warning("Login failed  email=%s", email.strip().lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("Login succeeded  user_id=%s", user.id)
    return user


# --- POST /auth/register --------------------------------------------------


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(payload: RegisterIn, repos: ReposDep) -> AuthResponse:
    try:
        user = await auth_service.register_user(
            repos.users,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            admin_emails=SETTINGS.admin_emails,
        )
    except auth_service.UserValidationError as e:
        logger.warning("Registration rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from None
    except auth_service.UserAlreadyExistsError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists",
        ) from None

    return AuthResponse(access_token=_issue_token(user), user=_user_out(user))


# --- POST /auth/login -----------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginIn, repos: ReposDep) -> AuthResponse:
    user = await _authenticate_or_401(repos, payload.email, payload.password)
    return AuthResponse(access_token=_issue_token(user), user=_user_out(user))


# --- POST /auth/token (OAuth2 password form, used by /docs) ---------------


@router.post("/token", response_model=TokenOut)
async def token(
    form: Annotated[OAuth2PasswordRequestForm, Depends()],
    repos: ReposDep,
) -> TokenOut:
    user = await _authenticate_or_401(repos, form.username, form.password)
    return TokenOut(access_token=_issue_token(user))


# --- GET /auth/me ---------------------------------------------------------


@router.get("/me", response_model=UserOut)
async def me(principal: UserDep, repos: ReposDep) -> UserOut:
    try:
        user_id = UUID(principal.user_id)
    except ValueError:
        user_id = None

    user = await repos.users.get_by_id(user_id) if user_id is not None else None
    if user is None or not user.is_active:
        logger.warning("Token subject has no account  user=%s", principal.user_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return _user_out(user)
