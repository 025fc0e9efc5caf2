# inkblog/routes/user.py

"""
User Routes.

Summary
-------
Endpoints include:
  - Registration code and registration
  - Login and logout
  - Current user profile read and update
  - Public website configuration

Rate Limiting
-------------
Registration and login are limited to five requests per minute per client.
"""

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED

from inkblog.dependencies import CurrentUserDep, UserServiceDep
from inkblog.managers import limiter
from inkblog.managers.rate_limiter import AUTH_LIMIT
from inkblog.schemas import (
    LoginRequest,
    MessageResponse,
    ProfileUpdate,
    RegisterCodeRequest,
    RegisterRequest,
    Token,
    UserPublic,
    WebsiteConfig,
)

router = APIRouter(prefix="/users", tags=["👤 Users"])


@router.post(
    "/register-code",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Send a registration code",
    responses={
        409: {
            "description": "Already registered",
            "content": {"application/json": {"example": {"detail": "User 'a@b.io' already exists"}}},
        },
    },
    operation_id="users_register_code",
)
@limiter.limit(AUTH_LIMIT)
async def send_register_code(
    request: Request,
    body: RegisterCodeRequest,
    service: UserServiceDep,
) -> MessageResponse:
    """
    Issue a one-minute registration code for an email address.

    Parameters
    ----------
    request : Request
        Current request context.
    body : RegisterCodeRequest
        Address to register.
    service : UserService
        User service.

    Returns
    -------
    MessageResponse
        Confirmation message.
    """
    await service.send_register_code(body.username)
    return MessageResponse(message="Verification code sent")


@router.post(
    "/register",
    response_class=ORJSONResponse,
    response_model=UserPublic,
    status_code=HTTP_201_CREATED,
    summary="Register",
    responses={
        400: {
            "description": "Wrong or expired code",
            "content": {
                "application/json": {"example": {"detail": "Invalid or expired verification code"}},
            },
        },
    },
    operation_id="users_register",
)
@limiter.limit(AUTH_LIMIT)
async def register(request: Request, body: RegisterRequest, service: UserServiceDep) -> UserPublic:
    return await service.register(body)


@router.post(
    "/login",
    response_class=ORJSONResponse,
    response_model=Token,
    summary="Log in",
    responses={
        401: {
            "description": "Invalid credentials",
            "content": {"application/json": {"example": {"detail": "Invalid username or password"}}},
        },
    },
    operation_id="users_login",
)
@limiter.limit(AUTH_LIMIT)
async def login(request: Request, body: LoginRequest, service: UserServiceDep) -> Token:
    """
    Exchange credentials for a bearer token.

    A successful login ends any earlier session of the same user.

    Returns
    -------
    Token
        Bearer token for the ``Authorization`` header.
    """
    return await service.login(body)


@router.post(
    "/logout",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Log out",
    operation_id="users_logout",
)
async def logout(user: CurrentUserDep, service: UserServiceDep) -> MessageResponse:
    await service.logout(user.username)
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_class=ORJSONResponse,
    response_model=UserPublic,
    summary="Current user",
    operation_id="users_me",
)
async def me(user: CurrentUserDep) -> UserPublic:
    return UserPublic.model_validate(user)


@router.patch(
    "/me",
    response_class=ORJSONResponse,
    response_model=UserPublic,
    summary="Update the current user's profile",
    operation_id="users_me_update",
)
@limiter.limit("10/minute")
async def update_me(
    request: Request,
    body: ProfileUpdate,
    user: CurrentUserDep,
    service: UserServiceDep,
) -> UserPublic:
    return await service.update_profile(user.username, body)


@router.get(
    "/website-config",
    response_class=ORJSONResponse,
    response_model=WebsiteConfig,
    summary="Public site profile",
    operation_id="users_website_config",
)
async def website_config(service: UserServiceDep) -> WebsiteConfig:
    return await service.website_config()
