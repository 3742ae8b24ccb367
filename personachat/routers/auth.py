import logging

from fastapi import APIRouter, Depends

from personachat.core.dependencies import get_auth_service
from personachat.schemas.auth import LoginRequest, SignupRequest, SuccessResponse, Token, VerifyEmailRequest
from personachat.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/signup", response_model=SuccessResponse)
async def signup(
    request: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new user.

    A default character and preference row are created with the account.
    """
    logger.info(f"Signup request received for username '{request.username}'")
    await auth_service.signup(request)
    return SuccessResponse()


@router.post("/login", response_model=Token)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate with an email or username and get a bearer token.
    """
    token = await auth_service.login(request.identifier, request.password)
    return Token(token=token)


@router.post("/verify-email", response_model=SuccessResponse)
async def verify_email(
    request: VerifyEmailRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.verify_email(request.token)
    return SuccessResponse(message="Email verified")
