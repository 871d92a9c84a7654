"""Authentication and account API endpoints.

Public endpoints:
    POST /api/auth/signup  : create a regular account (gets its own draft portfolio)
    POST /api/auth/login   : authenticate; returns a token and sets the session cookie
    POST /api/auth/logout  : clear the session and impersonation cookies
    GET  /api/auth/me      : current user

Account endpoints live under /api/admin so the impersonation cookie reaches them:
    GET  /api/admin/session         : actor plus resolved admin scope
    PUT  /api/admin/account         : change own name / email
    PUT  /api/admin/account/password: change own password
    GET  /api/admin/onboarding      : own onboarding step and whether it is still needed
    PUT  /api/admin/onboarding/step : move onboarding forward
    POST /api/admin/onboarding/complete: finish onboarding
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..core.auth import get_admin_context, require_actor
from ..core.config import settings
from ..core.token_factory import create_token
from ..database import get_db
from ..models import AdminUser, ONBOARDING_FINAL_STEP
from ..services import auth_service
from ..services.scope_service import Actor, AdminContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
account_router = APIRouter(prefix="/api/admin", tags=["Account"])


# --- Request/Response schemas ---


class SignupRequest(BaseModel):
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")
    name: Optional[str] = Field(None, description="Display name")

    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "alice@example.com", "password": "securepass", "name": "Alice"}]
        }
    }


class LoginRequest(BaseModel):
    email: str
    password: str


class AccountUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: str
    portfolio_id: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class AccountUpdateResponse(BaseModel):
    user: UserResponse
    email_changed: bool


class OnboardingStepUpdate(BaseModel):
    step: int = Field(..., description="0 not started, 1-5 in progress, 6 completed")


class OnboardingResponse(BaseModel):
    step: int
    completed: bool
    needs_onboarding: bool


class SessionResponse(BaseModel):
    user: UserResponse
    portfolio_id: Optional[str] = None
    is_impersonating: bool


# --- Helpers ---


def _user_response(user: AdminUser) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        portfolio_id=user.portfolio.id if user.portfolio is not None else None,
    )


def _actor_response(actor: Actor) -> UserResponse:
    return UserResponse(
        id=actor.id,
        email=actor.email,
        name=actor.name,
        role=actor.role,
        portfolio_id=actor.portfolio_id,
    )


def _start_session(response: Response, user: AdminUser) -> LoginResponse:
    token = create_token(
        subject=user.id,
        role=user.role,
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_hours=settings.session_ttl_hours,
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        path="/",
    )
    return LoginResponse(token=token, user=_user_response(user))


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


# --- Endpoints ---


@router.post(
    "/signup",
    response_model=LoginResponse,
    status_code=201,
    summary="Create an account",
    description="Creates a regular user with a private draft portfolio and signs it in.",
)
def signup(body: SignupRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.signup(db, body.email, body.password, body.name)
    return _start_session(response, user)


@router.post("/login", response_model=LoginResponse, summary="Log in")
def login(body: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, body.email, body.password, ip_address=_client_ip(request))
    logger.info("User logged in", extra={"user_id": user.id})
    return _start_session(response, user)


@router.post("/logout", summary="Log out")
def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name, path="/")
    response.delete_cookie(
        settings.impersonation_cookie_name, path=settings.impersonation_cookie_path
    )
    return {"status": "logged_out"}


@router.get("/me", response_model=UserResponse, summary="Current user")
def me(actor: Actor = Depends(require_actor)):
    return _actor_response(actor)


@account_router.get("/session", response_model=SessionResponse, summary="Admin session and scope")
def get_session(ctx: AdminContext = Depends(get_admin_context)):
    return SessionResponse(
        user=_actor_response(ctx.actor),
        portfolio_id=ctx.portfolio_id,
        is_impersonating=ctx.is_impersonating,
    )


@account_router.put("/account", response_model=AccountUpdateResponse, summary="Update own account")
def update_account(
    body: AccountUpdateRequest,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    user, email_changed = auth_service.update_account(db, ctx, name=body.name, email=body.email)
    return AccountUpdateResponse(user=_user_response(user), email_changed=email_changed)


@account_router.put("/account/password", summary="Change own password")
def change_password(
    body: PasswordChangeRequest,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    auth_service.change_password(db, ctx, body.current_password, body.new_password)
    return {"status": "password_changed"}


def _onboarding_response(db: Session, ctx: AdminContext) -> OnboardingResponse:
    step = auth_service.get_onboarding_step(db, ctx.actor)
    return OnboardingResponse(
        step=step,
        completed=step == ONBOARDING_FINAL_STEP,
        needs_onboarding=auth_service.needs_onboarding(db, ctx.actor),
    )


@account_router.get("/onboarding", response_model=OnboardingResponse, summary="Own onboarding progress")
def get_onboarding(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    return _onboarding_response(db, ctx)


@account_router.put("/onboarding/step", response_model=OnboardingResponse, summary="Advance onboarding")
def update_onboarding_step(
    body: OnboardingStepUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    """Steps only move forward; step 6 completes onboarding and locks it."""
    auth_service.update_onboarding_step(db, ctx, body.step)
    return _onboarding_response(db, ctx)


@account_router.post("/onboarding/complete", response_model=OnboardingResponse, summary="Finish onboarding")
def complete_onboarding(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    auth_service.complete_onboarding(db, ctx)
    return _onboarding_response(db, ctx)
