"""Super-admin API: users, portfolios, impersonation, review queue, audit log.

Every endpoint requires the super_admin role; the role check runs before any
lookup so a regular user learns nothing about other accounts.
"""

import json
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..core.auth import require_super_admin
from ..core.config import settings
from ..database import get_db
from ..models import AdminUser, AuditLog, ROLE_USER
from ..schemas.portfolio import (
    PendingCountResponse,
    PendingPortfolioResponse,
    PortfolioResponse,
    RejectRequest,
)
from ..services import PortfolioService, audit_service, auth_service, scope_service
from ..services.scope_service import Actor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Super admin"])


class UserCreateRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None
    role: str = Field(ROLE_USER, description="Role: user or super_admin")


class PasswordResetRequest(BaseModel):
    new_password: str


class AdminUserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: str
    portfolio_id: Optional[str] = None
    created_at: Optional[datetime] = None


class ImpersonationRequest(BaseModel):
    portfolio_id: str


class ImpersonationResponse(BaseModel):
    portfolio_id: Optional[str] = None
    is_impersonating: bool


class AuditLogResponse(BaseModel):
    id: int
    user_id: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    details: Optional[dict] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None


def _admin_user_response(user: AdminUser) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        portfolio_id=user.portfolio.id if user.portfolio is not None else None,
        created_at=user.created_at,
    )


def _audit_response(entry: AuditLog) -> AuditLogResponse:
    return AuditLogResponse(
        id=entry.id,
        user_id=entry.user_id,
        action=entry.action,
        resource_type=entry.resource_type,
        resource_id=entry.resource_id,
        details=json.loads(entry.details) if entry.details else None,
        ip_address=entry.ip_address,
        created_at=entry.created_at,
    )


# -- Users ---------------------------------------------------------------

@router.get("/users", response_model=List[AdminUserResponse])
def list_users(actor: Actor = Depends(require_super_admin), db: Session = Depends(get_db)):
    return [_admin_user_response(u) for u in auth_service.list_users(db, actor)]


@router.post("/users", response_model=AdminUserResponse, status_code=201)
def create_user(
    body: UserCreateRequest,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    user = auth_service.create_user(db, actor, body.email, body.password, body.name, body.role)
    return _admin_user_response(user)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(user_id: str, actor: Actor = Depends(require_super_admin), db: Session = Depends(get_db)):
    auth_service.delete_user(db, actor, user_id)


@router.put("/users/{user_id}/password")
def reset_password(
    user_id: str,
    body: PasswordResetRequest,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    auth_service.reset_password(db, actor, user_id, body.new_password)
    return {"status": "password_reset"}


# -- Portfolios ----------------------------------------------------------

@router.get("/portfolios", response_model=List[PortfolioResponse])
def list_portfolios(actor: Actor = Depends(require_super_admin), db: Session = Depends(get_db)):
    return PortfolioService(db).list_portfolios(actor)


@router.delete("/portfolios/{portfolio_id}", status_code=204)
def delete_portfolio(
    portfolio_id: str,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    PortfolioService(db).delete_portfolio(actor, portfolio_id)


# -- Impersonation -------------------------------------------------------

@router.post("/impersonation", response_model=ImpersonationResponse)
def set_impersonation(
    body: ImpersonationRequest,
    response: Response,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """View a portfolio's admin read-only. Scoped to /api/admin by cookie path."""
    portfolio = scope_service.start_impersonation(db, actor, body.portfolio_id)
    response.set_cookie(
        key=settings.impersonation_cookie_name,
        value=portfolio.id,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        path=settings.impersonation_cookie_path,
    )
    return ImpersonationResponse(portfolio_id=portfolio.id, is_impersonating=True)


@router.delete("/impersonation", response_model=ImpersonationResponse)
def clear_impersonation(
    response: Response,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    scope_service.stop_impersonation(db, actor)
    response.delete_cookie(
        settings.impersonation_cookie_name, path=settings.impersonation_cookie_path
    )
    return ImpersonationResponse(portfolio_id=None, is_impersonating=False)


# -- Review queue --------------------------------------------------------

@router.get("/review", response_model=List[PendingPortfolioResponse])
def list_pending(actor: Actor = Depends(require_super_admin), db: Session = Depends(get_db)):
    return [
        PendingPortfolioResponse(
            **PortfolioResponse.model_validate(p).model_dump(),
            owner_email=p.user.email,
            owner_name=p.user.name,
        )
        for p in PortfolioService(db).list_pending(actor)
    ]


@router.get("/review/count", response_model=PendingCountResponse)
def count_pending(actor: Actor = Depends(require_super_admin), db: Session = Depends(get_db)):
    return PendingCountResponse(count=PortfolioService(db).count_pending(actor))


@router.post("/review/{portfolio_id}/approve", response_model=PortfolioResponse)
def approve_portfolio(
    portfolio_id: str,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return PortfolioService(db).approve_portfolio(actor, portfolio_id)


@router.post("/review/{portfolio_id}/reject", response_model=PortfolioResponse)
def reject_portfolio(
    portfolio_id: str,
    body: RejectRequest,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return PortfolioService(db).reject_portfolio(actor, portfolio_id, body.reason)


# -- Audit log -----------------------------------------------------------

@router.get("/audit", response_model=List[AuditLogResponse])
def get_audit_log(
    limit: int = Query(100, ge=1, le=1000),
    resource_type: Optional[str] = Query(None),
    resource_id: Optional[str] = Query(None),
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    entries = audit_service.get_recent(db, limit=limit, resource_type=resource_type, resource_id=resource_id)
    return [_audit_response(e) for e in entries]
