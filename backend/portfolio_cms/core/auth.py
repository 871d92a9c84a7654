"""Authentication module: deep module exposing FastAPI dependencies.

Public interface:
    ``optional_actor``   : Actor or None, never raises.
    ``require_actor``    : Actor or 401.
    ``require_super_admin``: Actor, 403 unless the role is super_admin.
    ``get_admin_context``: AdminContext (actor + resolved scope) for admin routes.

Credentials come from an ``Authorization: Bearer`` header or, for browser
sessions, the httpOnly session cookie. The actor's role and portfolio are
read from the database on every request so role changes apply immediately.
The impersonation cookie is only sent to ``/api/admin`` paths; a missing or
stale value simply means "not impersonating".
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import decode_token
from ..database import get_db
from ..exceptions import AuthenticationError
from ..services import auth_service, permission_service
from ..services.scope_service import Actor, AdminContext, build_context

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def _token_from_request(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name) or None


def optional_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Actor]:
    """Resolve the caller if a valid session is present. Never raises."""
    token = _token_from_request(request, credentials)
    if not token:
        return None

    payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    if payload is None:
        return None

    actor = auth_service.load_actor(db, payload.sub)
    if actor is None:
        logger.info(
            "Session for deleted user rejected",
            extra={"user_id": payload.sub, "session_id": payload.session_id},
        )
    return actor


def require_actor(actor: Optional[Actor] = Depends(optional_actor)) -> Actor:
    """Require a valid session. Raises 401 otherwise."""
    if actor is None:
        raise AuthenticationError()
    return actor


def require_super_admin(actor: Actor = Depends(require_actor)) -> Actor:
    """Require the authenticated actor to be a super admin. Raises 403 otherwise."""
    permission_service.require_super_admin(actor)
    return actor


def get_admin_context(
    request: Request,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
) -> AdminContext:
    """Actor plus the scope derived from role and the impersonation cookie."""
    impersonated = request.cookies.get(settings.impersonation_cookie_name)
    return build_context(db, actor, impersonated)
