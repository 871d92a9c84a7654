"""Authentication service: accounts, password hashing, onboarding, super-admin user management.

All password operations use bcrypt via passlib. Passwords are never stored
or logged in plaintext. The service layer owns user lifecycle; endpoints
are thin wrappers.
"""

import logging
from typing import Optional

from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core import revalidation
from ..core.config import settings
from ..core.text_limits import TEXT_LIMITS, validate_text_length
from ..exceptions import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    ValidationError,
)
from ..models import (
    AboutContent,
    AdminUser,
    ArchitectureContent,
    Experience,
    HeroContent,
    ONBOARDING_FINAL_STEP,
    PersonInfo,
    Project,
    ROLE_SUPER_ADMIN,
    ROLE_USER,
    SkillGroup,
    VALID_ROLES,
)
from ..repositories import AdminUserRepository
from . import audit_service
from .permission_service import IMPERSONATION_READ_ONLY, require_super_admin
from .portfolio_service import PortfolioService
from .scope_service import Actor, AdminContext

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.using(rounds=settings.password_hash_rounds).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # Malformed hash in the database; treat as a failed login.
        logger.warning("Unverifiable password hash encountered")
        return False


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _validate_email(email: str) -> str:
    email = normalize_email(email)
    if not email or "@" not in email:
        raise ValidationError("Valid email address required", field="email")
    validate_text_length(email, TEXT_LIMITS.URL, "Email")
    return email


def _validate_password(password: str) -> None:
    if len(password or "") < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters",
            field="password",
        )


def _clean_name(name: Optional[str]) -> Optional[str]:
    name = (name or "").strip()
    validate_text_length(name, TEXT_LIMITS.NAME, "Name")
    return name or None


def _create_user(db: Session, email: str, password: str, name: Optional[str], role: str) -> AdminUser:
    """Insert a user and, for role ``user``, its portfolio. Commits."""
    email = _validate_email(email)
    _validate_password(password)
    name = _clean_name(name)
    if role not in VALID_ROLES:
        raise ValidationError(f"Invalid role: {role}. Must be one of {', '.join(VALID_ROLES)}.", field="role")

    repo = AdminUserRepository(db)
    if repo.get_by_email(email) is not None:
        raise ConflictError("Email already registered", field="email")

    user = AdminUser(email=email, password_hash=hash_password(password), name=name, role=role)
    db.add(user)
    try:
        db.flush()
        if role == ROLE_USER:
            PortfolioService(db).create_for_user(user, commit=False)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered", field="email")

    db.refresh(user)
    return user


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

def signup(db: Session, email: str, password: str, name: Optional[str] = None) -> AdminUser:
    """Public signup: a regular user with its own draft portfolio."""
    user = _create_user(db, email, password, name, ROLE_USER)
    logger.info("User signed up", extra={"user_id": user.id})
    return user


def authenticate(db: Session, email: str, password: str, ip_address: Optional[str] = None) -> AdminUser:
    """Validate credentials and return the user.

    Raises AuthenticationError on unknown email or wrong password.
    """
    user = AdminUserRepository(db).get_by_email(normalize_email(email))
    if user is None or not verify_password(password, user.password_hash):
        audit_service.log(
            db, user.id if user else None, "login_failed", "user",
            user.id if user else None, ip_address=ip_address,
        )
        raise AuthenticationError("Invalid email or password")

    audit_service.log(db, user.id, "login", "user", user.id, ip_address=ip_address)
    return user


def load_actor(db: Session, user_id: str) -> Optional[Actor]:
    """Build the request Actor from the database (role and portfolio read fresh)."""
    user = AdminUserRepository(db).get_by_id_optional(user_id)
    if user is None:
        return None
    return Actor(
        id=user.id,
        email=user.email,
        role=user.role,
        name=user.name,
        portfolio_id=user.portfolio.id if user.portfolio is not None else None,
    )


def update_account(
    db: Session,
    ctx: AdminContext,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> tuple[AdminUser, bool]:
    """Update the caller's own name and/or email.

    Blocked while impersonating. A new email must be unique and is copied to
    the contact details of the caller's portfolio. Returns (user, email_changed).
    """
    if ctx.is_impersonating:
        raise ForbiddenError(IMPERSONATION_READ_ONLY)

    repo = AdminUserRepository(db)
    user = repo.get_by_id(ctx.actor.id)

    new_name = _clean_name(name) if name is not None else None
    new_email = _validate_email(email) if email is not None else user.email
    email_changed = new_email != user.email
    if email_changed:
        existing = repo.get_by_email(new_email)
        if existing is not None and existing.id != user.id:
            raise ConflictError("Email already in use", field="email")

    if name is not None:
        user.name = new_name
    if email_changed:
        user.email = new_email
        if ctx.actor.portfolio_id:
            db.query(PersonInfo).filter(
                PersonInfo.portfolio_id == ctx.actor.portfolio_id
            ).update({PersonInfo.email: new_email}, synchronize_session=False)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already in use", field="email")
    db.refresh(user)
    return user, email_changed


def change_password(db: Session, ctx: AdminContext, current_password: str, new_password: str) -> None:
    if ctx.is_impersonating:
        raise ForbiddenError(IMPERSONATION_READ_ONLY)
    user = AdminUserRepository(db).get_by_id(ctx.actor.id)
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect", field="current_password")
    _validate_password(new_password)
    user.password_hash = hash_password(new_password)
    db.commit()
    audit_service.log(db, user.id, "password_change", "user", user.id)


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------

# Sections that count as "some content" for the onboarding check.
_ONBOARDING_CONTENT_MODELS = (SkillGroup, Project, Experience, AboutContent, ArchitectureContent)


def get_onboarding_step(db: Session, actor: Actor) -> int:
    """0 when not started, 1-5 while in progress, 6 once completed."""
    user = AdminUserRepository(db).get_by_id(actor.id)
    if user.onboarding_completed:
        return ONBOARDING_FINAL_STEP
    return user.onboarding_step or 0


def update_onboarding_step(db: Session, ctx: AdminContext, step: int) -> int:
    """Move the caller's onboarding forward to *step*.

    Steps only move forward. Reaching the final step completes onboarding,
    after which the step is locked. Blocked while impersonating.
    """
    if ctx.is_impersonating:
        raise ForbiddenError(IMPERSONATION_READ_ONLY)
    if not 0 <= step <= ONBOARDING_FINAL_STEP:
        raise ValidationError(
            f"Onboarding step must be between 0 and {ONBOARDING_FINAL_STEP}", field="step"
        )

    user = AdminUserRepository(db).get_by_id(ctx.actor.id)
    current = user.onboarding_step or 0
    if user.onboarding_completed or current == ONBOARDING_FINAL_STEP:
        raise InvalidStateError(
            "Onboarding already completed - cannot modify step",
            expected="in progress",
            actual="completed",
        )
    if step < current:
        raise ValidationError("Cannot go back to previous step", field="step")

    user.onboarding_step = step
    user.onboarding_completed = step == ONBOARDING_FINAL_STEP
    db.commit()
    if user.onboarding_completed:
        logger.info("Onboarding completed", extra={"user_id": user.id})
    _revalidate_onboarding()
    return step


def complete_onboarding(db: Session, ctx: AdminContext) -> None:
    """Mark the caller's onboarding as done. Idempotent."""
    if ctx.is_impersonating:
        raise ForbiddenError(IMPERSONATION_READ_ONLY)
    user = AdminUserRepository(db).get_by_id(ctx.actor.id)
    if not user.onboarding_completed:
        user.onboarding_completed = True
        user.onboarding_step = ONBOARDING_FINAL_STEP
        db.commit()
        logger.info("Onboarding completed", extra={"user_id": user.id})
    _revalidate_onboarding()


def needs_onboarding(db: Session, actor: Actor) -> bool:
    """True for a regular user who has not finished onboarding and whose
    portfolio still lacks contact details, a hero or any section content.
    """
    if actor.is_super_admin:
        return False
    user = AdminUserRepository(db).get_by_id_optional(actor.id)
    if user is None:
        return False
    if user.onboarding_completed or user.onboarding_step == ONBOARDING_FINAL_STEP:
        return False
    if user.portfolio is None:
        return True

    portfolio_id = user.portfolio.id

    def _exists(model) -> bool:
        return db.query(model.id).filter(model.portfolio_id == portfolio_id).first() is not None

    has_content = any(_exists(model) for model in _ONBOARDING_CONTENT_MODELS)
    return not (_exists(PersonInfo) and _exists(HeroContent) and has_content)


def _revalidate_onboarding() -> None:
    revalidation.get_revalidator().revalidate_many([
        revalidation.admin_path(),
        revalidation.admin_path("onboarding"),
    ])


# ---------------------------------------------------------------------------
# Super-admin user management
# ---------------------------------------------------------------------------

def list_users(db: Session, actor: Actor) -> list[AdminUser]:
    require_super_admin(actor)
    return AdminUserRepository(db).list_all()


def create_user(
    db: Session,
    actor: Actor,
    email: str,
    password: str,
    name: Optional[str] = None,
    role: str = ROLE_USER,
) -> AdminUser:
    """Create a user on behalf of a super admin.

    Role ``super_admin`` is accepted here with no extra confirmation and gets
    no portfolio.
    """
    require_super_admin(actor)
    user = _create_user(db, email, password, name, role)
    if role == ROLE_SUPER_ADMIN:
        logger.warning("Super admin account created", extra={"user_id": user.id, "actor_id": actor.id})
    audit_service.log(
        db, actor.id, "user_create", "user", user.id, details={"email": user.email, "role": role}
    )
    return user


def delete_user(db: Session, actor: Actor, user_id: str) -> None:
    """Delete a user; its portfolio and all portfolio content go with it."""
    require_super_admin(actor)
    if user_id == actor.id:
        raise ValidationError("You cannot delete your own account", field="user_id")

    user = AdminUserRepository(db).get_by_id(user_id)
    email = user.email
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id, "actor_id": actor.id})
    audit_service.log(db, actor.id, "user_delete", "user", user_id, details={"email": email})


def reset_password(db: Session, actor: Actor, user_id: str, new_password: str) -> None:
    require_super_admin(actor)
    _validate_password(new_password)
    user = AdminUserRepository(db).get_by_id(user_id)
    user.password_hash = hash_password(new_password)
    db.commit()
    audit_service.log(db, actor.id, "password_reset", "user", user_id)


def ensure_super_admin(db: Session, email: Optional[str], password: Optional[str]) -> Optional[AdminUser]:
    """Create the configured super admin on first startup. Idempotent."""
    if not email or not password:
        return None
    existing = AdminUserRepository(db).get_by_email(email)
    if existing is not None:
        return existing
    user = _create_user(db, email, password, "Super Admin", ROLE_SUPER_ADMIN)
    logger.info("Seeded super admin", extra={"user_id": user.id})
    return user
