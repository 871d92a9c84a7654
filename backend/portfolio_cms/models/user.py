"""AdminUser and AuditLog models.

Users authenticate with email/password and receive a signed session token.
A regular user owns exactly one Portfolio; a super admin owns none.
AuditLog records super-admin actions and workflow transitions.
"""

from sqlalchemy import Boolean, Column, String, DateTime, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base, generate_id


ROLE_USER = "user"
ROLE_SUPER_ADMIN = "super_admin"
VALID_ROLES = (ROLE_USER, ROLE_SUPER_ADMIN)

# Onboarding steps: 0 not started, 1-5 in progress, 6 done.
ONBOARDING_FINAL_STEP = 6


class AdminUser(Base):
    """Account that can sign in to the admin area.

    Roles:
        user       : manages the content of the one portfolio it owns
        super_admin: manages platform menus, users and the review queue;
                      owns no content of its own
    """

    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    onboarding_step = Column(Integer, nullable=False, default=0)
    onboarding_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portfolio = relationship(
        "Portfolio",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN


class AuditLog(Base):
    """Immutable record of privileged and workflow operations.

    Written by the service layer, never modified; old rows are purged on
    startup according to the configured retention.
    Fields:
        action       : user_create, user_delete, password_reset, menu_create,
                        menu_update, menu_delete, publish_request, approve,
                        reject, impersonate_set, impersonate_clear, login,
                        login_failed
        resource_type: user, portfolio, platform_menu
        resource_id  : ID of the affected resource
        details      : JSON string with additional context
    """

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), nullable=False)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
