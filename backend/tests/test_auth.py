"""Tests for session tokens and the account service."""

import base64
import hashlib
import hmac
import json
import time

import pytest

from portfolio_cms.core.token_factory import create_token, decode_token
from portfolio_cms.exceptions import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    ValidationError,
)
from portfolio_cms.models import AdminUser, AuditLog
from portfolio_cms.schemas.content import HeroContentUpsert, PersonInfoUpsert, ProjectCreate
from portfolio_cms.services import ContactService, HeroService, ProjectService, auth_service

PASSWORD = "correct-horse-1"
_CLAIMS = {"sub": "user-1", "sid": "s", "iss": "portfolio-cms", "aud": "portfolio-cms-admin", "iat": 0, "exp": 2**31}


def _forge(claims: dict, secret: str, alg: str = "HS256") -> str:
    """Sign arbitrary claims the way the token factory does."""
    def enc(data: bytes) -> bytes:
        return base64.urlsafe_b64encode(data).rstrip(b"=")

    signing_input = enc(json.dumps({"alg": alg, "typ": "JWT"}).encode()) + b"." + enc(json.dumps(claims).encode())
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    return (signing_input + b"." + enc(signature)).decode()


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_token("user-1", "user", "test-secret")
        payload = decode_token(token, "test-secret")
        assert payload is not None
        assert payload.sub == "user-1"
        assert payload.role == "user"
        assert payload.session_id
        assert payload.issued_at <= payload.exp

    def test_each_login_gets_its_own_session(self):
        first = decode_token(create_token("user-1", "user", "secret"), "secret")
        second = decode_token(create_token("user-1", "user", "secret"), "secret")
        assert first.session_id != second.session_id
        kept = decode_token(create_token("user-1", "user", "secret", session_id="abc"), "secret")
        assert kept.session_id == "abc"

    def test_foreign_audience_rejected(self):
        assert decode_token(_forge(dict(_CLAIMS, aud="other"), "secret"), "secret") is None

    def test_unsigned_header_rejected(self):
        assert decode_token(_forge(_CLAIMS, "secret"), "secret") is not None
        assert decode_token(_forge(_CLAIMS, "secret", alg="none"), "secret") is None

    def test_future_issued_at_rejected(self):
        claims = dict(_CLAIMS, iat=int(time.time()) + 3600)
        assert decode_token(_forge(claims, "secret"), "secret") is None

    def test_wrong_secret_returns_none(self):
        token = create_token("user-1", "user", "correct-secret")
        assert decode_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_token("user-1", "user", "secret", expires_hours=-1)
        assert decode_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_token("not.a.token", "secret") is None
        assert decode_token("", "secret") is None

    def test_only_hs256(self):
        with pytest.raises(ValueError):
            create_token("user-1", "user", "secret", algorithm="RS256")


class TestAuthenticate:

    def test_email_is_case_insensitive(self, db, owner):
        assert auth_service.authenticate(db, "  OWNER@example.com ", PASSWORD).id == owner.id

    def test_failures_are_audited(self, db, owner):
        with pytest.raises(AuthenticationError):
            auth_service.authenticate(db, "owner@example.com", "wrong-password", ip_address="10.0.0.1")
        entry = db.query(AuditLog).filter(AuditLog.action == "login_failed").one()
        assert entry.user_id == owner.id
        assert entry.ip_address == "10.0.0.1"

    def test_unknown_email(self, db):
        with pytest.raises(AuthenticationError):
            auth_service.authenticate(db, "ghost@example.com", PASSWORD)

    def test_actor_reads_role_fresh(self, db, owner):
        actor = auth_service.load_actor(db, owner.id)
        assert actor.role == "user"
        assert actor.portfolio_id == owner.portfolio.id
        assert auth_service.load_actor(db, "deleted-user") is None


class TestSuperAdmin:

    def test_ensure_is_idempotent(self, db):
        first = auth_service.ensure_super_admin(db, "root@example.com", PASSWORD)
        second = auth_service.ensure_super_admin(db, "root@example.com", PASSWORD)
        assert first.id == second.id
        assert first.role == "super_admin"
        assert first.portfolio is None

    def test_missing_values_skip(self, db):
        assert auth_service.ensure_super_admin(db, None, None) is None

    def test_cannot_delete_self(self, db, admin_ctx):
        with pytest.raises(ValidationError):
            auth_service.delete_user(db, admin_ctx.actor, admin_ctx.actor.id)

    def test_regular_user_cannot_manage_users(self, db, owner_ctx):
        with pytest.raises(ForbiddenError):
            auth_service.list_users(db, owner_ctx.actor)


class TestAccountChanges:

    def test_email_change_updates_contact_details(self, db, owner_ctx, menus):
        ContactService(db).upsert(
            owner_ctx, PersonInfoUpsert(platform_menu_id=menus["contact"].id, email="owner@example.com")
        )
        _, changed = auth_service.update_account(db, owner_ctx, email="new@example.com")
        assert changed is True
        info = ContactService(db).get_for_admin(owner_ctx, menus["contact"].id)
        db.refresh(info)
        assert info.email == "new@example.com"

    def test_same_email_is_not_a_change(self, db, owner_ctx):
        _, changed = auth_service.update_account(db, owner_ctx, email="Owner@Example.com")
        assert changed is False

    def test_taken_email_keeps_name(self, db, owner_ctx, other_owner):
        with pytest.raises(ConflictError):
            auth_service.update_account(db, owner_ctx, name="Renamed", email="other@example.com")
        user = db.get(AdminUser, owner_ctx.actor.id)
        db.refresh(user)
        assert user.name == "Olive Owner"
        assert user.email == "owner@example.com"

    def test_impersonation_cannot_change_account(self, db, impersonation_ctx):
        with pytest.raises(ForbiddenError):
            auth_service.update_account(db, impersonation_ctx, name="Nope")

    def test_change_password_checks_current(self, db, owner_ctx):
        with pytest.raises(ValidationError, match="Current password is incorrect"):
            auth_service.change_password(db, owner_ctx, "wrong-password", "another-secret-2")
        auth_service.change_password(db, owner_ctx, PASSWORD, "another-secret-2")
        assert auth_service.authenticate(db, "owner@example.com", "another-secret-2")


class TestOnboarding:

    def test_new_user_starts_at_zero(self, db, owner_ctx):
        assert auth_service.get_onboarding_step(db, owner_ctx.actor) == 0
        assert auth_service.needs_onboarding(db, owner_ctx.actor) is True

    def test_steps_move_forward_only(self, db, owner_ctx):
        assert auth_service.update_onboarding_step(db, owner_ctx, 2) == 2
        auth_service.update_onboarding_step(db, owner_ctx, 2)
        with pytest.raises(ValidationError, match="Cannot go back to previous step"):
            auth_service.update_onboarding_step(db, owner_ctx, 1)
        assert auth_service.get_onboarding_step(db, owner_ctx.actor) == 2

    @pytest.mark.parametrize("step", [-1, 7])
    def test_step_out_of_range(self, db, owner_ctx, step):
        with pytest.raises(ValidationError):
            auth_service.update_onboarding_step(db, owner_ctx, step)

    def test_final_step_completes_and_locks(self, db, owner_ctx, revalidator):
        auth_service.update_onboarding_step(db, owner_ctx, 3)
        auth_service.update_onboarding_step(db, owner_ctx, 6)
        user = db.get(AdminUser, owner_ctx.actor.id)
        assert user.onboarding_completed is True
        assert {"/admin", "/admin/onboarding"} <= set(revalidator.recent())

        with pytest.raises(InvalidStateError, match="Onboarding already completed"):
            auth_service.update_onboarding_step(db, owner_ctx, 6)
        assert auth_service.needs_onboarding(db, owner_ctx.actor) is False

    def test_complete_skips_remaining_steps(self, db, owner_ctx):
        auth_service.update_onboarding_step(db, owner_ctx, 1)
        auth_service.complete_onboarding(db, owner_ctx)
        auth_service.complete_onboarding(db, owner_ctx)
        assert auth_service.get_onboarding_step(db, owner_ctx.actor) == 6
        with pytest.raises(InvalidStateError):
            auth_service.update_onboarding_step(db, owner_ctx, 4)

    def test_impersonation_cannot_advance(self, db, impersonation_ctx, owner):
        with pytest.raises(ForbiddenError):
            auth_service.update_onboarding_step(db, impersonation_ctx, 1)
        with pytest.raises(ForbiddenError):
            auth_service.complete_onboarding(db, impersonation_ctx)
        db.refresh(owner)
        assert owner.onboarding_step == 0

    def test_super_admin_never_needs_onboarding(self, db, admin_ctx):
        assert auth_service.needs_onboarding(db, admin_ctx.actor) is False

    def test_filled_portfolio_no_longer_needs_onboarding(self, db, owner_ctx, menus):
        ContactService(db).upsert(
            owner_ctx, PersonInfoUpsert(platform_menu_id=menus["contact"].id, name="Olive Owner")
        )
        HeroService(db).upsert(owner_ctx, HeroContentUpsert(headline="Backend engineer"))
        assert auth_service.needs_onboarding(db, owner_ctx.actor) is True

        ProjectService(db).create(
            owner_ctx, ProjectCreate(platform_menu_id=menus["projects"].id, title="Portfolio CMS")
        )
        assert auth_service.needs_onboarding(db, owner_ctx.actor) is False
