"""Tests for the publish workflow and portfolio-level settings."""

import pytest

from portfolio_cms.database import SessionLocal
from portfolio_cms.exceptions import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from portfolio_cms.models import AuditLog, Portfolio, PortfolioMenu, PortfolioStatus, SkillGroup
from portfolio_cms.schemas.content import SkillGroupCreate
from portfolio_cms.schemas.portfolio import SectionIntrosUpdate
from portfolio_cms.services import PortfolioService, SkillService
from portfolio_cms.services.portfolio_service import DEFAULT_SECTION_INTROS, slugify


class TestCreation:

    def test_signup_creates_private_draft(self, owner):
        portfolio = owner.portfolio
        assert portfolio.status == PortfolioStatus.DRAFT.value
        assert portfolio.is_public is False
        assert portfolio.slug == "olive-owner"

    def test_slugs_are_unique(self, user_factory):
        first = user_factory("sam@example.com", name="Sam")
        second = user_factory("sam@elsewhere.com", name="Sam")
        assert first.portfolio.slug == "sam"
        assert second.portfolio.slug == "sam-2"

    def test_slugify(self):
        assert slugify("  Ada Lovelace!! ") == "ada-lovelace"
        assert slugify("???") == "portfolio"


class TestPublishWorkflow:

    def test_full_review_cycle(self, db, owner_ctx, admin_ctx):
        service = PortfolioService(db)
        portfolio_id = owner_ctx.portfolio_id

        assert service.request_publication(owner_ctx).status == "READY_FOR_REVIEW"

        rejected = service.reject_portfolio(admin_ctx.actor, portfolio_id, "  Add more projects  ")
        assert rejected.status == "REJECTED"
        assert rejected.rejection_reason == "Add more projects"

        resubmitted = service.request_publication(owner_ctx)
        assert resubmitted.status == "READY_FOR_REVIEW"
        assert resubmitted.rejection_reason == "Add more projects"

        approved = service.approve_portfolio(admin_ctx.actor, portfolio_id)
        assert approved.status == "PUBLISHED"
        assert approved.rejection_reason is None
        assert approved.approved_at is not None

    def test_cannot_request_from_review_or_published(self, db, owner_ctx, admin_ctx):
        service = PortfolioService(db)
        service.request_publication(owner_ctx)
        with pytest.raises(InvalidStateError) as exc:
            service.request_publication(owner_ctx)
        assert exc.value.details["actual"] == "READY_FOR_REVIEW"

        service.approve_portfolio(admin_ctx.actor, owner_ctx.portfolio_id)
        with pytest.raises(InvalidStateError):
            service.request_publication(owner_ctx)

    def test_approve_requires_pending_state(self, db, owner_ctx, admin_ctx):
        with pytest.raises(InvalidStateError) as exc:
            PortfolioService(db).approve_portfolio(admin_ctx.actor, owner_ctx.portfolio_id)
        assert exc.value.details == {"expected": "READY_FOR_REVIEW", "actual": "DRAFT"}

    def test_second_reviewer_loses(self, db, owner_ctx, admin_ctx):
        portfolio_id = owner_ctx.portfolio_id
        PortfolioService(db).request_publication(owner_ctx)

        # A second reviewer opened the queue before the first one decided.
        stale_db = SessionLocal()
        try:
            stale = PortfolioService(stale_db)
            assert stale.get_portfolio(portfolio_id).status == "READY_FOR_REVIEW"

            PortfolioService(db).approve_portfolio(admin_ctx.actor, portfolio_id)

            with pytest.raises(InvalidStateError) as exc:
                stale.reject_portfolio(admin_ctx.actor, portfolio_id, "Too late")
            assert exc.value.details == {"expected": "READY_FOR_REVIEW", "actual": "PUBLISHED"}
        finally:
            stale_db.close()

        db.expire_all()
        portfolio = PortfolioService(db).get_portfolio(portfolio_id)
        assert portfolio.status == "PUBLISHED"
        assert portfolio.rejection_reason is None

    def test_reject_requires_reason(self, db, owner_ctx, admin_ctx):
        service = PortfolioService(db)
        service.request_publication(owner_ctx)
        with pytest.raises(ValidationError):
            service.reject_portfolio(admin_ctx.actor, owner_ctx.portfolio_id, "   ")
        assert service.get_portfolio(owner_ctx.portfolio_id).status == "READY_FOR_REVIEW"

    def test_review_unknown_portfolio(self, db, admin_ctx):
        with pytest.raises(NotFoundError):
            PortfolioService(db).approve_portfolio(admin_ctx.actor, "missing")

    def test_owner_cannot_approve(self, db, owner_ctx):
        service = PortfolioService(db)
        service.request_publication(owner_ctx)
        with pytest.raises(ForbiddenError):
            service.approve_portfolio(owner_ctx.actor, owner_ctx.portfolio_id)

    def test_impersonation_cannot_request(self, db, impersonation_ctx):
        with pytest.raises(ForbiddenError):
            PortfolioService(db).request_publication(impersonation_ctx)

    def test_pending_queue(self, db, owner_ctx, admin_ctx, other_owner):
        service = PortfolioService(db)
        service.request_publication(owner_ctx)
        assert [p.id for p in service.list_pending(admin_ctx.actor)] == [owner_ctx.portfolio_id]
        assert service.count_pending(admin_ctx.actor) == 1

    def test_transitions_are_audited(self, db, owner_ctx, admin_ctx):
        service = PortfolioService(db)
        service.request_publication(owner_ctx)
        service.approve_portfolio(admin_ctx.actor, owner_ctx.portfolio_id)
        actions = [e.action for e in db.query(AuditLog).order_by(AuditLog.id).all()]
        assert actions == ["publish_request", "approve"]


class TestDeletePortfolio:

    def test_cascades_to_everything_owned(self, db, owner_ctx, admin_ctx, menus):
        SkillService(db).create_group(
            owner_ctx, SkillGroupCreate(platform_menu_id=menus["skills"].id, name="Tools", skills=["git"])
        )
        portfolio_id = owner_ctx.portfolio_id
        PortfolioService(db).delete_portfolio(admin_ctx.actor, portfolio_id)

        assert db.query(Portfolio).filter(Portfolio.id == portfolio_id).first() is None
        assert db.query(PortfolioMenu).filter(PortfolioMenu.portfolio_id == portfolio_id).count() == 0
        assert db.query(SkillGroup).filter(SkillGroup.portfolio_id == portfolio_id).count() == 0


class TestSettings:

    def test_set_public(self, db, owner_ctx):
        assert PortfolioService(db).set_public(owner_ctx, True).is_public is True

    def test_impersonation_cannot_set_public(self, db, impersonation_ctx):
        with pytest.raises(ForbiddenError):
            PortfolioService(db).set_public(impersonation_ctx, True)

    def test_update_slug(self, db, owner_ctx):
        assert PortfolioService(db).update_slug(owner_ctx, "Olive-Dev").slug == "olive-dev"

    def test_slug_taken(self, db, owner_ctx, other_owner):
        with pytest.raises(ConflictError):
            PortfolioService(db).update_slug(owner_ctx, other_owner.portfolio.slug)

    @pytest.mark.parametrize("slug", ["has space", "double--hyphen", "-leading", ""])
    def test_malformed_slug(self, db, owner_ctx, slug):
        with pytest.raises(ValidationError):
            PortfolioService(db).update_slug(owner_ctx, slug)

    def test_intros_default_until_set(self, db, owner_ctx):
        intros = PortfolioService(db).get_section_intros(owner_ctx.portfolio_id)
        assert intros == {f"{k}_intro": v for k, v in DEFAULT_SECTION_INTROS.items()}

    def test_update_intros_only_touches_given_fields(self, db, owner_ctx):
        service = PortfolioService(db)
        service.update_section_intros(owner_ctx, SectionIntrosUpdate(skills_intro="  Tools I trust. "))
        intros = service.update_section_intros(owner_ctx, SectionIntrosUpdate(projects_intro="Things I built."))
        assert intros["skills_intro"] == "Tools I trust."
        assert intros["projects_intro"] == "Things I built."
        assert intros["experience_intro"] == DEFAULT_SECTION_INTROS["experience"]

    def test_blank_intro_resets_to_default(self, db, owner_ctx):
        service = PortfolioService(db)
        service.update_section_intros(owner_ctx, SectionIntrosUpdate(skills_intro="Custom"))
        intros = service.update_section_intros(owner_ctx, SectionIntrosUpdate(skills_intro="   "))
        assert intros["skills_intro"] == DEFAULT_SECTION_INTROS["skills"]

    def test_intro_limit(self, db, owner_ctx):
        with pytest.raises(ValidationError, match=r"Introduction must be 240 characters or less \(currently 241\)"):
            PortfolioService(db).update_section_intros(owner_ctx, SectionIntrosUpdate(skills_intro="x" * 241))
