"""Platform menus, per-portfolio menu instances and menu blocks."""

from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base, generate_id


class PlatformMenu(Base):
    """Global section definition, managed only by the super admin.

    ``key`` is unique and immutable once created. ``component_keys`` is the
    ordered list of UI components a portfolio's instance of this menu is
    built from.
    """

    __tablename__ = "platform_menus"

    id = Column(String(36), primary_key=True, default=generate_id)
    key = Column(String(50), unique=True, nullable=False)
    label = Column(String(80), nullable=False)
    section_type = Column(String(50), nullable=True)
    component_keys = Column(JSON, nullable=False, default=list)
    order = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portfolio_menus = relationship("PortfolioMenu", back_populates="platform_menu")


class PortfolioMenu(Base):
    """One portfolio's instance of a platform menu.

    ``visible``/``order`` are the draft state edited in the admin area;
    ``published_visible``/``published_order`` are the snapshot the public
    page renders, refreshed only by an explicit publish.
    """

    __tablename__ = "portfolio_menus"
    __table_args__ = (
        UniqueConstraint("portfolio_id", "platform_menu_id", name="uq_portfolio_menu"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = Column(
        String(36), ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform_menu_id = Column(
        String(36), ForeignKey("platform_menus.id", ondelete="CASCADE"), nullable=False, index=True
    )
    visible = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)
    published_visible = Column(Boolean, nullable=False, default=False)
    published_order = Column(Integer, nullable=False, default=0)

    portfolio = relationship("Portfolio", back_populates="menus")
    platform_menu = relationship("PlatformMenu", back_populates="portfolio_menus")
    blocks = relationship(
        "MenuBlock",
        back_populates="portfolio_menu",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MenuBlock.order",
    )


class MenuBlock(Base):
    """Content slot for one UI component inside a portfolio menu."""

    __tablename__ = "menu_blocks"
    __table_args__ = (
        UniqueConstraint("portfolio_menu_id", "order", name="uq_menu_block_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_menu_id = Column(
        String(36), ForeignKey("portfolio_menus.id", ondelete="CASCADE"), nullable=False, index=True
    )
    component_key = Column(String(50), nullable=False)
    order = Column(Integer, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portfolio_menu = relationship("PortfolioMenu", back_populates="blocks")
