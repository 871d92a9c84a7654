"""Section content API: skills, projects, experience, about, architecture, contact, hero.

All endpoints operate on the portfolio in the caller's admin scope. Reads
return empty results when nothing is in scope; writes go through the
ownership guard, so impersonated and super-admin sessions get 403.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import get_admin_context
from ..database import get_db
from ..schemas import content as schemas
from ..services import (
    AboutService,
    ArchitectureService,
    ContactService,
    ExperienceService,
    HeroService,
    ProjectService,
    SkillService,
)
from ..services.scope_service import AdminContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/sections", tags=["Sections"])

_MENU_QUERY = Query(..., description="Platform menu the section belongs to")


# -- Skills --------------------------------------------------------------

@router.get("/skills", response_model=List[schemas.SkillGroupResponse])
def list_skill_groups(
    platform_menu_id: str = _MENU_QUERY,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return SkillService(db).list_for_admin(ctx, platform_menu_id)


@router.post("/skills", response_model=schemas.SkillGroupResponse, status_code=201)
def create_skill_group(
    data: schemas.SkillGroupCreate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return SkillService(db).create_group(ctx, data)


@router.put("/skills/{group_id}", response_model=schemas.SkillGroupResponse)
def update_skill_group(
    group_id: str,
    data: schemas.SkillGroupUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return SkillService(db).update_group(ctx, group_id, data)


@router.delete("/skills/{group_id}", status_code=204)
def delete_skill_group(group_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    SkillService(db).delete_group(ctx, group_id)


@router.put("/skills/{group_id}/visibility", response_model=schemas.ItemVisibilityResponse)
def set_skill_group_visibility(
    group_id: str,
    body: schemas.ItemVisibilityUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return SkillService(db).set_group_visibility(ctx, group_id, body.is_visible)


@router.post("/skill-items", response_model=schemas.SkillResponse, status_code=201)
def create_skill(
    data: schemas.SkillCreate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return SkillService(db).create_skill(ctx, data)


@router.put("/skill-items/{skill_id}", response_model=schemas.SkillResponse)
def update_skill(
    skill_id: str,
    data: schemas.SkillUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return SkillService(db).update_skill(ctx, skill_id, data)


@router.delete("/skill-items/{skill_id}", status_code=204)
def delete_skill(skill_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    SkillService(db).delete_skill(ctx, skill_id)


# -- Projects ------------------------------------------------------------

@router.get("/projects", response_model=List[schemas.ProjectResponse])
def list_projects(
    platform_menu_id: str = _MENU_QUERY,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ProjectService(db).list_for_admin(ctx, platform_menu_id)


@router.post("/projects", response_model=schemas.ProjectResponse, status_code=201)
def create_project(
    data: schemas.ProjectCreate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ProjectService(db).create(ctx, data)


@router.put("/projects/{project_id}", response_model=schemas.ProjectResponse)
def update_project(
    project_id: str,
    data: schemas.ProjectUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ProjectService(db).update(ctx, project_id, data)


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(project_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    ProjectService(db).delete(ctx, project_id)


@router.put("/projects/{project_id}/visibility", response_model=schemas.ItemVisibilityResponse)
def set_project_visibility(
    project_id: str,
    body: schemas.ItemVisibilityUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ProjectService(db).set_visibility(ctx, project_id, body.is_visible)


# -- Experience ----------------------------------------------------------

@router.get("/experience", response_model=List[schemas.ExperienceResponse])
def list_experiences(
    platform_menu_id: str = _MENU_QUERY,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ExperienceService(db).list_for_admin(ctx, platform_menu_id)


@router.post("/experience", response_model=schemas.ExperienceResponse, status_code=201)
def create_experience(
    data: schemas.ExperienceCreate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ExperienceService(db).create(ctx, data)


@router.put("/experience/{experience_id}", response_model=schemas.ExperienceResponse)
def update_experience(
    experience_id: str,
    data: schemas.ExperienceUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ExperienceService(db).update(ctx, experience_id, data)


@router.delete("/experience/{experience_id}", status_code=204)
def delete_experience(experience_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    ExperienceService(db).delete(ctx, experience_id)


@router.put("/experience/{experience_id}/visibility", response_model=schemas.ItemVisibilityResponse)
def set_experience_visibility(
    experience_id: str,
    body: schemas.ItemVisibilityUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ExperienceService(db).set_visibility(ctx, experience_id, body.is_visible)


# -- About ---------------------------------------------------------------

@router.get("/about", response_model=Optional[schemas.AboutContentResponse])
def get_about(
    platform_menu_id: str = _MENU_QUERY,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return AboutService(db).get_for_admin(ctx, platform_menu_id)


@router.put("/about", response_model=schemas.AboutContentResponse)
def upsert_about(
    data: schemas.AboutContentUpsert,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return AboutService(db).upsert(ctx, data)


@router.delete("/about/{content_id}", status_code=204)
def delete_about(content_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    AboutService(db).delete(ctx, content_id)


@router.post("/about-principles", response_model=schemas.AboutPrincipleResponse, status_code=201)
def create_principle(
    data: schemas.AboutPrincipleCreate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return AboutService(db).create_principle(ctx, data)


@router.put("/about-principles/{principle_id}", response_model=schemas.AboutPrincipleResponse)
def update_principle(
    principle_id: str,
    data: schemas.AboutPrincipleUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return AboutService(db).update_principle(ctx, principle_id, data)


@router.delete("/about-principles/{principle_id}", status_code=204)
def delete_principle(principle_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    AboutService(db).delete_principle(ctx, principle_id)


@router.put("/about-principles/{principle_id}/visibility", response_model=schemas.ItemVisibilityResponse)
def set_principle_visibility(
    principle_id: str,
    body: schemas.ItemVisibilityUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return AboutService(db).set_principle_visibility(ctx, principle_id, body.is_visible)


# -- Architecture --------------------------------------------------------

@router.get("/architecture", response_model=Optional[schemas.ArchitectureContentResponse])
def get_architecture(
    platform_menu_id: str = _MENU_QUERY,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ArchitectureService(db).get_for_admin(ctx, platform_menu_id)


@router.post("/architecture", response_model=schemas.ArchitectureContentResponse)
def ensure_architecture(
    platform_menu_id: str = _MENU_QUERY,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    """Return the section's content row, creating it if needed."""
    return ArchitectureService(db).ensure_content(ctx, platform_menu_id)


@router.delete("/architecture/{content_id}", status_code=204)
def delete_architecture(content_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    ArchitectureService(db).delete_content(ctx, content_id)


@router.post("/architecture-pillars", response_model=schemas.ArchitecturePillarResponse, status_code=201)
def create_pillar(
    data: schemas.ArchitecturePillarCreate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ArchitectureService(db).create_pillar(ctx, data)


@router.put("/architecture-pillars/{pillar_id}", response_model=schemas.ArchitecturePillarResponse)
def update_pillar(
    pillar_id: str,
    data: schemas.ArchitecturePillarUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ArchitectureService(db).update_pillar(ctx, pillar_id, data)


@router.delete("/architecture-pillars/{pillar_id}", status_code=204)
def delete_pillar(pillar_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    ArchitectureService(db).delete_pillar(ctx, pillar_id)


@router.put("/architecture-pillars/{pillar_id}/visibility", response_model=schemas.ItemVisibilityResponse)
def set_pillar_visibility(
    pillar_id: str,
    body: schemas.ItemVisibilityUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ArchitectureService(db).set_pillar_visibility(ctx, pillar_id, body.is_visible)


@router.post("/architecture-points", response_model=schemas.TextItemResponse, status_code=201)
def create_point(
    data: schemas.ArchitecturePointCreate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ArchitectureService(db).create_point(ctx, data)


@router.put("/architecture-points/{point_id}", response_model=schemas.TextItemResponse)
def update_point(
    point_id: str,
    data: schemas.ArchitecturePointUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ArchitectureService(db).update_point(ctx, point_id, data)


@router.delete("/architecture-points/{point_id}", status_code=204)
def delete_point(point_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    ArchitectureService(db).delete_point(ctx, point_id)


# -- Contact -------------------------------------------------------------

@router.get("/contact", response_model=Optional[schemas.PersonInfoResponse])
def get_contact(
    platform_menu_id: str = _MENU_QUERY,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ContactService(db).get_for_admin(ctx, platform_menu_id)


@router.put("/contact", response_model=schemas.PersonInfoResponse)
def upsert_contact(
    data: schemas.PersonInfoUpsert,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return ContactService(db).upsert(ctx, data)


@router.delete("/contact/{info_id}", status_code=204)
def delete_contact(info_id: str, ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    ContactService(db).delete(ctx, info_id)


# -- Hero ----------------------------------------------------------------

@router.get("/hero", response_model=Optional[schemas.HeroContentResponse])
def get_hero(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    return HeroService(db).get_for_admin(ctx)


@router.put("/hero", response_model=schemas.HeroContentResponse)
def upsert_hero(
    data: schemas.HeroContentUpsert,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return HeroService(db).upsert(ctx, data)
