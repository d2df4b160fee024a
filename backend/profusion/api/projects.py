"""Project and task stage API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from profusion.api.deps import get_current_user
from profusion.core.database import get_db
from profusion.core.errors import DuplicateError, NotFound, PermissionDenied, ValidationError
from profusion.core.logging import get_logger
from profusion.models import Company, Department, Project, TaskStage, Team, User
from profusion.schemas.common import MessageResponse, PaginatedResponse
from profusion.schemas.project import (
    ProjectCreate, ProjectUpdate, ProjectResponse,
    TaskStageCreate, TaskStageUpdate, TaskStageResponse,
)
from profusion.services.crud import (
    apply_changes, collect_changes, commit_unique, delete_row, ensure_references,
    get_or_404, page_payload, paginate,
)
from profusion.services.permissions import is_admin

logger = get_logger(__name__)
router = APIRouter(dependencies=[Depends(get_current_user)])
stages_router = APIRouter(dependencies=[Depends(get_current_user)])


def ensure_project_owner(user: User, project: Project) -> None:
    """Only the creator of a project or an administrator may change it."""
    if project.created_by != user.id and not is_admin(user):
        raise PermissionDenied("Only the project creator or an administrator can modify this project")


async def _ensure_org_refs(db: AsyncSession, values: dict) -> None:
    await ensure_references(db, {
        "Company": (Company, values.get("company_id")),
        "Department": (Department, values.get("department_id")),
        "Team": (Team, values.get("team_id")),
    })


@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new project owned by the caller."""
    values = project.model_dump()
    await _ensure_org_refs(db, values)

    db_project = Project(created_by=user.id, **values)
    db.add(db_project)
    await commit_unique(db, DuplicateError("Project already exists"))

    logger.info("Project created", project_id=str(db_project.id), created_by=str(user.id))
    return await get_or_404(db, Project, db_project.id)


@router.get("/", response_model=PaginatedResponse[ProjectResponse])
async def list_projects(
    company_id: Optional[UUID] = Query(None),
    department_id: Optional[UUID] = Query(None),
    team_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List projects, newest first."""
    query = select(Project).order_by(Project.created_at.desc())
    if company_id:
        query = query.where(Project.company_id == company_id)
    if department_id:
        query = query.where(Project.department_id == department_id)
    if team_id:
        query = query.where(Project.team_id == team_id)

    rows, total = await paginate(db, query, page, page_size)
    return page_payload(rows, total, page, page_size)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: UUID, db: AsyncSession = Depends(get_db)):
    return await get_or_404(db, Project, project_id)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    update: ProjectUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update project settings."""
    project = await get_or_404(db, Project, project_id)
    ensure_project_owner(user, project)

    changes = collect_changes(update, non_nullable=("name",))
    await _ensure_org_refs(db, changes)
    apply_changes(project, changes)

    if project.start_date and project.end_date and project.end_date < project.start_date:
        await db.rollback()
        raise ValidationError("end_date must not be before start_date", fields={"end_date": "before start_date"})

    await commit_unique(db, DuplicateError("Project name already exists"))
    return await get_or_404(db, Project, project_id)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a project and its task stages."""
    project = await get_or_404(db, Project, project_id)
    ensure_project_owner(user, project)

    await delete_row(db, project, "Project")
    logger.info("Project deleted", project_id=str(project_id), by=str(user.id))
    return MessageResponse(message="Project deleted successfully")


# ==================== Task stages ====================

@stages_router.get("/", response_model=PaginatedResponse[TaskStageResponse])
async def list_task_stages(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    query = select(TaskStage).order_by(TaskStage.created_at)
    rows, total = await paginate(db, query, page, page_size)
    return page_payload(rows, total, page, page_size)


@stages_router.get("/project/{project_id}", response_model=List[TaskStageResponse])
async def list_project_stages(project_id: UUID, db: AsyncSession = Depends(get_db)):
    """Stages of one project. 404 when the project has none."""
    result = await db.execute(
        select(TaskStage).where(TaskStage.project_id == project_id).order_by(TaskStage.created_at)
    )
    stages = result.scalars().all()
    if not stages:
        raise NotFound("No task stages found for this project")
    return stages


@stages_router.post("/", response_model=TaskStageResponse, status_code=status.HTTP_201_CREATED)
async def create_task_stage(
    body: TaskStageCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_or_404(db, Project, body.project_id)
    ensure_project_owner(user, project)

    stage = TaskStage(project_id=project.id, title=body.title)
    db.add(stage)
    await db.commit()
    logger.info("Task stage created", stage_id=str(stage.id), project_id=str(project.id))
    return await get_or_404(db, TaskStage, stage.id, "Task stage")


@stages_router.get("/{stage_id}", response_model=TaskStageResponse)
async def get_task_stage(stage_id: UUID, db: AsyncSession = Depends(get_db)):
    return await get_or_404(db, TaskStage, stage_id, "Task stage")


@stages_router.patch("/{stage_id}", response_model=TaskStageResponse)
async def update_task_stage(
    stage_id: UUID,
    body: TaskStageUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    stage = await get_or_404(db, TaskStage, stage_id, "Task stage")
    ensure_project_owner(user, stage.project)

    apply_changes(stage, collect_changes(body))
    await db.commit()
    return await get_or_404(db, TaskStage, stage_id, "Task stage")


@stages_router.delete("/{stage_id}", response_model=MessageResponse)
async def delete_task_stage(
    stage_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    stage = await get_or_404(db, TaskStage, stage_id, "Task stage")
    ensure_project_owner(user, stage.project)

    await delete_row(db, stage, "Task stage")
    logger.info("Task stage deleted", stage_id=str(stage_id))
    return MessageResponse(message="Task stage deleted successfully")
