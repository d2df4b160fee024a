"""Company, department and team API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from profusion.api.deps import get_current_user, require_admin
from profusion.core.database import get_db
from profusion.core.errors import DuplicateError, NotFound
from profusion.core.logging import get_logger
from profusion.models import Company, Department, Team
from profusion.schemas.common import MessageResponse, PaginatedResponse
from profusion.schemas.organization import (
    CompanyCreate, CompanyUpdate, CompanyResponse,
    DepartmentCreate, DepartmentUpdate, DepartmentResponse,
    TeamCreate, TeamUpdate, TeamResponse,
)
from profusion.services.crud import (
    apply_changes, collect_changes, commit_unique, delete_row, ensure_references,
    get_or_404, page_payload, paginate,
)

logger = get_logger(__name__)

companies_router = APIRouter(dependencies=[Depends(get_current_user)])
departments_router = APIRouter(dependencies=[Depends(get_current_user)])
teams_router = APIRouter(dependencies=[Depends(get_current_user)])


# ==================== Companies ====================

@companies_router.get("/", response_model=PaginatedResponse[CompanyResponse])
async def list_companies(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List companies."""
    rows, total = await paginate(db, select(Company).order_by(Company.name), page, page_size)
    return page_payload(rows, total, page, page_size)


@companies_router.post(
    "/",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_company(body: CompanyCreate, db: AsyncSession = Depends(get_db)):
    """Create a company."""
    company = Company(**body.model_dump())
    db.add(company)
    await commit_unique(db, DuplicateError("Company already exists"))
    logger.info("Company created", company_id=str(company.id))
    return await get_or_404(db, Company, company.id)


@companies_router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: UUID, db: AsyncSession = Depends(get_db)):
    return await get_or_404(db, Company, company_id)


@companies_router.patch("/{company_id}", response_model=CompanyResponse, dependencies=[Depends(require_admin)])
async def update_company(company_id: UUID, body: CompanyUpdate, db: AsyncSession = Depends(get_db)):
    company = await get_or_404(db, Company, company_id)
    apply_changes(company, collect_changes(body, non_nullable=("name", "is_headquarter")))
    await commit_unique(db, DuplicateError("Company already exists"))
    return await get_or_404(db, Company, company_id)


@companies_router.delete("/{company_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_company(company_id: UUID, db: AsyncSession = Depends(get_db)):
    """Delete a company. Fails while departments still belong to it."""
    company = await get_or_404(db, Company, company_id)
    await delete_row(db, company, "Company")
    logger.info("Company deleted", company_id=str(company_id))
    return MessageResponse(message="Company deleted successfully")


# ==================== Departments ====================

@departments_router.get("/", response_model=PaginatedResponse[DepartmentResponse])
async def list_departments(
    company_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List departments, optionally of one company."""
    query = select(Department).order_by(Department.name)
    if company_id:
        query = query.where(Department.company_id == company_id)
    rows, total = await paginate(db, query, page, page_size)
    return page_payload(rows, total, page, page_size)


@departments_router.post(
    "/",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_department(body: DepartmentCreate, db: AsyncSession = Depends(get_db)):
    await ensure_references(db, {"Company": (Company, body.company_id)})
    department = Department(**body.model_dump())
    db.add(department)
    await commit_unique(db, DuplicateError("Department already exists"))
    logger.info("Department created", department_id=str(department.id))
    return await get_or_404(db, Department, department.id)


@departments_router.get("/{department_id}", response_model=DepartmentResponse)
async def get_department(department_id: UUID, db: AsyncSession = Depends(get_db)):
    return await get_or_404(db, Department, department_id)


@departments_router.patch(
    "/{department_id}",
    response_model=DepartmentResponse,
    dependencies=[Depends(require_admin)],
)
async def update_department(department_id: UUID, body: DepartmentUpdate, db: AsyncSession = Depends(get_db)):
    department = await get_or_404(db, Department, department_id)
    changes = collect_changes(body, non_nullable=("name", "company_id"))
    await ensure_references(db, {"Company": (Company, changes.get("company_id"))})
    apply_changes(department, changes)
    await commit_unique(db, DuplicateError("Department name already exists"))
    return await get_or_404(db, Department, department_id)


@departments_router.delete(
    "/{department_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_department(department_id: UUID, db: AsyncSession = Depends(get_db)):
    department = await get_or_404(db, Department, department_id)
    await delete_row(db, department, "Department")
    logger.info("Department deleted", department_id=str(department_id))
    return MessageResponse(message="Department deleted successfully")


# ==================== Teams ====================

@teams_router.get("/", response_model=PaginatedResponse[TeamResponse])
async def list_teams(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    rows, total = await paginate(db, select(Team).order_by(Team.name), page, page_size)
    return page_payload(rows, total, page, page_size)


@teams_router.get("/department/{department_id}", response_model=List[TeamResponse])
async def list_department_teams(department_id: UUID, db: AsyncSession = Depends(get_db)):
    """Teams of one department. 404 when the department has none."""
    result = await db.execute(
        select(Team).where(Team.department_id == department_id).order_by(Team.name)
    )
    teams = result.scalars().all()
    if not teams:
        raise NotFound("No teams found for this department")
    return teams


@teams_router.post(
    "/",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_team(body: TeamCreate, db: AsyncSession = Depends(get_db)):
    await ensure_references(db, {"Department": (Department, body.department_id)})
    team = Team(**body.model_dump())
    db.add(team)
    await commit_unique(db, DuplicateError("Team already exists"))
    logger.info("Team created", team_id=str(team.id))
    return await get_or_404(db, Team, team.id)


@teams_router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team_id: UUID, db: AsyncSession = Depends(get_db)):
    return await get_or_404(db, Team, team_id)


@teams_router.patch("/{team_id}", response_model=TeamResponse, dependencies=[Depends(require_admin)])
async def update_team(team_id: UUID, body: TeamUpdate, db: AsyncSession = Depends(get_db)):
    team = await get_or_404(db, Team, team_id)
    changes = collect_changes(body, non_nullable=("name", "department_id"))
    await ensure_references(db, {"Department": (Department, changes.get("department_id"))})
    apply_changes(team, changes)
    await commit_unique(db, DuplicateError("Team name already exists"))
    return await get_or_404(db, Team, team_id)


@teams_router.delete("/{team_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_team(team_id: UUID, db: AsyncSession = Depends(get_db)):
    team = await get_or_404(db, Team, team_id)
    await delete_row(db, team, "Team")
    logger.info("Team deleted", team_id=str(team_id))
    return MessageResponse(message="Team deleted successfully")
