"""API routes module."""

from fastapi import APIRouter

from profusion.api.lookups import roles_router, task_statuses_router, task_approval_statuses_router
from profusion.api.organization import companies_router, departments_router, teams_router
from profusion.api.projects import router as projects_router, stages_router
from profusion.api.task_messages import router as task_messages_router
from profusion.api.task_permissions import router as task_permissions_router
from profusion.api.tasks import router as tasks_router
from profusion.api.users import router as users_router
from profusion.schemas.common import ErrorResponse

# Domain errors all render as ErrorResponse
router = APIRouter(
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409)},
)

# Include all route modules
router.include_router(users_router, prefix="/users", tags=["Users"])
router.include_router(roles_router, prefix="/roles", tags=["Roles"])
router.include_router(companies_router, prefix="/companies", tags=["Companies"])
router.include_router(departments_router, prefix="/departments", tags=["Departments"])
router.include_router(teams_router, prefix="/teams", tags=["Teams"])
router.include_router(projects_router, prefix="/projects", tags=["Projects"])
router.include_router(stages_router, prefix="/task-stages", tags=["Task Stages"])
router.include_router(task_statuses_router, prefix="/task-statuses", tags=["Task Statuses"])
router.include_router(
    task_approval_statuses_router, prefix="/task-approval-statuses", tags=["Task Approval Statuses"]
)
router.include_router(tasks_router, prefix="/tasks", tags=["Tasks"])
router.include_router(task_permissions_router, prefix="/task-permissions", tags=["Task Permissions"])
router.include_router(task_messages_router, prefix="/task-messages", tags=["Task Messages"])
