"""User registration, login and management endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from profusion.api.deps import (
    get_credential_store,
    get_current_user,
    get_token_service,
    require_admin,
)
from profusion.core.database import get_db
from profusion.core.errors import DuplicateEmail, PermissionDenied
from profusion.core.logging import get_logger
from profusion.models import Company, Department, Role, Team, User
from profusion.schemas.common import MessageResponse, PaginatedResponse
from profusion.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserResponse,
    UserUpdate,
)
from profusion.services.credentials import CredentialStore, normalize_email
from profusion.services.crud import (
    apply_changes, collect_changes, commit_unique, delete_row, ensure_references,
    get_or_404, page_payload, paginate,
)
from profusion.services.permissions import is_admin
from profusion.services.tokens import TokenService

logger = get_logger(__name__)
router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    store: CredentialStore = Depends(get_credential_store),
):
    """Register a new account."""
    return await store.register(
        name=body.name,
        email=body.email,
        raw_password=body.password,
        role_id=body.role_id,
        company_id=body.company_id,
        department_id=body.department_id,
        team_id=body.team_id,
        avatar=body.avatar,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    """Exchange email and password for a bearer token."""
    user = await store.verify(body.email, body.password)
    token = tokens.issue(user.id, user.role_id)
    logger.info("User logged in", user_id=str(user.id))
    return LoginResponse(
        token=token,
        expires_in=int(tokens.ttl.total_seconds()),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def read_me(user: User = Depends(get_current_user)):
    return user


@router.get("/", response_model=PaginatedResponse[UserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List users (never includes password hashes)."""
    rows, total = await paginate(db, select(User).order_by(User.name), page, page_size)
    return page_payload(rows, total, page, page_size)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(db, User, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    body: UserUpdate,
    current: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
    db: AsyncSession = Depends(get_db),
):
    """Update a profile. Users edit themselves; admins edit anyone.

    A new password is re-hashed. Changing the role requires the admin role.
    """
    if current.id != user_id and not is_admin(current):
        raise PermissionDenied("You can only update your own profile")

    user = await get_or_404(db, User, user_id)
    changes = collect_changes(body, non_nullable=("name", "email", "password", "role_id"))

    if "role_id" in changes and changes["role_id"] != user.role_id and not is_admin(current):
        raise PermissionDenied("Only an administrator can change roles")

    await ensure_references(db, {
        "Role": (Role, changes.get("role_id")),
        "Company": (Company, changes.get("company_id")),
        "Department": (Department, changes.get("department_id")),
        "Team": (Team, changes.get("team_id")),
    })

    password = changes.pop("password", None)
    if password is not None:
        await store.change_password(user, password)
    if "email" in changes:
        changes["email"] = normalize_email(changes["email"])

    apply_changes(user, changes)
    await commit_unique(db, DuplicateEmail())

    logger.info(
        "User updated",
        user_id=str(user_id),
        by=str(current.id),
        fields=sorted(changes) + (["password"] if password is not None else []),
    )
    return await get_or_404(db, User, user_id)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete an account (administrators only)."""
    user = await get_or_404(db, User, user_id)
    await delete_row(db, user, "User")
    logger.info("User deleted", user_id=str(user_id), by=str(admin.id))
    return MessageResponse(message="User deleted successfully")
