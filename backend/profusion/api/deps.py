"""Request dependencies: the auth gate and the authorization policy."""

from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from profusion.core.database import get_db
from profusion.core.errors import InvalidToken, NotFound, PermissionDenied, Unauthenticated
from profusion.core.logging import get_logger
from profusion.core.security import PasswordHasher, password_hasher
from profusion.models import PermissionLevel, Task, User
from profusion.services.credentials import CredentialStore
from profusion.services.crud import get_or_404
from profusion.services.permissions import PermissionService, is_admin
from profusion.services.tokens import TokenClaims, TokenError, TokenService, token_service

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service() -> TokenService:
    return token_service


def get_password_hasher() -> PasswordHasher:
    return password_hasher


def get_credential_store(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> CredentialStore:
    return CredentialStore(db, hasher)


def get_permission_service(db: AsyncSession = Depends(get_db)) -> PermissionService:
    return PermissionService(db)


async def get_current_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """Verify the bearer token and attach its claims to ``request.state``."""
    if credentials is None:
        raise Unauthenticated()

    try:
        claims = tokens.verify(credentials.credentials)
    except TokenError as e:
        # Expired and forged tokens look the same to the caller
        logger.info("Bearer token rejected", reason=type(e).__name__, path=request.url.path)
        raise InvalidToken() from e

    request.state.claims = claims
    return claims


async def get_current_user(
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> User:
    """The account named by the token. Deleted accounts are rejected."""
    try:
        return await get_or_404(db, User, claims.user_id)
    except NotFound:
        raise InvalidToken()


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise PermissionDenied("Administrator role required")
    return user


def require_task_permission(level: PermissionLevel):
    """Dependency factory: load ``{task_id}`` and check ``level`` on it."""

    async def dependency(
        task_id: UUID,
        user: User = Depends(get_current_user),
        permissions: PermissionService = Depends(get_permission_service),
    ) -> Task:
        task = await get_or_404(permissions.db, Task, task_id)
        await permissions.ensure(user, task, level)
        return task

    return dependency


async def ensure_task_access(
    permissions: PermissionService,
    user: User,
    task_id: UUID,
    level: PermissionLevel,
) -> Task:
    """Same check as ``require_task_permission`` for ids taken from a body."""
    task = await get_or_404(permissions.db, Task, task_id)
    await permissions.ensure(user, task, level)
    return task
