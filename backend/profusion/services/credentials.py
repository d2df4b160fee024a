"""Credential store: registration and password verification."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from profusion.core.config import settings
from profusion.core.errors import (
    DuplicateEmail,
    DuplicateError,
    InvalidCredentials,
    PermissionDenied,
)
from profusion.core.logging import get_logger
from profusion.core.security import PasswordHasher, check_password_policy, password_hasher
from profusion.models import Company, Department, Role, Team, User
from profusion.services.crud import commit_unique, ensure_references, get_or_404

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """Persists users with a one-way salted password hash.

    Plain-text passwords never leave this class: they are checked against the
    policy, hashed, and discarded.
    """

    def __init__(self, db: AsyncSession, hasher: Optional[PasswordHasher] = None):
        self.db = db
        self.hasher = hasher or password_hasher

    async def register(
        self,
        name: str,
        email: str,
        raw_password: str,
        role_id: Optional[UUID] = None,
        company_id: Optional[UUID] = None,
        department_id: Optional[UUID] = None,
        team_id: Optional[UUID] = None,
        avatar: Optional[str] = None,
    ) -> User:
        """Create a user and return it.

        Raises:
            WeakPassword: password fails the policy (nothing is hashed).
            NotFound: a referenced role/company/department/team is absent.
            PermissionDenied: the admin role was requested by a non-first user.
            DuplicateEmail: the email is already registered.
        """
        check_password_policy(raw_password)

        user_count = await self.db.scalar(select(func.count()).select_from(User))
        role = await self._resolve_role(role_id, first_user=not user_count)
        await ensure_references(self.db, {
            "Company": (Company, company_id),
            "Department": (Department, department_id),
            "Team": (Team, team_id),
        })

        fields = dict(
            name=name,
            email=normalize_email(email),
            hashed_password=self.hasher.hash(raw_password),
            avatar=avatar,
            company_id=company_id,
            department_id=department_id,
            team_id=team_id,
        )
        bootstrap = not user_count and role.name == settings.ADMIN_ROLE_NAME
        user = User(role_id=role.id, bootstrap_admin=True if bootstrap else None, **fields)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not bootstrap or not await self._admin_bootstrapped():
                raise DuplicateEmail() from e

            # A concurrent registration claimed the administrator seat first
            if role_id is not None:
                raise PermissionDenied("Only an administrator can grant the admin role") from e
            logger.info("Administrator already bootstrapped, falling back to default role")
            role = await get_or_create_role(self.db, settings.DEFAULT_ROLE_NAME)
            user = User(role_id=role.id, **fields)
            self.db.add(user)
            await commit_unique(self.db, DuplicateEmail())

        logger.info("User registered", user_id=str(user.id), role=role.name)
        return await get_or_404(self.db, User, user.id)

    async def verify(self, email: str, raw_password: str) -> User:
        """Return the user for valid credentials, else raise InvalidCredentials."""
        user = await self.db.scalar(select(User).where(User.email == normalize_email(email)))

        if user is None:
            # Keep the unknown-email path as slow as a real check
            self.hasher.dummy_verify()
            logger.info("Login rejected")
            raise InvalidCredentials()

        if not self.hasher.verify(raw_password, user.hashed_password):
            logger.info("Login rejected", user_id=str(user.id))
            raise InvalidCredentials()

        return user

    async def change_password(self, user: User, raw_password: str) -> None:
        """Re-hash a new password onto ``user``; the caller commits."""
        check_password_policy(raw_password)
        user.hashed_password = self.hasher.hash(raw_password)

    async def _resolve_role(self, role_id: Optional[UUID], first_user: bool) -> Role:
        if role_id is not None:
            role = await get_or_404(self.db, Role, role_id)
            if role.name == settings.ADMIN_ROLE_NAME and not first_user:
                raise PermissionDenied("Only an administrator can grant the admin role")
            return role

        # The first account bootstraps the system as administrator
        name = settings.ADMIN_ROLE_NAME if first_user else settings.DEFAULT_ROLE_NAME
        return await get_or_create_role(self.db, name)

    async def _admin_bootstrapped(self) -> bool:
        claimed = await self.db.scalar(select(User.id).where(User.bootstrap_admin.is_(True)))
        return claimed is not None


async def get_or_create_role(db: AsyncSession, name: str) -> Role:
    role = await db.scalar(select(Role).where(Role.name == name))
    if role is not None:
        return role

    role = Role(name=name)
    db.add(role)
    try:
        await db.commit()
    except IntegrityError:
        # Created concurrently by another request
        await db.rollback()
        role = await db.scalar(select(Role).where(Role.name == name))
        if role is None:
            raise DuplicateError("Role already exists")
        return role

    logger.info("Role created on demand", role=name)
    return role
