"""User model for authentication and organisation membership."""

from sqlalchemy import Column, Boolean, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from profusion.models.base import Base, UUIDMixin, TimestampMixin


class User(Base, UUIDMixin, TimestampMixin):
    """User model - identity record with a salted password hash."""

    __tablename__ = "users"

    name = Column(String(255), nullable=False)

    # Stored lower-cased; uniqueness is enforced by the database
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=True)

    # True only on the account that bootstrapped the system as administrator.
    # NULL elsewhere; the unique constraint admits a single such row.
    bootstrap_admin = Column(Boolean, unique=True, nullable=True)

    role_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("roles.id"),
        nullable=False,
    )

    # Organisation (informational grouping)
    company_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("companies.id", ondelete="SET NULL"),
        nullable=True,
    )
    department_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
    )
    team_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("teams.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    role = relationship("Role", lazy="selectin")
    company = relationship("Company", lazy="selectin")
    department = relationship("Department", lazy="selectin")
    team = relationship("Team", lazy="selectin")

    def __repr__(self):
        return f"<User {self.email}>"
