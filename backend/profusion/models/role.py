"""Role model - named permission tier referenced by users."""

from sqlalchemy import Column, String

from profusion.models.base import Base, UUIDMixin, TimestampMixin


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model (e.g. admin, member)."""

    __tablename__ = "roles"

    name = Column(String(100), unique=True, nullable=False)

    def __repr__(self):
        return f"<Role {self.name}>"
