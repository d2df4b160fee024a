"""Company, department and team models - the organisational hierarchy."""

from sqlalchemy import Column, String, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from profusion.models.base import Base, UUIDMixin, TimestampMixin


class Company(Base, UUIDMixin, TimestampMixin):
    """Company model - top of the hierarchy."""

    __tablename__ = "companies"

    name = Column(String(255), nullable=False)
    is_headquarter = Column(Boolean, default=False, nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Company {self.name}>"


class Department(Base, UUIDMixin, TimestampMixin):
    """Department model - belongs to a company."""

    __tablename__ = "departments"

    name = Column(String(255), unique=True, nullable=False)
    company_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("companies.id"),
        nullable=False,
    )

    company = relationship("Company", lazy="selectin")

    def __repr__(self):
        return f"<Department {self.name}>"


class Team(Base, UUIDMixin, TimestampMixin):
    """Team model - belongs to a department."""

    __tablename__ = "teams"

    name = Column(String(255), unique=True, nullable=False)
    department_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("departments.id"),
        nullable=False,
        index=True,
    )

    department = relationship("Department", lazy="selectin")

    def __repr__(self):
        return f"<Team {self.name}>"
