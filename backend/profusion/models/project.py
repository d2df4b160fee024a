"""Project model and its task stages."""

from sqlalchemy import Column, String, Text, Date, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from profusion.models.base import Base, UUIDMixin, TimestampMixin


class Project(Base, UUIDMixin, TimestampMixin):
    """Project model - container for task stages and tasks."""

    __tablename__ = "projects"

    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    created_by = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
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

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Relationships
    creator = relationship("User", lazy="selectin")
    company = relationship("Company", lazy="selectin")
    department = relationship("Department", lazy="selectin")
    team = relationship("Team", lazy="selectin")

    def __repr__(self):
        return f"<Project {self.name}>"


class TaskStage(Base, UUIDMixin, TimestampMixin):
    """TaskStage model - a column of a project's board."""

    __tablename__ = "task_stages"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=True)

    project = relationship("Project", lazy="selectin")

    def __repr__(self):
        return f"<TaskStage {self.title}>"
