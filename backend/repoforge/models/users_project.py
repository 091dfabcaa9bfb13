from datetime import datetime
from enum import IntEnum
from uuid import uuid4

from sqlalchemy import String, DateTime, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repoforge.database import Base


class ProjectAccess(IntEnum):
    GUEST = 10
    REPORTER = 20
    DEVELOPER = 30
    MASTER = 40  # Administrative access, granted to the owner


class UsersProject(Base):
    """Access grant of a user on a project."""
    __tablename__ = "users_projects"
    __table_args__ = (UniqueConstraint("user_id", "project_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    project_access: Mapped[int] = mapped_column(Integer, default=ProjectAccess.GUEST.value, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user: Mapped["User"] = relationship("User")

    @staticmethod
    def access_roles() -> dict[str, int]:
        return {access.name.capitalize(): access.value for access in ProjectAccess}
