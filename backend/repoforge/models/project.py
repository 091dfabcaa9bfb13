from datetime import datetime
from uuid import uuid4

from sqlalchemy import String, DateTime, Text, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repoforge.config import get_settings
from repoforge.database import Base


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # Path segment of the bare repo: {base_path}/{path}.git
    path: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    code: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    private_flag: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    default_branch: Mapped[str] = mapped_column(String(255), default="master", nullable=False)
    issues_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    wall_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    merge_requests_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    wiki_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner: Mapped["User"] = relationship("User")
    users_projects: Mapped[list["UsersProject"]] = relationship(
        "UsersProject", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_public(self) -> bool:
        return not self.private_flag

    @property
    def is_private(self) -> bool:
        return bool(self.private_flag)

    @property
    def to_param(self) -> str:
        """Projects are addressed by their code in URLs."""
        return self.code

    @property
    def web_url(self) -> str:
        return "/".join([get_settings().host_url.rstrip("/"), self.code])
