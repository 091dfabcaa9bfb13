from datetime import datetime
import re

from pydantic import BaseModel, Field, field_validator

from repoforge.config import get_settings

PATH_FORMAT = re.compile(r"^[a-zA-Z][a-zA-Z0-9_\-\.]*$")
PATH_FORMAT_MESSAGE = "only letters, digits & '_' '-' '.' allowed. Letter should be first"


class ProjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    path: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    default_branch: str = "master"


class ProjectCreate(ProjectBase):
    """Attributes accepted when creating a project."""
    private_flag: bool = True

    @field_validator("path", "code")
    @classmethod
    def check_format(cls, value: str) -> str:
        if not PATH_FORMAT.fullmatch(value):
            raise ValueError(PATH_FORMAT_MESSAGE)
        return value

    @field_validator("path")
    @classmethod
    def check_reserved(cls, value: str) -> str:
        reserved = get_settings().admin_repo_name
        if value == reserved:
            raise ValueError(f"like '{reserved}' is not allowed")
        return value


class ProjectRead(ProjectBase):
    id: str
    owner_id: str
    private_flag: bool
    created_at: datetime

    class Config:
        from_attributes = True
