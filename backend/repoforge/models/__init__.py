from repoforge.models.user import User
from repoforge.models.project import Project
from repoforge.models.users_project import UsersProject, ProjectAccess

__all__ = [
    "User",
    "Project",
    "UsersProject",
    "ProjectAccess",
]
