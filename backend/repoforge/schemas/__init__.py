from repoforge.schemas.project import ProjectCreate, ProjectRead, PATH_FORMAT

__all__ = [
    "ProjectCreate",
    "ProjectRead",
    "PATH_FORMAT",
]
