"""
Project attribute payloads.

These build the attribute dictionaries handed to the provisioner, the
same shape ProjectCreate.model_dump() produces.
"""
from typing import Any

from faker import Faker

from .base import generate_path_segment

fake = Faker()


def project_create_payload(
    name: str | None = None,
    path: str | None = None,
    code: str | None = None,
    description: str | None = None,
    private_flag: bool = True,
    default_branch: str = "master",
) -> dict[str, Any]:
    """Attributes for creating a project."""
    path = path or generate_path_segment()
    return {
        "name": name or fake.unique.word().capitalize() + "Project",
        "path": path,
        "code": code or path,
        "description": description if description is not None else fake.sentence(),
        "private_flag": private_flag,
        "default_branch": default_branch,
    }
