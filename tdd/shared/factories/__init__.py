# Test data factories for creating model instances

from .base import BaseFactory, generate_path_segment, generate_timestamp, generate_uuid
from .models import (
    ProjectFactory,
    UserFactory,
    UsersProjectFactory,
)
from .payloads import project_create_payload

__all__ = [
    # Base utilities
    "BaseFactory",
    "generate_uuid",
    "generate_timestamp",
    "generate_path_segment",
    # Model factories
    "UserFactory",
    "ProjectFactory",
    "UsersProjectFactory",
    # Payloads
    "project_create_payload",
]
