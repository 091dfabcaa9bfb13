"""
Model factories for creating test data.

These factories build SQLAlchemy model instances for use in tests.
They can be used directly in unit tests or added to database sessions
in integration tests.
"""
import sys
from datetime import datetime
from pathlib import Path

import factory
from faker import Faker

# Add backend to path for imports
backend_path = Path(__file__).parent.parent.parent.parent / "backend"
sys.path.insert(0, str(backend_path))

from repoforge.models import Project, ProjectAccess, User, UsersProject

from .base import BaseFactory, generate_path_segment, generate_uuid

fake = Faker()


class UserFactory(BaseFactory):
    """Factory for creating User instances."""

    class Meta:
        model = User

    id = factory.LazyFunction(generate_uuid)
    username = factory.LazyFunction(lambda: fake.unique.user_name())
    email = factory.LazyFunction(lambda: fake.unique.email())
    projects_limit = 10
    is_admin = False
    created_at = factory.LazyFunction(datetime.utcnow)

    class Params:
        """Parameters for creating users in specific states."""

        at_limit = factory.Trait(
            projects_limit=0,
        )
        admin = factory.Trait(
            is_admin=True,
            projects_limit=1000,
        )


class ProjectFactory(BaseFactory):
    """Factory for creating Project instances."""

    class Meta:
        model = Project

    id = factory.LazyFunction(generate_uuid)
    name = factory.LazyFunction(lambda: fake.unique.word().capitalize() + "Project")
    path = factory.LazyFunction(generate_path_segment)
    code = factory.LazyAttribute(lambda o: o.path)
    description = factory.LazyFunction(lambda: fake.sentence())
    owner_id = factory.LazyFunction(generate_uuid)
    private_flag = True
    default_branch = "master"
    issues_enabled = True
    wall_enabled = True
    merge_requests_enabled = True
    wiki_enabled = True
    created_at = factory.LazyFunction(datetime.utcnow)
    updated_at = factory.LazyFunction(datetime.utcnow)

    class Params:
        """Parameters for creating projects in specific states."""

        public = factory.Trait(
            private_flag=False,
        )


class UsersProjectFactory(BaseFactory):
    """Factory for creating UsersProject (access grant) instances."""

    class Meta:
        model = UsersProject

    id = factory.LazyFunction(generate_uuid)
    user_id = factory.LazyFunction(generate_uuid)
    project_id = factory.LazyFunction(generate_uuid)
    project_access = ProjectAccess.DEVELOPER.value
    created_at = factory.LazyFunction(datetime.utcnow)

    class Params:
        master = factory.Trait(
            project_access=ProjectAccess.MASTER.value,
        )
