"""
Project validation run before provisioning: uniqueness and owner quota.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from repoforge.exceptions import ProjectValidationError
from repoforge.models import Project, User

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ("name", "path", "code")


async def check_limit(session: AsyncSession, owner: User) -> str | None:
    """Return an error message if the owner may not create another project.

    Fail-closed: if the quota cannot be determined the check denies.
    """
    try:
        owned = await session.scalar(
            select(func.count()).select_from(Project).where(Project.owner_id == owner.id)
        )
        if not owner.can_create_project(owned or 0):
            return (
                f"Your own projects limit is {owner.projects_limit}! "
                "Please contact administrator to increase it"
            )
    except Exception as e:
        logger.warning(f"Project limit check failed for user {owner.id}: {e}")
        return "Cant check your ability to create project"
    return None


async def validate_project(session: AsyncSession, attrs: dict, owner: User | None) -> None:
    """Raise ProjectValidationError listing every problem with `attrs`."""
    messages = []

    if owner is None:
        raise ProjectValidationError(["Owner can't be blank"])

    for field in UNIQUE_FIELDS:
        value = attrs.get(field)
        if value is None:
            continue
        taken = await session.scalar(
            select(func.count()).select_from(Project).where(getattr(Project, field) == value)
        )
        if taken:
            messages.append(f"{field.capitalize()} has already been taken")

    limit_error = await check_limit(session, owner)
    if limit_error:
        messages.append(limit_error)

    if messages:
        raise ProjectValidationError(messages)
