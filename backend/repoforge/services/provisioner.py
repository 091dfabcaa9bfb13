"""
Repository provisioner - creates and tears down the repo behind a project.

Project creation runs as one database transaction that also covers the
gateway call: the project row and the owner's grant are only committed
once the repository host has materialized the repository. A project row
without a repository is never visible to other sessions.

Hook installation happens after the commit and is best-effort; a failed
install is reported but never undoes the project.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import delete, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repoforge.exceptions import AccessDeniedError, GatewayError
from repoforge.models import Project, ProjectAccess, User, UsersProject
from repoforge.services.gateway import AccessControlGateway, get_gateway
from repoforge.services.hooks import HookInstaller, HookSpec, InstallResult, get_hook_installer, get_hook_specs
from repoforge.services.repo_paths import RepoPathResolver, get_resolver

logger = logging.getLogger(__name__)

GENERIC_SAVE_ERROR = "Cant save project. Please try again later"
GENERIC_REMOVE_ERROR = "Cant remove project repository. Please try again later"


class ProvisioningOutcome(str, Enum):
    SUCCESS = "success"
    ACCESS_CONTROL_DENIED = "access_control_denied"
    PERSISTENCE_FAILURE = "persistence_failure"


@dataclass
class ProvisioningResult:
    project: Project
    outcome: ProvisioningOutcome = ProvisioningOutcome.SUCCESS
    errors: list[str] = field(default_factory=list)
    hook_results: list[InstallResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome == ProvisioningOutcome.SUCCESS

    @property
    def git_error(self) -> bool:
        """The repository host refused the operation."""
        return self.outcome == ProvisioningOutcome.ACCESS_CONTROL_DENIED

    @property
    def saved(self) -> bool:
        return self.ok and inspect(self.project).persistent


class RepositoryProvisioner:
    def __init__(
        self,
        gateway: AccessControlGateway,
        hook_installer: HookInstaller,
        resolver: RepoPathResolver,
        hook_specs: list[HookSpec],
    ):
        self.gateway = gateway
        self.hook_installer = hook_installer
        self.resolver = resolver
        self.hook_specs = hook_specs

    async def create_project(self, session: AsyncSession, attrs: dict, owner: User) -> ProvisioningResult:
        """Create a project owned by `owner` together with its repository.

        Never raises: every failure is reported through the returned result.
        The project is always returned, persisted or not, for redisplay.
        """
        # A rollback earlier in this session expires the owner
        if "id" in inspect(owner).unloaded:
            await session.refresh(owner)

        project = Project(**attrs)
        project.owner = owner
        owner_id = owner.id
        result = ProvisioningResult(project=project)

        try:
            session.add(project)
            try:
                await session.flush()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.info(f"Project {project.path!r} rejected by the store: {e}")
                result.outcome = ProvisioningOutcome.PERSISTENCE_FAILURE
                result.errors.append(str(getattr(e, "orig", None) or e))
                return result

            # The host must know the owner before the repository is usable
            session.add(UsersProject(
                user_id=owner_id,
                project_id=project.id,
                project_access=ProjectAccess.MASTER.value,
            ))
            await session.flush()

            await self.gateway.materialize(project.path, project)
            await session.commit()
        except AccessDeniedError as e:
            await session.rollback()
            logger.warning(f"Repository host denied creating {project.path!r}: {e.detail}")
            result.outcome = ProvisioningOutcome.ACCESS_CONTROL_DENIED
            return result
        except Exception as e:
            await session.rollback()
            logger.error(f"Failed to create project {project.path!r}: {e}", exc_info=not isinstance(e, GatewayError))
            result.outcome = ProvisioningOutcome.PERSISTENCE_FAILURE
            result.errors.append(GENERIC_SAVE_ERROR)
            return result

        logger.info(f"Created project {project.path!r} owned by {owner_id}")
        result.hook_results = self.write_hooks(project)
        return result

    async def update_repository(self, project: Project) -> ProvisioningResult:
        """Re-register the repository (e.g. after access changes) and refresh hooks."""
        result = ProvisioningResult(project=project)
        try:
            await self.gateway.materialize(project.path, project)
        except AccessDeniedError as e:
            logger.warning(f"Repository host denied updating {project.path!r}: {e.detail}")
            result.outcome = ProvisioningOutcome.ACCESS_CONTROL_DENIED
            return result
        except GatewayError as e:
            logger.warning(f"Failed to update repository {project.path!r}: {e.detail}")
            result.outcome = ProvisioningOutcome.PERSISTENCE_FAILURE
            result.errors.append(GENERIC_SAVE_ERROR)
            return result

        result.hook_results = self.write_hooks(project)
        return result

    def write_hooks(self, project: Project) -> list[InstallResult]:
        """Install every hook if the repository exists on disk."""
        location = self.resolver.resolve(project.path)
        if not location.path.exists():
            return []

        results = self.hook_installer.install_all(location, self.hook_specs)
        for failed in (r for r in results if not r.ok):
            logger.warning(f"Hook {failed.hook} not installed for {project.path!r}: {failed.reason}")
        return results

    def ensure_hooks(self, project: Project) -> list[InstallResult]:
        """Retry point for repositories left without hooks (cheap when up to date)."""
        return self.write_hooks(project)

    async def destroy_project(self, project: Project) -> ProvisioningResult:
        """Remove the project's repository from the host. Repeating it is harmless."""
        result = ProvisioningResult(project=project)
        try:
            await self.gateway.destroy(project)
        except AccessDeniedError as e:
            logger.warning(f"Repository host denied removing {project.path!r}: {e.detail}")
            result.outcome = ProvisioningOutcome.ACCESS_CONTROL_DENIED
        except GatewayError as e:
            logger.warning(f"Failed to remove repository {project.path!r}: {e.detail}")
            result.outcome = ProvisioningOutcome.PERSISTENCE_FAILURE
            result.errors.append(GENERIC_REMOVE_ERROR)
        return result

    async def delete_project(self, session: AsyncSession, project: Project) -> ProvisioningResult:
        """Delete the project row and its grants, then its repository."""
        await session.execute(delete(UsersProject).where(UsersProject.project_id == project.id))
        await session.delete(project)
        await session.commit()
        logger.info(f"Deleted project {project.path!r}")
        return await self.destroy_project(project)


def get_provisioner() -> RepositoryProvisioner:
    return RepositoryProvisioner(
        gateway=get_gateway(),
        hook_installer=get_hook_installer(),
        resolver=get_resolver(),
        hook_specs=get_hook_specs(),
    )
