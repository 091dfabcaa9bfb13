"""
Mock infrastructure for provisioning tests.

Provides a scriptable stand-in for the repository host so provisioning can
be exercised without the real gateway: it records every call, can be told
to fail or stall, and optionally creates the bare repo on disk.
"""

import asyncio
import shutil
from dataclasses import dataclass, field

from dulwich.repo import Repo as DulwichRepo

from repoforge.exceptions import GatewayError
from repoforge.models import Project
from repoforge.services.gateway import AccessControlGateway
from repoforge.services.repo_paths import RepoPathResolver


@dataclass
class GatewayCall:
    """One recorded gateway invocation."""
    operation: str
    path: str


@dataclass
class MockGateway(AccessControlGateway):
    """In-memory access-control gateway.

    Set `fail_with` to an exception instance to make every call raise it,
    or `delay` to stall calls (for timeout tests).
    """
    resolver: RepoPathResolver | None = None
    create_repos: bool = True
    fail_with: GatewayError | None = None
    destroy_fail_with: GatewayError | None = None
    delay: float = 0.0
    registrations: dict[str, dict] = field(default_factory=dict)
    calls: list[GatewayCall] = field(default_factory=list)

    async def materialize(self, path: str, project: Project) -> None:
        self.calls.append(GatewayCall("materialize", path))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with:
            raise self.fail_with

        self.registrations[path] = {"owner": project.owner_id, "private": project.private_flag}
        if self.resolver and self.create_repos:
            repo_path = self.resolver.repo_path(path)
            if not repo_path.exists():
                repo_path.mkdir(parents=True)
                DulwichRepo.init_bare(str(repo_path)).close()

    async def destroy(self, project: Project) -> None:
        self.calls.append(GatewayCall("destroy", project.path))
        failure = self.destroy_fail_with or self.fail_with
        if failure:
            raise failure

        self.registrations.pop(project.path, None)
        if self.resolver:
            repo_path = self.resolver.repo_path(project.path)
            if repo_path.exists():
                shutil.rmtree(repo_path)

    def calls_for(self, operation: str) -> list[GatewayCall]:
        return [call for call in self.calls if call.operation == operation]
