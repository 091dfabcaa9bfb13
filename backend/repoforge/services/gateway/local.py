"""
Local git host - bare repos on shared storage plus an access registry.

The registry ({base_path}/.access.yml) plays the role of a gitolite
configuration: one entry per repository naming its owner, the users with
access and their level. Blocking work runs in a worker thread bounded by
the configured timeout. A call that times out is not cancelled: its thread may
still finish afterwards and leave a repository and registry entry for a
project that was rolled back. destroy() removes such leftovers.
"""

import asyncio
import logging
import os
import shutil
import tempfile
import threading
import weakref
from pathlib import Path

import yaml
from dulwich.errors import NotGitRepository
from dulwich.repo import Repo as DulwichRepo

from repoforge.config import Settings, get_settings
from repoforge.exceptions import AccessDeniedError, GatewayError, GatewayUnavailableError
from repoforge.models import Project, ProjectAccess
from repoforge.services.gateway.base import AccessControlGateway
from repoforge.services.repo_paths import RepoPathResolver

logger = logging.getLogger(__name__)

REGISTRY_FILENAME = ".access.yml"


class LocalGitGateway(AccessControlGateway):
    """Gateway backed by dulwich bare repos and a YAML access registry."""

    def __init__(
        self,
        resolver: RepoPathResolver,
        timeout: float = 30.0,
        admin_repo_name: str = "gitolite-admin",
        read_only: bool = False,
    ):
        self.resolver = resolver
        self.timeout = timeout
        self.admin_repo_name = admin_repo_name
        self.read_only = read_only
        self.registry_path = resolver.base_path / REGISTRY_FILENAME
        self._registry_lock = threading.Lock()
        # Entries vanish once no call holds the lock
        self._repo_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._repo_locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocalGitGateway":
        return cls(
            resolver=RepoPathResolver.from_settings(settings),
            timeout=settings.gateway_timeout,
            admin_repo_name=settings.admin_repo_name,
            read_only=settings.gateway_read_only,
        )

    async def materialize(self, path: str, project: Project) -> None:
        entry = {
            "owner": project.owner_id,
            "private": bool(project.private_flag),
            "access": {project.owner_id: ProjectAccess.MASTER.name},
        }
        default_branch = project.default_branch or "master"
        await self._run(f"materialize {path}", self._materialize_sync, path, entry, default_branch)
        logger.info(f"Materialized repository {path} for owner {project.owner_id}")

    async def destroy(self, project: Project) -> None:
        await self._run(f"destroy {project.path}", self._destroy_sync, project.path)
        logger.info(f"Destroyed repository {project.path}")

    def registration(self, path: str) -> dict | None:
        """Registry entry for a repository, or None when not registered."""
        with self._registry_lock:
            return self._read_registry().get(path)

    async def _run(self, operation: str, func, *args) -> None:
        try:
            await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Gateway {operation} timed out after {self.timeout}s")
            raise GatewayUnavailableError("timeout")
        except GatewayError:
            raise
        except PermissionError as e:
            raise AccessDeniedError(str(e))
        except Exception as e:
            logger.error(f"Gateway {operation} failed: {e}", exc_info=True)
            raise GatewayUnavailableError(str(e))

    def _check_writable(self, path: str) -> None:
        if self.read_only:
            raise AccessDeniedError("Repository host is read-only")
        if path == self.admin_repo_name:
            raise AccessDeniedError(f"Repository '{path}' is reserved")

    def _repo_lock(self, path: str) -> threading.Lock:
        with self._repo_locks_guard:
            return self._repo_locks.setdefault(path, threading.Lock())

    def _materialize_sync(self, path: str, entry: dict, default_branch: str) -> None:
        self._check_writable(path)
        with self._repo_lock(path):
            self._ensure_bare_repo(path, default_branch)
        with self._registry_lock:
            registry = self._read_registry()
            if registry.get(path) != entry:
                registry[path] = entry
                self._write_registry(registry)

    def _destroy_sync(self, path: str) -> None:
        self._check_writable(path)
        with self._repo_lock(path):
            repo_path = self.resolver.repo_path(path)
            if repo_path.exists():
                shutil.rmtree(repo_path)
        with self._registry_lock:
            registry = self._read_registry()
            if path in registry:
                del registry[path]
                self._write_registry(registry)

    def _ensure_bare_repo(self, path: str, default_branch: str) -> None:
        repo_path = self.resolver.repo_path(path)
        if repo_path.exists():
            try:
                DulwichRepo(str(repo_path)).close()
                return
            except NotGitRepository:
                if any(repo_path.iterdir()):
                    raise GatewayUnavailableError(f"{repo_path} exists and is not a git repository")
        else:
            repo_path.mkdir(parents=True)

        repo = DulwichRepo.init_bare(str(repo_path))
        try:
            repo.refs.set_symbolic_ref(b"HEAD", f"refs/heads/{default_branch}".encode())
        finally:
            repo.close()

    def _read_registry(self) -> dict:
        if not self.registry_path.exists():
            return {}
        with open(self.registry_path) as f:
            return yaml.safe_load(f) or {}

    def _write_registry(self, registry: dict) -> None:
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.registry_path.parent, prefix=".access-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(registry, f, default_flow_style=False, sort_keys=True)
            os.replace(tmp_name, self.registry_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def get_gateway() -> LocalGitGateway:
    return LocalGitGateway.from_settings(get_settings())
