"""
Integration tests for the full project lifecycle on a local git host.

These tests wire the provisioner to the real LocalGitGateway and the
bundled hooks, so every step touches the database and the filesystem:
create -> inspect -> re-provision -> destroy.
"""
import errno
from pathlib import Path

import pytest
import yaml
from dulwich.repo import Repo as DulwichRepo
from sqlalchemy import func, select

from repoforge.models import Project, UsersProject
from repoforge.services.gateway import local as local_module
from repoforge.services.gateway.local import REGISTRY_FILENAME
from repoforge.services.hooks import InstallStatus
from repoforge.services.introspection import RepositoryIntrospector
from repoforge.services.provisioner import GENERIC_REMOVE_ERROR, ProvisioningOutcome, RepositoryProvisioner
from repoforge.services.validation import validate_project

from tdd.shared.assertions import assert_bare_repo, assert_file_mode
from tdd.shared.factories import project_create_payload
from tdd.shared.git_helpers import commit_files, tag_commit


@pytest.fixture
def local_provisioner(local_gateway, hook_installer, resolver, hook_specs):
    return RepositoryProvisioner(
        gateway=local_gateway,
        hook_installer=hook_installer,
        resolver=resolver,
        hook_specs=hook_specs,
    )


@pytest.fixture
def demo_attrs():
    return project_create_payload(name="Demo", path="demo", code="demo")


class TestCreateOnLocalHost:
    """Creating a project end to end."""

    @pytest.mark.asyncio
    async def test_demo_project_is_provisioned(self, local_provisioner, resolver, db_session, owner, demo_attrs):
        """The repo exists at {base}/demo.git with an executable post-receive hook."""
        await validate_project(db_session, demo_attrs, owner)
        result = await local_provisioner.create_project(db_session, demo_attrs, owner)

        assert result.outcome == ProvisioningOutcome.SUCCESS
        location = resolver.resolve("demo")
        assert location.path == resolver.base_path / "demo.git"
        assert_bare_repo(location.path)
        assert_file_mode(location.hooks_dir / "post-receive", 0o775)
        assert (location.hooks_dir / "post-receive.secondary.d").is_dir()

    @pytest.mark.asyncio
    async def test_locations_are_derived_from_path(self, local_provisioner, resolver, db_session, owner, demo_attrs):
        """Clone URL and web URL follow the configured host."""
        await local_provisioner.create_project(db_session, demo_attrs, owner)
        location = resolver.resolve("demo")

        assert location.url_to_repo == "git@forge.test:demo.git"
        assert location.web_url == "http://forge.test/demo"

    @pytest.mark.asyncio
    async def test_head_points_at_default_branch(self, local_provisioner, resolver, db_session, owner):
        """HEAD of the new repo is the project's default branch."""
        attrs = project_create_payload(path="demo", default_branch="main")
        await local_provisioner.create_project(db_session, attrs, owner)

        repo = DulwichRepo(str(resolver.repo_path("demo")))
        try:
            assert repo.refs.read_ref(b"HEAD") == b"ref: refs/heads/main"
        finally:
            repo.close()

    @pytest.mark.asyncio
    async def test_registry_lists_owner_as_master(self, local_provisioner, local_gateway, resolver, db_session, owner, demo_attrs):
        """The access registry records the owner grant."""
        await local_provisioner.create_project(db_session, demo_attrs, owner)

        entry = local_gateway.registration("demo")
        assert entry == {"owner": owner.id, "private": True, "access": {owner.id: "MASTER"}}
        with open(resolver.base_path / REGISTRY_FILENAME) as f:
            assert "demo" in yaml.safe_load(f)

    @pytest.mark.asyncio
    async def test_new_repo_has_no_branches(self, local_provisioner, resolver, db_session, owner, demo_attrs):
        """An empty repo does not count as existing until something is pushed."""
        await local_provisioner.create_project(db_session, demo_attrs, owner)
        introspector = RepositoryIntrospector()
        location = resolver.resolve("demo")

        assert not introspector.exists(location)

        repo = DulwichRepo(str(location.path))
        try:
            first = commit_files(repo, {"README.md": b"# Demo\n"})
            tag_commit(repo, "v1.0", first)
        finally:
            repo.close()

        assert introspector.exists(location)
        assert introspector.tags(location) == ["v1.0"]

    @pytest.mark.asyncio
    async def test_reserved_path_is_denied(self, local_provisioner, resolver, db_session, owner):
        """The admin repository can never be provisioned as a project."""
        attrs = project_create_payload(path="gitolite-admin", code="admin")
        result = await local_provisioner.create_project(db_session, attrs, owner)

        assert result.git_error
        assert not resolver.repo_path("gitolite-admin").exists()
        assert await db_session.scalar(select(func.count()).select_from(Project)) == 0


class TestReadOnlyHost:
    """A read-only host denies every change."""

    @pytest.mark.asyncio
    async def test_create_denied_and_rolled_back(self, local_gateway, hook_installer, resolver, hook_specs, db_session, owner, demo_attrs):
        local_gateway.read_only = True
        provisioner = RepositoryProvisioner(local_gateway, hook_installer, resolver, hook_specs)

        result = await provisioner.create_project(db_session, demo_attrs, owner)

        assert result.outcome == ProvisioningOutcome.ACCESS_CONTROL_DENIED
        assert await db_session.scalar(select(func.count()).select_from(Project)) == 0
        assert await db_session.scalar(select(func.count()).select_from(UsersProject)) == 0
        assert not resolver.repo_path("demo").exists()


class TestReprovision:
    """Re-running provisioning on an existing project."""

    @pytest.mark.asyncio
    async def test_update_keeps_pushed_history(self, local_provisioner, resolver, db_session, owner, demo_attrs):
        """update_repository never reinitializes an existing repo."""
        created = await local_provisioner.create_project(db_session, demo_attrs, owner)
        repo = DulwichRepo(str(resolver.repo_path("demo")))
        try:
            commit_id = commit_files(repo, {"README.md": b"# Demo\n"})
        finally:
            repo.close()

        result = await local_provisioner.update_repository(created.project)

        assert result.ok
        assert [r.status for r in result.hook_results] == [InstallStatus.UNCHANGED]
        heads = RepositoryIntrospector().heads(resolver.resolve("demo"))
        assert [(h.name, h.commit_id) for h in heads] == [("master", commit_id.decode())]

    @pytest.mark.asyncio
    async def test_modified_hook_is_backed_up_and_restored(self, local_provisioner, resolver, db_session, owner, demo_attrs):
        created = await local_provisioner.create_project(db_session, demo_attrs, owner)
        hook_file = resolver.resolve("demo").hooks_dir / "post-receive"
        hook_file.write_bytes(b"#!/bin/sh\necho local edit\n")

        results = local_provisioner.ensure_hooks(created.project)

        assert results[0].status == InstallStatus.INSTALLED
        assert results[0].backup_path.read_bytes() == b"#!/bin/sh\necho local edit\n"
        assert hook_file.read_bytes() == local_provisioner.hook_specs[0].content


class TestDestroyOnLocalHost:
    """Removing a project's repository."""

    @pytest.mark.asyncio
    async def test_destroy_twice(self, local_provisioner, local_gateway, resolver, db_session, owner, demo_attrs):
        """The second destroy is a successful no-op."""
        created = await local_provisioner.create_project(db_session, demo_attrs, owner)

        first = await local_provisioner.destroy_project(created.project)
        second = await local_provisioner.destroy_project(created.project)

        assert first.ok and second.ok
        assert not resolver.repo_path("demo").exists()
        assert local_gateway.registration("demo") is None

    @pytest.mark.asyncio
    async def test_delete_project(self, local_provisioner, resolver, db_session, owner, demo_attrs):
        created = await local_provisioner.create_project(db_session, demo_attrs, owner)

        result = await local_provisioner.delete_project(db_session, created.project)

        assert result.ok
        assert await db_session.scalar(select(func.count()).select_from(Project)) == 0
        assert not resolver.repo_path("demo").exists()

    @pytest.mark.asyncio
    async def test_recreate_after_delete(self, local_provisioner, resolver, db_session, owner, demo_attrs):
        """The same path can be provisioned again after deletion."""
        created = await local_provisioner.create_project(db_session, demo_attrs, owner)
        await local_provisioner.delete_project(db_session, created.project)

        result = await local_provisioner.create_project(db_session, dict(demo_attrs), owner)

        assert result.saved
        assert_bare_repo(resolver.repo_path("demo"))

    @pytest.mark.asyncio
    async def test_os_error_is_not_leaked(self, local_provisioner, resolver, db_session, owner, demo_attrs, monkeypatch):
        """A disk error while removing is reported generically, without paths or errno."""
        created = await local_provisioner.create_project(db_session, demo_attrs, owner)
        repo_path = resolver.repo_path("demo")
        real_rmtree = local_module.shutil.rmtree

        def failing_rmtree(path, *args, **kwargs):
            if Path(path) == repo_path:
                raise OSError(errno.ENOSPC, "No space left on device", str(path))
            return real_rmtree(path, *args, **kwargs)

        monkeypatch.setattr(local_module.shutil, "rmtree", failing_rmtree)
        result = await local_provisioner.destroy_project(created.project)

        assert result.outcome == ProvisioningOutcome.PERSISTENCE_FAILURE
        assert result.errors == [GENERIC_REMOVE_ERROR]
        assert str(repo_path) not in " ".join(result.errors)
